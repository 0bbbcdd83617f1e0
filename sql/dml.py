"""
===========================================
Data Manipulation Language (DML) Utilities.
===========================================

This module renders INSERT, UPDATE and DELETE statements with values inlined
as SQL literals (see ``sql.literals``). Every statement ends with
``RETURNING *`` so callers get the affected rows back.

Functions:
- insert_sql: INSERT of one row, columns taken from the row's keys in order
- update_sql: UPDATE ... SET ... WHERE ...
- delete_sql: DELETE ... WHERE ...

Usage:
    from sql.dml import insert_sql, update_sql

    insert_sql('users', {'name': 'Alice', 'age': 28})
    # INSERT INTO "users" ("name", "age") VALUES ('Alice', 28) RETURNING *

    update_sql('users', {'age': 29}, "name = 'Alice'")
    # UPDATE "users" SET "age" = 29 WHERE name = 'Alice' RETURNING *
"""

from typing import Any, Mapping

from .literals import quote_identifier, render_literal


def insert_sql(table: str, row: Mapping[str, Any], returning: bool = True) -> str:
    """
    Generate INSERT statement for a single row.

    Args:
        table: Table name
        row: Column -> value mapping; iteration order is column order
        returning: Add RETURNING * clause

    Returns:
        SQL INSERT statement
    """
    column_list = ", ".join(quote_identifier(column) for column in row)
    value_list = ", ".join(render_literal(value) for value in row.values())

    sql = f"INSERT INTO {quote_identifier(table)} ({column_list}) VALUES ({value_list})"

    if returning:
        sql += " RETURNING *"

    return sql


def update_sql(table: str, data: Mapping[str, Any], where_clause: str, returning: bool = True) -> str:
    """
    Generate UPDATE statement.

    Args:
        table: Table name
        data: Column -> new value mapping
        where_clause: Rendered WHERE body (without the keyword)
        returning: Add RETURNING * clause

    Returns:
        SQL UPDATE statement
    """
    assignments = ", ".join(
        f"{quote_identifier(column)} = {render_literal(value)}"
        for column, value in data.items()
    )

    sql = f"UPDATE {quote_identifier(table)} SET {assignments} WHERE {where_clause}"

    if returning:
        sql += " RETURNING *"

    return sql


def delete_sql(table: str, where_clause: str, returning: bool = True) -> str:
    """
    Generate DELETE statement.

    Args:
        table: Table name
        where_clause: Rendered WHERE body (without the keyword)
        returning: Add RETURNING * clause

    Returns:
        SQL DELETE statement
    """
    sql = f"DELETE FROM {quote_identifier(table)} WHERE {where_clause}"

    if returning:
        sql += " RETURNING *"

    return sql
