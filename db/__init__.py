"""
=============================================
Database access package (fluent builder).
=============================================

Executes the SQL produced by the ``sql`` package against PostgreSQL.

Modules:
    provider: Database, the shared connection handle and raw query entry point
    executor: StatementExecutor, execution with one-shot database creation
    table_query: TableQuery, the per-table fluent builder
    columns: Columns, catalog introspection and ALTER TABLE migrations

Example:
    >>> from db import Database
    >>>
    >>> db = Database()
    >>> db.table('users').create([
    ...     {'name': 'id', 'type': 'INT', 'options': ['primary', 'autoincrement']},
    ...     {'name': 'name', 'type': 'VARCHAR', 'length': 255},
    ...     {'name': 'age', 'type': 'INT'},
    ... ])
    >>> db.table('users').insert([{'name': 'Alice', 'age': 28}])
    >>> db.table('users').where('age', '>', 18).get()
"""

__version__ = "0.1.0"
__all__ = [
    'Database',
    'StatementExecutor',
    'TableQuery',
    'Columns',
    'ColumnInfo',
    'QueryBuilderError',
    'InvalidOrderDirectionError',
    'InvalidPayloadError',
    'MissingWhereClauseError',
]

from .columns import ColumnInfo, Columns
from .executor import StatementExecutor
from .provider import Database
from .table_query import (
    InvalidOrderDirectionError,
    InvalidPayloadError,
    MissingWhereClauseError,
    QueryBuilderError,
    TableQuery,
)
