"""
======================================================
SQL generation package for the fluent query builder.
======================================================

This package renders SQL text. Nothing in it opens a connection; the ``db``
package executes what is produced here.

The package follows a clear organization:
    - literals.py: Inline literal and identifier quoting
    - conditions.py: WHERE condition model (AND/OR nodes, groups, ORDER BY specs)
    - fields.py: Column definitions (FieldSpec)
    - ddl.py: CREATE/DROP TABLE, ALTER TABLE column statements, CREATE DATABASE
    - dml.py: INSERT/UPDATE/DELETE
    - query_builder.py: SELECT assembly and catalog queries (_builder suffix)

Example:
    >>> from sql.conditions import Conditions
    >>> from sql.query_builder import select_builder, select_clause_builder
    >>>
    >>> where = Conditions().where('age', '>', 18).render()
    >>> select_builder(select_clause_builder('users'), where=where)
    'SELECT * FROM "users" WHERE age > 18'
"""

__version__ = "1.0.0"
__all__ = [
    # Literals
    'render_literal', 'quote_identifier',
    # Conditions
    'Conditions', 'ConditionNode', 'OrderSpec',
    'QueryBuilderError', 'InvalidOrderDirectionError',
    # Fields
    'FieldSpec', 'ForeignKey', 'FieldSpecError',
    # DDL functions
    'create_table_sql', 'drop_table_sql', 'add_column_sql', 'drop_column_sql',
    # DML functions
    'insert_sql', 'update_sql', 'delete_sql',
    # Query builders
    'select_builder', 'select_clause_builder', 'aggregate_clause_builder', 'join_builder',
]

from .conditions import (
    ConditionNode,
    Conditions,
    InvalidOrderDirectionError,
    OrderSpec,
    QueryBuilderError,
)
from .ddl import add_column_sql, create_table_sql, drop_column_sql, drop_table_sql
from .dml import delete_sql, insert_sql, update_sql
from .fields import FieldSpec, FieldSpecError, ForeignKey
from .literals import quote_identifier, render_literal
from .query_builder import (
    aggregate_clause_builder,
    join_builder,
    select_builder,
    select_clause_builder,
)
