"""
==============================
Fluent table query builder.
==============================

``TableQuery`` accumulates the parts of one statement against one table
through chained calls and renders them when a terminal method runs. Chained
calls only mutate state; terminal methods (``get``, ``first``, ``find``,
``insert``, ``update``, ``delete``, ``create``, ``drop``) render SQL and run
it through the database's ``StatementExecutor``.

A builder represents one statement. ``find`` appends a condition before it
runs, so do not reuse a builder after calling a terminal method.

Warning:
    Values are inlined as SQL literals with naive quoting (see
    ``sql.literals``). Never build queries from untrusted input.

    ORDER BY renders after LIMIT / OFFSET, which PostgreSQL rejects. Use
    either ``order_by`` or ``limit`` / ``page`` on one query, not both.

Example:
    >>> from db import Database
    >>>
    >>> db = Database()
    >>> adults = (
    ...     db.table('users')
    ...     .select(['id', 'name'])
    ...     .where('age', '>', 18)
    ...     .or_where('role', '=', 'admin')
    ...     .order_by('name')
    ...     .get()
    ... )
    >>> second_page = db.table('users').limit(10).page(2).get()
"""

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Sequence

from db.columns import Columns
from sql.conditions import (
    UNSET,
    Conditions,
    InvalidOrderDirectionError,
    OrderSpec,
    QueryBuilderError,
)
from sql.ddl import create_table_sql, drop_table_sql
from sql.dml import delete_sql, insert_sql, update_sql
from sql.fields import FieldSpecError, coerce_fields
from sql.query_builder import (
    aggregate_clause_builder,
    join_builder,
    select_builder,
    select_clause_builder,
)
from utils.database_utils import DatabaseConnectionError

if TYPE_CHECKING:
    from db.provider import Database

logger = logging.getLogger(__name__)

Row = Dict[str, Any]

__all__ = [
    'TableQuery',
    'QueryBuilderError',
    'InvalidOrderDirectionError',
    'InvalidPayloadError',
    'MissingWhereClauseError',
]


class InvalidPayloadError(QueryBuilderError, ValueError):
    """Raised when insert/update receive data of the wrong shape."""
    pass


class MissingWhereClauseError(QueryBuilderError):
    """Raised when update or delete would touch every row of the table."""
    pass


class TableQuery:
    """Builder for statements against a single table.

    Attributes:
        table_name: Table the statement targets
        database: Provider used by terminal methods; None for a detached builder
        conditions: WHERE predicates
        base_clause: Current projection or aggregate clause
    """

    def __init__(self, table_name: str, database: Optional['Database'] = None):
        self.table_name = table_name
        self.database = database

        self.base_clause = select_clause_builder(table_name)
        self.conditions = Conditions()
        self.joins: List[str] = []
        self.orders: List[OrderSpec] = []
        self.groups: List[str] = []
        self.is_distinct = False
        self.limit_value: Optional[int] = None
        self.page_value: Optional[int] = None

    def __repr__(self) -> str:
        return f"<TableQuery {self.table_name!r}: {self.build_query()}>"

    # ------------------------------------------------------------------
    # Projection
    # ------------------------------------------------------------------

    def select(self, fields: Optional[Sequence[str]] = None) -> 'TableQuery':
        """Project the given column expressions. No fields keeps the current projection."""
        if fields:
            self.base_clause = select_clause_builder(self.table_name, fields, self.is_distinct)
        return self

    def distinct(self) -> 'TableQuery':
        """Switch the current projection to SELECT DISTINCT."""
        self.is_distinct = True
        if self.base_clause.startswith('SELECT ') and not self.base_clause.startswith('SELECT DISTINCT '):
            self.base_clause = 'SELECT DISTINCT ' + self.base_clause[len('SELECT '):]
        return self

    def count(self, column: str = '*') -> 'TableQuery':
        self.base_clause = aggregate_clause_builder('COUNT', column, self.table_name)
        return self

    def sum(self, column: str) -> 'TableQuery':
        self.base_clause = aggregate_clause_builder('SUM', column, self.table_name)
        return self

    def avg(self, column: str) -> 'TableQuery':
        self.base_clause = aggregate_clause_builder('AVG', column, self.table_name)
        return self

    def max(self, column: str) -> 'TableQuery':
        self.base_clause = aggregate_clause_builder('MAX', column, self.table_name)
        return self

    def min(self, column: str) -> 'TableQuery':
        self.base_clause = aggregate_clause_builder('MIN', column, self.table_name)
        return self

    # ------------------------------------------------------------------
    # Conditions
    # ------------------------------------------------------------------

    def where(self, column: str, operator: Any = None, value: Any = UNSET) -> 'TableQuery':
        """Add ``column operator value``; ``where(column, value)`` means equality."""
        self.conditions.where(column, operator, value)
        return self

    def or_where(self, column: str, operator: Any = None, value: Any = UNSET) -> 'TableQuery':
        self.conditions.or_where(column, operator, value)
        return self

    def where_group(self, callback: Callable[[Conditions], Any]) -> 'TableQuery':
        """Add a parenthesized group; ``callback`` receives a ``Conditions`` to fill."""
        self.conditions.where_group(callback)
        return self

    def where_between(self, column: str, bounds: Sequence[Any]) -> 'TableQuery':
        self.conditions.where_between(column, bounds)
        return self

    def where_in(self, column: str, values: Sequence[Any]) -> 'TableQuery':
        self.conditions.where_in(column, values)
        return self

    def where_null(self, column: str) -> 'TableQuery':
        self.conditions.where_null(column)
        return self

    def where_not_null(self, column: str) -> 'TableQuery':
        self.conditions.where_not_null(column)
        return self

    def and_(self) -> 'TableQuery':
        self.conditions.and_()
        return self

    def or_(self) -> 'TableQuery':
        self.conditions.or_()
        return self

    # ------------------------------------------------------------------
    # Joins, ordering, grouping, pagination
    # ------------------------------------------------------------------

    def join(self, table: str, column1: str, operator: str, column2: str) -> 'TableQuery':
        self.joins.append(join_builder('JOIN', table, column1, operator, column2))
        return self

    def left_join(self, table: str, column1: str, operator: str, column2: str) -> 'TableQuery':
        self.joins.append(join_builder('LEFT JOIN', table, column1, operator, column2))
        return self

    def right_join(self, table: str, column1: str, operator: str, column2: str) -> 'TableQuery':
        self.joins.append(join_builder('RIGHT JOIN', table, column1, operator, column2))
        return self

    def order_by(self, column: str, direction: str = 'ASC') -> 'TableQuery':
        """Add an ORDER BY entry.

        Raises:
            InvalidOrderDirectionError: If direction is not ASC or DESC
        """
        self.orders.append(OrderSpec.create(column, direction))
        return self

    def group_by(self, column: str) -> 'TableQuery':
        self.groups.append(column)
        return self

    def limit(self, number: int) -> 'TableQuery':
        self.limit_value = number
        return self

    def page(self, number: int) -> 'TableQuery':
        """Select a 1-based page; only takes effect together with ``limit``."""
        self.page_value = number
        return self

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def build_conditions(self) -> str:
        """Render the WHERE body (without the WHERE keyword)."""
        return self.conditions.render()

    def build_query(self) -> str:
        """Render the full SELECT statement for the current state."""
        return select_builder(
            self.base_clause,
            joins=self.joins,
            where=self.build_conditions(),
            group_by=self.groups,
            limit=self.limit_value,
            page=self.page_value,
            order_by=[order.render() for order in self.orders]
        )

    # ------------------------------------------------------------------
    # Terminal operations
    # ------------------------------------------------------------------

    def _execute(self, sql: str) -> List[Row]:
        if self.database is None:
            raise DatabaseConnectionError('No database connection has been established.')
        return self.database.executor.execute(sql)

    def get(self) -> List[Row]:
        """Run the SELECT and return every row."""
        return self._execute(self.build_query())

    def first(self) -> Optional[Row]:
        """Run the SELECT and return the first row, or None."""
        rows = self._execute(self.build_query())
        return rows[0] if rows else None

    def find(self, value: Any, column: str = 'id') -> Optional[Row]:
        """Add ``column = value`` and return the first matching row, or None."""
        self.where(column, '=', value)
        return self.first()

    def insert(self, rows: Sequence[Mapping]) -> List[Row]:
        """
        Insert rows one statement at a time.

        Each row's keys are its columns. Rows are inserted in order and each
        statement completes before the next starts; a failure leaves earlier
        rows in place.

        Args:
            rows: Non-empty list of non-empty column -> value mappings

        Returns:
            The inserted rows as returned by RETURNING *

        Raises:
            InvalidPayloadError: If rows is not a non-empty list of mappings
        """
        if not isinstance(rows, (list, tuple)):
            raise InvalidPayloadError('insert() requires a list of column/value mappings.')
        if not rows:
            raise InvalidPayloadError('insert() requires at least one row.')
        if not all(isinstance(row, Mapping) and row for row in rows):
            raise InvalidPayloadError('Every row passed to insert() must be a non-empty mapping.')

        inserted = []
        for row in rows:
            result = self._execute(insert_sql(self.table_name, row))
            inserted.append(result[0] if result else None)

        logger.debug(f"Inserted {len(inserted)} row(s) into {self.table_name}")
        return inserted

    def update(self, data: Mapping) -> List[Row]:
        """
        Update the rows matching the current conditions.

        Raises:
            InvalidPayloadError: If data is not a non-empty mapping
            MissingWhereClauseError: If no condition has been added
        """
        if not isinstance(data, Mapping) or not data:
            raise InvalidPayloadError('update() requires a non-empty mapping of column/value pairs.')

        where_clause = self.build_conditions()
        if not where_clause:
            raise MissingWhereClauseError('update() requires at least one WHERE condition.')

        return self._execute(update_sql(self.table_name, data, where_clause))

    def delete(self) -> List[Row]:
        """
        Delete the rows matching the current conditions.

        Raises:
            MissingWhereClauseError: If no condition has been added
        """
        where_clause = self.build_conditions()
        if not where_clause:
            raise MissingWhereClauseError('delete() requires at least one WHERE condition.')

        return self._execute(delete_sql(self.table_name, where_clause))

    def create(self, fields: Sequence[Any]) -> bool:
        """
        Create the table if it does not exist.

        Args:
            fields: FieldSpec objects or field mappings, in column order

        Raises:
            FieldSpecError: If the list is empty or a field is invalid
        """
        specs = coerce_fields(fields)
        if not specs:
            raise FieldSpecError('create() requires at least one field.')

        self._execute(create_table_sql(self.table_name, specs))
        logger.info(f"✅ Table {self.table_name} is present")
        return True

    def drop(self) -> bool:
        """Drop the table if it exists."""
        self._execute(drop_table_sql(self.table_name))
        logger.info(f"Dropped table {self.table_name}")
        return True

    def columns(self) -> Columns:
        """Return column operations bound to this table and database."""
        return Columns(self.table_name, self.database)
