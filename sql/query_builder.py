"""
============================
SQL Query Builder Utilities.
============================

Low-level building blocks used by ``db.table_query.TableQuery`` to render
SELECT statements, plus the catalog queries used for introspection. All
functions are pure and follow the _builder / _sql naming convention.

Query Builders:
- select_clause_builder: Base ``SELECT [DISTINCT] ... FROM "table"`` clause
- aggregate_clause_builder: ``SELECT FN(col) AS fn FROM "table"`` clause
- join_builder: JOIN / LEFT JOIN / RIGHT JOIN fragment
- pagination_builder: LIMIT and OFFSET from limit/page
- select_builder: Assemble a full statement from its parts

Metadata Query Functions:
- check_table_exists_sql: Check if a table exists in the current schema
- get_column_info_sql: Column types, lengths and defaults
- get_key_constraints_sql: PRIMARY KEY / UNIQUE constraints per column
- check_database_exists_sql: Check if a database exists

Usage:
    from sql.query_builder import select_clause_builder, select_builder

    base = select_clause_builder('users', ['id', 'name'])
    select_builder(base, where='age > 18', limit=10, page=2)
    # SELECT id, name FROM "users" WHERE age > 18 LIMIT 10 OFFSET 10
"""

from typing import Dict, List, Optional, Sequence

from .literals import quote_identifier

AGGREGATE_FUNCTIONS = ('COUNT', 'SUM', 'AVG', 'MAX', 'MIN')

JOIN_TYPES = ('JOIN', 'LEFT JOIN', 'RIGHT JOIN')


def select_clause_builder(
    table: str,
    fields: Optional[Sequence[str]] = None,
    distinct: bool = False
) -> str:
    """
    Build the base SELECT ... FROM clause.

    Args:
        table: Table name (quoted in the output)
        fields: Column expressions, emitted as given; empty means ``*``
        distinct: Use SELECT DISTINCT

    Returns:
        Base clause such as ``SELECT DISTINCT name FROM "users"``
    """
    select_keyword = "SELECT DISTINCT" if distinct else "SELECT"
    column_clause = ", ".join(fields) if fields else "*"
    return f"{select_keyword} {column_clause} FROM {quote_identifier(table)}"


def aggregate_clause_builder(function_name: str, column: str, table: str) -> str:
    """
    Build an aggregate base clause.

    Example:
        >>> aggregate_clause_builder('count', '*', 'users')
        'SELECT COUNT(*) AS count FROM "users"'
    """
    function_name = function_name.upper()
    if function_name not in AGGREGATE_FUNCTIONS:
        raise ValueError(f"Unsupported aggregate function: {function_name}")
    return f"SELECT {function_name}({column}) AS {function_name.lower()} FROM {quote_identifier(table)}"


def is_aggregate_clause(base_clause: str) -> bool:
    """Return True if the base clause is one of the aggregate projections, DISTINCT or not."""
    prefixes = tuple(
        f"{keyword} {fn}(" for keyword in ("SELECT", "SELECT DISTINCT") for fn in AGGREGATE_FUNCTIONS
    )
    return base_clause.startswith(prefixes)


def join_builder(join_type: str, table: str, column1: str, operator: str, column2: str) -> str:
    """
    Build a JOIN clause.

    Args:
        join_type: JOIN, LEFT JOIN or RIGHT JOIN
        table: Joined table name (quoted in the output)
        column1: Left side of the ON condition
        operator: Comparison operator
        column2: Right side of the ON condition

    Returns:
        SQL JOIN clause
    """
    join_type = join_type.upper()
    if join_type not in JOIN_TYPES:
        raise ValueError(f"Unsupported join type: {join_type}")
    return f"{join_type} {quote_identifier(table)} ON {column1} {operator} {column2}"


def pagination_builder(limit: Optional[int], page: Optional[int]) -> Dict[str, Optional[int]]:
    """
    Calculate LIMIT and OFFSET.

    OFFSET is ``(page - 1) * limit`` and is only produced when a non-zero
    limit and a page are both set.

    Args:
        limit: Rows per page, or None
        page: Page number (1-based), or None

    Returns:
        Dictionary with limit and offset values (None when not emitted)
    """
    offset = None
    if limit and page is not None:
        offset = (page - 1) * limit
    return {
        'limit': limit,
        'offset': offset
    }


def select_builder(
    base_clause: str,
    joins: Optional[List[str]] = None,
    where: Optional[str] = None,
    group_by: Optional[List[str]] = None,
    limit: Optional[int] = None,
    page: Optional[int] = None,
    order_by: Optional[List[str]] = None
) -> str:
    """
    Assemble a SELECT statement.

    Clauses are appended in a fixed order: base, JOINs, WHERE, GROUP BY,
    LIMIT, OFFSET, ORDER BY. ORDER BY is dropped when the base clause is an
    aggregate projection.

    Args:
        base_clause: Output of select_clause_builder or aggregate_clause_builder
        joins: Rendered JOIN fragments
        where: Rendered WHERE body (without the keyword)
        group_by: GROUP BY expressions
        limit: LIMIT value
        page: Page number used to derive OFFSET
        order_by: Rendered ``column DIRECTION`` entries

    Returns:
        SQL SELECT statement
    """
    sql = base_clause

    if joins:
        sql += " " + " ".join(joins)

    if where:
        sql += f" WHERE {where}"

    if group_by:
        sql += f" GROUP BY {', '.join(group_by)}"

    pagination = pagination_builder(limit, page)
    if pagination['limit'] is not None:
        sql += f" LIMIT {pagination['limit']}"
    if pagination['offset'] is not None:
        sql += f" OFFSET {pagination['offset']}"

    if order_by and not is_aggregate_clause(base_clause):
        sql += f" ORDER BY {', '.join(order_by)}"

    return sql


def check_table_exists_sql(table_name: str) -> str:
    """
    Generate SQL to check if a table exists in the current schema.

    Returns:
        SQL query that returns 1 if the table exists, nothing if not
    """
    return f"""SELECT 1
FROM information_schema.tables
WHERE table_schema = current_schema()
  AND table_name = '{table_name}'"""


def get_column_info_sql(table_name: str) -> str:
    """
    Generate SQL to get information about table columns.

    Args:
        table_name: Table name (current schema)

    Returns:
        SQL query to retrieve column information
    """
    return f"""SELECT
    column_name,
    data_type,
    character_maximum_length,
    numeric_precision,
    numeric_scale,
    column_default,
    is_nullable
FROM information_schema.columns
WHERE table_schema = current_schema()
  AND table_name = '{table_name}'
ORDER BY ordinal_position"""


def get_key_constraints_sql(table_name: str) -> str:
    """
    Generate SQL listing PRIMARY KEY and UNIQUE constraints per column.

    Args:
        table_name: Table name (current schema)

    Returns:
        SQL query returning column_name, constraint_type, constraint_name
    """
    return f"""SELECT
    kcu.column_name,
    tc.constraint_type,
    tc.constraint_name
FROM information_schema.table_constraints tc
JOIN information_schema.key_column_usage kcu
  ON tc.constraint_name = kcu.constraint_name
 AND tc.table_schema = kcu.table_schema
 AND tc.table_name = kcu.table_name
WHERE tc.table_schema = current_schema()
  AND tc.table_name = '{table_name}'
  AND tc.constraint_type IN ('PRIMARY KEY', 'UNIQUE')"""


def check_database_exists_sql(database_name: str) -> str:
    """
    Generate SQL to check if a database exists.

    Args:
        database_name: Name of the database to check

    Returns:
        SQL query that returns 1 if database exists, nothing if not
    """
    return f"SELECT 1 FROM pg_database WHERE datname = '{database_name}'"
