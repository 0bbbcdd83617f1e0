"""
=======================================================================
Data Definition Language (DDL) utilities for tables and columns.
=======================================================================

Pure functions that render PostgreSQL DDL from ``FieldSpec`` definitions.
Nothing here touches a connection; ``db.table_query`` and ``db.columns``
execute the statements.

Key Features:
    - Column definitions with length / precision-scale
    - DEFAULT literals typed by SQL type family
    - Inline PRIMARY KEY / UNIQUE, identity columns for autoincrement
    - Trailing FOREIGN KEY constraints
    - ALTER TABLE statements for add / alter / drop column
    - CREATE DATABASE for provisioning

Functions:
    base_type / inline_length: Split a type such as VARCHAR(255) into name and size
    normalize_type: Map a type spelling to its information_schema name
    render_field_definition: Render one column definition
    create_table_sql: Generate CREATE TABLE IF NOT EXISTS
    drop_table_sql: Generate DROP TABLE IF EXISTS
    add_column_sql: Generate ALTER TABLE ... ADD COLUMN
    alter_column_type_sql: Generate ALTER COLUMN ... TYPE
    alter_column_default_sql: Generate ALTER COLUMN ... SET/DROP DEFAULT
    add_key_constraint_sql: Generate ADD PRIMARY KEY / ADD UNIQUE
    drop_constraint_sql: Generate DROP CONSTRAINT
    drop_column_sql: Generate ALTER TABLE ... DROP COLUMN
    create_database_sql: Generate CREATE DATABASE

Example:
    >>> from sql.ddl import create_table_sql
    >>> from sql.fields import FieldSpec
    >>>
    >>> create_table_sql('users', [
    ...     FieldSpec(name='id', type='INT', options=['primary']),
    ...     FieldSpec(name='name', type='VARCHAR', length=255),
    ... ])
    'CREATE TABLE IF NOT EXISTS "users" ("id" INT PRIMARY KEY, "name" VARCHAR(255))'
"""

import re
from typing import List, Optional, Sequence

from .fields import FieldSpec, Length
from .literals import quote_identifier, quote_string, render_literal

# Types whose DEFAULT values are written as quoted strings
TEXT_TYPES = frozenset({
    'VARCHAR', 'CHAR', 'CHARACTER', 'CHARACTER VARYING', 'TEXT', 'ENUM', 'SET'
})

# Types that never take a length
UNSIZED_TYPES = frozenset({'TEXT'})

# Size written inline with the type, e.g. VARCHAR(255) or NUMERIC(10, 2)
_INLINE_SIZE = re.compile(r'^(?P<base>[^(]*?)\s*\((?P<size>[^)]*)\)\s*$')

# Spelling variants mapped to the data_type reported by information_schema.columns
TYPE_ALIASES = {
    'INT': 'integer',
    'INTEGER': 'integer',
    'INT4': 'integer',
    'SERIAL': 'integer',
    'BIGINT': 'bigint',
    'INT8': 'bigint',
    'BIGSERIAL': 'bigint',
    'SMALLINT': 'smallint',
    'INT2': 'smallint',
    'SMALLSERIAL': 'smallint',
    'VARCHAR': 'character varying',
    'CHARACTER VARYING': 'character varying',
    'CHAR': 'character',
    'CHARACTER': 'character',
    'BPCHAR': 'character',
    'TEXT': 'text',
    'BOOL': 'boolean',
    'BOOLEAN': 'boolean',
    'DECIMAL': 'numeric',
    'NUMERIC': 'numeric',
    'REAL': 'real',
    'FLOAT4': 'real',
    'FLOAT': 'double precision',
    'FLOAT8': 'double precision',
    'DOUBLE PRECISION': 'double precision',
    'DATE': 'date',
    'TIME': 'time without time zone',
    'TIMETZ': 'time with time zone',
    'TIMESTAMP': 'timestamp without time zone',
    'TIMESTAMPTZ': 'timestamp with time zone',
}


def base_type(type_name: str) -> str:
    """Return the upper-cased type name without an inline size.

    Example:
        >>> base_type('varchar(255)')
        'VARCHAR'
    """
    text = " ".join(str(type_name).split())
    match = _INLINE_SIZE.match(text)
    if match:
        text = match.group('base')
    return text.upper()


def inline_length(type_name: str) -> Optional[Length]:
    """Return the size written inline with the type, or None.

    Example:
        >>> inline_length('VARCHAR(255)')
        255
        >>> inline_length('NUMERIC(10, 2)')
        (10, 2)
    """
    match = _INLINE_SIZE.match(str(type_name).strip())
    if not match:
        return None
    parts = [part.strip() for part in match.group('size').split(',')]
    if not all(part.isdigit() for part in parts):
        return None
    if len(parts) == 1:
        return int(parts[0])
    if len(parts) == 2:
        return int(parts[0]), int(parts[1])
    return None


def normalize_type(type_name: str) -> str:
    """Map a type spelling to its information_schema ``data_type`` name.

    An inline size is ignored.

    Example:
        >>> normalize_type('VARCHAR')
        'character varying'
        >>> normalize_type('VARCHAR(255)')
        'character varying'
        >>> normalize_type('integer')
        'integer'
    """
    key = base_type(type_name)
    return TYPE_ALIASES.get(key, key.lower())


def render_type(field: FieldSpec) -> str:
    """Render the column type with its length or (precision, scale).

    An explicit ``length`` replaces a size written inline with the type.
    """
    if field.length is None or base_type(field.type) in UNSIZED_TYPES:
        return field.type
    type_name = field.type
    match = _INLINE_SIZE.match(type_name.strip())
    if match:
        type_name = match.group('base')
    if isinstance(field.length, tuple):
        precision, scale = field.length
        return f"{type_name}({precision}, {scale})"
    if not field.length:
        return type_name
    return f"{type_name}({field.length})"


def render_default_value(field: FieldSpec) -> str:
    """Render the default value of ``field`` as it appears after DEFAULT.

    Text-family types get a quoted string; other types get the value as-is,
    so expressions such as ``CURRENT_TIMESTAMP`` pass through unquoted.
    """
    value = field.default_value
    if base_type(field.type) in TEXT_TYPES:
        return quote_string(str(value))
    if isinstance(value, str):
        return value
    return render_literal(value)


def render_field_definition(field: FieldSpec, include_name: bool = True) -> str:
    """
    Render one column definition (without foreign key).

    Args:
        field: Column specification
        include_name: If False, omit the quoted column name

    Returns:
        Column definition such as ``"name" VARCHAR(255) DEFAULT 'x' UNIQUE``
    """
    parts = []

    if include_name:
        parts.append(quote_identifier(field.name))

    parts.append(render_type(field))

    if field.is_autoincrement:
        parts.append("GENERATED BY DEFAULT AS IDENTITY")

    if field.has_default:
        parts.append(f"DEFAULT {render_default_value(field)}")

    if field.is_primary:
        parts.append("PRIMARY KEY")

    if field.is_unique:
        parts.append("UNIQUE")

    return " ".join(parts)


def render_foreign_key(field: FieldSpec) -> Optional[str]:
    """Render the FOREIGN KEY constraint of ``field``, if it has one."""
    if field.foreign_key is None:
        return None
    return (
        f"FOREIGN KEY ({quote_identifier(field.name)}) "
        f"REFERENCES {quote_identifier(field.foreign_key.table)}"
        f"({quote_identifier(field.foreign_key.column)})"
    )


def create_table_sql(table: str, fields: Sequence[FieldSpec], if_not_exists: bool = True) -> str:
    """Generate CREATE TABLE statement.

    Column definitions come first, in field order, followed by one FOREIGN
    KEY clause per field that references another table.

    Args:
        table: Table name
        fields: Column specifications
        if_not_exists: If True, add IF NOT EXISTS clause

    Returns:
        SQL CREATE TABLE statement
    """
    sql_parts = ["CREATE TABLE"]

    if if_not_exists:
        sql_parts.append("IF NOT EXISTS")

    sql_parts.append(quote_identifier(table))

    definitions: List[str] = [render_field_definition(field) for field in fields]
    definitions.extend(
        fk for fk in (render_foreign_key(field) for field in fields) if fk
    )

    return " ".join(sql_parts) + f" ({', '.join(definitions)})"


def drop_table_sql(table: str, if_exists: bool = True) -> str:
    """Generate DROP TABLE statement."""
    sql_parts = ["DROP TABLE"]

    if if_exists:
        sql_parts.append("IF EXISTS")

    sql_parts.append(quote_identifier(table))

    return " ".join(sql_parts)


def add_column_sql(table: str, field: FieldSpec) -> str:
    """Generate ALTER TABLE ... ADD COLUMN, plus ADD FOREIGN KEY when referenced.

    Example:
        >>> add_column_sql('users', FieldSpec(name='email', type='VARCHAR', length=255))
        'ALTER TABLE "users" ADD COLUMN "email" VARCHAR(255)'
    """
    sql = f"ALTER TABLE {quote_identifier(table)} ADD COLUMN {render_field_definition(field)}"

    foreign_key = render_foreign_key(field)
    if foreign_key:
        sql += f", ADD {foreign_key}"

    return sql


def alter_column_type_sql(table: str, field: FieldSpec) -> str:
    """Generate ALTER COLUMN ... TYPE for ``field``'s type and length."""
    return (
        f"ALTER TABLE {quote_identifier(table)} "
        f"ALTER COLUMN {quote_identifier(field.name)} TYPE {render_type(field)}"
    )


def alter_column_default_sql(table: str, field: FieldSpec) -> str:
    """Generate SET DEFAULT for ``field``, or DROP DEFAULT when it has none."""
    prefix = (
        f"ALTER TABLE {quote_identifier(table)} "
        f"ALTER COLUMN {quote_identifier(field.name)}"
    )
    if field.has_default:
        return f"{prefix} SET DEFAULT {render_default_value(field)}"
    return f"{prefix} DROP DEFAULT"


def add_key_constraint_sql(table: str, column: str, constraint_type: str) -> str:
    """Generate ADD PRIMARY KEY / ADD UNIQUE on a single column.

    Args:
        table: Table name
        column: Column name
        constraint_type: 'PRIMARY KEY' or 'UNIQUE'
    """
    return f"ALTER TABLE {quote_identifier(table)} ADD {constraint_type} ({quote_identifier(column)})"


def drop_constraint_sql(table: str, constraint_name: str) -> str:
    """Generate ALTER TABLE ... DROP CONSTRAINT."""
    return f"ALTER TABLE {quote_identifier(table)} DROP CONSTRAINT {quote_identifier(constraint_name)}"


def drop_column_sql(table: str, column: str) -> str:
    """Generate ALTER TABLE ... DROP COLUMN."""
    return f"ALTER TABLE {quote_identifier(table)} DROP COLUMN {quote_identifier(column)}"


def create_database_sql(database_name: str) -> str:
    """
    Generate CREATE DATABASE statement.

    Note: This returns the SQL string. Database creation requires an
    AUTOCOMMIT connection to another database, handled by
    ``setup.create_database.DatabaseCreator``.

    Args:
        database_name: Name of the database to create

    Returns:
        SQL CREATE DATABASE statement
    """
    return f"CREATE DATABASE {quote_identifier(database_name)}"
