"""
===================================
Column introspection and migration.
===================================

``Columns`` compares desired ``FieldSpec`` definitions against the live
catalog (information_schema) and issues only the ALTER TABLE statements
needed to reach them:

- ``get()``: current columns, or ``{}`` when the table does not exist
- ``add()``: ADD COLUMN for fields not present yet
- ``edit()``: ALTER COLUMN for present fields whose type, default or keys differ
- ``delete()`` / ``drop()``: DROP COLUMN for names that exist

Example:
    >>> columns = db.table('users').columns()
    >>> columns.add({'name': 'email', 'type': 'VARCHAR', 'length': 255})
    ['email']
    >>> columns.edit({'name': 'email', 'type': 'VARCHAR', 'length': 320, 'options': ['unique']})
    ['email']
    >>> columns.delete(['email'])
    ['email']
"""

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Union

from sql.ddl import (
    TEXT_TYPES,
    add_column_sql,
    add_key_constraint_sql,
    alter_column_default_sql,
    alter_column_type_sql,
    base_type,
    drop_column_sql,
    drop_constraint_sql,
    inline_length,
    normalize_type,
    render_default_value,
)
from sql.fields import FieldSpec, coerce_fields
from sql.query_builder import (
    check_table_exists_sql,
    get_column_info_sql,
    get_key_constraints_sql,
)
from utils.database_utils import DatabaseConnectionError

if TYPE_CHECKING:
    from db.provider import Database

logger = logging.getLogger(__name__)

PRIMARY_KEY = 'PRIMARY KEY'
UNIQUE = 'UNIQUE'

# Trailing cast the catalog adds to defaults, e.g. 'abc'::character varying
_DEFAULT_CAST = re.compile(r"::[\w\s\"\[\]]+$")


@dataclass
class ColumnInfo:
    """Catalog view of one column.

    Attributes:
        type: information_schema data_type (e.g. 'integer', 'character varying')
        length: character_maximum_length for character types
        precision: numeric_precision
        scale: numeric_scale
        default_value: column_default expression as stored by the server
        nullable: Whether NULLs are allowed
        primary_key: Name of the PRIMARY KEY constraint covering the column
        unique: Name of a UNIQUE constraint covering the column
    """

    type: str
    length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    default_value: Optional[str] = None
    nullable: bool = True
    primary_key: Optional[str] = None
    unique: Optional[str] = None

    @property
    def is_primary(self) -> bool:
        return self.primary_key is not None

    @property
    def is_unique(self) -> bool:
        return self.unique is not None


def _normalize_default(value: Any, keep_quotes: bool) -> Optional[str]:
    if value is None:
        return None
    text = _DEFAULT_CAST.sub('', str(value).strip())
    # quoted text keeps its case, keywords and expressions do not
    if keep_quotes:
        return text
    return text.strip("'").lower()


def type_differs(field: FieldSpec, info: ColumnInfo) -> bool:
    """Return True if the column's type family or size differs from ``field``.

    A size written inline with the type (``VARCHAR(255)``) counts when the
    field has no separate length.
    """
    if normalize_type(field.type) != info.type:
        return True

    length = field.length if field.length is not None else inline_length(field.type)

    if info.type == 'numeric':
        if length is None:
            return info.precision is not None
        if isinstance(length, tuple):
            return (info.precision, info.scale) != length
        return (info.precision, info.scale) != (length, 0)

    if info.type == 'character varying':
        return (length or None) != info.length

    if info.type == 'character':
        return (length or 1) != info.length

    return False


def default_differs(field: FieldSpec, info: ColumnInfo) -> bool:
    """Return True if the column default differs from ``field``'s default."""
    # identity and serial columns own their defaults
    if field.is_autoincrement or base_type(field.type).endswith('SERIAL'):
        return False
    if not field.has_default and str(info.default_value or '').startswith('nextval('):
        return False
    keep_quotes = base_type(field.type) in TEXT_TYPES
    desired = _normalize_default(render_default_value(field), keep_quotes) if field.has_default else None
    current = _normalize_default(info.default_value, keep_quotes)
    return desired != current


class Columns:
    """Column operations for one table.

    Attributes:
        table_name: Table whose columns are managed
        database: Provider used to run statements
    """

    def __init__(self, table_name: str, database: Optional['Database'] = None):
        self.table_name = table_name
        self.database = database

    def _execute(self, sql: str) -> List[Dict[str, Any]]:
        if self.database is None:
            raise DatabaseConnectionError('No database connection has been established.')
        return self.database.executor.execute(sql)

    def get(self) -> Dict[str, ColumnInfo]:
        """
        Read the table's columns from the catalog.

        Returns:
            Mapping of column name to ColumnInfo in ordinal order, or an empty
            dict when the table does not exist
        """
        if not self._execute(check_table_exists_sql(self.table_name)):
            return {}

        columns: Dict[str, ColumnInfo] = {}
        for row in self._execute(get_column_info_sql(self.table_name)):
            columns[row['column_name']] = ColumnInfo(
                type=row['data_type'],
                length=row.get('character_maximum_length'),
                precision=row.get('numeric_precision'),
                scale=row.get('numeric_scale'),
                default_value=row.get('column_default'),
                nullable=row.get('is_nullable', 'YES') == 'YES'
            )

        for row in self._execute(get_key_constraints_sql(self.table_name)):
            info = columns.get(row['column_name'])
            if info is None:
                continue
            if row['constraint_type'] == PRIMARY_KEY:
                info.primary_key = row['constraint_name']
            elif row['constraint_type'] == UNIQUE:
                info.unique = row['constraint_name']

        return columns

    def add(self, fields: Union[FieldSpec, Dict[str, Any], Iterable[Any]]) -> List[str]:
        """
        Add the fields that are not columns yet.

        Args:
            fields: One field or a list of fields (FieldSpec or mappings)

        Returns:
            Names of the columns added
        """
        specs = coerce_fields(fields)
        existing = self.get()

        added = []
        for field in specs:
            if field.name in existing:
                logger.info(f"Column {self.table_name}.{field.name} already exists, skipping")
                continue
            self._execute(add_column_sql(self.table_name, field))
            added.append(field.name)

        if added:
            logger.info(f"✅ Added column(s) to {self.table_name}: {', '.join(added)}")
        return added

    def edit(self, fields: Union[FieldSpec, Dict[str, Any], Iterable[Any]]) -> List[str]:
        """
        Bring existing columns in line with the given fields.

        The type change is issued as its own statement, before any default or
        key change.

        Args:
            fields: One field or a list of fields (FieldSpec or mappings)

        Returns:
            Names of the columns altered
        """
        specs = coerce_fields(fields)
        existing = self.get()

        altered = []
        for field in specs:
            info = existing.get(field.name)
            if info is None:
                logger.warning(f"Column {self.table_name}.{field.name} does not exist, skipping")
                continue

            statements = self._edit_statements(field, info)
            for statement in statements:
                self._execute(statement)
            if statements:
                altered.append(field.name)

        if altered:
            logger.info(f"✅ Altered column(s) of {self.table_name}: {', '.join(altered)}")
        return altered

    def _edit_statements(self, field: FieldSpec, info: ColumnInfo) -> List[str]:
        statements = []

        if type_differs(field, info):
            statements.append(alter_column_type_sql(self.table_name, field))

        if default_differs(field, info):
            statements.append(alter_column_default_sql(self.table_name, field))

        if field.is_primary and not info.is_primary:
            statements.append(add_key_constraint_sql(self.table_name, field.name, PRIMARY_KEY))
        elif info.is_primary and not field.is_primary:
            statements.append(drop_constraint_sql(self.table_name, info.primary_key))

        if field.is_unique and not info.is_unique:
            statements.append(add_key_constraint_sql(self.table_name, field.name, UNIQUE))
        elif info.is_unique and not field.is_unique:
            statements.append(drop_constraint_sql(self.table_name, info.unique))

        return statements

    def delete(self, names: Union[str, Iterable[str]]) -> List[str]:
        """
        Drop the named columns that exist; unknown names are ignored.

        Returns:
            Names of the columns dropped
        """
        if isinstance(names, str):
            names = [names]
        names = list(names)
        existing = self.get()

        dropped = []
        for name in names:
            if name not in existing:
                logger.debug(f"Column {self.table_name}.{name} does not exist, nothing to drop")
                continue
            self._execute(drop_column_sql(self.table_name, name))
            dropped.append(name)

        if dropped:
            logger.info(f"Dropped column(s) from {self.table_name}: {', '.join(dropped)}")
        return dropped

    def drop(self, name: str) -> bool:
        """Drop one column. Returns False if it did not exist."""
        return bool(self.delete([name]))
