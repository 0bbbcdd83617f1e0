"""
==================================
Column definitions (field specs).
==================================

A ``FieldSpec`` describes one column for CREATE TABLE and for the column
add/edit operations. Specs can be built directly or from plain dictionaries
using the same keys the JSON table definitions use:

    {'name': 'id', 'type': 'INT', 'options': ['primary', 'autoincrement']}
    {'name': 'price', 'type': 'NUMERIC', 'length': [10, 2], 'defaultValue': 0}
    {'name': 'user_id', 'type': 'INT', 'foreign': {'table': 'users', 'column': 'id'}}
"""

from dataclasses import dataclass, field
from typing import Any, FrozenSet, Iterable, List, Mapping, Optional, Tuple, Union

PRIMARY = 'primary'
UNIQUE = 'unique'
AUTOINCREMENT = 'autoincrement'

VALID_OPTIONS = frozenset({PRIMARY, UNIQUE, AUTOINCREMENT})

# Default value that means "no DEFAULT clause"
NO_DEFAULT = 'NONE'

Length = Union[int, Tuple[int, int]]


class FieldSpecError(ValueError):
    """Raised for an invalid column definition."""
    pass


@dataclass(frozen=True)
class ForeignKey:
    """Referenced table and column of a foreign key."""

    table: str
    column: str


@dataclass(frozen=True)
class FieldSpec:
    """Declarative description of one table column.

    Attributes:
        name: Column name (required)
        type: SQL type name such as INT, VARCHAR or NUMERIC (required)
        length: Length, or (precision, scale) for numeric types
        default_value: Default value; None or 'NONE' means no default
        options: Subset of {'primary', 'unique', 'autoincrement'}
        foreign_key: Optional referenced table/column
    """

    name: str
    type: str
    length: Optional[Length] = None
    default_value: Any = None
    options: FrozenSet[str] = field(default_factory=frozenset)
    foreign_key: Optional[ForeignKey] = None

    def __post_init__(self):
        if not self.name or not self.type:
            raise FieldSpecError('Each field must have a name and a type.')

        options = frozenset(str(option).lower() for option in (self.options or ()))
        unknown = options - VALID_OPTIONS
        if unknown:
            raise FieldSpecError(
                f"Unknown option(s) for field '{self.name}': {', '.join(sorted(unknown))}"
            )
        object.__setattr__(self, 'options', options)

        if isinstance(self.length, list):
            object.__setattr__(self, 'length', tuple(self.length))
        if isinstance(self.length, tuple) and len(self.length) != 2:
            raise FieldSpecError(
                f"Length of field '{self.name}' must be a number or [precision, scale]"
            )

    @property
    def is_primary(self) -> bool:
        return PRIMARY in self.options

    @property
    def is_unique(self) -> bool:
        return UNIQUE in self.options

    @property
    def is_autoincrement(self) -> bool:
        return AUTOINCREMENT in self.options

    @property
    def has_default(self) -> bool:
        return self.default_value is not None and self.default_value != NO_DEFAULT

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'FieldSpec':
        """Build a field from a plain mapping.

        Accepts ``defaultValue`` or ``default`` for the default and ``foreign``
        or ``foreign_key`` (a mapping with table/column) for the reference.
        """
        if not isinstance(data, Mapping):
            raise FieldSpecError(f"Field definition must be a mapping, got {type(data).__name__}")

        foreign = data.get('foreign', data.get('foreign_key'))
        if foreign is not None and not isinstance(foreign, ForeignKey):
            try:
                foreign = ForeignKey(table=foreign['table'], column=foreign['column'])
            except (KeyError, TypeError):
                raise FieldSpecError(
                    f"Foreign key of field '{data.get('name')}' needs 'table' and 'column'"
                )

        default = data.get('defaultValue', data.get('default', data.get('default_value')))

        return cls(
            name=data.get('name'),
            type=data.get('type'),
            length=data.get('length'),
            default_value=default,
            options=data.get('options') or (),
            foreign_key=foreign
        )


def coerce_field(item: Union['FieldSpec', Mapping[str, Any]]) -> FieldSpec:
    """Return ``item`` as a FieldSpec, converting mappings."""
    if isinstance(item, FieldSpec):
        return item
    return FieldSpec.from_dict(item)


def coerce_fields(items: Union[FieldSpec, Mapping[str, Any], Iterable[Any]]) -> List[FieldSpec]:
    """Normalize one field or a collection of fields into a list of specs."""
    if isinstance(items, (FieldSpec, Mapping)):
        return [coerce_field(items)]
    if isinstance(items, (str, bytes)) or items is None:
        raise FieldSpecError('Expected a field definition or a list of field definitions')
    return [coerce_field(item) for item in items]
