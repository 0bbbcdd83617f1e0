"""
================================
WHERE condition model.
================================

An ordered list of predicate nodes, each tagged with the boolean combinator
(AND/OR) that joins it to the node before it. Rendering walks the list left
to right: the first node is emitted bare, every later node is prefixed with
`` <COMBINATOR> ``.

``Conditions`` needs no database connection. ``TableQuery`` owns one for its
WHERE clause, and ``where_group`` callbacks receive a fresh one whose rendered
text becomes a single parenthesized node.

Example:
    >>> conditions = Conditions()
    >>> conditions.where('age', '>', 18).or_where('role', '=', 'admin')
    >>> conditions.render()
    "age > 18 OR role = 'admin'"
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional

from .literals import render_literal

AND = 'AND'
OR = 'OR'

BETWEEN = 'BETWEEN'
IN = 'IN'
IS_NULL = 'IS NULL'
IS_NOT_NULL = 'IS NOT NULL'

ORDER_DIRECTIONS = ('ASC', 'DESC')

UNSET = object()


class QueryBuilderError(Exception):
    """Base exception for invalid builder input."""
    pass


class InvalidOrderDirectionError(QueryBuilderError, ValueError):
    """Raised when ORDER BY receives a direction other than ASC or DESC."""
    pass


@dataclass
class ConditionNode:
    """One predicate, or one pre-rendered nested group, in a WHERE clause.

    Attributes:
        combinator: AND/OR keyword placed before this node (ignored for the first node)
        column: Column expression for a leaf predicate
        operator: Comparison operator, BETWEEN, IN, IS NULL or IS NOT NULL
        value: Operand; a 2-tuple for BETWEEN, a list for IN, unused for NULL checks
        group: Rendered nested conditions for a group node
    """

    combinator: str = AND
    column: Optional[str] = None
    operator: Optional[str] = None
    value: Any = None
    group: Optional[str] = None

    @property
    def is_group(self) -> bool:
        return self.group is not None

    def render(self) -> str:
        """Render the node without its combinator prefix."""
        if self.is_group:
            return f"({self.group})"

        if self.operator == BETWEEN:
            low, high = self.value
            return f"{self.column} BETWEEN {render_literal(low)} AND {render_literal(high)}"

        if self.operator == IN:
            values = ", ".join(render_literal(v) for v in self.value)
            return f"{self.column} IN ({values})"

        if self.operator in (IS_NULL, IS_NOT_NULL):
            return f"{self.column} {self.operator}"

        return f"{self.column} {self.operator} {render_literal(self.value)}"


@dataclass(frozen=True)
class OrderSpec:
    """One ORDER BY entry."""

    column: str
    direction: str = 'ASC'

    @classmethod
    def create(cls, column: str, direction: str = 'ASC') -> 'OrderSpec':
        """Validate the direction (case-insensitive) and build the entry.

        Raises:
            InvalidOrderDirectionError: If direction is not ASC or DESC
        """
        normalized = str(direction).upper()
        if normalized not in ORDER_DIRECTIONS:
            raise InvalidOrderDirectionError(
                f"Invalid direction: {direction}. Use 'ASC' or 'DESC'."
            )
        return cls(column=column, direction=normalized)

    def render(self) -> str:
        return f"{self.column} {self.direction}"


class Conditions:
    """Ordered WHERE predicates with a pending combinator.

    The pending combinator starts as AND. ``or_()`` switches it to OR for the
    next appended node only; every append resets it to AND.
    """

    def __init__(self):
        self.nodes: List[ConditionNode] = []
        self.next_combinator = AND

    def __len__(self) -> int:
        return len(self.nodes)

    def __bool__(self) -> bool:
        return bool(self.nodes)

    def _append(self, node: ConditionNode) -> 'Conditions':
        self.nodes.append(node)
        self.next_combinator = AND
        return self

    def where(self, column: str, operator: Any = None, value: Any = UNSET) -> 'Conditions':
        """Append ``column operator value``.

        ``where(column, value)`` is shorthand for ``where(column, '=', value)``.
        A ``None`` operator also means ``=``.
        """
        if value is UNSET:
            operator, value = '=', operator
        if operator is None:
            operator = '='
        return self._append(ConditionNode(
            combinator=self.next_combinator,
            column=column,
            operator=operator,
            value=value
        ))

    def or_where(self, column: str, operator: Any = None, value: Any = UNSET) -> 'Conditions':
        """Append a predicate joined with OR."""
        self.next_combinator = OR
        return self.where(column, operator, value)

    def where_group(self, callback: Callable[['Conditions'], Any]) -> 'Conditions':
        """Append a parenthesized group built by ``callback``.

        The callback receives a fresh ``Conditions`` to populate. A group that
        ends up empty appends nothing.

        Example:
            >>> conditions.where('active', '=', True).where_group(
            ...     lambda g: g.where('age', '<', 18).or_where('age', '>', 65)
            ... )
        """
        nested = Conditions()
        callback(nested)
        rendered = nested.render()
        if not rendered:
            return self
        return self._append(ConditionNode(combinator=self.next_combinator, group=rendered))

    def where_between(self, column: str, bounds: Any) -> 'Conditions':
        """Append ``column BETWEEN low AND high``.

        Input other than a two-item sequence with both items set is ignored
        without raising.
        """
        if not isinstance(bounds, (list, tuple)) or len(bounds) != 2:
            return self
        low, high = bounds
        if low is None or high is None:
            return self
        return self._append(ConditionNode(
            combinator=self.next_combinator,
            column=column,
            operator=BETWEEN,
            value=(low, high)
        ))

    def where_in(self, column: str, values: Iterable[Any]) -> 'Conditions':
        """Append ``column IN (...)``. Empty or non-collection input is ignored."""
        if not isinstance(values, (list, tuple, set, frozenset)) or not values:
            return self
        return self._append(ConditionNode(
            combinator=self.next_combinator,
            column=column,
            operator=IN,
            value=list(values)
        ))

    def where_null(self, column: str) -> 'Conditions':
        return self._append(ConditionNode(
            combinator=self.next_combinator, column=column, operator=IS_NULL
        ))

    def where_not_null(self, column: str) -> 'Conditions':
        return self._append(ConditionNode(
            combinator=self.next_combinator, column=column, operator=IS_NOT_NULL
        ))

    def and_(self) -> 'Conditions':
        self.next_combinator = AND
        return self

    def or_(self) -> 'Conditions':
        self.next_combinator = OR
        return self

    def render(self) -> str:
        """Render all nodes as a WHERE body (without the WHERE keyword)."""
        parts = []
        for index, node in enumerate(self.nodes):
            prefix = '' if index == 0 else f" {node.combinator} "
            parts.append(prefix + node.render())
        return ''.join(parts)
