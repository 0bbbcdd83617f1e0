"""
===========================
SQL literal rendering.
===========================

Values are inlined into statements as SQL literals rather than bound as
parameters. The rules are deliberately simple:

- ``None`` renders as ``NULL``
- booleans render as ``TRUE`` / ``FALSE``
- ints, floats and Decimals render unquoted
- NaN and infinities render as the quoted words PostgreSQL reads for them
  ('NaN', 'Infinity', '-Infinity')
- strings render wrapped in single quotes, without escaping
- anything else (dates, UUIDs, ...) renders as its ``str()`` in single quotes

Warning:
    Embedded single quotes are NOT escaped. A value such as ``O'Brien``
    produces broken SQL, and untrusted input can inject arbitrary SQL.
    Only pass values that come from trusted code.
"""

import math
from decimal import Decimal
from typing import Any


def quote_identifier(name: str) -> str:
    """Wrap an identifier (table or column name) in double quotes."""
    return f'"{name}"'


def quote_string(value: str) -> str:
    """Wrap a string in single quotes. No escaping is applied."""
    return f"'{value}'"


def _non_finite_word(is_nan: bool, negative: bool) -> str:
    if is_nan:
        return 'NaN'
    return '-Infinity' if negative else 'Infinity'


def render_literal(value: Any) -> str:
    """
    Render a Python value as an inline SQL literal.

    Args:
        value: Value to render

    Returns:
        SQL literal text

    Example:
        >>> render_literal('Alice')
        "'Alice'"
        >>> render_literal(28)
        '28'
        >>> render_literal(None)
        'NULL'
    """
    if value is None:
        return 'NULL'
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return 'TRUE' if value else 'FALSE'
    if isinstance(value, float) and not math.isfinite(value):
        return quote_string(_non_finite_word(math.isnan(value), value < 0))
    if isinstance(value, Decimal) and not value.is_finite():
        return quote_string(_non_finite_word(value.is_nan(), value.is_signed()))
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, str):
        return quote_string(value)
    return quote_string(str(value))
