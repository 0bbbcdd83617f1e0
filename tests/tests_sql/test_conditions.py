"""
=============================================
Comprehensive pytest suite for conditions.py
=============================================

Sections:
---------
1. Unit tests - Individual predicates and literals
2. Integration tests - Combinators, groups and chaining
3. Edge case tests - Inputs that are ignored or rejected

Available markers:
------------------
unit, integration, edge_case

How to Execute:
---------------
All tests:          python -m pytest tests/tests_sql/test_conditions.py -v
By category:        python -m pytest tests/tests_sql/test_conditions.py -m unit
With coverage:      python -m pytest tests/tests_sql/test_conditions.py --cov=sql.conditions
"""

from decimal import Decimal

import pytest

from sql.conditions import (
    Conditions,
    InvalidOrderDirectionError,
    OrderSpec,
)
from sql.literals import render_literal


# ===============
# 1. UNIT TESTS
# ===============

@pytest.mark.unit
@pytest.mark.parametrize("value, expected", [
    (None, 'NULL'),
    (True, 'TRUE'),
    (False, 'FALSE'),
    (28, '28'),
    (2.5, '2.5'),
    ('Alice', "'Alice'"),
])
def test_render_literal(value, expected):
    """Literals follow the inline rendering rules."""
    assert render_literal(value) == expected


@pytest.mark.edge_case
@pytest.mark.parametrize("value, expected", [
    (float('nan'), "'NaN'"),
    (float('inf'), "'Infinity'"),
    (float('-inf'), "'-Infinity'"),
    (Decimal('NaN'), "'NaN'"),
    (Decimal('-Infinity'), "'-Infinity'"),
    (Decimal('1.50'), '1.50'),
])
def test_render_literal_non_finite_numbers(value, expected):
    """NaN and infinities render as quoted words, never as bare nan or inf."""
    assert render_literal(value) == expected
    assert Conditions().where('score', value).render() == f'score = {expected}'


@pytest.mark.unit
def test_where_with_operator():
    """A single predicate renders without a combinator."""
    assert Conditions().where('age', '>', 18).render() == "age > 18"


@pytest.mark.unit
def test_where_two_argument_form_means_equality():
    """where(column, value) is shorthand for equality."""
    assert Conditions().where('name', 'Alice').render() == "name = 'Alice'"


@pytest.mark.unit
def test_where_between():
    assert Conditions().where_between('age', [18, 30]).render() == "age BETWEEN 18 AND 30"


@pytest.mark.unit
def test_where_in():
    assert Conditions().where_in('id', [1, 2, 3]).render() == "id IN (1, 2, 3)"


@pytest.mark.unit
def test_where_null_and_not_null():
    conditions = Conditions().where_null('deleted_at').where_not_null('email')

    assert conditions.render() == "deleted_at IS NULL AND email IS NOT NULL"


@pytest.mark.unit
def test_order_spec_normalizes_direction():
    """Direction is case-insensitive and stored uppercase."""
    assert OrderSpec.create('name', 'desc').render() == "name DESC"
    assert OrderSpec.create('name').render() == "name ASC"


@pytest.mark.unit
def test_order_spec_rejects_invalid_direction():
    with pytest.raises(InvalidOrderDirectionError, match="Invalid direction: UP. Use 'ASC' or 'DESC'."):
        OrderSpec.create('name', 'UP')


# ======================
# 2. INTEGRATION TESTS
# ======================

@pytest.mark.integration
def test_combinator_joins_to_previous_node():
    """OR is placed between the two predicates it joins."""
    conditions = Conditions().where('age', '>', 18).or_where('role', '=', 'admin')

    assert conditions.render() == "age > 18 OR role = 'admin'"


@pytest.mark.integration
def test_or_where_resets_to_and():
    """Only the predicate appended by or_where is joined with OR."""
    conditions = (
        Conditions()
        .where('a', '=', 1)
        .or_where('b', '=', 2)
        .where('c', '=', 3)
    )

    assert conditions.render() == "a = 1 OR b = 2 AND c = 3"


@pytest.mark.integration
def test_or_switches_next_predicate():
    conditions = Conditions().where('a', 1).or_().where_null('b')

    assert conditions.render() == "a = 1 OR b IS NULL"


@pytest.mark.integration
def test_where_group():
    """A group renders parenthesized and joins with the pending combinator."""
    conditions = Conditions().where('active', '=', True).where_group(
        lambda g: g.where('age', '<', 18).or_where('age', '>', 65)
    )

    assert conditions.render() == "active = TRUE AND (age < 18 OR age > 65)"


@pytest.mark.integration
def test_group_as_first_node():
    conditions = Conditions().where_group(lambda g: g.where('a', 1).or_where('b', 2)).or_where('c', 3)

    assert conditions.render() == "(a = 1 OR b = 2) OR c = 3"


# ===================
# 3. EDGE CASE TESTS
# ===================

@pytest.mark.edge_case
@pytest.mark.parametrize("bounds", [[1], [1, 2, 3], [None, 5], (5, None), "ab", None])
def test_where_between_ignores_malformed_bounds(bounds):
    """Malformed BETWEEN bounds add nothing and raise nothing."""
    conditions = Conditions().where_between('age', bounds)

    assert len(conditions) == 0
    assert conditions.render() == ""


@pytest.mark.edge_case
@pytest.mark.parametrize("values", [[], (), None, "abc"])
def test_where_in_ignores_empty_or_non_collection(values):
    assert not Conditions().where_in('id', values)


@pytest.mark.edge_case
def test_ignored_predicate_keeps_pending_combinator():
    """The pending OR carries over to the next predicate that is actually added."""
    conditions = Conditions().where('a', 1).or_().where_in('b', []).where('c', 3)

    assert conditions.render() == "a = 1 OR c = 3"


@pytest.mark.edge_case
def test_empty_group_is_skipped():
    conditions = Conditions().where('a', 1).where_group(lambda g: None)

    assert conditions.render() == "a = 1"


@pytest.mark.edge_case
def test_none_operator_means_equality():
    assert Conditions().where('status', None, 'open').render() == "status = 'open'"
