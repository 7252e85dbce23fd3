from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..context import is_missing
from ..registry import register_operator
from .values import as_list, member_of, same_ordered_type, structurally_equal


@register_operator("eq", family="comparison", phrase="{field} = {expected}")
def eq(actual: Any, expected: Any) -> bool:
    """Structural equality, any type."""
    return structurally_equal(actual, expected)


@register_operator("neq", family="comparison", phrase="{field} != {expected}")
def neq(actual: Any, expected: Any) -> bool:
    """Structural inequality, any type."""
    return not structurally_equal(actual, expected)


@register_operator("gt", family="comparison", phrase="{field} > {expected}")
def gt(actual: Any, expected: Any) -> bool:
    """Greater than; both sides must share one numeric or string type."""
    return same_ordered_type(actual, expected) and actual > expected


@register_operator("gte", family="comparison", phrase="{field} >= {expected}")
def gte(actual: Any, expected: Any) -> bool:
    """Greater than or equal; both sides must share one numeric or string type."""
    return same_ordered_type(actual, expected) and actual >= expected


@register_operator("lt", family="comparison", phrase="{field} < {expected}")
def lt(actual: Any, expected: Any) -> bool:
    """Less than; both sides must share one numeric or string type."""
    return same_ordered_type(actual, expected) and actual < expected


@register_operator("lte", family="comparison", phrase="{field} <= {expected}")
def lte(actual: Any, expected: Any) -> bool:
    """Less than or equal; both sides must share one numeric or string type."""
    return same_ordered_type(actual, expected) and actual <= expected


@register_operator("in", family="comparison", phrase="{field} in {expected}")
def in_(actual: Any, expected: Any) -> bool:
    """Membership of the value in the operand treated as a list."""
    return member_of(actual, as_list(expected))


def _is_empty(value: Any) -> bool:
    if isinstance(value, (str, bytes, list, tuple, set, frozenset, Mapping)):
        return len(value) == 0
    return False


@register_operator("present", family="comparison", phrase="{field} is present", requires_value=False)
def present(actual: Any, _expected: Any = None) -> bool:
    """Not missing and not empty; zero and false are present."""
    return not is_missing(actual) and not _is_empty(actual)


@register_operator("blank", family="comparison", phrase="{field} is blank", requires_value=False)
def blank(actual: Any, _expected: Any = None) -> bool:
    """Missing, null or empty; zero and false are not blank."""
    return is_missing(actual) or _is_empty(actual)
