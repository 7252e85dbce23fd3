from __future__ import annotations

from typing import Any

from ..registry import register_operator
from .values import is_list, member_of


@register_operator("contains_all", family="collection", phrase="{field} contains all of {expected}")
def contains_all(actual: Any, expected: Any) -> bool:
    """Every operand element is in the value list."""
    if not (is_list(actual) and is_list(expected)):
        return False
    return all(member_of(item, actual) for item in expected)


@register_operator("contains_any", family="collection", phrase="{field} contains any of {expected}")
def contains_any(actual: Any, expected: Any) -> bool:
    """At least one operand element is in the value list."""
    if not (is_list(actual) and is_list(expected)):
        return False
    return any(member_of(item, actual) for item in expected)


@register_operator("intersects", family="collection", phrase="{field} intersects {expected}")
def intersects(actual: Any, expected: Any) -> bool:
    """The two lists share at least one element."""
    if not (is_list(actual) and is_list(expected)):
        return False
    return any(member_of(item, expected) for item in actual)


@register_operator("subset_of", family="collection", phrase="{field} is a subset of {expected}")
def subset_of(actual: Any, expected: Any) -> bool:
    """Every element of the value list is in the operand list."""
    if not (is_list(actual) and is_list(expected)):
        return False
    return all(member_of(item, expected) for item in actual)
