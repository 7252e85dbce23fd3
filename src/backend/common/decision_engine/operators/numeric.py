from __future__ import annotations

from typing import Any

from ..registry import register_operator
from .values import is_number, pair_params


@register_operator("between", family="numeric", phrase="{field} between {expected}")
def between(actual: Any, expected: Any) -> bool:
    """Inclusive range test; operand is [min, max] or {min, max}."""
    if not is_number(actual):
        return False
    bounds = pair_params(expected, "min", "max")
    if bounds is None:
        return False
    low, high = bounds
    if not (is_number(low) and is_number(high)):
        return False
    try:
        return low <= actual <= high
    except TypeError:
        return False


@register_operator("modulo", family="numeric", phrase="{field} modulo {expected}")
def modulo(actual: Any, expected: Any) -> bool:
    """actual % divisor == remainder; operand is [divisor, remainder] or {divisor, remainder}."""
    if not is_number(actual):
        return False
    params = pair_params(expected, "divisor", "remainder")
    if params is None:
        return False
    divisor, remainder = params
    if not (is_number(divisor) and is_number(remainder)) or divisor == 0:
        return False
    try:
        return actual % divisor == remainder
    except TypeError:
        return False
