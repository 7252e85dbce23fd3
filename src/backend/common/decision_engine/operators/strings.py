from __future__ import annotations

import re
from typing import Any

from ..registry import register_operator


def _both_strings(actual: Any, expected: Any) -> bool:
    return isinstance(actual, str) and isinstance(expected, str)


@register_operator("contains", family="string", phrase="{field} contains {expected}")
def contains(actual: Any, expected: Any) -> bool:
    """Case-sensitive substring test."""
    return _both_strings(actual, expected) and expected in actual


@register_operator("starts_with", family="string", phrase="{field} starts with {expected}")
def starts_with(actual: Any, expected: Any) -> bool:
    """Case-sensitive prefix test."""
    return _both_strings(actual, expected) and actual.startswith(expected)


@register_operator("ends_with", family="string", phrase="{field} ends with {expected}")
def ends_with(actual: Any, expected: Any) -> bool:
    """Case-sensitive suffix test."""
    return _both_strings(actual, expected) and actual.endswith(expected)


@register_operator("matches", family="string", phrase="{field} matches {expected}")
def matches(actual: Any, expected: Any) -> bool:
    """Regular expression search; an invalid pattern never matches."""
    if not isinstance(actual, str) or expected is None:
        return False
    if isinstance(expected, re.Pattern):
        pattern = expected
    else:
        if not isinstance(expected, str):
            return False
        try:
            pattern = re.compile(expected)
        except re.error:
            return False
    return pattern.search(actual) is not None
