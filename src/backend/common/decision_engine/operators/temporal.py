from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from ..registry import register_operator
from .values import is_number, parse_datetime

_SECONDS_PER_DAY = 86_400

# Sunday=0 numbering.
_WEEKDAYS = {
    "sunday": 0, "sun": 0,
    "monday": 1, "mon": 1,
    "tuesday": 2, "tue": 2,
    "wednesday": 3, "wed": 3,
    "thursday": 4, "thu": 4,
    "friday": 5, "fri": 5,
    "saturday": 6, "sat": 6,
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


@register_operator("before_date", family="temporal", phrase="{field} is before {expected}")
def before_date(actual: Any, expected: Any) -> bool:
    """Strictly earlier than the operand date."""
    a, b = parse_datetime(actual), parse_datetime(expected)
    return a is not None and b is not None and a < b


@register_operator("after_date", family="temporal", phrase="{field} is after {expected}")
def after_date(actual: Any, expected: Any) -> bool:
    """Strictly later than the operand date."""
    a, b = parse_datetime(actual), parse_datetime(expected)
    return a is not None and b is not None and a > b


@register_operator("within_days", family="temporal", phrase="{field} is within {expected} days of now")
def within_days(actual: Any, expected: Any) -> bool:
    """Within N days of now, in the past or the future."""
    if not is_number(expected):
        return False
    moment = parse_datetime(actual)
    if moment is None:
        return False
    diff_days = abs((moment - _now()).total_seconds()) / _SECONDS_PER_DAY
    return diff_days <= float(expected)


def normalize_weekday(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if is_number(value):
        # 1.0 from YAML or JSON counts as 1; fractions truncate.
        try:
            return int(value) % 7
        except (ValueError, OverflowError):
            return None
    if isinstance(value, str):
        return _WEEKDAYS.get(value.strip().lower())
    return None


@register_operator("day_of_week", family="temporal", phrase="{field} falls on {expected}")
def day_of_week(actual: Any, expected: Any) -> bool:
    """Weekday name (case-insensitive) or 0-6 with Sunday=0."""
    moment = parse_datetime(actual)
    if moment is None:
        return False
    wanted = normalize_weekday(expected)
    if wanted is None:
        return False
    # datetime.weekday() counts from Monday=0.
    return (moment.weekday() + 1) % 7 == wanted
