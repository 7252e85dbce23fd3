"""Value coercion shared by the operator families. Nothing here raises."""

from __future__ import annotations

import math
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, List, Mapping, Optional, Sequence

from ..context import MISSING

_NUMBER_TYPES = (int, float, Decimal)
_ORDERED_TYPES = (int, float, Decimal, str)


def is_number(value: Any) -> bool:
    # bool is an int subclass but never counts as a number here.
    return isinstance(value, _NUMBER_TYPES) and not isinstance(value, bool)


def is_list(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def same_ordered_type(a: Any, b: Any) -> bool:
    """Ordering comparisons only apply between values of one concrete type.

    int vs float is deliberately not comparable.
    """
    return type(a) is type(b) and type(a) in _ORDERED_TYPES


def structurally_equal(a: Any, b: Any) -> bool:
    if a is MISSING:
        a = None
    if b is MISSING:
        b = None
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if is_list(a) and is_list(b):
        return len(a) == len(b) and all(structurally_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        return a.keys() == b.keys() and all(structurally_equal(a[k], b[k]) for k in a)
    try:
        return bool(a == b)
    except Exception:
        return False


def member_of(item: Any, items: Sequence[Any]) -> bool:
    return any(structurally_equal(item, candidate) for candidate in items)


def as_list(value: Any) -> List[Any]:
    if value is None or value is MISSING:
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]


def pick(mapping: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in mapping and mapping[key] is not None:
            return mapping[key]
    return None


def pair_params(value: Any, first: str, second: str) -> Optional[tuple[Any, Any]]:
    """Accept `[a, b]` or `{first: a, second: b}`."""
    if is_list(value) and len(value) == 2:
        return value[0], value[1]
    if isinstance(value, Mapping):
        a, b = pick(value, first), pick(value, second)
        if a is None or b is None:
            return None
        return a, b
    return None


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse a datetime/date/ISO-8601 string; naive values are taken as UTC."""
    if value is None or value is MISSING or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        if s.endswith("Z") or s.endswith("z"):
            s = s[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(s)
        except ValueError:
            parsed = _parse_fallback_formats(s)
            if parsed is None:
                return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_fallback_formats(s: str) -> Optional[datetime]:
    for fmt in ("%Y/%m/%d", "%Y/%m/%d %H:%M:%S", "%Y-%m-%d %H:%M:%S %z", "%d %b %Y", "%b %d %Y", "%B %d, %Y"):
        try:
            return datetime.strptime(s, fmt)
        except ValueError:
            continue
    return None


def parse_coordinates(value: Any) -> Optional[tuple[float, float]]:
    """Return (lat, lon) from a mapping or a two-element pair."""
    if isinstance(value, Mapping):
        lat = pick(value, "lat", "latitude")
        lon = pick(value, "lon", "lng", "long", "longitude")
    elif is_list(value) and len(value) == 2:
        lat, lon = value
    else:
        return None
    if lat is None or lon is None or isinstance(lat, bool) or isinstance(lon, bool):
        return None
    try:
        lat_f, lon_f = float(lat), float(lon)
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(lat_f) and math.isfinite(lon_f)):
        return None
    return lat_f, lon_f
