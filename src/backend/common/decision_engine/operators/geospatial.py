from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, List, Optional, Sequence, Tuple

from ..registry import register_operator
from .values import is_list, is_number, parse_coordinates, pick

EARTH_RADIUS_KM = 6371.0

Point = Tuple[float, float]


def haversine_distance(a: Point, b: Point) -> float:
    """Great-circle distance in kilometres between two (lat, lon) points."""
    lat1, lon1 = map(math.radians, a)
    lat2, lon2 = map(math.radians, b)
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def point_in_polygon(point: Point, polygon: Sequence[Point]) -> bool:
    """Ray-casting test; polygons with fewer than three vertices contain nothing."""
    if len(polygon) < 3:
        return False
    y, x = point
    inside = False
    j = len(polygon) - 1
    for i in range(len(polygon)):
        yi, xi = polygon[i]
        yj, xj = polygon[j]
        if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
            inside = not inside
        j = i
    return inside


def _parse_radius_params(value: Any) -> Optional[Tuple[Point, float]]:
    if not isinstance(value, Mapping):
        return None
    center = parse_coordinates(value.get("center"))
    radius = pick(value, "radius_km", "radius")
    if center is None or not is_number(radius) or radius < 0:
        return None
    return center, float(radius)


def _parse_polygon(value: Any) -> Optional[List[Point]]:
    if not is_list(value):
        return None
    vertices = [parse_coordinates(vertex) for vertex in value]
    if any(v is None for v in vertices):
        return None
    return vertices  # type: ignore[return-value]


@register_operator("within_radius", family="geospatial", phrase="{field} is within radius {expected}")
def within_radius(actual: Any, expected: Any) -> bool:
    """Haversine distance to {center, radius_km} is at most the radius."""
    point = parse_coordinates(actual)
    params = _parse_radius_params(expected)
    if point is None or params is None:
        return False
    center, radius_km = params
    return haversine_distance(point, center) <= radius_km


@register_operator("in_polygon", family="geospatial", phrase="{field} is inside polygon {expected}")
def in_polygon(actual: Any, expected: Any) -> bool:
    """Point-in-polygon by ray casting over at least three vertices."""
    point = parse_coordinates(actual)
    polygon = _parse_polygon(expected)
    if point is None or polygon is None:
        return False
    return point_in_polygon(point, polygon)
