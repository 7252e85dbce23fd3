"""Built-in operators. Importing this package registers every family."""

from . import collection, comparison, enrichment, geospatial, numeric, strings, temporal
from .geospatial import haversine_distance, point_in_polygon

__all__ = [
    "collection",
    "comparison",
    "enrichment",
    "geospatial",
    "numeric",
    "strings",
    "temporal",
    "haversine_distance",
    "point_in_polygon",
]
