"""
Geometry type normalization.

Maps Esri geometry type strings (esriGeometryPolygon, esriGeometryPoint, ...)
onto the catalog's vocabulary. Matching is by case-insensitive substring in
a fixed priority order (POLYGON, line-like, POINT, MULTIPATCH, TABLE) since
some provider strings contain more than one keyword.
"""

from typing import Any

from catalog_discovery.core.models import GeometryType

# Checked in order; first match wins
_SUBSTRING_RULES: list[tuple[tuple[str, ...], GeometryType]] = [
    (("POLYGON",), GeometryType.POLYGON),
    (("POLYLINE", "LINE"), GeometryType.POLYLINE),
    (("POINT",), GeometryType.POINT),
    (("MULTIPATCH",), GeometryType.MULTIPATCH),
    (("TABLE",), GeometryType.TABLE),
]


def normalize_geometry_type(raw: Any) -> str:
    """
    Normalize a provider geometry type string.

    Examples:
        esriGeometryPolygon -> POLYGON
        esriGeometryMultipoint -> POINT
        "" / None -> TABLE (listing entries without geometry are tables)
        esriGeometryWeird -> ESRIGEOMETRYWEIRD

    Returns:
        A GeometryType value, or the uppercased input when nothing matches
    """
    if raw is None:
        return GeometryType.TABLE.value
    if not isinstance(raw, str):
        return GeometryType.UNKNOWN.value

    value = raw.strip().upper()
    if not value:
        return GeometryType.TABLE.value

    for needles, geometry in _SUBSTRING_RULES:
        if any(needle in value for needle in needles):
            return geometry.value

    return value
