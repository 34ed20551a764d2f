"""
ArcGIS REST Module - Service URL parsing.

Classifies catalog service URLs without touching the network:

    .../MapServer        -> root service
    .../MapServer/3      -> sublayer 3 of .../MapServer
    https://example.org  -> unrecognized (passed through)

FeatureServer and ImageServer are handled the same way as MapServer.
"""

import re

from catalog_discovery.services.arcgis.models import ServiceUrl

SERVICE_TYPES = ("MapServer", "FeatureServer", "ImageServer")

_SERVICE_TYPE_GROUP = "|".join(SERVICE_TYPES)

_SUBLAYER_RE = re.compile(rf"^(.*/(?:{_SERVICE_TYPE_GROUP}))/(\d+)$", re.IGNORECASE)
_ROOT_RE = re.compile(rf"/(?:{_SERVICE_TYPE_GROUP})$", re.IGNORECASE)


def normalize_service_url(url: str | None) -> str:
    """Trim whitespace and strip trailing slashes."""
    return str(url or "").strip().rstrip("/")


def classify_service_url(url: str | None) -> ServiceUrl:
    """
    Classify a service URL as root service, sublayer or unrecognized.

    Never raises; empty or malformed input is unrecognized.
    """
    normalized = normalize_service_url(url)

    match = _SUBLAYER_RE.match(normalized)
    if match:
        return ServiceUrl(
            is_root=False,
            base_service_url=match.group(1),
            layer_id=int(match.group(2)),
        )

    if _ROOT_RE.search(normalized):
        return ServiceUrl(is_root=True, base_service_url=normalized)

    return ServiceUrl(is_root=False, base_service_url=normalized)


def layer_url(base_service_url: str, layer_id: int) -> str:
    """Build the URL of one sublayer of a service."""
    return f"{normalize_service_url(base_service_url)}/{layer_id}"


def with_pjson(url: str) -> str:
    """Request the pretty-JSON representation of a REST resource."""
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}f=pjson"
