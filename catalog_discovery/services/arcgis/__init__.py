"""
ArcGIS REST Module for catalog layer discovery.

Components:
- classify_service_url: root service / sublayer / unrecognized URL
- ArcGISServiceClient: service listing and per-layer metadata fetches

Usage:
    from catalog_discovery.services.arcgis import ArcGISServiceClient, classify_service_url

    service = classify_service_url(".../MapServer")
    async with ArcGISServiceClient() as client:
        info = await client.fetch_service_info(service.base_service_url)
"""

from catalog_discovery.services.arcgis.client import ArcGISServiceClient
from catalog_discovery.services.arcgis.models import (
    LayerDescriptor,
    LayerMetadata,
    ServiceInfo,
    ServiceUrl,
)
from catalog_discovery.services.arcgis.url_parser import (
    classify_service_url,
    layer_url,
    normalize_service_url,
    with_pjson,
)

__all__ = [
    # Client
    "ArcGISServiceClient",

    # URL parsing
    "classify_service_url",
    "layer_url",
    "normalize_service_url",
    "with_pjson",

    # Data models
    "LayerDescriptor",
    "LayerMetadata",
    "ServiceInfo",
    "ServiceUrl",
]
