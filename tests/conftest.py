"""
Pytest configuration and fixtures for catalog discovery tests.
"""

from collections.abc import AsyncGenerator, Callable
from typing import Any

import httpx
import pytest
import pytest_asyncio

from catalog_discovery.core.config import DiscoverySettings
from catalog_discovery.services.arcgis.client import ArcGISServiceClient

BASE = "https://gis.example.gov/arcgis/rest/services/Parks/MapServer"


class FakeArcGISServer:
    """
    In-memory ArcGIS REST server for httpx.MockTransport.

    Routes are keyed by URL without query string. A route value is either
    a JSON-serializable payload, an int (HTTP status to return), or an
    exception instance to raise. A list value is consumed one item per
    request (the last item repeats).
    """

    def __init__(self, routes: dict[str, Any] | None = None):
        self.routes: dict[str, Any] = dict(routes or {})
        self.requests: list[httpx.Request] = []

    @staticmethod
    def route_key(request: httpx.Request) -> str:
        return f"{request.url.scheme}://{request.url.host}{request.url.path}"

    def hits(self, url: str) -> int:
        return sum(1 for r in self.requests if self.route_key(r) == url)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = self.route_key(request)
        if key not in self.routes:
            return httpx.Response(404, json={"error": {"code": 404}})

        value = self.routes[key]
        if isinstance(value, list):
            value = value.pop(0) if len(value) > 1 else value[0]

        if isinstance(value, Exception):
            raise value
        if isinstance(value, int):
            return httpx.Response(value, text="")
        if isinstance(value, str):
            return httpx.Response(200, text=value)
        return httpx.Response(200, json=value)


@pytest.fixture
def settings() -> DiscoverySettings:
    """Settings without backoff or pacing delays."""
    return DiscoverySettings(
        request_timeout=2.0,
        retry_count=2,
        retry_backoff=0.0,
        batch_delay=0.0,
        concurrency=4,
    )


@pytest.fixture
def server() -> FakeArcGISServer:
    return FakeArcGISServer()


@pytest_asyncio.fixture
async def http_client(server: FakeArcGISServer) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(server.handler)) as client:
        yield client


@pytest_asyncio.fixture
async def arcgis_client(
    settings: DiscoverySettings,
    http_client: httpx.AsyncClient,
) -> AsyncGenerator[ArcGISServiceClient, None]:
    async with ArcGISServiceClient(settings, client=http_client) as client:
        yield client


@pytest.fixture
def parks_service() -> Callable[..., dict[str, Any]]:
    """Routes for a two-layer Parks service, extendable per test."""

    def _build(**extra: Any) -> dict[str, Any]:
        routes: dict[str, Any] = {
            BASE: {
                "mapName": "Parks",
                "spatialReference": {"wkid": 102100},
                "layers": [
                    {"id": 0, "name": "Park Boundaries", "geometryType": "esriGeometryPolygon"},
                    {"id": 1, "name": "Park Points", "geometryType": "esriGeometryPoint"},
                ],
            },
            f"{BASE}/0": {"name": "Park Boundaries", "geometryType": "esriGeometryPolygon"},
            f"{BASE}/1": {"name": "Park Points", "geometryType": "esriGeometryPoint"},
        }
        routes.update(extra)
        return routes

    return _build


@pytest.fixture
def parks_record() -> dict[str, Any]:
    return {
        "id": "parks",
        "title": "Parks",
        "description": "City parks",
        "geometry_type": "multiple",
        "geometry_type_note": "Polygons and points",
        "public_web_service": BASE,
        "agency": "Parks & Recreation",
    }
