"""
Unit tests for the discover job (partition, expand, reconcile, summarize).
"""

import pytest

from catalog_discovery.jobs.discover_job import partition_catalog, run_discovery
from tests.conftest import BASE

pytestmark = pytest.mark.asyncio

OTHER = "https://gis.example.gov/arcgis/rest/services/Roads/FeatureServer"


@pytest.fixture
def catalog(parks_record):
    return [
        {"id": "zoning", "public_web_service": "https://gis.example.gov/arcgis/rest/services/Zoning/MapServer/2"},
        parks_record,
        {"id": "download", "public_web_service": "https://example.org/data.zip"},
        {"id": "roads", "title": "Roads", "public_web_service": OTHER},
        {"id": "no_url", "title": "Paper map"},
    ]


@pytest.fixture
def routes(parks_service):
    return parks_service(**{
        OTHER: {"layers": [{"id": 0, "name": "Centerlines"}]},
        f"{OTHER}/0": {"geometryType": "esriGeometryPolyline"},
    })


class TestPartitionCatalog:

    async def test_partition(self, catalog):
        passthrough, to_process = partition_catalog(catalog)

        assert [r["id"] for r in passthrough] == ["zoning", "download", "no_url"]
        assert [r["id"] for r in to_process] == ["parks", "roads"]

    async def test_only_ids(self, catalog):
        passthrough, to_process = partition_catalog(catalog, only_ids={"roads"})

        assert [r["id"] for r in to_process] == ["roads"]
        assert len(passthrough) == 4


class TestRunDiscovery:

    async def test_expands_and_preserves_order(self, catalog, server, routes, settings, http_client):
        server.routes.update(routes)

        report = await run_discovery(catalog, settings, http_client=http_client)

        assert [r["id"] for r in report.records] == [
            "zoning",
            "parks_park_boundaries",
            "parks_park_points",
            "download",
            "roads",
            "no_url",
        ]
        roads = report.records[4]
        assert roads["public_web_service"] == f"{OTHER}/0"
        assert roads["geometry_type"] == "POLYLINE"
        assert report.warnings == []

    async def test_summary(self, catalog, server, routes, settings, http_client):
        server.routes.update(routes)

        report = await run_discovery(catalog, settings, http_client=http_client)
        summary = report.summary

        assert summary.before == 5
        assert summary.after == 6
        assert summary.added_ids == ["parks_park_boundaries", "parks_park_points"]
        assert summary.removed_ids == ["parks"]
        assert (summary.expanded, summary.pinned, summary.failed) == (1, 1, 0)
        assert [e["id"] for e in report.new_entries] == summary.added_ids

    async def test_second_run_is_idempotent(self, catalog, server, routes, settings, http_client):
        server.routes.update(routes)

        first = await run_discovery(catalog, settings, http_client=http_client)
        request_count = len(server.requests)
        second = await run_discovery(first.records, settings, http_client=http_client)

        assert second.records == first.records
        assert second.nothing_to_do
        assert len(server.requests) == request_count
        assert second.summary.added_ids == []
        assert second.summary.removed_ids == []

    async def test_input_is_not_mutated(self, catalog, server, routes, settings, http_client):
        server.routes.update(routes)
        snapshot = [dict(r) for r in catalog]

        await run_discovery(catalog, settings, http_client=http_client)

        assert catalog == snapshot

    async def test_total_failure_keeps_records(self, catalog, server, settings, http_client):
        # no routes: every request is a 404
        report = await run_discovery(catalog, settings, http_client=http_client)

        assert report.records == catalog
        assert report.summary.failed == 2
        assert report.summary.added_ids == []
        assert report.summary.removed_ids == []
        assert len(report.warnings) == 2

    async def test_duplicates_are_reported(self, catalog, server, routes, settings, http_client):
        server.routes.update(routes)
        catalog.insert(0, {"id": "parks_park_points", "public_web_service": f"{BASE}/1"})

        report = await run_discovery(catalog, settings, http_client=http_client)

        ids = [r["id"] for r in report.records]
        assert ids.count("parks_park_points") == 1
        assert ids[0] == "parks_park_points"
        assert report.summary.duplicate_ids == ["parks_park_points"]
        assert any("Duplicate id" in w for w in report.warnings)

    async def test_only_ids_limits_network_access(self, catalog, server, routes, settings, http_client):
        server.routes.update(routes)

        report = await run_discovery(catalog, settings, http_client=http_client, only_ids={"roads"})

        assert "parks" in [r["id"] for r in report.records]
        assert server.hits(BASE) == 0
        assert report.summary.pinned == 1

    async def test_unparseable_url_keeps_record(self, catalog, server, routes, settings, http_client):
        server.routes.update(routes)
        bad = {"id": "bad_host", "public_web_service": "http://[::1/arcgis/rest/services/X/MapServer"}
        catalog.insert(0, bad)

        report = await run_discovery(catalog, settings, http_client=http_client)

        assert report.records[0] == bad
        assert "parks_park_points" in [r["id"] for r in report.records]
        assert report.summary.failed == 1
        assert any(w.startswith("bad_host:") for w in report.warnings)

    async def test_sublayer_record_sharing_root_id_is_kept(self, catalog, server, routes, settings, http_client):
        server.routes.update(routes)
        pinned = {"id": "parks", "public_web_service": f"{BASE}/0"}
        catalog.insert(0, pinned)

        report = await run_discovery(catalog, settings, http_client=http_client)

        assert report.records[0] is pinned
        assert [r["id"] for r in report.records[1:4]] == ["zoning", "parks_park_boundaries", "parks_park_points"]
        assert report.summary.duplicate_ids == []
