"""
Unit tests for ArcGIS service URL classification.
"""

import pytest

from catalog_discovery.services.arcgis.url_parser import (
    classify_service_url,
    layer_url,
    normalize_service_url,
    with_pjson,
)

ROOT = "https://gis.example.gov/arcgis/rest/services/Parks/MapServer"


class TestClassifyServiceUrl:
    """Root / sublayer / unrecognized classification."""

    @pytest.mark.parametrize("service_type", ["MapServer", "FeatureServer", "ImageServer"])
    def test_root_service(self, service_type):
        url = f"https://gis.example.gov/arcgis/rest/services/Parks/{service_type}"
        service = classify_service_url(url)

        assert service.is_root
        assert service.base_service_url == url
        assert service.layer_id is None

    def test_sublayer(self):
        service = classify_service_url(f"{ROOT}/12")

        assert not service.is_root
        assert service.is_sublayer
        assert service.base_service_url == ROOT
        assert service.layer_id == 12

    def test_trailing_slashes_and_whitespace_are_stripped(self):
        assert classify_service_url(f"  {ROOT}//  ").is_root
        assert classify_service_url(f"{ROOT}/3/").layer_id == 3

    def test_case_insensitive(self):
        service = classify_service_url("https://host/rest/services/x/featureserver/0")
        assert service.layer_id == 0
        assert service.base_service_url == "https://host/rest/services/x/featureserver"
        assert classify_service_url("https://host/rest/services/x/MAPSERVER").is_root

    @pytest.mark.parametrize("url", [
        "https://example.org/data.zip",
        "https://host/rest/services/x/MapServer/0/query",
        "https://host/rest/services/x/MapServer?f=pjson",
        "https://host/rest/services/x/WMSServer",
        "",
        None,
    ])
    def test_unrecognized(self, url):
        service = classify_service_url(url)

        assert not service.is_root
        assert service.layer_id is None
        assert not service.is_recognized
        assert service.base_service_url == normalize_service_url(url)


class TestUrlHelpers:

    def test_layer_url(self):
        assert layer_url(f"{ROOT}/", 4) == f"{ROOT}/4"

    def test_with_pjson_appends_query(self):
        assert with_pjson(ROOT) == f"{ROOT}?f=pjson"

    def test_with_pjson_extends_existing_query(self):
        assert with_pjson(f"{ROOT}?token=abc") == f"{ROOT}?token=abc&f=pjson"
