"""
ArcGIS REST Module - Service client.

Async client for the two ArcGIS REST resources discovery needs: the root
service descriptor (layer listing) and per-layer metadata. Every failure
(timeout, transport error, non-2xx status, non-JSON body, ArcGIS error
envelope, unparseable URL) is soft and comes back as None.
"""

import asyncio
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from catalog_discovery.core.config import DiscoverySettings, get_settings
from catalog_discovery.services.arcgis.models import (
    LayerDescriptor,
    LayerMetadata,
    ServiceInfo,
)
from catalog_discovery.services.arcgis.url_parser import (
    layer_url,
    normalize_service_url,
    with_pjson,
)
from catalog_discovery.services.retry_utils import retry_until_result

logger = structlog.get_logger()


class ArcGISServiceClient:
    """
    Async client for ArcGIS REST service and layer descriptors.

    Each request attempt is bounded by settings.request_timeout and
    cancelled when it runs over, so one hung server cannot stall a batch.
    Failed attempts are retried settings.retry_count times with a linear
    backoff.

    Usage:
        async with ArcGISServiceClient(settings) as client:
            info = await client.fetch_service_info(".../MapServer")
    """

    def __init__(
        self,
        settings: DiscoverySettings | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the client.

        Args:
            settings: Timeout / retry / user agent configuration
            client: Shared httpx client; one is created (and closed) if omitted
        """
        self.settings = settings or get_settings()
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=self.settings.request_timeout,
            follow_redirects=True,
        )
        self.headers = {
            "User-Agent": self.settings.user_agent,
            "Accept": "application/json",
        }
        self.log = logger.bind(component="ArcGISServiceClient")

    async def __aenter__(self) -> "ArcGISServiceClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def fetch_json(self, url: str) -> dict[str, Any] | None:
        """
        Fetch one pjson document in a single attempt.

        Returns:
            Parsed JSON object, or None on any failure
        """
        request_url = with_pjson(url)
        log = self.log.bind(url=request_url)

        try:
            response = await asyncio.wait_for(
                self.client.get(request_url, headers=self.headers),
                timeout=self.settings.request_timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (asyncio.TimeoutError, httpx.TimeoutException):
            log.debug("Request timeout", timeout=self.settings.request_timeout)
            return None
        except httpx.HTTPStatusError as e:
            log.debug("HTTP error", status=e.response.status_code)
            return None
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            # InvalidURL is raised while building the request, outside HTTPError
            log.debug("Request failed", error=str(e) or type(e).__name__)
            return None
        except ValueError as e:
            log.debug("Response is not JSON", error=str(e))
            return None

        if not isinstance(data, dict):
            log.debug("Unexpected JSON payload", payload_type=type(data).__name__)
            return None

        # ArcGIS reports many failures (bad token, missing layer) with HTTP 200
        if "error" in data:
            log.debug("ArcGIS error response", error=data["error"])
            return None

        return data

    async def _fetch_with_retries(self, url: str) -> dict[str, Any] | None:
        return await retry_until_result(
            self.fetch_json,
            url,
            max_attempts=self.settings.max_attempts,
            backoff_step=self.settings.retry_backoff,
            label=url,
        )

    async def fetch_service_info(self, base_url: str) -> ServiceInfo | None:
        """
        Fetch the root service descriptor and its layer/table listing.

        Args:
            base_url: Root service URL (.../MapServer)

        Returns:
            ServiceInfo with tables appended to layers, or None if unreachable
        """
        base = normalize_service_url(base_url)
        data = await self._fetch_with_retries(base)
        if data is None:
            return None

        layers: list[LayerDescriptor] = []
        skipped: list[str] = []
        for entry in [*(data.get("layers") or []), *(data.get("tables") or [])]:
            try:
                layers.append(LayerDescriptor.model_validate(entry))
            except ValidationError as e:
                error = "; ".join(err["msg"] for err in e.errors())
                self.log.warning(
                    "Skipping malformed layer entry",
                    url=base,
                    entry=str(entry)[:200],
                    error=error,
                )
                skipped.append(f"{str(entry)[:80]} ({error})")

        return ServiceInfo(
            service_name=data.get("mapName") or data.get("name") or data.get("serviceDescription") or "",
            service_description=data.get("serviceDescription") or data.get("description") or "",
            spatial_reference=data.get("spatialReference"),
            layers=layers,
            skipped_entries=skipped,
        )

    async def fetch_layer_metadata(self, base_url: str, layer_id: int) -> LayerMetadata | None:
        """
        Fetch geometry type and description of one layer.

        Args:
            base_url: Root service URL (.../MapServer)
            layer_id: Numeric sublayer id

        Returns:
            LayerMetadata, or None if unreachable or malformed
        """
        url = layer_url(base_url, layer_id)
        data = await self._fetch_with_retries(url)
        if data is None:
            return None

        try:
            return LayerMetadata.model_validate(data)
        except ValidationError as e:
            self.log.warning("Malformed layer metadata", url=url, error=str(e).splitlines()[0])
            return None
