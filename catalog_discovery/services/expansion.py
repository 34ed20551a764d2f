"""
Expansion Engine.

Turns one catalog record that points at a root ArcGIS service into the
records that should replace it:

1. No URL, or URL already pinned to a sublayer / not an ArcGIS service:
   record is returned unchanged.
2. Service unreachable or without layers: record is kept, with a warning.
3. Exactly one layer: URL pinned to <service>/<layerId>, geometry filled in
   when the record has none (or the "multiple" sentinel).
4. Several layers: one child record per non-group layer, in listing order.
   Unparseable listing entries are skipped with a warning and still count
   towards the layer total.
"""

import re
from dataclasses import dataclass, field

import structlog

from catalog_discovery.core.models import (
    GEOMETRY_TYPE_NOTE_FIELD,
    LAYER_ID_FIELD,
    LAYER_NAME_FIELD,
    MULTIPLE_GEOMETRY,
    PARENT_DATASET_ID_FIELD,
    PARENT_SERVICE_FIELD,
    ExpansionStatus,
    Record,
)
from catalog_discovery.services.arcgis.client import ArcGISServiceClient
from catalog_discovery.services.arcgis.models import LayerDescriptor, ServiceUrl
from catalog_discovery.services.arcgis.url_parser import classify_service_url, layer_url
from catalog_discovery.services.geometry import normalize_geometry_type

logger = structlog.get_logger()


def slugify(name: str) -> str:
    """Generate an id-safe slug: lowercase, non-alphanumeric runs as '_'."""
    slug = str(name or "").lower()
    slug = re.sub(r"[^a-z0-9]+", "_", slug)
    return slug.strip("_")


def child_id(parent_id: str, layer: LayerDescriptor) -> str:
    """Id of the record expanded from one layer of the parent's service."""
    suffix = slugify(layer.display_name) or f"layer_{layer.id}"
    return f"{parent_id}_{suffix}"


@dataclass
class ExpansionResult:
    """Records that replace one root record, plus what went wrong on the way."""
    parent_id: str
    records: list[Record]
    status: ExpansionStatus = ExpansionStatus.UNCHANGED
    warnings: list[str] = field(default_factory=list)


class ExpansionEngine:
    """
    Expands root service records into per-sublayer records.

    Never raises on remote failures: every failure path keeps the original
    record so a transient outage cannot drop catalog coverage.
    """

    def __init__(self, client: ArcGISServiceClient):
        self.client = client
        self.log = logger.bind(component="ExpansionEngine")

    async def expand(self, record: Record) -> ExpansionResult:
        """
        Expand one catalog record.

        Args:
            record: Catalog record; never modified in place

        Returns:
            ExpansionResult with at least one record
        """
        parent_id = str(record.get("id", ""))
        url = record.get("public_web_service")
        if not url:
            return ExpansionResult(parent_id=parent_id, records=[record])

        service = classify_service_url(url)
        if not service.is_root:
            return ExpansionResult(parent_id=parent_id, records=[record])

        log = self.log.bind(dataset_id=parent_id, service=service.base_service_url)
        log.info("Discovering layers")

        info = await self.client.fetch_service_info(service.base_service_url)
        skipped = [
            f"{parent_id}: skipped malformed layer entry {note}"
            for note in (info.skipped_entries if info else [])
        ]
        if info is None or not info.layers:
            message = f"{parent_id}: could not discover layers (unreachable or empty), keeping original entry"
            log.warning("Could not discover layers, keeping original entry", reachable=info is not None)
            return ExpansionResult(
                parent_id=parent_id,
                records=[record],
                status=ExpansionStatus.FAILED,
                warnings=[*skipped, message],
            )

        log.info("Found layers", count=len(info.layers), skipped=len(skipped))

        # a listing with unparseable entries is multi-layer even if one entry survived
        if len(info.layers) == 1 and not skipped:
            result = await self._pin_single_layer(record, service, info.layers[0])
        else:
            result = await self._expand_layers(record, service, info.layers)

        result.warnings[:0] = skipped
        return result

    async def _pin_single_layer(
        self,
        record: Record,
        service: ServiceUrl,
        layer: LayerDescriptor,
    ) -> ExpansionResult:
        """Point a single-layer service record at its only layer."""
        parent_id = str(record.get("id", ""))
        log = self.log.bind(dataset_id=parent_id, layer_id=layer.id)

        updated = dict(record)
        updated["public_web_service"] = layer_url(service.base_service_url, layer.id)
        result = ExpansionResult(parent_id=parent_id, records=[updated], status=ExpansionStatus.PINNED)

        metadata = await self.client.fetch_layer_metadata(service.base_service_url, layer.id)
        if metadata is None:
            log.warning("Layer metadata unavailable, geometry left as declared")
            result.warnings.append(
                f"{parent_id}: metadata for layer {layer.id} unavailable, geometry left as declared"
            )
        elif not updated.get("geometry_type") or updated.get("geometry_type") == MULTIPLE_GEOMETRY:
            updated["geometry_type"] = normalize_geometry_type(metadata.geometry_type)

        log.info("Single layer, pinned", url=updated["public_web_service"])
        return result

    async def _expand_layers(
        self,
        record: Record,
        service: ServiceUrl,
        layers: list[LayerDescriptor],
    ) -> ExpansionResult:
        """Replace a multi-layer service record with one record per layer."""
        parent_id = str(record.get("id", ""))
        result = ExpansionResult(parent_id=parent_id, records=[], status=ExpansionStatus.EXPANDED)

        for layer in layers:
            log = self.log.bind(dataset_id=parent_id, layer_id=layer.id, layer_name=layer.display_name)

            if layer.is_group_layer:
                log.info("Skipping group layer")
                continue

            metadata = await self.client.fetch_layer_metadata(service.base_service_url, layer.id)
            if metadata is not None:
                geometry = normalize_geometry_type(metadata.geometry_type)
            else:
                geometry = normalize_geometry_type(layer.geometry_type)
                log.warning("Layer metadata unavailable, using listing geometry", geometry=geometry)
                result.warnings.append(
                    f"{parent_id}: metadata for layer {layer.id} ({layer.display_name}) "
                    f"unavailable, using listing geometry {geometry}"
                )

            child = self._build_child(record, service, layer, geometry, metadata.description if metadata else None)
            result.records.append(child)
            log.info("Expanded layer", child_id=child["id"], geometry=geometry)

        if not result.records:
            self.log.warning("All layers were group layers, keeping original entry", dataset_id=parent_id)
            return ExpansionResult(
                parent_id=parent_id,
                records=[record],
                status=ExpansionStatus.UNCHANGED,
                warnings=[
                    *result.warnings,
                    f"{parent_id}: all layers were group layers, keeping original entry",
                ],
            )

        return result

    def _build_child(
        self,
        record: Record,
        service: ServiceUrl,
        layer: LayerDescriptor,
        geometry: str,
        layer_description: str | None,
    ) -> Record:
        parent_id = str(record.get("id", ""))
        name = layer.display_name

        if layer_description:
            description = layer_description
        else:
            description = f"{record.get('description') or ''} (sublayer: {name})".strip()

        child = dict(record)
        child.update({
            "id": child_id(parent_id, layer),
            "title": f"{record.get('title') or ''} – {name}",
            "description": description,
            "geometry_type": geometry,
            "public_web_service": layer_url(service.base_service_url, layer.id),
            PARENT_SERVICE_FIELD: service.base_service_url,
            PARENT_DATASET_ID_FIELD: parent_id,
            LAYER_ID_FIELD: layer.id,
            LAYER_NAME_FIELD: name,
        })
        child.pop(GEOMETRY_TYPE_NOTE_FIELD, None)
        return child
