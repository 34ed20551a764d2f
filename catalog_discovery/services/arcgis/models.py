"""
ArcGIS REST Module - Data Models.

Only the handful of fields discovery reads are modelled; everything else in
the pjson responses is ignored.
"""

from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


@dataclass(frozen=True)
class ServiceUrl:
    """Classification of a catalog service URL."""
    is_root: bool
    base_service_url: str
    layer_id: Optional[int] = None  # set only for sublayer URLs

    @property
    def is_sublayer(self) -> bool:
        return self.layer_id is not None

    @property
    def is_recognized(self) -> bool:
        """True for root services and sublayers, False for pass-through URLs."""
        return self.is_root or self.is_sublayer


class LayerDescriptor(BaseModel):
    """One entry of a service's `layers` or `tables` listing."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int = 0
    name: Optional[str] = None
    geometry_type: Optional[str] = Field(default=None, alias="geometryType")
    sub_layer_ids: Optional[list[int]] = Field(default=None, alias="subLayerIds")

    @field_validator("id", mode="before")
    @classmethod
    def _null_id_is_zero(cls, v: Any) -> Any:
        return 0 if v is None else v

    @property
    def is_group_layer(self) -> bool:
        """Group layers only contain other layers and have no geometry."""
        return bool(self.sub_layer_ids)

    @property
    def display_name(self) -> str:
        return self.name or f"Layer {self.id}"


class ServiceInfo(BaseModel):
    """Root service descriptor, with tables appended to the layer list."""

    service_name: str = ""
    service_description: str = ""
    spatial_reference: Any = None  # passed through unexamined
    layers: list[LayerDescriptor] = Field(default_factory=list)
    # listing entries that could not be parsed, one note per entry
    skipped_entries: list[str] = Field(default_factory=list)


class LayerMetadata(BaseModel):
    """Per-layer metadata from `<service>/<layerId>?f=pjson`."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: Optional[str] = None
    geometry_type: Optional[str] = Field(default=None, alias="geometryType")
    description: Optional[str] = None
