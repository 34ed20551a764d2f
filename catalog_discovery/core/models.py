"""
Core models and types for catalog layer discovery.

Catalog records are open JSON objects: only a handful of keys are known,
everything else is carried through untouched. The constants below name
the known keys; code works on plain dicts and copies them before
changing them.
"""

from enum import Enum
from typing import Any


# =============================================================================
# Enums
# =============================================================================


class GeometryType(str, Enum):
    POINT = "POINT"
    POLYLINE = "POLYLINE"
    POLYGON = "POLYGON"
    MULTIPATCH = "MULTIPATCH"
    TABLE = "TABLE"
    UNKNOWN = "UNKNOWN"


class ExpansionStatus(str, Enum):
    """What the expansion engine did with one root record."""
    UNCHANGED = "unchanged"  # not a root service, or only group layers
    PINNED = "pinned"        # single-layer service, URL pinned to /<id>
    EXPANDED = "expanded"    # replaced by one record per sublayer
    FAILED = "failed"        # service unreachable or empty, record kept


# =============================================================================
# Catalog records
# =============================================================================

# Sentinel geometry_type for services that mix several geometries
MULTIPLE_GEOMETRY = "multiple"

# Removed from child records once a concrete per-layer geometry is known
GEOMETRY_TYPE_NOTE_FIELD = "geometry_type_note"

# Provenance fields written onto expanded child records
PARENT_SERVICE_FIELD = "_parent_service"
PARENT_DATASET_ID_FIELD = "_parent_dataset_id"
LAYER_ID_FIELD = "_layer_id"
LAYER_NAME_FIELD = "_layer_name"


Record = dict[str, Any]
