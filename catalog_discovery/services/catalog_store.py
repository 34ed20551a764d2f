"""
Catalog file I/O.

The catalog is a JSON object with a top-level `datasets` array. Reading is
the only step of a run that can fail hard; writes replace the file
atomically.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any

import structlog

logger = structlog.get_logger()


class CatalogError(Exception):
    """Catalog file is missing, unreadable or not a catalog.

    Raised before any discovery work starts; aborts the run.
    """

    pass


def load_catalog(path: str | Path) -> dict[str, Any]:
    """Read and validate a catalog document."""
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise CatalogError(f"Cannot read catalog {path}: {e}") from e

    try:
        catalog = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CatalogError(f"Catalog {path} is not valid JSON: {e}") from e

    if not isinstance(catalog, dict):
        raise CatalogError(f"Catalog {path} must be a JSON object")

    datasets = catalog.setdefault("datasets", [])
    if not isinstance(datasets, list):
        raise CatalogError(f"Catalog {path}: 'datasets' must be an array")

    logger.info("Loaded catalog", path=str(path), datasets=len(datasets))
    return catalog


def write_catalog(path: str | Path, catalog: dict[str, Any]) -> None:
    """Write the catalog (2-space indent, trailing newline) atomically."""
    path = Path(path)
    output = json.dumps(catalog, indent=2, ensure_ascii=False) + "\n"

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(output)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.info("Wrote catalog", path=str(path), datasets=len(catalog.get("datasets", [])))
