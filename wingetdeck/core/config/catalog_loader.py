"""
Catalog loader — reads the package catalog from YAML.

The bundled catalog lives in ``wingetdeck/core/data/catalog.yml``; a
different one can be configured with the ``catalog`` setting.
Expected structure::

    packages:
      - id: Git.Git
        name: Git
        category: Development
        description: Distributed version control.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from wingetdeck.core.data import BUNDLED_CATALOG
from wingetdeck.core.models.package import PackageDescriptor
from wingetdeck.core.services.catalog_store import CatalogError, CatalogStore

logger = logging.getLogger(__name__)


def load_catalog(path: Path | None = None) -> CatalogStore:
    """Load and validate a catalog definition.

    Args:
        path: Catalog YAML file. Defaults to the bundled catalog.

    Raises:
        CatalogError: The file is missing, not YAML, or has invalid entries.
    """
    path = path or BUNDLED_CATALOG

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise CatalogError(f"Cannot read catalog {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise CatalogError(f"Invalid YAML in {path}: {e}") from e

    # Accept either {packages: [...]} or a bare list
    entries = data.get("packages") if isinstance(data, dict) else data
    if not isinstance(entries, list):
        raise CatalogError(f"Expected a list of packages in {path}")

    packages = []
    for index, entry in enumerate(entries):
        try:
            packages.append(PackageDescriptor.model_validate(entry))
        except ValidationError as e:
            raise CatalogError(f"Invalid catalog entry #{index + 1} in {path}: {e}") from e

    store = CatalogStore(packages)
    logger.info("Loaded catalog with %d packages from %s", len(store), path)
    return store
