"""
Bundled data files shipped with the package.

``catalog.yml`` is the default package catalog, used when no
``catalog`` setting points elsewhere.
"""

from __future__ import annotations

from pathlib import Path

_DATA_DIR = Path(__file__).parent

BUNDLED_CATALOG = _DATA_DIR / "catalog.yml"
