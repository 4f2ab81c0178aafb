"""
Tests for the catalog store and its YAML loader.
"""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest
from pydantic import ValidationError

from wingetdeck.core.config.catalog_loader import load_catalog
from wingetdeck.core.data import BUNDLED_CATALOG
from wingetdeck.core.models.package import PackageDescriptor
from wingetdeck.core.services.catalog_store import CatalogError, CatalogStore


class TestCatalogStore:
    def test_all_preserves_order(self, catalog: CatalogStore):
        assert [p.id for p in catalog.all()] == ["Vendor.App", "Git.Git", "Mozilla.Firefox"]

    def test_contains_is_case_insensitive(self, catalog: CatalogStore):
        assert catalog.contains("vendor.app")
        assert catalog.contains("  GIT.GIT ")
        assert not catalog.contains("Unknown.Thing")

    def test_get(self, catalog: CatalogStore):
        pkg = catalog.get("mozilla.firefox")
        assert pkg is not None
        assert pkg.name == "Firefox"
        assert catalog.get("nope") is None

    def test_categories_first_seen_order(self, catalog: CatalogStore):
        assert catalog.categories() == ["Tools", "Development", "Browsers"]

    def test_by_category(self, catalog: CatalogStore):
        assert [p.id for p in catalog.by_category("development")] == ["Git.Git"]

    def test_reconcile_uses_catalog_order_and_casing(self, catalog: CatalogStore):
        installed = {"mozilla.firefox", "vendor.app", "not.in.catalog"}
        assert catalog.reconcile(installed) == ["Vendor.App", "Mozilla.Firefox"]

    def test_reconcile_empty(self, catalog: CatalogStore):
        assert catalog.reconcile(set()) == []

    def test_duplicate_ids_rejected(self):
        with pytest.raises(CatalogError, match="Duplicate"):
            CatalogStore([
                PackageDescriptor(id="A.B", name="One"),
                PackageDescriptor(id="a.b", name="Two"),
            ])

    def test_descriptor_is_immutable(self):
        pkg = PackageDescriptor(id="A.B", name="One")
        with pytest.raises(ValidationError):
            pkg.name = "Changed"  # type: ignore[misc]

    def test_descriptor_requires_id(self):
        with pytest.raises(ValidationError):
            PackageDescriptor(id="   ", name="Blank")


class TestCatalogLoader:
    def test_bundled_catalog_loads(self):
        store = load_catalog()
        assert BUNDLED_CATALOG.is_file()
        assert len(store) > 0
        assert store.contains("Git.Git")

    def test_custom_catalog(self, tmp_path: Path):
        path = tmp_path / "catalog.yml"
        path.write_text(textwrap.dedent("""\
            packages:
              - id: Vendor.App
                name: App
                category: Tools
              - id: Other.Tool
                name: Other
        """))
        store = load_catalog(path)
        assert [p.id for p in store.all()] == ["Vendor.App", "Other.Tool"]
        assert store.get("Other.Tool").category == "Other"

    def test_bare_list_accepted(self, tmp_path: Path):
        path = tmp_path / "catalog.yml"
        path.write_text("- {id: A.B, name: AB}\n")
        assert len(load_catalog(path)) == 1

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(CatalogError, match="Cannot read"):
            load_catalog(tmp_path / "missing.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "catalog.yml"
        path.write_text("packages: [unclosed\n")
        with pytest.raises(CatalogError, match="Invalid YAML"):
            load_catalog(path)

    def test_invalid_entry(self, tmp_path: Path):
        path = tmp_path / "catalog.yml"
        path.write_text("packages:\n  - name: no id here\n")
        with pytest.raises(CatalogError, match="entry #1"):
            load_catalog(path)

    def test_not_a_list(self, tmp_path: Path):
        path = tmp_path / "catalog.yml"
        path.write_text("packages: 3\n")
        with pytest.raises(CatalogError, match="Expected a list"):
            load_catalog(path)
