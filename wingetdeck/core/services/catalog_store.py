"""
Catalog store — the immutable table of packages the operator can pick.

Populated once at startup from the catalog definition. Lookups are
case-insensitive on the package identifier.
"""

from __future__ import annotations

from typing import Iterable

from wingetdeck.core.models.package import PackageDescriptor, normalize_id


class CatalogError(Exception):
    """Raised when the catalog definition is invalid or missing."""


class CatalogStore:
    """Ordered, read-only collection of :class:`PackageDescriptor`."""

    def __init__(self, packages: Iterable[PackageDescriptor]) -> None:
        self._packages = tuple(packages)
        self._by_key: dict[str, PackageDescriptor] = {}
        for pkg in self._packages:
            if pkg.key in self._by_key:
                raise CatalogError(f"Duplicate package id in catalog: {pkg.id}")
            self._by_key[pkg.key] = pkg

    def __len__(self) -> int:
        return len(self._packages)

    def all(self) -> tuple[PackageDescriptor, ...]:
        """Every descriptor, in definition order."""
        return self._packages

    def contains(self, package_id: str) -> bool:
        return normalize_id(package_id) in self._by_key

    def get(self, package_id: str) -> PackageDescriptor | None:
        return self._by_key.get(normalize_id(package_id))

    def categories(self) -> list[str]:
        """Category names in first-seen order."""
        seen: dict[str, None] = {}
        for pkg in self._packages:
            seen.setdefault(pkg.category, None)
        return list(seen)

    def by_category(self, category: str) -> list[PackageDescriptor]:
        wanted = category.casefold()
        return [p for p in self._packages if p.category.casefold() == wanted]

    def reconcile(self, installed_ids: Iterable[str]) -> list[str]:
        """Catalog identifiers present in ``installed_ids``.

        Returned in catalog order and catalog casing, whatever form
        the installed identifiers came in.
        """
        installed = {normalize_id(i) for i in installed_ids}
        return [p.id for p in self._packages if p.key in installed]

    def to_list(self) -> list[dict[str, str]]:
        return [p.to_dict() for p in self._packages]
