"""
Inventory snapshot — what the package manager reported as installed.

A snapshot is immutable. The reconciliation cache replaces it
wholesale on refresh; it is never merged or edited in place.
"""

from __future__ import annotations

from typing import Iterable, Literal

from pydantic import BaseModel, ConfigDict, Field

from wingetdeck.core.models.package import normalize_id


class InventorySnapshot(BaseModel):
    """Installed identifiers plus the clock reading they were captured at."""

    model_config = ConfigDict(frozen=True)

    ids: frozenset[str] = Field(default_factory=frozenset)
    captured_at: float = 0.0
    source: Literal["json", "text", "none"] = "none"
    degraded: bool = False   # probe failed; ids are stale or empty

    @classmethod
    def from_ids(
        cls,
        ids: Iterable[str],
        captured_at: float,
        source: Literal["json", "text", "none"] = "json",
        degraded: bool = False,
    ) -> InventorySnapshot:
        """Build a snapshot, normalizing and de-duplicating identifiers."""
        normalized = frozenset(normalize_id(i) for i in ids if i and i.strip())
        return cls(ids=normalized, captured_at=captured_at, source=source, degraded=degraded)

    def __contains__(self, package_id: object) -> bool:
        if not isinstance(package_id, str):
            return False
        return normalize_id(package_id) in self.ids

