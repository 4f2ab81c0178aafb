"""
Package descriptor — one entry of the curated catalog.

Descriptors are built once at startup from the catalog definition
and never change for the lifetime of the process.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


def normalize_id(package_id: str) -> str:
    """Single comparison form for package identifiers."""
    return package_id.strip().casefold()


class PackageDescriptor(BaseModel):
    """A package the operator can pick from the catalog."""

    model_config = ConfigDict(frozen=True)

    id: str                         # package manager identifier, e.g. "Git.Git"
    name: str
    category: str = "Other"
    description: str = ""

    @field_validator("id", "name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @property
    def key(self) -> str:
        """Normalized identifier used for lookups."""
        return normalize_id(self.id)

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "description": self.description,
        }
