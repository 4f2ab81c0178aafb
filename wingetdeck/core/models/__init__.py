"""
Domain models — Pydantic types for wingetdeck.

All models are re-exported here for convenient access:

    from wingetdeck.core.models import PackageDescriptor, InstallOutcome
"""

from wingetdeck.core.models.inventory import InventorySnapshot
from wingetdeck.core.models.outcome import (
    ALREADY_PRESENT_CODES,
    InstallOutcome,
    OutcomeKind,
    UpgradeOutcome,
    WingetExitCode,
    signed_exit_code,
)
from wingetdeck.core.models.package import PackageDescriptor, normalize_id

__all__ = [
    # outcome.py
    "ALREADY_PRESENT_CODES",
    "InstallOutcome",
    # inventory.py
    "InventorySnapshot",
    "OutcomeKind",
    # package.py
    "PackageDescriptor",
    "UpgradeOutcome",
    "WingetExitCode",
    "normalize_id",
    "signed_exit_code",
]
