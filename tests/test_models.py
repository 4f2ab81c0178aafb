"""
Tests for domain models — snapshots, outcomes, exit codes.
"""

import pytest
from pydantic import ValidationError

from wingetdeck.core.models import (
    ALREADY_PRESENT_CODES,
    InstallOutcome,
    InventorySnapshot,
    OutcomeKind,
    UpgradeOutcome,
    WingetExitCode,
    normalize_id,
    signed_exit_code,
)


class TestNormalize:
    def test_trim_and_casefold(self):
        assert normalize_id("  Vendor.App ") == "vendor.app"


class TestInventorySnapshot:
    def test_ids_normalized_and_deduplicated(self):
        snap = InventorySnapshot.from_ids(["Vendor.App", "vendor.app ", "", "Git.Git"], captured_at=1.0)
        assert snap.ids == {"vendor.app", "git.git"}

    def test_contains_any_casing(self):
        snap = InventorySnapshot.from_ids(["Vendor.App"], captured_at=1.0)
        assert "VENDOR.APP" in snap
        assert "Other" not in snap
        assert 42 not in snap

    def test_frozen(self):
        snap = InventorySnapshot.from_ids(["A.B"], captured_at=1.0)
        with pytest.raises(ValidationError):
            snap.captured_at = 2.0  # type: ignore[misc]


class TestExitCodes:
    def test_sentinel_value(self):
        assert WingetExitCode.UPDATE_NOT_APPLICABLE == -1978335189
        assert -1978335189 in ALREADY_PRESENT_CODES

    def test_signed_conversion(self):
        assert signed_exit_code(0x8A15002B) == -1978335189
        assert signed_exit_code(1) == 1
        assert signed_exit_code(-5) == -5


class TestInstallOutcome:
    def test_wire_shape(self):
        outcome = InstallOutcome.succeeded("Vendor.App", "App")
        assert outcome.to_dict() == {
            "success": True,
            "message": "Install succeeded",
            "appId": "Vendor.App",
            "appName": "App",
        }

    def test_already_present_is_ok(self):
        assert InstallOutcome.already_present("A.B", "AB").ok

    def test_failed_not_ok(self):
        outcome = InstallOutcome.failed("A.B", "AB", "nope", exit_code=1)
        assert not outcome.ok
        assert outcome.to_dict()["success"] is False
        assert outcome.kind is OutcomeKind.FAILED


class TestUpgradeOutcome:
    def test_to_dict(self):
        outcome = UpgradeOutcome(kind=OutcomeKind.ALREADY_PRESENT, message="No applicable upgrades")
        assert outcome.to_dict()["success"] is True
        assert outcome.to_dict()["kind"] == "already_present"
