"""
Install outcomes — the result contract of the orchestrator.

The orchestrator never raises. Every install or upgrade request
produces exactly one outcome, and the outcome kind decides the
HTTP status the control plane answers with.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict


class OutcomeKind(str, Enum):
    SUCCEEDED = "succeeded"
    ALREADY_PRESENT = "already_present"
    FAILED = "failed"


class WingetExitCode(IntEnum):
    """Exit statuses with a known meaning (signed 32-bit HRESULT form)."""

    SUCCESS = 0
    UPDATE_NOT_APPLICABLE = -1978335189      # 0x8A15002B


# Non-zero exit codes that mean "nothing to do, package is already there"
ALREADY_PRESENT_CODES: frozenset[int] = frozenset({
    WingetExitCode.UPDATE_NOT_APPLICABLE,
})


def signed_exit_code(code: int) -> int:
    """Fold an unsigned DWORD exit status into its signed 32-bit value.

    Windows reports HRESULT-style exit codes as unsigned integers,
    while the package manager documents them as signed ones.
    """
    if code > 0x7FFFFFFF:
        return code - (1 << 32)
    return code


class InstallOutcome(BaseModel):
    """Result of a single install request."""

    model_config = ConfigDict(frozen=True)

    package_id: str
    package_name: str = ""
    kind: OutcomeKind
    message: str = ""
    exit_code: int | None = None
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.kind is not OutcomeKind.FAILED

    @classmethod
    def succeeded(cls, package_id: str, package_name: str, **kwargs: Any) -> InstallOutcome:
        return cls(
            package_id=package_id,
            package_name=package_name,
            kind=OutcomeKind.SUCCEEDED,
            message="Install succeeded",
            **kwargs,
        )

    @classmethod
    def already_present(cls, package_id: str, package_name: str, **kwargs: Any) -> InstallOutcome:
        return cls(
            package_id=package_id,
            package_name=package_name,
            kind=OutcomeKind.ALREADY_PRESENT,
            message="Already installed",
            **kwargs,
        )

    @classmethod
    def failed(
        cls,
        package_id: str,
        package_name: str,
        message: str,
        **kwargs: Any,
    ) -> InstallOutcome:
        return cls(
            package_id=package_id,
            package_name=package_name,
            kind=OutcomeKind.FAILED,
            message=message,
            **kwargs,
        )

    def to_dict(self) -> dict[str, Any]:
        """Wire shape returned by ``/api/install``."""
        return {
            "success": self.ok,
            "message": self.message,
            "appId": self.package_id,
            "appName": self.package_name,
        }


class UpgradeOutcome(BaseModel):
    """Result of an upgrade-all run."""

    model_config = ConfigDict(frozen=True)

    kind: OutcomeKind
    message: str = ""
    exit_code: int | None = None
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.kind is not OutcomeKind.FAILED

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.ok,
            "kind": self.kind.value,
            "message": self.message,
            "exitCode": self.exit_code,
        }
