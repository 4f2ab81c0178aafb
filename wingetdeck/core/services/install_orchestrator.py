"""
Install orchestrator — drive the package manager for one package.

Flow per request:

    validate id → exact-match pre-check → install → classify exit code

The orchestrator never raises. Spawn errors, timeouts and non-zero
exits all come back as an :class:`InstallOutcome`, so one bad request
can never take the control plane down. Nothing is retried: the caller
sees the failure once and decides.

Only one package manager command runs at a time; the tool keeps local
lock files and is not safe to drive concurrently.
"""

from __future__ import annotations

import logging
import subprocess
import threading

from wingetdeck.adapters.winget import CommandResult, WingetRunner
from wingetdeck.core.models.outcome import (
    ALREADY_PRESENT_CODES,
    InstallOutcome,
    OutcomeKind,
    UpgradeOutcome,
    WingetExitCode,
    signed_exit_code,
)
from wingetdeck.core.persistence.audit import AuditEntry, AuditWriter, NullAuditWriter
from wingetdeck.core.services.catalog_store import CatalogStore

logger = logging.getLogger(__name__)

MISSING_IDENTIFIER = "missing identifier"


def classify_exit_code(code: int) -> OutcomeKind:
    """Map a package manager exit status to an outcome kind."""
    code = signed_exit_code(code)
    if code == WingetExitCode.SUCCESS:
        return OutcomeKind.SUCCEEDED
    if code in ALREADY_PRESENT_CODES:
        return OutcomeKind.ALREADY_PRESENT
    return OutcomeKind.FAILED


def _failure_message(result: CommandResult) -> str:
    return result.stderr.strip() or f"Exit code {signed_exit_code(result.returncode)}"


class InstallOrchestrator:
    """Install catalog packages one at a time and report the outcome."""

    def __init__(
        self,
        runner: WingetRunner,
        catalog: CatalogStore,
        audit: AuditWriter | None = None,
        disable_interactivity: bool = True,
    ) -> None:
        self._runner = runner
        self._catalog = catalog
        self._audit = audit or NullAuditWriter()
        self._disable_interactivity = disable_interactivity
        self._lock = threading.Lock()

    # ── Install ─────────────────────────────────────────────────

    def install(self, package_id: str | None, display_name: str | None = None) -> InstallOutcome:
        """Install ``package_id`` unless it is already present."""
        package_id = (package_id or "").strip()
        name = (display_name or "").strip()

        if not package_id:
            outcome = InstallOutcome.failed("", name, MISSING_IDENTIFIER)
            self._record(outcome)
            return outcome

        if not name:
            known = self._catalog.get(package_id)
            name = known.name if known else package_id

        with self._lock:
            outcome = self._install_locked(package_id, name)

        self._record(outcome)
        return outcome

    def _install_locked(self, package_id: str, name: str) -> InstallOutcome:
        if self.is_installed(package_id, name):
            logger.info("%s (%s) already installed, skipping", name, package_id)
            return InstallOutcome.already_present(package_id, name)

        logger.info("Installing %s (%s)", name, package_id)
        args = self._runner.install_args(package_id, self._disable_interactivity)

        try:
            result = self._runner.run_install(args)
        except subprocess.TimeoutExpired as e:
            return InstallOutcome.failed(package_id, name, f"Install timed out after {e.timeout}s")
        except Exception as e:
            logger.exception("Install of %s could not run", package_id)
            return InstallOutcome.failed(package_id, name, str(e) or type(e).__name__)

        code = signed_exit_code(result.returncode)
        kind = classify_exit_code(code)
        details = {"exit_code": code, "duration_ms": result.elapsed_ms}
        if kind is OutcomeKind.SUCCEEDED:
            return InstallOutcome.succeeded(package_id, name, **details)
        if kind is OutcomeKind.ALREADY_PRESENT:
            return InstallOutcome.already_present(package_id, name, **details)
        return InstallOutcome.failed(package_id, name, _failure_message(result), **details)

    def is_installed(self, package_id: str, name: str = "") -> bool:
        """Exact-match listing pre-check.

        True only when the listing succeeds and mentions the identifier
        or display name. If the check cannot run at all, False: the
        install attempt then reports the real problem.
        """
        try:
            result = self._runner.run(self._runner.exact_list_args(package_id))
        except Exception as e:
            logger.warning("Pre-check for %s could not run, attempting install: %s",
                           package_id, e)
            return False

        if not result.ok:
            return False

        haystack = result.output.casefold()
        if package_id.casefold() in haystack:
            return True
        return bool(name) and name.casefold() in haystack

    # ── Upgrade ─────────────────────────────────────────────────

    def upgrade_all(self) -> UpgradeOutcome:
        """Upgrade every installed package that has an update."""
        logger.info("Upgrading all packages")

        with self._lock:
            try:
                result = self._runner.run_install(self._runner.upgrade_all_args())
            except subprocess.TimeoutExpired as e:
                outcome = UpgradeOutcome(
                    kind=OutcomeKind.FAILED,
                    message=f"Upgrade timed out after {e.timeout}s",
                )
            except Exception as e:
                logger.exception("Upgrade could not run")
                outcome = UpgradeOutcome(kind=OutcomeKind.FAILED, message=str(e) or type(e).__name__)
            else:
                code = signed_exit_code(result.returncode)
                kind = classify_exit_code(code)
                message = {
                    OutcomeKind.SUCCEEDED: "Upgrade succeeded",
                    OutcomeKind.ALREADY_PRESENT: "No applicable upgrades",
                }.get(kind) or _failure_message(result)
                outcome = UpgradeOutcome(
                    kind=kind, message=message, exit_code=code, duration_ms=result.elapsed_ms,
                )

        level = logging.INFO if outcome.ok else logging.ERROR
        logger.log(level, "Upgrade: %s", outcome.message)
        self._audit.write(AuditEntry(
            level=logging.getLevelName(level),
            operation="upgrade",
            outcome=outcome.kind.value,
            message=outcome.message,
            exit_code=outcome.exit_code,
            duration_ms=outcome.duration_ms,
        ))
        return outcome

    # ── Audit ───────────────────────────────────────────────────

    def _record(self, outcome: InstallOutcome) -> None:
        level = logging.INFO if outcome.ok else logging.ERROR
        logger.log(
            level,
            "Install %s (%s): %s, %s",
            outcome.package_name or "?", outcome.package_id or "?",
            outcome.kind.value, outcome.message,
        )
        self._audit.write(AuditEntry(
            level=logging.getLevelName(level),
            operation="install",
            package_id=outcome.package_id,
            outcome=outcome.kind.value,
            message=outcome.message,
            exit_code=outcome.exit_code,
            duration_ms=outcome.duration_ms,
            context={"name": outcome.package_name},
        ))
