"""
Shared test fixtures and configuration.

``fake_winget`` replaces ``subprocess.run`` inside the package manager
adapter with an in-memory simulation, so no test needs the real tool.
"""

from __future__ import annotations

import json
import subprocess
from pathlib import Path

import pytest

from wingetdeck.core.config.loader import Settings
from wingetdeck.core.models.package import PackageDescriptor
from wingetdeck.core.persistence.audit import AuditWriter
from wingetdeck.core.services.catalog_store import CatalogStore

NOT_FOUND_EXIT = -1978335212   # "No installed package found matching input criteria."


class FakeWinget:
    """In-memory package manager answering the commands wingetdeck issues.

    Attributes:
        installed: Identifiers currently "installed".
        install_results: Per-id ``(returncode, stderr)`` overriding a
            successful install.
        json_supported: Whether ``list --output json`` works.
        preamble: Text printed before the JSON payload.
        raise_on: Subcommand name ("list", "install", ...) that raises
            FileNotFoundError instead of running.
        calls: Every command received, in order.
    """

    def __init__(self) -> None:
        self.installed: set[str] = set()
        self.install_results: dict[str, tuple[int, str]] = {}
        self.upgrade_result: tuple[int, str] = (0, "")
        self.json_supported = True
        self.preamble = ""
        self.raise_on: str | None = None
        self.calls: list[list[str]] = []

    def __call__(self, cmd, **kwargs):  # type: ignore[no-untyped-def]
        self.calls.append(list(cmd))
        args = list(cmd[1:])
        sub = args[0] if args else ""

        if self.raise_on == sub:
            raise FileNotFoundError(2, "No such file or directory", cmd[0])

        if sub == "list" and "--id" in args:
            return self._exact(args[args.index("--id") + 1], cmd)
        if sub == "list":
            return self._list(args, cmd)
        if sub == "install":
            return self._install(args[args.index("--id") + 1], cmd)
        if sub == "upgrade":
            rc, stderr = self.upgrade_result
            return _completed(cmd, rc, stderr=stderr)
        return _completed(cmd, 1, stderr=f"unknown command {sub}")

    # ── Commands ────────────────────────────────────────────────

    def _exact(self, package_id: str, cmd):  # type: ignore[no-untyped-def]
        if package_id in self.installed:
            return _completed(cmd, 0, stdout=_table([package_id]))
        return _completed(
            cmd, NOT_FOUND_EXIT,
            stdout="No installed package found matching input criteria.\n",
        )

    def _list(self, args: list[str], cmd):  # type: ignore[no-untyped-def]
        if "--output" in args:
            if not self.json_supported:
                return _completed(cmd, -1978335216, stdout="Argument name was not recognized\n")
            payload = {
                "Sources": [{
                    "Packages": [{"PackageIdentifier": i} for i in sorted(self.installed)],
                    "SourceDetails": {"Name": "winget"},
                }],
            }
            return _completed(cmd, 0, stdout=self.preamble + json.dumps(payload))
        return _completed(cmd, 0, stdout=self.preamble + _table(sorted(self.installed)))

    def _install(self, package_id: str, cmd):  # type: ignore[no-untyped-def]
        if package_id in self.install_results:
            rc, stderr = self.install_results[package_id]
            return _completed(cmd, rc, stderr=stderr)
        self.installed.add(package_id)
        return _completed(cmd, 0, stdout="Successfully installed\n")

    # ── Helpers ─────────────────────────────────────────────────

    def calls_for(self, sub: str) -> list[list[str]]:
        return [c for c in self.calls if len(c) > 1 and c[1] == sub]


def _completed(cmd, rc: int, stdout: str = "", stderr: str = ""):  # type: ignore[no-untyped-def]
    return subprocess.CompletedProcess(args=cmd, returncode=rc, stdout=stdout, stderr=stderr)


def _table(ids: list[str]) -> str:
    lines = [
        "Name                 Id                       Version   Source",
        "---------------------------------------------------------------",
    ]
    for package_id in ids:
        lines.append(f"{package_id.split('.')[-1]:<20} {package_id:<24} 1.0.0     winget")
    return "\n".join(lines) + "\n"


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_winget(monkeypatch: pytest.MonkeyPatch) -> FakeWinget:
    """Simulated package manager behind the adapter's subprocess.run."""
    fake = FakeWinget()
    monkeypatch.setattr("wingetdeck.adapters.winget.subprocess.run", fake)
    return fake


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def catalog() -> CatalogStore:
    """A small catalog with one well-known entry."""
    return CatalogStore([
        PackageDescriptor(id="Vendor.App", name="App", category="Tools",
                          description="The app under test."),
        PackageDescriptor(id="Git.Git", name="Git", category="Development"),
        PackageDescriptor(id="Mozilla.Firefox", name="Firefox", category="Browsers"),
    ])


@pytest.fixture
def audit(tmp_path: Path) -> AuditWriter:
    """Audit ledger in a temporary directory."""
    return AuditWriter(path=tmp_path / ".state" / "audit.ndjson")


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Default settings rooted in a temporary directory."""
    return Settings(root=tmp_path)
