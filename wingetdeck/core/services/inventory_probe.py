"""
Inventory probe — ask the package manager what is installed.

Runs the machine-readable listing first and falls back to parsing
the human-readable table when the JSON mode is not available on the
installed tool version. Either way the result is a normalized
:class:`InventorySnapshot`.

The probe itself raises :class:`ProbeError`; degrading to an empty or
stale snapshot is the reconciliation cache's job.
"""

from __future__ import annotations

import json
import logging
import re
import subprocess
import time
from typing import Any, Callable

from wingetdeck.adapters.winget import CommandResult, WingetRunner
from wingetdeck.core.models.inventory import InventorySnapshot

logger = logging.getLogger(__name__)

# Keys a package entry may carry its identifier under (matched case-insensitively)
_ID_KEYS = ("packageidentifier", "id", "identifier")

# Keys holding the list of packages inside a source group / flat wrapper
_PACKAGES_KEY = "packages"
_SOURCES_KEY = "sources"

# Columns in the text table are separated by two or more spaces
_COLUMN_SPLIT = re.compile(r"\s{2,}")

# Header underline, e.g. "-----------------------------"
_SEPARATOR_LINE = re.compile(r"^-{5,}\s*$")


class ProbeError(Exception):
    """Raised when the installed-package listing cannot be obtained or parsed."""


# ── Payload parsing ─────────────────────────────────────────────


def find_payload_start(raw: str) -> int:
    """Index of the first JSON structural delimiter, or -1.

    Some tool versions print progress or banner text before the
    payload; everything before the first ``{`` or ``[`` is discarded.
    """
    positions = [p for p in (raw.find("{"), raw.find("[")) if p != -1]
    return min(positions) if positions else -1


def decode_payload(raw: str) -> Any:
    """Decode the JSON payload embedded in ``raw``.

    Raises:
        ProbeError: No payload found, or it is not valid JSON.
    """
    start = find_payload_start(raw)
    if start == -1:
        raise ProbeError("No structured payload in listing output")

    try:
        payload, _end = json.JSONDecoder().raw_decode(raw, start)
    except json.JSONDecodeError as e:
        raise ProbeError(f"Invalid JSON in listing output: {e}") from e
    return payload


def _lookup(entry: dict, key: str) -> Any:
    """Case-insensitive dict lookup."""
    for k, v in entry.items():
        if isinstance(k, str) and k.casefold() == key:
            return v
    return None


def _package_id(entry: Any) -> str | None:
    if not isinstance(entry, dict):
        return None
    for key in _ID_KEYS:
        value = _lookup(entry, key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _packages_of(group: dict) -> list:
    packages = _lookup(group, _PACKAGES_KEY)
    if packages is None:
        return []
    if not isinstance(packages, list):
        raise ProbeError(f"Expected a package list, got {type(packages).__name__}")
    return packages


def extract_packages(payload: Any) -> list[dict]:
    """Normalize any supported listing shape to a flat list of package entries.

    Supported shapes::

        {"Sources": [{"Packages": [...]}, ...]}     # grouped by source
        [{"Packages": [...]}, ...]                  # bare list of groups
        {"Packages": [...]}                         # flat wrapper
        [{"PackageIdentifier": ...}, ...]           # bare package list

    Raises:
        ProbeError: The payload has none of the shapes above.
    """
    if isinstance(payload, dict):
        sources = _lookup(payload, _SOURCES_KEY)
        if sources is not None:
            if not isinstance(sources, list):
                raise ProbeError("'Sources' is not a list")
            return extract_packages(sources)
        if _lookup(payload, _PACKAGES_KEY) is not None:
            return [p for p in _packages_of(payload) if isinstance(p, dict)]
        if _package_id(payload):
            return [payload]
        raise ProbeError("Unrecognized listing payload (object without packages)")

    if isinstance(payload, list):
        packages: list[dict] = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            if _lookup(item, _PACKAGES_KEY) is not None:
                packages.extend(p for p in _packages_of(item) if isinstance(p, dict))
            else:
                packages.append(item)
        return packages

    raise ProbeError(f"Unrecognized listing payload ({type(payload).__name__})")


def parse_json_listing(raw: str) -> set[str]:
    """Identifiers from a machine-readable listing."""
    payload = decode_payload(raw)
    ids = set()
    for entry in extract_packages(payload):
        package_id = _package_id(entry)
        if package_id:
            ids.add(package_id)
    return ids


def parse_text_listing(raw: str) -> set[str]:
    """Identifiers from the columnar text listing.

    Layout (columns separated by two or more spaces)::

        Name          Id              Version   Available  Source
        ---------------------------------------------------------
        Git           Git.Git         2.44.0    2.45.1     winget

    Raises:
        ProbeError: The header separator line is missing.
    """
    # splitlines() also breaks on the carriage returns spinners redraw with
    lines = [line.rstrip() for line in raw.splitlines()]

    separator = next(
        (i for i, line in enumerate(lines) if _SEPARATOR_LINE.match(line.strip())),
        None,
    )
    if separator is None:
        raise ProbeError("Unrecognized text listing (no header separator)")

    ids = set()
    for line in lines[separator + 1:]:
        if not line.strip():
            continue
        columns = _COLUMN_SPLIT.split(line.strip())
        if len(columns) < 3:
            # Footer lines like "3 upgrades available."
            continue
        ids.add(columns[1])
    return ids


# ── Probe ───────────────────────────────────────────────────────


class InventoryProbe:
    """Query the host's installed packages via the package manager."""

    def __init__(
        self,
        runner: WingetRunner,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._runner = runner
        self._clock = clock

    def probe(self) -> InventorySnapshot:
        """Run the listing and return a fresh snapshot.

        Raises:
            ProbeError: The command could not be started, or neither
                listing mode produced parseable output.
        """
        result = self._list(json_output=True)
        if result.ok and find_payload_start(result.stdout) != -1:
            ids = parse_json_listing(result.stdout)
            logger.info("Inventory probe found %d packages (json)", len(ids))
            return InventorySnapshot.from_ids(ids, self._clock(), source="json")

        logger.debug(
            "JSON listing unavailable (exit %d), falling back to text mode",
            result.returncode,
        )
        result = self._list(json_output=False)
        if not result.ok:
            detail = result.stderr.strip() or f"exit code {result.returncode}"
            raise ProbeError(f"Listing failed: {detail}")

        ids = parse_text_listing(result.stdout)
        logger.info("Inventory probe found %d packages (text)", len(ids))
        return InventorySnapshot.from_ids(ids, self._clock(), source="text")

    def _list(self, json_output: bool) -> CommandResult:
        try:
            return self._runner.run(self._runner.list_args(json_output=json_output))
        except subprocess.TimeoutExpired as e:
            raise ProbeError(f"Listing timed out after {e.timeout}s") from e
        except OSError as e:
            raise ProbeError(f"Cannot run {self._runner.executable}: {e}") from e
