"""
Audit ledger — append-only operation log.

Every install attempt, upgrade run and probe failure writes one entry
to an NDJSON (newline-delimited JSON) file. This is the operator's
history of what the control plane did to the machine and when.

The ledger is append-only: entries are never modified or deleted.
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# Default audit location, relative to the config directory
DEFAULT_AUDIT_PATH = Path(".state") / "audit.ndjson"


class AuditEntry(BaseModel):
    """A single audit log entry."""

    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    level: str = "INFO"            # INFO, WARNING, ERROR
    operation: str = ""            # install, upgrade, probe
    package_id: str = ""
    outcome: str = ""              # succeeded, already_present, failed
    message: str = ""
    exit_code: int | None = None
    duration_ms: int = 0

    # Extensible context
    context: dict[str, Any] = Field(default_factory=dict)


class AuditWriter:
    """Append-only audit ledger writer.

    Each call to write() appends a single JSON line to the ledger file.
    The file is created if it doesn't exist. A failing write is logged
    and swallowed: losing an audit line must never fail an install.
    """

    def __init__(self, path: Path):
        self._path = path
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def write(self, entry: AuditEntry) -> None:
        """Append an audit entry to the ledger."""
        data = entry.model_dump(mode="json")
        line = json.dumps(data, ensure_ascii=False) + "\n"

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._lock, self._path.open("a", encoding="utf-8") as f:
                f.write(line)
            logger.debug("Audit entry written: %s/%s", entry.operation, entry.package_id)
        except OSError as e:
            logger.error("Failed to write audit entry: %s", e)

    def read_all(self) -> list[AuditEntry]:
        """Read all entries from the ledger, oldest first."""
        if not self._path.is_file():
            return []

        entries = []
        try:
            with self._path.open("r", encoding="utf-8") as f:
                for line_num, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        entries.append(AuditEntry.model_validate(json.loads(line)))
                    except ValueError as e:
                        logger.warning("Skipping corrupt audit entry at line %d: %s", line_num, e)
        except OSError as e:
            logger.error("Failed to read audit ledger: %s", e)

        return entries


class NullAuditWriter(AuditWriter):
    """Audit writer that discards everything (tests, ad-hoc CLI use)."""

    def __init__(self) -> None:
        super().__init__(path=Path("/dev/null"))

    def write(self, entry: AuditEntry) -> None:
        logger.debug("Audit (discarded): %s %s %s", entry.operation, entry.package_id, entry.outcome)

    def read_all(self) -> list[AuditEntry]:
        return []
