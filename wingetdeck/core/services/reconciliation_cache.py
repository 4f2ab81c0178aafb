"""
Reconciliation cache — serve the installed set without re-probing.

Probing spawns the package manager and parses its output, which takes
seconds. The dashboard refreshes far more often than that, so the last
snapshot is served until it is older than the TTL.

The check-TTL / probe / store sequence runs under a lock: two threads
observing the same stale snapshot must not both start a probe.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from wingetdeck.core.models.inventory import InventorySnapshot
from wingetdeck.core.persistence.audit import AuditEntry, AuditWriter, NullAuditWriter
from wingetdeck.core.services.inventory_probe import InventoryProbe, ProbeError

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0


class ReconciliationCache:
    """Owns the current :class:`InventorySnapshot`."""

    def __init__(
        self,
        probe: InventoryProbe,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        audit: AuditWriter | None = None,
    ) -> None:
        self._probe = probe
        self._ttl = ttl_seconds
        self._clock = clock
        self._audit = audit or NullAuditWriter()
        self._snapshot: InventorySnapshot | None = None
        self._lock = threading.Lock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    @property
    def snapshot(self) -> InventorySnapshot | None:
        return self._snapshot

    def get_installed(self, ttl_seconds: float | None = None) -> frozenset[str]:
        """Normalized identifiers of installed packages.

        Returns the cached set while it is younger than ``ttl_seconds``
        (default: the cache's TTL); otherwise probes and replaces it.
        Never raises: a failed probe yields a degraded snapshot.
        """
        ttl = self._ttl if ttl_seconds is None else ttl_seconds

        with self._lock:
            current = self._snapshot
            if current is not None and self._clock() - current.captured_at < ttl:
                logger.debug("Inventory cache hit (%d ids)", len(current.ids))
                return current.ids

            self._snapshot = self._refresh(current)
            return self._snapshot.ids

    def invalidate(self) -> None:
        """Drop the snapshot so the next read probes again."""
        with self._lock:
            self._snapshot = None
        logger.debug("Inventory cache invalidated")

    def _refresh(self, previous: InventorySnapshot | None) -> InventorySnapshot:
        try:
            fresh = self._probe.probe()
            # TTL is measured on the cache's clock, whatever the probe stamped
            return fresh.model_copy(update={"captured_at": self._clock()})
        except ProbeError as e:
            stale = previous.ids if previous is not None else frozenset()
            logger.warning(
                "Inventory probe failed, serving %s snapshot: %s",
                "stale" if stale else "empty", e,
            )
            self._audit.write(AuditEntry(
                level="WARNING",
                operation="probe",
                outcome="failed",
                message=str(e),
                context={"stale_ids": len(stale)},
            ))
            # Timestamped like a real snapshot so a broken tool is not
            # re-probed on every request within the TTL.
            return InventorySnapshot(
                ids=stale,
                captured_at=self._clock(),
                source=previous.source if previous is not None else "none",
                degraded=True,
            )
