"""
Service wiring — build the component graph from settings.

Both entry points (the HTTP control plane and the CLI) go through
:func:`build_services`, so they share the same runner, cache and
orchestrator configuration.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from wingetdeck.adapters.winget import WingetRunner
from wingetdeck.core.config.catalog_loader import load_catalog
from wingetdeck.core.config.loader import Settings
from wingetdeck.core.persistence.audit import AuditWriter
from wingetdeck.core.services.catalog_store import CatalogStore
from wingetdeck.core.services.install_orchestrator import InstallOrchestrator
from wingetdeck.core.services.inventory_probe import InventoryProbe
from wingetdeck.core.services.reconciliation_cache import ReconciliationCache

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything a request handler or CLI command needs."""

    settings: Settings
    runner: WingetRunner
    catalog: CatalogStore
    cache: ReconciliationCache
    orchestrator: InstallOrchestrator
    audit: AuditWriter

    def installed_in_catalog(self, refresh: bool = False) -> list[str]:
        """Catalog identifiers currently installed on the host."""
        if refresh:
            self.cache.invalidate()
        return self.catalog.reconcile(self.cache.get_installed())


def build_services(
    settings: Settings,
    catalog: CatalogStore | None = None,
    runner: WingetRunner | None = None,
    audit: AuditWriter | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> Services:
    """Assemble the services for ``settings``.

    Raises:
        CatalogError: The configured catalog cannot be loaded.
    """
    runner = runner or WingetRunner(
        executable=settings.winget,
        timeout=settings.probe_timeout,
        install_timeout=settings.install_timeout,
    )
    if catalog is None:
        catalog = load_catalog(settings.catalog_path)
    audit = audit or AuditWriter(path=settings.audit_path)

    cache = ReconciliationCache(
        InventoryProbe(runner, clock=clock),
        ttl_seconds=settings.cache_ttl,
        clock=clock,
        audit=audit,
    )
    orchestrator = InstallOrchestrator(
        runner,
        catalog,
        audit=audit,
        disable_interactivity=settings.disable_interactivity,
    )

    logger.debug("Services built (%r, %d catalog entries)", runner, len(catalog))
    return Services(
        settings=settings,
        runner=runner,
        catalog=catalog,
        cache=cache,
        orchestrator=orchestrator,
        audit=audit,
    )
