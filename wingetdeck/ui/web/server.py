"""
Control plane server — Flask app factory and listener.

The listener is a single-threaded Werkzeug server: requests are
handled one at a time, in arrival order. Installs already serialize on
the package manager's own lock files, so parallel handlers would only
queue up behind each other.

SIGINT / SIGTERM stop the accept loop; a request in flight (an install
can take minutes) is allowed to finish before the process exits.
"""

from __future__ import annotations

import logging
import signal
import threading
from pathlib import Path
from typing import Any

from flask import Flask
from werkzeug.serving import make_server

from wingetdeck.adapters.winget import WingetRunner
from wingetdeck.core.config.loader import Settings
from wingetdeck.core.persistence.audit import AuditWriter
from wingetdeck.core.services.catalog_store import CatalogStore
from wingetdeck.core.services.wiring import Services, build_services

logger = logging.getLogger(__name__)

# Package directory for templates
_PACKAGE_DIR = Path(__file__).parent

EXTENSION_KEY = "wingetdeck"


def create_app(
    settings: Settings | None = None,
    catalog: CatalogStore | None = None,
    runner: WingetRunner | None = None,
    audit: AuditWriter | None = None,
    services: Services | None = None,
) -> Flask:
    """Create and configure the Flask application.

    Args:
        settings: Runtime settings (defaults when None).
        catalog: Catalog to serve instead of the configured one.
        runner: Package manager runner (tests pass a fake-backed one).
        audit: Audit ledger writer.
        services: Pre-built services; overrides the other arguments.

    Returns:
        Configured Flask application.
    """
    app = Flask(__name__, template_folder=str(_PACKAGE_DIR / "templates"))

    if services is None:
        services = build_services(
            settings or Settings(),
            catalog=catalog,
            runner=runner,
            audit=audit,
        )

    app.extensions[EXTENSION_KEY] = services
    app.json.sort_keys = False  # type: ignore[attr-defined]

    from wingetdeck.ui.web.routes_api import api_bp, register_error_handlers
    from wingetdeck.ui.web.routes_pages import pages_bp

    app.register_blueprint(pages_bp)
    app.register_blueprint(api_bp, url_prefix="/api")
    register_error_handlers(app)

    @app.after_request
    def _cors_headers(response):  # type: ignore[no-untyped-def]
        # The dashboard may be opened from file:// or another port
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Methods"] = "GET, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        return response

    logger.info("Control plane app created (%d catalog entries)", len(services.catalog))
    return app


def get_services(app: Flask) -> Services:
    return app.extensions[EXTENSION_KEY]


def run_server(app: Flask, host: str = "127.0.0.1", port: int = 9090) -> None:
    """Serve ``app`` until SIGINT/SIGTERM, one request at a time."""
    server = make_server(host, port, app, threaded=False, processes=1)

    def _graceful_stop(signum: int, _frame: Any) -> None:
        logger.warning("Received %s, shutting down after the current request",
                       signal.Signals(signum).name)
        # shutdown() waits for serve_forever to return, so it cannot be
        # called from the thread that is running the loop
        threading.Thread(target=server.shutdown, daemon=True).start()

    previous = {
        sig: signal.signal(sig, _graceful_stop)
        for sig in (signal.SIGINT, signal.SIGTERM)
    }

    logger.info("Control plane listening on http://%s:%d", host, server.server_port)
    try:
        server.serve_forever()
    finally:
        server.server_close()
        for sig, handler in previous.items():
            signal.signal(sig, handler)
        logger.info("Control plane stopped")
