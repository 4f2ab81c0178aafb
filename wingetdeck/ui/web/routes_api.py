"""
API routes — the JSON control plane.

Blueprint: api_bp
Prefix: /api

Endpoints:
    GET /installed              — catalog entries present on the host
    GET /install?id=...&name=...  — install one package, blocking

Every response, errors included, is JSON with a ``success`` flag so
the client can always render a message instead of a transport error.
"""

from __future__ import annotations

import logging

from flask import Blueprint, Flask, current_app, jsonify, request
from werkzeug.exceptions import HTTPException, MethodNotAllowed, NotFound

from wingetdeck.core.models.outcome import OutcomeKind

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


def _services():  # type: ignore[no-untyped-def]
    from wingetdeck.ui.web.server import get_services

    return get_services(current_app)


def _error(message: str, status: int):  # type: ignore[no-untyped-def]
    return jsonify({"success": False, "message": message}), status


# ── Observe ─────────────────────────────────────────────────────────


@api_bp.route("/installed")
def installed():  # type: ignore[no-untyped-def]
    """Catalog ∩ installed, served from the inventory cache."""
    refresh = request.args.get("refresh", "") == "1"
    ids = _services().installed_in_catalog(refresh=refresh)
    return jsonify({"success": True, "installedIds": ids})


# ── Act ─────────────────────────────────────────────────────────────


@api_bp.route("/install")
def install():  # type: ignore[no-untyped-def]
    """Install one package. Blocks until the package manager exits."""
    package_id = request.args.get("id", "").strip()
    name = request.args.get("name", "").strip()

    if not package_id:
        return _error("Missing app id", 400)

    services = _services()
    outcome = services.orchestrator.install(package_id, name or None)

    if outcome.kind is OutcomeKind.SUCCEEDED:
        services.cache.invalidate()

    return jsonify(outcome.to_dict()), 200 if outcome.ok else 500


# ── Errors ──────────────────────────────────────────────────────────


def register_error_handlers(app: Flask) -> None:
    """JSON bodies for every error, app-wide."""

    @app.errorhandler(NotFound)
    @app.errorhandler(MethodNotAllowed)
    def _not_found(_e: HTTPException):  # type: ignore[no-untyped-def]
        return _error("Not found", 404)

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):  # type: ignore[no-untyped-def]
        return _error(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def _server_fault(e: Exception):  # type: ignore[no-untyped-def]
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return _error(str(e) or type(e).__name__, 500)
