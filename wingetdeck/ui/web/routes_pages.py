"""
Page routes — serves the bootstrap document.

GET / renders the dashboard shell with the catalog embedded as JSON,
so the client can render without a second round trip.
"""

from __future__ import annotations

from flask import Blueprint, current_app, render_template

pages_bp = Blueprint("pages", __name__)


@pages_bp.route("/")
def dashboard():  # type: ignore[no-untyped-def]
    """Render the dashboard with the catalog payload."""
    from wingetdeck import __version__
    from wingetdeck.ui.web.server import get_services

    services = get_services(current_app)
    catalog = services.catalog
    return render_template(
        "dashboard.html",
        catalog=catalog.to_list(),
        categories=catalog.categories(),
        version=__version__,
    )
