"""
wingetdeck — CLI entrypoint.

Usage:
    python -m wingetdeck.main --help
    python -m wingetdeck.main serve
    python -m wingetdeck.main packages installed
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import click

from wingetdeck import __version__
from wingetdeck.core.observability.logging_config import (
    ENV_FILE,
    ENV_FILE_LEVEL,
    resolve_level,
    setup_logging,
)


@click.group()
@click.version_option(version=__version__, prog_name="wingetdeck")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to deck.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """wingetdeck — reconcile and install catalog packages."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(ENV_FILE),
        log_file_level=os.environ.get(ENV_FILE_LEVEL),
        quiet_third_party=not debug,
    )


def load_services(ctx: click.Context):  # type: ignore[no-untyped-def]
    """Load settings and build services, exiting 1 on config errors."""
    from wingetdeck.core.config.loader import ConfigError, load_settings
    from wingetdeck.core.services.catalog_store import CatalogError
    from wingetdeck.core.services.wiring import build_services

    try:
        settings = load_settings(ctx.obj.get("config_path"))
        return build_services(settings)
    except (ConfigError, CatalogError) as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)


@cli.command()
@click.option("--host", default=None, help="Bind address (default: from deck.yml).")
@click.option("--port", "-p", default=None, type=int, help="Port number (default: 9090).")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None) -> None:
    """Start the local control plane."""
    from wingetdeck.ui.web.server import create_app, run_server

    services = load_services(ctx)
    settings = services.settings
    host = host or settings.host
    port = port or settings.port

    app = create_app(services=services)

    if not services.runner.is_available():
        click.secho(
            f"⚠️  '{settings.winget}' not found on PATH; installs will fail",
            fg="yellow",
        )

    click.echo()
    click.secho("⚡ wingetdeck — control plane", bold=True)
    click.echo(f"   Dashboard: http://{host}:{port}")
    click.echo(f"   Catalog:   {len(services.catalog)} packages")
    click.echo(f"   Audit log: {services.audit.path}")
    click.echo()

    run_server(app, host=host, port=port)


# ── Register sub-command groups from wingetdeck/ui/cli/ ──────────

from wingetdeck.ui.cli.packages import packages  # noqa: E402

cli.add_command(packages)


if __name__ == "__main__":
    cli()
