"""
CLI commands for the catalog and the package manager.

Thin wrappers over the same services the control plane uses.
"""

from __future__ import annotations

import json
import sys

import click


@click.group()
def packages() -> None:
    """Packages — catalog, installed, install, upgrade."""


# ── Observe ─────────────────────────────────────────────────────


@packages.command()
@click.option("--category", default=None, help="Only show one category.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def catalog(ctx: click.Context, category: str | None, as_json: bool) -> None:
    """List the package catalog."""
    from wingetdeck.main import load_services

    store = load_services(ctx).catalog
    entries = store.by_category(category) if category else list(store.all())

    if as_json:
        click.echo(json.dumps([p.to_dict() for p in entries], indent=2))
        return

    if not entries:
        click.secho("⚠️  No matching packages", fg="yellow")
        return

    current = None
    for pkg in entries:
        if pkg.category != current:
            current = pkg.category
            click.secho(f"\n📦 {current}", fg="cyan", bold=True)
        click.echo(f"   • {pkg.name}  ({pkg.id})")
        if ctx.obj.get("verbose") and pkg.description:
            click.echo(f"     {pkg.description}")
    click.echo()


@packages.command()
@click.option("--refresh", is_flag=True, help="Ignore the cache and probe again.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def installed(ctx: click.Context, refresh: bool, as_json: bool) -> None:
    """Show which catalog packages are installed."""
    from wingetdeck.main import load_services

    services = load_services(ctx)
    ids = services.installed_in_catalog(refresh=refresh)
    snapshot = services.cache.snapshot

    if as_json:
        click.echo(json.dumps({"success": True, "installedIds": ids}, indent=2))
        return

    if snapshot is not None and snapshot.degraded:
        click.secho("⚠️  Inventory probe failed; results may be incomplete", fg="yellow")

    installed_set = set(ids)
    click.secho(f"\n🔍 {len(ids)}/{len(services.catalog)} catalog packages installed",
                fg="cyan", bold=True)
    for pkg in services.catalog.all():
        if pkg.id in installed_set:
            click.secho(f"   ✓ {pkg.name}", fg="green", nl=False)
        else:
            click.secho(f"   ✗ {pkg.name}", fg="red", nl=False)
        click.echo(f"  ({pkg.id})")
    click.echo()


# ── Act ─────────────────────────────────────────────────────────


@packages.command()
@click.argument("package_ids", nargs=-1, required=True)
@click.option("--name", default=None, help="Display name (single package only).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def install(ctx: click.Context, package_ids: tuple[str, ...], name: str | None, as_json: bool) -> None:
    """Install one or more packages, one at a time."""
    from wingetdeck.main import load_services

    if name and len(package_ids) > 1:
        raise click.UsageError("--name can only be used with a single package")

    orchestrator = load_services(ctx).orchestrator
    outcomes = []
    for package_id in package_ids:
        if not as_json:
            click.echo(f"⏳ {name or package_id} …")
        outcome = orchestrator.install(package_id, name)
        outcomes.append(outcome)
        if not as_json:
            color = "green" if outcome.ok else "red"
            icon = "✅" if outcome.ok else "❌"
            click.secho(f"   {icon} {outcome.message}", fg=color)

    if as_json:
        click.echo(json.dumps([o.to_dict() for o in outcomes], indent=2))

    if any(not o.ok for o in outcomes):
        sys.exit(1)


@packages.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def upgrade(ctx: click.Context, as_json: bool) -> None:
    """Upgrade every installed package with an available update."""
    from wingetdeck.main import load_services

    services = load_services(ctx)
    if not as_json:
        click.echo("⏳ Upgrading all packages …")
    outcome = services.orchestrator.upgrade_all()
    services.cache.invalidate()

    if as_json:
        click.echo(json.dumps(outcome.to_dict(), indent=2))
    elif outcome.ok:
        click.secho(f"✅ {outcome.message}", fg="green")
    else:
        click.secho(f"❌ {outcome.message}", fg="red")

    if not outcome.ok:
        sys.exit(1)
