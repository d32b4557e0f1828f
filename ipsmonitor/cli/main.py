"""Top-level CLI entry point for IPS Monitor."""

from __future__ import annotations

import logging

import click

from ipsmonitor import __version__


@click.group()
@click.version_option(version=__version__, prog_name="ipsmonitor")
@click.option(
    "--config",
    type=click.Path(),
    default=None,
    envvar="IPSMONITOR_CONFIG",
    help="Path to config.yaml",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """IPS Monitor -- portfolio analytics and IPS compliance."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


# Register sub-commands
from ipsmonitor.cli.config_cmd import config_group  # noqa: E402
from ipsmonitor.cli.report_cmd import report_cmd  # noqa: E402
from ipsmonitor.cli.snapshot_cmd import snapshot_group  # noqa: E402

cli.add_command(config_group, "config")
cli.add_command(report_cmd, "report")
cli.add_command(snapshot_group, "snapshot")


@cli.command()
@click.option("--force", is_flag=True, help="Overwrite an existing portfolio with the seed data")
@click.pass_context
def init(ctx: click.Context, force: bool) -> None:
    """Initialize IPS Monitor: create the database and seed the portfolio."""
    from ipsmonitor.config.loader import load_config, resolve_path
    from ipsmonitor.portfolio.seed import initial_snapshot
    from ipsmonitor.storage.database import Database
    from ipsmonitor.storage.gateway import SnapshotStore
    from ipsmonitor.storage.migrations import ensure_schema
    from ipsmonitor.storage.queries import get_value

    config = load_config(ctx.obj.get("config_path"))

    db_path = resolve_path(config.database.path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    click.echo(f"  Database: {db_path}")

    with Database(db_path) as db:
        version = ensure_schema(db)
        click.echo(f"  Schema version: {version}")

        store = SnapshotStore(db, config.database.storage_key)
        if get_value(db, store.key) is not None and not force:
            click.echo("  Portfolio already stored, leaving it untouched (use --force to reseed)")
        else:
            snapshot = initial_snapshot()
            if not store.save(snapshot):
                click.echo("Failed to save the seed portfolio.", err=True)
                raise SystemExit(1)
            click.echo(f"  Seeded {len(snapshot.allocations)} strategic allocations")

    click.echo("\nIPS Monitor initialized successfully.")
    click.echo("Next steps:")
    click.echo("  1. Run: ipsmonitor snapshot export portfolio.json")
    click.echo("  2. Edit holdings, then: ipsmonitor snapshot import portfolio.json")
    click.echo("  3. Run: ipsmonitor report --returns returns.csv")
