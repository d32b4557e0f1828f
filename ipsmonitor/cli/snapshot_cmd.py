"""Snapshot CLI commands: export, import, reset, reconcile."""

from __future__ import annotations

import json
import logging

import click

logger = logging.getLogger(__name__)


@click.group("snapshot")
def snapshot_group() -> None:
    """Export, import, reset or reconcile the stored portfolio snapshot."""
    pass


@snapshot_group.command("export")
@click.argument("output", type=click.File("w"), default="-")
@click.pass_context
def snapshot_export(ctx: click.Context, output) -> None:
    """Write the stored portfolio to OUTPUT as JSON (stdout by default)."""
    from ipsmonitor.config.loader import load_config, resolve_path
    from ipsmonitor.storage.database import Database
    from ipsmonitor.storage.gateway import SnapshotStore
    from ipsmonitor.storage.migrations import ensure_schema

    config = load_config(ctx.obj.get("config_path"))

    with Database(resolve_path(config.database.path)) as db:
        ensure_schema(db)
        snapshot = SnapshotStore(db, config.database.storage_key).load()

    json.dump(snapshot.to_dict(), output, indent=2, ensure_ascii=False)
    output.write("\n")
    logger.debug("Exported snapshot dated %s", snapshot.date)


@snapshot_group.command("import")
@click.argument("source", type=click.File("r"))
@click.pass_context
def snapshot_import(ctx: click.Context, source) -> None:
    """Replace the stored portfolio with the JSON snapshot in SOURCE."""
    from ipsmonitor.config.loader import load_config, resolve_path
    from ipsmonitor.portfolio.models import PortfolioSnapshot
    from ipsmonitor.storage.database import Database
    from ipsmonitor.storage.gateway import SnapshotStore
    from ipsmonitor.storage.migrations import ensure_schema

    config = load_config(ctx.obj.get("config_path"))

    try:
        snapshot = PortfolioSnapshot.from_dict(json.load(source))
    except (TypeError, ValueError) as e:
        click.echo(f"Invalid snapshot file: {e}", err=True)
        raise SystemExit(1) from None

    with Database(resolve_path(config.database.path)) as db:
        ensure_schema(db)
        if not SnapshotStore(db, config.database.storage_key).save(snapshot):
            click.echo("Failed to save snapshot.", err=True)
            raise SystemExit(1)

    click.echo(
        f"Imported snapshot dated {snapshot.date}: "
        f"{len(snapshot.securities)} securities, "
        f"{len(snapshot.allocations)} allocations, "
        f"{len(snapshot.tactical_adjustments)} tactical adjustments"
    )


@snapshot_group.command("reset")
@click.confirmation_option(prompt="Delete the stored portfolio?")
@click.pass_context
def snapshot_reset(ctx: click.Context) -> None:
    """Delete the stored portfolio; the next load starts empty."""
    from ipsmonitor.config.loader import load_config, resolve_path
    from ipsmonitor.storage.database import Database
    from ipsmonitor.storage.gateway import SnapshotStore
    from ipsmonitor.storage.migrations import ensure_schema

    config = load_config(ctx.obj.get("config_path"))

    with Database(resolve_path(config.database.path)) as db:
        ensure_schema(db)
        removed = SnapshotStore(db, config.database.storage_key).reset()

    click.echo("Stored portfolio deleted." if removed else "No stored portfolio to delete.")


@snapshot_group.command("reconcile")
@click.pass_context
def snapshot_reconcile(ctx: click.Context) -> None:
    """Set allocation current weights from the stored holdings."""
    from ipsmonitor.config.loader import load_config, resolve_path
    from ipsmonitor.engine.reconciler import reconcile_with_securities
    from ipsmonitor.storage.database import Database
    from ipsmonitor.storage.gateway import SnapshotStore
    from ipsmonitor.storage.migrations import ensure_schema

    config = load_config(ctx.obj.get("config_path"))

    with Database(resolve_path(config.database.path)) as db:
        ensure_schema(db)
        store = SnapshotStore(db, config.database.storage_key)
        snapshot = store.load()
        snapshot.allocations = reconcile_with_securities(
            snapshot.allocations, snapshot.securities,
        )
        if not store.save(snapshot):
            click.echo("Failed to save snapshot.", err=True)
            raise SystemExit(1)

    for alloc in snapshot.allocations:
        flag = "  REBALANCE" if alloc.rebalancing_required else ""
        click.echo(
            f"{alloc.asset_class:32s} current {alloc.current:6.2f}%  "
            f"target {alloc.target:6.2f}%  deviation {alloc.deviation:+6.2f}{flag}"
        )
