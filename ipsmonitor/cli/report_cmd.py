"""CLI command: ipsmonitor report -- Analytics and IPS compliance for the stored portfolio."""

from __future__ import annotations

import logging

import click

logger = logging.getLogger(__name__)


def read_returns(path: str, column: str | None = None):
    """Load a return series (fractions per period) from a CSV file.

    Uses ``column`` when given, else a column named ``return``/``returns``,
    else the first numeric column. Non-numeric cells are dropped.
    """
    import pandas as pd

    df = pd.read_csv(path)
    if column is None:
        lowered = {str(c).strip().lower(): c for c in df.columns}
        column = lowered.get("return") or lowered.get("returns")
    if column is None:
        numeric = df.select_dtypes("number").columns
        if len(numeric) == 0:
            raise click.BadParameter(f"No numeric column in {path}", param_hint="--returns")
        column = numeric[0]
    elif column not in df.columns:
        raise click.BadParameter(f"Column {column!r} not in {path}", param_hint="--column")

    series = pd.to_numeric(df[column], errors="coerce").dropna()
    logger.info("Loaded %d returns from %s[%s]", len(series), path, column)
    return series


def _label(value) -> str:
    return getattr(value, "value", value)


def _echo_exposures(title: str, exposures: dict[str, float]) -> None:
    from ipsmonitor.output.formatting import format_percentage

    click.echo(f"\n{title}:")
    if not exposures:
        click.echo("  (none)")
    for label, weight in sorted(exposures.items(), key=lambda kv: -kv[1]):
        click.echo(f"  {label:32s} {format_percentage(weight):>8s}")


@click.command("report")
@click.option("--returns", "returns_path", type=click.Path(exists=True, dir_okay=False),
              default=None, help="CSV of periodic portfolio returns")
@click.option("--column", default=None, help="Returns column name in the CSV")
@click.option("--strict", is_flag=True, help="Group unknown category labels under 'Other'")
@click.pass_context
def report_cmd(
    ctx: click.Context, returns_path: str | None, column: str | None, strict: bool,
) -> None:
    """Print exposures, risk metrics, and IPS compliance for the stored portfolio."""
    from ipsmonitor.config.loader import load_config, resolve_path
    from ipsmonitor.engine.report import build_portfolio_report
    from ipsmonitor.output.formatting import format_currency, format_percentage, format_years
    from ipsmonitor.storage.database import Database
    from ipsmonitor.storage.gateway import SnapshotStore
    from ipsmonitor.storage.migrations import ensure_schema

    config = load_config(ctx.obj.get("config_path"))
    returns = read_returns(returns_path, column) if returns_path else None

    with Database(resolve_path(config.database.path)) as db:
        ensure_schema(db)
        snapshot = SnapshotStore(db, config.database.storage_key).load()

    report = build_portfolio_report(snapshot, returns, config, strict=strict)
    exposures = report.exposures
    stats = report.statistics

    click.echo(f"IPS Portfolio Report -- {report.as_of}")
    click.echo("=" * 48)
    click.echo(f"Total value: {format_currency(snapshot.total_value)}")
    click.echo(f"Securities: {len(snapshot.securities)}  "
               f"Total weight: {format_percentage(exposures.total_weight)}")

    _echo_exposures("Asset class exposure", exposures.asset_class_exposures)
    _echo_exposures("Sector exposure", exposures.sector_exposures)
    _echo_exposures("Geographic exposure", exposures.geographic_exposures)

    conc = exposures.concentration
    click.echo("\nConcentration:")
    click.echo(f"  Max single security: {format_percentage(conc['max_single_security'])}")
    click.echo(f"  Herfindahl index:    {conc['herfindahl_index']:.0f}")
    click.echo(f"  Top {config.risk.top_n} holdings:     "
               f"{format_percentage(conc['top_ten_concentration'])}")

    click.echo("\nRisk statistics:")
    if stats.n_observations:
        click.echo(f"  Observations: {stats.n_observations}")
        click.echo(f"  Volatility:   {format_percentage(stats.volatility * 100)}")
        click.echo(f"  Sharpe:       {stats.sharpe_ratio:.2f}")
        click.echo(f"  Sortino:      {stats.sortino_ratio:.2f}")
        click.echo(f"  Max drawdown: {format_percentage(stats.max_drawdown)}")
    else:
        click.echo("  No return series supplied (use --returns)")
    click.echo(f"  Duration:     {format_years(stats.weighted_duration)}")
    click.echo(f"  Beta:         {stats.beta:.2f}")
    click.echo(f"  Risk level:   {stats.risk_level.value}")

    click.echo("\nIPS risk metrics:")
    for m in report.risk_metrics:
        click.echo(f"  {m.metric:24s} {m.ips_limit:>10s} {m.current_value:>10s}  "
                   f"{_label(m.status):9s} {m.action_required}")

    click.echo(f"\n{'=' * 48}")
    if report.security_compliance.is_compliant:
        click.echo("IPS exposure limits: COMPLIANT")
    else:
        click.echo(f"IPS BREACHES ({len(report.security_compliance.breaches)}):")
        for breach in report.security_compliance.breaches:
            click.echo(f"  - {breach}")

    if report.rebalancing:
        click.echo(f"\nREBALANCING REQUIRED ({len(report.rebalancing)}):")
        for alloc in report.rebalancing:
            click.echo(f"  {alloc.asset_class:32s} target {alloc.target:5.1f}%  "
                       f"current {alloc.current:5.1f}%  ({alloc.deviation:+.1f})")
    else:
        click.echo("\nAllocations within tolerance.")

    for level in ("critical", "warning"):
        for item in report.liquidity_alerts.get(level, []):
            click.echo(f"[{level.upper()}] {item.item}: {item.current:g} -- {item.action_needed}")

    tactical = report.tactical
    if tactical.count:
        flag = "within" if tactical.within_limit else "EXCEEDS"
        click.echo(f"\nTactical adjustments: {tactical.count} "
                   f"({tactical.open_count} open), total deviation "
                   f"{format_percentage(tactical.total_deviation)} {flag} "
                   f"{format_percentage(tactical.limit, 0)} limit")
