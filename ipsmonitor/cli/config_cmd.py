"""Config CLI commands: show, validate."""

from __future__ import annotations

import click


@click.group("config")
def config_group() -> None:
    """Inspect the IPS limits and storage settings."""
    pass


@config_group.command("show")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of YAML")
@click.pass_context
def config_show(ctx: click.Context, as_json: bool) -> None:
    """Print the resolved configuration, defaults included."""
    from ipsmonitor.config.loader import dump_config, load_config

    config = load_config(ctx.obj.get("config_path"))
    if as_json:
        click.echo(config.model_dump_json(indent=2))
    else:
        click.echo(dump_config(config), nl=False)


@config_group.command("validate")
@click.pass_context
def config_validate(ctx: click.Context) -> None:
    """Validate the config file against the IPS schema."""
    import yaml

    from ipsmonitor.config.loader import load_config

    try:
        config = load_config(ctx.obj.get("config_path"))
    except (ValueError, yaml.YAMLError, OSError) as e:
        click.echo(f"Config validation failed: {e}", err=True)
        raise SystemExit(1) from None

    ips = config.ips
    low, high = ips.volatility_band
    click.echo("Config is valid.")
    click.echo(f"  Version: {config.version}")
    click.echo(f"  Limits: security={ips.single_security:g}% sector={ips.single_sector:g}% "
               f"region={ips.regional:g}% duration={ips.duration_years:g}y "
               f"drawdown={ips.drawdown:g}%")
    click.echo(f"  Volatility band: {low:.0%}-{high:.0%}")
    click.echo(f"  Cash band: {config.liquidity.cash_min:g}-{config.liquidity.cash_max:g}%")
    click.echo(f"  Database: {config.database.path}")
