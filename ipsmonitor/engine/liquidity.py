"""Liquidity status derivation.

Each liquidity item has its own rule:

  - Cash & Cash Equivalents: inside [10, 15] Adequate, below Critical
    (raise cash), above Warning (deploy the excess).
  - Time to Liquidate 80% Portfolio: up to 30 days Adequate, else Warning.

Other items carry manually entered status and are returned unchanged.
"""

from __future__ import annotations

import dataclasses

from ipsmonitor.config.defaults import CASH_ITEM, TIME_TO_LIQUIDATE_ITEM
from ipsmonitor.config.schema import IPSMonitorConfig
from ipsmonitor.portfolio.models import LiquidityItem, LiquidityStatus


def evaluate_liquidity_item(
    item: LiquidityItem,
    config: IPSMonitorConfig | None = None,
) -> LiquidityItem:
    """Return a copy of ``item`` with status and action re-derived."""
    if config is None:
        config = IPSMonitorConfig()
    bands = config.liquidity

    if item.item == CASH_ITEM:
        if item.current < bands.cash_min:
            status = LiquidityStatus.CRITICAL
            action = f"Raise cash immediately - Below {bands.cash_min:g}% minimum"
        elif item.current > bands.cash_max:
            status = LiquidityStatus.WARNING
            action = "Excess cash - Consider deploying"
        else:
            status = LiquidityStatus.ADEQUATE
            action = "None - Within range"
    elif item.item == TIME_TO_LIQUIDATE_ITEM:
        if item.current <= bands.max_days_to_liquidate:
            status = LiquidityStatus.ADEQUATE
            action = f"None - Within {bands.max_days_to_liquidate:g} days"
        else:
            status = LiquidityStatus.WARNING
            action = "Liquidity concern - Portfolio too concentrated"
    else:
        return item

    return dataclasses.replace(item, status=status, action_needed=action)


def evaluate_liquidity(
    items: list[LiquidityItem],
    config: IPSMonitorConfig | None = None,
) -> list[LiquidityItem]:
    return [evaluate_liquidity_item(item, config) for item in items]


def liquidity_alerts(items: list[LiquidityItem]) -> dict[str, list[LiquidityItem]]:
    """Group items needing attention: {"critical": [...], "warning": [...]}."""
    return {
        "critical": [i for i in items if i.status == LiquidityStatus.CRITICAL],
        "warning": [i for i in items if i.status == LiquidityStatus.WARNING],
    }
