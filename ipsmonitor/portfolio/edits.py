"""Edit operations on a portfolio snapshot.

This is the edit boundary: values arriving from an editor are validated
here (non-numeric numbers raise ``ValueError``) so the calculators can
assume well-typed records. Operations mutate the snapshot in place, which
is owned by the caller.
"""

from __future__ import annotations

import dataclasses
import logging
import math
from datetime import date
from typing import Any

from ipsmonitor.config.schema import IPSMonitorConfig
from ipsmonitor.engine.liquidity import evaluate_liquidity_item
from ipsmonitor.portfolio.models import (
    Allocation,
    LiquidityItem,
    PortfolioSnapshot,
    Security,
    TacticalAdjustment,
)

logger = logging.getLogger(__name__)

_SECURITY_NUMERIC = {
    "current_weight", "target_weight", "market_value",
    "quantity", "purchase_price", "current_price", "beta",
}
_TACTICAL_NUMERIC = {"deviation_percent"}
_DERIVED = {"deviation", "rebalancing_required"}


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def to_number(value: Any, field_name: str = "value") -> float:
    """Coerce editor input to a finite float or raise ValueError."""
    if isinstance(value, bool):
        raise ValueError(f"{field_name} must be numeric, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field_name} must be numeric, got {value!r}") from None
    if math.isnan(number) or math.isinf(number):
        raise ValueError(f"{field_name} must be finite, got {value!r}")
    return number


def _clean_changes(record_cls: type, changes: dict[str, Any], numeric: set[str]) -> dict[str, Any]:
    names = {f.name for f in dataclasses.fields(record_cls)}
    cleaned: dict[str, Any] = {}
    for key, value in changes.items():
        if key in _DERIVED:
            raise ValueError(f"{key} is derived and cannot be set directly")
        if key not in names:
            raise ValueError(f"Unknown {record_cls.__name__} field: {key}")
        if key in numeric and not (key == "beta" and value is None):
            value = to_number(value, key)
        cleaned[key] = value
    return cleaned


def next_id(records: list[Any]) -> str:
    """One more than the largest numeric id; non-numeric ids are ignored."""
    numeric_ids = [int(r.id) for r in records if str(r.id).isdigit()]
    return str(max(numeric_ids, default=0) + 1)


def _index_of(records: list[Any], record_id: str, label: str) -> int:
    for idx, record in enumerate(records):
        if record.id == record_id:
            return idx
    raise KeyError(f"No {label} with id {record_id!r}")


# ---------------------------------------------------------------------------
# Allocations
# ---------------------------------------------------------------------------

def set_allocation_current(
    snapshot: PortfolioSnapshot, asset_class: str, current: Any,
) -> Allocation:
    """Set an allocation's current weight; deviation follows automatically."""
    alloc = snapshot.get_allocation(asset_class)
    if alloc is None:
        raise KeyError(f"No allocation for asset class {asset_class!r}")
    alloc.current = to_number(current, "current")
    logger.debug(
        "Allocation %s: current=%.2f deviation=%.2f rebalance=%s",
        asset_class, alloc.current, alloc.deviation, alloc.rebalancing_required,
    )
    return alloc


# ---------------------------------------------------------------------------
# Securities
# ---------------------------------------------------------------------------

def add_security(snapshot: PortfolioSnapshot, **fields: Any) -> Security:
    """Append a new security with the next free id."""
    cleaned = _clean_changes(Security, fields, _SECURITY_NUMERIC)
    cleaned.setdefault("id", next_id(snapshot.securities))
    security = Security(**cleaned)
    snapshot.securities.append(security)
    return security


def update_security(snapshot: PortfolioSnapshot, security_id: str, **changes: Any) -> Security:
    """Apply field changes to one security."""
    idx = _index_of(snapshot.securities, security_id, "security")
    cleaned = _clean_changes(Security, changes, _SECURITY_NUMERIC)
    updated = dataclasses.replace(snapshot.securities[idx], **cleaned)
    snapshot.securities[idx] = updated
    return updated


def remove_security(snapshot: PortfolioSnapshot, security_id: str) -> bool:
    """Delete a security. Returns True if one was removed."""
    before = len(snapshot.securities)
    snapshot.securities = [s for s in snapshot.securities if s.id != security_id]
    return len(snapshot.securities) < before


# ---------------------------------------------------------------------------
# Liquidity
# ---------------------------------------------------------------------------

def set_liquidity_current(
    snapshot: PortfolioSnapshot,
    item_name: str,
    current: Any,
    config: IPSMonitorConfig | None = None,
) -> LiquidityItem:
    """Set a liquidity figure and re-derive its status."""
    for idx, item in enumerate(snapshot.liquidity):
        if item.item == item_name:
            updated = evaluate_liquidity_item(
                dataclasses.replace(item, current=to_number(current, "current")), config,
            )
            snapshot.liquidity[idx] = updated
            return updated
    raise KeyError(f"No liquidity item {item_name!r}")


# ---------------------------------------------------------------------------
# Tactical adjustments
# ---------------------------------------------------------------------------

def add_tactical_adjustment(snapshot: PortfolioSnapshot, **fields: Any) -> TacticalAdjustment:
    """Log a new tactical adjustment, dated today unless given."""
    cleaned = _clean_changes(TacticalAdjustment, fields, _TACTICAL_NUMERIC)
    cleaned.setdefault("id", next_id(snapshot.tactical_adjustments))
    cleaned.setdefault("date", date.today().isoformat())
    adjustment = TacticalAdjustment(**cleaned)
    snapshot.tactical_adjustments.append(adjustment)
    return adjustment


def update_tactical_adjustment(
    snapshot: PortfolioSnapshot, adjustment_id: str, **changes: Any,
) -> TacticalAdjustment:
    """Replace an adjustment with an edited copy."""
    idx = _index_of(snapshot.tactical_adjustments, adjustment_id, "tactical adjustment")
    cleaned = _clean_changes(TacticalAdjustment, changes, _TACTICAL_NUMERIC)
    updated = dataclasses.replace(snapshot.tactical_adjustments[idx], **cleaned)
    snapshot.tactical_adjustments[idx] = updated
    return updated


def remove_tactical_adjustment(snapshot: PortfolioSnapshot, adjustment_id: str) -> bool:
    """Permanently delete an adjustment. Returns True if one was removed."""
    before = len(snapshot.tactical_adjustments)
    snapshot.tactical_adjustments = [
        a for a in snapshot.tactical_adjustments if a.id != adjustment_id
    ]
    removed = len(snapshot.tactical_adjustments) < before
    if removed:
        logger.info("Deleted tactical adjustment %s", adjustment_id)
    return removed
