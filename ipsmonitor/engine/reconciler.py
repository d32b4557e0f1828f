"""Strategic allocation reconciliation.

Deviation (current - target) and the rebalancing flag are derived
properties of ``Allocation``, so a caller can never observe a current value
paired with a stale deviation. The functions here expose the same rule for
loose numbers and reconcile allocations against actual holdings.
"""

from __future__ import annotations

import dataclasses
import logging

from ipsmonitor.config.defaults import REBALANCE_TOLERANCE
from ipsmonitor.engine.exposure import calculate_asset_class_exposures
from ipsmonitor.portfolio.models import Allocation, Security

logger = logging.getLogger(__name__)


def calculate_deviation(target: float, current: float) -> float:
    return current - target


def calculate_percentage_deviation(target: float, current: float) -> float:
    """Deviation relative to target, in percent; 0 when target is 0."""
    if target == 0:
        return 0.0
    return (current - target) / target * 100.0


def needs_rebalancing(deviation: float) -> bool:
    """True when |deviation| exceeds the tolerance (boundary exclusive)."""
    return abs(deviation) > REBALANCE_TOLERANCE


def check_allocation_compliance(allocations: list[Allocation]) -> bool:
    """True iff no allocation requires rebalancing."""
    return not any(alloc.rebalancing_required for alloc in allocations)


def update_allocation(allocation: Allocation, current: float) -> Allocation:
    """New allocation row with ``current`` replaced."""
    return dataclasses.replace(allocation, current=current)


def rebalancing_candidates(allocations: list[Allocation]) -> list[Allocation]:
    """Allocations outside tolerance, largest absolute deviation first."""
    flagged = [a for a in allocations if a.rebalancing_required]
    return sorted(flagged, key=lambda a: abs(a.deviation), reverse=True)


def reconcile_with_securities(
    allocations: list[Allocation],
    securities: list[Security],
) -> list[Allocation]:
    """Set each allocation's current weight from the holdings' asset-class totals.

    Asset classes with no holdings reconcile to 0. Holdings in asset classes
    with no strategic row are logged and left out.
    """
    exposures = calculate_asset_class_exposures(securities)
    known = {a.asset_class for a in allocations}
    unmatched = [label for label in exposures if label not in known]
    if unmatched:
        logger.warning("Holdings in asset classes without a strategic target: %s", unmatched)

    return [update_allocation(a, exposures.get(a.asset_class, 0.0)) for a in allocations]
