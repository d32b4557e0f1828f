"""Tactical adjustment log summary.

Tactical adjustments are audit records. Their lifecycle
(Proposed -> Approved -> Active -> Completed, with Completed expected to
revert the deviation to zero) is advisory metadata for the external
approval workflow; nothing here transitions or enforces it.
"""

from __future__ import annotations

from dataclasses import dataclass

from ipsmonitor.config.defaults import TACTICAL_DEVIATION_LIMIT
from ipsmonitor.portfolio.models import TacticalAdjustment, TacticalStatus


@dataclass
class TacticalSummary:
    count: int = 0
    total_deviation: float = 0.0
    """Σ|deviation_percent| across all logged adjustments."""
    max_deviation: float = 0.0
    limit: float = TACTICAL_DEVIATION_LIMIT
    open_count: int = 0
    """Adjustments not yet marked Completed."""

    @property
    def within_limit(self) -> bool:
        return self.total_deviation <= self.limit


def total_tactical_deviation(adjustments: list[TacticalAdjustment]) -> float:
    return sum(abs(a.deviation_percent) for a in adjustments)


def max_tactical_deviation(adjustments: list[TacticalAdjustment]) -> float:
    return max((abs(a.deviation_percent) for a in adjustments), default=0.0)


def is_within_tactical_limit(
    adjustments: list[TacticalAdjustment], limit: float = TACTICAL_DEVIATION_LIMIT,
) -> bool:
    return total_tactical_deviation(adjustments) <= limit


def summarize_tactical_adjustments(
    adjustments: list[TacticalAdjustment], limit: float = TACTICAL_DEVIATION_LIMIT,
) -> TacticalSummary:
    return TacticalSummary(
        count=len(adjustments),
        total_deviation=total_tactical_deviation(adjustments),
        max_deviation=max_tactical_deviation(adjustments),
        limit=limit,
        open_count=sum(1 for a in adjustments if a.status != TacticalStatus.COMPLETED),
    )
