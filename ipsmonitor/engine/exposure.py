"""Exposure aggregation and concentration statistics.

Rolls security-level weights up into asset-class, sector and geographic
totals, and measures how concentrated the book is:

  - max single position (percent)
  - Herfindahl-Hirschman Index, scaled to 0-10000
  - top-N share (percent held by the N largest positions)

Labels are free-form by default: every distinct string, including the empty
string, is its own bucket. ``strict=True`` coerces labels onto the closed
category enums so typos land in "Other" instead of creating new buckets.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, TypedDict

import numpy as np
import pandas as pd

from ipsmonitor.config.defaults import TOP_N_CONCENTRATION
from ipsmonitor.portfolio.models import AssetClass, Region, Sector, Security


class ConcentrationResult(TypedDict):
    """Concentration statistics for a list of securities."""
    max_single_security: float   # Largest current weight, percent
    herfindahl_index: float      # Σ(w/100)² × 10000, range 0-10000
    top_ten_concentration: float  # Sum of the N largest weights, percent


@dataclass
class ExposureReport:
    """All exposure rollups for one list of securities."""

    asset_class_exposures: dict[str, float] = field(default_factory=dict)
    sector_exposures: dict[str, float] = field(default_factory=dict)
    geographic_exposures: dict[str, float] = field(default_factory=dict)
    concentration: ConcentrationResult = field(
        default_factory=lambda: ConcentrationResult(
            max_single_security=0.0, herfindahl_index=0.0, top_ten_concentration=0.0,
        )
    )
    total_weight: float = 0.0

    @property
    def max_sector(self) -> tuple[str, float]:
        return max_exposure(self.sector_exposures)

    @property
    def max_region(self) -> tuple[str, float]:
        return max_exposure(self.geographic_exposures)


# ---------------------------------------------------------------------------
# Category rollups
# ---------------------------------------------------------------------------

def _rollup(
    securities: list[Security],
    attr: str,
    category: type | None = None,
) -> dict[str, float]:
    """Sum current_weight by the label found in ``attr``."""
    if not securities:
        return {}

    labels = ["" if getattr(s, attr) is None else str(getattr(s, attr)) for s in securities]
    if category is not None:
        labels = [category.coerce(label).value for label in labels]

    frame = pd.DataFrame({
        "label": labels,
        "weight": [float(s.current_weight) for s in securities],
    })
    totals = frame.groupby("label", sort=False)["weight"].sum()
    return {str(label): float(total) for label, total in totals.items()}


def calculate_asset_class_exposures(
    securities: list[Security], strict: bool = False,
) -> dict[str, float]:
    """Asset class → summed current weight (percent)."""
    return _rollup(securities, "asset_class", AssetClass if strict else None)


def calculate_sector_exposures(
    securities: list[Security], strict: bool = False,
) -> dict[str, float]:
    """Sector → summed current weight (percent)."""
    return _rollup(securities, "sector", Sector if strict else None)


def calculate_geographic_exposures(
    securities: list[Security], strict: bool = False,
) -> dict[str, float]:
    """Region → summed current weight (percent)."""
    return _rollup(securities, "geographic_exposure", Region if strict else None)


def max_exposure(exposures: dict[str, float]) -> tuple[str, float]:
    """Largest bucket as (label, weight); ("", 0.0) when empty."""
    if not exposures:
        return "", 0.0
    label = max(exposures, key=exposures.__getitem__)
    return label, exposures[label]


# ---------------------------------------------------------------------------
# Concentration
# ---------------------------------------------------------------------------

def calculate_concentration(
    securities: list[Security], top_n: int = TOP_N_CONCENTRATION,
) -> ConcentrationResult:
    """Max single position, HHI (0-10000) and top-N share."""
    if not securities:
        return ConcentrationResult(
            max_single_security=0.0,
            herfindahl_index=0.0,
            top_ten_concentration=0.0,
        )

    weights = np.array([s.current_weight for s in securities], dtype=float) / 100.0
    largest_first = np.sort(weights)[::-1]

    return ConcentrationResult(
        max_single_security=float(largest_first[0] * 100.0),
        herfindahl_index=float(np.sum(weights ** 2) * 10000.0),
        top_ten_concentration=float(largest_first[:top_n].sum() * 100.0),
    )


def calculate_total_weight(securities: list[Security]) -> float:
    """Sum of current weights; ~100 for a fully specified book."""
    return float(sum(s.current_weight for s in securities))


def calculate_weighted_average(values: Iterable[tuple[float, float]]) -> float:
    """Weighted mean of (weight, value) pairs; 0 if the weights sum to 0."""
    pairs = list(values)
    total_weight = sum(w for w, _ in pairs)
    if total_weight == 0:
        return 0.0
    return sum(w * v for w, v in pairs) / total_weight


def compute_exposure_report(
    securities: list[Security],
    strict: bool = False,
    top_n: int = TOP_N_CONCENTRATION,
) -> ExposureReport:
    """Run every rollup and the concentration statistics in one pass."""
    return ExposureReport(
        asset_class_exposures=calculate_asset_class_exposures(securities, strict),
        sector_exposures=calculate_sector_exposures(securities, strict),
        geographic_exposures=calculate_geographic_exposures(securities, strict),
        concentration=calculate_concentration(securities, top_n),
        total_weight=calculate_total_weight(securities),
    )
