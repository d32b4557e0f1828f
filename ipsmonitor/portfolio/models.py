"""Portfolio domain records.

Plain dataclasses for the portfolio snapshot and its child collections.
Records carry no behaviour beyond derived properties; every calculation
lives in ``ipsmonitor.engine``.

Serialization contract
----------------------
``to_dict()`` produces the persisted camelCase shape (derived fields such as
``deviation`` included for display consumers); ``from_dict()`` accepts that
shape, tolerates missing keys, and ignores derived keys so they can never be
set independently of the values they are derived from. Present values are
checked against the field annotations; a mistyped value raises ValueError.
"""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass, field
from datetime import date as _date
from enum import Enum
from typing import Any, TypeVar

from ipsmonitor.config.defaults import REBALANCE_TOLERANCE

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Category enums
# ---------------------------------------------------------------------------

class _Category(str, Enum):
    """Closed category set with an ``OTHER`` fallback."""

    @classmethod
    def coerce(cls, label: Any) -> "_Category":
        """Map a free-form label onto the enum, unknown labels to OTHER."""
        text = str(label or "").strip().casefold()
        for member in cls:
            if member.value.casefold() == text:
                return member
        return cls("Other")


class AssetClass(_Category):
    FIXED_INCOME = "Fixed Income"
    DOMESTIC_EQUITIES = "Domestic Equities"
    REGIONAL_EQUITIES = "Regional (EAC/SADC) Equities"
    CASH = "Cash & Cash Equivalents"
    OTHER = "Other"


class Sector(_Category):
    BANKING = "Banking"
    TELECOMMUNICATIONS = "Telecommunications"
    CONSUMER_GOODS = "Consumer Goods"
    GOVERNMENT = "Government"
    TECHNOLOGY = "Technology"
    ENERGY = "Energy"
    OTHER = "Other"


class Region(_Category):
    TANZANIA = "Tanzania"
    KENYA = "Kenya"
    UGANDA = "Uganda"
    SOUTH_AFRICA = "South Africa"
    REGIONAL = "Regional"
    OTHER = "Other"


# ---------------------------------------------------------------------------
# Status enums
# ---------------------------------------------------------------------------

class MetricStatus(str, Enum):
    COMPLIANT = "Compliant"
    WARNING = "Warning"
    BREACH = "Breach"


class LiquidityStatus(str, Enum):
    ADEQUATE = "Adequate"
    WARNING = "Warning"
    CRITICAL = "Critical"


class TacticalStatus(str, Enum):
    """Advisory lifecycle of a tactical adjustment (not enforced)."""
    PROPOSED = "Proposed"
    APPROVED = "Approved"
    ACTIVE = "Active"
    COMPLETED = "Completed"


class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _record_to_dict(record: Any) -> dict[str, Any]:
    return {_camel(f.name): _plain(getattr(record, f.name)) for f in dataclasses.fields(record)}


def _as_number(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value!r}")
    return float(value)


def _field_value(record_name: str, f: dataclasses.Field, value: Any) -> Any:
    """Check one persisted value against its field annotation."""
    name = f"{record_name}.{_camel(f.name)}"
    annotation = f.type
    if annotation == "float":
        return _as_number(value, name)
    if annotation == "float | None":
        return None if value is None else _as_number(value, name)
    if annotation == "bool":
        if not isinstance(value, bool):
            raise ValueError(f"{name} must be true or false, got {value!r}")
        return value
    # Text fields; numeric ids from older payloads are kept as text
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise ValueError(f"{name} must be text, got {value!r}")


def _record_from_dict(cls: type[T], data: dict[str, Any]) -> T:
    if not isinstance(data, dict):
        raise TypeError(f"{cls.__name__} row must be an object, got {type(data).__name__}")
    kwargs = {}
    for f in dataclasses.fields(cls):
        key = _camel(f.name)
        if key in data:
            kwargs[f.name] = _field_value(cls.__name__, f, data[key])
    return cls(**kwargs)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass
class Security:
    """One security position."""

    id: str = ""
    name: str = ""
    ticker: str = ""
    asset_class: str = AssetClass.DOMESTIC_EQUITIES.value
    sector: str = Sector.BANKING.value
    geographic_exposure: str = Region.TANZANIA.value
    current_weight: float = 0.0
    target_weight: float = 0.0
    market_value: float = 0.0
    quantity: float = 0.0
    purchase_price: float = 0.0
    current_price: float = 0.0
    notes: str = ""
    ips_compliant: bool = True
    instrument_type: str = ""
    """Descriptive label for the duration table (e.g. 'T-Bill')."""
    beta: float | None = None

    @property
    def deviation(self) -> float:
        """Current minus target weight, in percentage points."""
        return self.current_weight - self.target_weight

    def to_dict(self) -> dict[str, Any]:
        return {**_record_to_dict(self), "deviation": self.deviation}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Security:
        return _record_from_dict(cls, data)


@dataclass
class Allocation:
    """Strategic asset-class allocation row."""

    asset_class: str = ""
    target: float = 0.0
    current: float = 0.0
    notes: str = ""

    @property
    def deviation(self) -> float:
        return self.current - self.target

    @property
    def rebalancing_required(self) -> bool:
        return abs(self.deviation) > REBALANCE_TOLERANCE

    def to_dict(self) -> dict[str, Any]:
        return {
            **_record_to_dict(self),
            "deviation": self.deviation,
            "rebalancingRequired": self.rebalancing_required,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Allocation:
        return _record_from_dict(cls, data)


@dataclass
class RiskMetric:
    metric: str = ""
    ips_limit: str = ""
    current_value: str = "—"
    status: str = MetricStatus.COMPLIANT
    action_required: str = "None"

    def to_dict(self) -> dict[str, Any]:
        return _record_to_dict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RiskMetric:
        return _record_from_dict(cls, data)


@dataclass
class LiquidityItem:
    item: str = ""
    minimum: float | None = None
    maximum: float | None = None
    current: float = 0.0
    status: str = LiquidityStatus.ADEQUATE
    action_needed: str = ""

    def to_dict(self) -> dict[str, Any]:
        return _record_to_dict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LiquidityItem:
        return _record_from_dict(cls, data)


@dataclass(frozen=True)
class TacticalAdjustment:
    """Audit record of a short-term deviation from strategic allocation.

    Frozen: edits go through ``dataclasses.replace`` so every change is an
    explicit new record.
    """

    id: str = ""
    date: str = ""
    tactical_move: str = ""
    deviation_percent: float = 0.0
    market_signal: str = ""
    duration: str = ""
    approved_by: str = ""
    notes: str = ""
    status: str = TacticalStatus.PROPOSED

    def to_dict(self) -> dict[str, Any]:
        return _record_to_dict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TacticalAdjustment:
        return _record_from_dict(cls, data)


@dataclass
class PerformanceMetric:
    metric: str = ""
    target: str = ""
    current: str = "—"
    deviation: str = "—"
    notes: str = ""

    def to_dict(self) -> dict[str, Any]:
        return _record_to_dict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PerformanceMetric:
        return _record_from_dict(cls, data)


@dataclass
class ComplianceCheck:
    area: str = ""
    ips_limit: str = ""
    current_status: str = MetricStatus.COMPLIANT
    breach: bool = False
    action_required: str = "None"

    def to_dict(self) -> dict[str, Any]:
        return _record_to_dict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ComplianceCheck:
        return _record_from_dict(cls, data)


@dataclass
class ComplianceReport:
    """Result of testing IPS rules; derived, never persisted on its own."""

    is_compliant: bool = True
    breaches: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"isCompliant": self.is_compliant, "breaches": list(self.breaches)}


# ---------------------------------------------------------------------------
# Aggregate root
# ---------------------------------------------------------------------------

_COLLECTIONS: dict[str, tuple[str, type]] = {
    "allocations": ("allocations", Allocation),
    "securities": ("securities", Security),
    "risk_metrics": ("riskMetrics", RiskMetric),
    "liquidity": ("liquidity", LiquidityItem),
    "tactical_adjustments": ("tacticalAdjustments", TacticalAdjustment),
    "performance_metrics": ("performanceMetrics", PerformanceMetric),
    "compliance_checks": ("complianceChecks", ComplianceCheck),
}


@dataclass
class PortfolioSnapshot:
    """The whole portfolio at a point in time; owns every child record."""

    date: str = ""
    total_value: float = 0.0
    allocations: list[Allocation] = field(default_factory=list)
    securities: list[Security] = field(default_factory=list)
    risk_metrics: list[RiskMetric] = field(default_factory=list)
    liquidity: list[LiquidityItem] = field(default_factory=list)
    tactical_adjustments: list[TacticalAdjustment] = field(default_factory=list)
    performance_metrics: list[PerformanceMetric] = field(default_factory=list)
    compliance_checks: list[ComplianceCheck] = field(default_factory=list)

    @classmethod
    def empty(cls, as_of: str | None = None) -> PortfolioSnapshot:
        """Snapshot with every collection empty, dated today unless given."""
        return cls(date=as_of or _date.today().isoformat())

    def get_security(self, security_id: str) -> Security | None:
        for sec in self.securities:
            if sec.id == security_id:
                return sec
        return None

    def get_allocation(self, asset_class: str) -> Allocation | None:
        for alloc in self.allocations:
            if alloc.asset_class == asset_class:
                return alloc
        return None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"date": self.date, "totalValue": self.total_value}
        for attr, (key, _) in _COLLECTIONS.items():
            data[key] = [record.to_dict() for record in getattr(self, attr)]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PortfolioSnapshot:
        """Build a snapshot from its persisted shape.

        Raises TypeError/ValueError on structurally invalid payloads; the
        storage gateway decides how to degrade.
        """
        if not isinstance(data, dict):
            raise TypeError(f"Snapshot payload must be an object, got {type(data).__name__}")

        # Older payloads stored liquidity rows under "liquidityItems"
        if "liquidity" not in data and "liquidityItems" in data:
            data = {**data, "liquidity": data["liquidityItems"]}

        kwargs: dict[str, Any] = {
            "date": str(data.get("date") or _date.today().isoformat()),
            "total_value": _as_number(data.get("totalValue") or 0, "totalValue"),
        }
        for attr, (key, record_cls) in _COLLECTIONS.items():
            rows = data.get(key) or []
            if not isinstance(rows, list):
                raise TypeError(f"Snapshot field {key!r} must be a list")
            kwargs[attr] = [record_cls.from_dict(row) for row in rows]
        return cls(**kwargs)
