"""
Typed records and state values.

Every record is a frozen dataclass with explicit defaults.  ``from_dict``
is the single place where untrusted input (JSON snapshots, form edits) is
coerced: numeric fields fall back to 0, text fields to their default, and
a missing identifier gets a fresh one.  ``to_dict`` writes the wire keys
listed in config.py.
"""

import math
from dataclasses import dataclass, field, fields, replace
from datetime import date, timedelta
from typing import Any, ClassVar
from uuid import uuid4

from .config import (
    ALL_LINES,
    ALL_SECTORS,
    ALL_SHIFTS,
    ALL_SUPERVISORS,
    DEFAULT_MINUTES_PER_SHIFT,
    DEFAULT_PLANNED_HOURS,
    DEFAULT_WEEKLY_CAPACITY_HH,
    ECONOMIC_WIRE_KEYS,
    KIND_CORRECTIVE,
    LINES_BY_SECTOR,
    PRODUCTION_WIRE_KEYS,
    SECTORS,
    SHIFTS,
    STATUS_IN_PROGRESS,
    STOPPAGE_UNPLANNED,
    STOPPAGE_WIRE_KEYS,
    SUPERVISORS,
    WORK_ORDER_WIRE_KEYS,
)


# ---------------------------------------------------------------------------
# Field coercion
# ---------------------------------------------------------------------------

def new_record_id() -> str:
    """Return a fresh, collision-resistant record identifier."""
    return str(uuid4())


def as_text(val: Any) -> str:
    """Coerce a cell / JSON value to a stripped string ('' for missing)."""
    if val is None:
        return ""
    if isinstance(val, float) and math.isnan(val):
        return ""
    return str(val).strip()


def safe_float(val: Any, default: float = 0.0) -> float:
    """Coerce an already-typed value (JSON, form field) to a finite float."""
    if val is None or isinstance(val, bool):
        return default
    if isinstance(val, str):
        val = val.strip()
        if not val:
            return default
    try:
        number = float(val)
    except (ValueError, TypeError):
        return default
    return number if math.isfinite(number) else default


class WireRecord:
    """Mixin: dict <-> dataclass conversion through a wire-key map."""

    WIRE_KEYS: ClassVar[dict[str, str]] = {}
    NUMERIC_FIELDS: ClassVar[frozenset[str]] = frozenset()
    NON_NEGATIVE_FIELDS: ClassVar[frozenset[str]] = frozenset()

    @classmethod
    def from_dict(cls, raw: dict[str, Any]):
        """Build a record from a wire-keyed (or attribute-keyed) dict."""
        values: dict[str, Any] = {}
        for f in fields(cls):
            wire_key = cls.WIRE_KEYS.get(f.name, f.name)
            val = raw.get(wire_key, raw.get(f.name))
            if f.name in cls.NUMERIC_FIELDS:
                number = safe_float(val)
                if f.name in cls.NON_NEGATIVE_FIELDS:
                    number = max(0.0, number)
                values[f.name] = number
            elif f.name == "record_id":
                values[f.name] = as_text(val) or new_record_id()
            elif val is None:
                continue
            else:
                values[f.name] = as_text(val)
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        return {
            self.WIRE_KEYS.get(f.name, f.name): getattr(self, f.name)
            for f in fields(self)
        }

    def updated(self, **changes):
        """Return a copy with ``changes`` applied through the same coercion."""
        raw = {f.name: getattr(self, f.name) for f in fields(self)}
        raw.update(changes)
        raw["record_id"] = self.record_id
        return type(self).from_dict(raw)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StoppageEvent(WireRecord):
    timestamp: str = ""
    line: str = ""
    shift: str = "M"
    sector: str = ""
    area: str = ""
    equipment: str = ""
    stoppage_type: str = STOPPAGE_UNPLANNED
    root_cause: str = ""
    criticality: str = "B"
    downtime_min: float = 0.0
    cost: float = 0.0
    supervisor: str = ""
    responsible: str = ""
    record_id: str = field(default_factory=new_record_id)

    WIRE_KEYS: ClassVar[dict[str, str]] = STOPPAGE_WIRE_KEYS
    NUMERIC_FIELDS: ClassVar[frozenset[str]] = frozenset({"downtime_min", "cost"})
    NON_NEGATIVE_FIELDS: ClassVar[frozenset[str]] = frozenset({"downtime_min"})


@dataclass(frozen=True)
class WorkOrder(WireRecord):
    date: str = ""
    execution_date: str = ""
    line: str = ""
    shift: str = "M"
    sector: str = ""
    equipment: str = ""
    kind: str = KIND_CORRECTIVE
    status: str = STATUS_IN_PROGRESS
    criticality: str = "B"
    external_ref: str = ""
    responsible: str = ""
    supervisor: str = ""
    vendor: str = ""
    parts: str = ""
    cost: float = 0.0
    labor_hours: float = 0.0
    record_id: str = field(default_factory=new_record_id)

    WIRE_KEYS: ClassVar[dict[str, str]] = WORK_ORDER_WIRE_KEYS
    NUMERIC_FIELDS: ClassVar[frozenset[str]] = frozenset({"cost", "labor_hours"})
    NON_NEGATIVE_FIELDS: ClassVar[frozenset[str]] = frozenset({"labor_hours"})


@dataclass(frozen=True)
class ProductionRecord(WireRecord):
    date: str = ""
    shift: str = "M"
    sector: str = "CHOCOLATE"
    line: str = ""
    planned_kg: float = 0.0
    produced_kg: float = 0.0
    plan_compliance_pct: float = 0.0
    rework_kg: float = 0.0
    scrap_kg: float = 0.0
    stoppage_min: float = 0.0
    supervisor: str = "ALLOI"
    notes: str = ""
    record_id: str = field(default_factory=new_record_id)

    WIRE_KEYS: ClassVar[dict[str, str]] = PRODUCTION_WIRE_KEYS
    NUMERIC_FIELDS: ClassVar[frozenset[str]] = frozenset({
        "planned_kg", "produced_kg", "plan_compliance_pct",
        "rework_kg", "scrap_kg", "stoppage_min",
    })


@dataclass(frozen=True)
class EconomicRecord(WireRecord):
    period: str = ""
    sector: str = ""
    maintenance_spend: float = 0.0
    energy_spend: float = 0.0
    record_id: str = field(default_factory=new_record_id)

    WIRE_KEYS: ClassVar[dict[str, str]] = ECONOMIC_WIRE_KEYS
    NUMERIC_FIELDS: ClassVar[frozenset[str]] = frozenset({"maintenance_spend", "energy_spend"})


# ---------------------------------------------------------------------------
# Filter, configuration and catalogs
# ---------------------------------------------------------------------------

def default_period(today: date | None = None) -> tuple[str, str]:
    """First and last calendar day of the month containing ``today``."""
    today = today or date.today()
    first = today.replace(day=1)
    next_month = (first + timedelta(days=32)).replace(day=1)
    last = next_month - timedelta(days=1)
    return first.isoformat(), last.isoformat()


def _default_start() -> str:
    return default_period()[0]


def _default_end() -> str:
    return default_period()[1]


@dataclass(frozen=True)
class FilterState:
    period_start: str = field(default_factory=_default_start)
    period_end: str = field(default_factory=_default_end)
    sector: str = ALL_SECTORS
    line: str = ALL_LINES
    shift: str = ALL_SHIFTS
    supervisor: str = ALL_SUPERVISORS

    def with_sector(self, sector: str) -> "FilterState":
        """Select a sector; the line selection no longer applies and resets."""
        return replace(self, sector=sector, line=ALL_LINES)


@dataclass(frozen=True)
class DashboardConfig:
    planned_hours: float = DEFAULT_PLANNED_HOURS
    weekly_capacity_hh: float = DEFAULT_WEEKLY_CAPACITY_HH
    minutes_per_shift: float = DEFAULT_MINUTES_PER_SHIFT
    sales: float = 0.0
    maintenance_cost: float = 0.0


@dataclass(frozen=True)
class Catalogs:
    sectors: list[str] = field(default_factory=lambda: list(SECTORS))
    lines_by_sector: dict[str, list[str]] = field(
        default_factory=lambda: {k: list(v) for k, v in LINES_BY_SECTOR.items()}
    )
    supervisors: list[str] = field(default_factory=lambda: list(SUPERVISORS))
    shifts: list[str] = field(default_factory=lambda: list(SHIFTS))

    def all_lines(self) -> list[str]:
        """Every catalog line once, in first-seen order."""
        seen: dict[str, None] = {}
        for lines in self.lines_by_sector.values():
            for line in lines:
                seen.setdefault(line, None)
        return list(seen)

    def lines_for(self, sector: str) -> list[str]:
        return list(self.lines_by_sector.get(sector, []))


@dataclass(frozen=True)
class DashboardState:
    filters: FilterState = field(default_factory=FilterState)
    config: DashboardConfig = field(default_factory=DashboardConfig)
    stoppages: list[StoppageEvent] = field(default_factory=list)
    work_orders: list[WorkOrder] = field(default_factory=list)
    production: list[ProductionRecord] = field(default_factory=list)
    economics: list[EconomicRecord] = field(default_factory=list)
