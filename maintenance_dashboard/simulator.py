"""
Simulated data generator for the maintenance dashboard.

Generates a month of plausible stoppages, work orders, shift production
and spend so the dashboard can be demoed without a real export.  All
values are synthetic.
"""

from dataclasses import replace
from datetime import date, timedelta

import numpy as np

from .config import (
    AREAS,
    CRITICALITY,
    KIND_CORRECTIVE,
    KIND_PREVENTIVE,
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    STATUS_PLANNED,
    STOPPAGE_TYPES,
)
from .models import (
    Catalogs,
    DashboardState,
    EconomicRecord,
    FilterState,
    ProductionRecord,
    StoppageEvent,
    WorkOrder,
    default_period,
)

# ---------------------------------------------------------------------------
# Typical line parameters (kg planned per shift)
# ---------------------------------------------------------------------------
_LINE_PLAN_KG = {
    "CV1000-1": 2_400,
    "CV1000-2": 2_200,
    "DELVER": 1_100,
    "NAMUR": 900,
    "FLYNN": 1_600,
    "PACK PLUS": 800,
}

_ROOT_CAUSES = [
    "Rotura de correa",
    "Falla de sensor",
    "Atasco de film",
    "Temperatura fuera de rango",
    "Falta de envoltorio",
    "Ajuste de formato",
]

_EQUIPMENT = ["Envolvedora", "Templadora", "Dosificadora", "Túnel de frío", "Balanza"]


def _sector_of(line: str, catalogs: Catalogs) -> str:
    for sector, lines in catalogs.lines_by_sector.items():
        if line in lines:
            return sector
    return catalogs.sectors[0] if catalogs.sectors else ""


def _days(year: int, month: int) -> list[date]:
    first = date(year, month, 1)
    days = []
    day = first
    while day.month == month:
        days.append(day)
        day += timedelta(days=1)
    return days


def generate_production(
    year: int,
    month: int,
    catalogs: Catalogs | None = None,
    seed: int = 42,
) -> list[ProductionRecord]:
    """One record per weekday, shift and line."""
    catalogs = catalogs or Catalogs()
    rng = np.random.default_rng(seed)
    records = []

    for day in _days(year, month):
        if day.weekday() >= 5:
            continue
        for shift in catalogs.shifts:
            supervisor = catalogs.supervisors[int(rng.integers(len(catalogs.supervisors)))]
            for line, plan in _LINE_PLAN_KG.items():
                produced = max(0.0, plan * rng.normal(0.93, 0.06))
                rework = produced * rng.uniform(0.0, 0.03)
                scrap = produced * rng.uniform(0.0, 0.015)
                stoppage = float(rng.choice([0, 0, 0, 10, 20, 35, 60]))
                records.append(ProductionRecord(
                    date=day.isoformat(),
                    shift=shift,
                    sector=_sector_of(line, catalogs),
                    line=line,
                    planned_kg=float(plan),
                    produced_kg=round(produced, 1),
                    plan_compliance_pct=round(produced / plan * 100, 1),
                    rework_kg=round(rework, 1),
                    scrap_kg=round(scrap, 1),
                    stoppage_min=stoppage,
                    supervisor=supervisor,
                ))

    return records


def generate_stoppages(
    year: int,
    month: int,
    catalogs: Catalogs | None = None,
    n_events: int = 40,
    seed: int = 7,
) -> list[StoppageEvent]:
    """Random stoppages spread over the month."""
    catalogs = catalogs or Catalogs()
    rng = np.random.default_rng(seed)
    days = _days(year, month)
    lines = list(_LINE_PLAN_KG)
    records = []

    for _ in range(n_events):
        day = days[int(rng.integers(len(days)))]
        line = lines[int(rng.integers(len(lines)))]
        hour = int(rng.integers(6, 22))
        minute = int(rng.integers(0, 60))
        downtime = float(np.round(rng.gamma(2.0, 20.0)))
        records.append(StoppageEvent(
            timestamp=f"{day.isoformat()}T{hour:02d}:{minute:02d}",
            line=line,
            shift=catalogs.shifts[min(len(catalogs.shifts) - 1, (hour - 6) // 8)],
            sector=_sector_of(line, catalogs),
            area=AREAS[int(rng.integers(len(AREAS)))],
            equipment=_EQUIPMENT[int(rng.integers(len(_EQUIPMENT)))],
            stoppage_type=STOPPAGE_TYPES[int(rng.choice(len(STOPPAGE_TYPES), p=[0.7, 0.2, 0.1]))],
            root_cause=_ROOT_CAUSES[int(rng.integers(len(_ROOT_CAUSES)))],
            criticality=CRITICALITY[int(rng.integers(len(CRITICALITY)))],
            downtime_min=downtime,
            cost=round(downtime * rng.uniform(800, 1500), 0),
            supervisor=catalogs.supervisors[int(rng.integers(len(catalogs.supervisors)))],
        ))

    return records


def generate_work_orders(
    year: int,
    month: int,
    n_orders: int = 30,
    seed: int = 11,
) -> list[WorkOrder]:
    """Mixed corrective and preventive orders with realistic states."""
    rng = np.random.default_rng(seed)
    days = _days(year, month)
    lines = list(_LINE_PLAN_KG)
    records = []

    for i in range(n_orders):
        day = days[int(rng.integers(len(days)))]
        preventive = rng.uniform() < 0.55
        if preventive:
            status = [STATUS_PLANNED, STATUS_COMPLETED, STATUS_IN_PROGRESS][
                int(rng.choice(3, p=[0.35, 0.55, 0.10]))
            ]
        else:
            status = [STATUS_IN_PROGRESS, STATUS_COMPLETED][int(rng.choice(2, p=[0.4, 0.6]))]
        executed = status == STATUS_COMPLETED
        records.append(WorkOrder(
            date=day.isoformat(),
            execution_date=(day + timedelta(days=int(rng.integers(0, 4)))).isoformat() if executed else "",
            line=lines[int(rng.integers(len(lines)))],
            equipment=_EQUIPMENT[int(rng.integers(len(_EQUIPMENT)))],
            kind=KIND_PREVENTIVE if preventive else KIND_CORRECTIVE,
            status=status,
            criticality=CRITICALITY[int(rng.integers(len(CRITICALITY)))],
            external_ref=f"OT-{year}{month:02d}-{i + 1:03d}",
            responsible="Mantenimiento",
            labor_hours=float(rng.integers(2, 24)),
            cost=round(float(rng.uniform(20_000, 250_000)), 0),
        ))

    return records


def generate_economics(
    year: int,
    month: int,
    catalogs: Catalogs | None = None,
    seed: int = 3,
) -> list[EconomicRecord]:
    """One spend row per sector that has demo production."""
    catalogs = catalogs or Catalogs()
    rng = np.random.default_rng(seed)
    sectors = sorted({_sector_of(line, catalogs) for line in _LINE_PLAN_KG})
    return [
        EconomicRecord(
            period=f"{year}-{month:02d}",
            sector=sector,
            maintenance_spend=round(float(rng.uniform(4_000, 12_000)), 2),
            energy_spend=round(float(rng.uniform(6_000, 18_000)), 2),
        )
        for sector in sectors
    ]


def generate_demo_state(
    year: int | None = None,
    month: int | None = None,
    catalogs: Catalogs | None = None,
) -> DashboardState:
    """Full demo state with the filter period set to the generated month."""
    today = date.today()
    year = year or today.year
    month = month or today.month
    start, end = default_period(date(year, month, 1))

    state = DashboardState(
        filters=FilterState(period_start=start, period_end=end),
        stoppages=generate_stoppages(year, month, catalogs),
        work_orders=generate_work_orders(year, month),
        production=generate_production(year, month, catalogs),
        economics=generate_economics(year, month, catalogs),
    )
    return replace(state, config=replace(state.config, sales=2_500_000.0, maintenance_cost=95_000.0))
