import math

import pytest

from maintenance_dashboard.config import SUPERVISORS
from maintenance_dashboard.kpis import (
    economic_join,
    maintenance_cost_ratio,
    maintenance_kpis,
    production_kpis,
    safe_ratio,
    supervisor_rollup,
)
from maintenance_dashboard.models import (
    EconomicRecord,
    ProductionRecord,
    StoppageEvent,
    WorkOrder,
)
from maintenance_dashboard.transforms import (
    build_fact_economics,
    build_fact_production,
    build_fact_stoppages,
    build_fact_work_orders,
)

EMPTY_STOPPAGES = build_fact_stoppages([])
EMPTY_ORDERS = build_fact_work_orders([])
EMPTY_PRODUCTION = build_fact_production([])


@pytest.fixture
def production():
    return build_fact_production([
        ProductionRecord(date="2024-03-05", supervisor="ALLOI", planned_kg=1000, produced_kg=900,
                         rework_kg=10, scrap_kg=20, stoppage_min=30),
        ProductionRecord(date="2024-03-06", supervisor="ALLOI", planned_kg=1000, produced_kg=800,
                         stoppage_min=0),
        ProductionRecord(date="2024-03-06", supervisor="BOERIS", planned_kg=500, produced_kg=500,
                         stoppage_min=600),
    ])


def test_safe_ratio():
    assert safe_ratio(5, 2) == 2.5
    assert safe_ratio(5, 0) == 0
    assert safe_ratio(5, -1) == 0


# ---------------------------------------------------------------------------
# Maintenance
# ---------------------------------------------------------------------------

def test_reliability_without_failures():
    m = maintenance_kpis(EMPTY_STOPPAGES, EMPTY_ORDERS, planned_hours=720, weekly_capacity_hh=160)
    assert m["failures"] == 0
    assert m["mttr_h"] == 0
    assert m["mtbf_h"] == 0
    assert m["availability"] == 1.0
    assert m["backlog_weeks"] == 0
    assert m["pct_preventive"] == 0
    assert m["preventive_compliance_pct"] == 0


def test_reliability_with_failures():
    stoppages = build_fact_stoppages([
        StoppageEvent(downtime_min=60),
        StoppageEvent(downtime_min=120),
    ])
    m = maintenance_kpis(stoppages, EMPTY_ORDERS, planned_hours=100, weekly_capacity_hh=160)

    assert m["downtime_h"] == pytest.approx(3.0)
    assert m["mttr_h"] == pytest.approx(1.5)
    assert m["uptime_h"] == pytest.approx(97.0)
    assert m["mtbf_h"] == pytest.approx(48.5)
    assert m["availability"] == pytest.approx(0.97)


def test_availability_zero_without_planned_hours():
    stoppages = build_fact_stoppages([StoppageEvent(downtime_min=60)])
    for planned in (0, -10):
        m = maintenance_kpis(stoppages, EMPTY_ORDERS, planned_hours=planned, weekly_capacity_hh=160)
        assert m["availability"] == 0
        assert m["uptime_h"] == 0


def test_downtime_beyond_planned_hours_floors_uptime():
    stoppages = build_fact_stoppages([StoppageEvent(downtime_min=6000)])
    m = maintenance_kpis(stoppages, EMPTY_ORDERS, planned_hours=10, weekly_capacity_hh=160)
    assert m["uptime_h"] == 0
    assert m["mtbf_h"] == 0
    assert m["availability"] == 0


def test_backlog_weeks():
    orders = build_fact_work_orders([
        WorkOrder(status="En curso", labor_hours=120),
        WorkOrder(status="Planificada", labor_hours=200),
        WorkOrder(status="Completada", labor_hours=50),
        WorkOrder(status="Cancelada", labor_hours=30),
    ])
    m = maintenance_kpis(EMPTY_STOPPAGES, orders, planned_hours=720, weekly_capacity_hh=160)
    assert m["pending_hh"] == 320
    assert m["backlog_weeks"] == pytest.approx(2.0)

    m = maintenance_kpis(EMPTY_STOPPAGES, orders, planned_hours=720, weekly_capacity_hh=0)
    assert m["backlog_weeks"] == pytest.approx(320.0)


def test_preventive_compliance_and_mix():
    orders = build_fact_work_orders([
        WorkOrder(kind="Preventivo", status="Completada"),
        WorkOrder(kind="Preventivo", status="Completada"),
        WorkOrder(kind="Preventivo", status="Completada"),
        WorkOrder(kind="Preventivo", status="Planificada"),
        WorkOrder(kind="Preventivo", status="En curso"),
        WorkOrder(kind="Preventivo", status="Cancelada"),
        WorkOrder(kind="Correctivo", status="En curso"),
        WorkOrder(kind="Correctivo", status="Completada"),
    ])
    m = maintenance_kpis(EMPTY_STOPPAGES, orders, planned_hours=720, weekly_capacity_hh=160)

    assert m["preventive_completed"] == 3
    assert m["preventive_planned"] == 1
    assert m["preventive_compliance_pct"] == pytest.approx(75.0)
    assert m["pct_preventive"] == pytest.approx(75.0)
    assert m["pct_corrective"] == pytest.approx(25.0)
    assert m["pct_preventive"] + m["pct_corrective"] <= 100


def test_maintenance_cost_ratio():
    assert maintenance_cost_ratio(50_000, 1_000_000) == pytest.approx(5.0)
    assert maintenance_cost_ratio(50_000, 0) == 0


# ---------------------------------------------------------------------------
# Production / OEE
# ---------------------------------------------------------------------------

def test_oee_factors(production):
    p = production_kpis(production, minutes_per_shift=480)

    assert p["shifts"] == 3
    assert p["planned_time_min"] == 1440
    assert p["availability"] == pytest.approx((1440 - 630) / 1440)
    assert p["performance"] == pytest.approx(2200 / 2500)
    assert p["quality"] == pytest.approx((2200 - 30) / 2200)
    assert p["oee"] == p["availability"] * p["performance"] * p["quality"]


def test_oee_empty_selection():
    p = production_kpis(EMPTY_PRODUCTION, minutes_per_shift=480)
    assert p["availability"] == p["performance"] == p["quality"] == p["oee"] == 0
    assert p["oee"] == p["availability"] * p["performance"] * p["quality"]


def test_oee_shift_fully_stopped():
    df = build_fact_production([ProductionRecord(planned_kg=100, produced_kg=0, stoppage_min=900)])
    p = production_kpis(df, minutes_per_shift=480)
    assert p["uptime_min"] == 0
    assert p["availability"] == 0
    assert p["quality"] == 0
    assert p["oee"] == 0


def test_supervisor_rollup(production):
    rollup = supervisor_rollup(production, SUPERVISORS, minutes_per_shift=480)

    assert list(rollup["supervisor"]) == SUPERVISORS
    by_sup = rollup.set_index("supervisor")
    assert by_sup.loc["ALLOI", "shifts"] == 2
    assert by_sup.loc["ALLOI", "produced_kg"] == 1700
    assert by_sup.loc["AVILA", "shifts"] == 0
    assert by_sup.loc["AVILA", "oee"] == 0
    assert by_sup.loc["BOERIS", "availability"] == 0
    for row in rollup.itertuples():
        assert row.oee == pytest.approx(row.availability * row.performance * row.quality)


def test_supervisor_rollup_empty():
    rollup = supervisor_rollup(EMPTY_PRODUCTION, SUPERVISORS, minutes_per_shift=480)
    assert len(rollup) == 3
    assert (rollup["oee"] == 0).all()


# ---------------------------------------------------------------------------
# Economics
# ---------------------------------------------------------------------------

def test_economic_join_tonnage():
    production = build_fact_production([
        ProductionRecord(date="2024-03-10", sector="CHOCOLATE", produced_kg=600),
        ProductionRecord(date="2024-03-20", sector="CHOCOLATE", produced_kg=400),
        ProductionRecord(date="2024-04-02", sector="CHOCOLATE", produced_kg=1000),
        ProductionRecord(date="2024-03-20", sector="TURRON", produced_kg=5000),
    ])
    economics = build_fact_economics([
        EconomicRecord(period="2024-03", sector="CHOCOLATE", maintenance_spend=5000, energy_spend=2000),
        EconomicRecord(period="2024-03", sector="ALFAJOR", maintenance_spend=700, energy_spend=300),
    ])

    joined = economic_join(economics, production).set_index("sector")

    assert joined.loc["CHOCOLATE", "tonnes"] == pytest.approx(1.0)
    assert joined.loc["CHOCOLATE", "maintenance_per_tonne"] == pytest.approx(5000.0)
    assert joined.loc["CHOCOLATE", "energy_per_tonne"] == pytest.approx(2000.0)
    assert joined.loc["ALFAJOR", "tonnes"] == 0
    assert joined.loc["ALFAJOR", "maintenance_per_tonne"] == 0
    assert joined.loc["ALFAJOR", "energy_per_tonne"] == 0


def test_economic_join_without_production():
    economics = build_fact_economics([EconomicRecord(period="2024-03", sector="CHOCOLATE",
                                                     maintenance_spend=10)])
    joined = economic_join(economics, EMPTY_PRODUCTION)
    assert len(joined) == 1
    assert joined["maintenance_per_tonne"].iloc[0] == 0
    assert not math.isnan(joined["tonnes"].iloc[0])


def test_economic_join_without_economics():
    joined = economic_join(build_fact_economics([]), EMPTY_PRODUCTION)
    assert joined.empty
    assert "maintenance_per_tonne" in joined.columns
