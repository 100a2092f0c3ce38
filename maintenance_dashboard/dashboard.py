"""
Dashboard-ready output functions.

These are the primary entry points for the Streamlit front end.  Each
function returns plain dicts or DataFrames suitable for rendering cards,
charts, and tables; nothing here formats numbers for display.
"""

import logging

import pandas as pd

from .config import KPI_REGISTRY
from .filters import (
    apply_filters,
    filter_economics,
    line_options,
    without_supervisor,
)
from .kpis import (
    economic_join,
    maintenance_cost_ratio,
    maintenance_kpis,
    production_kpis,
    supervisor_rollup,
)
from .models import Catalogs, DashboardState
from .transforms import (
    build_fact_economics,
    build_fact_production,
    build_fact_stoppages,
    build_fact_work_orders,
)

logger = logging.getLogger(__name__)


def get_filtered_frames(state: DashboardState) -> dict[str, pd.DataFrame]:
    """Every collection after the current period + facet selection.

    ``production_all_supervisors`` ignores the supervisor facet so that
    supervisors can be compared side by side.
    """
    filters = state.filters
    fact_production = build_fact_production(state.production)

    return {
        "stoppages": apply_filters(build_fact_stoppages(state.stoppages), "timestamp", filters),
        "work_orders": apply_filters(
            build_fact_work_orders(state.work_orders), "date", filters, sector_optional=True
        ),
        "production": apply_filters(fact_production, "date", filters),
        "production_all_supervisors": apply_filters(
            fact_production, "date", without_supervisor(filters)
        ),
        "production_unfiltered": fact_production,
        "economics": filter_economics(build_fact_economics(state.economics), filters),
    }


def get_dashboard_overview(state: DashboardState, catalogs: Catalogs | None = None) -> dict:
    """Single entry point a front end calls after every state change.

    Returns
    -------
    Dict with keys:
        filters, line_options, maintenance, production, supervisors,
        economics, cost_to_sales_pct, counts
    """
    catalogs = catalogs or Catalogs()
    config = state.config
    frames = get_filtered_frames(state)

    maintenance = maintenance_kpis(
        frames["stoppages"], frames["work_orders"],
        config.planned_hours, config.weekly_capacity_hh,
    )
    production = production_kpis(frames["production"], config.minutes_per_shift)
    supervisors = supervisor_rollup(
        frames["production_all_supervisors"], catalogs.supervisors, config.minutes_per_shift
    )
    # Tonnage comes from every production row of the month, not the facet selection
    economics = economic_join(frames["economics"], frames["production_unfiltered"])

    counts = {
        "stoppages": len(frames["stoppages"]),
        "work_orders": len(frames["work_orders"]),
        "production": len(frames["production"]),
        "economics": len(frames["economics"]),
    }
    logger.info("Recomputed overview for %s..%s: %s",
                state.filters.period_start, state.filters.period_end, counts)

    return {
        "filters": state.filters,
        "line_options": line_options(state.filters.sector, catalogs),
        "maintenance": maintenance,
        "production": production,
        "supervisors": supervisors,
        "economics": economics,
        "cost_to_sales_pct": maintenance_cost_ratio(config.maintenance_cost, config.sales),
        "counts": counts,
    }


def build_kpi_cards(overview: dict) -> list[dict]:
    """KPI cards for the indicator grid.

    Each card is ``{"key", "title", "value", "unit", "hint"}`` where
    ``value`` is already scaled for its unit (ratios as percent) and
    ``hint`` holds the raw numbers shown under the value.
    """
    m = overview["maintenance"]
    p = overview["production"]

    sources = {
        "mtbf_h": (m["mtbf_h"], {"failures": m["failures"]}),
        "mttr_h": (m["mttr_h"], {"downtime_h": m["downtime_h"]}),
        "availability": (m["availability"], {"uptime_h": m["uptime_h"]}),
        "preventive_compliance_pct": (
            m["preventive_compliance_pct"],
            {
                "completed": m["preventive_completed"],
                "scheduled": m["preventive_completed"] + m["preventive_planned"],
            },
        ),
        "pct_preventive": (
            m["pct_preventive"], {"count": m["preventive_count"], "total": m["total_orders"]}
        ),
        "pct_corrective": (
            m["pct_corrective"], {"count": m["corrective_count"], "total": m["total_orders"]}
        ),
        "produced_kg": (p["produced_kg"], {"avg_plan_compliance_pct": p["avg_plan_compliance_pct"]}),
        "oee": (
            p["oee"],
            {
                "availability": p["availability"],
                "performance": p["performance"],
                "quality": p["quality"],
            },
        ),
        "backlog_weeks": (m["backlog_weeks"], {"pending_hh": m["pending_hh"]}),
    }

    cards = []
    for key, (value, hint) in sources.items():
        registry = KPI_REGISTRY[key]
        cards.append({
            "key": key,
            "title": registry["title"],
            "value": value * registry["scale"],
            "unit": registry["unit"],
            "hint": hint,
        })
    return cards


def get_downtime_by_line(stoppages: pd.DataFrame) -> pd.DataFrame:
    """Downtime minutes and failure count per line, largest first."""
    if stoppages.empty:
        return pd.DataFrame(columns=["line", "downtime_min", "failures"])

    df = stoppages.copy()
    df["line"] = df["line"].replace("", "(sin línea)")
    result = (
        df.groupby("line", as_index=False)
        .agg(downtime_min=("downtime_min", "sum"), failures=("record_id", "count"))
        .sort_values("downtime_min", ascending=False)
        .reset_index(drop=True)
    )
    return result
