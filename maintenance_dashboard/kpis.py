"""
Pure KPI computation functions with no side effects.

Inputs are already-filtered fact frames (see filters.py) plus scalar
configuration.  Every division is guarded, so an empty selection yields
zeros rather than inf / NaN, and nothing here raises on degenerate input.
"""

import logging

import pandas as pd

from .config import (
    CLOSED_STATUSES,
    KG_PER_TONNE,
    KIND_CORRECTIVE,
    KIND_PREVENTIVE,
    MINUTES_PER_HOUR,
    STATUS_COMPLETED,
    STATUS_PLANNED,
)

logger = logging.getLogger(__name__)


def safe_ratio(numerator: float, denominator: float) -> float:
    """numerator / denominator, or 0 when the denominator is not positive."""
    if denominator > 0:
        return numerator / denominator
    return 0.0


def _total(df: pd.DataFrame, column: str) -> float:
    if df.empty or column not in df.columns:
        return 0.0
    return float(pd.to_numeric(df[column], errors="coerce").fillna(0.0).sum())


# ---------------------------------------------------------------------------
# Maintenance
# ---------------------------------------------------------------------------

def maintenance_kpis(
    stoppages: pd.DataFrame,
    work_orders: pd.DataFrame,
    planned_hours: float,
    weekly_capacity_hh: float,
) -> dict:
    """Reliability and work-order KPIs for the filtered selection.

    Rules
    -----
    - MTTR = downtime hours / failures; MTBF = uptime hours / failures
      (both 0 without failures).
    - Availability = uptime / planned hours (0 when planned hours <= 0).
    - Preventive compliance only weighs Planned and Completed preventive
      orders; In-progress and Cancelled ones are left out.
    - Backlog = labour hours of orders not Completed/Cancelled, in weeks
      of ``max(1, weekly_capacity_hh)``.
    - Preventive/corrective shares use ``max(1, total orders)``.

    Returns
    -------
    Dict with downtime_min, downtime_h, failures, uptime_h, mttr_h, mtbf_h,
    availability, preventive_planned, preventive_completed,
    preventive_compliance_pct, pending_hh, backlog_weeks, preventive_count,
    corrective_count, total_orders, pct_preventive, pct_corrective.
    """
    downtime_min = _total(stoppages, "downtime_min")
    downtime_h = downtime_min / MINUTES_PER_HOUR
    failures = len(stoppages)

    uptime_h = max(0.0, planned_hours - downtime_h)
    mttr_h = downtime_h / failures if failures > 0 else 0.0
    mtbf_h = uptime_h / failures if failures > 0 else 0.0
    availability = safe_ratio(uptime_h, planned_hours)

    if work_orders.empty:
        kinds = pd.Series(dtype=object)
        statuses = pd.Series(dtype=object)
    else:
        kinds = work_orders["kind"]
        statuses = work_orders["status"]

    is_preventive = kinds == KIND_PREVENTIVE
    is_corrective = kinds == KIND_CORRECTIVE
    preventive_planned = int((is_preventive & (statuses == STATUS_PLANNED)).sum())
    preventive_completed = int((is_preventive & (statuses == STATUS_COMPLETED)).sum())
    preventive_compliance_pct = (
        preventive_completed / max(1, preventive_completed + preventive_planned) * 100
    )

    pending = work_orders[~statuses.isin(CLOSED_STATUSES)] if not work_orders.empty else work_orders
    pending_hh = _total(pending, "labor_hours")
    backlog_weeks = pending_hh / max(1.0, weekly_capacity_hh)

    preventive_count = int(is_preventive.sum())
    corrective_count = int(is_corrective.sum())
    total_orders = len(work_orders)
    pct_preventive = preventive_count / max(1, total_orders) * 100
    pct_corrective = corrective_count / max(1, total_orders) * 100

    return {
        "downtime_min": downtime_min,
        "downtime_h": downtime_h,
        "failures": failures,
        "uptime_h": uptime_h,
        "mttr_h": mttr_h,
        "mtbf_h": mtbf_h,
        "availability": availability,
        "preventive_planned": preventive_planned,
        "preventive_completed": preventive_completed,
        "preventive_compliance_pct": preventive_compliance_pct,
        "pending_hh": pending_hh,
        "backlog_weeks": backlog_weeks,
        "preventive_count": preventive_count,
        "corrective_count": corrective_count,
        "total_orders": total_orders,
        "pct_preventive": pct_preventive,
        "pct_corrective": pct_corrective,
    }


def maintenance_cost_ratio(maintenance_cost: float, sales: float) -> float:
    """Maintenance cost as a percentage of sales (0 without sales)."""
    return safe_ratio(maintenance_cost, sales) * 100


# ---------------------------------------------------------------------------
# Production / OEE
# ---------------------------------------------------------------------------

def production_kpis(production: pd.DataFrame, minutes_per_shift: float) -> dict:
    """OEE and its factors over shift records.

    Each record is one shift of ``minutes_per_shift`` planned minutes.

    - Availability = (planned time - stoppage minutes, floored at 0) / planned time
    - Performance  = produced kg / planned kg
    - Quality      = (produced - rework - scrap) / produced
    - OEE          = availability * performance * quality
    """
    shifts = len(production)
    planned_time_min = shifts * minutes_per_shift
    stoppage_min = _total(production, "stoppage_min")
    uptime_min = max(0.0, planned_time_min - stoppage_min)

    planned_kg = _total(production, "planned_kg")
    produced_kg = _total(production, "produced_kg")
    rework_kg = _total(production, "rework_kg")
    scrap_kg = _total(production, "scrap_kg")

    availability = safe_ratio(uptime_min, planned_time_min)
    performance = safe_ratio(produced_kg, planned_kg)
    quality = safe_ratio(produced_kg - rework_kg - scrap_kg, produced_kg)
    oee = availability * performance * quality

    avg_plan_compliance_pct = safe_ratio(_total(production, "plan_compliance_pct"), shifts)

    return {
        "shifts": shifts,
        "planned_time_min": planned_time_min,
        "stoppage_min": stoppage_min,
        "uptime_min": uptime_min,
        "availability": availability,
        "performance": performance,
        "quality": quality,
        "oee": oee,
        "planned_kg": planned_kg,
        "produced_kg": produced_kg,
        "rework_kg": rework_kg,
        "scrap_kg": scrap_kg,
        "avg_plan_compliance_pct": avg_plan_compliance_pct,
    }


def supervisor_rollup(
    production: pd.DataFrame,
    supervisors: list[str],
    minutes_per_shift: float,
) -> pd.DataFrame:
    """OEE breakdown per supervisor, one row for every catalog supervisor.

    Returns
    -------
    DataFrame with columns:
        supervisor, shifts, produced_kg, availability, performance,
        quality, oee
    """
    columns = ["supervisor", "shifts", "produced_kg", "availability", "performance", "quality", "oee"]
    rows = []
    for supervisor in supervisors:
        if production.empty:
            subset = production
        else:
            subset = production[production["supervisor"] == supervisor]
        kpis = production_kpis(subset, minutes_per_shift)
        rows.append({"supervisor": supervisor, **{c: kpis[c] for c in columns[1:]}})

    return pd.DataFrame(rows, columns=columns)


# ---------------------------------------------------------------------------
# Economics
# ---------------------------------------------------------------------------

def economic_join(economics: pd.DataFrame, production: pd.DataFrame) -> pd.DataFrame:
    """Spend per tonne for every economic record.

    Tonnage is the produced kg of production rows sharing the record's
    (month, sector), divided by 1000.  Spend per tonne is 0 when that
    tonnage is 0.

    Returns
    -------
    DataFrame with columns:
        record_id, period, sector, maintenance_spend, energy_spend,
        tonnes, maintenance_per_tonne, energy_per_tonne
    """
    columns = [
        "record_id", "period", "sector", "maintenance_spend", "energy_spend",
        "tonnes", "maintenance_per_tonne", "energy_per_tonne",
    ]
    if economics.empty:
        return pd.DataFrame(columns=columns)

    if production.empty:
        tonnage = pd.DataFrame(columns=["period", "sector", "tonnes"])
    else:
        tonnage = (
            production.groupby(["month", "sector"], as_index=False)["produced_kg"].sum()
            .rename(columns={"month": "period"})
        )
        tonnage["tonnes"] = tonnage["produced_kg"] / KG_PER_TONNE
        tonnage = tonnage[["period", "sector", "tonnes"]]

    merged = economics.merge(tonnage, on=["period", "sector"], how="left")
    merged["tonnes"] = pd.to_numeric(merged["tonnes"], errors="coerce").fillna(0.0).astype(float)

    positive = merged["tonnes"].where(merged["tonnes"] > 0)
    merged["maintenance_per_tonne"] = merged["maintenance_spend"].div(positive).fillna(0.0)
    merged["energy_per_tonne"] = merged["energy_spend"].div(positive).fillna(0.0)

    logger.debug("Joined %d economic rows against production tonnage", len(merged))
    return merged[columns].reset_index(drop=True)
