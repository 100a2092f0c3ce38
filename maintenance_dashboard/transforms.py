"""
Data transforms: typed record lists -> fact DataFrames.

Every builder returns a frame with the full schema even when there are no
records, so downstream filters and aggregations never have to check for
missing columns.
"""

import logging
from dataclasses import fields

import pandas as pd

from .models import EconomicRecord, ProductionRecord, StoppageEvent, WorkOrder

logger = logging.getLogger(__name__)


def _schema(model) -> list[str]:
    return [f.name for f in fields(model)]


def _build_fact(records: list, model) -> pd.DataFrame:
    columns = _schema(model)
    df = pd.DataFrame([{c: getattr(r, c) for c in columns} for r in records], columns=columns)
    for col in model.NUMERIC_FIELDS:
        df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0.0).astype(float)
    return df


def build_fact_stoppages(stoppages: list[StoppageEvent]) -> pd.DataFrame:
    """fact_stoppages: one row per stoppage event, columns as StoppageEvent."""
    df = _build_fact(stoppages, StoppageEvent)
    logger.debug("Built fact_stoppages with %d rows", len(df))
    return df


def build_fact_work_orders(work_orders: list[WorkOrder]) -> pd.DataFrame:
    """fact_work_orders: one row per work order, columns as WorkOrder."""
    df = _build_fact(work_orders, WorkOrder)
    logger.debug("Built fact_work_orders with %d rows", len(df))
    return df


def build_fact_production(production: list[ProductionRecord]) -> pd.DataFrame:
    """fact_production: one row per shift record.

    Adds ``month`` (``YYYY-MM`` taken from the record date) for the
    economic join.
    """
    df = _build_fact(production, ProductionRecord)
    df["month"] = df["date"].astype(str).str.slice(0, 7)
    logger.debug("Built fact_production with %d rows", len(df))
    return df


def build_fact_economics(economics: list[EconomicRecord]) -> pd.DataFrame:
    """fact_economics: one row per (period, sector) spend entry."""
    df = _build_fact(economics, EconomicRecord)
    df["period"] = df["period"].astype(str).str.slice(0, 7)
    logger.debug("Built fact_economics with %d rows", len(df))
    return df
