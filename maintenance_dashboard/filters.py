"""
Filter engine: period window plus facet filters over fact DataFrames.

Pure functions; the input frame is never modified.
"""

import logging
from dataclasses import replace

import pandas as pd

from .config import ALL_LINES, ALL_SUPERVISORS, INACTIVE_FACET_VALUES
from .models import Catalogs, FilterState

logger = logging.getLogger(__name__)

_ISO_WALL_CLOCK = r"^(\d{4}-\d{2}-\d{2}(?:[T ]\d{2}:\d{2}(?::\d{2})?)?)"


def is_active(value: str | None) -> bool:
    """A facet restricts only when it holds a concrete value."""
    return value is not None and str(value).strip() not in INACTIVE_FACET_VALUES


def period_bounds(start: str, end: str) -> tuple[pd.Timestamp, pd.Timestamp]:
    """Inclusive bounds: ``start`` at 00:00 and ``end`` at 23:59:59.

    Unparseable bounds come back as NaT.
    """
    lo = pd.to_datetime(start, errors="coerce")
    hi = pd.to_datetime(end, errors="coerce")
    if pd.notna(lo):
        lo = lo.normalize()
    if pd.notna(hi):
        hi = hi.normalize() + pd.Timedelta(hours=23, minutes=59, seconds=59)
    return lo, hi


def filter_by_period(df: pd.DataFrame, column: str, start: str, end: str) -> pd.DataFrame:
    """Rows whose ``column`` timestamp lies within the inclusive period.

    Rows with an unparseable timestamp never match, and an unparseable
    bound matches nothing.
    """
    lo, hi = period_bounds(start, end)
    if df.empty or pd.isna(lo) or pd.isna(hi):
        return df.iloc[0:0].copy()

    # Wall-clock part only; a trailing UTC offset would mix tz-aware values in
    wall_clock = df[column].astype(str).str.extract(_ISO_WALL_CLOCK, expand=False)
    ts = pd.to_datetime(wall_clock, errors="coerce", format="ISO8601")
    mask = (ts >= lo) & (ts <= hi)
    return df[mask].copy()


def filter_by_facets(
    df: pd.DataFrame,
    filters: FilterState,
    sector_optional: bool = False,
) -> pd.DataFrame:
    """Conjunctive facet filter.

    Parameters
    ----------
    df : Fact frame.  Facets whose column is absent do not restrict.
    filters : Current selection; inactive facets are no-ops.
    sector_optional : Rows with an empty sector pass the sector facet
        (work orders are often logged without one).

    Notes
    -----
    The supervisor facet matches either ``supervisor`` or ``responsible``.
    """
    mask = pd.Series(True, index=df.index)

    if is_active(filters.line) and "line" in df.columns:
        mask &= df["line"] == filters.line

    if is_active(filters.shift) and "shift" in df.columns:
        mask &= df["shift"] == filters.shift

    if is_active(filters.sector) and "sector" in df.columns:
        by_sector = df["sector"] == filters.sector
        if sector_optional:
            by_sector |= df["sector"].fillna("").astype(str).str.strip() == ""
        mask &= by_sector

    if is_active(filters.supervisor):
        person_cols = [c for c in ("supervisor", "responsible") if c in df.columns]
        if person_cols:
            by_person = pd.Series(False, index=df.index)
            for col in person_cols:
                by_person |= df[col] == filters.supervisor
            mask &= by_person

    return df[mask].copy()


def apply_filters(
    df: pd.DataFrame,
    date_column: str,
    filters: FilterState,
    sector_optional: bool = False,
) -> pd.DataFrame:
    """Period filter first, then facets."""
    in_period = filter_by_period(df, date_column, filters.period_start, filters.period_end)
    result = filter_by_facets(in_period, filters, sector_optional=sector_optional)
    logger.debug(
        "Filtered %d -> %d (period) -> %d (facets) rows on %s",
        len(df), len(in_period), len(result), date_column,
    )
    return result


def filter_economics(df: pd.DataFrame, filters: FilterState) -> pd.DataFrame:
    """Economic rows whose month overlaps the period, narrowed by sector."""
    start_month = str(filters.period_start)[:7]
    end_month = str(filters.period_end)[:7]
    period = df["period"].astype(str)
    mask = (period >= start_month) & (period <= end_month)
    if is_active(filters.sector):
        mask &= df["sector"] == filters.sector
    return df[mask].copy()


def without_supervisor(filters: FilterState) -> FilterState:
    """Same selection with the supervisor facet cleared."""
    return replace(filters, supervisor=ALL_SUPERVISORS)


def line_options(sector: str | None, catalogs: Catalogs | None = None) -> list[str]:
    """Line choices offered for the selected sector.

    ``["Todas", *sector lines]``, or every catalog line when no sector is
    selected.  An unknown sector offers only the sentinel.
    """
    catalogs = catalogs or Catalogs()
    if not is_active(sector):
        return [ALL_LINES, *catalogs.all_lines()]
    return [ALL_LINES, *catalogs.lines_for(sector)]
