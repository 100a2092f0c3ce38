"""
Shared utilities for data ingestion: date normalisation, locale-tolerant
numbers and catalog coercion.
"""

import logging
import math
import re
from datetime import date, datetime
from typing import Any

import pandas as pd

from ..config import OTHER_SECTOR
from ..models import as_text

logger = logging.getLogger(__name__)

_ISO_PREFIX = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
_DAY_FIRST = re.compile(r"^(\d{2})/(\d{2})/(\d{4})")
_HAS_DIGIT = re.compile(r"\d")


def _iso(year: int, month: int, day: int) -> str | None:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def normalise_date(val: Any) -> str | None:
    """Convert a raw date value to an ISO ``YYYY-MM-DD`` string.

    Accepted, in priority order:

    - ``datetime`` / ``date`` / ``pd.Timestamp`` objects (spreadsheet cells)
    - Excel serial numbers (1899-12-30 epoch)
    - strings starting with ``YYYY-MM-DD`` (time suffix ignored)
    - strings starting with ``DD/MM/YYYY``
    - anything else containing a digit that ``pd.Timestamp`` can parse

    Returns None for unparseable values.
    """
    if val is None:
        return None
    if isinstance(val, (pd.Timestamp, datetime)):
        return None if pd.isna(val) else val.strftime("%Y-%m-%d")
    if isinstance(val, date):
        return val.isoformat()
    if isinstance(val, (int, float)) and not isinstance(val, bool):
        if not math.isfinite(val):
            return None
        try:
            ts = pd.Timestamp("1899-12-30") + pd.Timedelta(days=int(val))
        except (ValueError, OverflowError):
            logger.debug("Could not convert serial number %s to date", val)
            return None
        return ts.strftime("%Y-%m-%d")

    text = as_text(val)
    if not text:
        return None

    m = _ISO_PREFIX.match(text)
    if m:
        return _iso(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    m = _DAY_FIRST.match(text)
    if m:
        return _iso(int(m.group(3)), int(m.group(2)), int(m.group(1)))

    # Words alone ("now", "today") would resolve to the import date
    if not _HAS_DIGIT.search(text):
        logger.debug("Rejected date value without digits: %s", text)
        return None

    try:
        ts = pd.Timestamp(text)
    except (ValueError, TypeError, OverflowError):
        logger.debug("Could not parse date value: %s", text)
        return None
    if pd.isna(ts):
        return None
    return ts.strftime("%Y-%m-%d")


def parse_locale_number(val: Any) -> float:
    """Parse a spreadsheet number written with es-AR conventions.

    Thousands separators (``.``) are stripped and the decimal comma becomes
    a point, so ``"1.234,5"`` -> 1234.5.  Native numbers pass through.
    Anything unparseable or non-finite is 0.
    """
    if isinstance(val, bool):
        return 0.0
    if isinstance(val, (int, float)):
        return float(val) if math.isfinite(val) else 0.0

    cleaned = as_text(val).replace(".", "").replace(",", ".", 1)
    if not cleaned:
        return 0.0
    try:
        number = float(cleaned)
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


def parse_shift(val: Any, shifts: list[str]) -> str:
    """Map a shift label to its catalog code by first letter.

    "Tarde", "t", "TARDE" -> "T".  Defaults to the first shift.
    """
    default = shifts[0] if shifts else ""
    text = as_text(val).upper()
    if not text:
        return default
    for code in shifts:
        if code and text.startswith(code[0].upper()):
            return code
    return default


def parse_sector(val: Any, sectors: list[str]) -> str:
    """Upper-case and validate a sector against the catalog.

    Unknown sectors collapse to the catch-all sector when the catalog has
    one; otherwise the upper-cased value passes through.
    """
    text = as_text(val).upper()
    if text in sectors:
        return text
    if OTHER_SECTOR in sectors:
        return OTHER_SECTOR
    return text


def parse_supervisor(val: Any, supervisors: list[str]) -> str:
    """Exact (case-folded) supervisor match, else the catalog's first entry."""
    text = as_text(val).upper()
    if text in supervisors:
        return text
    return supervisors[0] if supervisors else text


def plan_compliance(planned_kg: float, produced_kg: float) -> float:
    """Return produced/planned as a percentage (0 when nothing was planned)."""
    if planned_kg > 0:
        return produced_kg / planned_kg * 100
    return 0.0
