"""
Loaders for shift-level production exports (CSV and Excel).

Source: the plant's production spreadsheet, exported by hand.  Column
order, delimiter, date format and casing vary between exports.

Assumptions
-----------
- One header line, then one data line per shift record.
- Header names are matched after strip + upper-case.
- All of CSV_REQUIRED_HEADERS must be present; NOVEDADES and
  CUMP PLAN % are optional.
- A row without a parseable FECHA is skipped without comment.
- Cells are split on the delimiter only; double quotes are not
  grouping characters.
"""

import csv
import io
import logging
from dataclasses import replace
from typing import IO, Any, Iterable

import openpyxl
import pandas as pd

from ..config import (
    CSV_COLUMN_MAP,
    CSV_NOTES_HEADER,
    CSV_PLAN_COMPLIANCE_HEADER,
    CSV_REQUIRED_HEADERS,
)
from ..models import Catalogs, DashboardState, ProductionRecord, as_text
from .errors import (
    EmptyCsvError,
    InvalidWorkbookError,
    MissingHeadersError,
    NoValidRowsError,
)
from .utils import (
    normalise_date,
    parse_locale_number,
    parse_sector,
    parse_shift,
    parse_supervisor,
    plan_compliance,
)

logger = logging.getLogger(__name__)

_NUMERIC_HEADERS = ["KG PLAN", "KG PRODUCIDOS", "KG REPROCESO", "KG DECOMISO", "TIEMPO PARADA POR AVERIAS"]


def detect_delimiter(header_line: str) -> str:
    """``;`` if the header line contains one, else ``,``."""
    return ";" if ";" in header_line else ","


def normalise_headers(headers: Iterable[Any]) -> list[str]:
    return [as_text(h).lstrip("\ufeff").strip().upper() for h in headers]


def unquote(val: Any) -> str:
    """Strip one pair of enclosing double quotes; a lone quote is kept."""
    text = as_text(val)
    if len(text) >= 2 and text[0] == text[-1] == '"':
        return text[1:-1].strip()
    return text


def check_headers(headers: list[str]) -> None:
    """Raise MissingHeadersError unless every required header is present."""
    missing = [h for h in CSV_REQUIRED_HEADERS if h not in headers]
    if missing:
        logger.warning("Production import rejected, missing headers: %s", missing)
        raise MissingHeadersError(missing, CSV_REQUIRED_HEADERS)


def row_to_record(
    row: dict[str, Any],
    catalogs: Catalogs,
    has_compliance: bool,
) -> ProductionRecord | None:
    """Normalise one header-keyed row; None when it has no usable date."""
    fecha = normalise_date(row.get("FECHA"))
    if not fecha:
        return None

    values = {
        CSV_COLUMN_MAP[h]: parse_locale_number(row.get(h)) for h in _NUMERIC_HEADERS
    }
    if has_compliance:
        compliance = parse_locale_number(row.get(CSV_PLAN_COMPLIANCE_HEADER))
    else:
        compliance = plan_compliance(values["planned_kg"], values["produced_kg"])

    return ProductionRecord(
        date=fecha,
        shift=parse_shift(row.get("TURNO"), catalogs.shifts),
        sector=parse_sector(row.get("SECTOR"), catalogs.sectors),
        line=as_text(row.get("LINEA")),
        plan_compliance_pct=compliance,
        supervisor=parse_supervisor(row.get("SUPERVISOR"), catalogs.supervisors),
        notes=as_text(row.get(CSV_NOTES_HEADER)),
        **values,
    )


def records_from_rows(
    rows: Iterable[dict[str, Any]],
    headers: list[str],
    catalogs: Catalogs,
) -> list[ProductionRecord]:
    """Validate headers, then normalise every row that has a date."""
    check_headers(headers)
    has_compliance = CSV_PLAN_COMPLIANCE_HEADER in headers

    records = []
    skipped = 0
    for row in rows:
        record = row_to_record(row, catalogs, has_compliance)
        if record is None:
            skipped += 1
            continue
        records.append(record)

    if skipped:
        logger.debug("Skipped %d production rows without a parseable date", skipped)
    if not records:
        logger.warning("Production import produced no valid rows")
        raise NoValidRowsError()
    return records


def load_production_csv(text: str, catalogs: Catalogs | None = None) -> list[ProductionRecord]:
    """Parse a production CSV export into new ProductionRecords.

    Parameters
    ----------
    text : Raw file contents (already decoded).
    catalogs : Shift / sector / supervisor catalogs used for coercion.

    Returns
    -------
    List of records with fresh identifiers, in file order.

    Raises
    ------
    EmptyCsvError : fewer than two non-blank lines.
    MissingHeadersError : a required header is absent.
    NoValidRowsError : no row had a parseable date.
    """
    catalogs = catalogs or Catalogs()
    lines = [line for line in text.lstrip("\ufeff").splitlines() if line.strip()]
    if len(lines) < 2:
        logger.warning("Production CSV has no data lines")
        raise EmptyCsvError()

    delimiter = detect_delimiter(lines[0])
    n_fields = len(lines[0].split(delimiter))

    # Quotes are data, not grouping: a stray '"' in one cell must not
    # swallow the following lines.  Surplus fields are dropped.
    try:
        df = pd.read_csv(
            io.StringIO("\n".join(lines)),
            sep=delimiter,
            dtype=str,
            keep_default_na=False,
            index_col=False,
            quoting=csv.QUOTE_NONE,
            engine="python",
            on_bad_lines=lambda fields: fields[:n_fields],
        )
        raw_headers = list(df.columns)
        raw_rows = df.fillna("").values.tolist()
    except pd.errors.ParserError:
        logger.warning("Could not tokenise production CSV; splitting lines on %r", delimiter)
        raw_headers = lines[0].split(delimiter)
        raw_rows = [line.split(delimiter) for line in lines[1:]]

    headers = normalise_headers(unquote(h) for h in raw_headers)
    rows = [dict(zip(headers, (unquote(v) for v in values))) for values in raw_rows]
    records = records_from_rows(rows, headers, catalogs)

    logger.info("Loaded %d production rows from CSV (delimiter %r)", len(records), delimiter)
    return records


def load_production_workbook(path: str | IO[bytes], catalogs: Catalogs | None = None) -> list[ProductionRecord]:
    """Load production rows from the first sheet of an Excel export.

    Assumptions
    -----------
    - ``path`` is a filesystem path or an open binary file (uploads).
    - The first row with any non-empty cell is the header row.
    - Date cells may be real datetimes, Excel serials or text.
    - Numeric cells may be native numbers or es-AR formatted text.

    Raises
    ------
    InvalidWorkbookError : the file is not a readable .xlsx workbook.
    EmptyCsvError : no data rows below the header row.
    MissingHeadersError : a required header is absent.
    NoValidRowsError : no row had a parseable date.
    """
    catalogs = catalogs or Catalogs()
    try:
        wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
    except Exception as exc:
        logger.exception("Failed to open production workbook: %s", path)
        raise InvalidWorkbookError(str(exc)) from exc

    headers: list[str] | None = None
    rows = []
    try:
        ws = wb.worksheets[0]
        for values in ws.iter_rows(values_only=True):
            if all(v is None or as_text(v) == "" for v in values):
                continue
            if headers is None:
                headers = normalise_headers(values)
                continue
            rows.append(dict(zip(headers, values)))
    except Exception as exc:
        logger.exception("Failed to read production workbook: %s", path)
        raise InvalidWorkbookError(str(exc)) from exc
    finally:
        wb.close()

    if headers is None or not rows:
        logger.warning("Production workbook %s has no data rows", path)
        raise EmptyCsvError()

    records = records_from_rows(rows, headers, catalogs)
    logger.info("Loaded %d production rows from %s", len(records), path)
    return records


def import_production_csv(
    state: DashboardState,
    text: str,
    catalogs: Catalogs | None = None,
) -> tuple[DashboardState, int]:
    """Append the CSV's production rows to ``state``.

    Returns the new state and the number of rows imported.  On any
    ImportFailure the exception propagates and ``state`` is unchanged.
    """
    records = load_production_csv(text, catalogs)
    new_state = replace(state, production=[*state.production, *records])
    return new_state, len(records)
