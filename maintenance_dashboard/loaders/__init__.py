"""Data ingestion loaders for production exports and dashboard snapshots."""

from .errors import (
    EmptyCsvError,
    ImportFailure,
    InvalidSnapshotError,
    InvalidWorkbookError,
    MissingHeadersError,
    NoValidRowsError,
)
from .production import import_production_csv, load_production_csv
from .production import load_production_workbook

__all__ = [
    "EmptyCsvError",
    "ImportFailure",
    "InvalidSnapshotError",
    "InvalidWorkbookError",
    "MissingHeadersError",
    "NoValidRowsError",
    "import_production_csv",
    "load_production_csv",
    "load_production_workbook",
]
