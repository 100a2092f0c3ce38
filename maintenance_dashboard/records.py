"""
Record store operations: create, edit and delete records.

Each operation takes a DashboardState and returns a new one; the input
state is left as it was.
"""

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Any

from .config import (
    KIND_CORRECTIVE,
    KIND_PREVENTIVE,
    STATUS_IN_PROGRESS,
    STATUS_PLANNED,
    STOPPAGE_UNPLANNED,
)
from .models import (
    Catalogs,
    DashboardState,
    EconomicRecord,
    ProductionRecord,
    StoppageEvent,
    WorkOrder,
    new_record_id,
)

logger = logging.getLogger(__name__)

_MODELS = {
    "stoppages": StoppageEvent,
    "work_orders": WorkOrder,
    "production": ProductionRecord,
    "economics": EconomicRecord,
}

COLLECTIONS = tuple(_MODELS)


def _append(state: DashboardState, collection: str, record) -> tuple[DashboardState, Any]:
    records = [*getattr(state, collection), record]
    logger.debug("Added %s record %s", collection, record.record_id)
    return replace(state, **{collection: records}), record


def add_stoppage(
    state: DashboardState,
    catalogs: Catalogs | None = None,
    now: datetime | None = None,
):
    """New unplanned stoppage stamped ``now`` (minute resolution)."""
    catalogs = catalogs or Catalogs()
    now = now or datetime.now()
    record = StoppageEvent(
        timestamp=now.strftime("%Y-%m-%dT%H:%M"),
        shift=catalogs.shifts[0] if catalogs.shifts else "",
        stoppage_type=STOPPAGE_UNPLANNED,
    )
    return _append(state, "stoppages", record)


def add_corrective_order(state: DashboardState, today: date | None = None):
    today = today or date.today()
    record = WorkOrder(date=today.isoformat(), kind=KIND_CORRECTIVE, status=STATUS_IN_PROGRESS)
    return _append(state, "work_orders", record)


def add_preventive_order(state: DashboardState, today: date | None = None):
    today = today or date.today()
    record = WorkOrder(date=today.isoformat(), kind=KIND_PREVENTIVE, status=STATUS_PLANNED)
    return _append(state, "work_orders", record)


def add_production(
    state: DashboardState,
    catalogs: Catalogs | None = None,
    today: date | None = None,
):
    """New empty shift record using the first shift, sector and supervisor."""
    catalogs = catalogs or Catalogs()
    today = today or date.today()
    record = ProductionRecord(
        date=today.isoformat(),
        shift=catalogs.shifts[0] if catalogs.shifts else "",
        sector=catalogs.sectors[0] if catalogs.sectors else "",
        supervisor=catalogs.supervisors[0] if catalogs.supervisors else "",
    )
    return _append(state, "production", record)


def add_economic(state: DashboardState, today: date | None = None):
    today = today or date.today()
    record = EconomicRecord(period=today.strftime("%Y-%m"))
    return _append(state, "economics", record)


def update_record(
    state: DashboardState,
    collection: str,
    record_id: str,
    **changes: Any,
) -> DashboardState:
    """Apply field edits to one record.

    Edits go through the model's coercion, so ``downtime_min="abc"``
    stores 0.  The identifier cannot be changed.

    Raises
    ------
    KeyError : unknown collection or record id.
    """
    if collection not in COLLECTIONS:
        raise KeyError(f"Unknown collection: {collection}")
    changes.pop("record_id", None)

    records = list(getattr(state, collection))
    for i, record in enumerate(records):
        if record.record_id == record_id:
            records[i] = record.updated(**changes)
            return replace(state, **{collection: records})
    raise KeyError(f"No {collection} record with id {record_id}")


def delete_record(state: DashboardState, collection: str, record_id: str) -> DashboardState:
    """Remove one record; unknown ids leave the collection as it was."""
    if collection not in COLLECTIONS:
        raise KeyError(f"Unknown collection: {collection}")
    records = [r for r in getattr(state, collection) if r.record_id != record_id]
    return replace(state, **{collection: records})


def replace_collection_rows(
    state: DashboardState,
    collection: str,
    rows: list[dict[str, Any]],
) -> DashboardState:
    """Replace a collection with edited table rows.

    Rows keep their ``record_id``; rows without one (newly added in the
    table editor) get a fresh identifier, as do duplicated ids.
    """
    if collection not in COLLECTIONS:
        raise KeyError(f"Unknown collection: {collection}")
    model = _MODELS[collection]

    records = []
    seen: set[str] = set()
    for row in rows:
        record = model.from_dict(row)
        if record.record_id in seen:
            record = replace(record, record_id=new_record_id())
        seen.add(record.record_id)
        records.append(record)
    return replace(state, **{collection: records})
