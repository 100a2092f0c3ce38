"""
Snapshot (de)serialization.

A snapshot is the whole dashboard state as one JSON object: the four
record collections plus the configuration and filter scalars.  Loading
never trusts the shape of what it reads; every field is either coerced
or replaced by a default.
"""

import json
import logging
from dataclasses import fields, replace
from datetime import date
from typing import Any

from .config import STATE_COLLECTION_KEYS, STATE_SCALAR_KEYS
from .loaders.errors import InvalidSnapshotError
from .models import (
    DashboardConfig,
    DashboardState,
    EconomicRecord,
    FilterState,
    ProductionRecord,
    StoppageEvent,
    WorkOrder,
    new_record_id,
    safe_float,
)

logger = logging.getLogger(__name__)

_COLLECTION_MODELS = {
    "stoppages": StoppageEvent,
    "work_orders": WorkOrder,
    "production": ProductionRecord,
    "economics": EconomicRecord,
}

_PERIOD_FIELDS = {"period_start", "period_end"}
_CONFIG_FIELDS = {f.name for f in fields(DashboardConfig)}
_FILTER_FIELDS = {f.name for f in fields(FilterState)}

_MISSING = object()


def _coerce_scalar(name: str, val: Any) -> Any:
    """Return the typed value, or _MISSING when ``val`` has the wrong shape."""
    if val is None:
        return _MISSING
    if name in _PERIOD_FIELDS:
        if not isinstance(val, str):
            return _MISSING
        try:
            return date.fromisoformat(val[:10]).isoformat()
        except ValueError:
            return _MISSING
    if name in _CONFIG_FIELDS:
        number = safe_float(val, default=float("nan"))
        return _MISSING if number != number else number
    return val if isinstance(val, str) else _MISSING


def _coerce_collection(model, val: Any) -> list:
    if not isinstance(val, list):
        return []
    records = []
    seen: set[str] = set()
    for item in val:
        if not isinstance(item, dict):
            continue
        record = model.from_dict(item)
        if record.record_id in seen:
            record = replace(record, record_id=new_record_id())
        seen.add(record.record_id)
        records.append(record)
    return records


def normalize_snapshot(raw: Any, base: DashboardState | None = None) -> DashboardState:
    """Turn an arbitrary decoded snapshot into a fully typed state.

    Parameters
    ----------
    raw : Decoded JSON.  Anything that is not a dict counts as empty.
    base : State whose scalars are used for absent / malformed fields.
           Defaults to a fresh DashboardState.

    Returns
    -------
    DashboardState.  Collections missing from ``raw`` are empty; they are
    never taken from ``base``.
    """
    base = base or DashboardState()
    if not isinstance(raw, dict):
        logger.warning("Snapshot is %s, not an object; using defaults", type(raw).__name__)
        raw = {}

    filter_values = {}
    config_values = {}
    for name, key in STATE_SCALAR_KEYS.items():
        value = _coerce_scalar(name, raw.get(key))
        if name in _FILTER_FIELDS:
            filter_values[name] = getattr(base.filters, name) if value is _MISSING else value
        else:
            config_values[name] = getattr(base.config, name) if value is _MISSING else value

    collections = {
        name: _coerce_collection(_COLLECTION_MODELS[name], raw.get(key))
        for name, key in STATE_COLLECTION_KEYS.items()
    }

    return DashboardState(
        filters=FilterState(**filter_values),
        config=DashboardConfig(**config_values),
        **collections,
    )


def serialize_snapshot(state: DashboardState) -> dict[str, Any]:
    """Complete wire-keyed snapshot of ``state``."""
    out: dict[str, Any] = {}
    for name, key in STATE_SCALAR_KEYS.items():
        source = state.filters if name in _FILTER_FIELDS else state.config
        out[key] = getattr(source, name)
    for name, key in STATE_COLLECTION_KEYS.items():
        out[key] = [record.to_dict() for record in getattr(state, name)]
    return out


def dump_snapshot_json(state: DashboardState) -> str:
    """JSON text for export / persistence."""
    return json.dumps(serialize_snapshot(state), ensure_ascii=False, indent=2)


def import_snapshot_json(state: DashboardState, text: str) -> DashboardState:
    """Merge an exported snapshot into ``state``.

    Collections are replaced by the imported ones (empty when absent);
    scalars absent from the file keep their current values.

    Raises
    ------
    InvalidSnapshotError : the text is not a JSON object.
    """
    try:
        raw = json.loads(text)
    except (json.JSONDecodeError, TypeError) as exc:
        logger.warning("Rejected snapshot import: %s", exc)
        raise InvalidSnapshotError(str(exc)) from exc

    if not isinstance(raw, dict):
        logger.warning("Rejected snapshot import: top level is %s", type(raw).__name__)
        raise InvalidSnapshotError("se esperaba un objeto JSON")

    merged = normalize_snapshot(raw, base=state)
    logger.info(
        "Imported snapshot: %d stoppages, %d work orders, %d production, %d economic rows",
        len(merged.stoppages), len(merged.work_orders),
        len(merged.production), len(merged.economics),
    )
    return merged
