import json

import pytest

from maintenance_dashboard.loaders import InvalidSnapshotError
from maintenance_dashboard.models import (
    DashboardConfig,
    DashboardState,
    FilterState,
    ProductionRecord,
    StoppageEvent,
    WorkOrder,
)
from maintenance_dashboard.snapshot import (
    dump_snapshot_json,
    import_snapshot_json,
    normalize_snapshot,
    serialize_snapshot,
)


@pytest.fixture
def state():
    return DashboardState(
        filters=FilterState(period_start="2024-03-01", period_end="2024-03-31", sector="TURRON"),
        config=DashboardConfig(planned_hours=500, sales=1_000_000),
        stoppages=[StoppageEvent(timestamp="2024-03-05T10:00", line="NAMUR", downtime_min=45)],
        work_orders=[WorkOrder(date="2024-03-06", kind="Preventivo", labor_hours=8)],
        production=[ProductionRecord(date="2024-03-05", produced_kg=900, notes="ok")],
    )


def test_serialize_uses_wire_keys(state):
    out = serialize_snapshot(state)

    assert out["periodoDesde"] == "2024-03-01"
    assert out["horasPlanificadas"] == 500
    assert out["filtroSector"] == "TURRON"
    assert out["paradas"][0]["downtimeMin"] == 45
    assert out["ots"][0]["hh"] == 8
    assert out["produccion"][0]["kgProd"] == 900
    assert out["economia"] == []
    assert out["paradas"][0]["id"] == state.stoppages[0].record_id


def test_round_trip(state):
    restored = normalize_snapshot(json.loads(dump_snapshot_json(state)))
    assert restored == state


def test_normalize_is_idempotent():
    raw = {
        "periodoDesde": "2024-03-01T00:00:00Z",
        "horasPlanificadas": "650",
        "paradas": [
            {"fecha": "2024-03-05T10:00", "downtimeMin": "abc"},
            {"id": "dup", "downtimeMin": -5},
            {"id": "dup", "costoARS": 10},
        ],
        "produccion": [{"kgProd": None, "novedades": 42}],
    }
    once = normalize_snapshot(raw)
    twice = normalize_snapshot(serialize_snapshot(once))
    assert twice == once


def test_empty_snapshot_defaults():
    state = normalize_snapshot({})
    assert state.stoppages == []
    assert state.work_orders == []
    assert state.production == []
    assert state.economics == []
    assert state.config.planned_hours == 720
    assert state.config.weekly_capacity_hh == 160
    assert state.filters.sector == "Todos"
    assert state.filters.line == "Todas"


def test_wrong_shapes_are_coerced():
    raw = {
        "paradas": "not a list",
        "ots": [1, "x", None, {"tipo": "Preventivo", "hh": "abc", "costoARS": "12.5"}],
        "produccion": {"kgProd": 1},
        "horasPlanificadas": "nope",
        "capacidadHHsemana": None,
        "periodoHasta": 20240331,
        "filtroTurno": ["T"],
    }
    state = normalize_snapshot(raw)

    assert state.stoppages == []
    assert state.production == []
    assert len(state.work_orders) == 1
    order = state.work_orders[0]
    assert order.kind == "Preventivo"
    assert order.labor_hours == 0
    assert order.cost == 12.5
    assert order.record_id
    assert state.config.planned_hours == 720
    assert state.config.weekly_capacity_hh == 160
    assert state.filters.shift == "Todos"


def test_numeric_record_fields_never_nan_or_negative():
    state = normalize_snapshot({"paradas": [{"downtimeMin": "NaN"}, {"downtimeMin": -30}]})
    assert [s.downtime_min for s in state.stoppages] == [0, 0]


def test_duplicate_ids_are_reassigned():
    state = normalize_snapshot({"paradas": [{"id": "a"}, {"id": "a"}, {"id": "b"}]})
    ids = [s.record_id for s in state.stoppages]
    assert ids[0] == "a"
    assert ids[2] == "b"
    assert len(set(ids)) == 3


def test_non_object_snapshot_is_empty():
    state = normalize_snapshot([1, 2, 3])
    assert state.stoppages == []
    assert state.config == DashboardConfig()


def test_import_replaces_collections_and_keeps_scalars(state):
    text = json.dumps({
        "paradas": [{"fecha": "2024-03-10T08:00", "downtimeMin": 15}],
        "filtroLinea": "NAMUR",
    })
    merged = import_snapshot_json(state, text)

    assert len(merged.stoppages) == 1
    assert merged.stoppages[0].downtime_min == 15
    assert merged.work_orders == []
    assert merged.production == []
    assert merged.filters.line == "NAMUR"
    assert merged.filters.sector == "TURRON"
    assert merged.filters.period_start == "2024-03-01"
    assert merged.config.planned_hours == 500
    assert merged.config.sales == 1_000_000


@pytest.mark.parametrize("text", ["{not json", "", "[1, 2]", "42", "null"])
def test_import_rejects_non_objects(state, text):
    with pytest.raises(InvalidSnapshotError):
        import_snapshot_json(state, text)
