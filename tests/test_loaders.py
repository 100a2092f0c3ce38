import io
from datetime import datetime

import openpyxl
import pytest

from maintenance_dashboard.loaders import (
    EmptyCsvError,
    ImportFailure,
    InvalidWorkbookError,
    MissingHeadersError,
    NoValidRowsError,
    import_production_csv,
    load_production_csv,
    load_production_workbook,
)
from maintenance_dashboard.loaders.utils import (
    normalise_date,
    parse_locale_number,
    parse_sector,
    parse_shift,
    parse_supervisor,
)
from maintenance_dashboard.models import Catalogs, DashboardState, ProductionRecord

HEADER = (
    "FECHA,TURNO,SECTOR,KG PLAN,LINEA,KG PRODUCIDOS,KG REPROCESO,"
    "KG DECOMISO,TIEMPO PARADA POR AVERIAS,SUPERVISOR"
)


@pytest.fixture
def catalogs():
    return Catalogs()


# ---------------------------------------------------------------------------
# Field parsing
# ---------------------------------------------------------------------------

def test_locale_number():
    assert parse_locale_number("1.234,5") == 1234.5
    assert parse_locale_number("abc") == 0
    assert parse_locale_number("") == 0
    assert parse_locale_number(None) == 0
    assert parse_locale_number(" 90 ") == 90
    assert parse_locale_number(12.5) == 12.5
    assert parse_locale_number("inf") == 0


def test_dates():
    assert normalise_date("2024-03-05") == "2024-03-05"
    assert normalise_date("2024-03-05 08:30") == "2024-03-05"
    assert normalise_date("05/03/2024") == "2024-03-05"
    assert normalise_date("March 5, 2024") == "2024-03-05"
    assert normalise_date(datetime(2024, 3, 5, 14, 0)) == "2024-03-05"
    assert normalise_date("not a date") is None
    assert normalise_date("now") is None
    assert normalise_date("today") is None
    assert normalise_date("Hoy") is None
    assert normalise_date("") is None
    assert normalise_date(None) is None


def test_shift_first_letter(catalogs):
    assert parse_shift("Tarde", catalogs.shifts) == "T"
    assert parse_shift("noche", catalogs.shifts) == "N"
    assert parse_shift("MAÑANA", catalogs.shifts) == "M"
    assert parse_shift("x", catalogs.shifts) == "M"
    assert parse_shift("", catalogs.shifts) == "M"


def test_sector_fallback(catalogs):
    assert parse_sector("turron", catalogs.sectors) == "TURRON"
    assert parse_sector("galletitas", catalogs.sectors) == "OTROS"
    assert parse_sector("galletitas", ["CHOCOLATE"]) == "GALLETITAS"


def test_supervisor_fallback(catalogs):
    assert parse_supervisor("avila", catalogs.supervisors) == "AVILA"
    assert parse_supervisor("PEREZ", catalogs.supervisors) == "ALLOI"


# ---------------------------------------------------------------------------
# CSV import
# ---------------------------------------------------------------------------

def test_csv_well_formed_row():
    text = HEADER + "\n2024-03-05,Tarde,CHOCOLATE,100,CV1000-1,90,5,2,15,ALLOI\n"

    records = load_production_csv(text)

    assert len(records) == 1
    rec = records[0]
    assert rec.date == "2024-03-05"
    assert rec.shift == "T"
    assert rec.sector == "CHOCOLATE"
    assert rec.planned_kg == 100
    assert rec.produced_kg == 90
    assert rec.rework_kg == 5
    assert rec.scrap_kg == 2
    assert rec.stoppage_min == 15
    assert rec.supervisor == "ALLOI"
    assert rec.line == "CV1000-1"
    assert rec.notes == ""
    assert rec.record_id


def test_csv_semicolon_locale_and_case():
    text = (
        HEADER.replace(",", ";").lower() + ";NOVEDADES;CUMP PLAN %\n"
        "05/03/2024;noche;turron;1.234,5;NAMUR;1.000;0;0;0;boeris;cambio de formato;81,0\n"
    )

    [rec] = load_production_csv(text)

    assert rec.date == "2024-03-05"
    assert rec.shift == "N"
    assert rec.sector == "TURRON"
    assert rec.planned_kg == 1234.5
    assert rec.produced_kg == 1000
    assert rec.supervisor == "BOERIS"
    assert rec.notes == "cambio de formato"
    assert rec.plan_compliance_pct == 81.0


def test_csv_plan_compliance_recomputed_without_column():
    text = HEADER + "\n2024-03-05,M,CHOCOLATE,200,CV1000-1,150,0,0,0,ALLOI\n"
    [rec] = load_production_csv(text)
    assert rec.plan_compliance_pct == pytest.approx(75.0)


def test_csv_unknown_enums_coerced():
    text = HEADER + "\n2024-03-05,Z,GALLETITAS,10,X,10,0,0,0,NADIE\n"
    [rec] = load_production_csv(text)
    assert rec.shift == "M"
    assert rec.sector == "OTROS"
    assert rec.supervisor == "ALLOI"


def test_csv_rows_without_date_are_skipped():
    text = (
        HEADER + "\n"
        ",M,CHOCOLATE,10,CV1000-1,10,0,0,0,ALLOI\n"
        "sin fecha,M,CHOCOLATE,10,CV1000-1,10,0,0,0,ALLOI\n"
        "2024-03-06,M,CHOCOLATE,10,CV1000-1,10,0,0,0,ALLOI\n"
    )
    records = load_production_csv(text)
    assert [r.date for r in records] == ["2024-03-06"]


def test_csv_stray_quote_in_notes_keeps_every_row():
    text = (
        HEADER + ",NOVEDADES\n"
        '2024-03-05,M,CHOCOLATE,100,CV1000-1,90,0,0,0,ALLOI,"tubo de 2\n'
        "2024-03-06,T,CHOCOLATE,100,CV1000-1,80,0,0,0,AVILA,sin novedad\n"
        "2024-03-07,N,CHOCOLATE,100,CV1000-1,70,0,0,0,BOERIS,\n"
    )

    records = load_production_csv(text)

    assert [r.date for r in records] == ["2024-03-05", "2024-03-06", "2024-03-07"]
    assert records[0].notes == '"tubo de 2'
    assert records[1].notes == "sin novedad"
    assert [r.produced_kg for r in records] == [90, 80, 70]


def test_csv_quoted_cells_and_surplus_fields():
    quoted_header = ",".join(f'"{h}"' for h in HEADER.split(",")) + ',"NOVEDADES"'
    text = (
        quoted_header + "\n"
        '"2024-03-05","Tarde","CHOCOLATE","100","CV1000-1","90","0","0","0","ALLOI","ok"\n'
        "2024-03-06,M,CHOCOLATE,100,CV1000-1,95,0,0,0,AVILA,cambio, limpieza\n"
    )

    first, second = load_production_csv(text)

    assert first.date == "2024-03-05"
    assert first.shift == "T"
    assert first.produced_kg == 90
    assert first.notes == "ok"
    assert second.date == "2024-03-06"
    assert second.supervisor == "AVILA"
    assert second.notes == "cambio"


def test_csv_missing_supervisor_header_leaves_state_untouched():
    existing = ProductionRecord(date="2024-03-01", produced_kg=50)
    state = DashboardState(production=[existing])
    header = HEADER.replace(",SUPERVISOR", "")
    text = header + "\n2024-03-05,T,CHOCOLATE,100,CV1000-1,90,5,2,15\n"

    with pytest.raises(MissingHeadersError) as excinfo:
        import_production_csv(state, text)

    assert excinfo.value.missing == ["SUPERVISOR"]
    assert "TIEMPO PARADA POR AVERIAS" in str(excinfo.value)
    assert state.production == [existing]


def test_csv_no_valid_rows():
    text = HEADER + "\nxx,M,CHOCOLATE,10,CV1000-1,10,0,0,0,ALLOI\n"
    with pytest.raises(NoValidRowsError):
        load_production_csv(text)


def test_csv_without_data_lines():
    with pytest.raises(EmptyCsvError):
        load_production_csv(HEADER + "\n\n   \n")


def test_import_appends_with_fresh_ids():
    existing = ProductionRecord(date="2024-03-01", produced_kg=50)
    state = DashboardState(production=[existing])
    text = (
        HEADER + "\n"
        "2024-03-05,T,CHOCOLATE,100,CV1000-1,90,5,2,15,ALLOI\n"
        "2024-03-06,M,CHOCOLATE,100,CV1000-1,95,0,0,0,AVILA\n"
    )

    new_state, imported = import_production_csv(state, text)

    assert imported == 2
    assert new_state.production[0] == existing
    assert len(new_state.production) == 3
    assert len({r.record_id for r in new_state.production}) == 3
    assert state.production == [existing]


# ---------------------------------------------------------------------------
# Excel import
# ---------------------------------------------------------------------------

def test_workbook_import(tmp_path):
    path = tmp_path / "produccion.xlsx"
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.append(["Reporte semanal"])
    ws.append([])
    ws.append(HEADER.split(",") + ["NOVEDADES"])
    ws.append([datetime(2024, 3, 5), "Tarde", "chocolate", 100, "CV1000-1", 90, 5, 2, 15, "avila", "ok"])
    ws.append([None, "M", "CHOCOLATE", 1, "CV1000-1", 1, 0, 0, 0, "ALLOI", None])
    wb.save(path)

    # The title row is taken as the header, so required columns are missing
    with pytest.raises(MissingHeadersError):
        load_production_workbook(str(path))

    ws.delete_rows(1, 2)
    wb.save(path)
    records = load_production_workbook(str(path))

    assert len(records) == 1
    rec = records[0]
    assert rec.date == "2024-03-05"
    assert rec.shift == "T"
    assert rec.sector == "CHOCOLATE"
    assert rec.produced_kg == 90
    assert rec.supervisor == "AVILA"
    assert rec.notes == "ok"


def test_workbook_not_an_xlsx_is_reported(tmp_path):
    upload = io.BytesIO(b"FECHA,TURNO\nnot a zip")
    with pytest.raises(InvalidWorkbookError) as excinfo:
        load_production_workbook(upload)
    assert isinstance(excinfo.value, ImportFailure)
    assert excinfo.value.__cause__ is not None

    path = tmp_path / "produccion.xlsx"
    path.write_bytes(b"PK\x03\x04 truncated")
    with pytest.raises(InvalidWorkbookError):
        load_production_workbook(str(path))
