"""
Maintenance & Production KPI Dashboard — Interactive front end

Run with:  streamlit run app.py
"""

import logging
import sys
from dataclasses import replace
from datetime import date
from pathlib import Path

import streamlit as st
import plotly.graph_objects as go
import pandas as pd

sys.path.insert(0, str(Path(__file__).resolve().parent))

from maintenance_dashboard.config import (
    ALL_SECTORS,
    ALL_SHIFTS,
    ALL_SUPERVISORS,
    EXPORT_FILENAME,
    SHIFT_LABELS,
)
from maintenance_dashboard.dashboard import (
    build_kpi_cards,
    get_dashboard_overview,
    get_downtime_by_line,
    get_filtered_frames,
)
from maintenance_dashboard.filters import line_options
from maintenance_dashboard.loaders import (
    EmptyCsvError,
    InvalidSnapshotError,
    InvalidWorkbookError,
    MissingHeadersError,
    NoValidRowsError,
    import_production_csv,
    load_production_workbook,
)
from maintenance_dashboard.models import Catalogs, DashboardState
from maintenance_dashboard.records import (
    add_corrective_order,
    add_economic,
    add_preventive_order,
    add_production,
    add_stoppage,
    replace_collection_rows,
)
from maintenance_dashboard.simulator import generate_demo_state
from maintenance_dashboard.snapshot import dump_snapshot_json, import_snapshot_json
from maintenance_dashboard.storage import SnapshotStore
from maintenance_dashboard.transforms import (
    build_fact_economics,
    build_fact_production,
    build_fact_stoppages,
    build_fact_work_orders,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="KPIs de Mantenimiento",
    page_icon="🛠️",
    layout="wide",
    initial_sidebar_state="expanded",
)

CATALOGS = Catalogs()


# ---------------------------------------------------------------------------
# State (loaded once, persisted after every change)
# ---------------------------------------------------------------------------
@st.cache_resource
def get_store() -> SnapshotStore:
    return SnapshotStore()


store = get_store()

if "state" not in st.session_state:
    st.session_state.state = store.load_state()


def commit(new_state: DashboardState) -> None:
    st.session_state.state = new_state
    store.save_state(new_state)


state: DashboardState = st.session_state.state

# ---------------------------------------------------------------------------
# Sidebar: period, filters, configuration
# ---------------------------------------------------------------------------
st.sidebar.title("KPIs de Mantenimiento")
st.sidebar.markdown("MTBF, MTTR, Disponibilidad, OEE, Backlog y Económicos")
st.sidebar.divider()

filters = state.filters
config = state.config

col_from, col_to = st.sidebar.columns(2)
period_start = col_from.date_input("Desde", date.fromisoformat(filters.period_start))
period_end = col_to.date_input("Hasta", date.fromisoformat(filters.period_end))

sector_choices = [ALL_SECTORS, *CATALOGS.sectors]
sector = st.sidebar.selectbox(
    "Sector", sector_choices,
    index=sector_choices.index(filters.sector) if filters.sector in sector_choices else 0,
)
if sector != filters.sector:
    filters = filters.with_sector(sector)

line_choices = line_options(filters.sector, CATALOGS)
line = st.sidebar.selectbox(
    "Línea", line_choices,
    index=line_choices.index(filters.line) if filters.line in line_choices else 0,
)

supervisor_choices = [ALL_SUPERVISORS, *CATALOGS.supervisors]
supervisor = st.sidebar.selectbox(
    "Supervisor", supervisor_choices,
    index=supervisor_choices.index(filters.supervisor) if filters.supervisor in supervisor_choices else 0,
)

shift_choices = [ALL_SHIFTS, *CATALOGS.shifts]
shift = st.sidebar.selectbox(
    "Turno", shift_choices,
    index=shift_choices.index(filters.shift) if filters.shift in shift_choices else 0,
    format_func=lambda s: SHIFT_LABELS.get(s, s),
)

st.sidebar.divider()
planned_hours = st.sidebar.number_input("Horas planificadas", min_value=0.0, value=float(config.planned_hours))
weekly_capacity = st.sidebar.number_input("Capacidad HH/semana", min_value=0.0, value=float(config.weekly_capacity_hh))
minutes_per_shift = st.sidebar.number_input("Minutos por turno", min_value=0.0, value=float(config.minutes_per_shift))
sales = st.sidebar.number_input("Ventas ARS", min_value=0.0, value=float(config.sales))
maintenance_cost = st.sidebar.number_input("Costo mantenimiento ARS", min_value=0.0, value=float(config.maintenance_cost))

new_state = replace(
    state,
    filters=replace(
        filters,
        period_start=period_start.isoformat(),
        period_end=period_end.isoformat(),
        line=line,
        supervisor=supervisor,
        shift=shift,
    ),
    config=replace(
        config,
        planned_hours=planned_hours,
        weekly_capacity_hh=weekly_capacity,
        minutes_per_shift=minutes_per_shift,
        sales=sales,
        maintenance_cost=maintenance_cost,
    ),
)
if new_state != state:
    commit(new_state)
    state = new_state

st.sidebar.divider()
page = st.sidebar.radio(
    "Navegar",
    ["Indicadores", "Paradas", "Órdenes de trabajo", "Producción", "Económicos",
     "Importar / Exportar", "Notas"],
)


# ---------------------------------------------------------------------------
# Helper: editable record table
# ---------------------------------------------------------------------------
def record_editor(collection: str, frame: pd.DataFrame, key: str) -> None:
    edited = st.data_editor(
        frame,
        key=key,
        num_rows="dynamic",
        use_container_width=True,
        hide_index=True,
        disabled=["record_id"],
    )
    if st.button("Guardar cambios", key=f"{key}-save"):
        rows = edited.drop(columns=["month"], errors="ignore").to_dict(orient="records")
        commit(replace_collection_rows(state, collection, rows))
        st.rerun()


# ===========================================================================
# PAGE: Indicadores
# ===========================================================================
if page == "Indicadores":
    st.title("Dashboard de indicadores")
    st.caption(f"Periodo: **{state.filters.period_start}** a **{state.filters.period_end}**")

    overview = get_dashboard_overview(state, CATALOGS)
    cards = build_kpi_cards(overview)

    cols = st.columns(3)
    for i, card in enumerate(cards):
        with cols[i % 3]:
            hint = " · ".join(f"{k}: {v:,.2f}" for k, v in card["hint"].items())
            st.metric(card["title"], f"{card['value']:,.2f} {card['unit']}", help=hint)

    maintenance = overview["maintenance"]
    st.caption(
        f"Backlog: **{maintenance['backlog_weeks']:,.2f} semanas** · "
        f"Costo mantenimiento / ventas: **{overview['cost_to_sales_pct']:,.2f} %**"
    )

    st.divider()
    frames = get_filtered_frames(state)

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Paro por línea")
        by_line = get_downtime_by_line(frames["stoppages"])
        if by_line.empty:
            st.info("Sin paradas en el periodo.")
        else:
            fig = go.Figure(go.Bar(
                x=by_line["line"], y=by_line["downtime_min"],
                marker_color="#e74c3c",
                text=by_line["failures"], textposition="outside",
            ))
            fig.update_layout(height=350, yaxis_title="min", plot_bgcolor="rgba(0,0,0,0)")
            st.plotly_chart(fig, use_container_width=True)

    with col2:
        st.subheader("OEE por supervisor")
        sup = overview["supervisors"]
        fig = go.Figure()
        for factor, color in [("availability", "#3498db"), ("performance", "#f39c12"),
                              ("quality", "#2ecc71"), ("oee", "#8e44ad")]:
            fig.add_trace(go.Bar(x=sup["supervisor"], y=sup[factor] * 100, name=factor, marker_color=color))
        fig.update_layout(barmode="group", height=350, yaxis_title="%", plot_bgcolor="rgba(0,0,0,0)")
        st.plotly_chart(fig, use_container_width=True)

    st.subheader("Costo por tonelada")
    economics = overview["economics"]
    if economics.empty:
        st.info("Sin registros económicos en el periodo.")
    else:
        st.dataframe(economics.drop(columns=["record_id"]), use_container_width=True, hide_index=True)


# ===========================================================================
# PAGE: Paradas
# ===========================================================================
elif page == "Paradas":
    st.title("Paradas")
    if st.button("Agregar parada"):
        commit(add_stoppage(state, CATALOGS)[0])
        st.rerun()
    record_editor("stoppages", build_fact_stoppages(state.stoppages), "stoppages")


# ===========================================================================
# PAGE: Órdenes de trabajo
# ===========================================================================
elif page == "Órdenes de trabajo":
    st.title("Órdenes de trabajo")
    col1, col2 = st.columns(2)
    if col1.button("Agregar OT correctiva"):
        commit(add_corrective_order(state)[0])
        st.rerun()
    if col2.button("Agregar OT preventiva"):
        commit(add_preventive_order(state)[0])
        st.rerun()
    record_editor("work_orders", build_fact_work_orders(state.work_orders), "work_orders")


# ===========================================================================
# PAGE: Producción
# ===========================================================================
elif page == "Producción":
    st.title("Producción")
    if st.button("Agregar registro"):
        commit(add_production(state, CATALOGS)[0])
        st.rerun()
    record_editor("production", build_fact_production(state.production), "production")


# ===========================================================================
# PAGE: Económicos
# ===========================================================================
elif page == "Económicos":
    st.title("Económicos")
    if st.button("Agregar periodo"):
        commit(add_economic(state)[0])
        st.rerun()
    record_editor("economics", build_fact_economics(state.economics), "economics")


# ===========================================================================
# PAGE: Importar / Exportar
# ===========================================================================
elif page == "Importar / Exportar":
    st.title("Importar / Exportar")

    st.subheader("Producción desde CSV / Excel")
    upload = st.file_uploader("Archivo de producción", type=["csv", "xlsx"])
    if upload is not None and st.button("Importar producción"):
        try:
            if upload.name.lower().endswith(".xlsx"):
                records = load_production_workbook(upload, CATALOGS)
                commit(replace(state, production=[*state.production, *records]))
                imported = len(records)
            else:
                text = upload.getvalue().decode("utf-8", errors="replace")
                imported_state, imported = import_production_csv(state, text, CATALOGS)
                commit(imported_state)
            st.success(f"Se importaron {imported} filas de producción.")
        except (MissingHeadersError, InvalidWorkbookError) as exc:
            st.error(str(exc))
        except (EmptyCsvError, NoValidRowsError) as exc:
            st.warning(str(exc))

    st.subheader("Snapshot JSON")
    st.download_button(
        "Exportar JSON",
        data=dump_snapshot_json(state),
        file_name=EXPORT_FILENAME,
        mime="application/json",
    )
    snapshot = st.file_uploader("Importar JSON", type=["json"])
    if snapshot is not None and st.button("Importar snapshot"):
        try:
            commit(import_snapshot_json(state, snapshot.getvalue().decode("utf-8", errors="replace")))
            st.success("Snapshot importado.")
        except InvalidSnapshotError as exc:
            st.error(str(exc))

    st.divider()
    col1, col2 = st.columns(2)
    if col1.button("Cargar datos de demostración"):
        commit(generate_demo_state())
        st.rerun()
    if col2.button("Reiniciar"):
        store.reset()
        st.session_state.state = DashboardState()
        st.rerun()


# ===========================================================================
# PAGE: Notas
# ===========================================================================
elif page == "Notas":
    st.title("Notas")
    notes = st.text_area("Notas del periodo", value=store.load_notes(), height=300)
    if notes != store.load_notes():
        store.save_notes(notes)
        st.caption("Guardado.")
