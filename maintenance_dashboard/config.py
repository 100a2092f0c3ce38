"""
Configuration: catalogs, defaults, CSV headers, snapshot wire keys.

Everything here is a *default*. The core never reads these globals
implicitly; callers wrap them into ``Catalogs`` / ``DashboardConfig``
values (see models.py) so that catalogs and scalars stay editable at
runtime.
"""

import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Storage (override the directory with KPI_DASHBOARD_DATA_DIR)
# ---------------------------------------------------------------------------
DATA_DIR = Path(
    os.environ.get("KPI_DASHBOARD_DATA_DIR", Path.home() / ".kpi_dashboard")
)

STATE_SLOT = "kpi-mantenimiento-georgalos-v2"
NOTES_SLOT = "kpi-notas"
EXPORT_FILENAME = "kpis-georgalos.json"

# ---------------------------------------------------------------------------
# Catalogs
# ---------------------------------------------------------------------------
SUPERVISORS = ["ALLOI", "AVILA", "BOERIS"]

OTHER_SECTOR = "OTROS"

SECTORS = [
    "CHOCOLATE",
    "ALFAJOR",
    "HUEVO DE PASCUA",
    "BARRA DE MANI",
    "TURRON",
    "BARRA DE CEREALES",
    "CARAMELO BLANDO",
    "CARAMELO DURO",
    "ARTESANAL",
    "CUBANITO",
    "CONFITE",
    OTHER_SECTOR,
]

LINES_BY_SECTOR: dict[str, list[str]] = {
    "CHOCOLATE": ["CV1000-1", "CV1000-2", "CV1000-3", "DELVER", "CHISPAS", "MANGA"],
    "TURRON": ["NAMUR", "TURRON FIESTA", "CROCANTE", "ESTUCHADO TURRON", "ARTESANAL"],
    "CARAMELO BLANDO": ["FLYNN", "FLYNNIES", "XXL", "EMZO", "ENVAMEC"],
    "CARAMELO DURO": ["EMZO", "ENVAMEC"],
    "CONFITE": ["PACK PLUS", "ESTUCHADORA", "CONFITE"],
    "ALFAJOR": ["ALFAJOR"],
    "HUEVO DE PASCUA": ["HUEVO DE PASCUA"],
    "BARRA DE MANI": ["BARRA DE MANI", "LINGOTE"],
    "BARRA DE CEREALES": ["BARRA DE CEREALES"],
    "CUBANITO": ["CUBANITO"],
    "ARTESANAL": [],
    OTHER_SECTOR: [],
}

# Shift codes (initial only): Mañana, Tarde, Noche
SHIFTS = ["M", "T", "N"]
SHIFT_LABELS = {"M": "Mañana", "T": "Tarde", "N": "Noche"}

AREAS = ["Estuchadora", "Balanza", "Mesas de refrigeración", "Cocción", "Empaque", "Servicios"]

STOPPAGE_UNPLANNED = "No planificada"
STOPPAGE_PLANNED = "Planificada"
STOPPAGE_PARTS_SHORTAGE = "Falta de insumos"
STOPPAGE_TYPES = [STOPPAGE_UNPLANNED, STOPPAGE_PLANNED, STOPPAGE_PARTS_SHORTAGE]

CRITICALITY = ["A", "B", "C"]

KIND_CORRECTIVE = "Correctivo"
KIND_PREVENTIVE = "Preventivo"
WORK_ORDER_KINDS = [KIND_CORRECTIVE, KIND_PREVENTIVE]

STATUS_PLANNED = "Planificada"
STATUS_IN_PROGRESS = "En curso"
STATUS_COMPLETED = "Completada"
STATUS_CANCELLED = "Cancelada"
WORK_ORDER_STATUSES = [STATUS_PLANNED, STATUS_IN_PROGRESS, STATUS_COMPLETED, STATUS_CANCELLED]

# Work orders in these states no longer carry pending labour
CLOSED_STATUSES = {STATUS_COMPLETED, STATUS_CANCELLED}

# ---------------------------------------------------------------------------
# Filter sentinels
# ---------------------------------------------------------------------------
ALL_SECTORS = "Todos"
ALL_LINES = "Todas"
ALL_SHIFTS = "Todos"
ALL_SUPERVISORS = "Todos"

# Any of these means "no restriction" for a facet
INACTIVE_FACET_VALUES = {"Todos", "Todas", "All", ""}

# ---------------------------------------------------------------------------
# Scalar defaults
# ---------------------------------------------------------------------------
DEFAULT_PLANNED_HOURS = 720.0
DEFAULT_WEEKLY_CAPACITY_HH = 160.0
DEFAULT_MINUTES_PER_SHIFT = 480.0

# ---------------------------------------------------------------------------
# Production CSV import
# ---------------------------------------------------------------------------
CSV_REQUIRED_HEADERS = [
    "FECHA",
    "TURNO",
    "SECTOR",
    "KG PLAN",
    "LINEA",
    "KG PRODUCIDOS",
    "KG REPROCESO",
    "KG DECOMISO",
    "TIEMPO PARADA POR AVERIAS",
    "SUPERVISOR",
]
CSV_NOTES_HEADER = "NOVEDADES"
CSV_PLAN_COMPLIANCE_HEADER = "CUMP PLAN %"

# CSV header -> ProductionRecord attribute
CSV_COLUMN_MAP: dict[str, str] = {
    "FECHA": "date",
    "TURNO": "shift",
    "SECTOR": "sector",
    "KG PLAN": "planned_kg",
    "LINEA": "line",
    "KG PRODUCIDOS": "produced_kg",
    "KG REPROCESO": "rework_kg",
    "KG DECOMISO": "scrap_kg",
    "TIEMPO PARADA POR AVERIAS": "stoppage_min",
    "SUPERVISOR": "supervisor",
    CSV_NOTES_HEADER: "notes",
    CSV_PLAN_COMPLIANCE_HEADER: "plan_compliance_pct",
}

# ---------------------------------------------------------------------------
# Snapshot wire keys
# ---------------------------------------------------------------------------
# The persisted / exported JSON keeps the keys the dashboard has always
# written, so older exports stay importable.  attribute -> wire key.
STATE_SCALAR_KEYS: dict[str, str] = {
    "period_start": "periodoDesde",
    "period_end": "periodoHasta",
    "planned_hours": "horasPlanificadas",
    "sales": "ventasARS",
    "maintenance_cost": "costoMantenimientoARS",
    "weekly_capacity_hh": "capacidadHHsemana",
    "minutes_per_shift": "minutosPorTurno",
    "line": "filtroLinea",
    "shift": "filtroTurno",
    "sector": "filtroSector",
    "supervisor": "filtroSupervisor",
}

STATE_COLLECTION_KEYS: dict[str, str] = {
    "stoppages": "paradas",
    "work_orders": "ots",
    "production": "produccion",
    "economics": "economia",
}

STOPPAGE_WIRE_KEYS: dict[str, str] = {
    "record_id": "id",
    "timestamp": "fecha",
    "line": "linea",
    "shift": "turno",
    "sector": "sector",
    "area": "area",
    "equipment": "equipo",
    "stoppage_type": "tipo",
    "root_cause": "causa",
    "criticality": "criticidad",
    "downtime_min": "downtimeMin",
    "cost": "costoARS",
    "supervisor": "supervisor",
    "responsible": "responsable",
}

WORK_ORDER_WIRE_KEYS: dict[str, str] = {
    "record_id": "id",
    "date": "fecha",
    "execution_date": "fechaEjec",
    "line": "linea",
    "shift": "turno",
    "sector": "sector",
    "equipment": "equipo",
    "kind": "tipo",
    "status": "estado",
    "criticality": "criticidad",
    "external_ref": "codigoSAP",
    "responsible": "responsable",
    "supervisor": "supervisor",
    "vendor": "proveedor",
    "parts": "repuestos",
    "cost": "costoARS",
    "labor_hours": "hh",
}

PRODUCTION_WIRE_KEYS: dict[str, str] = {
    "record_id": "id",
    "date": "fecha",
    "shift": "turno",
    "sector": "sector",
    "line": "linea",
    "planned_kg": "kgPlan",
    "produced_kg": "kgProd",
    "plan_compliance_pct": "cumpPlan",
    "rework_kg": "kgReproceso",
    "scrap_kg": "kgDecomiso",
    "stoppage_min": "tiempoParadaMin",
    "supervisor": "supervisor",
    "notes": "novedades",
}

ECONOMIC_WIRE_KEYS: dict[str, str] = {
    "record_id": "id",
    "period": "periodo",
    "sector": "sector",
    "maintenance_spend": "gastoMantenimientoUSD",
    "energy_spend": "costoEnergiaUSD",
}

# ---------------------------------------------------------------------------
# KPI registry
# ---------------------------------------------------------------------------
# title: card title shown by the front end
# unit: display unit string
# scale: multiplier applied before display (ratios shown as percent)
KPI_REGISTRY: dict[str, dict] = {
    "mtbf_h": {"title": "MTBF", "unit": "h", "scale": 1.0},
    "mttr_h": {"title": "MTTR", "unit": "h", "scale": 1.0},
    "availability": {"title": "Disponibilidad", "unit": "%", "scale": 100.0},
    "preventive_compliance_pct": {"title": "Cumplimiento plan prev.", "unit": "%", "scale": 1.0},
    "pct_preventive": {"title": "% Preventivo", "unit": "%", "scale": 1.0},
    "pct_corrective": {"title": "% Correctivo", "unit": "%", "scale": 1.0},
    "produced_kg": {"title": "Kg producidos (filtro)", "unit": "kg", "scale": 1.0},
    "oee": {"title": "OEE", "unit": "%", "scale": 100.0},
    "backlog_weeks": {"title": "Backlog", "unit": "semanas", "scale": 1.0},
}

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
KG_PER_TONNE = 1000.0
MINUTES_PER_HOUR = 60.0
