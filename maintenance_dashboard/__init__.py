"""
Maintenance & Production KPI Dashboard

Analytics backend that turns shift production, stoppage, work-order and
spend records into maintenance and production KPIs (MTBF, MTTR,
availability, OEE, preventive mix, backlog, spend per tonne).

To feed the dashboard from a spreadsheet:
    Use loaders.load_production_csv / load_production_workbook, or
    loaders.import_production_csv to append straight into a state.

To connect to Streamlit:
    Call dashboard.get_dashboard_overview(state) after every state change
    and render the returned dicts / DataFrames; build_kpi_cards() gives
    the indicator grid.

To change catalogs or scalars at runtime:
    Pass a models.Catalogs / models.DashboardConfig instead of editing
    config.py; nothing in the core reads config.py globals implicitly.
"""
