"""
worklog-report-generator — Source package.

Modules:
    models          — TimeEntry, ReportRequest and derived summaries
    grouping        — Contributor / weekday grouping and hour formatting
    config          — Typed settings built from config.yaml
    document        — Page model and document lifecycle
    layout          — Layout cursor and page-break policy
    tables          — ReportLab table construction and placement
    composer        — Overview + per-contributor section layout
    finalizer       — Generation notice, page numbers, sealing
    pdf_sink        — ReportLab canvas serialization to PDF bytes
    report          — Public build entry points
    data_loader     — Worklog export reader (pandas) and period windows
    data_simulator  — Seeded synthetic worklog export
"""
