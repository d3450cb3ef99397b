"""
Workforce Module
================

Staff roster, bulk imports, teams, shifts, headcounts and coverage.

Layers:
- domain: staffing arithmetic and field validation
- application: services and DTOs
- infrastructure: SQLAlchemy models, repositories, spreadsheet reader
- interfaces: FastAPI routes
"""
