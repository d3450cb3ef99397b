"""
Operations Module
=================

Facilities, tasks, issues and QR codes: the field work the back-office
coordinates.

Layers:
- domain: transition tables, SLA calculations, auto-task rules
- application: services and DTOs
- infrastructure: SQLAlchemy models and repositories
- interfaces: FastAPI routes
"""
