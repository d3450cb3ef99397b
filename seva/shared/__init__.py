"""
Shared Kernel Module
====================

Shared infrastructure used across all bounded contexts (identity, workforce,
operations, outreach, analytics, site).

Architecture Pattern: Modular Monolith
- Each module is a bounded context
- Shared kernel contains only generic infrastructure: logging, request
  middleware, the live change feed and the metrics exporter

DO NOT add business logic from any bounded context to the shared kernel.
"""

__version__ = "1.0.0"
