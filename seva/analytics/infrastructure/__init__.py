"""
Analytics Infrastructure Layer
==============================
"""

from seva.analytics.infrastructure.repositories import SQLAlchemyAnalyticsRepository

__all__ = ["SQLAlchemyAnalyticsRepository"]
