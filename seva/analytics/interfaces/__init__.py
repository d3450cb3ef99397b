"""
Analytics Interfaces Layer
==========================
"""

from seva.analytics.interfaces.controllers import analytics_router

__all__ = ["analytics_router"]
