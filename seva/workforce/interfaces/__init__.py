"""
Workforce Interfaces Layer
==========================

HTTP routes for the workforce module.
"""

from seva.workforce.interfaces.controllers import workforce_router

__all__ = ["workforce_router"]
