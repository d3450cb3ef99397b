"""
Outreach Interfaces Layer
=========================

HTTP routes for the outreach module.
"""

from seva.outreach.interfaces.controllers import outreach_router

__all__ = ["outreach_router"]
