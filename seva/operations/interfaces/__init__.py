"""
Operations Interfaces Layer
===========================

HTTP routes for the operations module.
"""

from seva.operations.interfaces.controllers import operations_router

__all__ = ["operations_router"]
