"""
Shared API
==========

Middleware, exception handlers, request dependencies and the live
WebSocket route.
"""
