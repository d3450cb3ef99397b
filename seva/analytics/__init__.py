"""
Analytics Module
================

Read-only dashboard summary and CSV exports.
"""
