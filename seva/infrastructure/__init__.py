"""
Infrastructure
==============

Cross-cutting infrastructure: database engine/sessions and blob storage.
"""
