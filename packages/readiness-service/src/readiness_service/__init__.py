"""
Readiness Service
=================

FastAPI front end, local state store and CLI around ``readiness_engine``.
"""
