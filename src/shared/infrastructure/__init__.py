"""
Infrastructure Layer
=====================

Cross-cutting technical concerns shared by every bounded context:
structured logging and request tracing.
"""
