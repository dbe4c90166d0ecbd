"""
Shared API
==========

HTTP middleware, exception handlers and dependency providers used by
every module's controllers.
"""
