"""Helpdesk Engine: support-ticket lifecycle and workload-assignment service."""

__version__ = "1.0.0"
