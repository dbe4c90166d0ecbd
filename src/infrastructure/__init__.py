"""Shared infrastructure adapters: database and search index."""
