"""Ingestion layer.

Adapters that receive listings from outside the catalog (import sources,
files) and turn them into normalized catalog records.
"""

__all__: list[str] = []
