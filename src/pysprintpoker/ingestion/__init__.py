"""Ingestion layer.

Adapters that receive raw push payloads and emit normalized session events.
"""

__all__: list[str] = []
