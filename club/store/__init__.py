"""In-memory entity store."""

from club.store.entity_store import EntityStore

__all__ = ["EntityStore"]
