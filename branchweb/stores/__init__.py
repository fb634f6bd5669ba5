"""Persistence backends for the Branch session record."""

from branchweb.stores.storage import JsonFileStorage, MemoryStorage, SessionStorage, create_storage

__all__ = ["JsonFileStorage", "MemoryStorage", "SessionStorage", "create_storage"]
