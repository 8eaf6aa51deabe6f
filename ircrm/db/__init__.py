"""Storage backend adapters (records in Postgres, binaries in object storage)."""

from .batch_insert import StorageError
from .object_store import LocalObjectStore, ObjectStoreError
from .store import PostgresStore

__all__ = [
    "LocalObjectStore",
    "ObjectStoreError",
    "PostgresStore",
    "StorageError",
]
