from __future__ import annotations

from partyhub.storage.base import StorageAdapter, StoredObject
from partyhub.storage.local import LocalStorageAdapter


def get_storage() -> StorageAdapter:
    from partyhub.storage.factory import get_storage as _get_storage

    return _get_storage()


__all__ = ["StorageAdapter", "StoredObject", "LocalStorageAdapter", "get_storage"]
