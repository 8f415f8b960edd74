from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StoredObject:
    size: int
    content_type: str


class StorageAdapter(ABC):
    """Blob store for uploaded party media. Clients write to it directly."""

    @abstractmethod
    def put_file(self, key: str, fileobj: BinaryIO) -> str:
        """Store content from file-like object under key and return a URI."""

    @abstractmethod
    def stat(self, key: str) -> StoredObject | None:
        """Return size and content type for key, or None if nothing is stored there."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete key if it exists."""

    @abstractmethod
    def upload_url(self, key: str, content_type: str, expires_at: datetime) -> str:
        """Return a URL a client can write key to until expires_at."""

    @abstractmethod
    def resolve_uri(self, key: str) -> str:
        """Return canonical storage URI for a key."""

    def discard(self, keys: Iterable[str]) -> None:
        # Rows are already gone; a leftover blob is only wasted space
        for key in keys:
            try:
                self.delete(key)
            except (OSError, ValueError):
                logger.warning("storage_delete_failed", key=key, exc_info=True)
