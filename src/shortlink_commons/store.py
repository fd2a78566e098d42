"""
Mapping store interface and in-process backends.
"""

import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional


class MappingStore(ABC):
    """Key-value association from short code to target URL."""

    @abstractmethod
    def put(self, code: str, url: str) -> None:
        """
        Store a mapping, replacing any existing URL for the code.

        Raises:
            StorageError: If the backend rejects the write
        """

    @abstractmethod
    def get(self, code: str) -> Optional[str]:
        """
        Look up the URL for a code.

        Returns:
            The target URL, or None if the code is unknown

        Raises:
            StorageError: If the backend read fails
        """


class InMemoryStore(MappingStore):
    """Process-lifetime dict. Not safe under concurrent writers."""

    def __init__(self, mappings: Optional[Dict[str, str]] = None):
        self._mappings = dict(mappings or {})

    def put(self, code: str, url: str) -> None:
        self._mappings[code] = url

    def get(self, code: str) -> Optional[str]:
        return self._mappings.get(code)

    def __len__(self) -> int:
        return len(self._mappings)


class LockedInMemoryStore(InMemoryStore):
    """In-memory store guarded by a mutex for threaded servers."""

    def __init__(self, mappings: Optional[Dict[str, str]] = None):
        super().__init__(mappings)
        self._lock = threading.Lock()

    def put(self, code: str, url: str) -> None:
        with self._lock:
            super().put(code, url)

    def get(self, code: str) -> Optional[str]:
        with self._lock:
            return super().get(code)
