"""Thread-safe in-memory mapping between file paths and obfuscated identifiers."""

from __future__ import annotations

import itertools
import logging
import os
import threading

logger = logging.getLogger(__name__)


class InMemoryObfuscationStore:
    """
    Allocates sequential identifiers (``<n><ext>``) for file paths.

    The original extension is kept so that the scan service can still tell
    the file type apart. One instance is shared by every worker of a batch.
    """

    def __init__(self, start: int = 0) -> None:
        self._lock = threading.Lock()
        self._counter = itertools.count(start)
        self._by_path: dict[str, str] = {}
        self._by_identifier: dict[str, str] = {}

    def obfuscate(self, path: str) -> str:
        with self._lock:
            identifier = self._by_path.get(path)
            if identifier is None:
                extension = os.path.splitext(path)[1]
                identifier = f"{next(self._counter)}{extension}"
                self._by_path[path] = identifier
                self._by_identifier[identifier] = path
                logger.debug(f"Obfuscated path {path} as {identifier}")
            return identifier

    def deobfuscate(self, identifier: str) -> str:
        with self._lock:
            return self._by_identifier.get(identifier, identifier)

    def size(self) -> int:
        with self._lock:
            return len(self._by_path)
