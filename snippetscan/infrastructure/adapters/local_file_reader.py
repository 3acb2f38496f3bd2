"""File system adapter for loading file contents."""

from __future__ import annotations

import logging
from pathlib import Path

from ...domain.errors import FileAccessError

logger = logging.getLogger(__name__)


class LocalFileReader:
    """Reads regular files from the local file system."""

    def read_bytes(self, path: str) -> bytes:
        """
        Read the full contents of a regular file.

        Raises:
            FileAccessError: If the path is missing, not a regular file, or unreadable
        """
        file_path = Path(path)
        if not file_path.exists():
            raise FileAccessError(path, "file does not exist")
        if not file_path.is_file():
            raise FileAccessError(path, "not a regular file")
        try:
            contents = file_path.read_bytes()
        except OSError as e:
            raise FileAccessError(path, e.strerror or str(e)) from e
        logger.debug(f"Read {len(contents)} bytes from {path}")
        return contents
