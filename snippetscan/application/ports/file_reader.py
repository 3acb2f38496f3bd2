from typing import Protocol, runtime_checkable


@runtime_checkable
class FileReaderPort(Protocol):
    """Protocol for loading raw file contents to fingerprint."""

    def read_bytes(self, path: str) -> bytes:
        """
        Read the full contents of a regular file.

        Args:
            path: Path of the file on the local file system

        Returns:
            Raw file bytes

        Raises:
            FileAccessError: If the path is missing, not a regular file, or unreadable
        """
        ...
