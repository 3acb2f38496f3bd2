from typing import Protocol, runtime_checkable


@runtime_checkable
class FileDiscoveryPort(Protocol):
    """Protocol for listing the files of a folder that are eligible for fingerprinting."""

    def discover(self, root: str, hidden_files: bool = False) -> list[str]:
        """
        List candidate files below ``root``.

        Args:
            root: Folder to walk
            hidden_files: Include hidden files and folders

        Returns:
            Paths relative to ``root`` (POSIX separators), in deterministic order

        Raises:
            FileAccessError: If ``root`` does not exist or is not a folder
        """
        ...
