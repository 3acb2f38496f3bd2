from typing import Protocol, runtime_checkable


@runtime_checkable
class ContentClassifierPort(Protocol):
    """Protocol for deciding whether file contents are binary or text."""

    def is_binary(self, path: str, contents: bytes) -> bool:
        """
        Classify file contents.

        Args:
            path: File path (extension hints may be used)
            contents: Raw file bytes

        Returns:
            True if the contents should be treated as binary (no snippets)
        """
        ...
