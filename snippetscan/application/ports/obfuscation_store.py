from typing import Protocol, runtime_checkable


@runtime_checkable
class ObfuscationStorePort(Protocol):
    """
    Protocol for a shared, thread-safe path obfuscation mapping.

    Implementation Requirements:
    - The same original path must always yield the same identifier
    - Concurrent first-time lookups of distinct paths must not lose entries
    - After N lookups over M distinct paths, ``size()`` must equal M
    """

    def obfuscate(self, path: str) -> str:
        """Return the identifier for ``path``, allocating one on first use."""
        ...

    def deobfuscate(self, identifier: str) -> str:
        """Return the original path for ``identifier`` (or ``identifier`` if unknown)."""
        ...

    def size(self) -> int:
        """Number of distinct paths mapped so far."""
        ...
