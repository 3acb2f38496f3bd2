"""Heuristic binary/text classification of file contents."""

from __future__ import annotations

# Number of leading bytes inspected for a NUL byte
BINARY_SNIFF_BYTES = 4096

# Extensions that are always treated as binary regardless of content
BINARY_EXTENSIONS = frozenset(
    {
        ".exe", ".dll", ".so", ".dylib", ".a", ".o", ".obj", ".lib", ".bin",
        ".class", ".jar", ".war", ".ear", ".pyc", ".pyo", ".whl", ".egg",
        ".zip", ".tar", ".tgz", ".gz", ".bz2", ".xz", ".7z", ".rar",
        ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".ico", ".tiff", ".webp",
        ".pdf", ".woff", ".woff2", ".ttf", ".otf", ".eot",
        ".mp3", ".mp4", ".wav", ".avi", ".mov",
    }
)


class HeuristicContentClassifier:
    """
    Classifies contents as binary when a NUL byte appears in the first
    ``sniff_bytes`` bytes, or when the file extension is a known binary one.
    """

    def __init__(self, sniff_bytes: int = BINARY_SNIFF_BYTES) -> None:
        self.sniff_bytes = sniff_bytes

    def is_binary(self, path: str, contents: bytes) -> bool:
        name = path.lower()
        dot = name.rfind(".")
        if dot != -1 and name[dot:] in BINARY_EXTENSIONS:
            return True
        return b"\x00" in contents[: self.sniff_bytes]
