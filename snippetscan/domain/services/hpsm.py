"""High Precision Snippet Matching (HPSM) line signatures."""

from __future__ import annotations

from .hashing import crc8_maxim
from .normalizer import normalize_byte

# Marker for an empty line directly following the previous newline
EMPTY_LINE = 0xFF
# Marker for a line that held only non-content characters
BLANK_LINE = 0x00


def calculate_hpsm(contents: bytes) -> str:
    """
    Compute the HPSM signature of raw file contents.

    Every ``\\n``-terminated line contributes one byte: the CRC-8/MAXIM-DOW of
    its normalized content bytes, ``0xFF`` when the line is empty, or ``0x00``
    when it held no content characters. A trailing line without a newline
    contributes nothing.

    Args:
        contents: Raw file bytes

    Returns:
        Lowercase hex string, two digits per line
    """
    signature = bytearray()
    normalized = bytearray()
    last_line = 0
    for i, b in enumerate(contents):
        if b == 0x0A:
            if normalized:
                signature.append(crc8_maxim(bytes(normalized)))
                normalized.clear()
            elif last_line + 1 == i:
                signature.append(EMPTY_LINE)
            elif i - last_line > 1:
                signature.append(BLANK_LINE)
            last_line = i
            continue
        value = normalize_byte(b)
        if value:
            normalized.append(value)
    return signature.hex()
