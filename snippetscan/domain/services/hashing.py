"""Checksums used by the fingerprint formats.

CRC-32C (Castagnoli) hashes grams and window minima; CRC-8/MAXIM-DOW hashes
normalized source lines for high precision snippet matching. Both are
reflected, table-driven implementations.
"""

from __future__ import annotations

CRC32C_POLYNOMIAL = 0x82F63B78  # reflected 0x1EDC6F41
CRC8_MAXIM_DOW_POLYNOMIAL = 0x8C  # reflected 0x31
CRC8_MAXIM_DOW_INITIAL = 0x00
CRC8_MAXIM_DOW_FINAL = 0x00


def _build_table(polynomial: int, width_mask: int) -> tuple[int, ...]:
    table = []
    for i in range(256):
        crc = i
        for _ in range(8):
            crc = (crc >> 1) ^ polynomial if crc & 1 else crc >> 1
        table.append(crc & width_mask)
    return tuple(table)


_CRC32C_TABLE = _build_table(CRC32C_POLYNOMIAL, 0xFFFFFFFF)
_CRC8_TABLE = _build_table(CRC8_MAXIM_DOW_POLYNOMIAL, 0xFF)


def crc32c(data: bytes) -> int:
    """CRC-32C of ``data`` as an unsigned 32-bit integer."""
    crc = 0xFFFFFFFF
    table = _CRC32C_TABLE
    for b in data:
        crc = table[(crc ^ b) & 0xFF] ^ (crc >> 8)
    return crc ^ 0xFFFFFFFF


def crc32c_hex_of_int(value: int) -> str:
    """Zero-padded 8-hex-digit CRC-32C of the little-endian 4-byte encoding of ``value``."""
    return f"{crc32c((value & 0xFFFFFFFF).to_bytes(4, 'little')):08x}"


def crc8_maxim(data: bytes) -> int:
    """CRC-8/MAXIM-DOW (Dallas 1-Wire) of ``data``."""
    crc = CRC8_MAXIM_DOW_INITIAL
    table = _CRC8_TABLE
    for b in data:
        crc = table[(crc ^ b) & 0xFF]
    return crc ^ CRC8_MAXIM_DOW_FINAL
