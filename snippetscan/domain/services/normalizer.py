"""Character normalization shared by the winnowing and HPSM generators."""


def normalize(c: str) -> str | None:
    """
    Map a source character to its canonical content character.

    Digits and lowercase letters map to themselves, uppercase letters are
    folded to lowercase, and every other character (including anything below
    ``'0'`` or above ``'z'``) is not content and maps to ``None``.
    """
    if c < "0" or c > "z":
        return None
    if c <= "9" or c >= "a":
        return c
    if "A" <= c <= "Z":
        return chr(ord(c) + 32)
    return None


def normalize_byte(b: int) -> int:
    """Byte form of :func:`normalize`; returns 0 for non-content bytes."""
    if b < 0x30 or b > 0x7A:
        return 0
    if b <= 0x39 or b >= 0x61:
        return b
    if 0x41 <= b <= 0x5A:
        return b + 32
    return 0
