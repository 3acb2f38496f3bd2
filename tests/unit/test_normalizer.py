import string

from snippetscan.domain.services.normalizer import normalize, normalize_byte


def test_digits_and_lowercase_map_to_themselves():
    for c in string.digits + string.ascii_lowercase:
        assert normalize(c) == c


def test_uppercase_is_folded():
    for c in string.ascii_uppercase:
        assert normalize(c) == c.lower()


def test_non_content_characters_are_dropped():
    for c in " \t\n\r{}()[];:,.<>=_-+*/\\\"'`^~|!?@#$%&":
        assert normalize(c) is None
    assert normalize("é") is None
    assert normalize("\x00") is None


def test_normalize_is_idempotent():
    for code in range(0, 256):
        c = chr(code)
        once = normalize(c)
        if once is not None:
            assert normalize(once) == once


def test_byte_form_matches_character_form():
    for b in range(256):
        expected = normalize(chr(b))
        assert normalize_byte(b) == (ord(expected) if expected is not None else 0)
