from snippetscan.domain.services.hashing import crc8_maxim
from snippetscan.domain.services.hpsm import calculate_hpsm


def test_one_byte_per_terminated_line():
    assert calculate_hpsm(b"abc\n\n  \n;;\nxyz") == "42ff0000"


def test_content_line_is_crc8_of_normalized_bytes():
    assert calculate_hpsm(b"A b-C\n") == f"{crc8_maxim(b'abc'):02x}"


def test_unterminated_line_contributes_nothing():
    assert calculate_hpsm(b"no newline here") == ""
    assert calculate_hpsm(b"") == ""


def test_leading_newline_contributes_nothing():
    assert calculate_hpsm(b"\nabc\n") == f"{crc8_maxim(b'abc'):02x}"


def test_deterministic():
    data = b"int x;\n\n}\nreturn y;\n"
    assert calculate_hpsm(data) == calculate_hpsm(data)
