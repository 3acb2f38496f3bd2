import pytest

from snippetscan.domain.models.fingerprint import FingerprintRecord, SnippetLine, parse_wfp

DIGEST = "609a24b6cd27ef8108792ca459db1b28"


def _record(**overrides) -> FingerprintRecord:
    data = {
        "content_hash": DIGEST,
        "byte_length": 293,
        "path": "src/sample.c",
        "snippet_lines": (SnippetLine(3, ("0ed5027a", "a9442399")), SnippetLine(5, ("828b5fe0",))),
    }
    data.update(overrides)
    return FingerprintRecord(**data)


def test_snippet_line_validation():
    with pytest.raises(ValueError):
        SnippetLine(0, ("0ed5027a",))
    with pytest.raises(ValueError):
        SnippetLine(1, ())
    with pytest.raises(ValueError):
        SnippetLine(1, ("0ED5027A",))
    with pytest.raises(ValueError):
        SnippetLine(1, ("abc",))


def test_record_validation():
    with pytest.raises(ValueError):
        _record(content_hash="xyz")
    with pytest.raises(ValueError):
        _record(path="")
    with pytest.raises(ValueError):
        _record(byte_length=-1)
    with pytest.raises(ValueError):
        _record(snippet_lines=(SnippetLine(5, ("828b5fe0",)), SnippetLine(5, ("0ed5027a",))))


def test_to_wfp_format():
    assert _record().to_wfp() == (
        f"file={DIGEST},293,src/sample.c\n"
        "3=0ed5027a,a9442399\n"
        "5=828b5fe0\n"
    )


def test_to_wfp_places_hpsm_after_header():
    wfp = _record(hpsm="42ff").to_wfp()
    assert wfp.splitlines()[:2] == [f"file={DIGEST},293,src/sample.c", "hpsm=42ff"]


def test_dict_round_trip():
    record = _record(hpsm="42ff")
    assert FingerprintRecord.from_dict(record.to_dict()) == record


def test_parse_wfp_multiple_records():
    text = _record(hpsm="42ff").to_wfp() + _record(path="other, with comma.c", snippet_lines=()).to_wfp()

    records = parse_wfp(text)

    assert records == [_record(hpsm="42ff"), _record(path="other, with comma.c", snippet_lines=())]


def test_parse_wfp_ignores_unknown_keys_and_blank_lines():
    text = f"file={DIGEST},293,a.c\nfh2=0123\n\n3=0ed5027a\n"
    [record] = parse_wfp(text)
    assert record.snippet_lines == (SnippetLine(3, ("0ed5027a",)),)


def test_parse_wfp_rejects_lines_before_header():
    with pytest.raises(ValueError):
        parse_wfp("3=0ed5027a\n")


def test_parse_wfp_rejects_malformed_header():
    with pytest.raises(ValueError):
        parse_wfp(f"file={DIGEST}\n")
