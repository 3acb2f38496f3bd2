"""Domain model for winnowing fingerprint records (WFP)."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

_TOKEN_PATTERN = re.compile(r"^[0-9a-f]{8}$")
_DIGEST_PATTERN = re.compile(r"^[0-9a-f]{32}$")


@dataclass(frozen=True)
class SnippetLine:
    """
    Snippet hashes emitted for one source line.

    Attributes:
        line_number: 1-based source line the hashes were emitted on
        hashes: 8-hex-digit tokens in the order they were first observed
    """

    line_number: int
    hashes: tuple[str, ...]

    def __post_init__(self) -> None:
        """Validate snippet line."""
        if self.line_number < 1:
            raise ValueError(f"line_number must be >= 1, got {self.line_number}")
        if not self.hashes:
            raise ValueError("hashes must contain at least one token")
        for token in self.hashes:
            if not _TOKEN_PATTERN.match(token):
                raise ValueError(f"hash token must be 8 lowercase hex digits, got '{token}'")

    def to_wfp_line(self) -> str:
        return f"{self.line_number}={','.join(self.hashes)}"


@dataclass(frozen=True)
class FingerprintRecord:
    """
    Fingerprint of one file, as submitted to the remote match service.

    The header (content digest, byte length, path) is always present.
    ``snippet_lines`` is empty when snippet generation was skipped for the
    file; ``hpsm`` is only set when high precision snippet data was requested.

    Attributes:
        content_hash: MD5 hex digest of the raw file bytes
        byte_length: Size of the raw contents in bytes
        path: Path written into the record (possibly obfuscated)
        snippet_lines: Snippet lines in strictly increasing line order
        hpsm: Hex encoded per-line CRC-8 signature (optional)
    """

    content_hash: str
    byte_length: int
    path: str
    snippet_lines: tuple[SnippetLine, ...] = field(default_factory=tuple)
    hpsm: str | None = None

    def __post_init__(self) -> None:
        """Validate fingerprint record."""
        if not _DIGEST_PATTERN.match(self.content_hash):
            raise ValueError(f"content_hash must be a 32-hex-digit digest, got '{self.content_hash}'")
        if self.byte_length < 0:
            raise ValueError(f"byte_length must be >= 0, got {self.byte_length}")
        if not self.path:
            raise ValueError("path must be non-empty")
        previous = 0
        for line in self.snippet_lines:
            if line.line_number <= previous:
                raise ValueError(
                    f"snippet line numbers must be strictly increasing ({line.line_number} after {previous})"
                )
            previous = line.line_number

    @property
    def header(self) -> str:
        return f"file={self.content_hash},{self.byte_length},{self.path}"

    @property
    def has_snippets(self) -> bool:
        return bool(self.snippet_lines)

    def to_wfp(self) -> str:
        """Render the record in WFP text format (newline terminated)."""
        lines = [self.header]
        if self.hpsm is not None:
            lines.append(f"hpsm={self.hpsm}")
        lines.extend(line.to_wfp_line() for line in self.snippet_lines)
        return "\n".join(lines) + "\n"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            "content_hash": self.content_hash,
            "byte_length": self.byte_length,
            "path": self.path,
            "snippet_lines": [
                {"line_number": line.line_number, "hashes": list(line.hashes)} for line in self.snippet_lines
            ],
            "hpsm": self.hpsm,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FingerprintRecord:
        """Deserialize from dict."""
        return cls(
            content_hash=data["content_hash"],
            byte_length=data["byte_length"],
            path=data["path"],
            snippet_lines=tuple(
                SnippetLine(line_number=item["line_number"], hashes=tuple(item["hashes"]))
                for item in data.get("snippet_lines", [])
            ),
            hpsm=data.get("hpsm"),
        )


def parse_wfp(text: str) -> list[FingerprintRecord]:
    """
    Parse WFP text holding one or more records.

    Unknown ``key=value`` lines (such as extra hash lines emitted by other
    clients) are ignored.

    Raises:
        ValueError: If a snippet line appears before any header, or a header is malformed
    """
    records: list[FingerprintRecord] = []
    current: dict[str, Any] | None = None

    def _flush() -> None:
        if current is not None:
            records.append(
                FingerprintRecord(
                    content_hash=current["content_hash"],
                    byte_length=current["byte_length"],
                    path=current["path"],
                    snippet_lines=tuple(current["snippet_lines"]),
                    hpsm=current["hpsm"],
                )
            )

    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            continue
        key, sep, value = line.partition("=")
        if not sep:
            raise ValueError(f"Invalid WFP line: '{line}'")
        if key == "file":
            _flush()
            parts = value.split(",", 2)
            if len(parts) != 3:
                raise ValueError(f"Invalid WFP header: '{line}'")
            current = {
                "content_hash": parts[0],
                "byte_length": int(parts[1]),
                "path": parts[2],
                "snippet_lines": [],
                "hpsm": None,
            }
            continue
        if current is None:
            raise ValueError(f"WFP line before any file header: '{line}'")
        if key == "hpsm":
            current["hpsm"] = value
        elif key.isdigit():
            current["snippet_lines"].append(SnippetLine(line_number=int(key), hashes=tuple(value.split(","))))
    _flush()
    return records
