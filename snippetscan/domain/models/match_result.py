"""Domain model for match results returned by the remote scan service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from ..types import LineRange, parse_line_ranges


@dataclass(frozen=True)
class MatchDetail:
    """
    One match reported for a scanned file.

    Only the package identifiers and matched lines are interpreted; every
    other field reported by the service is kept verbatim in ``extra``.

    Attributes:
        purls: Package identifiers of the matched component
        lines: Matched line ranges, e.g. ``"11-52,80-90"`` (optional)
        match_type: Kind of match (``file``, ``snippet``, ``none``) (optional)
        extra: Remaining fields, opaque to curation
    """

    purls: tuple[str, ...] = field(default_factory=tuple)
    lines: str | None = None
    match_type: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def line_ranges(self) -> list[LineRange]:
        return parse_line_ranges(self.lines)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> MatchDetail:
        """Deserialize from a service detail object."""
        raw_purls = data.get("purl") or []
        if isinstance(raw_purls, str):
            raw_purls = [raw_purls]
        purls = tuple(p.strip() for p in raw_purls if isinstance(p, str) and p.strip())
        lines = data.get("lines")
        return cls(
            purls=purls,
            lines=lines if isinstance(lines, str) else None,
            match_type=data.get("id"),
            extra={k: v for k, v in data.items() if k not in ("purl", "lines", "id")},
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize back to the service detail shape."""
        data: dict[str, Any] = {}
        if self.match_type is not None:
            data["id"] = self.match_type
        data.update(self.extra)
        data["purl"] = list(self.purls)
        if self.lines is not None:
            data["lines"] = self.lines
        return data


@dataclass(frozen=True)
class MatchResult:
    """
    Match results for one scanned file path.

    Attributes:
        file_path: Scanned file path
        details: Matches in the order reported by the service
    """

    file_path: str
    details: tuple[MatchDetail, ...] = field(default_factory=tuple)

    @property
    def package_ids(self) -> tuple[str, ...]:
        """Package identifiers across all details, first occurrence order."""
        return tuple(dict.fromkeys(p for detail in self.details for p in detail.purls))

    @property
    def line_ranges(self) -> list[LineRange]:
        return [r for detail in self.details for r in detail.line_ranges]

    @classmethod
    def from_dict(cls, file_path: str, details: list[Mapping[str, Any]]) -> MatchResult:
        return cls(
            file_path=file_path,
            details=tuple(MatchDetail.from_dict(d) for d in details if isinstance(d, Mapping)),
        )

    def to_dict(self) -> list[dict[str, Any]]:
        return [detail.to_dict() for detail in self.details]


def parse_match_results(payload: Mapping[str, Any]) -> list[MatchResult]:
    """
    Convert a scan service payload (file path -> list of details) to results.

    Entries whose value is not a list are ignored.
    """
    return [
        MatchResult.from_dict(file_path, details)
        for file_path, details in payload.items()
        if isinstance(details, list)
    ]


def match_results_to_dict(results: list[MatchResult]) -> dict[str, list[dict[str, Any]]]:
    """Inverse of :func:`parse_match_results`."""
    return {result.file_path: result.to_dict() for result in results}
