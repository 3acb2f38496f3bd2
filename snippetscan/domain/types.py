import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LineRange:
    """Closed interval of source lines, ``start <= end``."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"Invalid line range: start ({self.start}) > end ({self.end})")

    def overlaps(self, other: "LineRange") -> bool:
        """Closed-interval overlap; touching ranges such as [1,5] and [5,10] overlap."""
        return self.start <= other.end and self.end >= other.start


def parse_line_ranges(lines: str | None) -> list[LineRange]:
    """
    Parse a ``"<start>-<end>[,<start>-<end>...]"`` string into line ranges.

    Malformed parts are skipped, so a partially broken string still yields
    the ranges that could be read.
    """
    if lines is None or not lines.strip():
        return []
    ranges: list[LineRange] = []
    for part in lines.split(","):
        bounds = part.strip().split("-")
        if len(bounds) != 2:
            continue
        try:
            ranges.append(LineRange(int(bounds[0].strip()), int(bounds[1].strip())))
        except ValueError as e:
            logger.debug(f"Invalid line range '{part}' in '{lines}': {e}")
    return ranges


def has_overlap(ranges: list[LineRange], target: LineRange) -> bool:
    """True if any of ``ranges`` overlaps ``target``."""
    return any(r.overlaps(target) for r in ranges)
