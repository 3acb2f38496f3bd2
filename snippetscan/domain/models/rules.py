"""Domain model for BOM rules (include / remove / replace) and their priority ordering."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import Any

from ..errors import MalformedRuleError
from ..types import LineRange

logger = logging.getLogger(__name__)


def _optional_str(entry: dict[str, Any], key: str) -> str | None:
    value = entry.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise MalformedRuleError(entry, f"'{key}' must be a string")
    value = value.strip()
    return value or None


def _optional_int(entry: dict[str, Any], key: str) -> int | None:
    value = entry.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedRuleError(entry, f"'{key}' must be an integer")
    return value


@dataclass(frozen=True)
class Rule:
    """
    Shared rule predicate: a file path, a package identifier (PURL), or both.

    Empty strings are normalized to None. A rule with neither field set is
    inert and matches nothing.

    Attributes:
        path: Scanned file path the rule applies to (optional)
        purl: Package identifier the rule applies to (optional)
    """

    path: str | None = None
    purl: str | None = None

    def __post_init__(self) -> None:
        """Normalize empty strings to None."""
        if self.path is not None and not self.path:
            object.__setattr__(self, "path", None)
        if self.purl is not None and not self.purl:
            object.__setattr__(self, "purl", None)

    @property
    def is_inert(self) -> bool:
        return self.path is None and self.purl is None

    @classmethod
    def from_dict(cls, entry: dict[str, Any]) -> Rule:
        """Deserialize from a rule configuration entry."""
        if not isinstance(entry, dict):
            raise MalformedRuleError(entry, "rule must be a mapping")
        return cls(path=_optional_str(entry, "path"), purl=_optional_str(entry, "purl"))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible dict, omitting absent fields."""
        data: dict[str, Any] = {}
        if self.path is not None:
            data["path"] = self.path
        if self.purl is not None:
            data["purl"] = self.purl
        return data


@dataclass(frozen=True)
class RemoveRule(Rule):
    """
    Rule removing matching results, optionally limited to a line range.

    Attributes:
        start_line: First line of the excluded range (optional)
        end_line: Last line of the excluded range (optional)
    """

    start_line: int | None = None
    end_line: int | None = None

    @property
    def has_line_range(self) -> bool:
        return self.start_line is not None or self.end_line is not None

    @property
    def line_range(self) -> LineRange | None:
        """
        Excluded lines, a missing bound leaving that side open.

        None when there is no range or when the bounds are inverted.
        """
        start = self.start_line if self.start_line is not None else 0
        end = self.end_line if self.end_line is not None else sys.maxsize
        if not self.has_line_range or start > end:
            return None
        return LineRange(start, end)

    @property
    def is_inert(self) -> bool:
        # An inverted range excludes no line
        return super().is_inert or (self.has_line_range and self.line_range is None)

    @classmethod
    def from_dict(cls, entry: dict[str, Any]) -> RemoveRule:
        if not isinstance(entry, dict):
            raise MalformedRuleError(entry, "rule must be a mapping")
        start_line = _optional_int(entry, "start_line")
        end_line = _optional_int(entry, "end_line")
        return cls(
            path=_optional_str(entry, "path"),
            purl=_optional_str(entry, "purl"),
            start_line=start_line,
            end_line=end_line,
        )

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.start_line is not None:
            data["start_line"] = self.start_line
        if self.end_line is not None:
            data["end_line"] = self.end_line
        return data


@dataclass(frozen=True)
class ReplaceRule(Rule):
    """
    Rule replacing the package identifiers of matching results.

    Attributes:
        replace_with: Replacement package identifier; empty means no-op
        license: License to record on the replaced component (optional)
    """

    replace_with: str = ""
    license: str | None = None

    @classmethod
    def from_dict(cls, entry: dict[str, Any]) -> ReplaceRule:
        if not isinstance(entry, dict):
            raise MalformedRuleError(entry, "rule must be a mapping")
        return cls(
            path=_optional_str(entry, "path"),
            purl=_optional_str(entry, "purl"),
            replace_with=_optional_str(entry, "replace_with") or "",
            license=_optional_str(entry, "license"),
        )

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["replace_with"] = self.replace_with
        if self.license is not None:
            data["license"] = self.license
        return data


def priority_score(rule: Rule) -> int:
    """4 for path and purl, 2 for purl only, 1 for path only, 0 otherwise."""
    if rule.path is not None and rule.purl is not None:
        return 4
    if rule.purl is not None:
        return 2
    if rule.path is not None:
        return 1
    return 0


def _priority_key(rule: Rule) -> tuple[int, int]:
    # Path length only breaks ties between rules that both carry a path; a
    # pathless rule only ever ties with other pathless rules of its score.
    return (-priority_score(rule), -len(rule.path) if rule.path is not None else 0)


def sort_by_priority(rules: list[Rule] | tuple[Rule, ...]) -> list:
    """
    Order rules from most to least specific.

    Descending priority score; equal scores with paths on both sides are
    ordered by descending path length. The sort is stable, so otherwise equal
    rules keep their input order.
    """
    return sorted(rules, key=_priority_key)


@dataclass(frozen=True)
class RuleSet:
    """
    User-declared BOM rules used to curate match results.

    Attributes:
        include: Rules forwarded to the scan service as identification hints
        remove: Rules dropping matching results
        replace: Rules rewriting package identifiers of matching results
    """

    include: tuple[Rule, ...] = field(default_factory=tuple)
    remove: tuple[RemoveRule, ...] = field(default_factory=tuple)
    replace: tuple[ReplaceRule, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not (self.include or self.remove or self.replace)

    def replace_by_priority(self) -> list[ReplaceRule]:
        """Replace rules sorted from most to least specific."""
        return sort_by_priority(self.replace)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> RuleSet:
        """
        Build a rule set from a rule configuration mapping.

        Accepts either ``{"bom": {...}}`` or the inner ``{...}`` mapping.
        Missing sections are empty.

        Raises:
            MalformedRuleError: If a section is not a list or an entry is malformed
        """
        if not data:
            return cls()
        bom = data.get("bom", data)
        if not isinstance(bom, dict):
            raise MalformedRuleError(bom, "'bom' must be a mapping")

        def _section(name: str) -> list[dict[str, Any]]:
            entries = bom.get(name) or []
            if not isinstance(entries, list):
                raise MalformedRuleError(entries, f"'{name}' must be a list of rules")
            return entries

        rule_set = cls(
            include=tuple(Rule.from_dict(e) for e in _section("include")),
            remove=tuple(RemoveRule.from_dict(e) for e in _section("remove")),
            replace=tuple(ReplaceRule.from_dict(e) for e in _section("replace")),
        )
        inert = sum(1 for r in (*rule_set.include, *rule_set.remove, *rule_set.replace) if r.is_inert)
        if inert:
            logger.debug(f"{inert} rule(s) carry neither path nor purl, or an inverted line range, and will match nothing")
        return rule_set

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the ``{"bom": {...}}`` rule configuration shape."""
        return {
            "bom": {
                "include": [r.to_dict() for r in self.include],
                "remove": [r.to_dict() for r in self.remove],
                "replace": [r.to_dict() for r in self.replace],
            }
        }
