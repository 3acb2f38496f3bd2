"""Domain service applying BOM remove/replace rules to match results."""

from __future__ import annotations

import logging
from dataclasses import replace as dataclass_replace
from typing import Any, Mapping

from ..errors import InvalidInputError
from ..models.match_result import MatchDetail, MatchResult
from ..models.rules import RemoveRule, ReplaceRule, Rule, RuleSet
from ..types import has_overlap

logger = logging.getLogger(__name__)


def rule_matches(rule: Rule, result: MatchResult) -> bool:
    """
    Path / package identifier predicate shared by remove and replace rules.

    Path comparison is exact; the package identifier must be one of the
    identifiers reported across all of the result's details.
    """
    if rule.path is not None and rule.purl is not None:
        return rule.path == result.file_path and rule.purl in result.package_ids
    if rule.purl is not None:
        return rule.purl in result.package_ids
    if rule.path is not None:
        return rule.path == result.file_path
    return False


def remove_rule_matches(rule: RemoveRule, result: MatchResult) -> bool:
    """
    Remove rule predicate: :func:`rule_matches` plus the optional line range.

    A single missing bound leaves that side of the range open; a rule whose
    bounds are inverted matches nothing.
    """
    if rule.is_inert or not rule_matches(rule, result):
        return False
    excluded = rule.line_range
    if excluded is None:
        return True
    return has_overlap(result.line_ranges, excluded)


def _purl_name_and_namespace(purl: str) -> tuple[str | None, str | None]:
    # pkg:type/namespace/name@version?qualifiers#subpath
    body = purl.split("#", 1)[0].split("?", 1)[0]
    if body.startswith("pkg:"):
        body = body[4:]
    body = body.split("@", 1)[0]
    parts = [p for p in body.split("/") if p]
    if len(parts) < 2:
        return None, None
    name = parts[-1]
    namespace = "/".join(parts[1:-1]) or None
    return name, namespace


# Fields describing where a match was found, kept from the replaced detail
FILE_FIELDS = ("file", "file_hash", "file_url")

# Component facts that no longer hold once the identifier changes
COMPONENT_FIELDS = ("licenses", "copyrights", "vulnerabilities")


def component_index(results: list[MatchResult]) -> dict[str, MatchDetail]:
    """
    First detail reported for each package identifier, skipping non-matches.

    Replace rules reuse these details so a replaced result carries the
    replacement component's own metadata when the scan reported it elsewhere.
    """
    index: dict[str, MatchDetail] = {}
    for result in results:
        for detail in result.details:
            if detail.match_type == "none":
                continue
            for purl in detail.purls:
                index.setdefault(purl, detail)
    logger.debug(f"Purl component index created with {len(index)} entries")
    return index


def _replaced_detail(detail: MatchDetail, rule: ReplaceRule, known: MatchDetail | None) -> MatchDetail:
    if known is not None:
        extra = dict(known.extra)
        for key in FILE_FIELDS:
            if key in detail.extra:
                extra[key] = detail.extra[key]
            else:
                extra.pop(key, None)
        base = dataclass_replace(known, lines=detail.lines)
    else:
        extra = dict(detail.extra)
        extra.pop("version", None)
        if "url" in extra:
            extra["url"] = ""
        for key in COMPONENT_FIELDS:
            if key in extra:
                extra[key] = []
        base = detail
    name, namespace = _purl_name_and_namespace(rule.replace_with)
    if name is not None and "component" in extra:
        extra["component"] = name
    if namespace is not None and "vendor" in extra:
        extra["vendor"] = namespace
    if rule.license:
        extra["licenses"] = [{"name": rule.license, "source": "replace_rule"}]
    return dataclass_replace(base, purls=(rule.replace_with,), extra=extra)


class ResultCurator:
    """
    Curates scan match results with user-declared BOM rules.

    Stateless: results and rules are read-only inputs, and every call returns
    a freshly built list.
    """

    def curate(
        self,
        results: list[MatchResult] | None,
        rules: RuleSet | Mapping[str, Any] | None,
    ) -> list[MatchResult]:
        """
        Apply remove rules, then replace rules, to a batch of match results.

        Args:
            results: Match results, one per scanned file
            rules: BOM rule set, or a rule configuration mapping

        Returns:
            New list of curated results, in input order

        Raises:
            InvalidInputError: If results or rules is None
        """
        if results is None:
            raise InvalidInputError("Match results are required for curation", field="results")
        if rules is None:
            raise InvalidInputError("A rule set is required for curation", field="rules")
        if isinstance(rules, Mapping):
            rules = RuleSet.from_dict(rules)

        logger.info(f"Starting scan results processing with {len(results)} results")
        logger.debug(f"BOM configuration - Remove rules: {len(rules.remove)}, Replace rules: {len(rules.replace)}")

        components = component_index(results) if rules.replace else {}
        curated = list(results)
        if rules.remove:
            logger.info(f"Applying {len(rules.remove)} remove rules to scan results")
            curated = self.apply_remove_rules(curated, rules.remove)
        if rules.replace:
            logger.info(f"Applying {len(rules.replace)} replace rules to scan results")
            curated = self.apply_replace_rules(curated, rules.replace_by_priority(), components)

        logger.info(
            f"Scan results processing completed. Original results: {len(results)}, "
            f"Processed results: {len(curated)}"
        )
        return curated

    def apply_remove_rules(
        self,
        results: list[MatchResult],
        rules: tuple[RemoveRule, ...] | list[RemoveRule],
    ) -> list[MatchResult]:
        """Drop every result matched by at least one remove rule."""
        kept: list[MatchResult] = []
        for result in results:
            if any(remove_rule_matches(rule, result) for rule in rules):
                logger.debug(f"Removing results for file: {result.file_path}")
                continue
            kept.append(result)
        return kept

    def apply_replace_rules(
        self,
        results: list[MatchResult],
        rules: list[ReplaceRule],
        components: dict[str, MatchDetail] | None = None,
    ) -> list[MatchResult]:
        """
        Apply the first matching rule (rules must already be in priority order) to each result.

        A matching rule with an empty ``replace_with`` leaves the result unchanged.
        When ``components`` (see :func:`component_index`, built from ``results``
        when omitted) knows the replacement identifier, its detail replaces the
        matched one and only the file-specific fields are kept; otherwise
        version, licenses, copyrights and vulnerabilities are cleared.
        """
        if components is None:
            components = component_index(results)
        replaced: list[MatchResult] = []
        for result in results:
            rule = next((r for r in rules if rule_matches(r, result)), None)
            if rule is None or not rule.replace_with:
                replaced.append(result)
                continue
            logger.debug(
                f"Updated package URL from {list(result.package_ids)} to {rule.replace_with} "
                f"for file: {result.file_path}"
            )
            replaced.append(
                MatchResult(
                    file_path=result.file_path,
                    details=tuple(
                        _replaced_detail(detail, rule, components.get(rule.replace_with))
                        for detail in result.details
                    ),
                )
            )
        return replaced


def curate(results: list[MatchResult] | None, rules: RuleSet | Mapping[str, Any] | None) -> list[MatchResult]:
    """Module-level shortcut for :meth:`ResultCurator.curate`."""
    return ResultCurator().curate(results, rules)
