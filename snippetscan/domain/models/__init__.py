"""Domain models for fingerprinting and result curation."""

from .fingerprint import FingerprintRecord, SnippetLine, parse_wfp
from .match_result import MatchDetail, MatchResult, match_results_to_dict, parse_match_results
from .rules import RemoveRule, ReplaceRule, Rule, RuleSet, priority_score, sort_by_priority

__all__ = [
    "FingerprintRecord",
    "SnippetLine",
    "parse_wfp",
    "MatchDetail",
    "MatchResult",
    "match_results_to_dict",
    "parse_match_results",
    "RemoveRule",
    "ReplaceRule",
    "Rule",
    "RuleSet",
    "priority_score",
    "sort_by_priority",
]
