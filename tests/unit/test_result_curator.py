"""Unit tests for BOM rule curation of match results."""

from __future__ import annotations

import copy

import pytest

from snippetscan.domain.errors import InvalidInputError
from snippetscan.domain.models.match_result import parse_match_results
from snippetscan.domain.models.rules import RemoveRule, ReplaceRule, RuleSet
from snippetscan.domain.services.result_curator import ResultCurator, component_index, curate

PAYLOAD = {
    "src/spdx.c": [
        {"id": "snippet", "lines": "11-52", "purl": ["pkg:github/scanoss/engine"], "component": "engine", "vendor": "scanoss"},
    ],
    "src/bootstrap.js": [
        {"id": "file", "purl": ["pkg:github/twbs/bootstrap", "pkg:npm/mip-bootstrap"], "component": "bootstrap"},
    ],
    "src/util.c": [
        {"id": "snippet", "lines": "1-20,100-120", "purl": ["pkg:github/scanoss/engine"]},
    ],
    "src/main.c": [
        {"id": "file", "purl": ["pkg:npm/left-pad"], "component": "left-pad", "vendor": None},
    ],
}


@pytest.fixture
def results():
    return parse_match_results(copy.deepcopy(PAYLOAD))


def _paths(results) -> list[str]:
    return [r.file_path for r in results]


class TestRemoveRules:
    """Remove phase."""

    def test_purl_only_rule_removes_exactly_one_result(self, results):
        curated = curate(results, RuleSet(remove=(RemoveRule(purl="pkg:npm/mip-bootstrap"),)))

        assert len(curated) == len(results) - 1
        assert "src/bootstrap.js" not in _paths(curated)

    def test_purl_matches_any_detail_identifier(self, results):
        curated = curate(results, RuleSet(remove=(RemoveRule(purl="pkg:github/twbs/bootstrap"),)))
        assert "src/bootstrap.js" not in _paths(curated)

    def test_path_and_overlapping_line_range_removes(self, results):
        rule = RemoveRule(path="src/spdx.c", start_line=40, end_line=60)
        curated = curate(results, RuleSet(remove=(rule,)))
        assert "src/spdx.c" not in _paths(curated)

    def test_non_overlapping_end_line_keeps_result(self, results):
        rule = RemoveRule(path="src/spdx.c", end_line=10)
        curated = curate(results, RuleSet(remove=(rule,)))
        assert "src/spdx.c" in _paths(curated)

    def test_non_overlapping_closed_range_keeps_result(self, results):
        rule = RemoveRule(path="src/spdx.c", start_line=1, end_line=10)
        assert len(curate(results, RuleSet(remove=(rule,)))) == len(results)

    def test_open_start_line(self, results):
        curated = curate(results, RuleSet(remove=(RemoveRule(path="src/spdx.c", start_line=50),)))
        assert "src/spdx.c" not in _paths(curated)

    def test_adjacent_ranges_overlap(self, results):
        rule = RemoveRule(path="src/util.c", start_line=120, end_line=130)
        assert "src/util.c" not in _paths(curate(results, RuleSet(remove=(rule,))))

    def test_path_and_purl_must_both_match(self, results):
        rule = RemoveRule(path="src/spdx.c", purl="pkg:npm/left-pad")
        assert len(curate(results, RuleSet(remove=(rule,)))) == len(results)

    def test_line_range_without_reported_lines_never_matches(self, results):
        rule = RemoveRule(path="src/main.c", start_line=1, end_line=1000)
        assert "src/main.c" in _paths(curate(results, RuleSet(remove=(rule,))))

    def test_inert_rule_matches_nothing(self, results):
        assert curate(results, RuleSet(remove=(RemoveRule(),))) == results

    def test_path_comparison_is_exact(self, results):
        assert len(curate(results, RuleSet(remove=(RemoveRule(path="src"),)))) == len(results)

    @pytest.mark.parametrize(
        "rule",
        [
            RemoveRule(path="src/spdx.c", start_line=60, end_line=40),
            RemoveRule(path="src/spdx.c", end_line=-1),
        ],
    )
    def test_inverted_line_range_matches_nothing(self, results, rule):
        assert curate(results, RuleSet(remove=(rule,))) == results

    def test_inverted_line_range_from_configuration(self, results):
        rules = {"bom": {"remove": [{"path": "src/spdx.c", "start_line": 60, "end_line": 40}]}}
        assert ResultCurator().curate(results, rules) == results

    def test_rules_are_independent(self, results):
        rules = RuleSet(
            remove=(
                RemoveRule(path="src/main.c"),
                RemoveRule(purl="pkg:github/scanoss/engine", start_line=100, end_line=100),
            )
        )
        assert _paths(curate(results, rules)) == ["src/spdx.c", "src/bootstrap.js"]


class TestReplaceRules:
    """Replace phase."""

    def test_non_empty_replacement_collapses_identifiers(self, results):
        rule = ReplaceRule(purl="pkg:npm/mip-bootstrap", replace_with="pkg:npm/bootstrap")
        curated = curate(results, RuleSet(replace=(rule,)))

        bootstrap = next(r for r in curated if r.file_path == "src/bootstrap.js")
        assert bootstrap.package_ids == ("pkg:npm/bootstrap",)
        assert bootstrap.details[0].extra["component"] == "bootstrap"

    def test_empty_replacement_is_a_no_op(self, results):
        rule = ReplaceRule(purl="pkg:npm/mip-bootstrap", replace_with="")
        assert curate(results, RuleSet(replace=(rule,))) == results

    def test_highest_priority_rule_wins(self, results):
        rules = RuleSet(
            replace=(
                ReplaceRule(purl="pkg:github/scanoss/engine", replace_with="pkg:generic/low"),
                ReplaceRule(path="src/spdx.c", purl="pkg:github/scanoss/engine", replace_with="pkg:generic/high"),
            )
        )
        curated = {r.file_path: r for r in curate(results, rules)}

        assert curated["src/spdx.c"].package_ids == ("pkg:generic/high",)
        assert curated["src/util.c"].package_ids == ("pkg:generic/low",)

    def test_empty_higher_priority_rule_blocks_lower_ones(self, results):
        rules = RuleSet(
            replace=(
                ReplaceRule(purl="pkg:npm/left-pad", replace_with="pkg:npm/right-pad"),
                ReplaceRule(path="src/main.c", purl="pkg:npm/left-pad", replace_with=""),
            )
        )
        main = next(r for r in curate(results, rules) if r.file_path == "src/main.c")
        assert main.package_ids == ("pkg:npm/left-pad",)

    def test_replacement_updates_component_vendor_and_license(self, results):
        rule = ReplaceRule(path="src/spdx.c", replace_with="pkg:github/acme/spdx-tools@1.0", license="Apache-2.0")
        spdx = next(r for r in curate(results, RuleSet(replace=(rule,))) if r.file_path == "src/spdx.c")

        extra = spdx.details[0].extra
        assert extra["component"] == "spdx-tools"
        assert extra["vendor"] == "acme"
        assert extra["licenses"] == [{"name": "Apache-2.0", "source": "replace_rule"}]
        assert spdx.details[0].lines == "11-52"

    def test_missing_opaque_fields_are_not_added(self, results):
        rule = ReplaceRule(path="src/util.c", replace_with="pkg:github/acme/util")
        util = next(r for r in curate(results, RuleSet(replace=(rule,))) if r.file_path == "src/util.c")
        assert "component" not in util.details[0].extra
        assert "licenses" not in util.details[0].extra

    def test_unknown_replacement_clears_component_facts(self):
        results = parse_match_results(
            {
                "lib/old.js": [
                    {
                        "id": "file",
                        "purl": ["pkg:npm/old"],
                        "component": "old",
                        "version": "1.2.3",
                        "url": "https://www.npmjs.com/package/old",
                        "file_hash": "abc",
                        "licenses": [{"name": "GPL-2.0-only"}],
                        "copyrights": [{"name": "(c) Old Authors"}],
                        "vulnerabilities": [{"ID": "CVE-2020-0001"}],
                    }
                ],
            }
        )
        rule = ReplaceRule(purl="pkg:npm/old", replace_with="pkg:npm/new")

        detail = curate(results, RuleSet(replace=(rule,)))[0].details[0]

        assert detail.purls == ("pkg:npm/new",)
        assert "version" not in detail.extra
        assert detail.extra["url"] == ""
        assert detail.extra["licenses"] == []
        assert detail.extra["copyrights"] == []
        assert detail.extra["vulnerabilities"] == []
        assert detail.extra["component"] == "new"
        assert detail.extra["file_hash"] == "abc"

    def test_known_replacement_reuses_reported_component(self):
        results = parse_match_results(
            {
                "src/util.c": [
                    {"id": "snippet", "lines": "1-20", "purl": ["pkg:github/scanoss/engine"], "file": "engine/util.c",
                     "file_hash": "aaa", "version": "5.0", "licenses": [{"name": "GPL-2.0-only"}]},
                ],
                "src/pad.js": [
                    {"id": "file", "lines": "all", "purl": ["pkg:npm/left-pad"], "component": "left-pad",
                     "version": "1.3.0", "file": "index.js", "file_hash": "bbb", "licenses": [{"name": "MIT"}]},
                ],
            }
        )
        rule = ReplaceRule(path="src/util.c", replace_with="pkg:npm/left-pad")

        util = curate(results, RuleSet(replace=(rule,)))[0].details[0]

        assert util.match_type == "file"
        assert util.lines == "1-20"
        assert util.purls == ("pkg:npm/left-pad",)
        assert util.extra["component"] == "left-pad"
        assert util.extra["version"] == "1.3.0"
        assert util.extra["licenses"] == [{"name": "MIT"}]
        assert util.extra["file"] == "engine/util.c"
        assert util.extra["file_hash"] == "aaa"

    def test_component_index_is_built_before_removal(self, results):
        rules = RuleSet(
            remove=(RemoveRule(path="src/main.c"),),
            replace=(ReplaceRule(path="src/util.c", replace_with="pkg:npm/left-pad"),),
        )
        util = next(r for r in curate(results, rules) if r.file_path == "src/util.c")
        assert util.details[0].extra["component"] == "left-pad"

    def test_component_index_skips_non_matches(self):
        results = parse_match_results(
            {
                "a.c": [{"id": "none", "purl": ["pkg:npm/x"], "component": "ghost"}],
                "b.c": [{"id": "file", "purl": ["pkg:npm/x"], "component": "x"}],
                "c.c": [{"id": "file", "purl": ["pkg:npm/x"], "component": "later"}],
            }
        )
        assert component_index(results)["pkg:npm/x"].extra["component"] == "x"


class TestCurate:
    """Whole-pipeline behaviour."""

    def test_empty_rule_set_is_identity(self, results):
        assert curate(results, RuleSet()) == results

    def test_remove_runs_before_replace(self, results):
        rules = RuleSet(
            remove=(RemoveRule(path="src/main.c"),),
            replace=(ReplaceRule(path="src/main.c", replace_with="pkg:npm/x"),),
        )
        assert "src/main.c" not in _paths(curate(results, rules))

    def test_inputs_are_not_mutated(self, results):
        snapshot = copy.deepcopy(results)
        rules = RuleSet(
            remove=(RemoveRule(purl="pkg:npm/mip-bootstrap"),),
            replace=(ReplaceRule(path="src/spdx.c", replace_with="pkg:npm/x", license="MIT"),),
        )

        curated = curate(results, rules)

        assert results == snapshot
        assert curated is not results

    def test_accepts_rule_configuration_mapping(self, results):
        curated = ResultCurator().curate(results, {"bom": {"remove": [{"purl": "pkg:npm/mip-bootstrap"}]}})
        assert len(curated) == len(results) - 1

    def test_none_arguments_are_rejected(self, results):
        with pytest.raises(InvalidInputError):
            curate(None, RuleSet())
        with pytest.raises(InvalidInputError):
            curate(results, None)

    def test_empty_results(self):
        assert curate([], RuleSet(remove=(RemoveRule(path="a.c"),))) == []
