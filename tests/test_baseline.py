"""Tests for baseline resolution (agents/analyzers/baseline.py)."""

from __future__ import annotations

import pytest

from covdelta.agents.analyzers.baseline import (
    BaselineConfigError,
    BaselineResolver,
    VcsAnalysisConfig,
    compile_branch_regex,
)
from covdelta.models import CoverageElement, CoverageResult


def _vcs(branch: str, commit: str | None, regex: str = ".*") -> VcsAnalysisConfig:
    return VcsAnalysisConfig(
        root_path="/repo",
        branch_name=branch,
        last_commit_id=commit,
        branch_match_regex=regex,
    )


def _chain(*builds: tuple[str, VcsAnalysisConfig | None]) -> CoverageResult:
    """Link builds oldest first; return the newest."""
    previous: CoverageResult | None = None
    for name, vcs in builds:
        previous = CoverageResult(
            name=name,
            element=CoverageElement.REPORT,
            previous_result=previous,
            vcs_config=vcs,
        )
    assert previous is not None
    return previous


# ── Fixtures ─────────────────────────────────────────────────────


@pytest.fixture
def history() -> CoverageResult:
    """B1(main) <- B2(main) <- B3(release) <- B4(feature, current)."""
    return _chain(
        ("B1", _vcs("main", "1111111111aaaaaa")),
        ("B2", _vcs("main", "2222222222bbbbbb")),
        ("B3", _vcs("release", "3333333333cccccc")),
        ("B4", _vcs("feature", "4444444444dddddd", regex="main")),
    )


# ── BaselineResolver ─────────────────────────────────────────────


class TestBaselineResolver:
    def test_returns_nearest_match(self, history: CoverageResult) -> None:
        baseline = BaselineResolver("main").resolve(history)

        assert baseline is not None
        assert baseline.last_commit_id == "2222222222bbbbbb"

    def test_default_regex_matches_immediate_predecessor(
        self, history: CoverageResult
    ) -> None:
        baseline = BaselineResolver().resolve(history)

        assert baseline is not None
        assert baseline.branch_name == "release"

    def test_requires_full_match(self, history: CoverageResult) -> None:
        assert BaselineResolver("mai").resolve(history) is None
        assert BaselineResolver("rel.*").resolve(history) is not None

    def test_skips_builds_without_metadata(self) -> None:
        current = _chain(
            ("B1", _vcs("main", "1111111111aaaaaa")),
            ("B2", None),
            ("B3", _vcs("feature", "3333333333cccccc")),
        )

        baseline = BaselineResolver("main").resolve(current)

        assert baseline is not None
        assert baseline.last_commit_id == "1111111111aaaaaa"

    def test_no_match_returns_none(self, history: CoverageResult) -> None:
        assert BaselineResolver("develop").resolve(history) is None

    def test_first_build_has_no_baseline(self) -> None:
        current = _chain(("B1", _vcs("main", "1111111111aaaaaa")))
        assert BaselineResolver().resolve(current) is None

    def test_current_build_is_never_its_own_baseline(self) -> None:
        current = _chain(
            ("B1", _vcs("feature", "1111111111aaaaaa")),
            ("B2", _vcs("main", "2222222222bbbbbb")),
        )
        assert BaselineResolver("main").resolve(current) is None

    def test_invalid_regex_raises(self) -> None:
        with pytest.raises(BaselineConfigError, match="Invalid branch match regex"):
            BaselineResolver("main[")

    def test_config_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            compile_branch_regex("(")


# ── VcsAnalysisConfig ────────────────────────────────────────────


class TestVcsAnalysisConfig:
    def test_defaults(self) -> None:
        vcs = VcsAnalysisConfig(root_path="/repo", branch_name="main", last_commit_id="abc")
        assert vcs.branch_match_regex == ".*"
        assert vcs.level is CoverageElement.LINE

    def test_branch_commit_name_uses_short_commit(self) -> None:
        vcs = _vcs("feature", "abcdef1234567890")
        assert vcs.branch_commit_name == "feature:abcdef12"

    def test_branch_commit_name_without_commit(self) -> None:
        assert _vcs("feature", None).branch_commit_name == "feature:"

    def test_target_names(self, history: CoverageResult) -> None:
        vcs = history.vcs_config
        assert vcs is not None

        assert vcs.target_branch_commit_name(history) == "main:22222222"
        assert vcs.target_last_commit_id(history) == "2222222222bbbbbb"

    def test_target_names_without_baseline(self) -> None:
        current = _chain(("B1", _vcs("feature", "1111111111aaaaaa", regex="main")))
        vcs = current.vcs_config
        assert vcs is not None

        assert vcs.resolve_baseline(current) is None
        assert vcs.target_branch_commit_name(current) == ""
        assert vcs.target_last_commit_id(current) == ""
