"""Tests for config.py (.covdelta.yml parsing and validation)."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest
import yaml

from covdelta.config import (
    CovdeltaConfig,
    RelativeCoverageConfig,
    ReportConfig,
    _resolve_dict,
    _resolve_env_vars,
    _validate_relative_config,
    _validate_report_config,
    load_config,
    validate_config,
)
from covdelta.models import CoverageElement

if TYPE_CHECKING:
    from collections.abc import Iterator


def _write_config(root: Path, data: dict[str, Any]) -> None:
    """Write .covdelta.yml with given data."""
    (root / ".covdelta.yml").write_text(yaml.dump(data), encoding="utf-8")


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[pytest.MonkeyPatch]:
    monkeypatch.delenv("COVDELTA_BASELINE", raising=False)
    yield monkeypatch


# ── _resolve_env_vars / _resolve_dict ─────────────────────────────────


class TestResolveEnvVars:
    def test_resolves_existing_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MY_VAR", "hello")
        assert _resolve_env_vars("${MY_VAR}") == "hello"

    def test_missing_var_returns_empty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("MISSING_VAR", raising=False)
        assert _resolve_env_vars("${MISSING_VAR}") == ""

    def test_nested_dicts(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INNER", "resolved")
        result = _resolve_dict({"outer": {"inner": "${INNER}"}, "num": 3})
        assert result == {"outer": {"inner": "resolved"}, "num": 3}


# ── load_config ───────────────────────────────────────────────────────


class TestLoadConfig:
    def test_load_missing_yml(self, tmp_path: Path) -> None:
        """Loads defaults when .covdelta.yml does not exist."""
        config = load_config(tmp_path)

        relative = config.relative_coverage
        assert relative.root_path == str(tmp_path.resolve())
        assert relative.enabled is True
        assert relative.branch_match_regex == ".*"
        assert relative.coverage_level is CoverageElement.LINE
        assert relative.diff_timeout == 60.0
        assert config.report.high_threshold == 80.0
        assert config.report.medium_threshold == 50.0

    def test_load_empty_yml(self, tmp_path: Path) -> None:
        (tmp_path / ".covdelta.yml").write_text("")
        config = load_config(tmp_path)
        assert config.raw == {}
        assert config.relative_coverage.root_path == str(tmp_path.resolve())

    def test_load_full_yml(self, tmp_path: Path, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("COVDELTA_BASELINE", "main")
        _write_config(
            tmp_path,
            {
                "relative_coverage": {
                    "enabled": False,
                    "root_path": "/srv/repo",
                    "branch_match_regex": "${COVDELTA_BASELINE}|release/.*",
                    "level": "Condition",
                    "diff_timeout": 15,
                },
                "report": {"high_threshold": 90, "medium_threshold": 70},
            },
        )

        config = load_config(tmp_path)

        relative = config.relative_coverage
        assert relative.enabled is False
        assert relative.root_path == "/srv/repo"
        assert relative.branch_match_regex == "main|release/.*"
        assert relative.level == "condition"
        assert relative.coverage_level is CoverageElement.CONDITION
        assert relative.diff_timeout == 15.0
        assert config.report == ReportConfig(high_threshold=90.0, medium_threshold=70.0)

    def test_non_dict_section_falls_back(self, tmp_path: Path) -> None:
        _write_config(tmp_path, {"relative_coverage": "oops", "report": ["x"]})
        config = load_config(tmp_path)
        assert config.relative_coverage.branch_match_regex == ".*"
        assert config.report.high_threshold == 80.0

    def test_malformed_yaml_raises(self, tmp_path: Path) -> None:
        (tmp_path / ".covdelta.yml").write_text("relative_coverage: [unclosed\n")
        with pytest.raises(yaml.YAMLError):
            load_config(tmp_path)


# ── validation ────────────────────────────────────────────────────────


class TestValidateConfig:
    def test_defaults_are_valid(self, tmp_path: Path) -> None:
        assert validate_config(load_config(tmp_path)) == []

    def test_unknown_level(self) -> None:
        errors = _validate_relative_config(RelativeCoverageConfig(root_path=".", level="file"))
        assert len(errors) == 1
        assert "relative_coverage.level" in errors[0]

    def test_invalid_regex(self) -> None:
        errors = _validate_relative_config(
            RelativeCoverageConfig(root_path=".", branch_match_regex="main[")
        )
        assert len(errors) == 1
        assert "branch_match_regex" in errors[0]

    def test_non_positive_timeout(self) -> None:
        errors = _validate_relative_config(RelativeCoverageConfig(root_path=".", diff_timeout=0))
        assert errors == ["relative_coverage.diff_timeout must be positive (got: 0)"]

    def test_missing_root(self) -> None:
        errors = _validate_relative_config(RelativeCoverageConfig(root_path=""))
        assert errors == ["relative_coverage.root_path is required"]

    def test_thresholds_out_of_range(self) -> None:
        errors = _validate_report_config(ReportConfig(high_threshold=120.0))
        assert any("report.high_threshold" in e for e in errors)

    def test_medium_above_high(self) -> None:
        errors = _validate_report_config(ReportConfig(high_threshold=40.0, medium_threshold=60.0))
        assert errors == ["report.medium_threshold must not exceed report.high_threshold"]

    def test_collects_all_sections(self) -> None:
        config = CovdeltaConfig(
            relative_coverage=RelativeCoverageConfig(root_path=".", level="branch"),
            report=ReportConfig(medium_threshold=-1.0),
        )
        assert len(validate_config(config)) == 2


class TestCoverageLevel:
    @pytest.mark.parametrize(
        ("level", "expected"),
        [("line", CoverageElement.LINE), ("condition", CoverageElement.CONDITION)],
    )
    def test_supported_levels(self, level: str, expected: CoverageElement) -> None:
        assert RelativeCoverageConfig(root_path=".", level=level).coverage_level is expected

    @pytest.mark.parametrize("level", ["report", "file", "absolute", "nonsense"])
    def test_unsupported_levels_raise(self, level: str) -> None:
        with pytest.raises(ValueError, match="relative_coverage.level"):
            RelativeCoverageConfig(root_path=".", level=level).coverage_level  # noqa: B018
