"""Configuration parsing from ``.covdelta.yml``."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from covdelta.agents.analyzers.baseline import (
    DEFAULT_BRANCH_MATCH_REGEX,
    BaselineConfigError,
    compile_branch_regex,
)
from covdelta.agents.analyzers.relative import DEFAULT_DIFF_TIMEOUT
from covdelta.models.elements import CoverageElement

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".covdelta.yml"

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")

# Granularities a relative analysis can be computed at
_VALID_LEVELS = ("line", "condition")


def _resolve_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        var = match.group(1)
        resolved = os.environ.get(var)
        if resolved is None:
            logger.warning("Environment variable %s is not set (referenced in config)", var)
            return ""
        return resolved

    return _ENV_VAR_RE.sub(_replace, value)


def _resolve_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively resolve environment variables in a dictionary."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            result[key] = _resolve_env_vars(value)
        elif isinstance(value, dict):
            result[key] = _resolve_dict(value)
        else:
            result[key] = value
    return result


@dataclass
class RelativeCoverageConfig:
    """Relative coverage analysis settings."""

    root_path: str
    """Root of the git working tree (defaults to the project root)."""

    enabled: bool = True
    """Whether relative coverage is computed at all."""

    branch_match_regex: str = DEFAULT_BRANCH_MATCH_REGEX
    """Regex a previous build's branch must fully match to be a baseline."""

    level: str = "line"
    """Granularity: ``line`` or ``condition``."""

    diff_timeout: float = DEFAULT_DIFF_TIMEOUT
    """Seconds to wait for the diff engine."""

    @property
    def coverage_level(self) -> CoverageElement:
        """Return :attr:`level` as a CoverageElement.

        Raises:
            ValueError: If the level is not ``line`` or ``condition``.
        """
        if self.level.strip().lower() not in _VALID_LEVELS:
            msg = (
                f"relative_coverage.level must be one of {', '.join(_VALID_LEVELS)} "
                f"(got: {self.level})"
            )
            raise ValueError(msg)
        return CoverageElement.from_name(self.level)


@dataclass
class ReportConfig:
    """Terminal rendering configuration."""

    high_threshold: float = 80.0
    """Coverage % at or above which values render green."""

    medium_threshold: float = 50.0
    """Coverage % at or above which values render yellow."""


@dataclass
class CovdeltaConfig:
    """Complete covdelta configuration from ``.covdelta.yml``."""

    relative_coverage: RelativeCoverageConfig
    """Relative coverage settings."""

    report: ReportConfig = field(default_factory=ReportConfig)
    """Rendering settings."""

    raw: dict[str, Any] = field(default_factory=dict)
    """Raw parsed YAML for extension/debugging."""


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    section = raw.get(name, {})
    return section if isinstance(section, dict) else {}


def load_config(root: str | Path) -> CovdeltaConfig:
    """Load and parse ``.covdelta.yml`` from *root*.

    Falls back to defaults when the file or any section is missing.
    """
    root_path = Path(root).resolve()
    config_file = root_path / CONFIG_FILE_NAME

    raw: dict[str, Any] = {}
    if config_file.is_file():
        parsed = yaml.safe_load(config_file.read_text(encoding="utf-8"))
        if isinstance(parsed, dict):
            raw = _resolve_dict(parsed)

    relative_raw = _section(raw, "relative_coverage")
    relative = RelativeCoverageConfig(
        root_path=str(relative_raw.get("root_path", root_path)),
        enabled=bool(relative_raw.get("enabled", True)),
        branch_match_regex=str(
            relative_raw.get("branch_match_regex", DEFAULT_BRANCH_MATCH_REGEX)
        ),
        level=str(relative_raw.get("level", "line")).strip().lower(),
        diff_timeout=float(relative_raw.get("diff_timeout", DEFAULT_DIFF_TIMEOUT)),
    )

    report_raw = _section(raw, "report")
    report = ReportConfig(
        high_threshold=float(report_raw.get("high_threshold", 80.0)),
        medium_threshold=float(report_raw.get("medium_threshold", 50.0)),
    )

    return CovdeltaConfig(relative_coverage=relative, report=report, raw=raw)


def _validate_relative_config(relative: RelativeCoverageConfig) -> list[str]:
    """Validate relative coverage settings."""
    errors: list[str] = []

    if not relative.root_path:
        errors.append("relative_coverage.root_path is required")

    try:
        relative.coverage_level  # noqa: B018
    except ValueError as exc:
        errors.append(str(exc))

    try:
        compile_branch_regex(relative.branch_match_regex)
    except BaselineConfigError as exc:
        errors.append(f"relative_coverage.branch_match_regex: {exc}")

    if relative.diff_timeout <= 0:
        errors.append(
            f"relative_coverage.diff_timeout must be positive (got: {relative.diff_timeout})"
        )

    return errors


def _validate_report_config(report: ReportConfig) -> list[str]:
    """Validate rendering thresholds."""
    max_percentage = 100.0
    errors: list[str] = []

    if not 0.0 <= report.high_threshold <= max_percentage:
        errors.append(
            f"report.high_threshold must be between 0 and 100 (got: {report.high_threshold})"
        )

    if not 0.0 <= report.medium_threshold <= max_percentage:
        errors.append(
            f"report.medium_threshold must be between 0 and 100 "
            f"(got: {report.medium_threshold})"
        )

    if report.medium_threshold > report.high_threshold:
        errors.append("report.medium_threshold must not exceed report.high_threshold")

    return errors


def validate_config(config: CovdeltaConfig) -> list[str]:
    """Validate the configuration and return a list of error messages.

    Returns an empty list if the configuration is valid.
    """
    errors: list[str] = []
    errors.extend(_validate_relative_config(config.relative_coverage))
    errors.extend(_validate_report_config(config.report))
    return errors
