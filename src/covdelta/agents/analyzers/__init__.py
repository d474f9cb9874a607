"""Analyzer agents for covdelta."""

from covdelta.agents.analyzers.baseline import (
    DEFAULT_BRANCH_MATCH_REGEX,
    BaselineConfigError,
    BaselineResolver,
    VcsAnalysisConfig,
)
from covdelta.agents.analyzers.diff import (
    DiffEngine,
    LineRange,
    match_changed_file,
    new_line_numbers,
)
from covdelta.agents.analyzers.relative import (
    DEFAULT_DIFF_TIMEOUT,
    RelativeCoverageAnalyzer,
    RelativeCoverageTask,
    hit_coverage,
)

__all__ = [
    "DEFAULT_BRANCH_MATCH_REGEX",
    "DEFAULT_DIFF_TIMEOUT",
    "BaselineConfigError",
    "BaselineResolver",
    "DiffEngine",
    "LineRange",
    "RelativeCoverageAnalyzer",
    "RelativeCoverageTask",
    "VcsAnalysisConfig",
    "hit_coverage",
    "match_changed_file",
    "new_line_numbers",
]
