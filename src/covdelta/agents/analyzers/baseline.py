"""VCS metadata of a build and resolution of its comparison baseline.

A build records the branch it was built from and its last commit. Relative
coverage compares it against the nearest earlier build whose branch name
matches a configured regex (e.g. ``main`` for feature branches).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from covdelta.models.build import iter_previous_results
from covdelta.models.elements import CoverageElement

if TYPE_CHECKING:
    from covdelta.models.build import BuildResultNode

logger = logging.getLogger(__name__)

DEFAULT_BRANCH_MATCH_REGEX = ".*"

# Length of the abbreviated commit id in branch/commit labels
_SHORT_COMMIT_LENGTH = 8


class BaselineConfigError(ValueError):
    """Raised when the branch match regex cannot be compiled."""


def compile_branch_regex(pattern: str) -> re.Pattern[str]:
    """Compile a branch match regex.

    Raises:
        BaselineConfigError: If *pattern* is not a valid regular expression.
    """
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise BaselineConfigError(f"Invalid branch match regex {pattern!r}: {exc}") from exc


@dataclass(frozen=True)
class VcsAnalysisConfig:
    """VCS metadata attached to one build."""

    root_path: str
    """Root of the git working tree the build was made from."""

    branch_name: str
    """Branch the build was made from."""

    last_commit_id: str | None
    """Last commit of the build (None when unknown)."""

    branch_match_regex: str = DEFAULT_BRANCH_MATCH_REGEX
    """Regex an ancestor's branch name must fully match to serve as baseline."""

    level: CoverageElement = CoverageElement.LINE
    """Granularity of the relative coverage computation."""

    @property
    def branch_commit_name(self) -> str:
        """Return ``"<branch>:<short commit>"``."""
        commit = (self.last_commit_id or "")[:_SHORT_COMMIT_LENGTH]
        return f"{self.branch_name}:{commit}"

    def resolve_baseline(self, current: BuildResultNode) -> VcsAnalysisConfig | None:
        """Return the VCS metadata of the build *current* should be compared to."""
        return BaselineResolver(self.branch_match_regex).resolve(current)

    def target_branch_commit_name(self, current: BuildResultNode) -> str:
        """Return the baseline's ``branch:commit`` label, or ``""`` without a baseline."""
        baseline = self.resolve_baseline(current)
        return baseline.branch_commit_name if baseline else ""

    def target_last_commit_id(self, current: BuildResultNode) -> str:
        """Return the baseline's last commit, or ``""`` without a baseline."""
        baseline = self.resolve_baseline(current)
        if baseline is None or not baseline.last_commit_id:
            return ""
        return baseline.last_commit_id


class BaselineResolver:
    """Finds the nearest previous build on a matching branch."""

    def __init__(self, branch_match_regex: str = DEFAULT_BRANCH_MATCH_REGEX) -> None:
        """Initialize the resolver.

        Args:
            branch_match_regex: Regex an ancestor's branch name must fully match.

        Raises:
            BaselineConfigError: If the regex does not compile.
        """
        self._pattern = compile_branch_regex(branch_match_regex)

    def resolve(self, current: BuildResultNode) -> VcsAnalysisConfig | None:
        """Walk back from *current* and return the first matching ancestor's metadata.

        Returns None when no ancestor carries VCS metadata on a matching branch.
        """
        for depth, ancestor in enumerate(iter_previous_results(current), start=1):
            vcs = ancestor.vcs_config
            if vcs is not None and self._pattern.fullmatch(vcs.branch_name):
                logger.debug(
                    "Resolved baseline %s at depth %d (%s)",
                    vcs.branch_commit_name,
                    depth,
                    ancestor.name,
                )
                return vcs

        logger.debug("No previous build matches branch regex %r", self._pattern.pattern)
        return None
