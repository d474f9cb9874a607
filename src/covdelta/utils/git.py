"""Git working-tree helpers for capturing a build's VCS metadata."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

from covdelta.agents.analyzers.baseline import (
    DEFAULT_BRANCH_MATCH_REGEX,
    VcsAnalysisConfig,
    compile_branch_regex,
)
from covdelta.models.elements import CoverageElement

if TYPE_CHECKING:
    from covdelta.config import CovdeltaConfig

logger = logging.getLogger(__name__)


class GitOperationError(Exception):
    """Exception raised when git operations fail."""


def _git_executable() -> str:
    """Resolve the full path to the ``git`` executable."""
    return shutil.which("git") or "git"


def _run_git(repo_path: Path | str, *args: str) -> str:
    try:
        result = subprocess.run(  # noqa: S603
            [_git_executable(), *args],
            cwd=repo_path,
            capture_output=True,
            text=True,
            check=True,
        )
    except (subprocess.CalledProcessError, FileNotFoundError, NotADirectoryError) as exc:
        raise GitOperationError(f"git {' '.join(args)} failed in {repo_path}: {exc}") from exc
    return result.stdout.strip()


def get_repository_root(repo_path: Path | str) -> Path:
    """Return the top-level directory of the working tree containing *repo_path*.

    Raises:
        GitOperationError: If *repo_path* is not inside a git working tree.
    """
    return Path(_run_git(repo_path, "rev-parse", "--show-toplevel"))


def get_current_branch(repo_path: Path | str) -> str:
    """Get the current git branch name (``HEAD`` when detached).

    Raises:
        GitOperationError: If the operation fails.
    """
    return _run_git(repo_path, "rev-parse", "--abbrev-ref", "HEAD")


def get_head_commit(repo_path: Path | str) -> str:
    """Get the full SHA of ``HEAD``.

    Raises:
        GitOperationError: If the operation fails (e.g. no commits yet).
    """
    return _run_git(repo_path, "rev-parse", "HEAD")


def capture_vcs_config(
    repo_path: Path | str,
    *,
    branch_match_regex: str = DEFAULT_BRANCH_MATCH_REGEX,
    level: CoverageElement = CoverageElement.LINE,
) -> VcsAnalysisConfig:
    """Read branch and HEAD of a working tree into a VcsAnalysisConfig.

    Raises:
        GitOperationError: If git metadata cannot be read.
        BaselineConfigError: If *branch_match_regex* does not compile.
    """
    compile_branch_regex(branch_match_regex)
    root = get_repository_root(repo_path)
    config = VcsAnalysisConfig(
        root_path=str(root),
        branch_name=get_current_branch(root),
        last_commit_id=get_head_commit(root),
        branch_match_regex=branch_match_regex,
        level=level,
    )
    logger.info("Captured VCS metadata %s from %s", config.branch_commit_name, root)
    return config


def capture_from_config(config: CovdeltaConfig) -> VcsAnalysisConfig | None:
    """Capture VCS metadata using the relative coverage settings of *config*.

    Returns None when relative coverage is disabled, which makes the
    analysis produce no summaries.

    Raises:
        GitOperationError: If git metadata cannot be read.
        BaselineConfigError: If the branch match regex does not compile.
        ValueError: If the configured level is not ``line`` or ``condition``.
    """
    relative = config.relative_coverage
    if not relative.enabled:
        logger.debug("Relative coverage disabled in configuration")
        return None
    level = relative.coverage_level
    return capture_vcs_config(
        relative.root_path,
        branch_match_regex=relative.branch_match_regex,
        level=level,
    )
