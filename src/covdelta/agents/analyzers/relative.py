"""RelativeCoverageAnalyzer agent: coverage of newly changed lines.

For every file of a build's coverage report that the diff engine reports
as changed since the baseline build, this agent computes:

1. ABSOLUTE coverage over all judged lines of the file
2. RELATIVE coverage over the new/changed judged lines only
3. CHANGE, the percentage-point delta against the previous build's absolute
   coverage of the same file

and prepends a "Current Commit Overview" row combining the relative ratios
of all files.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from covdelta.agents.analyzers.baseline import BaselineConfigError
from covdelta.agents.analyzers.diff import match_changed_file, new_line_numbers
from covdelta.agents.base import BaseAgent, TaskInput, TaskOutput, TaskStatus
from covdelta.models.elements import CoverageElement
from covdelta.models.ratio import Ratio
from covdelta.models.summary import OVERVIEW_NAME, FileCoverageSummary

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from covdelta.agents.analyzers.diff import DiffEngine, LineRange
    from covdelta.config import CovdeltaConfig
    from covdelta.models.build import BuildResultNode
    from covdelta.models.paint import Paint

logger = logging.getLogger(__name__)

DEFAULT_DIFF_TIMEOUT = 60.0

# CHANGE ratios hold percentage points over a fixed denominator
_CHANGE_DENOMINATOR = 100.0


def hit_coverage(paint: Paint, level: CoverageElement, lines: Sequence[int]) -> Ratio:
    """Compute the coverage of *lines* at the given granularity.

    At LINE level the ratio is executed lines over ``len(lines)``. At any
    other level each line counts its taken/missed branches, and a branchless
    line counts as one unit, covered if it was executed.
    """
    if level is CoverageElement.LINE:
        covered = sum(1 for line in lines if paint.hits(line) > 0)
        return Ratio(covered, len(lines))

    covered = missed = 0
    for line in lines:
        line_covered, line_missed = _branch_units(paint, line)
        covered += line_covered
        missed += line_missed
    return Ratio(covered, covered + missed)


def _branch_units(paint: Paint, line: int) -> tuple[int, int]:
    """Return ``(covered, missed)`` branch units for one line."""
    total = paint.branch_total(line)
    if total > 0:
        taken = paint.branch_coverage(line)
        return taken, total - taken
    return (1, 0) if paint.hits(line) > 0 else (0, 1)


# ── Data models ──────────────────────────────────────────────────


@dataclass
class RelativeCoverageTask(TaskInput):
    """Task input for relative coverage analysis."""

    task_type: str = "analyze_relative_coverage"
    """Type of task (defaults to 'analyze_relative_coverage')."""

    report: BuildResultNode | None = None
    """Report node of the current build."""

    level: CoverageElement | None = None
    """Granularity override (default: the level stored with the build)."""

    diff_timeout: float = DEFAULT_DIFF_TIMEOUT
    """Seconds to wait for the diff engine."""

    @classmethod
    def from_config(cls, report: BuildResultNode, config: CovdeltaConfig) -> RelativeCoverageTask:
        """Create a task for *report* using the ``relative_coverage`` settings.

        Raises:
            ValueError: If the configured level is not a relative analysis level.
        """
        relative = config.relative_coverage
        return cls(
            report=report,
            level=relative.coverage_level,
            diff_timeout=relative.diff_timeout,
        )


@dataclass(frozen=True)
class _AnalysisPlan:
    root_path: str
    old_commit: str
    new_commit: str
    level: CoverageElement


# ── RelativeCoverageAnalyzer ─────────────────────────────────────


class RelativeCoverageAnalyzer(BaseAgent):
    """Agent that computes coverage of the lines changed since a baseline build."""

    def __init__(self, diff_engine: DiffEngine) -> None:
        """Initialize the analyzer.

        Args:
            diff_engine: Callable returning changed line ranges per file
                between two commits of a repository.
        """
        self._diff_engine = diff_engine

    @property
    def name(self) -> str:
        """Unique name identifying this agent."""
        return "relative_coverage_analyzer"

    @property
    def description(self) -> str:
        """Human-readable description of what this agent does."""
        return "Computes absolute, relative and change coverage for changed files"

    async def run(self, task: TaskInput) -> TaskOutput:
        """Execute relative coverage analysis.

        Args:
            task: A RelativeCoverageTask carrying the current report.

        Returns:
            TaskOutput with the list of FileCoverageSummary in result['summaries'].
        """
        if not isinstance(task, RelativeCoverageTask) or task.report is None:
            return TaskOutput(
                status=TaskStatus.FAILED,
                errors=["Task must be a RelativeCoverageTask with a report"],
            )

        try:
            summaries = await self.analyze_async(
                task.report, task.level, timeout=task.diff_timeout
            )
        except TimeoutError:
            logger.warning("Diff engine did not finish within %.1fs", task.diff_timeout)
            return TaskOutput(
                status=TaskStatus.FAILED,
                errors=[f"Diff engine timed out after {task.diff_timeout}s"],
            )
        except BaselineConfigError as exc:
            return TaskOutput(status=TaskStatus.FAILED, errors=[str(exc)])
        except Exception as exc:
            logger.exception("Unexpected error during relative coverage analysis")
            return TaskOutput(
                status=TaskStatus.FAILED,
                errors=[f"Unexpected error: {exc}"],
            )

        return TaskOutput(status=TaskStatus.COMPLETED, result={"summaries": summaries})

    def analyze(
        self, report: BuildResultNode, level: CoverageElement | None = None
    ) -> list[FileCoverageSummary]:
        """Compute relative coverage summaries for *report*.

        Returns an empty list when the build has no VCS metadata or last
        commit, when no baseline build matches, or when the diff engine
        reports no changes.

        Raises:
            BaselineConfigError: If the branch match regex does not compile.
        """
        plan = self._plan(report, level)
        if plan is None:
            return []

        changed = self._diff_engine(plan.root_path, plan.old_commit, plan.new_commit)
        if not changed:
            logger.debug("Diff engine reported no changes for %s", report.name)
            return []

        summaries = [
            self._analyze_file(node, changed, plan.level) for node in _painted_files(report)
        ]
        return self._with_overview(summaries)

    async def analyze_async(
        self,
        report: BuildResultNode,
        level: CoverageElement | None = None,
        *,
        timeout: float = DEFAULT_DIFF_TIMEOUT,
    ) -> list[FileCoverageSummary]:
        """Asynchronous variant of :meth:`analyze`.

        The diff engine runs in a worker thread bounded by *timeout*; files
        are then analyzed concurrently and returned in report order.

        Raises:
            TimeoutError: If the diff engine exceeds *timeout*.
            BaselineConfigError: If the branch match regex does not compile.
        """
        plan = self._plan(report, level)
        if plan is None:
            return []

        changed = await asyncio.wait_for(
            asyncio.to_thread(self._diff_engine, plan.root_path, plan.old_commit, plan.new_commit),
            timeout=timeout,
        )
        if not changed:
            logger.debug("Diff engine reported no changes for %s", report.name)
            return []

        summaries = await asyncio.gather(
            *(
                asyncio.to_thread(self._analyze_file, node, changed, plan.level)
                for node in _painted_files(report)
            )
        )
        return self._with_overview(summaries)

    def _plan(
        self, report: BuildResultNode, level: CoverageElement | None
    ) -> _AnalysisPlan | None:
        """Resolve the commit pair and granularity, or None when disabled."""
        vcs = report.vcs_config
        if vcs is None:
            logger.debug("No VCS metadata on %s, relative coverage disabled", report.name)
            return None
        if not vcs.last_commit_id:
            logger.debug("No last commit recorded for %s", report.name)
            return None

        baseline = vcs.resolve_baseline(report)
        if baseline is None or not baseline.last_commit_id:
            logger.debug("No baseline build matches %r", vcs.branch_match_regex)
            return None

        plan = _AnalysisPlan(
            root_path=vcs.root_path,
            old_commit=baseline.last_commit_id,
            new_commit=vcs.last_commit_id,
            level=level or vcs.level,
        )
        logger.info(
            "Analyzing relative coverage of %s against %s (%s level)",
            vcs.branch_commit_name,
            baseline.branch_commit_name,
            plan.level.value,
        )
        return plan

    def _analyze_file(
        self,
        node: BuildResultNode,
        changed: Mapping[str, Sequence[LineRange]],
        level: CoverageElement,
    ) -> FileCoverageSummary | None:
        """Compute ABSOLUTE/RELATIVE/CHANGE for one file, or None if it is unchanged."""
        paint = node.paint
        match = match_changed_file(changed, node.relative_source_path)
        if paint is None or match is None:
            logger.debug("No changed blocks for %s", node.relative_source_path or node.name)
            return None

        _, blocks = match
        absolute = hit_coverage(paint, level, paint.judged_lines())
        results = {
            CoverageElement.ABSOLUTE: absolute,
            CoverageElement.RELATIVE: hit_coverage(paint, level, new_line_numbers(blocks, paint)),
        }

        previous = node.previous_result
        previous_paint = previous.paint if previous is not None else None
        if previous_paint is not None:
            previous_absolute = hit_coverage(previous_paint, level, previous_paint.judged_lines())
            if previous_absolute.numerator != 0:
                results[CoverageElement.CHANGE] = Ratio(
                    absolute.percentage - previous_absolute.percentage, _CHANGE_DENOMINATOR
                )

        return FileCoverageSummary(node.name, node.relative_source_path, results)

    @staticmethod
    def _with_overview(
        summaries: Sequence[FileCoverageSummary | None],
    ) -> list[FileCoverageSummary]:
        """Drop unmatched files and prepend the overview row."""
        files = [summary for summary in summaries if summary is not None]
        relative = [
            ratio
            for summary in files
            if (ratio := summary.get(CoverageElement.RELATIVE)) is not None
        ]
        if not relative:
            return []

        overview = FileCoverageSummary(
            OVERVIEW_NAME,
            OVERVIEW_NAME,
            {
                CoverageElement.ABSOLUTE: Ratio.ZERO,
                CoverageElement.RELATIVE: functools.reduce(Ratio.combine, relative),
                CoverageElement.CHANGE: Ratio.ZERO,
            },
        )
        logger.info("Relative coverage computed for %d file(s)", len(files))
        return [overview, *files]


def _painted_files(report: BuildResultNode) -> list[BuildResultNode]:
    """Return the file-level children of *report* that carry paint data."""
    return [
        child
        for child in report.children
        if child.element is CoverageElement.FILE and child.paint is not None
    ]
