"""Terminal reporter with rich output formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from covdelta.models.elements import CoverageElement

if TYPE_CHECKING:
    from collections.abc import Sequence

    from covdelta.config import ReportConfig
    from covdelta.models.ratio import Ratio
    from covdelta.models.summary import FileCoverageSummary

console = Console()

_DEFAULT_HIGH_THRESHOLD = 80.0
_DEFAULT_MEDIUM_THRESHOLD = 50.0
_MAX_FILE_PATH_LENGTH = 60
_MISSING = "-"


def _truncate_path(path: str, limit: int = _MAX_FILE_PATH_LENGTH) -> str:
    """Shorten *path* from the left so the file name stays visible."""
    if len(path) <= limit:
        return path
    return "…" + path[-(limit - 1) :]


def _format_change(ratio: Ratio | None) -> str:
    """Format a CHANGE ratio as a signed percentage-point delta."""
    if ratio is None:
        return _MISSING
    delta = ratio.percentage
    if delta > 0:
        return f"[green]+{delta:.1f}pp[/green]"
    if delta < 0:
        return f"[red]{delta:.1f}pp[/red]"
    return "[dim]0.0pp[/dim]"


class CLIReporter:
    """Rich terminal output for relative coverage summaries."""

    def __init__(self, config: ReportConfig | None = None) -> None:
        """Initialize the reporter.

        Args:
            config: Color thresholds; defaults to 80%/50%.
        """
        self.console = console
        self._high = config.high_threshold if config else _DEFAULT_HIGH_THRESHOLD
        self._medium = config.medium_threshold if config else _DEFAULT_MEDIUM_THRESHOLD

    def print_relative_coverage(self, summaries: Sequence[FileCoverageSummary]) -> None:
        """Print a table of absolute, relative and change coverage per file."""
        if not summaries:
            self.console.print("[dim]No relative coverage data[/dim]")
            return

        self.console.print(self.build_table(summaries))

    def build_table(self, summaries: Sequence[FileCoverageSummary]) -> Table:
        """Build the relative coverage table (overview row first, bold)."""
        table = Table(title="Relative Coverage", title_style="bold cyan")
        table.add_column("File", style="bold")
        table.add_column("Absolute", justify="right")
        table.add_column("Relative", justify="right")
        table.add_column("Change", justify="right")

        for summary in summaries:
            if summary.is_overview:
                relative = summary.get(CoverageElement.RELATIVE)
                table.add_row(
                    f"[bold]{summary.display_name}[/bold]",
                    _MISSING,
                    f"[bold]{self._format_ratio(relative)}[/bold]",
                    _MISSING,
                )
                table.add_section()
                continue

            table.add_row(
                _truncate_path(summary.file_path),
                self._format_ratio(summary.get(CoverageElement.ABSOLUTE)),
                self._format_ratio(summary.get(CoverageElement.RELATIVE)),
                _format_change(summary.get(CoverageElement.CHANGE)),
            )

        return table

    def _format_ratio(self, ratio: Ratio | None) -> str:
        if ratio is None:
            return _MISSING
        if ratio.denominator == 0:
            return f"[dim]{ratio.percentage:.1f}%[/dim]"
        color = self._get_coverage_color(ratio.percentage)
        return f"[{color}]{ratio.percentage:.1f}% ({ratio})[/{color}]"

    def _get_coverage_color(self, percentage: float) -> str:
        """Get a color based on coverage percentage."""
        if percentage >= self._high:
            return "green"
        if percentage >= self._medium:
            return "yellow"
        return "red"


reporter = CLIReporter()
