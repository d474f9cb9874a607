"""Per-line coverage paint for one source file in one build."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence


class Paint(ABC):
    """Read-only view of line hits and branch counters for a file."""

    @abstractmethod
    def judged_lines(self) -> Sequence[int]:
        """Return every line number eligible for coverage accounting."""

    @abstractmethod
    def is_painted(self, line: int) -> bool:
        """Return True if *line* is a judged line."""

    @abstractmethod
    def hits(self, line: int) -> int:
        """Return the execution count of *line* (0 when unknown)."""

    @abstractmethod
    def branch_total(self, line: int) -> int:
        """Return the number of branches on *line* (0 when branchless)."""

    @abstractmethod
    def branch_coverage(self, line: int) -> int:
        """Return the number of branches on *line* that were taken."""


@dataclass(frozen=True)
class LinePaint:
    """Coverage counters for a single line."""

    hits: int
    branch_total: int = 0
    branch_covered: int = 0

    def __post_init__(self) -> None:
        """Enforce ``0 <= branch_covered <= branch_total`` and non-negative hits."""
        if self.hits < 0:
            raise ValueError(f"Hit count must be non-negative (got: {self.hits})")
        if not 0 <= self.branch_covered <= self.branch_total:
            raise ValueError(
                f"Branch coverage must be between 0 and {self.branch_total} "
                f"(got: {self.branch_covered})"
            )


@dataclass(frozen=True)
class CoveragePaint(Paint):
    """In-memory paint keyed by line number."""

    lines: Mapping[int, LinePaint] = field(default_factory=dict)

    @classmethod
    def from_hits(
        cls,
        hits: Mapping[int, int],
        branches: Mapping[int, tuple[int, int]] | None = None,
    ) -> CoveragePaint:
        """Build paint from ``{line: hits}`` and ``{line: (covered, total)}`` maps.

        Lines that only appear in *branches* are painted with zero hits.
        """
        branches = branches or {}
        line_numbers: Iterable[int] = sorted(set(hits) | set(branches))
        return cls(
            lines={
                line: LinePaint(
                    hits=hits.get(line, 0),
                    branch_total=branches.get(line, (0, 0))[1],
                    branch_covered=branches.get(line, (0, 0))[0],
                )
                for line in line_numbers
            }
        )

    def judged_lines(self) -> Sequence[int]:
        return list(self.lines)

    def is_painted(self, line: int) -> bool:
        return line in self.lines

    def hits(self, line: int) -> int:
        detail = self.lines.get(line)
        return detail.hits if detail else 0

    def branch_total(self, line: int) -> int:
        detail = self.lines.get(line)
        return detail.branch_total if detail else 0

    def branch_coverage(self, line: int) -> int:
        detail = self.lines.get(line)
        return detail.branch_covered if detail else 0
