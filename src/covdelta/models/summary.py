"""Per-file relative coverage output records."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from covdelta.models.elements import CoverageElement
    from covdelta.models.ratio import Ratio

OVERVIEW_NAME = "Current Commit Overview"


@dataclass(frozen=True)
class CoverageTreeElement:
    """One (element, ratio) pair of a summary's list view."""

    element: CoverageElement
    ratio: Ratio


@dataclass(frozen=True)
class FileCoverageSummary:
    """Relative coverage results for one file (or the overview row)."""

    display_name: str
    """Name shown to the user."""

    relative_source_path: str | None = None
    """Source path relative to the coverage root, if known."""

    results: Mapping[CoverageElement, Ratio] = field(default_factory=dict)
    """Read-only ratios keyed by ABSOLUTE, RELATIVE and (optionally) CHANGE."""

    def __post_init__(self) -> None:
        """Freeze results in element order so iteration is deterministic.

        Raises:
            ValueError: If a key is not a result kind.
        """
        invalid = [element.name for element in self.results if not element.is_result_kind]
        if invalid:
            msg = f"Not a coverage result kind: {', '.join(invalid)}"
            raise ValueError(msg)
        ordered = sorted(self.results.items(), key=lambda item: item[0].order)
        object.__setattr__(self, "results", MappingProxyType(dict(ordered)))

    def __hash__(self) -> int:
        return hash((self.display_name, self.relative_source_path, tuple(self.results.items())))

    @property
    def file_path(self) -> str:
        """Return the relative source path, falling back to the display name."""
        return self.relative_source_path or self.display_name

    @property
    def is_overview(self) -> bool:
        """Return True for the synthetic overview row."""
        return self.display_name == OVERVIEW_NAME

    @property
    def coverage_results(self) -> list[CoverageTreeElement]:
        """Return the results as an ordered list of tree elements."""
        return [CoverageTreeElement(element, ratio) for element, ratio in self.results.items()]

    def get(self, element: CoverageElement) -> Ratio | None:
        """Return the ratio stored for *element*, if any."""
        return self.results.get(element)
