"""Read-only view of a build's coverage result tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from covdelta.models.elements import CoverageElement

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from covdelta.agents.analyzers.baseline import VcsAnalysisConfig
    from covdelta.models.paint import Paint


class BuildResultNode(Protocol):
    """One node of a build's coverage tree (report, package, file, ...).

    Implementations are expected to be immutable snapshots: the analysis
    only reads them and may do so from several threads at once.
    """

    @property
    def name(self) -> str: ...

    @property
    def element(self) -> CoverageElement: ...

    @property
    def children(self) -> Sequence[BuildResultNode]: ...

    @property
    def paint(self) -> Paint | None: ...

    @property
    def relative_source_path(self) -> str | None: ...

    @property
    def previous_result(self) -> BuildResultNode | None: ...

    @property
    def vcs_config(self) -> VcsAnalysisConfig | None: ...


@dataclass(frozen=True)
class CoverageResult:
    """Immutable in-memory build result node."""

    name: str
    """Display name (file name for file nodes)."""

    element: CoverageElement = CoverageElement.FILE
    """Structural level of this node."""

    children: Sequence[BuildResultNode] = field(default_factory=tuple)
    """Child nodes in report order."""

    paint: Paint | None = None
    """Line paint, set on file nodes only."""

    relative_source_path: str | None = None
    """Path relative to the coverage tool's source root."""

    previous_result: BuildResultNode | None = None
    """The same node in the previous build."""

    vcs_config: VcsAnalysisConfig | None = None
    """VCS metadata, set on report nodes."""

    def child(self, name: str) -> BuildResultNode | None:
        """Return the first child called *name*."""
        return next((c for c in self.children if c.name == name), None)


def iter_previous_results(node: BuildResultNode) -> Iterator[BuildResultNode]:
    """Yield the ancestors of *node*, nearest first."""
    current = node.previous_result
    while current is not None:
        yield current
        current = current.previous_result
