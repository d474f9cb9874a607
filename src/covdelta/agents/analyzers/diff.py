"""Changed-line blocks reported by a diff engine.

The diff engine itself lives outside this package: any callable taking
``(root_path, old_commit, new_commit)`` and returning a mapping of file
path to changed line ranges will do. It must return an empty mapping
rather than raise when a commit or the repository cannot be read.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from covdelta.models.paint import Paint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LineRange:
    """A block of new or changed lines.

    Lines ``start_line + 1`` through ``end_line`` (1-based, inclusive) are new,
    i.e. ``start_line`` is the 0-based index of the first new line.
    """

    start_line: int
    end_line: int

    def __post_init__(self) -> None:
        """Reject negative or inverted ranges."""
        if self.start_line < 0 or self.end_line < self.start_line:
            raise ValueError(f"Invalid line range ({self.start_line}, {self.end_line})")

    def lines(self) -> range:
        """Return the 1-based line numbers covered by this block."""
        return range(self.start_line + 1, self.end_line + 1)


class DiffEngine(Protocol):
    """Computes the line blocks added or changed between two commits."""

    def __call__(
        self, root_path: str, old_commit: str, new_commit: str
    ) -> Mapping[str, Sequence[LineRange]]: ...


def match_changed_file(
    changed: Mapping[str, Sequence[LineRange]], relative_path: str | None
) -> tuple[str, Sequence[LineRange]] | None:
    """Return the first diff entry whose path ends with *relative_path*.

    Suffix matching tolerates a different prefix between the VCS root and
    the coverage tool's source root. When several entries share the suffix
    the first one in diff order wins, not the longest match.
    """
    if not relative_path:
        return None
    for path, blocks in changed.items():
        if path.endswith(relative_path):
            return path, blocks
    return None


def new_line_numbers(blocks: Iterable[LineRange], paint: Paint) -> list[int]:
    """Return the judged lines of *paint* that fall inside *blocks*.

    Lines appear once, in block order, even if blocks overlap.
    """
    lines: dict[int, None] = {}
    for block in blocks:
        for line in block.lines():
            if paint.is_painted(line):
                lines.setdefault(line)
    return list(lines)
