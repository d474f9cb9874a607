"""Coverage element tags: structural levels and result kinds."""

from __future__ import annotations

from enum import Enum


class CoverageElement(Enum):
    """Closed set of coverage tags.

    REPORT and FILE are structural levels of a build result tree. LINE and
    CONDITION select the granularity of a computation. ABSOLUTE, RELATIVE
    and CHANGE key the results of a relative analysis.
    """

    REPORT = "report"
    FILE = "file"
    LINE = "line"
    CONDITION = "condition"
    ABSOLUTE = "absolute"
    RELATIVE = "relative"
    CHANGE = "change"

    @property
    def order(self) -> int:
        """Position used for deterministic ordering of result maps."""
        return _ORDER[self]

    @property
    def is_result_kind(self) -> bool:
        """Return True for ABSOLUTE, RELATIVE and CHANGE."""
        return self in _RESULT_KINDS

    @property
    def display_name(self) -> str:
        """Human-readable label (e.g. ``"Relative"``)."""
        return self.value.capitalize()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, CoverageElement):
            return NotImplemented
        return self.order < other.order

    @classmethod
    def from_name(cls, name: str) -> CoverageElement:
        """Look up an element by case-insensitive name.

        Raises:
            ValueError: If no element has that name.
        """
        try:
            return cls(name.strip().lower())
        except ValueError:
            valid = ", ".join(e.value for e in cls)
            msg = f"Unknown coverage element {name!r} (expected one of: {valid})"
            raise ValueError(msg) from None


_ORDER = {element: index for index, element in enumerate(CoverageElement)}
_RESULT_KINDS = frozenset(
    {CoverageElement.ABSOLUTE, CoverageElement.RELATIVE, CoverageElement.CHANGE}
)
