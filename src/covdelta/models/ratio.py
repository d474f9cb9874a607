"""Coverage ratio value type."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import ClassVar

_PERCENT = 100.0


@dataclass(frozen=True)
class Ratio:
    """A covered/total fraction.

    A zero denominator means "no data" and renders as 0%.
    """

    numerator: float
    """Covered units (or percentage points for a change ratio)."""

    denominator: float
    """Total units."""

    ZERO: ClassVar[Ratio]

    def __post_init__(self) -> None:
        """Reject negative denominators."""
        if self.denominator < 0:
            raise ValueError(f"Ratio denominator must be non-negative (got: {self.denominator})")

    @property
    def percentage(self) -> float:
        """Return the ratio as a percentage (0.0 when there is no data)."""
        if self.denominator == 0:
            return 0.0
        return self.numerator / self.denominator * _PERCENT

    @property
    def rounded_percentage(self) -> int:
        """Return the percentage rounded half-up to an integer."""
        return math.floor(self.percentage + 0.5)

    def combine(self, other: Ratio) -> Ratio:
        """Add numerators and denominators of two ratios."""
        return Ratio(self.numerator + other.numerator, self.denominator + other.denominator)

    __add__ = combine

    def __str__(self) -> str:
        return f"{self.numerator:g}/{self.denominator:g}"


Ratio.ZERO = Ratio(0.0, 0.0)
