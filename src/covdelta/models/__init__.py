"""Data models for relative coverage analysis."""

from covdelta.models.build import BuildResultNode, CoverageResult, iter_previous_results
from covdelta.models.elements import CoverageElement
from covdelta.models.paint import CoveragePaint, LinePaint, Paint
from covdelta.models.ratio import Ratio
from covdelta.models.summary import OVERVIEW_NAME, CoverageTreeElement, FileCoverageSummary

__all__ = [
    "OVERVIEW_NAME",
    "BuildResultNode",
    "CoverageElement",
    "CoveragePaint",
    "CoverageResult",
    "CoverageTreeElement",
    "FileCoverageSummary",
    "LinePaint",
    "Paint",
    "Ratio",
    "iter_previous_results",
]
