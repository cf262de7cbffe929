"""Comparison subpackage."""

from benchmark_weights.comparison.box import VERTEX_LIMIT, Box, union_box
from benchmark_weights.comparison.classifier import (
    Verdict,
    classify,
    classify_all,
    filter_changes,
    sort_changes,
)
from benchmark_weights.comparison.comparator import (
    EPSILON,
    INFINITE_DELTA,
    Change,
    CompareFailure,
    ExtrapolationMethod,
    IdentifierFilter,
    compare,
    compare_formulas,
    relative_delta,
    sanity_warning,
)

__all__ = [
    "EPSILON",
    "INFINITE_DELTA",
    "VERTEX_LIMIT",
    "Box",
    "Change",
    "CompareFailure",
    "ExtrapolationMethod",
    "IdentifierFilter",
    "Verdict",
    "classify",
    "classify_all",
    "compare",
    "compare_formulas",
    "filter_changes",
    "relative_delta",
    "sanity_warning",
    "sort_changes",
    "union_box",
]
