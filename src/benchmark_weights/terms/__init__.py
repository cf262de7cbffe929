"""Term model subpackage."""

from benchmark_weights.terms.term import (
    MAX_SAMPLE,
    Component,
    Formula,
    Term,
    add,
    evaluate,
    merge_component,
    negate,
    scale,
)

__all__ = [
    "MAX_SAMPLE",
    "Component",
    "Formula",
    "Term",
    "add",
    "evaluate",
    "merge_component",
    "negate",
    "scale",
]
