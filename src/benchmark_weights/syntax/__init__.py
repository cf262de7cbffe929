"""Syntax subpackage."""

from benchmark_weights.syntax.extract import SourceEntry, extract_functions, parse_component_ranges
from benchmark_weights.syntax.parser import parse_block, parse_expression
from benchmark_weights.syntax.tree import Location

__all__ = [
    "Location",
    "SourceEntry",
    "extract_functions",
    "parse_block",
    "parse_component_ranges",
    "parse_expression",
]
