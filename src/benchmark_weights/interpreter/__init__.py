"""Expression interpreter subpackage."""

from benchmark_weights.interpreter.interpreter import Dimension, Interpreter, interpret
from benchmark_weights.interpreter.patterns import Pattern, classify

__all__ = ["Dimension", "Interpreter", "Pattern", "classify", "interpret"]
