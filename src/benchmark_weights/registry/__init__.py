"""Formula registry subpackage."""

from benchmark_weights.registry.registry import BuildFailure, BuildResult, Registry, WeightFunction, build

__all__ = ["BuildFailure", "BuildResult", "Registry", "WeightFunction", "build"]
