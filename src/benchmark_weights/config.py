"""Comparison settings and their YAML loader."""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from pathlib import Path
from typing import Any, Mapping

import yaml

from benchmark_weights.comparison.comparator import ExtrapolationMethod
from benchmark_weights.errors import ConfigError
from benchmark_weights.interpreter.interpreter import Dimension, Interpreter
from benchmark_weights.terms.term import MAX_SAMPLE


@dataclass(frozen=True)
class CompareConfig:
    method: ExtrapolationMethod = ExtrapolationMethod.WORST_CASE
    threshold: Fraction = Fraction(5, 100)
    default_max: int = MAX_SAMPLE
    dimension: Dimension = Dimension.TIME
    resource_costs: tuple[tuple[str, Fraction], ...] = ()
    allow: tuple[str, ...] = ()
    deny: tuple[str, ...] = ()
    workers: int = 1

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> CompareConfig:
        unknown = set(values) - set(cls.__dataclass_fields__)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        defaults = cls()
        try:
            method = ExtrapolationMethod(values.get("method", defaults.method))
            dimension = Dimension(values.get("dimension", defaults.dimension))
        except ValueError as err:
            raise ConfigError(str(err)) from err
        threshold = _fraction(values.get("threshold", defaults.threshold), "threshold")
        if threshold < 0:
            raise ConfigError("threshold must not be negative")
        default_max = values.get("default_max", defaults.default_max)
        if not isinstance(default_max, int) or default_max < 0:
            raise ConfigError("default_max must be a non-negative integer")
        workers = values.get("workers", defaults.workers)
        if not isinstance(workers, int) or workers < 1:
            raise ConfigError("workers must be a positive integer")
        costs = values.get("resource_costs") or {}
        if not isinstance(costs, Mapping):
            raise ConfigError("resource_costs must be a mapping of unit to cost")
        return cls(
            method=method,
            threshold=threshold,
            default_max=default_max,
            dimension=dimension,
            resource_costs=tuple(sorted((str(unit), _fraction(cost, unit)) for unit, cost in costs.items())),
            allow=_patterns(values.get("allow"), "allow"),
            deny=_patterns(values.get("deny"), "deny"),
            workers=workers,
        )

    def interpreter(self) -> Interpreter:
        return Interpreter(self.dimension, dict(self.resource_costs), self.default_max)


def _fraction(value: Any, name: str) -> Fraction:
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be a number")
    try:
        return Fraction(str(value)) if isinstance(value, float) else Fraction(value)
    except (TypeError, ValueError) as err:
        raise ConfigError(f"{name} must be a number, got {value!r}") from err


def _patterns(value: Any, name: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ConfigError(f"{name} must be a list of identifiers or patterns")
    return tuple(str(item) for item in value)


def load_config(path: str | Path) -> CompareConfig:
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")
    data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ConfigError("Config must be a mapping.")
    return CompareConfig.from_mapping(data)
