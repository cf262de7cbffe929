"""Error types raised while extracting and comparing weight formulas."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from benchmark_weights.syntax.tree import Location


class WeightError(ValueError):
    """Base class for every error this package raises on bad input."""


@dataclass
class WeightSyntaxError(WeightError):
    message: str
    location: Location | None = None

    def __str__(self) -> str:
        if self.location is None:
            return self.message
        return f"{self.message} at {self.location}"


@dataclass
class UnsupportedExpression(WeightError):
    """The interpreter met a syntax shape outside its vocabulary."""

    location: Location | None
    detail: str = "unsupported expression"

    def __str__(self) -> str:
        if self.location is None:
            return self.detail
        return f"{self.detail} at {self.location}"


@dataclass
class DuplicateIdentifier(WeightError):
    identifier: str
    salvaged: Any = field(default=None, repr=False)

    def __str__(self) -> str:
        return f"Duplicate weight function identifier '{self.identifier}'"


@dataclass
class UnboundComponent(WeightError):
    component: str

    def __str__(self) -> str:
        return f"No value assigned to component '{self.component}'"


@dataclass
class DegenerateRange(WeightError):
    component: str
    minimum: int
    maximum: int
    salvaged: Any = field(default=None, repr=False)

    def __str__(self) -> str:
        return (
            f"Component '{self.component}' has an empty range "
            f"[{self.minimum}, {self.maximum}]"
        )


@dataclass
class AmbiguousRange(WeightError):
    """An exact extrapolation met a component without one agreed range."""

    component: str
    detail: str
    identifier: str | None = None

    def __str__(self) -> str:
        prefix = f"{self.identifier}: " if self.identifier else ""
        return f"{prefix}component '{self.component}' {self.detail}; use a guessing method instead"


class ConfigError(WeightError):
    """Invalid comparison configuration."""
