"""The component-range box two formulas are compared over."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from fractions import Fraction

import numpy as np

from benchmark_weights.errors import AmbiguousRange
from benchmark_weights.interpreter.patterns import RESOURCE_UNITS
from benchmark_weights.terms.term import MAX_SAMPLE, Component, Formula, merge_component

logger = logging.getLogger(__name__)

VERTEX_LIMIT = 10


@dataclass(frozen=True)
class Box:
    components: tuple[Component, ...] = ()

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(component.name for component in self.components)

    @property
    def lows(self) -> np.ndarray:
        return np.array([component.minimum for component in self.components], dtype=np.int64)

    @property
    def highs(self) -> np.ndarray:
        return np.array([component.maximum for component in self.components], dtype=np.int64)

    def vertices(self) -> np.ndarray:
        """All ``2**k`` corners, one per row, in bit-mask order."""
        k = len(self.components)
        bits = (np.arange(1 << k)[:, None] >> np.arange(k)) & 1
        return np.where(bits == 1, self.highs, self.lows).reshape(1 << k, k)

    def samples(self) -> np.ndarray:
        """All-low, all-high, and every component flipped alone against both."""
        k = len(self.components)
        lows, highs = self.lows, self.highs
        one_high = np.tile(lows, (k, 1))
        np.fill_diagonal(one_high, highs)
        one_low = np.tile(highs, (k, 1))
        np.fill_diagonal(one_low, lows)
        return np.vstack([lows, highs, one_high, one_low])

    def corners(self, limit: int = VERTEX_LIMIT) -> np.ndarray:
        if len(self.components) > limit:
            logger.debug("Sampling %d components instead of enumerating vertices", len(self.components))
            return self.samples()
        return self.vertices()

    def assignment(self, row: np.ndarray) -> dict[str, int]:
        return {name: int(value) for name, value in zip(self.names, row)}

    def lower(self) -> dict[str, int]:
        return {component.name: component.minimum for component in self.components}

    def upper(self) -> dict[str, int]:
        return {component.name: component.maximum for component in self.components}

    def midpoint(self) -> dict[str, Fraction]:
        return {component.name: component.midpoint for component in self.components}


def union_box(
    old: Formula | None,
    new: Formula | None,
    default_max: int = MAX_SAMPLE,
    exact: bool = False,
) -> Box:
    """Box over every component either formula references.

    Components neither side declares a range for use ``[0, default_max]``.
    With ``exact`` set, such components and declared ranges that differ
    between the sides raise ``AmbiguousRange`` instead. Resource units never
    carry a declared range and are exempt.
    """
    merged: dict[str, Component] = {}
    for formula in (old, new):
        if formula is None:
            continue
        for component in formula.components:
            existing = merged.get(component.name)
            if existing is None:
                merged[component.name] = component
                continue
            if exact and existing.declared and component.declared and existing != component:
                raise AmbiguousRange(component.name, "has different ranges in the old and new version")
            merged[component.name] = merge_component(existing, component)
    components = []
    for name in sorted(merged):
        component = merged[name]
        if not component.declared:
            if exact and name not in RESOURCE_UNITS:
                raise AmbiguousRange(name, "has no declared range")
            component = component.with_range(0, default_max, declared=False)
        components.append(component)
    return Box(tuple(components))
