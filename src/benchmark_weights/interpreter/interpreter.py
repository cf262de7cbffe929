"""Fold the syntax tree of a weight function into a Formula."""

from __future__ import annotations

import logging
from enum import Enum
from fractions import Fraction
from typing import Mapping

from benchmark_weights.errors import UnsupportedExpression
from benchmark_weights.interpreter.patterns import (
    Additive,
    BaseConstant,
    Clamp,
    Group,
    Literal,
    ResourceUnit,
    Scaling,
    Unsupported,
    Variable,
    classify,
)
from benchmark_weights.syntax.tree import Node
from benchmark_weights.terms.term import (
    MAX_SAMPLE,
    Component,
    Formula,
    add,
    negate,
    scale,
)

logger = logging.getLogger(__name__)


class Dimension(str, Enum):
    """Which part of a two dimensional weight is extracted."""

    TIME = "time"
    PROOF = "proof"


class Interpreter:
    """Interprets weight expressions of one snapshot.

    ``resource_costs`` maps ``"reads"``/``"writes"`` to a per-unit cost. Units
    without a cost stay opaque components of the formula.
    """

    def __init__(
        self,
        dimension: Dimension = Dimension.TIME,
        resource_costs: Mapping[str, Fraction | int] | None = None,
        default_max: int = MAX_SAMPLE,
    ) -> None:
        self.dimension = Dimension(dimension)
        self.resource_costs = {name: Fraction(cost) for name, cost in (resource_costs or {}).items()}
        self.default_max = default_max

    def interpret(self, tree: Node, ranges: Mapping[str, tuple[int, int]] | None = None) -> Formula:
        return self._fold(tree, ranges or {})

    def _component(self, name: str, ranges: Mapping[str, tuple[int, int]]) -> Component:
        if name in ranges:
            minimum, maximum = ranges[name]
            return Component(name, minimum, maximum, declared=True)
        return Component(name, 0, self.default_max)

    def _fold(self, node: Node, ranges: Mapping[str, tuple[int, int]]) -> Formula:
        pattern = classify(node)
        if isinstance(pattern, BaseConstant):
            if self.dimension is Dimension.TIME:
                return Formula.constant(pattern.ref_time)
            return Formula.constant(pattern.proof_size)
        if isinstance(pattern, Literal):
            return Formula.constant(pattern.value)
        if isinstance(pattern, Variable):
            return Formula.variable(self._component(pattern.name, ranges))
        if isinstance(pattern, Group):
            return self._fold(pattern.inner, ranges)
        if isinstance(pattern, Additive):
            accumulator = self._fold(pattern.receiver, ranges)
            operand = self._fold(pattern.operand, ranges)
            return add(accumulator, negate(operand) if pattern.negate else operand)
        if isinstance(pattern, Scaling):
            return self._scaling(pattern, ranges)
        if isinstance(pattern, ResourceUnit):
            return self._resource_unit(pattern, ranges)
        if isinstance(pattern, Clamp):
            return self._clamp(pattern, ranges)
        if isinstance(pattern, Unsupported):
            raise UnsupportedExpression(pattern.location, pattern.detail)
        raise TypeError(f"Unknown pattern {pattern!r}")

    def _scaling(self, pattern: Scaling, ranges: Mapping[str, tuple[int, int]]) -> Formula:
        accumulator = self._fold(pattern.receiver, ranges)
        factor = self._fold(pattern.factor, ranges)
        if factor.is_constant:
            return scale(accumulator, factor.constant_term)
        if accumulator.is_constant:
            # constant * (a + b*c) keeps the formula affine
            return scale(factor, accumulator.constant_term)
        if len(factor.components) == 1 and factor.constant_term == 0:
            # per-item count: only the constant part is multiplied by the component
            (component,) = factor.components
            per_item = Formula.variable(component, accumulator.constant_term * factor.coefficient(component.name))
            rest = Formula.build(
                [term for term in accumulator.terms if not term.is_constant],
                accumulator.components,
            )
            return add(rest, per_item)
        raise UnsupportedExpression(
            pattern.location,
            f"product of '{accumulator}' and '{factor}' is not affine",
        )

    def _resource_unit(self, pattern: ResourceUnit, ranges: Mapping[str, tuple[int, int]]) -> Formula:
        result = Formula.zero()
        for unit, count_node in pattern.counts:
            count = self._fold(count_node, ranges)
            if self.dimension is Dimension.PROOF:
                continue
            if unit in self.resource_costs:
                result = add(result, scale(count, self.resource_costs[unit]))
                continue
            per_item = Formula.build(
                [term for term in count.terms if not term.is_constant],
                count.components,
            )
            unit_component = self._component(unit, ranges)
            result = add(result, add(per_item, Formula.variable(unit_component, count.constant_term)))
        return result

    def _clamp(self, pattern: Clamp, ranges: Mapping[str, tuple[int, int]]) -> Formula:
        accumulator = self._fold(pattern.receiver, ranges)
        bound = self._fold(pattern.bound, ranges)
        if not bound.is_constant:
            logger.debug("Passing through %s with non-constant bound at %s", pattern.kind, pattern.location)
            return accumulator
        limit = bound.constant_term
        if accumulator.is_constant:
            value = accumulator.constant_term
            return Formula.constant(max(value, limit) if pattern.kind == "max" else min(value, limit))
        non_negative = all(term.coefficient >= 0 for term in accumulator.terms)
        if pattern.kind == "min" and non_negative and accumulator.constant_term >= limit:
            return Formula.constant(limit)
        logger.debug("Approximating %s(%s) at %s as pass-through", pattern.kind, limit, pattern.location)
        return accumulator


def interpret(
    tree: Node,
    ranges: Mapping[str, tuple[int, int]] | None = None,
    dimension: Dimension = Dimension.TIME,
) -> Formula:
    return Interpreter(dimension).interpret(tree, ranges)
