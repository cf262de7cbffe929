"""Affine weight formulas over named components."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from fractions import Fraction
from typing import Iterable, Mapping

from benchmark_weights.errors import DegenerateRange, UnboundComponent

MAX_SAMPLE = 100

Number = int | Fraction


@dataclass(frozen=True)
class Component:
    """A free variable of a formula together with the range it is sampled over."""

    name: str
    minimum: int = 0
    maximum: int = MAX_SAMPLE
    declared: bool = False

    def __post_init__(self) -> None:
        if self.minimum < 0 or self.maximum < 0:
            raise ValueError(f"Component '{self.name}' has a negative bound")
        if self.minimum > self.maximum:
            raise DegenerateRange(self.name, self.minimum, self.maximum)

    @property
    def midpoint(self) -> Fraction:
        return Fraction(self.minimum + self.maximum, 2)

    def with_range(self, minimum: int, maximum: int, declared: bool = True) -> Component:
        return replace(self, minimum=minimum, maximum=maximum, declared=declared)


@dataclass(frozen=True)
class Term:
    coefficient: Fraction
    component: str | None = None

    @property
    def is_constant(self) -> bool:
        return self.component is None


def merge_component(left: Component, right: Component) -> Component:
    """Combine two views of the same component.

    A declared range wins over a default one. Two declared ranges that
    disagree are widened to cover both.
    """
    if left.name != right.name:
        raise ValueError(f"Cannot merge components '{left.name}' and '{right.name}'")
    if left.declared and not right.declared:
        return left
    if right.declared and not left.declared:
        return right
    if (left.minimum, left.maximum) == (right.minimum, right.maximum):
        return left
    return Component(
        name=left.name,
        minimum=min(left.minimum, right.minimum),
        maximum=max(left.maximum, right.maximum),
        declared=left.declared,
    )


@dataclass(frozen=True)
class Formula:
    """The affine function ``constant + sum(coefficient * component)``.

    Use :meth:`build` rather than the constructor; it merges terms on the same
    component, prunes zero coefficients and drops unreferenced components.
    """

    terms: tuple[Term, ...] = ()
    components: tuple[Component, ...] = field(default=())

    @classmethod
    def build(cls, terms: Iterable[Term], components: Iterable[Component] = ()) -> Formula:
        known: dict[str, Component] = {}
        for component in components:
            existing = known.get(component.name)
            known[component.name] = component if existing is None else merge_component(existing, component)

        constant = Fraction(0)
        coefficients: dict[str, Fraction] = {}
        for term in terms:
            if term.component is None:
                constant += term.coefficient
            else:
                coefficients[term.component] = coefficients.get(term.component, Fraction(0)) + term.coefficient

        merged: list[Term] = []
        if constant != 0:
            merged.append(Term(constant))
        referenced: list[Component] = []
        for name, coefficient in coefficients.items():
            if coefficient == 0:
                continue
            merged.append(Term(coefficient, name))
            referenced.append(known.get(name, Component(name)))
        return cls(terms=tuple(merged), components=tuple(referenced))

    @classmethod
    def zero(cls) -> Formula:
        return cls()

    @classmethod
    def constant(cls, value: Number) -> Formula:
        return cls.build([Term(Fraction(value))])

    @classmethod
    def variable(cls, component: Component, coefficient: Number = 1) -> Formula:
        return cls.build([Term(Fraction(coefficient), component.name)], [component])

    @property
    def constant_term(self) -> Fraction:
        for term in self.terms:
            if term.is_constant:
                return term.coefficient
        return Fraction(0)

    @property
    def component_names(self) -> tuple[str, ...]:
        return tuple(component.name for component in self.components)

    @property
    def is_constant(self) -> bool:
        return not self.components

    def coefficient(self, name: str) -> Fraction:
        for term in self.terms:
            if term.component == name:
                return term.coefficient
        return Fraction(0)

    def component(self, name: str) -> Component | None:
        for component in self.components:
            if component.name == name:
                return component
        return None

    def __str__(self) -> str:
        if not self.terms:
            return "0"
        parts = []
        for term in self.terms:
            parts.append(str(term.coefficient) if term.is_constant else f"{term.coefficient}*{term.component}")
        return " + ".join(parts)


def add(left: Formula, right: Formula) -> Formula:
    return Formula.build(left.terms + right.terms, left.components + right.components)


def negate(formula: Formula) -> Formula:
    return scale(formula, -1)


def scale(formula: Formula, factor: Number) -> Formula:
    factor = Fraction(factor)
    terms = [Term(term.coefficient * factor, term.component) for term in formula.terms]
    return Formula.build(terms, formula.components)


def evaluate(formula: Formula, assignment: Mapping[str, Number]) -> Fraction:
    total = Fraction(0)
    for term in formula.terms:
        if term.component is None:
            total += term.coefficient
            continue
        if term.component not in assignment:
            raise UnboundComponent(term.component)
        total += term.coefficient * Fraction(assignment[term.component])
    return total
