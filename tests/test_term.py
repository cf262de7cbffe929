from __future__ import annotations

from fractions import Fraction

import pytest

from benchmark_weights.errors import DegenerateRange, UnboundComponent
from benchmark_weights.terms import (
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


def _sample_formulas() -> list[Formula]:
    r = Component("r", 0, 10, declared=True)
    s = Component("s")
    return [
        Formula.zero(),
        Formula.constant(100),
        Formula.variable(r, 3),
        Formula.build([Term(Fraction(7)), Term(Fraction(1, 3), "r"), Term(Fraction(-2), "s")], [r, s]),
    ]


def test_build_merges_terms_and_prunes_zero_coefficients() -> None:
    r = Component("r")
    formula = Formula.build([Term(Fraction(5), "r"), Term(Fraction(2)), Term(Fraction(-5), "r")], [r])
    assert formula.terms == (Term(Fraction(2)),)
    assert formula.components == ()
    assert formula.is_constant


def test_build_keeps_constant_first() -> None:
    r = Component("r")
    formula = Formula.build([Term(Fraction(4), "r"), Term(Fraction(1)), Term(Fraction(2), "r")], [r])
    assert formula.terms == (Term(Fraction(1)), Term(Fraction(6), "r"))
    assert formula.component_names == ("r",)
    assert str(formula) == "1 + 6*r"


def test_add_twice_evaluates_to_double() -> None:
    assignment = {"r": 4, "s": 9}
    for formula in _sample_formulas():
        assert evaluate(add(formula, formula), assignment) == 2 * evaluate(formula, assignment)


def test_scale_by_one_is_identity() -> None:
    for formula in _sample_formulas():
        assert scale(formula, 1) == formula


def test_scale_multiplies_constant_and_coefficients() -> None:
    r = Component("r")
    formula = add(Formula.constant(10), Formula.variable(r, 2))
    scaled = scale(formula, Fraction(1, 2))
    assert scaled.constant_term == 5
    assert scaled.coefficient("r") == 1
    assert scale(formula, 0) == Formula.zero()


def test_negate_then_add_cancels() -> None:
    formula = _sample_formulas()[-1]
    assert add(formula, negate(formula)) == Formula.zero()


def test_evaluate_requires_every_component() -> None:
    formula = Formula.variable(Component("r"), 2)
    with pytest.raises(UnboundComponent) as excinfo:
        evaluate(formula, {"s": 1})
    assert excinfo.value.component == "r"


def test_evaluate_accepts_rational_assignment() -> None:
    formula = add(Formula.constant(1), Formula.variable(Component("r"), 3))
    assert evaluate(formula, {"r": Fraction(1, 2)}) == Fraction(5, 2)


def test_component_range_validation() -> None:
    assert Component("r").maximum == MAX_SAMPLE
    assert Component("r", 3, 3).midpoint == 3
    with pytest.raises(DegenerateRange):
        Component("r", 5, 1)
    with pytest.raises(ValueError):
        Component("r", -1, 1)


def test_merge_component_prefers_declared_and_widens() -> None:
    default = Component("r")
    declared = Component("r", 1, 50, declared=True)
    other = Component("r", 10, 80, declared=True)
    assert merge_component(default, declared) == declared
    assert merge_component(declared, default) == declared
    merged = merge_component(declared, other)
    assert (merged.minimum, merged.maximum, merged.declared) == (1, 80, True)
    with pytest.raises(ValueError):
        merge_component(declared, Component("s"))


def test_add_merges_component_ranges() -> None:
    left = Formula.variable(Component("r", 0, 10, declared=True))
    right = Formula.variable(Component("r"), 4)
    total = add(left, right)
    assert total.coefficient("r") == 5
    assert total.component("r") == Component("r", 0, 10, declared=True)
