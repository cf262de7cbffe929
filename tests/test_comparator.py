from __future__ import annotations

import math
from fractions import Fraction

import numpy as np
import pytest

from benchmark_weights.comparison import (
    INFINITE_DELTA,
    Box,
    ExtrapolationMethod,
    IdentifierFilter,
    compare,
    compare_formulas,
    relative_delta,
    sanity_warning,
    union_box,
)
from benchmark_weights.errors import AmbiguousRange
from benchmark_weights.registry import Registry
from benchmark_weights.terms import Component, Formula, add

WORST = ExtrapolationMethod.WORST_CASE
FIXED = ExtrapolationMethod.FIXED_POINT
MEAN = ExtrapolationMethod.MEAN_CASE
GUESSING = [method for method in ExtrapolationMethod if not method.exact]


def _affine(constant: int, **coefficients: int) -> Formula:
    formula = Formula.constant(constant)
    for name, coefficient in coefficients.items():
        formula = add(formula, Formula.variable(Component(name), coefficient))
    return formula


def _registry(**formulas: Formula) -> Registry:
    registry = Registry()
    for identifier, formula in formulas.items():
        registry.insert(identifier, formula)
    return registry.seal()


def test_worst_case_finds_the_largest_growth() -> None:
    change = compare_formulas("f", _affine(100), _affine(100, r=5), WORST)
    assert change.delta == 5
    assert change.point == {"r": 100}
    assert (change.old_value, change.new_value) == (100, 600)


def test_fixed_point_evaluates_at_lower_bound() -> None:
    change = compare_formulas("f", _affine(100), _affine(100, r=5), FIXED)
    assert change.delta == 0
    assert change.point == {"r": 0}


def test_mean_case_evaluates_at_midpoint() -> None:
    change = compare_formulas("f", _affine(100), _affine(100, r=5), MEAN)
    assert change.delta == Fraction(5, 2)
    assert change.point == {"r": 50}


def test_identical_formulas_have_zero_delta() -> None:
    formula = _affine(10, a=3, b=7)
    for method in GUESSING:
        assert compare_formulas("f", formula, formula, method).delta == 0


@pytest.mark.parametrize(
    ("old", "new"),
    [
        (_affine(100), _affine(100, r=5)),
        (_affine(100, r=1), _affine(50, r=3)),
        (_affine(7, a=2, b=1), _affine(9, a=1, b=4)),
    ],
)
def test_swapping_sides_negates_delta(old: Formula, new: Formula) -> None:
    for method in GUESSING:
        forward = compare_formulas("f", old, new, method)
        backward = compare_formulas("f", new, old, method)
        assert forward.delta == -backward.delta


@pytest.mark.parametrize(
    ("old", "new"),
    [
        (_affine(100), _affine(100, r=5)),
        (_affine(100, r=1), _affine(50, r=3)),
        (_affine(7, a=2, b=1), _affine(9, a=1, b=4)),
        (_affine(1_000, a=10), _affine(900, a=11, b=2)),
    ],
)
def test_worst_case_dominates_other_methods(old: Formula, new: Formula) -> None:
    worst = abs(compare_formulas("f", old, new, WORST).delta)
    assert worst >= abs(compare_formulas("f", old, new, FIXED).delta)
    assert worst >= abs(compare_formulas("f", old, new, MEAN).delta)


def test_added_and_removed_use_infinite_delta() -> None:
    added = compare_formulas("f", None, _affine(5, r=1), WORST)
    removed = compare_formulas("f", _affine(5, r=1), None, WORST)
    assert added.added and not added.removed
    assert added.delta == INFINITE_DELTA
    assert added.new_value == 105
    assert removed.removed
    assert removed.delta == -INFINITE_DELTA
    assert removed.old_value == 105
    with pytest.raises(ValueError):
        compare_formulas("f", None, None, WORST)


def test_relative_delta_edges() -> None:
    assert relative_delta(Fraction(0), Fraction(0)) == 0
    assert relative_delta(Fraction(0), Fraction(3)) == math.inf
    assert relative_delta(Fraction(3), Fraction(0)) == -math.inf
    assert relative_delta(Fraction(100), Fraction(50)) == -1
    assert relative_delta(Fraction(50), Fraction(100)) == 1


def test_component_ranges_stay_per_function() -> None:
    old = _registry(
        A=Formula.variable(Component("r", 0, 10, declared=True)),
        B=add(Formula.constant(1), Formula.variable(Component("r", 0, 1000, declared=True))),
    )
    new = _registry(
        A=Formula.variable(Component("r", 0, 10, declared=True), 2),
        B=add(Formula.constant(1), Formula.variable(Component("r", 0, 1000, declared=True), 2)),
    )
    changes = {change.identifier: change for change in compare(old, new, WORST)}
    assert changes["A"].point == {"r": 10}
    assert changes["A"].delta == 1
    assert changes["B"].point == {"r": 1000}
    assert changes["B"].delta == Fraction(1000, 1001)


def test_compare_pairs_both_registries() -> None:
    old = _registry(a=_affine(1), b=_affine(2))
    new = _registry(b=_affine(4), c=_affine(8))
    changes = compare(old, new, FIXED)
    assert [change.identifier for change in changes] == ["a", "b", "c"]
    assert changes[0].removed
    assert changes[1].delta == 1
    assert changes[2].added


def test_compare_honors_identifier_filter() -> None:
    old = _registry(**{"m::W::a": _affine(1), "m::W::b": _affine(1), "n::W::a": _affine(1)})
    new = _registry(**{"m::W::a": _affine(2), "m::W::b": _affine(1), "n::W::a": _affine(1)})
    scope = IdentifierFilter(allow=("m::*",), deny=("*::b",))
    assert [change.identifier for change in compare(old, new, scope=scope)] == ["m::W::a"]


def test_compare_with_workers_matches_sequential() -> None:
    old = _registry(**{f"f{i}": _affine(100 + i, r=i) for i in range(20)})
    new = _registry(**{f"f{i}": _affine(100, r=2 * i) for i in range(20)})
    assert compare(old, new, workers=4) == compare(old, new)


def test_union_box_merges_and_defaults_ranges() -> None:
    old = add(_affine(1, x=1), Formula.variable(Component("r", 1, 50, declared=True)))
    new = _affine(1, r=1, y=1)
    box = union_box(old, new, default_max=20)
    assert box.names == ("r", "x", "y")
    assert box.components[0] == Component("r", 1, 50, declared=True)
    assert box.components[1] == Component("x", 0, 20)


def test_box_enumerates_vertices() -> None:
    box = Box((Component("a", 0, 1), Component("b", 5, 9)))
    vertices = box.vertices()
    assert vertices.shape == (4, 2)
    assert {tuple(row) for row in vertices.tolist()} == {(0, 5), (1, 5), (0, 9), (1, 9)}
    assert Box().corners().shape == (1, 0)


def test_box_samples_when_too_many_components() -> None:
    box = Box(tuple(Component(f"c{i}", 0, 10) for i in range(12)))
    corners = box.corners()
    assert corners.shape == (26, 12)
    assert np.array_equal(corners[0], np.zeros(12))
    assert np.array_equal(corners[1], np.full(12, 10))
    assert corners[2].sum() == 10


def test_worst_case_with_many_components() -> None:
    names = {f"c{i}": 1 for i in range(12)}
    old = _affine(100, **names)
    new = _affine(100, **{**names, "c3": 4})
    change = compare_formulas("f", old, new, WORST)
    assert change.point["c3"] == 100
    assert change.delta > 0


def test_sanity_warning_on_implausible_resource_counts() -> None:
    assert sanity_warning(_affine(1, reads=2_000)) == "Call has 2000 READs"
    assert sanity_warning(_affine(1, writes=5_000, reads=3)) == "Call has 5000 WRITEs"
    assert sanity_warning(_affine(1, reads=10)) is None
    assert compare_formulas("f", None, _affine(1, reads=2_000), WORST).warning == "Call has 2000 READs"


def _declared(name: str, low: int, high: int, coefficient: int = 1) -> Formula:
    return Formula.variable(Component(name, low, high, declared=True), coefficient)


def test_asymptotic_evaluates_at_upper_bound() -> None:
    old = Formula.constant(100)
    new = add(Formula.constant(100), _declared("r", 0, 100, 5))
    change = compare_formulas("f", old, new, ExtrapolationMethod.ASYMPTOTIC)
    assert change.point == {"r": 100}
    assert change.delta == 5
    assert abs(compare_formulas("f", old, new, WORST).delta) >= abs(change.delta)


def test_exact_methods_require_declared_ranges() -> None:
    for method in (ExtrapolationMethod.EXACT_WORST_CASE, ExtrapolationMethod.ASYMPTOTIC):
        with pytest.raises(AmbiguousRange) as excinfo:
            compare_formulas("m::W::f", _affine(1), _affine(1, r=2), method)
        assert excinfo.value.component == "r"
        assert excinfo.value.identifier == "m::W::f"
        assert "no declared range" in str(excinfo.value)


def test_exact_worst_case_rejects_differing_ranges() -> None:
    old = _declared("r", 0, 10)
    new = _declared("r", 0, 20, 2)
    with pytest.raises(AmbiguousRange, match="different ranges"):
        compare_formulas("f", old, new, ExtrapolationMethod.EXACT_WORST_CASE)
    guessed = compare_formulas("f", old, new, WORST)
    assert guessed.point == {"r": 20}


def test_exact_worst_case_matches_guess_when_ranges_agree() -> None:
    old = add(_declared("c", 0, 1000, 4), _affine(5, reads=1))
    new = add(_declared("c", 0, 1000, 8), _affine(5, reads=1))
    exact = compare_formulas("f", old, new, ExtrapolationMethod.EXACT_WORST_CASE)
    guessed = compare_formulas("f", old, new, WORST)
    assert exact.delta == guessed.delta
    assert exact.point == guessed.point


def test_compare_collects_exact_failures() -> None:
    old = _registry(a=_declared("r", 0, 10), b=_affine(1, r=1))
    new = _registry(a=_declared("r", 0, 10, 3), b=_affine(1, r=2))
    failures: list = []
    changes = compare(old, new, ExtrapolationMethod.EXACT_WORST_CASE, failures=failures)
    assert [change.identifier for change in changes] == ["a"]
    assert [failure.identifier for failure in failures] == ["b"]
    assert "component 'r'" in failures[0].reason


def test_exact_methods_negate_delta_when_swapped() -> None:
    old = add(Formula.constant(7), _declared("r", 0, 50, 2))
    new = add(Formula.constant(9), _declared("r", 0, 50, 5))
    for method in (ExtrapolationMethod.EXACT_WORST_CASE, ExtrapolationMethod.ASYMPTOTIC):
        forward = compare_formulas("f", old, new, method)
        backward = compare_formulas("f", new, old, method)
        assert forward.delta == -backward.delta


def test_decrease_is_measured_against_the_new_value() -> None:
    change = compare_formulas("f", Formula.constant(200), Formula.constant(100), FIXED)
    assert change.delta == -1
    assert (change.old_value, change.new_value) == (200, 100)
    assert (change.new_value - change.old_value) / change.old_value == Fraction(-1, 2)
