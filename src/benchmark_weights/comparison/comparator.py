"""Pair the weight functions of two snapshots and quantify their change."""

from __future__ import annotations

import fnmatch
import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from fractions import Fraction
from typing import Mapping

from benchmark_weights.comparison.box import Box, union_box
from benchmark_weights.errors import AmbiguousRange
from benchmark_weights.registry.registry import Registry
from benchmark_weights.terms.term import MAX_SAMPLE, Formula, evaluate

logger = logging.getLogger(__name__)

INFINITE_DELTA = math.inf
EPSILON = Fraction(1, 1_000_000)
RESOURCE_LIMIT = 1000

Delta = Fraction | float


class ExtrapolationMethod(str, Enum):
    """How a multivariate difference is reduced to one delta.

    ``exact-worst-case`` and ``asymptotic`` refuse to guess component ranges:
    a component without a declared range, or with different declared ranges
    in the two snapshots, raises ``AmbiguousRange``.
    """

    WORST_CASE = "worst-case"
    EXACT_WORST_CASE = "exact-worst-case"
    FIXED_POINT = "fixed-point"
    MEAN_CASE = "mean-case"
    ASYMPTOTIC = "asymptotic"

    @property
    def exact(self) -> bool:
        return self in (ExtrapolationMethod.EXACT_WORST_CASE, ExtrapolationMethod.ASYMPTOTIC)

    @property
    def searches_vertices(self) -> bool:
        return self in (ExtrapolationMethod.WORST_CASE, ExtrapolationMethod.EXACT_WORST_CASE)


@dataclass(frozen=True)
class Change:
    """The comparison of one identifier across two snapshots.

    ``delta`` is signed and relative to the cheaper of the two values:
    ``new / old - 1`` for an increase but ``-(old / new - 1)`` for a decrease,
    so 200 -> 100 is ``-1`` rather than ``-0.5``. Render a percentage of the
    old value from ``old_value`` and ``new_value`` instead. Added and removed
    functions carry ``+inf`` and ``-inf``.
    """

    identifier: str
    old: Formula | None
    new: Formula | None
    delta: Delta
    method: ExtrapolationMethod
    old_value: Fraction | None = None
    new_value: Fraction | None = None
    point: Mapping[str, Fraction | int] = field(default_factory=dict)
    warning: str | None = None

    @property
    def added(self) -> bool:
        return self.old is None

    @property
    def removed(self) -> bool:
        return self.new is None


@dataclass(frozen=True)
class CompareFailure:
    """An identifier an exact method could not compare."""

    identifier: str
    error: AmbiguousRange

    @property
    def reason(self) -> str:
        return str(self.error)


@dataclass(frozen=True)
class IdentifierFilter:
    """Allow- and deny-list of identifiers or ``fnmatch`` patterns."""

    allow: tuple[str, ...] = ()
    deny: tuple[str, ...] = ()

    def includes(self, identifier: str) -> bool:
        if any(fnmatch.fnmatchcase(identifier, pattern) for pattern in self.deny):
            return False
        if not self.allow:
            return True
        return any(fnmatch.fnmatchcase(identifier, pattern) for pattern in self.allow)


def relative_delta(old_value: Fraction, new_value: Fraction) -> Delta:
    """Signed change relative to the cheaper side.

    Equals ``new / old - 1`` for an increase and ``-(old / new - 1)`` for a
    decrease, so swapping both sides negates it.
    """
    if old_value == new_value:
        return Fraction(0)
    if old_value == 0:
        return INFINITE_DELTA
    if new_value == 0:
        return -INFINITE_DELTA
    return (new_value - old_value) / min(abs(old_value), abs(new_value))


def _spread(old_value: Fraction, new_value: Fraction) -> Fraction:
    return abs(new_value - old_value) / max(min(abs(old_value), abs(new_value)), EPSILON)


def sanity_warning(formula: Formula | None) -> str | None:
    """Flag calls whose formula claims an implausible number of reads or writes."""
    if formula is None:
        return None
    reads = formula.coefficient("reads")
    writes = formula.coefficient("writes")
    if max(reads, writes) <= RESOURCE_LIMIT:
        return None
    if reads > writes:
        return f"Call has {reads} READs"
    return f"Call has {writes} WRITEs"


def _reference_point(box: Box, method: ExtrapolationMethod) -> dict[str, Fraction | int]:
    if method is ExtrapolationMethod.MEAN_CASE:
        return box.midpoint()
    if method is ExtrapolationMethod.ASYMPTOTIC:
        return box.upper()
    return box.lower()


def _worst_case(box: Box, old: Formula, new: Formula) -> tuple[dict[str, int], Fraction, Fraction]:
    best: tuple[Fraction, dict[str, int], Fraction, Fraction] | None = None
    for row in box.corners():
        assignment = box.assignment(row)
        old_value = evaluate(old, assignment)
        new_value = evaluate(new, assignment)
        spread = _spread(old_value, new_value)
        if best is None or spread > best[0]:
            best = (spread, assignment, old_value, new_value)
    _, assignment, old_value, new_value = best
    return assignment, old_value, new_value


def _one_sided_point(box: Box, formula: Formula, method: ExtrapolationMethod) -> dict[str, Fraction | int]:
    if not method.searches_vertices:
        return _reference_point(box, method)
    assignments = [box.assignment(row) for row in box.corners()]
    return max(assignments, key=lambda assignment: evaluate(formula, assignment))


def compare_formulas(
    identifier: str,
    old: Formula | None,
    new: Formula | None,
    method: ExtrapolationMethod,
    default_max: int = MAX_SAMPLE,
) -> Change:
    """Compare one pair; either side may be missing but not both.

    Exact methods raise ``AmbiguousRange`` naming ``identifier``.
    """
    if old is None and new is None:
        raise ValueError(f"'{identifier}' is missing from both snapshots")
    method = ExtrapolationMethod(method)
    try:
        box = union_box(old, new, default_max, exact=method.exact)
    except AmbiguousRange as err:
        err.identifier = identifier
        raise
    warning = sanity_warning(new if new is not None else old)

    if old is None or new is None:
        present = new if old is None else old
        point = _one_sided_point(box, present, method)
        value = evaluate(present, point)
        return Change(
            identifier=identifier,
            old=old,
            new=new,
            delta=INFINITE_DELTA if old is None else -INFINITE_DELTA,
            method=method,
            old_value=None if old is None else value,
            new_value=value if old is None else None,
            point=point,
            warning=warning,
        )

    if method.searches_vertices:
        point, old_value, new_value = _worst_case(box, old, new)
    else:
        point = _reference_point(box, method)
        old_value = evaluate(old, point)
        new_value = evaluate(new, point)
    delta = relative_delta(old_value, new_value)
    logger.debug("%s: %s -> %s at %s (%s)", identifier, old_value, new_value, point, delta)
    return Change(
        identifier=identifier,
        old=old,
        new=new,
        delta=delta,
        method=method,
        old_value=old_value,
        new_value=new_value,
        point=point,
        warning=warning,
    )


def compare(
    old: Registry,
    new: Registry,
    method: ExtrapolationMethod = ExtrapolationMethod.WORST_CASE,
    *,
    default_max: int = MAX_SAMPLE,
    scope: IdentifierFilter | None = None,
    workers: int = 1,
    failures: list[CompareFailure] | None = None,
) -> list[Change]:
    """One Change per identifier found in either registry, sorted by identifier.

    Identifiers an exact method cannot compare are logged, left out of the
    result and appended to ``failures`` when a list is given.
    """
    identifiers = sorted(set(old.identifiers()) | set(new.identifiers()))
    if scope is not None:
        identifiers = [identifier for identifier in identifiers if scope.includes(identifier)]

    def pair(identifier: str) -> Change | CompareFailure:
        old_function = old.get(identifier)
        new_function = new.get(identifier)
        try:
            return compare_formulas(
                identifier,
                old_function.formula if old_function is not None else None,
                new_function.formula if new_function is not None else None,
                method,
                default_max,
            )
        except AmbiguousRange as err:
            logger.warning("Cannot compare %s", err)
            return CompareFailure(identifier, err)

    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            outcomes = list(pool.map(pair, identifiers))
    else:
        outcomes = [pair(identifier) for identifier in identifiers]
    changes = [outcome for outcome in outcomes if isinstance(outcome, Change)]
    if failures is not None:
        failures.extend(outcome for outcome in outcomes if isinstance(outcome, CompareFailure))
    logger.debug("Compared %d weight functions with %s", len(changes), ExtrapolationMethod(method).value)
    return changes
