"""Turn quantified changes into verdicts."""

from __future__ import annotations

from enum import Enum
from fractions import Fraction
from typing import Iterable, Sequence

from benchmark_weights.comparison.comparator import Change


class Verdict(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    UNCHANGED = "unchanged"
    INCREASED = "increased"
    DECREASED = "decreased"


_ORDER = {
    Verdict.REMOVED: 0,
    Verdict.ADDED: 1,
    Verdict.DECREASED: 2,
    Verdict.UNCHANGED: 3,
    Verdict.INCREASED: 4,
}


def classify(change: Change, threshold: Fraction | float) -> Verdict:
    if change.added:
        return Verdict.ADDED
    if change.removed:
        return Verdict.REMOVED
    if change.delta == 0 or abs(change.delta) < threshold:
        return Verdict.UNCHANGED
    if change.delta > 0:
        return Verdict.INCREASED
    return Verdict.DECREASED


def classify_all(changes: Iterable[Change], threshold: Fraction | float) -> list[tuple[Change, Verdict]]:
    return [(change, classify(change, threshold)) for change in changes]


def filter_changes(
    changes: Iterable[Change],
    threshold: Fraction | float,
    include: Sequence[Verdict] | None = None,
) -> list[tuple[Change, Verdict]]:
    """Keep the changes worth reporting.

    Without ``include`` everything but ``unchanged`` is kept.
    """
    wanted = set(include) if include is not None else set(Verdict) - {Verdict.UNCHANGED}
    return [(change, verdict) for change, verdict in classify_all(changes, threshold) if verdict in wanted]


def sort_changes(classified: Iterable[tuple[Change, Verdict]]) -> list[tuple[Change, Verdict]]:
    """Order by verdict, then by delta so the largest regressions come last."""
    return sorted(classified, key=lambda item: (_ORDER[item[1]], item[0].delta, item[0].identifier))
