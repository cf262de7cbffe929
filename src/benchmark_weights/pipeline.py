"""End-to-end comparison of two snapshots."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from benchmark_weights.comparison.classifier import Verdict, classify_all
from benchmark_weights.comparison.comparator import Change, CompareFailure, IdentifierFilter, compare
from benchmark_weights.config import CompareConfig
from benchmark_weights.registry.registry import BuildFailure, build
from benchmark_weights.syntax.extract import SourceEntry

logger = logging.getLogger(__name__)


@dataclass
class Report:
    changes: list[tuple[Change, Verdict]]
    old_failures: list[BuildFailure] = field(default_factory=list)
    new_failures: list[BuildFailure] = field(default_factory=list)
    compare_failures: list[CompareFailure] = field(default_factory=list)

    @property
    def skipped(self) -> list[str]:
        """Identifiers that could not be interpreted on either side."""
        names = {failure.identifier for failure in self.old_failures + self.new_failures}
        return sorted(names)

    def by_verdict(self, verdict: Verdict) -> list[Change]:
        return [change for change, found in self.changes if found is verdict]


def compare_snapshots(
    old_source: Sequence[SourceEntry],
    new_source: Sequence[SourceEntry],
    config: CompareConfig | None = None,
) -> Report:
    config = config or CompareConfig()
    interpreter = config.interpreter()
    old = build(old_source, interpreter, workers=config.workers)
    new = build(new_source, interpreter, workers=config.workers)
    skipped = sorted({failure.identifier for failure in old.failures + new.failures})
    # a function skipped on one side must not show up as added or removed
    scope = IdentifierFilter(config.allow, config.deny + tuple(skipped))
    compare_failures: list[CompareFailure] = []
    changes = compare(
        old.registry,
        new.registry,
        config.method,
        default_max=config.default_max,
        scope=scope,
        workers=config.workers,
        failures=compare_failures,
    )
    if old.failures or new.failures or compare_failures:
        logger.warning(
            "Compared %d functions; %d old and %d new functions were skipped, %d could not be compared",
            len(changes),
            len(old.failures),
            len(new.failures),
            len(compare_failures),
        )
    return Report(
        classify_all(changes, config.threshold),
        old.failures,
        new.failures,
        compare_failures,
    )
