"""Per-snapshot collection of interpreted weight functions."""

from __future__ import annotations

import logging
import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Sequence

from benchmark_weights.errors import (
    DegenerateRange,
    DuplicateIdentifier,
    UnsupportedExpression,
    WeightSyntaxError,
)
from benchmark_weights.interpreter.interpreter import Interpreter
from benchmark_weights.syntax.extract import SourceEntry
from benchmark_weights.terms.term import Formula

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WeightFunction:
    identifier: str
    formula: Formula


@dataclass(frozen=True)
class BuildFailure:
    """A function that was skipped because it could not be interpreted."""

    identifier: str
    error: UnsupportedExpression | WeightSyntaxError

    @property
    def reason(self) -> str:
        return str(self.error)


class Registry:
    """Identifier to WeightFunction mapping for one snapshot.

    Insertion is synchronized so workers may fill it concurrently; once
    sealed it is read-only.
    """

    def __init__(self, functions: Iterable[WeightFunction] = ()) -> None:
        self._functions: dict[str, WeightFunction] = {}
        self._lock = threading.Lock()
        self._sealed = False
        for function in functions:
            self.insert(function.identifier, function.formula)

    def insert(self, identifier: str, formula: Formula) -> WeightFunction:
        with self._lock:
            if self._sealed:
                raise RuntimeError("Registry is sealed")
            if identifier in self._functions:
                raise DuplicateIdentifier(identifier)
            function = WeightFunction(identifier, formula)
            self._functions[identifier] = function
            return function

    def seal(self) -> Registry:
        with self._lock:
            self._sealed = True
        return self

    @property
    def sealed(self) -> bool:
        return self._sealed

    def get(self, identifier: str) -> WeightFunction | None:
        return self._functions.get(identifier)

    def identifiers(self) -> list[str]:
        return sorted(self._functions)

    def __getitem__(self, identifier: str) -> WeightFunction:
        return self._functions[identifier]

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._functions

    def __iter__(self) -> Iterator[str]:
        return iter(self.identifiers())

    def __len__(self) -> int:
        return len(self._functions)


@dataclass
class BuildResult:
    registry: Registry
    failures: list[BuildFailure] = field(default_factory=list)

    @property
    def skipped(self) -> list[str]:
        return sorted(failure.identifier for failure in self.failures)


def _interpret_entry(
    entry: SourceEntry,
    interpreter: Interpreter,
    registry: Registry,
) -> BuildFailure | None:
    if entry.tree is None:
        error = entry.error or WeightSyntaxError(f"No syntax tree for '{entry.identifier}'")
        return BuildFailure(entry.identifier, error)
    try:
        formula = interpreter.interpret(entry.tree, entry.ranges)
    except UnsupportedExpression as err:
        return BuildFailure(entry.identifier, err)
    registry.insert(entry.identifier, formula)
    return None


def build(
    source: Sequence[SourceEntry],
    interpreter: Interpreter | None = None,
    workers: int = 1,
) -> BuildResult:
    """Interpret every entry of a snapshot into a sealed Registry.

    Functions that cannot be interpreted are reported in ``failures``.
    Duplicate identifiers and degenerate ranges abort the build; the raised
    error carries the partial BuildResult in ``salvaged``.
    """
    interpreter = interpreter or Interpreter()
    registry = Registry()
    result = BuildResult(registry)

    counts = Counter(entry.identifier for entry in source)
    duplicates = sorted(name for name, count in counts.items() if count > 1)
    unique = [entry for entry in source if counts[entry.identifier] == 1]

    def record(outcome: BuildFailure | None) -> None:
        if outcome is not None:
            logger.warning("Skipping %s: %s", outcome.identifier, outcome.reason)
            result.failures.append(outcome)

    try:
        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                futures = [pool.submit(_interpret_entry, entry, interpreter, registry) for entry in unique]
            # every future has finished once the pool is shut down
            first_error: DegenerateRange | None = None
            for future in futures:
                try:
                    record(future.result())
                except DegenerateRange as err:
                    first_error = first_error or err
            if first_error is not None:
                raise first_error
        else:
            for entry in unique:
                record(_interpret_entry(entry, interpreter, registry))
    except DegenerateRange as err:
        err.salvaged = result
        raise
    finally:
        result.failures.sort(key=lambda failure: failure.identifier)
        registry.seal()
    if duplicates:
        raise DuplicateIdentifier(duplicates[0], salvaged=result)
    logger.debug("Built registry with %d functions, %d skipped", len(registry), len(result.failures))
    return result
