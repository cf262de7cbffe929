"""Split the text of a generated weight file into benchmark functions."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from benchmark_weights.errors import WeightSyntaxError
from benchmark_weights.syntax.parser import parse_block
from benchmark_weights.syntax.tree import Block, Location

_IMPL = re.compile(
    r"\bimpl\s*(?:<(?:[^<>]|<[^<>]*>)*>)?\s*(?:[\w:]+::)?WeightInfo\s+for\s+(?P<target>[^{]+?)\s*\{"
)
_FUNCTION = re.compile(
    r"\bfn\s+(?P<name>\w+)\s*\((?P<params>[^)]*)\)\s*->\s*(?:[\w:]+::)?Weight\s*\{"
)
_RANGE = re.compile(
    r"The range of component `(?P<name>\w+)` is `\[(?P<min>\d[\d_]*),\s*(?P<max>\d[\d_]*)\]`"
)
_GENERICS = re.compile(r"<.*>")


@dataclass(frozen=True)
class SourceEntry:
    """One benchmark function, ready for the interpreter.

    ``tree`` is ``None`` when the body could not be parsed; ``error`` then
    holds the syntax error so the registry build can report it.
    """

    identifier: str
    tree: Block | None
    ranges: dict[str, tuple[int, int]] = field(default_factory=dict)
    error: WeightSyntaxError | None = None


def _location(text: str, index: int) -> Location:
    line = text.count("\n", 0, index) + 1
    column = index - (text.rfind("\n", 0, index) + 1) + 1
    return Location(line, column)


def _matching_brace(text: str, open_index: int) -> int:
    """Index of the ``}`` closing the ``{`` at ``open_index``, skipping comments and strings."""
    depth = 0
    idx = open_index
    while idx < len(text):
        char = text[idx]
        if text.startswith("//", idx):
            end = text.find("\n", idx)
            idx = len(text) if end == -1 else end
            continue
        if char == '"':
            idx += 1
            while idx < len(text) and text[idx] != '"':
                idx += 2 if text[idx] == "\\" else 1
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return idx
        idx += 1
    raise WeightSyntaxError("Unbalanced braces", _location(text, open_index))


def _impl_target(raw: str) -> str:
    target = _GENERICS.sub("", raw.split(" where ")[0]).strip()
    return target.split("::")[-1] or target


def parse_component_ranges(doc: str) -> dict[str, tuple[int, int]]:
    ranges: dict[str, tuple[int, int]] = {}
    for match in _RANGE.finditer(doc):
        minimum = int(match.group("min").replace("_", ""))
        maximum = int(match.group("max").replace("_", ""))
        ranges[match.group("name")] = (minimum, maximum)
    return ranges


def extract_functions(text: str, module: str) -> list[SourceEntry]:
    """Return every weight function of every ``WeightInfo`` impl in ``text``.

    Identifiers have the form ``module::ImplTarget::function``.
    """
    entries: list[SourceEntry] = []
    found_impl = False
    for impl in _IMPL.finditer(text):
        found_impl = True
        impl_open = impl.end() - 1
        impl_close = _matching_brace(text, impl_open)
        target = _impl_target(impl.group("target"))
        cursor = impl_open + 1
        while True:
            function = _FUNCTION.search(text, cursor, impl_close)
            if function is None:
                break
            body_open = function.end() - 1
            body_close = _matching_brace(text, body_open)
            identifier = f"{module}::{target}::{function.group('name')}"
            ranges = parse_component_ranges(text[cursor : function.start()])
            body = text[body_open : body_close + 1]
            try:
                tree = parse_block(body, _location(text, body_open))
            except WeightSyntaxError as err:
                entries.append(SourceEntry(identifier, None, ranges, err))
            else:
                entries.append(SourceEntry(identifier, tree, ranges))
            cursor = body_close + 1
    if not found_impl:
        raise WeightSyntaxError(f"Could not find a weight implementation in module '{module}'")
    return entries
