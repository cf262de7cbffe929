"""The fixed vocabulary of call patterns a weight expression may use."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from benchmark_weights.syntax.tree import (
    Block,
    Call,
    Cast,
    IntLiteral,
    Location,
    MethodCall,
    Node,
    Paren,
    Path,
)

WEIGHT_CONSTRUCTORS = {"from_parts", "from_ref_time", "from_proof_size", "from_all", "zero"}
NUMERIC_TYPES = {"u8", "u16", "u32", "u64", "u128", "usize", "Weight"}
RESOURCE_UNITS = ("reads", "writes")


@dataclass(frozen=True)
class BaseConstant:
    """A weight literal with its ref-time and proof-size parts."""

    ref_time: int
    proof_size: int
    location: Location


@dataclass(frozen=True)
class Literal:
    value: int
    location: Location


@dataclass(frozen=True)
class Variable:
    name: str
    location: Location


@dataclass(frozen=True)
class Group:
    inner: Node
    location: Location


@dataclass(frozen=True)
class Additive:
    receiver: Node
    operand: Node
    negate: bool
    location: Location


@dataclass(frozen=True)
class Scaling:
    receiver: Node
    factor: Node
    location: Location


@dataclass(frozen=True)
class ResourceUnit:
    counts: tuple[tuple[str, Node], ...]
    location: Location


@dataclass(frozen=True)
class Clamp:
    receiver: Node
    bound: Node
    kind: str
    location: Location


@dataclass(frozen=True)
class Unsupported:
    detail: str
    location: Location


Pattern = Union[BaseConstant, Literal, Variable, Group, Additive, Scaling, ResourceUnit, Clamp, Unsupported]


def _literal_value(node: Node) -> int | None:
    while isinstance(node, (Paren, Cast)):
        node = node.expr
    if isinstance(node, IntLiteral):
        return node.value
    return None


def _is_variable(node: Node) -> bool:
    return isinstance(node, Path) and node.is_ident and node.name not in ("true", "false")


def _is_resource_table(node: Node) -> bool:
    """``T::DbWeight::get()``, ``RocksDbWeight::get()`` and friends."""
    if not isinstance(node, Call) or node.args or not isinstance(node.func, Path):
        return False
    segments = node.func.segments
    return len(segments) >= 2 and segments[-1] == "get" and segments[-2].endswith("Weight")


def _classify_constructor(node: Call, path: Path) -> Pattern:
    values = [_literal_value(arg) for arg in node.args]
    if any(value is None for value in values):
        return Unsupported(f"'{path}' expects numeric literals", node.location)
    expected = {"zero": 0, "from_parts": 2}.get(path.name, 1)
    if len(values) != expected:
        return Unsupported(f"'{path}' expects {expected} argument(s)", node.location)
    if path.name == "zero":
        return BaseConstant(0, 0, node.location)
    if path.name == "from_parts":
        return BaseConstant(values[0], values[1], node.location)
    if path.name == "from_ref_time":
        return BaseConstant(values[0], 0, node.location)
    if path.name == "from_proof_size":
        return BaseConstant(0, values[0], node.location)
    return BaseConstant(values[0], values[0], node.location)


def _classify_call(node: Call) -> Pattern:
    if not isinstance(node.func, Path):
        return Unsupported("call of a computed function", node.location)
    path = node.func
    owner = path.segments[-2] if len(path.segments) >= 2 else None
    if owner == "Weight" and path.name in WEIGHT_CONSTRUCTORS:
        return _classify_constructor(node, path)
    if owner in NUMERIC_TYPES and path.name == "from" and len(node.args) == 1:
        arg = node.args[0]
        if _is_variable(arg):
            return Variable(arg.name, arg.location)
        return Group(arg, node.location)
    return Unsupported(f"call to unknown function '{path}'", node.location)


def _classify_method(node: MethodCall) -> Pattern:
    method, args = node.method, node.args
    if method == "into" and not args:
        if _is_variable(node.receiver):
            return Variable(node.receiver.name, node.receiver.location)
        return Group(node.receiver, node.location)
    if method in ("saturating_add", "saturating_sub") and len(args) == 1:
        return Additive(node.receiver, args[0], method == "saturating_sub", node.location)
    if method == "saturating_mul" and len(args) == 1:
        return Scaling(node.receiver, args[0], node.location)
    if method in ("min", "max") and len(args) == 1:
        return Clamp(node.receiver, args[0], method, node.location)
    if _is_resource_table(node.receiver):
        if method in RESOURCE_UNITS and len(args) == 1:
            return ResourceUnit(((method, args[0]),), node.location)
        if method == "reads_writes" and len(args) == 2:
            return ResourceUnit((("reads", args[0]), ("writes", args[1])), node.location)
    return Unsupported(f"unsupported method '{method}'", node.location)


def classify(node: Node) -> Pattern:
    """Map a syntax node onto exactly one pattern of the vocabulary."""
    if isinstance(node, IntLiteral):
        return Literal(node.value, node.location)
    if isinstance(node, Cast):
        if isinstance(node.expr, IntLiteral):
            if node.type_name == "Weight":
                return BaseConstant(node.expr.value, 0, node.location)
            return Literal(node.expr.value, node.location)
        if _is_variable(node.expr):
            return Variable(node.expr.name, node.expr.location)
        if node.type_name in NUMERIC_TYPES:
            return Group(node.expr, node.location)
        return Unsupported(f"cast to '{node.type_name}'", node.location)
    if _is_variable(node):
        return Variable(node.name, node.location)
    if isinstance(node, Paren):
        return Group(node.expr, node.location)
    if isinstance(node, Block):
        if node.statements or node.tail is None:
            return Unsupported("block with statements", node.location)
        return Group(node.tail, node.location)
    if isinstance(node, Call):
        return _classify_call(node)
    if isinstance(node, MethodCall):
        return _classify_method(node)
    return Unsupported(f"unsupported {type(node).__name__.lower()} expression", node.location)
