"""Generic syntax tree for the expressions found in weight functions."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Location:
    line: int = 1
    column: int = 1

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


class Node:
    """Base class for syntax tree nodes."""

    location: Location


@dataclass(frozen=True)
class IntLiteral(Node):
    value: int
    suffix: str | None = None
    location: Location = field(default=Location(), compare=False)


@dataclass(frozen=True)
class FloatLiteral(Node):
    value: float
    location: Location = field(default=Location(), compare=False)


@dataclass(frozen=True)
class StrLiteral(Node):
    value: str
    location: Location = field(default=Location(), compare=False)


@dataclass(frozen=True)
class Path(Node):
    """A path such as ``r``, ``Weight::from_parts`` or ``<T as Config>::DbWeight::get``."""

    segments: tuple[str, ...]
    location: Location = field(default=Location(), compare=False)

    @property
    def name(self) -> str:
        return self.segments[-1]

    @property
    def is_ident(self) -> bool:
        return len(self.segments) == 1

    def __str__(self) -> str:
        return "::".join(self.segments)


@dataclass(frozen=True)
class Call(Node):
    func: Node
    args: tuple[Node, ...] = ()
    location: Location = field(default=Location(), compare=False)


@dataclass(frozen=True)
class MethodCall(Node):
    receiver: Node
    method: str
    args: tuple[Node, ...] = ()
    location: Location = field(default=Location(), compare=False)


@dataclass(frozen=True)
class Field(Node):
    receiver: Node
    name: str
    location: Location = field(default=Location(), compare=False)


@dataclass(frozen=True)
class Cast(Node):
    expr: Node
    type_name: str
    location: Location = field(default=Location(), compare=False)


@dataclass(frozen=True)
class Paren(Node):
    expr: Node
    location: Location = field(default=Location(), compare=False)


@dataclass(frozen=True)
class Unary(Node):
    op: str
    operand: Node
    location: Location = field(default=Location(), compare=False)


@dataclass(frozen=True)
class Binary(Node):
    op: str
    left: Node
    right: Node
    location: Location = field(default=Location(), compare=False)


@dataclass(frozen=True)
class Block(Node):
    statements: tuple[Node, ...] = ()
    tail: Node | None = None
    location: Location = field(default=Location(), compare=False)


@dataclass(frozen=True)
class Let(Node):
    name: str
    value: Node | None = None
    location: Location = field(default=Location(), compare=False)


@dataclass(frozen=True)
class If(Node):
    condition: Node
    then: Block
    orelse: Node | None = None
    location: Location = field(default=Location(), compare=False)


@dataclass(frozen=True)
class Loop(Node):
    """``loop``, ``while`` and ``for`` loops; only the body is kept."""

    kind: str
    body: Block
    location: Location = field(default=Location(), compare=False)
