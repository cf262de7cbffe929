"""Parser for the expression language used inside weight functions.

Only the part of the grammar that shows up in generated weight files is
covered: literals, paths, calls, method chains, casts, operators, blocks with
``let`` statements, ``if``/``else`` and loops. Anything else is a syntax error.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from benchmark_weights.errors import WeightSyntaxError
from benchmark_weights.syntax.tree import (
    Binary,
    Block,
    Call,
    Cast,
    Field,
    FloatLiteral,
    If,
    IntLiteral,
    Let,
    Location,
    Loop,
    MethodCall,
    Node,
    Paren,
    Path,
    StrLiteral,
    Unary,
)

_NUMBER = re.compile(
    r"(?P<digits>0x[0-9a-fA-F_]+|[0-9][0-9_]*)"
    r"(?P<fraction>\.[0-9][0-9_]*)?"
    r"(?P<suffix>[iuf](?:8|16|32|64|128|size))?"
)
_IDENT = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_PUNCTUATION = (
    "::", "->", "=>", "==", "!=", "<=", ">=", "&&", "||", "..",
    "(", ")", "{", "}", "[", "]", "<", ">", ",", ".", ";", "=", "+", "-",
    "*", "/", "%", "!", "&", "|", "#", ":", "?", "^", "@",
)
_KEYWORDS = {"as", "if", "else", "let", "mut", "loop", "while", "for", "in", "return", "match"}
_COMPARISONS = ("==", "!=", "<", ">", "<=", ">=")


@dataclass(frozen=True)
class Token:
    kind: str
    value: str
    location: Location


def _tokenize(text: str, start: Location = Location()) -> list[Token]:
    tokens: list[Token] = []
    idx = 0
    line = start.line
    line_start = -(start.column - 1)

    def here() -> Location:
        return Location(line, idx - line_start + 1)

    while idx < len(text):
        char = text[idx]
        if char == "\n":
            idx += 1
            line += 1
            line_start = idx
            continue
        if char.isspace():
            idx += 1
            continue
        if text.startswith("//", idx):
            end = text.find("\n", idx)
            idx = len(text) if end == -1 else end
            continue
        if text.startswith("/*", idx):
            end = text.find("*/", idx + 2)
            if end == -1:
                raise WeightSyntaxError("Unterminated block comment", here())
            skipped = text[idx : end + 2]
            newlines = skipped.count("\n")
            if newlines:
                line += newlines
                line_start = idx + skipped.rfind("\n") + 1
            idx = end + 2
            continue
        if char.isdigit():
            match = _NUMBER.match(text, idx)
            kind = "FLOAT" if match.group("fraction") or (match.group("suffix") or "").startswith("f") else "INT"
            tokens.append(Token(kind=kind, value=match.group(0), location=here()))
            idx = match.end()
            continue
        if char.isalpha() or char == "_":
            match = _IDENT.match(text, idx)
            word = match.group(0)
            kind = "KEYWORD" if word in _KEYWORDS else "IDENT"
            tokens.append(Token(kind=kind, value=word, location=here()))
            idx = match.end()
            continue
        if char == '"':
            end = idx + 1
            while end < len(text) and text[end] != '"':
                end += 2 if text[end] == "\\" else 1
            if end >= len(text):
                raise WeightSyntaxError("Unterminated string literal", here())
            tokens.append(Token(kind="STR", value=text[idx + 1 : end], location=here()))
            idx = end + 1
            continue
        if char == "'":
            if idx + 2 < len(text) and text[idx + 2] == "'":
                tokens.append(Token(kind="STR", value=text[idx + 1], location=here()))
                idx += 3
                continue
            match = _IDENT.match(text, idx + 1)
            if match is None:
                raise WeightSyntaxError("Unexpected character \"'\"", here())
            tokens.append(Token(kind="LIFETIME", value="'" + match.group(0), location=here()))
            idx = match.end()
            continue
        for punct in _PUNCTUATION:
            if text.startswith(punct, idx):
                tokens.append(Token(kind=punct, value=punct, location=here()))
                idx += len(punct)
                break
        else:
            raise WeightSyntaxError(f"Unexpected character '{char}'", here())
    tokens.append(Token(kind="EOF", value="", location=here()))
    return tokens


def _int_value(literal: str) -> int:
    digits = literal.replace("_", "")
    if digits.startswith("0x"):
        return int(digits, 16)
    return int(digits)


class _Parser:
    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = tokens
        self.pos = 0

    def _peek(self, offset: int = 0) -> Token:
        return self.tokens[min(self.pos + offset, len(self.tokens) - 1)]

    def _at(self, kind: str, value: str | None = None) -> bool:
        token = self._peek()
        return token.kind == kind and (value is None or token.value == value)

    def _at_keyword(self, word: str) -> bool:
        return self._at("KEYWORD", word)

    def _consume(self, expected: str | None = None) -> Token:
        token = self._peek()
        if token.kind == "EOF" and expected != "EOF":
            raise WeightSyntaxError("Unexpected end of input", token.location)
        if expected is not None and token.kind != expected:
            raise WeightSyntaxError(f"Expected '{expected}', got '{token.value}'", token.location)
        self.pos += 1
        return token

    def _consume_keyword(self, word: str) -> Token:
        if not self._at_keyword(word):
            token = self._peek()
            raise WeightSyntaxError(f"Expected '{word}', got '{token.value}'", token.location)
        return self._consume()

    def parse_expression(self) -> Node:
        expr = self._parse_expr()
        self._expect_end()
        return expr

    def parse_block(self) -> Block:
        block = self._parse_block()
        self._expect_end()
        return block

    def _expect_end(self) -> None:
        token = self._peek()
        if token.kind != "EOF":
            raise WeightSyntaxError(f"Unexpected token '{token.value}'", token.location)

    def _parse_expr(self, allow_block: bool = True) -> Node:
        return self._parse_or(allow_block)

    def _parse_or(self, allow_block: bool) -> Node:
        expr = self._parse_and(allow_block)
        while self._at("||"):
            token = self._consume()
            expr = Binary("||", expr, self._parse_and(allow_block), location=token.location)
        return expr

    def _parse_and(self, allow_block: bool) -> Node:
        expr = self._parse_comparison(allow_block)
        while self._at("&&"):
            token = self._consume()
            expr = Binary("&&", expr, self._parse_comparison(allow_block), location=token.location)
        return expr

    def _parse_comparison(self, allow_block: bool) -> Node:
        expr = self._parse_additive(allow_block)
        if self._peek().kind in _COMPARISONS:
            token = self._consume()
            expr = Binary(token.kind, expr, self._parse_additive(allow_block), location=token.location)
        return expr

    def _parse_additive(self, allow_block: bool) -> Node:
        expr = self._parse_multiplicative(allow_block)
        while self._peek().kind in ("+", "-"):
            token = self._consume()
            expr = Binary(token.kind, expr, self._parse_multiplicative(allow_block), location=token.location)
        return expr

    def _parse_multiplicative(self, allow_block: bool) -> Node:
        expr = self._parse_cast(allow_block)
        while self._peek().kind in ("*", "/", "%"):
            token = self._consume()
            expr = Binary(token.kind, expr, self._parse_cast(allow_block), location=token.location)
        return expr

    def _parse_cast(self, allow_block: bool) -> Node:
        expr = self._parse_unary(allow_block)
        while self._at_keyword("as"):
            token = self._consume()
            expr = Cast(expr, self._parse_type(), location=token.location)
        return expr

    def _parse_unary(self, allow_block: bool) -> Node:
        token = self._peek()
        if token.kind in ("-", "!", "&", "*"):
            self._consume()
            if token.kind == "&" and self._at_keyword("mut"):
                self._consume()
            return Unary(token.kind, self._parse_unary(allow_block), location=token.location)
        if self._at_keyword("return"):
            self._consume()
            return Unary("return", self._parse_expr(allow_block), location=token.location)
        return self._parse_postfix(allow_block)

    def _parse_postfix(self, allow_block: bool) -> Node:
        expr = self._parse_primary(allow_block)
        while True:
            token = self._peek()
            if token.kind == ".":
                self._consume()
                name = self._peek()
                if name.kind not in ("IDENT", "INT"):
                    raise WeightSyntaxError(f"Expected a method or field name, got '{name.value}'", name.location)
                self._consume()
                if self._at("::"):
                    self._consume()
                    self._skip_generics()
                if self._at("("):
                    expr = MethodCall(expr, name.value, self._parse_args(), location=name.location)
                else:
                    expr = Field(expr, name.value, location=name.location)
            elif token.kind == "(":
                expr = Call(expr, self._parse_args(), location=token.location)
            elif token.kind == "?":
                raise WeightSyntaxError("The '?' operator is not supported", token.location)
            else:
                return expr

    def _parse_args(self) -> tuple[Node, ...]:
        self._consume("(")
        args: list[Node] = []
        while not self._at(")"):
            args.append(self._parse_expr())
            if not self._at(")"):
                self._consume(",")
        self._consume(")")
        return tuple(args)

    def _parse_primary(self, allow_block: bool) -> Node:
        token = self._peek()
        if token.kind == "INT":
            self._consume()
            match = _NUMBER.fullmatch(token.value)
            return IntLiteral(_int_value(match.group("digits")), match.group("suffix"), location=token.location)
        if token.kind == "FLOAT":
            self._consume()
            match = _NUMBER.fullmatch(token.value)
            text = match.group("digits") + (match.group("fraction") or "")
            return FloatLiteral(float(text.replace("_", "")), location=token.location)
        if token.kind == "STR":
            self._consume()
            return StrLiteral(token.value, location=token.location)
        if token.kind in ("IDENT", "<"):
            return self._parse_path()
        if token.kind == "(":
            self._consume()
            expr = self._parse_expr()
            self._consume(")")
            return Paren(expr, location=token.location)
        if token.kind == "{" and allow_block:
            return self._parse_block()
        if token.kind == "KEYWORD":
            if token.value == "if":
                return self._parse_if()
            if token.value in ("loop", "while", "for"):
                return self._parse_loop()
        raise WeightSyntaxError(f"Unexpected token '{token.value}'", token.location)

    def _parse_path(self) -> Node:
        start = self._peek()
        segments: list[str] = []
        if start.kind == "<":
            segments.append(self._qualified_self())
        else:
            segments.append(self._consume("IDENT").value)
        while self._at("::"):
            self._consume()
            if self._at("<"):
                self._skip_generics()
                continue
            segments.append(self._consume("IDENT").value)
        if self._at("!") and len(segments) == 1:
            self._consume()
            self._skip_delimited()
            return Call(Path((segments[0] + "!",), location=start.location), (), location=start.location)
        return Path(tuple(segments), location=start.location)

    def _qualified_self(self) -> str:
        """Consume ``<T as Config>`` and return it as a single path segment."""
        start = self._consume("<")
        words: list[str] = []
        depth = 1
        while depth:
            token = self._peek()
            if token.kind == "EOF":
                raise WeightSyntaxError("Unterminated qualified path", start.location)
            self._consume()
            if token.kind == "<":
                depth += 1
            elif token.kind == ">":
                depth -= 1
                if not depth:
                    break
            words.append(token.value)
        return "<" + " ".join(words).replace(" :: ", "::") + ">"

    def _skip_generics(self) -> None:
        start = self._consume("<")
        depth = 1
        while depth:
            token = self._peek()
            if token.kind == "EOF":
                raise WeightSyntaxError("Unterminated generic arguments", start.location)
            self._consume()
            if token.kind == "<":
                depth += 1
            elif token.kind == ">":
                depth -= 1

    def _skip_delimited(self) -> None:
        pairs = {"(": ")", "[": "]", "{": "}"}
        opening = self._peek()
        if opening.kind not in pairs:
            raise WeightSyntaxError("Expected a macro delimiter", opening.location)
        stack = [pairs[opening.kind]]
        self._consume()
        while stack:
            token = self._consume()
            if token.kind in pairs:
                stack.append(pairs[token.kind])
            elif token.kind == stack[-1]:
                stack.pop()

    def _parse_type(self) -> str:
        token = self._peek()
        if token.kind == "<":
            name = self._qualified_self()
        else:
            name = self._consume("IDENT").value
        while self._at("::"):
            self._consume()
            name = self._consume("IDENT").value
        if self._at("<"):
            self._skip_generics()
        return name

    def _parse_block(self) -> Block:
        start = self._consume("{")
        statements: list[Node] = []
        tail: Node | None = None
        while not self._at("}"):
            if self._at("#"):
                self._consume()
                self._skip_delimited()
                continue
            if self._at(";"):
                self._consume()
                continue
            if self._at_keyword("let"):
                statements.append(self._parse_let())
                continue
            expr = self._parse_expr()
            if self._at(";"):
                self._consume()
                statements.append(expr)
            elif self._at("}"):
                tail = expr
            elif isinstance(expr, (Block, If, Loop)):
                statements.append(expr)
            else:
                token = self._peek()
                raise WeightSyntaxError(f"Expected ';' or '}}', got '{token.value}'", token.location)
        self._consume("}")
        return Block(tuple(statements), tail, location=start.location)

    def _parse_let(self) -> Let:
        start = self._consume_keyword("let")
        if self._at_keyword("mut"):
            self._consume()
        name = self._consume("IDENT").value
        if self._at(":"):
            self._consume()
            self._parse_type()
        value = None
        if self._at("="):
            self._consume()
            value = self._parse_expr()
        self._consume(";")
        return Let(name, value, location=start.location)

    def _parse_if(self) -> If:
        start = self._consume_keyword("if")
        condition = self._parse_expr(allow_block=False)
        then = self._parse_block()
        orelse: Node | None = None
        if self._at_keyword("else"):
            self._consume()
            orelse = self._parse_if() if self._at_keyword("if") else self._parse_block()
        return If(condition, then, orelse, location=start.location)

    def _parse_loop(self) -> Loop:
        start = self._consume()
        if start.value == "while":
            self._parse_expr(allow_block=False)
        elif start.value == "for":
            # pattern and iterator are never evaluated
            while not self._at("{"):
                self._consume()
        return Loop(start.value, self._parse_block(), location=start.location)


def parse_expression(text: str, start: Location = Location()) -> Node:
    """Parse a single expression such as ``Weight::from_parts(1, 2).saturating_add(..)``."""
    return _Parser(_tokenize(text, start)).parse_expression()


def parse_block(text: str, start: Location = Location()) -> Block:
    """Parse a braced function body."""
    return _Parser(_tokenize(text, start)).parse_block()
