"""Recursive-descent parser for rotation-law formulas.

Grammar (whitespace is insignificant)::

    expression := term (("+" | "-") term)*
    term       := factor (("*" | "/") factor)*
    factor     := ("+" | "-") factor | primary
    primary    := NUMBER
                | FUNCTION "(" expression ")"
                | NAME
                | "(" expression ")"

``NUMBER`` accepts integer, decimal and exponent forms (``12``, ``0.5``,
``.5``, ``1.4e-12``).  ``FUNCTION`` is ``sin`` or ``cos``.  There is no
implicit multiplication: ``4850.4046T`` is rejected.  Nesting is limited to
:data:`MAX_NESTING` levels.
"""

from __future__ import annotations

import re
from typing import NamedTuple

from cosmojax.errors import ParseError
from cosmojax.rotation_model._types import (
    FUNCTIONS,
    BinaryOp,
    Literal,
    Node,
    Symbol,
    UnaryOp,
)

# Deepest allowed nesting of parentheses, calls and unary signs
MAX_NESTING = 100

_TOKEN_RE = re.compile(
    r"""
    (?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
  | (?P<name>[A-Za-z_][A-Za-z_0-9]*)
  | (?P<op>[-+*/()])
  | (?P<space>\s+)
    """,
    re.VERBOSE,
)


class _Token(NamedTuple):
    kind: str  # "number", "name", "op" or "end"
    text: str
    position: int


def tokenize(text: str) -> list[_Token]:
    """Split *text* into tokens, terminated by an ``"end"`` token.

    Raises:
        ParseError: On a character that starts no token.
    """
    tokens: list[_Token] = []
    pos = 0
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if m is None:
            raise ParseError(
                f"unexpected character {text[pos]!r} at position {pos} in {text!r}",
                text,
                pos,
            )
        kind = m.lastgroup
        if kind != "space":
            tokens.append(_Token(kind, m.group(), pos))
        pos = m.end()
    tokens.append(_Token("end", "", len(text)))
    return tokens


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = tokenize(text)
        self.index = 0
        self.depth = 0

    @property
    def current(self) -> _Token:
        return self.tokens[self.index]

    def _advance(self) -> _Token:
        token = self.tokens[self.index]
        self.index += 1
        return token

    def _error(self, message: str, token: _Token | None = None) -> ParseError:
        token = token or self.current
        where = "end of input" if token.kind == "end" else f"{token.text!r}"
        return ParseError(
            f"{message} at position {token.position} ({where}) in {self.text!r}",
            self.text,
            token.position,
        )

    def _expect(self, text: str) -> None:
        if self.current.kind != "op" or self.current.text != text:
            raise self._error(f"expected {text!r}")
        self._advance()

    def parse(self) -> Node:
        if self.current.kind == "end":
            raise self._error("empty formula")
        node = self._expression()
        if self.current.kind != "end":
            raise self._error("unexpected token")
        return node

    def _expression(self) -> Node:
        node = self._term()
        while self.current.kind == "op" and self.current.text in "+-":
            op = self._advance().text
            node = BinaryOp(op, node, self._term())
        return node

    def _term(self) -> Node:
        node = self._factor()
        while self.current.kind == "op" and self.current.text in "*/":
            op = self._advance().text
            node = BinaryOp(op, node, self._factor())
        return node

    def _factor(self) -> Node:
        token = self.current
        if self.depth >= MAX_NESTING:
            raise self._error(f"formula nests deeper than {MAX_NESTING} levels", token)
        self.depth += 1
        try:
            return self._signed(token)
        finally:
            self.depth -= 1

    def _signed(self, token: _Token) -> Node:
        if token.kind == "op" and token.text in "+-":
            self._advance()
            operand = self._factor()
            if token.text == "+":
                return operand
            if isinstance(operand, Literal):
                return Literal(-operand.value)
            return UnaryOp("neg", operand)
        return self._primary()

    def _primary(self) -> Node:
        token = self.current
        if token.kind == "number":
            self._advance()
            return Literal(float(token.text))

        if token.kind == "name":
            self._advance()
            is_call = self.current.kind == "op" and self.current.text == "("
            if token.text in FUNCTIONS:
                if not is_call:
                    raise self._error(f"function '{token.text}' requires an argument")
                self._advance()
                argument = self._expression()
                self._expect(")")
                return UnaryOp(token.text, argument)
            if is_call:
                raise self._error(f"unknown function '{token.text}'", token)
            return Symbol(token.text)

        if token.kind == "op" and token.text == "(":
            self._advance()
            node = self._expression()
            self._expect(")")
            return node

        raise self._error("expected a number, symbol or '('")


def parse_tree(text: str) -> Node:
    """Parse *text* into a syntax tree.

    Args:
        text: Formula source.

    Returns:
        Root node of the tree.

    Raises:
        ParseError: If *text* is not a well-formed formula.
    """
    if not isinstance(text, str):
        raise ParseError(f"formula must be a string, got {type(text).__name__}", repr(text))
    return _Parser(text).parse()
