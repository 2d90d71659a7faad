"""Parsed rotation-law formulas and their evaluation.

An :class:`AngleExpression` couples the source text of a formula with its
syntax tree.  Evaluation walks the tree with ``jax.numpy`` operations, so
an expression can be evaluated on scalars, on batches of elapsed days, or
under ``jax.jit`` / ``jax.vmap`` / ``jax.jacfwd``.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Mapping

import jax
import jax.numpy as jnp
from jax.typing import ArrayLike

from cosmojax.errors import EvaluationError, ParseError, UnknownSymbol
from cosmojax.rotation_model._parser import parse_tree
from cosmojax.rotation_model._types import (
    AngleUnit,
    BinaryOp,
    Literal,
    Node,
    Symbol,
    UnaryOp,
    free_symbols,
)
from cosmojax.utils import to_radians


def evaluate_node(node: Node, env: Mapping[str, ArrayLike], angle_unit: AngleUnit) -> jax.Array:
    """Evaluate the tree rooted at *node* against *env*.

    ``sin`` and ``cos`` arguments are interpreted in *angle_unit*.

    Raises:
        UnknownSymbol: If a symbol in the tree is missing from *env*.
    """
    if isinstance(node, Literal):
        return jnp.asarray(node.value)
    if isinstance(node, Symbol):
        try:
            return jnp.asarray(env[node.name])
        except KeyError:
            raise UnknownSymbol(node.name) from None
    if isinstance(node, UnaryOp):
        value = evaluate_node(node.operand, env, angle_unit)
        if node.op == "neg":
            return -value
        value = to_radians(value, angle_unit is AngleUnit.DEGREES)
        return jnp.sin(value) if node.op == "sin" else jnp.cos(value)

    left = evaluate_node(node.left, env, angle_unit)
    right = evaluate_node(node.right, env, angle_unit)
    if node.op == "+":
        return left + right
    if node.op == "-":
        return left - right
    if node.op == "*":
        return left * right
    return left / right


def check_finite(value: jax.Array, what: str) -> None:
    """Raise :class:`EvaluationError` if *value* holds NaN or infinity.

    The check needs concrete values, so it is a no-op while tracing.
    """
    try:
        finite = bool(jnp.all(jnp.isfinite(value)))
    except jax.errors.ConcretizationTypeError:
        return
    if not finite:
        raise EvaluationError(f"{what} evaluated to a non-finite value")


@dataclass(frozen=True)
class AngleExpression:
    """Immutable parsed formula.

    Attributes:
        text: Source text, as given.
        root: Root node of the syntax tree.
        symbols: Names of every symbol the formula references.
    """

    text: str
    root: Node
    symbols: frozenset[str]

    def evaluate(
        self,
        env: Mapping[str, ArrayLike],
        angle_unit: AngleUnit | str = AngleUnit.DEGREES,
    ) -> jax.Array:
        """Evaluate against a symbol environment.

        Args:
            env: Mapping of symbol name to value, e.g. ``{"d": 1.0, "T": 1/36525}``.
            angle_unit: Unit of ``sin``/``cos`` arguments.

        Returns:
            The formula's value, in the formula's own unit.

        Raises:
            UnknownSymbol: If the formula references a symbol missing from *env*.
            EvaluationError: If the result is NaN or infinite.
        """
        missing = sorted(self.symbols.difference(env))
        if missing:
            raise UnknownSymbol(missing[0], f"unknown symbol '{missing[0]}' in {self.text!r}")
        value = evaluate_node(self.root, env, AngleUnit.parse(angle_unit))
        check_finite(value, repr(self.text))
        return value

    def __str__(self) -> str:
        return self.text


def parse_expression(text: str) -> AngleExpression:
    """Parse a formula, returning a cached :class:`AngleExpression`.

    Identical source text yields the same object.

    Raises:
        ParseError: If *text* is not a string or is malformed.
    """
    if not isinstance(text, str):
        raise ParseError(f"formula must be a string, got {type(text).__name__}", repr(text))
    return _parse_cached(text)


@functools.lru_cache(maxsize=1024)
def _parse_cached(text: str) -> AngleExpression:
    root = parse_tree(text)
    return AngleExpression(text=text, root=root, symbols=free_symbols(root))
