"""Syntax-tree node types for rotation-law formulas.

A formula such as ``"38.3213 + 13.17635815*d - 1.4e-12*d*d"`` is parsed
into a tree of the four immutable node types below.  Nodes are frozen
dataclasses, so trees are hashable and can be shared between models.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union

from cosmojax.errors import ParseError

# Elapsed days and Julian centuries since the model's reference epoch
RESERVED_SYMBOLS = frozenset({"d", "T"})

# Unary functions understood by the parser
FUNCTIONS = frozenset({"sin", "cos"})

BINARY_OPERATORS = frozenset({"+", "-", "*", "/"})


class AngleUnit(enum.Enum):
    """Unit of the raw angles and trigonometric arguments of a rotation law.

    Attributes:
        DEGREES: Formulas produce, and ``sin``/``cos`` consume, degrees.
        RADIANS: Formulas produce, and ``sin``/``cos`` consume, radians.
    """

    DEGREES = "degrees"
    RADIANS = "radians"

    @classmethod
    def parse(cls, value: str | AngleUnit | None) -> AngleUnit:
        """Return the unit named by *value*; ``None`` means degrees.

        Raises:
            ParseError: If *value* is not ``"degrees"`` or ``"radians"``.
        """
        if value is None:
            return cls.DEGREES
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ParseError(
                f"angle_unit must be 'degrees' or 'radians', got {value!r}", str(value)
            ) from None


@dataclass(frozen=True)
class Literal:
    """Numeric constant."""

    value: float


@dataclass(frozen=True)
class Symbol:
    """Reference to ``d``, ``T`` or a context symbol."""

    name: str


@dataclass(frozen=True)
class BinaryOp:
    """Arithmetic ``left <op> right`` with *op* one of ``+ - * /``."""

    op: str
    left: Node
    right: Node


@dataclass(frozen=True)
class UnaryOp:
    """Negation (``op == "neg"``) or a function from :data:`FUNCTIONS`."""

    op: str
    operand: Node


Node = Union[Literal, Symbol, BinaryOp, UnaryOp]


def free_symbols(node: Node) -> frozenset[str]:
    """Return the names of every :class:`Symbol` in the tree rooted at *node*."""
    if isinstance(node, Symbol):
        return frozenset({node.name})
    if isinstance(node, BinaryOp):
        return free_symbols(node.left) | free_symbols(node.right)
    if isinstance(node, UnaryOp):
        return free_symbols(node.operand)
    return frozenset()
