"""Rotation laws for body-fixed frames.

A :class:`RotationModel` holds the right ascension, declination and
prime-meridian formulas of a body together with the auxiliary context
terms they reference (e.g. the nutation/precession angles ``E1``..``E13``
of the Moon).  Models are validated when they are built: every symbol
must be ``d``, ``T`` or a context name, and context terms must not depend
on each other circularly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from cosmojax.epoch import Epoch
from cosmojax.errors import EvaluationError, ParseError, UnknownSymbol
from cosmojax.rotation_model._expression import AngleExpression, parse_expression
from cosmojax.rotation_model._types import RESERVED_SYMBOLS, AngleUnit

logger = logging.getLogger(__name__)

_PRIMARY_FIELDS = ("right_asc", "declin", "w")


def _order_context(context: tuple[tuple[str, AngleExpression], ...]) -> tuple[str, ...]:
    """Return context names in dependency order, declaration order breaking ties.

    Raises:
        EvaluationError: If the context terms reference each other in a cycle.
    """
    names = [name for name, _ in context]
    deps = {name: expr.symbols.intersection(names) for name, expr in context}

    order: list[str] = []
    done: set[str] = set()
    while len(order) < len(names):
        for name in names:
            if name not in done and deps[name] <= done:
                order.append(name)
                done.add(name)
                break
        else:
            pending = [n for n in names if n not in done]
            raise EvaluationError(
                f"circular dependency among context symbols: {', '.join(pending)}"
            )
    return tuple(order)


@dataclass(frozen=True)
class RotationModel:
    """Parametric orientation law of a body-fixed frame.

    Attributes:
        right_asc: Right ascension of the north pole.
        declin: Declination of the north pole.
        w: Prime-meridian angle.
        angle_unit: Unit the three formulas produce and ``sin``/``cos`` consume.
        context: ``(name, expression)`` pairs of auxiliary terms, in declaration order.
        reference_epoch: Epoch ``d`` and ``T`` are measured from; ``None`` means J2000 TT.
        evaluation_order: Context names sorted so that each term follows its dependencies.

    Raises:
        ParseError: If a context name shadows ``d`` or ``T`` or is declared twice.
        UnknownSymbol: If a formula references an undeclared symbol.
        EvaluationError: If context terms depend on each other circularly.
    """

    right_asc: AngleExpression
    declin: AngleExpression
    w: AngleExpression
    angle_unit: AngleUnit = AngleUnit.DEGREES
    context: tuple[tuple[str, AngleExpression], ...] = ()
    reference_epoch: Epoch | None = None
    evaluation_order: tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "angle_unit", AngleUnit.parse(self.angle_unit))
        object.__setattr__(self, "context", tuple(self.context))

        declared: set[str] = set()
        for name, _ in self.context:
            if name in RESERVED_SYMBOLS:
                raise ParseError(f"context symbol '{name}' shadows a reserved symbol", name)
            if name in declared:
                raise ParseError(f"context symbol '{name}' is declared twice", name)
            declared.add(name)

        known = RESERVED_SYMBOLS | declared
        for label, expr in self._labelled_expressions():
            unknown = sorted(expr.symbols - known)
            if unknown:
                raise UnknownSymbol(
                    unknown[0], f"unknown symbol '{unknown[0]}' in {label} formula {expr.text!r}"
                )

        object.__setattr__(self, "evaluation_order", _order_context(self.context))

    def _labelled_expressions(self):
        for name in _PRIMARY_FIELDS:
            yield name, getattr(self, name)
        for name, expr in self.context:
            yield f"context '{name}'", expr

    @property
    def context_map(self) -> dict[str, AngleExpression]:
        return dict(self.context)

    @classmethod
    def from_formulas(
        cls,
        right_asc: str,
        declin: str,
        w: str,
        angle_unit: str | AngleUnit | None = AngleUnit.DEGREES,
        context: Mapping[str, str] | None = None,
        reference_epoch: Epoch | None = None,
    ) -> RotationModel:
        """Build a model from formula strings.

        Args:
            right_asc: Pole right-ascension formula.
            declin: Pole declination formula.
            w: Prime-meridian formula.
            angle_unit: ``"degrees"`` (default) or ``"radians"``.
            context: Auxiliary symbol name to formula.
            reference_epoch: Origin of ``d``/``T``; defaults to J2000 TT.

        Returns:
            RotationModel: The validated model.
        """
        ctx = tuple((str(name), parse_expression(text)) for name, text in (context or {}).items())
        return cls(
            right_asc=parse_expression(right_asc),
            declin=parse_expression(declin),
            w=parse_expression(w),
            angle_unit=AngleUnit.parse(angle_unit),
            context=ctx,
            reference_epoch=reference_epoch,
        )

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> RotationModel:
        """Build a model from a raw ``rotation`` record.

        The record holds string ``right_asc``, ``declin`` and ``w``, an
        optional ``angle_unit`` (default degrees) and an optional
        ``context`` mapping.

        Raises:
            ParseError: If a formula is missing or malformed.
        """
        missing = [key for key in _PRIMARY_FIELDS if key not in record]
        if missing:
            raise ParseError(f"rotation record is missing {', '.join(repr(k) for k in missing)}")
        model = cls.from_formulas(
            record["right_asc"],
            record["declin"],
            record["w"],
            angle_unit=record.get("angle_unit"),
            context=record.get("context"),
        )
        logger.debug("Parsed rotation model with %d context terms", len(model.context))
        return model
