"""Rotation laws and their evaluation.

Parses the symbolic right ascension, declination and prime-meridian
formulas of a body (with auxiliary context terms) and evaluates them at
epochs.

Example::

    from cosmojax.rotation_model import RotationModel, evaluate

    model = RotationModel.from_formulas(
        "-0.641*T", "90.0 - 0.557*T", "190.147 + 360.9856235*d"
    )
    ra, dec, w = evaluate(model, Epoch(2020, 1, 1))
"""

from cosmojax.rotation_model._evaluate import (
    RotationAngles,
    days_since_reference,
    evaluate,
    evaluate_batch,
    evaluate_days,
    evaluate_series,
)
from cosmojax.rotation_model._expression import AngleExpression, parse_expression
from cosmojax.rotation_model._model import RotationModel
from cosmojax.rotation_model._parser import tokenize
from cosmojax.rotation_model._types import RESERVED_SYMBOLS, AngleUnit

__all__ = [
    "AngleExpression",
    "AngleUnit",
    "RESERVED_SYMBOLS",
    "RotationAngles",
    "RotationModel",
    "days_since_reference",
    "evaluate",
    "evaluate_batch",
    "evaluate_days",
    "evaluate_series",
    "parse_expression",
    "tokenize",
]
