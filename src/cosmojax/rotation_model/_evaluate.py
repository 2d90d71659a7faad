"""Evaluation of rotation models at epochs.

All angles returned here are in radians.  :func:`evaluate_days` is the
traceable core; the epoch-based wrappers compute elapsed days from the
model's reference epoch and delegate to it.
"""

from __future__ import annotations

import logging
import threading
from typing import NamedTuple, Sequence

import jax
import jax.numpy as jnp
from jax.typing import ArrayLike

from cosmojax.config import get_dtype
from cosmojax.constants import DAYS_PER_JULIAN_CENTURY
from cosmojax.epoch import Epoch
from cosmojax.errors import OperationCancelled
from cosmojax.rotation_model._expression import check_finite, evaluate_node
from cosmojax.rotation_model._model import RotationModel
from cosmojax.rotation_model._types import AngleUnit
from cosmojax.utils import to_radians

logger = logging.getLogger(__name__)


class RotationAngles(NamedTuple):
    """Pole right ascension, pole declination and prime meridian, in radians."""

    right_asc: jax.Array
    declin: jax.Array
    w: jax.Array


def days_since_reference(model: RotationModel, epoch: Epoch) -> jax.Array:
    """Return the elapsed days ``d`` from *model*'s reference epoch to *epoch*."""
    reference = model.reference_epoch if model.reference_epoch is not None else Epoch.j2000()
    return epoch.days_since(reference)


def evaluate_days(model: RotationModel, d: ArrayLike) -> RotationAngles:
    """Evaluate *model* at ``d`` elapsed days since its reference epoch.

    Compatible with ``jax.jit``, ``jax.vmap`` and ``jax.jacfwd`` over *d*.

    Args:
        model (RotationModel): Rotation law.
        d (ArrayLike): Elapsed days (TT) since the model's reference epoch.

    Returns:
        RotationAngles: ``(right_asc, declin, w)`` in radians.

    Raises:
        EvaluationError: If any term is non-finite (concrete inputs only).
    """
    d = jnp.asarray(d, dtype=get_dtype())
    env = {"d": d, "T": d / DAYS_PER_JULIAN_CENTURY}
    unit = model.angle_unit
    context = model.context_map
    for name in model.evaluation_order:
        value = evaluate_node(context[name].root, env, unit)
        check_finite(value, f"context symbol '{name}'")
        env[name] = value

    use_degrees = unit is AngleUnit.DEGREES
    angles = []
    for label in ("right_asc", "declin", "w"):
        value = evaluate_node(getattr(model, label).root, env, unit)
        check_finite(value, label)
        angles.append(to_radians(value, use_degrees))
    return RotationAngles(*angles)


def evaluate(model: RotationModel, epoch: Epoch) -> RotationAngles:
    """Evaluate *model* at *epoch*.

    Args:
        model (RotationModel): Rotation law.
        epoch (Epoch): Evaluation instant.

    Returns:
        RotationAngles: ``(right_asc, declin, w)`` in radians.
    """
    return evaluate_days(model, days_since_reference(model, epoch))


def _as_days(model: RotationModel, epochs: Sequence[Epoch] | ArrayLike) -> jax.Array:
    if isinstance(epochs, Epoch):
        epochs = [epochs]
    if isinstance(epochs, (list, tuple)) and epochs and isinstance(epochs[0], Epoch):
        return jnp.stack([days_since_reference(model, e) for e in epochs])
    return jnp.atleast_1d(jnp.asarray(epochs, dtype=get_dtype()))


def evaluate_batch(model: RotationModel, epochs: Sequence[Epoch] | ArrayLike) -> RotationAngles:
    """Evaluate *model* over many instants at once with ``jax.vmap``.

    Args:
        model (RotationModel): Rotation law.
        epochs: Sequence of :class:`Epoch`, or an array of elapsed days.

    Returns:
        RotationAngles: Each field an array of shape ``(N,)``.

    Raises:
        EvaluationError: If any angle is non-finite.
    """
    days = _as_days(model, epochs)
    angles = jax.vmap(lambda d: evaluate_days(model, d))(days)
    for label, value in zip(RotationAngles._fields, angles):
        check_finite(value, label)
    return angles


def evaluate_series(
    model: RotationModel,
    epochs: Sequence[Epoch],
    cancel: threading.Event | None = None,
) -> list[RotationAngles]:
    """Evaluate *model* at each epoch in turn.

    *cancel* is checked before each evaluation.

    Args:
        model (RotationModel): Rotation law.
        epochs (Sequence[Epoch]): Evaluation instants.
        cancel (threading.Event | None): Cancellation signal.

    Returns:
        list[RotationAngles]: One entry per epoch.

    Raises:
        OperationCancelled: If *cancel* is set before the sweep finishes.
    """
    results: list[RotationAngles] = []
    for epoch in epochs:
        if cancel is not None and cancel.is_set():
            logger.debug("Rotation sweep cancelled after %d of %d epochs", len(results), len(epochs))
            raise OperationCancelled(len(results))
        results.append(evaluate(model, epoch))
    return results
