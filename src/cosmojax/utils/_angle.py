"""Degree/radian conversion for rotation-law formulas and elementary rotations.

Formulas in a :class:`~cosmojax.rotation_model.RotationModel` may be
written in degrees or radians; these helpers follow the ``use_degrees``
flag convention and stay traceable under ``jax.jit``.
"""

from jax import Array
import jax.numpy as jnp
from jax.typing import ArrayLike

from cosmojax.constants import DEG2RAD


def to_radians(angle: ArrayLike, use_degrees: bool) -> Array:
    """Return *angle* in radians, scaling by ``DEG2RAD`` when ``use_degrees`` is set.

    Traceable: *use_degrees* may be a traced boolean.
    """
    angle = jnp.asarray(angle)
    return jnp.where(use_degrees, angle * DEG2RAD, angle)
