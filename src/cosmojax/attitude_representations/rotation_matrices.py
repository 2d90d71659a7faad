"""Elementary frame rotations.

Both matrices follow the passive convention: ``R(angle) @ v`` gives the
components of a fixed vector ``v`` in axes turned counter-clockwise by
*angle* about the named axis.  They are the building blocks of the IAU
pole/prime-meridian sequence ``Rz(W) Rx(90 - dec) Rz(90 + ra)``.

References:
    1. O. Montenbruck and E. Gill, *Satellite Orbits: Models, Methods and
       Applications*, 2012, p. 27.
"""

import jax.numpy as jnp

from cosmojax.utils import to_radians


def Rx(angle: float, use_degrees: bool = False) -> jnp.ndarray:
    """Passive rotation about the x-axis.

    Args:
        angle (float): Rotation angle.
        use_degrees (bool): Interpret *angle* in degrees. Default: ``False``

    Returns:
        jnp.ndarray: 3x3 rotation matrix.
    """
    angle = to_radians(angle, use_degrees)
    c, s = jnp.cos(angle), jnp.sin(angle)
    return jnp.array([[1.0, 0.0, 0.0],
                      [0.0, c, s],
                      [0.0, -s, c]])


def Rz(angle: float, use_degrees: bool = False) -> jnp.ndarray:
    """Passive rotation about the z-axis; see :func:`Rx`."""
    angle = to_radians(angle, use_degrees)
    c, s = jnp.cos(angle), jnp.sin(angle)
    return jnp.array([[c, s, 0.0],
                      [-s, c, 0.0],
                      [0.0, 0.0, 1.0]])
