"""Rotation primitives.

Provides the elementary (passive) rotations :func:`Rx` and :func:`Rz` and
the :class:`RotationMatrix` DCM type used for frame-to-frame rotations.
"""

from .rotation_matrices import (
    Rx,
    Rz,
)

from .rotation_matrix import RotationMatrix

__all__ = [
    "Rx",
    "Rz",
    "RotationMatrix",
]
