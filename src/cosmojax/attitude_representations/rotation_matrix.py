"""Rotation matrix (DCM) between two frames.

Provides the ``RotationMatrix`` class returned by
:class:`~cosmojax.frames.FrameTransformer`: a 3x3 orthogonal matrix with
determinant +1 (SO(3)) mapping vector components expressed in one frame
into another.

The constructor validates SO(3) membership. The ``_from_internal``
classmethod bypasses validation for products of already-valid matrices
and for pytree unflatten.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from jax.typing import ArrayLike

from cosmojax.config import get_dtype, get_rotation_tolerance


def _is_so3(matrix: jax.Array, tol: float) -> bool:
    """Check orthogonality (R^T R ~ I) and det ~ +1 within *tol*."""
    rtrt = matrix.T @ matrix
    orth_err = jnp.max(jnp.abs(rtrt - jnp.eye(3)))
    det = jnp.linalg.det(matrix)
    return bool(orth_err < tol and jnp.abs(det - 1.0) < tol)


class RotationMatrix:
    """3x3 rotation matrix (Direction Cosine Matrix).

    Multiplication composes (``a * b`` applies ``b`` first) or, with a
    3-element array, rotates a vector.  Registered as a JAX pytree with
    the matrix as the sole leaf, so instances pass through ``jax.jit`` and
    ``jax.vmap``.

    Args:
        matrix (ArrayLike): Array-like of shape ``(3, 3)``.

    Raises:
        ValueError: If *matrix* is not a proper rotation matrix.
    """

    __slots__ = ("_data",)

    def __init__(self, matrix: ArrayLike) -> None:
        data = jnp.asarray(matrix, dtype=get_dtype())
        if data.shape != (3, 3):
            raise ValueError(f"Rotation matrix must have shape (3, 3), got {data.shape}")
        if not _is_so3(data, get_rotation_tolerance()):
            raise ValueError(
                f"Matrix is not a proper rotation matrix. det={float(jnp.linalg.det(data)):.6f}"
            )
        self._data = data

    @classmethod
    def _from_internal(cls, data: jax.Array) -> RotationMatrix:
        obj = object.__new__(cls)
        obj._data = data
        return obj

    @classmethod
    def identity(cls) -> RotationMatrix:
        """Return the identity rotation."""
        return cls._from_internal(jnp.eye(3, dtype=get_dtype()))

    def to_matrix(self) -> jax.Array:
        """Return the underlying 3x3 array.

        Returns:
            jnp.ndarray: Array of shape ``(3, 3)``.
        """
        return self._data

    def transpose(self) -> RotationMatrix:
        """Return the inverse rotation (the transpose, by orthonormality)."""
        return RotationMatrix._from_internal(self._data.T)

    @property
    def T(self) -> RotationMatrix:
        return self.transpose()

    def determinant(self) -> jax.Array:
        return jnp.linalg.det(self._data)

    def is_valid(self, tol: float | None = None) -> bool:
        """Return ``True`` if the matrix is in SO(3) within *tol*.

        Args:
            tol (float | None): Tolerance; defaults to
                :func:`~cosmojax.config.get_rotation_tolerance`.
        """
        return _is_so3(self._data, get_rotation_tolerance() if tol is None else tol)

    def apply(self, vector: ArrayLike) -> jax.Array:
        """Rotate a 3-element vector."""
        return self._data @ jnp.asarray(vector, dtype=get_dtype())

    # Operators

    def __mul__(self, other: RotationMatrix | jax.Array) -> RotationMatrix | jax.Array:
        """Matrix-matrix or matrix-vector multiplication.

        Args:
            other (RotationMatrix | jax.Array): ``RotationMatrix`` or 3-element array.

        Returns:
            RotationMatrix | jax.Array: Result of multiplication.
        """
        if isinstance(other, RotationMatrix):
            return RotationMatrix._from_internal(self._data @ other._data)
        v = jnp.asarray(other)
        if v.shape == (3,):
            return self._data @ v
        return NotImplemented

    def __matmul__(self, other: RotationMatrix | jax.Array) -> RotationMatrix | jax.Array:
        return self.__mul__(other)

    def __getitem__(self, idx: int | tuple[int, int]) -> jax.Array:
        return self._data[idx]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RotationMatrix):
            return NotImplemented
        return bool(jnp.all(jnp.abs(self._data - other._data) < get_rotation_tolerance()))

    def __ne__(self, other: object) -> bool:
        if not isinstance(other, RotationMatrix):
            return NotImplemented
        return not self.__eq__(other)

    __hash__ = None

    def __str__(self) -> str:
        d = self._data
        return (
            f"RotationMatrix(\n"
            f"  [{float(d[0, 0]):10.6f} {float(d[0, 1]):10.6f} {float(d[0, 2]):10.6f}]\n"
            f"  [{float(d[1, 0]):10.6f} {float(d[1, 1]):10.6f} {float(d[1, 2]):10.6f}]\n"
            f"  [{float(d[2, 0]):10.6f} {float(d[2, 1]):10.6f} {float(d[2, 2]):10.6f}])"
        )

    def __repr__(self) -> str:
        return self.__str__()


jax.tree_util.register_pytree_node(
    RotationMatrix,
    lambda r: ((r._data,), None),
    lambda _, children: RotationMatrix._from_internal(children[0]),
)
