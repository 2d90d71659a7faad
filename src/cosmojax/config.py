"""Module-wide numeric configuration.

Provides ``set_dtype`` and ``get_dtype`` to control the float dtype used
throughout cosmojax, and ``set_max_frame_depth`` / ``get_max_frame_depth``
to bound the frame-graph walks performed by
:class:`~cosmojax.frames.FrameCatalog`.

The default dtype is ``jnp.float64``: prime-meridian angles grow by
hundreds of degrees per day, so single precision loses arc-minutes within
a few years of the reference epoch.  Selecting ``jnp.float64`` (including
the default, at import time) enables JAX's 64-bit mode
(``jax_enable_x64``).

Call ``set_dtype`` **before** any JIT compilation.  Under JIT,
``get_dtype()`` runs during tracing and its result is baked into the
compiled program.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp

_VALID_DTYPES = (jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64)

_DEFAULT_MAX_FRAME_DEPTH = 16

_dtype = jnp.float64
_max_frame_depth = _DEFAULT_MAX_FRAME_DEPTH

jax.config.update("jax_enable_x64", True)


def set_dtype(dtype) -> None:
    """Set the module-wide float dtype for cosmojax.

    If *dtype* is ``jnp.float64``, JAX's 64-bit mode is enabled via
    ``jax.config.update("jax_enable_x64", True)``.

    Args:
        dtype: One of ``jnp.float16``, ``jnp.bfloat16``, ``jnp.float32``,
            or ``jnp.float64``.

    Raises:
        ValueError: If *dtype* is not a supported float type.
    """
    global _dtype
    if dtype not in _VALID_DTYPES:
        raise ValueError(
            f"Unsupported dtype {dtype}. Must be one of: "
            f"jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64"
        )
    if dtype == jnp.float64:
        jax.config.update("jax_enable_x64", True)
    _dtype = dtype


def get_dtype():
    """Return the current module-wide float dtype.

    Returns:
        The active float dtype (default ``jnp.float64``).
    """
    return _dtype


def set_max_frame_depth(depth: int) -> None:
    """Set the default maximum number of hops in a frame-graph chain.

    Catalogs created afterwards without an explicit ``max_depth`` use this
    value.  Chains longer than the limit are reported as
    :class:`~cosmojax.errors.CyclicFrameGraph`.

    Args:
        depth: Maximum number of parent (or inherit) hops, at least 1.

    Raises:
        ValueError: If *depth* is not a positive integer.
    """
    global _max_frame_depth
    if isinstance(depth, bool) or not isinstance(depth, int) or depth < 1:
        raise ValueError(f"max frame depth must be a positive integer, got {depth!r}")
    _max_frame_depth = depth


def get_max_frame_depth() -> int:
    """Return the default maximum frame-graph depth (default 16)."""
    return _max_frame_depth


def get_epoch_eq_tolerance() -> float:
    """Return the dtype-adaptive tolerance for Epoch equality comparisons.

    - ``float64``:  1e-9 s
    - ``float32``:  1e-3 s
    - ``float16`` / ``bfloat16``: 0.1 s

    Returns:
        float: Tolerance in seconds.
    """
    if _dtype == jnp.float64:
        return 1e-9
    if _dtype == jnp.float32:
        return 1e-3
    return 0.1


def get_rotation_tolerance() -> float:
    """Return the dtype-adaptive tolerance for rotation-matrix checks.

    - ``float64``:  1e-9
    - ``float32``:  1e-5
    - ``float16`` / ``bfloat16``: 1e-2

    Returns:
        float: Absolute tolerance for orthonormality and determinant checks.
    """
    if _dtype == jnp.float64:
        return 1e-9
    if _dtype == jnp.float32:
        return 1e-5
    return 1e-2
