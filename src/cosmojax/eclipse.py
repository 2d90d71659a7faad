"""Eclipse geometry for a point observer, a spherical occulting body and a
spherical light source.

The light source is projected onto the plane through the eclipsing-body
center normal to the shadow axis (eclipsing body -> light source).  On
that plane the eclipsing body is a disk of radius :math:`R_{eb}` and the
light source a disk of pseudo radius :math:`R'_{ls}` whose center lies
where the observer's line of sight pierces the plane.  The overlap of the
two disks gives the visible fraction of the light source.

All positions must be expressed in one common frame and length unit.
Every branch is selected with ``jnp.where``, so :func:`illumination` is
compatible with ``jax.jit`` and ``jax.vmap``.

References:
    1. O. Montenbruck and E. Gill, *Satellite Orbits: Models, Methods
       and Applications*, 2012, Sec. 3.4.2.
"""

from __future__ import annotations

import enum
import logging
import threading
from typing import NamedTuple

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from cosmojax.config import get_dtype
from cosmojax.errors import OperationCancelled

logger = logging.getLogger(__name__)


class EclipseKind(enum.IntEnum):
    """Illumination classification; the integer value is the array code
    returned by :func:`illumination`."""

    UMBRA = 0
    PENUMBRA = 1
    VISIBLE = 2


class EclipseState(NamedTuple):
    """Illumination of an observer.

    Attributes:
        kind: Umbra, penumbra or visible.
        fraction: Visible fraction of the light source, 0.0 in umbra and
            1.0 when fully visible.
    """

    kind: EclipseKind
    fraction: float

    @property
    def is_visible(self) -> bool:
        return self.kind is EclipseKind.VISIBLE

    @property
    def is_umbra(self) -> bool:
        return self.kind is EclipseKind.UMBRA

    @property
    def is_penumbra(self) -> bool:
        return self.kind is EclipseKind.PENUMBRA

    def __str__(self) -> str:
        if self.kind is EclipseKind.PENUMBRA:
            return f"Penumbra({self.fraction:.6f})"
        return self.kind.name.capitalize()


def _safe_norm(v: Array) -> tuple[Array, Array]:
    """Return ``(|v|, |v| > 0)``."""
    n = jnp.linalg.norm(v)
    return n, n > 0


def lens_area(d: ArrayLike, r1: ArrayLike, r2: ArrayLike) -> Array:
    """Area of the intersection of two circles.

    Args:
        d: Distance between the circle centers.
        r1: Radius of the first circle.
        r2: Radius of the second circle.

    Returns:
        Intersection area: 0 for disjoint circles and the area of the
        smaller circle when one contains the other.
    """
    _float = get_dtype()
    d = jnp.asarray(d, dtype=_float)
    r1 = jnp.asarray(r1, dtype=_float)
    r2 = jnp.asarray(r2, dtype=_float)

    disjoint = d >= r1 + r2
    contained = d <= jnp.abs(r1 - r2)
    overlap = ~(disjoint | contained)

    # Substitute harmless values outside the overlap branch
    d_s = jnp.where(overlap, d, _float(1.0))
    r1_s = jnp.where(overlap, r1, _float(1.0))
    r2_s = jnp.where(overlap, r2, _float(1.0))

    a1 = jnp.arccos(jnp.clip((d_s**2 + r1_s**2 - r2_s**2) / (_float(2.0) * d_s * r1_s), -1.0, 1.0))
    a2 = jnp.arccos(jnp.clip((d_s**2 + r2_s**2 - r1_s**2) / (_float(2.0) * d_s * r2_s), -1.0, 1.0))
    k = jnp.sqrt(jnp.maximum(
        (-d_s + r1_s + r2_s) * (d_s + r1_s - r2_s) * (d_s - r1_s + r2_s) * (d_s + r1_s + r2_s),
        _float(0.0),
    ))
    partial = r1_s**2 * a1 + r2_s**2 * a2 - _float(0.5) * k

    r_min = jnp.minimum(r1, r2)
    return jnp.where(disjoint, _float(0.0), jnp.where(contained, jnp.pi * r_min**2, partial))


def illumination(
    r_observer: ArrayLike,
    r_eclipsing: ArrayLike,
    radius_eclipsing: ArrayLike,
    r_light: ArrayLike,
    radius_light: ArrayLike,
) -> tuple[Array, Array]:
    """Classify the illumination of an observer.

    Steps:

    1. If the angle at the eclipsing body between the light source and the
       observer is below 90 degrees, the observer is on the lit side:
       visible.
    2. If the line of sight to the light source does not cross the plane
       through the eclipsing body normal to the shadow axis: visible.
    3. Project the light source onto that plane and compare the projected
       disk (radius :math:`R'_{ls}`, center distance :math:`d`) with the
       eclipsing body's disk (radius :math:`R_{eb}`):

       - :math:`d - R'_{ls} > R_{eb}`: visible
       - :math:`d + R'_{ls} < R_{eb}`: umbra
       - otherwise penumbra, with fraction
         :math:`(\\pi R'^2_{ls} - A_{lens}) / (\\pi R'^2_{ls})`

    Degenerate cases: :math:`R'_{ls} = 0` is umbra when
    :math:`d < R_{eb}`, else visible; :math:`d = 0` is umbra when
    :math:`R_{eb} \\ge R'_{ls}`, else visible.

    Args:
        r_observer: Observer position.  Shape ``(3,)`` or ``(6,)`` (only
            first 3 elements used).
        r_eclipsing: Eclipsing-body center.  Shape ``(3,)``.
        radius_eclipsing: Eclipsing-body radius.
        r_light: Light-source center.  Shape ``(3,)``.
        radius_light: Light-source radius.

    Returns:
        tuple: ``(kind, fraction)``; *kind* is an integer
        :class:`EclipseKind` code, *fraction* the visible fraction in [0, 1].

    Examples:
        ```python
        import jax.numpy as jnp
        from cosmojax.eclipse import illumination
        kind, nu = illumination(
            jnp.array([-7000.0, 0.0, 0.0]), jnp.zeros(3), 6378.0,
            jnp.array([1.496e8, 0.0, 0.0]), 696000.0,
        )
        ```
    """
    _float = get_dtype()
    sc = jnp.asarray(r_observer, dtype=_float)[:3]
    eb = jnp.asarray(r_eclipsing, dtype=_float)[:3]
    ls = jnp.asarray(r_light, dtype=_float)[:3]
    r_eb = jnp.asarray(radius_eclipsing, dtype=_float)
    r_ls_radius = jnp.asarray(radius_light, dtype=_float)

    r_eb_ls = ls - eb
    r_eb_sc = sc - eb
    r_ls = ls - sc

    n_eb_ls, ok_eb_ls = _safe_norm(r_eb_ls)
    n_eb_sc, ok_eb_sc = _safe_norm(r_eb_sc)
    n_ls, ok_ls = _safe_norm(r_ls)

    # Shadow axis and line of sight
    n_hat = r_eb_ls / jnp.where(ok_eb_ls, n_eb_ls, _float(1.0))
    u_hat = r_ls / jnp.where(ok_ls, n_ls, _float(1.0))

    # beta2 < 90 deg  <=>  cos(beta2) > 0
    both = ok_eb_ls & ok_eb_sc
    cos_beta2 = jnp.where(
        both,
        jnp.dot(r_eb_ls, r_eb_sc) / jnp.where(both, n_eb_ls * n_eb_sc, _float(1.0)),
        _float(0.0),
    )
    lit_side = cos_beta2 > 0

    # cos(beta3) between shadow axis and line of sight; sin(gamma) == cos(beta3)
    cos_beta3 = jnp.where(ok_ls, jnp.dot(u_hat, n_hat), _float(0.0))
    crosses_plane = cos_beta3 > 0
    cos_s = jnp.where(crosses_plane, cos_beta3, _float(1.0))

    # Distance along the line of sight to the plane, and the pierce point
    h = jnp.dot(eb - sc, n_hat)
    r_prime = jnp.maximum(h, _float(0.0)) / cos_s
    d = jnp.linalg.norm(sc + r_prime * u_hat - eb)

    # Pseudo radius of the light source projected on the plane
    ang_radius = jnp.arcsin(jnp.clip(r_ls_radius / jnp.where(ok_ls, n_ls, _float(1.0)), 0.0, 1.0))
    r_pseudo = r_prime * jnp.tan(ang_radius) / cos_s

    disk_area = jnp.pi * r_pseudo**2
    safe_area = jnp.where(disk_area > 0, disk_area, _float(1.0))
    penumbra_fraction = jnp.clip(
        (disk_area - lens_area(d, r_pseudo, r_eb)) / safe_area, _float(0.0), _float(1.0)
    )

    umbra = _float(EclipseKind.UMBRA)
    penumbra = _float(EclipseKind.PENUMBRA)
    visible = _float(EclipseKind.VISIBLE)

    general_kind = jnp.where(
        d - r_pseudo > r_eb,
        visible,
        jnp.where(d + r_pseudo < r_eb, umbra, penumbra),
    )
    point_kind = jnp.where(d < r_eb, umbra, visible)
    concentric_kind = jnp.where(r_eb >= r_pseudo, umbra, visible)

    kind = jnp.where(
        lit_side | ~crosses_plane,
        visible,
        jnp.where(
            r_pseudo == 0,
            point_kind,
            jnp.where(d == 0, concentric_kind, general_kind),
        ),
    )
    fraction = jnp.where(
        kind == visible,
        _float(1.0),
        jnp.where(kind == umbra, _float(0.0), penumbra_fraction),
    )
    return kind.astype(jnp.int32), fraction


def eclipse_state(
    r_observer: ArrayLike,
    r_eclipsing: ArrayLike,
    radius_eclipsing: float,
    r_light: ArrayLike,
    radius_light: float,
) -> EclipseState:
    """Classify the illumination of one observer.

    Concrete-valued wrapper around :func:`illumination`.

    Returns:
        EclipseState: Classification and visible fraction.
    """
    kind, fraction = illumination(r_observer, r_eclipsing, radius_eclipsing, r_light, radius_light)
    return EclipseState(EclipseKind(int(kind)), float(fraction))


def eclipse_batch(
    r_observer: ArrayLike,
    r_eclipsing: ArrayLike,
    radius_eclipsing: ArrayLike,
    r_light: ArrayLike,
    radius_light: ArrayLike,
) -> tuple[Array, Array]:
    """Vectorized :func:`illumination` over many observers.

    Positions of shape ``(N, 3)`` are mapped over their leading axis;
    positions of shape ``(3,)`` are shared by every observer.

    Returns:
        tuple: ``(kinds, fractions)``, each of shape ``(N,)``.
    """
    _float = get_dtype()
    sc = jnp.asarray(r_observer, dtype=_float)[..., :3]
    eb = jnp.asarray(r_eclipsing, dtype=_float)
    ls = jnp.asarray(r_light, dtype=_float)
    in_axes = (0 if sc.ndim == 2 else None, 0 if eb.ndim == 2 else None, None,
               0 if ls.ndim == 2 else None, None)
    return jax.vmap(illumination, in_axes=in_axes)(sc, eb, radius_eclipsing, ls, radius_light)


def eclipse_series(
    r_observer: ArrayLike,
    r_eclipsing: ArrayLike,
    radius_eclipsing: float,
    r_light: ArrayLike,
    radius_light: float,
    cancel: threading.Event | None = None,
) -> list[EclipseState]:
    """Classify observers one at a time, checking *cancel* between them.

    Positions follow the shape rules of :func:`eclipse_batch`.

    Raises:
        OperationCancelled: If *cancel* is set before the sweep finishes.
    """
    _float = get_dtype()
    sc = jnp.atleast_2d(jnp.asarray(r_observer, dtype=_float))
    eb = jnp.asarray(r_eclipsing, dtype=_float)
    ls = jnp.asarray(r_light, dtype=_float)

    results: list[EclipseState] = []
    for i in range(sc.shape[0]):
        if cancel is not None and cancel.is_set():
            logger.debug("Eclipse sweep cancelled after %d of %d queries", i, sc.shape[0])
            raise OperationCancelled(i)
        results.append(eclipse_state(
            sc[i],
            eb[i] if eb.ndim == 2 else eb,
            radius_eclipsing,
            ls[i] if ls.ndim == 2 else ls,
            radius_light,
        ))
    return results
