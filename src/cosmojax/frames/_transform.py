"""Rotations between frames of a :class:`FrameCatalog`.

Each frame with a rotation law is related to its parent by

.. math::

    M = R_z(W)\\,R_x(90^\\circ - \\delta)\\,R_z(90^\\circ + \\alpha)

where :math:`\\alpha`, :math:`\\delta` are the right ascension and
declination of the body's north pole and :math:`W` is the prime-meridian
angle.  :math:`M` maps parent-frame components into body-fixed
components; the single-hop rotation returned by
:meth:`FrameTransformer.compute_rotation` is :math:`M^T`, mapping
body-fixed components into the parent frame.  Hops are composed along the
parent chain up to the root (inertial) frame.

References:
    1. B. A. Archinal et al., "Report of the IAU Working Group on
       Cartographic Coordinates and Rotational Elements: 2015",
       *Celestial Mechanics and Dynamical Astronomy*, 130:22, 2018.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Sequence

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from cosmojax.attitude_representations import RotationMatrix, Rx, Rz
from cosmojax.config import get_dtype
from cosmojax.constants import SECONDS_PER_DAY
from cosmojax.epoch import Epoch
from cosmojax.errors import IncompatibleFrames, OperationCancelled
from cosmojax.frames._catalog import FrameCatalog
from cosmojax.frames._types import FrameDefinition
from cosmojax.rotation_model import RotationModel, days_since_reference, evaluate_days

logger = logging.getLogger(__name__)


def rotation_from_angles(right_asc: ArrayLike, declin: ArrayLike, w: ArrayLike) -> Array:
    """Return the body-fixed to parent rotation for pole angles in radians.

    Args:
        right_asc (ArrayLike): Right ascension of the north pole [rad].
        declin (ArrayLike): Declination of the north pole [rad].
        w (ArrayLike): Prime-meridian angle [rad].

    Returns:
        jax.Array: 3x3 matrix :math:`M^T` (body-fixed -> parent).
    """
    m = Rz(w) @ Rx(jnp.pi / 2.0 - declin) @ Rz(jnp.pi / 2.0 + right_asc)
    return m.T


def model_rotation(model: RotationModel, d: ArrayLike) -> Array:
    """Return the body-fixed to parent rotation of *model* at ``d`` elapsed days."""
    return rotation_from_angles(*evaluate_days(model, d))


class FrameTransformer:
    """Evaluate and compose frame rotations over a validated catalog.

    Args:
        catalog (FrameCatalog): Frame catalog; validated here if needed.
    """

    def __init__(self, catalog: FrameCatalog) -> None:
        if not catalog.is_validated:
            catalog.validate()
        self.catalog = catalog

    def compute_rotation(self, frame: str, epoch: Epoch) -> RotationMatrix:
        """Return the single-hop rotation from *frame* to its parent.

        A frame without a rotation law shares its parent's orientation, so
        its hop is the identity.

        Args:
            frame (str): Frame name.
            epoch (Epoch): Evaluation instant.

        Returns:
            RotationMatrix: Body-fixed -> parent rotation.
        """
        definition = self.catalog.resolve(frame)
        if definition.rotation is None:
            return RotationMatrix.identity()
        d = days_since_reference(definition.rotation, epoch)
        return RotationMatrix._from_internal(model_rotation(definition.rotation, d))

    def _root_rotation_fn(self, frame: str, epoch: Epoch) -> Callable[[ArrayLike], Array]:
        """Return ``dt -> R_root<-frame`` at *epoch* advanced by ``dt`` seconds."""
        hops = []
        for definition in self.catalog.path_to_root(frame)[:-1]:
            if definition.rotation is not None:
                base = days_since_reference(definition.rotation, epoch)
                hops.append((definition.rotation, base))

        def rotation(dt: ArrayLike) -> Array:
            acc = jnp.eye(3, dtype=get_dtype())
            for model, base in hops:
                acc = model_rotation(model, base + dt / SECONDS_PER_DAY) @ acc
            return acc

        return rotation

    def compose_to_root(self, frame: str, epoch: Epoch) -> RotationMatrix:
        """Return the rotation from *frame* to the root of its parent chain.

        Single-hop rotations are multiplied child to parent,
        ``R_root<-f = R_k ... R_2 R_1``.

        Raises:
            FrameNotFound: If *frame* is not registered.
        """
        return RotationMatrix._from_internal(self._root_rotation_fn(frame, epoch)(0.0))

    def _check_common_root(self, from_frame: str, to_frame: str) -> None:
        from_root = self.catalog.root_of(from_frame)
        to_root = self.catalog.root_of(to_frame)
        if from_root.key != to_root.key:
            raise IncompatibleFrames(from_frame, to_frame, from_root.name, to_root.name)

    def _between_fn(self, from_frame: str, to_frame: str, epoch: Epoch) -> Callable[[ArrayLike], Array]:
        self._check_common_root(from_frame, to_frame)
        r_from = self._root_rotation_fn(from_frame, epoch)
        r_to = self._root_rotation_fn(to_frame, epoch)
        return lambda dt: r_to(dt).T @ r_from(dt)

    def rotation_between(self, from_frame: str, to_frame: str, epoch: Epoch) -> RotationMatrix:
        """Return the rotation mapping *from_frame* components into *to_frame*.

        Raises:
            IncompatibleFrames: If the frames have different roots.
        """
        if self.catalog.resolve(from_frame).key == self.catalog.resolve(to_frame).key:
            return RotationMatrix.identity()
        return RotationMatrix._from_internal(self._between_fn(from_frame, to_frame, epoch)(0.0))

    def transform_vector(self, v: ArrayLike, from_frame: str, to_frame: str, epoch: Epoch) -> Array:
        """Re-express vector *v* from *from_frame* in *to_frame*.

        Applies ``R_to^T R_from``, where each ``R`` maps into the common root.

        Args:
            v (ArrayLike): 3-element vector in *from_frame*.
            from_frame (str): Source frame name.
            to_frame (str): Destination frame name.
            epoch (Epoch): Evaluation instant.

        Returns:
            jax.Array: 3-element vector in *to_frame*.

        Raises:
            IncompatibleFrames: If the frames have different roots.
        """
        return self.rotation_between(from_frame, to_frame, epoch).apply(v)

    def transform_state(self, x: ArrayLike, from_frame: str, to_frame: str, epoch: Epoch) -> Array:
        """Re-express a position/velocity state from *from_frame* in *to_frame*.

        Velocity picks up the transport term of the rotating frames:

        .. math::

            r' = R\\,r, \\qquad v' = R\\,v + \\dot{R}\\,r

        where :math:`\\dot{R}` is obtained by forward-mode differentiation
        of the rotation chain with respect to time.

        Args:
            x (ArrayLike): 6-element state ``[r, v]``; velocity per second.
            from_frame (str): Source frame name.
            to_frame (str): Destination frame name.
            epoch (Epoch): Evaluation instant.

        Returns:
            jax.Array: 6-element state in *to_frame*.
        """
        x = jnp.asarray(x, dtype=get_dtype())
        rotation = self._between_fn(from_frame, to_frame, epoch)
        dt = get_dtype()(0.0)
        r_mat = rotation(dt)
        r_dot = jax.jacfwd(rotation)(dt)
        r, v = x[:3], x[3:6]
        return jnp.concatenate([r_mat @ r, r_mat @ v + r_dot @ r])

    def rotations_over(
        self,
        frame: str,
        epochs: Sequence[Epoch],
        cancel: threading.Event | None = None,
    ) -> list[RotationMatrix]:
        """Return :meth:`compose_to_root` of *frame* at each epoch.

        Raises:
            OperationCancelled: If *cancel* is set before the sweep finishes.
        """
        results: list[RotationMatrix] = []
        for epoch in epochs:
            if cancel is not None and cancel.is_set():
                logger.debug("Rotation sweep of '%s' cancelled after %d epochs", frame, len(results))
                raise OperationCancelled(len(results))
            results.append(self.compose_to_root(frame, epoch))
        return results

    def root_of(self, frame: str) -> FrameDefinition:
        return self.catalog.root_of(frame)
