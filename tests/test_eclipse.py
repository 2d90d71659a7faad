"""Tests for the conical eclipse model."""

import math
import threading

import jax
import jax.numpy as jnp
import pytest

from cosmojax.eclipse import (
    EclipseKind,
    EclipseState,
    eclipse_batch,
    eclipse_series,
    eclipse_state,
    illumination,
    lens_area,
)
from cosmojax.errors import OperationCancelled

# Sun along +X at 1 AU, Earth at the origin [km]
R_LIGHT = (1.496e8, 0.0, 0.0)
R_ECLIPSING = (0.0, 0.0, 0.0)
RADIUS_EARTH = 6378.0
RADIUS_SUN = 696000.0


def _state(observer, radius_eclipsing=RADIUS_EARTH, radius_light=RADIUS_SUN):
    return eclipse_state(jnp.array(observer), jnp.array(R_ECLIPSING), radius_eclipsing,
                         jnp.array(R_LIGHT), radius_light)


def _reference_fraction(observer, radius_eclipsing=RADIUS_EARTH, radius_light=RADIUS_SUN):
    """Visible fraction from the projected-disk construction, in plain floats."""

    def sub(a, b):
        return [x - y for x, y in zip(a, b)]

    def dot(a, b):
        return sum(x * y for x, y in zip(a, b))

    def norm(a):
        return math.sqrt(dot(a, a))

    n_hat = [x / norm(sub(R_LIGHT, R_ECLIPSING)) for x in sub(R_LIGHT, R_ECLIPSING)]
    los = sub(R_LIGHT, observer)
    u_hat = [x / norm(los) for x in los]
    cos_b3 = dot(u_hat, n_hat)
    h = dot(sub(R_ECLIPSING, observer), n_hat)
    r_prime = h / cos_b3
    pierce = [o + r_prime * u for o, u in zip(observer, u_hat)]
    d = norm(sub(pierce, R_ECLIPSING))
    r_pseudo = r_prime * math.tan(math.asin(radius_light / norm(los))) / cos_b3

    r1, r2 = r_pseudo, radius_eclipsing
    a1 = math.acos((d * d + r1 * r1 - r2 * r2) / (2.0 * d * r1))
    a2 = math.acos((d * d + r2 * r2 - r1 * r1) / (2.0 * d * r2))
    k = math.sqrt((-d + r1 + r2) * (d + r1 - r2) * (d - r1 + r2) * (d + r1 + r2))
    overlap = r1 * r1 * a1 + r2 * r2 * a2 - 0.5 * k
    return (math.pi * r1 * r1 - overlap) / (math.pi * r1 * r1)


# ──────────────────────────────────────────────
# Lens area
# ──────────────────────────────────────────────


class TestLensArea:
    def test_disjoint(self):
        assert float(lens_area(3.0, 1.0, 1.0)) == 0.0

    def test_tangent_outside(self):
        assert float(lens_area(2.0, 1.0, 1.0)) == 0.0

    def test_contained(self):
        assert float(lens_area(0.5, 1.0, 3.0)) == pytest.approx(math.pi)

    def test_concentric(self):
        assert float(lens_area(0.0, 2.0, 5.0)) == pytest.approx(4.0 * math.pi)

    def test_equal_circles(self):
        expected = 2.0 * math.pi / 3.0 - math.sqrt(3.0) / 2.0
        assert float(lens_area(1.0, 1.0, 1.0)) == pytest.approx(expected, rel=1e-12)

    def test_symmetric(self):
        assert float(lens_area(2.5, 1.0, 2.0)) == pytest.approx(float(lens_area(2.5, 2.0, 1.0)), rel=1e-12)

    def test_vectorized(self):
        areas = lens_area(jnp.array([0.0, 1.0, 3.0]), 1.0, 1.0)
        assert areas.shape == (3,)
        assert float(areas[2]) == 0.0


# ──────────────────────────────────────────────
# Classification
# ──────────────────────────────────────────────


class TestEclipseState:
    def test_umbra(self):
        state = _state((-7000.0, 0.0, 0.0))
        assert state.kind is EclipseKind.UMBRA
        assert state.fraction == 0.0
        assert state.is_umbra

    def test_visible_beside_shadow(self):
        state = _state((-7000.0, 7000.0, 0.0))
        assert state.kind is EclipseKind.VISIBLE
        assert state.fraction == 1.0

    def test_visible_sunward(self):
        assert _state((7000.0, 0.0, 0.0)).is_visible

    def test_penumbra(self):
        observer = (-7000.0, 6380.0, 0.0)
        state = _state(observer)
        assert state.is_penumbra
        assert 0.0 < state.fraction < 1.0
        assert state.fraction == pytest.approx(_reference_fraction(observer), abs=1e-6)

    def test_penumbra_out_of_plane(self):
        observer = (-42164.0, 0.0, -6400.0)
        state = _state(observer)
        assert state.is_penumbra
        assert state.fraction == pytest.approx(_reference_fraction(observer), abs=1e-6)

    def test_quarter_angle_boundary_is_visible(self):
        # Observer perpendicular to the shadow axis at the eclipsing body
        assert _state((0.0, 7000.0, 0.0)).is_visible

    def test_state_vector_observer(self):
        state = _state((-7000.0, 0.0, 0.0, 0.0, 7.5, 0.0))
        assert state.is_umbra

    def test_fraction_monotonic_across_shadow_edge(self):
        offsets = jnp.linspace(6300.0, 6420.0, 61)
        observers = jnp.stack([jnp.full_like(offsets, -7000.0), offsets, jnp.zeros_like(offsets)], axis=1)
        kinds, fractions = eclipse_batch(observers, jnp.array(R_ECLIPSING), RADIUS_EARTH,
                                         jnp.array(R_LIGHT), RADIUS_SUN)
        assert int(kinds[0]) == EclipseKind.UMBRA
        assert int(kinds[-1]) == EclipseKind.VISIBLE
        assert bool(jnp.any(kinds == EclipseKind.PENUMBRA))
        assert bool(jnp.all(jnp.diff(fractions) >= -1e-12))


class TestDegenerate:
    def test_observer_at_eclipsing_center(self):
        assert _state((0.0, 0.0, 0.0)).is_umbra

    def test_point_light_in_shadow(self):
        state = _state((-7000.0, 100.0, 0.0), radius_light=0.0)
        assert state.is_umbra

    def test_point_light_outside_shadow(self):
        assert _state((-7000.0, 7000.0, 0.0), radius_light=0.0).is_visible

    def test_concentric_small_occulter(self):
        # On the shadow axis, the projected light disk is larger than the body
        assert _state((-7000.0, 0.0, 0.0), radius_eclipsing=1.0).is_visible

    def test_finite_fraction(self):
        for observer in [(0.0, 0.0, 0.0), (-7000.0, 0.0, 0.0), (0.0, 7000.0, 0.0)]:
            assert math.isfinite(_state(observer).fraction)


class TestEclipseStateType:
    def test_str(self):
        assert str(EclipseState(EclipseKind.UMBRA, 0.0)) == "Umbra"
        assert str(EclipseState(EclipseKind.VISIBLE, 1.0)) == "Visible"
        assert str(EclipseState(EclipseKind.PENUMBRA, 0.5)) == "Penumbra(0.500000)"

    def test_kind_codes(self):
        assert [int(k) for k in EclipseKind] == [0, 1, 2]


# ──────────────────────────────────────────────
# JAX compatibility and sweeps
# ──────────────────────────────────────────────


class TestJax:
    def test_jit_matches_eager(self):
        args = (jnp.array([-7000.0, 6380.0, 0.0]), jnp.array(R_ECLIPSING), RADIUS_EARTH,
                jnp.array(R_LIGHT), RADIUS_SUN)
        kind, fraction = illumination(*args)
        kind_jit, fraction_jit = jax.jit(illumination)(*args)
        assert int(kind_jit) == int(kind)
        assert float(fraction_jit) == pytest.approx(float(fraction), abs=1e-12)

    def test_kind_dtype(self):
        kind, _ = illumination(jnp.array([-7000.0, 0.0, 0.0]), jnp.array(R_ECLIPSING), RADIUS_EARTH,
                               jnp.array(R_LIGHT), RADIUS_SUN)
        assert kind.dtype == jnp.int32

    def test_batch_matches_single(self):
        observers = jnp.array([[-7000.0, 0.0, 0.0], [-7000.0, 7000.0, 0.0], [-7000.0, 6380.0, 0.0]])
        kinds, fractions = eclipse_batch(observers, jnp.array(R_ECLIPSING), RADIUS_EARTH,
                                         jnp.array(R_LIGHT), RADIUS_SUN)
        assert kinds.shape == (3,)
        for i in range(3):
            state = _state(tuple(float(x) for x in observers[i]))
            assert int(kinds[i]) == state.kind
            assert float(fractions[i]) == pytest.approx(state.fraction, abs=1e-12)

    def test_batch_moving_light(self):
        observers = jnp.array([[-7000.0, 0.0, 0.0], [-7000.0, 0.0, 0.0]])
        lights = jnp.array([list(R_LIGHT), [-1.496e8, 0.0, 0.0]])
        kinds, _ = eclipse_batch(observers, jnp.array(R_ECLIPSING), RADIUS_EARTH, lights, RADIUS_SUN)
        assert [int(k) for k in kinds] == [EclipseKind.UMBRA, EclipseKind.VISIBLE]


class TestEclipseSeries:
    def test_series(self):
        observers = jnp.array([[-7000.0, 0.0, 0.0], [-7000.0, 7000.0, 0.0]])
        states = eclipse_series(observers, jnp.array(R_ECLIPSING), RADIUS_EARTH,
                                jnp.array(R_LIGHT), RADIUS_SUN)
        assert [s.kind for s in states] == [EclipseKind.UMBRA, EclipseKind.VISIBLE]

    def test_single_observer(self):
        states = eclipse_series(jnp.array([-7000.0, 0.0, 0.0]), jnp.array(R_ECLIPSING), RADIUS_EARTH,
                                jnp.array(R_LIGHT), RADIUS_SUN)
        assert len(states) == 1

    def test_cancelled(self):
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(OperationCancelled) as exc:
            eclipse_series(jnp.zeros((4, 3)), jnp.array(R_ECLIPSING), RADIUS_EARTH,
                           jnp.array(R_LIGHT), RADIUS_SUN, cancel=cancel)
        assert exc.value.completed == 0
