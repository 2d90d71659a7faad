"""Tests for RotationModel construction and evaluation."""

import math
import threading

import jax
import jax.numpy as jnp
import pytest

from cosmojax.epoch import Epoch
from cosmojax.errors import EvaluationError, OperationCancelled, ParseError, UnknownSymbol
from cosmojax.frames import iau_frame_records
from cosmojax.rotation_model import (
    AngleUnit,
    RotationModel,
    days_since_reference,
    evaluate,
    evaluate_batch,
    evaluate_days,
    evaluate_series,
)

_ANGLE_TOL = 1e-6  # radians
_D2R = math.pi / 180.0


def _bundled_model(name):
    return RotationModel.from_record(iau_frame_records()[name]["rotation"])


# ──────────────────────────────────────────────
# Construction
# ──────────────────────────────────────────────


class TestConstruction:
    def test_from_formulas(self):
        model = RotationModel.from_formulas("289.13", "63.87", "84.176 + 14.18440000*d")
        assert model.angle_unit is AngleUnit.DEGREES
        assert model.context == ()
        assert model.w.symbols == frozenset({"d"})

    def test_from_record_default_unit(self):
        model = RotationModel.from_record({"right_asc": "1", "declin": "2", "w": "3"})
        assert model.angle_unit is AngleUnit.DEGREES

    def test_from_record_radians(self):
        model = RotationModel.from_record(
            {"right_asc": "1", "declin": "0.5", "w": "d", "angle_unit": "radians"}
        )
        assert model.angle_unit is AngleUnit.RADIANS

    def test_from_record_missing_formula(self):
        with pytest.raises(ParseError, match="'w'"):
            RotationModel.from_record({"right_asc": "1", "declin": "2"})

    def test_from_record_invalid_unit(self):
        with pytest.raises(ParseError, match="angle_unit"):
            RotationModel.from_record(
                {"right_asc": "1", "declin": "2", "w": "3", "angle_unit": "grad"}
            )

    def test_malformed_formula_fails_at_build(self):
        with pytest.raises(ParseError):
            RotationModel.from_formulas("1", "2", "3", context={"Ja": "99.360714 + 4850.4046T"})

    def test_unknown_symbol_fails_at_build(self):
        with pytest.raises(UnknownSymbol) as exc:
            RotationModel.from_formulas("1 + sin(Jq)", "2", "3", context={"Ja": "d"})
        assert exc.value.symbol == "Jq"

    def test_unknown_symbol_in_context(self):
        with pytest.raises(UnknownSymbol):
            RotationModel.from_formulas("A", "2", "3", context={"A": "B + 1"})

    @pytest.mark.parametrize("name", ["d", "T"])
    def test_context_cannot_shadow_reserved(self, name):
        with pytest.raises(ParseError, match="reserved"):
            RotationModel.from_formulas("1", "2", "3", context={name: "1.0"})

    def test_duplicate_context_name(self):
        base = RotationModel.from_formulas("A", "2", "3", context={"A": "d"})
        with pytest.raises(ParseError, match="declared twice"):
            RotationModel(base.right_asc, base.declin, base.w, context=base.context * 2)

    def test_context_cycle(self):
        with pytest.raises(EvaluationError, match="circular"):
            RotationModel.from_formulas("A", "2", "3", context={"A": "B + 1", "B": "A + 1"})

    def test_context_self_reference(self):
        with pytest.raises(EvaluationError, match="circular"):
            RotationModel.from_formulas("A", "2", "3", context={"A": "A + 1"})

    def test_evaluation_order_follows_dependencies(self):
        model = RotationModel.from_formulas(
            "C", "B", "A", context={"C": "B + A", "B": "2*A", "A": "d + 1", "Z": "T"}
        )
        assert model.evaluation_order == ("A", "B", "C", "Z")

    def test_evaluation_order_keeps_declaration_order(self):
        model = RotationModel.from_formulas(
            "E1", "E2", "E3", context={"E2": "d", "E1": "d", "E3": "d"}
        )
        assert model.evaluation_order == ("E2", "E1", "E3")

    def test_models_are_hashable(self):
        a = RotationModel.from_formulas("1", "2", "3*d")
        b = RotationModel.from_formulas("1", "2", "3*d")
        assert a == b
        assert hash(a) == hash(b)


# ──────────────────────────────────────────────
# Golden values
# ──────────────────────────────────────────────


class TestGoldenAngles:
    def test_fixed_pole_venus(self):
        """Venus: constant pole, linear prime meridian."""
        model = _bundled_model("iau_venus")
        epc = Epoch(2000, 1, 11, 12, 0, 0.0)  # d = 10
        ra, dec, w = evaluate(model, epc)
        assert float(ra) == pytest.approx(272.76 * _D2R, abs=_ANGLE_TOL)
        assert float(dec) == pytest.approx(61.16 * _D2R, abs=_ANGLE_TOL)
        assert float(w) == pytest.approx((160.20 - 1.4813688 * 10.0) * _D2R, abs=_ANGLE_TOL)

    def test_fixed_pole_constant_over_time(self):
        model = _bundled_model("iau_uranus")
        a = evaluate(model, Epoch(1990, 1, 1))
        b = evaluate(model, Epoch(2030, 1, 1))
        assert float(a.right_asc) == pytest.approx(float(b.right_asc), abs=1e-15)
        assert float(a.declin) == pytest.approx(-15.175 * _D2R, abs=_ANGLE_TOL)

    def test_jupiter_context_terms(self):
        """Jupiter: context terms in both right ascension and declination."""
        model = _bundled_model("iau_jupiter")
        epc = Epoch(2020, 1, 1)
        d = 7304.5
        T = d / 36525.0

        ja = 99.360714 + 4850.4046 * T
        jb = 175.895369 + 1191.9605 * T
        jc = 300.323162 + 262.5475 * T
        jd = 114.012305 + 6070.2476 * T
        je = 49.511251 + 64.3000 * T

        def s(x):
            return math.sin(x * _D2R)

        def c(x):
            return math.cos(x * _D2R)

        ra = (268.056595 - 0.006499 * T + 0.000117 * s(ja) + 0.000938 * s(jb)
              + 0.001432 * s(jc) + 0.000030 * s(jd) + 0.002150 * s(je))
        dec = (64.495303 + 0.002413 * T + 0.000050 * c(ja) + 0.000404 * c(jb)
               + 0.000617 * c(jc) - 0.000013 * c(jd) + 0.000926 * c(je))
        w = 284.95 + 870.536 * d

        angles = evaluate(model, epc)
        assert float(angles.right_asc) == pytest.approx(ra * _D2R, abs=_ANGLE_TOL)
        assert float(angles.declin) == pytest.approx(dec * _D2R, abs=_ANGLE_TOL)
        assert float(angles.w) == pytest.approx(w * _D2R, abs=_ANGLE_TOL)

    def test_moon_context_terms(self):
        model = _bundled_model("iau_moon")
        d = 1000.0
        T = d / 36525.0
        e1 = 125.045 - 0.0529921 * d
        e2 = 250.089 - 0.1059842 * d
        e3 = 260.008 + 13.0120009 * d
        e4 = 176.625 + 13.3407154 * d
        e6 = 311.589 + 26.4057084 * d
        e7 = 134.963 + 13.0649930 * d
        e10 = 15.134 - 0.1589763 * d
        e13 = 25.053 + 12.9590088 * d

        def c(x):
            return math.cos(x * _D2R)

        dec = (66.5392 + 0.0130 * T + 1.5419 * c(e1) + 0.0239 * c(e2) - 0.0278 * c(e3)
               + 0.0068 * c(e4) - 0.0029 * c(e6) + 0.0009 * c(e7) + 0.0008 * c(e10)
               - 0.0009 * c(e13))

        angles = evaluate_days(model, d)
        assert float(angles.declin) == pytest.approx(dec * _D2R, abs=_ANGLE_TOL)

    def test_radians_unit_passthrough(self):
        model = RotationModel.from_formulas("1.0", "0.5", "0.25 + 0.1*d", angle_unit="radians")
        ra, dec, w = evaluate_days(model, 2.0)
        assert float(ra) == pytest.approx(1.0)
        assert float(dec) == pytest.approx(0.5)
        assert float(w) == pytest.approx(0.45)

    def test_radians_trig_arguments(self):
        model = RotationModel.from_formulas("sin(x)", "0", "0", angle_unit="radians",
                                            context={"x": "d"})
        assert float(evaluate_days(model, math.pi / 2).right_asc) == pytest.approx(1.0)


# ──────────────────────────────────────────────
# Context ordering and errors
# ──────────────────────────────────────────────


class TestContextEvaluation:
    def test_out_of_order_matches_in_order(self):
        in_order = RotationModel.from_formulas(
            "10 + sin(E2)", "20 + cos(E1)", "E2 + 3*d",
            context={"E1": "125.045 - 0.0529921*d", "E2": "2*E1 + T"},
        )
        out_of_order = RotationModel.from_formulas(
            "10 + sin(E2)", "20 + cos(E1)", "E2 + 3*d",
            context={"E2": "2*E1 + T", "E1": "125.045 - 0.0529921*d"},
        )
        a = evaluate_days(in_order, 1234.5)
        b = evaluate_days(out_of_order, 1234.5)
        for x, y in zip(a, b):
            assert float(x) == float(y)

    def test_context_map_built_once(self, monkeypatch):
        calls = []
        original = RotationModel.context_map

        def counting(model):
            calls.append(1)
            return original.fget(model)

        monkeypatch.setattr(RotationModel, "context_map", property(counting))
        model = _bundled_model("iau_moon")
        assert len(model.evaluation_order) > 1
        evaluate_days(model, 1234.5)
        assert len(calls) == 1

    def test_non_finite_context(self):
        model = RotationModel.from_formulas("X", "0", "0", context={"X": "1/(d - 10)"})
        with pytest.raises(EvaluationError, match="'X'"):
            evaluate_days(model, 10.0)

    def test_non_finite_primary(self):
        model = RotationModel.from_formulas("0", "0", "1/d")
        with pytest.raises(EvaluationError, match="w"):
            evaluate_days(model, 0.0)


# ──────────────────────────────────────────────
# Reference epoch
# ──────────────────────────────────────────────


class TestReferenceEpoch:
    def test_default_is_j2000(self):
        model = RotationModel.from_formulas("0", "0", "d")
        assert float(days_since_reference(model, Epoch.j2000())) == 0.0

    def test_custom_reference(self):
        ref = Epoch(2010, 1, 1)
        base = RotationModel.from_formulas("0", "0", "d")
        model = RotationModel(base.right_asc, base.declin, base.w, reference_epoch=ref)
        assert float(days_since_reference(model, ref + 86400.0)) == pytest.approx(1.0)

    def test_tai_input_shifts_d(self):
        model = RotationModel.from_formulas("0", "0", "d", angle_unit="radians")
        epc = Epoch("2000-01-01T12:00:00 TAI")
        assert float(evaluate(model, epc).w) == pytest.approx(32.184 / 86400.0, abs=1e-15)


# ──────────────────────────────────────────────
# Batches, sweeps and transformations
# ──────────────────────────────────────────────


class TestBatch:
    def test_batch_matches_single(self):
        model = _bundled_model("iau_moon")
        epochs = [Epoch(2000, 1, 1), Epoch(2010, 6, 15, 3, 0, 0.0), Epoch(2025, 12, 31)]
        batch = evaluate_batch(model, epochs)
        for i, epc in enumerate(epochs):
            single = evaluate(model, epc)
            for b, s in zip(batch, single):
                assert float(b[i]) == pytest.approx(float(s), rel=1e-12)

    def test_batch_of_days(self):
        model = _bundled_model("iau_earth")
        days = jnp.linspace(-100.0, 100.0, 5)
        batch = evaluate_batch(model, days)
        assert batch.w.shape == (5,)

    def test_batch_non_finite(self):
        model = RotationModel.from_formulas("0", "0", "1/d")
        with pytest.raises(EvaluationError):
            evaluate_batch(model, jnp.array([1.0, 0.0]))

    def test_jit(self):
        model = _bundled_model("iau_neptune")
        jitted = jax.jit(lambda d: evaluate_days(model, d))
        eager = evaluate_days(model, 5000.0)
        for a, b in zip(jitted(5000.0), eager):
            assert float(a) == pytest.approx(float(b), rel=1e-12)

    def test_jacfwd_rate(self):
        model = _bundled_model("iau_earth")
        rate = jax.jacfwd(lambda d: evaluate_days(model, d).w)(0.0)
        assert float(rate) == pytest.approx(360.9856235 * _D2R, rel=1e-12)


class TestSeries:
    def test_series(self):
        model = _bundled_model("iau_mars")
        epochs = [Epoch(2000, 1, 1) + i * 3600.0 for i in range(3)]
        results = evaluate_series(model, epochs)
        assert len(results) == 3
        assert float(results[2].w) > float(results[0].w)

    def test_series_cancelled(self):
        model = _bundled_model("iau_mars")
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(OperationCancelled) as exc:
            evaluate_series(model, [Epoch(2000, 1, 1)] * 3, cancel=cancel)
        assert exc.value.completed == 0

    def test_series_not_cancelled(self):
        model = _bundled_model("iau_sun")
        results = evaluate_series(model, [Epoch(2000, 1, 1)] * 2, cancel=threading.Event())
        assert len(results) == 2
