"""
Unit tests for progression model construction.

Tests double progression, the intensity and fatigue curves, deload
placement and auto-regulation.
"""

import pytest

from trainplan.engine.progression import (
    ProgressionConfig,
    _auto_regulation,
    _load_adjustment,
    _progression_curves,
    _project_weights,
    build_fatigue_curve,
    create_progression_model,
    schedule_deloads,
)
from trainplan.schemas.periodization import PhaseTemplate
from trainplan.schemas.planned_session import PlannedSession


# ======================================================================
# Helpers
# ======================================================================


def _make_template(weeks: int = 8) -> PhaseTemplate:
    return PhaseTemplate(name="Build", weeks=weeks, emphasis=[], intensity_label="moderate", focus="volume")


def _make_session(
    focus: str = "strength",
    intensity: float = 0.8,
    load: float = 60.0,
    recovery_focus: str = "general",
    day: int = 0,
) -> PlannedSession:
    return PlannedSession(
        day=day,
        modalities=[focus],
        intensity=intensity,
        primary_focus=focus,
        session_load=load,
        recovery_focus=recovery_focus,
    )


# ======================================================================
# Double progression
# ======================================================================


class TestDoubleProgression:
    def test_projected_weights(self):
        assert _project_weights(25.0, 0.8) == [25.0, 25.5, 26.01, 26.53]

    def test_weights_never_decrease(self):
        model = create_progression_model(
            _make_template(),
            [_make_session(f, i, l) for f, i, l in [("strength", 0.8, 60), ("endurance", 0.65, 40), ("x", 0.7, 5)]],
        )
        for entry in model.double_progression:
            weights = entry.weight_progression
            assert len(weights) == 4
            assert all(a <= b for a, b in zip(weights, weights[1:]))

    def test_initial_weight_from_load(self):
        model = create_progression_model(_make_template(), [_make_session("strength", 0.8, 60)])
        # 60 / (3 reps × 0.8)
        assert model.double_progression[0].weight_progression[0] == 25.0

    @pytest.mark.parametrize("focus, expected", [
        ("strength", (3, 6)),
        ("endurance", (10, 15)),
        ("speed", (2, 5)),
        ("conditioning", (5, 12)),
    ])
    def test_rep_ranges(self, focus, expected):
        model = create_progression_model(_make_template(), [_make_session(focus)])
        rep_range = model.double_progression[0].rep_range
        assert (rep_range.min, rep_range.max) == expected

    def test_custom_rep_ranges(self):
        cfg = ProgressionConfig(rep_ranges={"strength": (1, 3)})
        model = create_progression_model(_make_template(), [_make_session("strength")], cfg)
        assert model.double_progression[0].rep_range.min == 1

    def test_zero_intensity_session(self):
        model = create_progression_model(_make_template(), [_make_session(intensity=0.0, load=0.0)])
        assert model.double_progression[0].weight_progression == [0.0, 0.0, 0.0, 0.0]


# ======================================================================
# Curves and deloads
# ======================================================================


class TestCurves:
    def test_fatigue_curve_minimum_four_weeks(self):
        assert build_fatigue_curve(2) == pytest.approx([0.12, 0.17, 0.22, 0.25])

    def test_fatigue_curve_saturates(self):
        curve = build_fatigue_curve(8)
        assert len(curve) == 8
        assert curve[3:] == pytest.approx([0.25] * 5)

    def test_intensity_curves(self):
        curves = _progression_curves(3, [_make_session(intensity=0.6), _make_session(intensity=0.8)])
        assert curves.linear == pytest.approx([0.7, 0.7175, 0.735], abs=1e-4)
        assert curves.exponential == pytest.approx([0.7, 0.721, 0.7426], abs=1e-4)
        assert curves.undulating == pytest.approx([0.735, 0.6816, 0.7718], abs=1e-4)

    def test_curve_lengths(self):
        model = create_progression_model(_make_template(2), [_make_session()])
        curves = model.progression_curves
        assert len(curves.linear) == len(curves.exponential) == len(curves.undulating) == 2
        assert len(curves.fatigue_curve) == 4


class TestDeloads:
    def test_deload_weeks_and_reset(self):
        deloads, trace = schedule_deloads(build_fatigue_curve(8), 0.6, 0.5)
        assert [d.week for d in deloads] == [4, 6, 8]
        assert all(d.load_reduction == 0.5 for d in deloads)
        for d in deloads:
            assert trace[d.week - 1] == pytest.approx(0.3)
        assert trace[:3] == pytest.approx([0.12, 0.29, 0.51])

    def test_high_threshold_never_deloads(self):
        deloads, trace = schedule_deloads(build_fatigue_curve(4), 5.0, 0.4)
        assert deloads == []
        assert trace[-1] == pytest.approx(0.76)

    def test_eight_week_phase(self):
        cfg = ProgressionConfig(fatigue_threshold=0.6, deload_fraction=0.5)
        model = create_progression_model(_make_template(8), [_make_session()], cfg)
        assert model.deload_weeks
        assert all(d.load_reduction == 0.5 for d in model.deload_weeks)

    def test_default_config(self):
        model = create_progression_model(_make_template(8), [_make_session()])
        assert [d.week for d in model.deload_weeks] == [4, 6, 8]
        assert all(d.load_reduction == 0.4 for d in model.deload_weeks)


# ======================================================================
# Auto-regulation
# ======================================================================


class TestAutoRegulation:
    @pytest.mark.parametrize("hrv, rpe, expected", [
        (0.7, 8.0, -0.05),
        (0.7, 7.0, 0.0),
        (0.52, 6.0, -0.1),
        (0.6, 9.0, -0.02),
    ])
    def test_load_adjustment(self, hrv, rpe, expected):
        assert _load_adjustment(hrv, rpe) == expected

    def test_entries(self):
        entries = _auto_regulation([
            _make_session(intensity=0.75),
            _make_session(intensity=0.85, recovery_focus="neuromuscular"),
        ])
        assert [e.target_rpe for e in entries] == [7.5, 8.5]
        assert [e.hrv_baseline for e in entries] == [0.6, 0.52]
        assert [e.load_adjustment for e in entries] == [-0.02, -0.1]

    def test_accepts_session_mappings(self):
        model = create_progression_model(
            _make_template(),
            [{"day": 0, "modalities": ["endurance"], "intensity": 0.7,
              "primary_focus": "endurance", "session_load": 30}],
        )
        assert model.auto_regulation[0].session.primary_focus == "endurance"
