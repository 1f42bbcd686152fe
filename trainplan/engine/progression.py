"""
Progression model — load progression, deloads and auto-regulation.

Built once per periodization phase from the phase template and its weekly
plan.  Four parts:

Double progression
------------------
Each session gets a rep range by primary focus and a starting weight::

    initial_weight = session_load / (rep_range.min × intensity)

projected over four weeks with a compounding weekly increment::

    increment = base_intensity(focus) × 0.025
    weight[k] = initial_weight × (1 + increment) ** k      k = 0..3

Progression curves
------------------
Weekly intensity curves anchored on the phase's mean session intensity
``μ`` (``w = 0..weeks-1``)::

    linear      μ × (1 + 0.025·w)
    exponential μ × 1.03 ** w
    undulating  μ × (1 + 0.025·w) × (1.05 on even weeks, 0.95 on odd weeks)

Deload scheduling
-----------------
A fatigue curve over ``max(weeks, 4)`` weeks, ``min(0.25, 0.12 + 0.05·i)``,
is accumulated week by week.  When the running total reaches
``fatigue_threshold`` a deload week is emitted and the total restarts at
0.3: some fatigue carries over a deload.

Auto-regulation
---------------
Simulated readiness per session: target RPE is ``intensity × 10`` and the
HRV baseline is 0.52 for neuromuscular-recovery sessions, 0.6 otherwise.
The load adjustment follows the HRV deviation from 0.6.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from loguru import logger
from pydantic import BaseModel, Field

from trainplan.schemas.periodization import PhaseTemplate
from trainplan.schemas.planned_session import PlannedSession
from trainplan.schemas.progression import (
    AutoRegulationEntry,
    DeloadWeek,
    DoubleProgressionEntry,
    ProgressionCurves,
    ProgressionModel,
    RepRange,
)

# ======================================================================
# Configuration
# ======================================================================

_DEFAULT_REP_RANGES: dict[str, tuple[int, int]] = {
    "strength": (3, 6),
    "endurance": (10, 15),
    "speed": (2, 5),
}
_FALLBACK_REP_RANGE = (5, 12)

# Relative intensity each focus is trained at; drives the weekly increment.
_DEFAULT_BASE_INTENSITY: dict[str, float] = {
    "strength": 0.8,
    "endurance": 0.65,
    "conditioning": 0.7,
    "speed": 0.75,
}
_FALLBACK_BASE_INTENSITY = 0.7

_PROJECTION_WEEKS = 4
_INCREMENT_FACTOR = 0.025
_MIN_FATIGUE_WEEKS = 4
_DELOAD_CARRY_OVER = 0.3

_HRV_REFERENCE = 0.6
_HRV_BAND = 0.05


class ProgressionConfig(BaseModel):
    """Configuration for progression model construction."""

    fatigue_threshold: float = Field(0.65, gt=0.0)
    deload_fraction: float = Field(0.4, ge=0.0, le=1.0)
    rep_ranges: dict[str, tuple[int, int]] = Field(default_factory=lambda: dict(_DEFAULT_REP_RANGES))
    base_intensity: dict[str, float] = Field(default_factory=lambda: dict(_DEFAULT_BASE_INTENSITY))

    def rep_range_for(self, focus: str) -> RepRange:
        low, high = self.rep_ranges.get(focus, _FALLBACK_REP_RANGE)
        return RepRange(min=low, max=high)

    def base_intensity_for(self, focus: str) -> float:
        return self.base_intensity.get(focus, _FALLBACK_BASE_INTENSITY)


DEFAULT_PROGRESSION_CONFIG = ProgressionConfig()


# ======================================================================
# Double progression
# ======================================================================


def _project_weights(initial_weight: float, base_intensity: float) -> list[float]:
    increment = base_intensity * _INCREMENT_FACTOR
    return [round(initial_weight * (1 + increment) ** week, 2) for week in range(_PROJECTION_WEEKS)]


def _double_progression(
    weekly_plan: Sequence[PlannedSession],
    cfg: ProgressionConfig,
) -> list[DoubleProgressionEntry]:
    entries: list[DoubleProgressionEntry] = []
    for session in weekly_plan:
        rep_range = cfg.rep_range_for(session.primary_focus)
        if session.intensity > 0:
            initial_weight = session.session_load / (rep_range.min * session.intensity)
        else:
            initial_weight = 0.0
        entries.append(
            DoubleProgressionEntry(
                session=session,
                rep_range=rep_range,
                weight_progression=_project_weights(initial_weight, cfg.base_intensity_for(session.primary_focus)),
            )
        )
    return entries


# ======================================================================
# Curves and deloads
# ======================================================================


def build_fatigue_curve(weeks: int) -> list[float]:
    return [min(0.25, 0.12 + 0.05 * i) for i in range(max(weeks, _MIN_FATIGUE_WEEKS))]


def schedule_deloads(
    fatigue_curve: Sequence[float],
    fatigue_threshold: float,
    deload_fraction: float,
) -> tuple[list[DeloadWeek], list[float]]:
    """Place deload weeks on an accumulated fatigue curve.

    Returns:
        ``(deload_weeks, cumulative)`` where ``cumulative[i]`` is the running
        fatigue at the end of week ``i + 1`` (after any reset).
    """
    deloads: list[DeloadWeek] = []
    trace: list[float] = []
    cumulative = 0.0
    for i, fatigue in enumerate(fatigue_curve):
        cumulative += fatigue
        if cumulative >= fatigue_threshold:
            deloads.append(DeloadWeek(week=i + 1, load_reduction=deload_fraction))
            cumulative = _DELOAD_CARRY_OVER
        trace.append(cumulative)
    return deloads, trace


def _progression_curves(weeks: int, weekly_plan: Sequence[PlannedSession]) -> ProgressionCurves:
    if weekly_plan:
        mean_intensity = sum(s.intensity for s in weekly_plan) / len(weekly_plan)
    else:
        mean_intensity = 0.0
    linear = [round(mean_intensity * (1 + 0.025 * w), 4) for w in range(weeks)]
    exponential = [round(mean_intensity * 1.03 ** w, 4) for w in range(weeks)]
    undulating = [
        round(mean_intensity * (1 + 0.025 * w) * (1.05 if w % 2 == 0 else 0.95), 4) for w in range(weeks)
    ]
    return ProgressionCurves(
        linear=linear,
        exponential=exponential,
        undulating=undulating,
        fatigue_curve=build_fatigue_curve(weeks),
    )


# ======================================================================
# Auto-regulation
# ======================================================================


def _load_adjustment(hrv: float, target_rpe: float) -> float:
    deviation = hrv - _HRV_REFERENCE
    if deviation >= _HRV_BAND:
        return -0.05 if target_rpe >= 8 else 0.0
    if deviation <= -_HRV_BAND:
        return -0.1
    return -0.02


def _auto_regulation(weekly_plan: Sequence[PlannedSession]) -> list[AutoRegulationEntry]:
    entries: list[AutoRegulationEntry] = []
    for session in weekly_plan:
        target_rpe = round(session.intensity * 10, 1)
        hrv_baseline = 0.52 if session.recovery_focus == "neuromuscular" else _HRV_REFERENCE
        entries.append(
            AutoRegulationEntry(
                session=session,
                target_rpe=target_rpe,
                hrv_baseline=hrv_baseline,
                load_adjustment=_load_adjustment(hrv_baseline, target_rpe),
            )
        )
    return entries


# ======================================================================
# Main entry point
# ======================================================================


def create_progression_model(
    phase: PhaseTemplate,
    weekly_plan: Sequence[Any],
    config: Optional[ProgressionConfig] = None,
) -> ProgressionModel:
    """Build the progression model for one phase.

    Args:
        phase: Phase template (only ``weeks`` and ``name`` are read).
        weekly_plan: The phase's planned sessions (models or mappings).
        config: Optional :class:`ProgressionConfig` override.

    Returns:
        :class:`ProgressionModel`.
    """
    cfg = config or DEFAULT_PROGRESSION_CONFIG
    sessions = [s if isinstance(s, PlannedSession) else PlannedSession.model_validate(s) for s in weekly_plan]

    curves = _progression_curves(phase.weeks, sessions)
    deloads, _ = schedule_deloads(curves.fatigue_curve, cfg.fatigue_threshold, cfg.deload_fraction)

    logger.debug(
        "Progression model built",
        phase=phase.name,
        weeks=phase.weeks,
        deload_weeks=[d.week for d in deloads],
    )

    return ProgressionModel(
        double_progression=_double_progression(sessions, cfg),
        progression_curves=curves,
        deload_weeks=deloads,
        auto_regulation=_auto_regulation(sessions),
    )
