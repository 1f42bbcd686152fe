"""
Rule-based periodization builder.

Produces a block-periodized plan independently of the evolutionary
scheduler:

    Accumulation     35% of the time frame   moderate intensity, volume focus
    Intensification  35%                     high intensity, intensity focus
    Realization      20% + remainder         peak, performance focus
    Taper            +2 weeks                only with a competition date

Each block has an emphasis list (strength / endurance / conditioning /
speed) derived from which goal types are present and normalised to sum
to 1.  The weekly plan cycles through that list one session per day, and
every phase is enriched with a progression model
(:func:`trainplan.engine.progression.create_progression_model`).
"""

from __future__ import annotations

import math
from typing import Any, Optional, Sequence

from loguru import logger
from pydantic import BaseModel, Field

from trainplan.core.errors import InvalidInputError
from trainplan.engine.progression import ProgressionConfig, create_progression_model
from trainplan.engine.validation import coerce_goals, coerce_model
from trainplan.schemas.constraints import Calendar, PeriodizationConstraints
from trainplan.schemas.goal import Goal, GoalType
from trainplan.schemas.periodization import (
    EmphasisWeight,
    PeriodizationPlan,
    Phase,
    PhaseTemplate,
)
from trainplan.schemas.planned_session import PlannedSession

# ======================================================================
# Phase tables
# ======================================================================

_BLOCK_SHARES = (0.35, 0.35, 0.20)

# (name, intensity label, focus, per-modality phase factors)
_PHASE_LAYOUT: list[tuple[str, str, str, dict[str, float]]] = [
    ("Accumulation", "moderate", "volume",
     {"strength": 0.6, "endurance": 0.7, "conditioning": 0.5, "speed": 0.2}),
    ("Intensification", "high", "intensity",
     {"strength": 0.9, "endurance": 0.5, "conditioning": 0.6, "speed": 0.8}),
    ("Realization", "peak", "performance",
     {"strength": 0.85, "endurance": 0.6, "conditioning": 0.5, "speed": 0.9}),
]

_EMPHASIS_MODALITIES: dict[str, list[str]] = {
    "strength": ["strength", "conditioning"],
    "endurance": ["endurance"],
    "conditioning": ["conditioning", "endurance"],
    "speed": ["strength", "speed"],
}
_FALLBACK_MODALITIES = ["conditioning"]

_TAPER_WEEKS = 2
_TAPER_SESSIONS: list[dict[str, Any]] = [
    {"day": 0, "modalities": ["strength"], "intensity": 0.55, "session_load": 60,
     "primary_focus": "strength", "recovery_focus": "neuromuscular"},
    {"day": 2, "modalities": ["endurance"], "intensity": 0.6, "session_load": 45,
     "primary_focus": "endurance", "recovery_focus": "glycogen"},
    {"day": 4, "modalities": ["speed"], "intensity": 0.65, "session_load": 35,
     "primary_focus": "speed", "recovery_focus": "nervousSystem"},
]

# Three blocks of at least one week each.
_MIN_TIME_FRAME = 3


class PeriodizationConfig(BaseModel):
    """Scoring constants for the performance estimate."""

    volume_weight: float = Field(0.4, ge=0.0)
    intensity_weight: float = Field(60.0, ge=0.0)
    fatigue_volume_scale: float = Field(1500.0, gt=0.0)


DEFAULT_PERIODIZATION_CONFIG = PeriodizationConfig()


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ======================================================================
# Phase template
# ======================================================================


def block_lengths(time_frame: int) -> list[int]:
    """Split ``time_frame`` weeks 35/35/20, remainder folded into the last block."""
    lengths = [_round_half_up(time_frame * share) for share in _BLOCK_SHARES]
    lengths[-1] += time_frame - sum(lengths)
    return lengths


def _goal_priorities(goals: Sequence[Goal]) -> dict[str, float]:
    types = {g.known_type for g in goals}
    return {
        "strength": 1.0 if GoalType.STRENGTH in types else 0.5,
        "endurance": 1.0 if GoalType.ENDURANCE in types else 0.4,
        "conditioning": 0.8 if GoalType.BODY_COMPOSITION in types else 0.3,
        "speed": 0.7 if types & {GoalType.SPEED, GoalType.AGILITY} else 0.2,
    }


def _normalise(weights: dict[str, float]) -> list[EmphasisWeight]:
    total = sum(weights.values())
    return [EmphasisWeight(key=key, value=value / total) for key, value in weights.items()]


def determine_emphasis(goals: Sequence[Goal]) -> dict[str, list[EmphasisWeight]]:
    """Normalised emphasis list per phase name."""
    priorities = _goal_priorities(goals)
    return {
        name: _normalise({key: priorities[key] * factor for key, factor in factors.items()})
        for name, _, _, factors in _PHASE_LAYOUT
    }


def build_phase_template(time_frame: int, goals: Sequence[Goal]) -> list[PhaseTemplate]:
    emphasis = determine_emphasis(goals)
    lengths = block_lengths(time_frame)
    return [
        PhaseTemplate(name=name, weeks=weeks, emphasis=emphasis[name], intensity_label=label, focus=focus)
        for (name, label, focus, _), weeks in zip(_PHASE_LAYOUT, lengths)
    ]


# ======================================================================
# Weekly plan
# ======================================================================


def day_intensity(focus: str, day: int) -> float:
    if focus == "volume":
        return 0.65 + (day % 3) * 0.05
    if focus == "intensity":
        return 0.7 + (day % 2) * 0.07
    return 0.6 + (day % 4) * 0.08


def _recovery_focus(emphasis: str, goals: Sequence[Goal]) -> str:
    if emphasis == "strength":
        return "neuromuscular" if any(g.known_type == GoalType.STRENGTH for g in goals) else "general"
    if emphasis == "endurance":
        return "glycogen"
    if emphasis == "speed":
        return "nervousSystem"
    return "general"


def construct_weekly_plan(
    phase: PhaseTemplate,
    sessions_per_week: int,
    goals: Sequence[Goal],
) -> list[PlannedSession]:
    sessions: list[PlannedSession] = []
    for day in range(sessions_per_week):
        emphasis = phase.emphasis[day % len(phase.emphasis)]
        intensity = day_intensity(phase.focus, day)
        sessions.append(
            PlannedSession(
                day=day,
                modalities=list(_EMPHASIS_MODALITIES.get(emphasis.key, _FALLBACK_MODALITIES)),
                intensity=intensity,
                primary_focus=emphasis.key,
                session_load=intensity * emphasis.value * 100,
                recovery_focus=_recovery_focus(emphasis.key, goals),
            )
        )
    return sessions


def _build_taper(
    goals: Sequence[Goal],
    constraints: PeriodizationConstraints,
    calendar: Optional[Calendar],
) -> Optional[PhaseTemplate]:
    has_competition = constraints.competition_date is not None or (
        calendar is not None and calendar.event_date is not None
    )
    if not has_competition:
        return None
    return PhaseTemplate(
        name="Taper",
        weeks=_TAPER_WEEKS,
        emphasis=determine_emphasis(goals)["Realization"],
        intensity_label="reduced",
        focus="taper",
    )


# ======================================================================
# Performance estimate
# ======================================================================


def estimate_performance_gain(
    phases: Sequence[Phase],
    fatigue_sensitivity: float,
    config: Optional[PeriodizationConfig] = None,
) -> float:
    """Heuristic plan score; later, heavier phases count more."""
    cfg = config or DEFAULT_PERIODIZATION_CONFIG
    if not phases:
        return 0.0
    volumes = [sum(s.session_load for s in phase.weekly_plan) * phase.weeks for phase in phases]
    intensities = [phase.mean_intensity for phase in phases]
    volume_score = sum(v * (i + 1) for i, v in enumerate(volumes)) / len(volumes)
    intensity_score = sum(intensities) / len(intensities)
    fatigue_penalty = fatigue_sensitivity * sum(volumes) / cfg.fatigue_volume_scale
    return max(0.0, volume_score * cfg.volume_weight + intensity_score * cfg.intensity_weight - fatigue_penalty)


# ======================================================================
# Main entry point
# ======================================================================


def _enrich(
    template: PhaseTemplate,
    weekly_plan: list[PlannedSession],
    progression_config: Optional[ProgressionConfig],
) -> Phase:
    return Phase(
        **template.model_dump(),
        weekly_plan=weekly_plan,
        progression=create_progression_model(template, weekly_plan, progression_config),
    )


def design_periodization_plan(
    goals: Sequence[Any],
    constraints: Any = None,
    calendar: Any = None,
    config: Optional[PeriodizationConfig] = None,
    progression_config: Optional[ProgressionConfig] = None,
) -> PeriodizationPlan:
    """Build a phase-structured plan.

    Args:
        goals: Non-empty sequence of :class:`Goal` or goal mappings.
        constraints: :class:`PeriodizationConstraints`, a partial mapping, or
            ``None`` for the defaults.
        calendar: Optional :class:`Calendar` (or mapping) with an event date.
        config: Optional scoring override.
        progression_config: Optional override forwarded to every phase's
            progression model.

    Raises:
        InvalidInputError: If ``goals`` is empty or malformed, or the time
            frame is shorter than three weeks.
    """
    goal_list = coerce_goals(goals)
    normalised = coerce_model(constraints, PeriodizationConstraints)
    cal = coerce_model(calendar, Calendar) if calendar is not None else None

    if normalised.time_frame < _MIN_TIME_FRAME:
        raise InvalidInputError(
            "INVALID_TIME_FRAME",
            [f"time_frame must be at least {_MIN_TIME_FRAME} weeks, got {normalised.time_frame}"],
        )

    phases: list[Phase] = []
    for template in build_phase_template(normalised.time_frame, goal_list):
        weekly_plan = construct_weekly_plan(template, normalised.sessions_per_week, goal_list)
        phases.append(_enrich(template, weekly_plan, progression_config))

    taper = _build_taper(goal_list, normalised, cal)
    if taper is not None:
        taper_plan = [PlannedSession.model_validate(s) for s in _TAPER_SESSIONS]
        phases.append(_enrich(taper, taper_plan, progression_config))

    score = estimate_performance_gain(phases, normalised.fatigue_sensitivity, config)

    logger.info(
        "Periodization plan designed",
        phases=[(p.name, p.weeks) for p in phases],
        performance_score=round(score, 2),
    )
    return PeriodizationPlan(phases=phases, performance_score=score)
