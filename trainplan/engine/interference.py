"""
Concurrent-training interference model.

Scores how much each session of an ordered plan is blunted by the
physiology of mixing modalities.  This is the *detailed* model; the
evolutionary scheduler carries its own aggregate estimate
(:func:`trainplan.engine.scheduler.estimate_interference`) and the two are
deliberately kept separate.

Model
-----
Sessions are sorted chronologically (stable: ties keep input order).  For
each session, with ``gap`` = hours since the previous session (0 for the
first one):

    molecular = min(1, intensity × exp(-0.1 × max(0, gap - 6)))
                (only when the session mixes strength and endurance)

    stress    = intensity × duration / 60
    hormonal  = clamp(stress × sensitivity × (1 - (testosterone - cortisol)))

    use(s)    = duration × intensity × glycogen_use_rate
    glycogen  = clamp(max(0, use(prev) - available) / capacity
                      + demand_weight × use(s) / capacity)
                (only for endurance / conditioning sessions)

    recovered = 1 - exp(-recovery_rate × gap)
    recovery  = clamp((1 - recovered) × prev.duration × prev.intensity / 200)

    total     = min(1, molecular + hormonal + glycogen + recovery)

The plan average is the per-component arithmetic mean, and its ``total``
is recomputed from the averaged components (never the mean of totals).
"""

from __future__ import annotations

import math
from typing import Any, Optional, Sequence

from loguru import logger
from pydantic import ValidationError

from trainplan.core.errors import InvalidInputError
from trainplan.engine.validation import coerce_model, is_sequence
from trainplan.schemas.interference import (
    InterferenceResult,
    InterferenceSession,
    RecoveryProfile,
    SessionInterference,
)

# Hours of separation that fully protect against molecular interference.
_MOLECULAR_SAFE_GAP_HOURS = 6.0
_MOLECULAR_DECAY = 0.1

# Divisor turning unrecovered duration × intensity into fatigue.
_RESIDUAL_FATIGUE_SCALE = 200.0

_GLYCOGEN_MODALITIES = {"endurance", "conditioning"}


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def _session_hours(session: InterferenceSession) -> float:
    """Position of a session on the time axis, in hours."""
    if session.timestamp is not None:
        return session.timestamp.timestamp() / 3600.0
    if session.day is not None:
        return session.day * 24.0
    return 0.0


def _coerce_sessions(session_plan: Any) -> list[InterferenceSession]:
    if not is_sequence(session_plan):
        raise InvalidInputError(
            "INVALID_SESSION_PLAN", [f"session_plan must be a sequence, got {type(session_plan).__name__}"]
        )
    sessions: list[InterferenceSession] = []
    for index, raw in enumerate(session_plan):
        if isinstance(raw, InterferenceSession):
            sessions.append(raw)
            continue
        if hasattr(raw, "model_dump"):
            raw = raw.model_dump()
        try:
            sessions.append(InterferenceSession.model_validate(raw))
        except ValidationError as exc:
            raise InvalidInputError(
                "INVALID_SESSION_PLAN", [f"session_plan[{index}]: {err['msg']}" for err in exc.errors()]
            ) from exc
    return sessions


# ======================================================================
# Mechanisms
# ======================================================================


def _molecular_interference(session: InterferenceSession, gap_hours: float) -> float:
    modalities = set(session.modalities)
    if not {"strength", "endurance"} <= modalities:
        return 0.0
    decay = math.exp(-_MOLECULAR_DECAY * max(0.0, gap_hours - _MOLECULAR_SAFE_GAP_HOURS))
    return min(1.0, session.intensity * decay)


def _hormonal_disruption(session: InterferenceSession, profile: RecoveryProfile) -> float:
    stress = session.intensity * (session.duration / 60.0)
    balance = 1.0 - (profile.testosterone_baseline - profile.cortisol_baseline)
    return _clamp01(stress * profile.hormonal_sensitivity * balance)


def _glycogen_use(session: InterferenceSession, profile: RecoveryProfile) -> float:
    return session.duration * session.intensity * profile.glycogen_use_rate


def _glycogen_deficit(
    session: InterferenceSession,
    previous: Optional[InterferenceSession],
    profile: RecoveryProfile,
) -> float:
    if not _GLYCOGEN_MODALITIES & set(session.modalities):
        return 0.0
    previous_use = _glycogen_use(previous, profile) if previous is not None else 0.0
    carry_over = max(0.0, previous_use - profile.available_glycogen) / profile.glycogen_capacity
    demand = profile.glycogen_demand_weight * _glycogen_use(session, profile) / profile.glycogen_capacity
    return _clamp01(carry_over + demand)


def _recovery_competition(
    previous: Optional[InterferenceSession],
    gap_hours: float,
    profile: RecoveryProfile,
) -> float:
    if previous is None:
        return 0.0
    recovered = 1.0 - math.exp(-profile.recovery_rate * gap_hours)
    unmet = 1.0 - recovered
    return _clamp01(unmet * previous.duration * previous.intensity / _RESIDUAL_FATIGUE_SCALE)


def _score_session(
    session: InterferenceSession,
    previous: Optional[InterferenceSession],
    gap_hours: float,
    profile: RecoveryProfile,
) -> SessionInterference:
    molecular = _molecular_interference(session, gap_hours)
    hormonal = _hormonal_disruption(session, profile)
    glycogen = _glycogen_deficit(session, previous, profile)
    recovery = _recovery_competition(previous, gap_hours, profile)
    return SessionInterference(
        molecular=molecular,
        hormonal=hormonal,
        glycogen=glycogen,
        recovery=recovery,
        total=min(1.0, molecular + hormonal + glycogen + recovery),
    )


def _average(scores: Sequence[SessionInterference]) -> SessionInterference:
    if not scores:
        return SessionInterference()
    n = len(scores)
    molecular = sum(s.molecular for s in scores) / n
    hormonal = sum(s.hormonal for s in scores) / n
    glycogen = sum(s.glycogen for s in scores) / n
    recovery = sum(s.recovery for s in scores) / n
    # Total from the averaged components, not the mean of capped totals.
    return SessionInterference(
        molecular=molecular,
        hormonal=hormonal,
        glycogen=glycogen,
        recovery=recovery,
        total=min(1.0, molecular + hormonal + glycogen + recovery),
    )


# ======================================================================
# Main entry point
# ======================================================================


def calculate_interference(
    session_plan: Sequence[Any],
    recovery_profile: Any = None,
) -> InterferenceResult:
    """Score interference for every session of ``session_plan``.

    Args:
        session_plan: Sequence of session-like records (mappings or models)
            with ``timestamp`` or ``day``, ``modalities``, ``intensity`` and
            ``duration``.
        recovery_profile: :class:`RecoveryProfile`, a partial mapping, or
            ``None`` for the defaults.

    Returns:
        :class:`InterferenceResult` with per-session scores in chronological
        order and the plan average.

    Raises:
        InvalidInputError: If ``session_plan`` is not a sequence or holds an
            invalid session.
    """
    sessions = _coerce_sessions(session_plan)
    profile = coerce_model(recovery_profile, RecoveryProfile)

    ordered = sorted(sessions, key=_session_hours)

    scores: list[SessionInterference] = []
    previous: Optional[InterferenceSession] = None
    for session in ordered:
        gap = _session_hours(session) - _session_hours(previous) if previous is not None else 0.0
        scores.append(_score_session(session, previous, max(0.0, gap), profile))
        previous = session

    average = _average(scores)
    logger.debug("Interference computed", sessions=len(scores), average_total=round(average.total, 3))
    return InterferenceResult(sessions=scores, average=average)
