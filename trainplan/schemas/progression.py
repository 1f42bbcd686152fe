"""
Progression model schemas.

A progression model is attached to every periodization phase.  It holds:

- **double progression** — per-session rep range and a 4-week weight
  projection,
- **progression curves** — weekly intensity curves (linear, exponential,
  undulating) and the fatigue curve,
- **deload weeks** — weeks where load is cut by a fixed fraction,
- **auto-regulation** — per-session target RPE, simulated HRV baseline and
  the resulting load adjustment.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from trainplan.schemas.planned_session import PlannedSession


class RepRange(BaseModel):
    min: int = Field(..., ge=1)
    max: int = Field(..., ge=1)


class DoubleProgressionEntry(BaseModel):
    """Rep range and projected working weights for one session."""

    session: PlannedSession
    rep_range: RepRange
    weight_progression: list[float] = Field(..., min_length=4, max_length=4)


class ProgressionCurves(BaseModel):
    linear: list[float]
    exponential: list[float]
    undulating: list[float]
    fatigue_curve: list[float]


class DeloadWeek(BaseModel):
    week: int = Field(..., ge=1, description="1-based week within the phase")
    load_reduction: float = Field(..., ge=0.0, le=1.0)


class AutoRegulationEntry(BaseModel):
    """Readiness-driven adjustment for one session."""

    session: PlannedSession
    target_rpe: float = Field(..., ge=0.0, le=10.0)
    hrv_baseline: float
    load_adjustment: float = Field(..., description="Fractional load change, e.g. -0.1 = reduce 10%")


class ProgressionModel(BaseModel):
    double_progression: list[DoubleProgressionEntry]
    progression_curves: ProgressionCurves
    deload_weeks: list[DeloadWeek]
    auto_regulation: list[AutoRegulationEntry]
