"""
Interference model schemas.

The interference model scores how much each session in an ordered plan
is blunted by the sessions around it.  Four mechanisms are scored
separately, each on a 0-1 scale:

- ``molecular``  — AMPK/mTOR signalling conflict when strength and
  endurance share a session
- ``hormonal``   — anabolic/catabolic disruption from session stress
- ``glycogen``   — substrate availability for endurance/conditioning work
- ``recovery``   — residual fatigue from the previous, not yet recovered
  session

``total`` is the capped sum of the four.
"""

from __future__ import annotations

import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class InterferenceSession(BaseModel):
    """Any session-like record the interference model can score.

    Ordering uses ``timestamp`` when present and falls back to ``day``.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    timestamp: Optional[datetime.datetime] = None
    day: Optional[int] = None
    modalities: list[str] = Field(default_factory=list)
    intensity: float = Field(..., ge=0.0, le=1.0)
    duration: float = Field(60.0, ge=0.0, description="Minutes")


class RecoveryProfile(BaseModel):
    """Athlete recovery profile.  Baselines are normalised 0-1."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    cortisol_baseline: float = Field(0.5, ge=0.0, le=1.0)
    testosterone_baseline: float = Field(0.5, ge=0.0, le=1.0)
    hormonal_sensitivity: float = Field(0.5, ge=0.0)
    glycogen_capacity: float = Field(500.0, gt=0.0, description="Grams")
    available_glycogen: float = Field(400.0, ge=0.0, description="Grams")
    glycogen_use_rate: float = Field(2.0, ge=0.0, description="Grams per minute at intensity 1.0")
    glycogen_demand_weight: float = Field(0.5, ge=0.0)
    recovery_rate: float = Field(0.05, ge=0.0, description="Per-hour exponential recovery rate")


class SessionInterference(BaseModel):
    """Interference components for one session (or the plan average)."""

    molecular: float = Field(0.0, ge=0.0, le=1.0)
    hormonal: float = Field(0.0, ge=0.0, le=1.0)
    glycogen: float = Field(0.0, ge=0.0, le=1.0)
    recovery: float = Field(0.0, ge=0.0, le=1.0)
    total: float = Field(0.0, ge=0.0, le=1.0)


class InterferenceResult(BaseModel):
    """Per-session scores (in chronological order) and their average."""

    sessions: list[SessionInterference]
    average: SessionInterference
