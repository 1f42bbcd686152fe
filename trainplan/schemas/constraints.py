"""
Constraint and calendar schemas.

Constraints arrive as partial maps from the caller and are merged over
documented defaults.  Both ``camelCase`` keys (``maxWeeklySessions``)
and ``snake_case`` keys (``max_weekly_sessions``) are accepted.
"""

from __future__ import annotations

import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_EQUIPMENT = ["barbell", "dumbbell", "track"]


class SchedulerConstraints(BaseModel):
    """Time, recovery and equipment limits for the evolutionary scheduler."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    max_weekly_sessions: int = Field(8, ge=1, description="Maximum sessions in any 7-day block")
    max_daily_duration: float = Field(90.0, gt=0.0, description="Maximum session duration (minutes)")
    min_recovery_hours: float = Field(12.0, ge=0.0, description="Recovery hours attached to every session")
    available_equipment: list[str] = Field(default_factory=lambda: list(DEFAULT_EQUIPMENT))
    fatigue_ceiling: float = Field(0.75, gt=0.0, le=1.0, description="Fatigue index above which the plan is flagged")
    sport_calendar: list[datetime.date] = Field(default_factory=list)


class PeriodizationConstraints(BaseModel):
    """Inputs for the rule-based periodization builder."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    sessions_per_week: int = Field(5, ge=1, le=14)
    time_frame: int = Field(16, ge=1, description="Plan length in weeks (excluding any taper)")
    competition_date: Optional[datetime.date] = None
    fatigue_sensitivity: float = Field(0.6, ge=0.0)


class Calendar(BaseModel):
    """Athlete calendar.  Only the competition date matters to planning."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    event_date: Optional[datetime.date] = None
