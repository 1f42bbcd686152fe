"""
Periodization schemas.

A periodization plan is a sequence of phases.  Each phase carries an
ordered emphasis list (modality weights summing to 1), a weekly plan of
:class:`PlannedSession` records, and a progression model.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from trainplan.schemas.planned_session import PlannedSession
from trainplan.schemas.progression import ProgressionModel


class EmphasisWeight(BaseModel):
    """Share of a phase devoted to one modality."""

    key: str
    value: float = Field(..., ge=0.0, le=1.0)


class PhaseTemplate(BaseModel):
    """Phase skeleton produced before the weekly plan is filled in."""

    name: str
    weeks: int = Field(..., gt=0)
    emphasis: list[EmphasisWeight]
    intensity_label: str
    focus: str

    @property
    def emphasis_map(self) -> dict[str, float]:
        return {e.key: e.value for e in self.emphasis}


class Phase(PhaseTemplate):
    """A fully built phase."""

    weekly_plan: list[PlannedSession]
    progression: Optional[ProgressionModel] = None

    @property
    def mean_intensity(self) -> float:
        if not self.weekly_plan:
            return 0.0
        return sum(s.intensity for s in self.weekly_plan) / len(self.weekly_plan)


class PeriodizationPlan(BaseModel):
    phases: list[Phase]
    performance_score: float = Field(..., ge=0.0)
