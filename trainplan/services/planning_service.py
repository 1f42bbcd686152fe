"""
Planning service.

Runs the two planning flows on behalf of callers (UI, storage, sync
layers live outside this package):

- **evolutionary** — goals + constraints + horizon → NSGA-II scheduler →
  plan summary, plus a session-level interference assessment of the chosen
  schedule,
- **periodized** — goals + constraints + calendar → phase-structured plan
  with progression models.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from loguru import logger
from pydantic import BaseModel

from trainplan.engine.interference import calculate_interference
from trainplan.engine.periodization import design_periodization_plan
from trainplan.engine.progression import ProgressionConfig
from trainplan.engine.random_source import RandomSource
from trainplan.engine.scheduler import MultiObjectiveScheduler, SchedulerConfig
from trainplan.schemas.interference import InterferenceResult
from trainplan.schemas.periodization import PeriodizationPlan
from trainplan.schemas.scheduler import PlanSummary


class EvolutionaryPlanResponse(BaseModel):
    """Scheduler summary plus its detailed interference assessment."""

    summary: PlanSummary
    interference: InterferenceResult


class TrainingPlanService:
    """Service facade over the planning engine."""

    def __init__(
        self,
        scheduler_config: Optional[SchedulerConfig] = None,
        progression_config: Optional[ProgressionConfig] = None,
        random_source: Optional[RandomSource] = None,
    ):
        self.scheduler = MultiObjectiveScheduler(config=scheduler_config, random_source=random_source)
        self.progression_config = progression_config

    def build_evolutionary_plan(
        self,
        goals: Sequence[Any],
        constraints: Any = None,
        time_horizon: Optional[int] = None,
        recovery_profile: Any = None,
    ) -> EvolutionaryPlanResponse:
        summary = self.scheduler.optimize_training_plan(goals, constraints, time_horizon)
        interference = calculate_interference(summary.schedule, recovery_profile)
        logger.info(
            "Evolutionary plan assessed",
            sessions=len(summary.schedule),
            average_interference=round(interference.average.total, 3),
            notes=len(summary.notes),
        )
        return EvolutionaryPlanResponse(summary=summary, interference=interference)

    def build_periodized_plan(
        self,
        goals: Sequence[Any],
        constraints: Any = None,
        calendar: Any = None,
    ) -> PeriodizationPlan:
        return design_periodization_plan(
            goals,
            constraints,
            calendar,
            progression_config=self.progression_config,
        )
