"""
Evolutionary scheduler schemas.

A :class:`Candidate` is one chromosome of the NSGA-II search: a day-by-day
schedule plus the quantities derived from it.  Derived fields are always
recomputed from the schedule after crossover or mutation.

Per-generation sort metadata (rank, crowding distance, domination sets)
is **not** stored here; the scheduler keeps it in parallel arrays keyed
by population index.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from trainplan.schemas.goal import Goal

MODALITY_NAMES = ["strength", "endurance", "conditioning", "speed"]

# Modalities tracked in every load distribution, even when unused.
LOAD_MODALITIES = ["strength", "endurance", "conditioning"]


class Session(BaseModel):
    """One scheduled training day."""

    day: int = Field(..., ge=0)
    modalities: list[str] = Field(default_factory=list)
    duration: float = Field(..., ge=0.0, description="Minutes")
    intensity: float = Field(..., ge=0.0, le=1.0)
    recovery: float = Field(0.0, ge=0.0, description="Recovery hours after the session")

    @property
    def load(self) -> float:
        """Training load contributed to each of the session's modalities."""
        return self.duration * self.intensity


class InterferenceRisk(BaseModel):
    """Simplified interference estimate derived from a load distribution.

    Distinct from :class:`~trainplan.schemas.interference.InterferenceResult`:
    this one only looks at the aggregate load split, not at session order.
    """

    strength_penalty: float = Field(0.0, ge=0.0, le=1.0)
    glycogen_stress: float = Field(0.0, ge=0.0, le=1.0)
    hormonal_conflict: float = Field(0.0, ge=0.0, le=1.0)


class Candidate(BaseModel):
    """A candidate schedule in the evolutionary population."""

    schedule: list[Session]
    load_distribution: dict[str, float]
    fatigue_index: float
    interference_risk: InterferenceRisk
    objectives: list[float] = Field(default_factory=list)

    def clone(self) -> Candidate:
        """Return an independent copy (sessions and containers copied)."""
        return Candidate(
            schedule=[s.model_copy(update={"modalities": list(s.modalities)}) for s in self.schedule],
            load_distribution=dict(self.load_distribution),
            fatigue_index=self.fatigue_index,
            interference_risk=self.interference_risk.model_copy(),
            objectives=list(self.objectives),
        )


class GoalScore(BaseModel):
    """A goal paired with the objective value the chosen plan achieves."""

    goal: Goal
    score: float


class PlanSummary(BaseModel):
    """Best candidate of an ``optimize_training_plan`` run."""

    schedule: list[Session]
    load_distribution: dict[str, float]
    fatigue_index: float
    interference_risk: InterferenceRisk
    objective_scores: list[float]
    goals_satisfied: list[GoalScore]
    rank: int = Field(0, ge=0, description="Pareto front of the chosen candidate in the final population")
    crowding_distance: float = Field(0.0, ge=0.0)
    generations: int = Field(0, ge=0)
    notes: list[str] = Field(default_factory=list, description="Constraint feasibility notes")
