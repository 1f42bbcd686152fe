"""Pydantic schemas for engine inputs and outputs."""

from trainplan.schemas.goal import Goal, GoalType
from trainplan.schemas.constraints import (
    Calendar,
    PeriodizationConstraints,
    SchedulerConstraints,
)
from trainplan.schemas.interference import (
    InterferenceResult,
    InterferenceSession,
    RecoveryProfile,
    SessionInterference,
)
from trainplan.schemas.scheduler import (
    Candidate,
    GoalScore,
    InterferenceRisk,
    PlanSummary,
    Session,
)
from trainplan.schemas.planned_session import PlannedSession
from trainplan.schemas.progression import (
    AutoRegulationEntry,
    DeloadWeek,
    DoubleProgressionEntry,
    ProgressionCurves,
    ProgressionModel,
    RepRange,
)
from trainplan.schemas.periodization import (
    EmphasisWeight,
    PeriodizationPlan,
    Phase,
    PhaseTemplate,
)

__all__ = [
    "Goal",
    "GoalType",
    "Calendar",
    "PeriodizationConstraints",
    "SchedulerConstraints",
    "InterferenceResult",
    "InterferenceSession",
    "RecoveryProfile",
    "SessionInterference",
    "Candidate",
    "GoalScore",
    "InterferenceRisk",
    "PlanSummary",
    "Session",
    "PlannedSession",
    "AutoRegulationEntry",
    "DeloadWeek",
    "DoubleProgressionEntry",
    "ProgressionCurves",
    "ProgressionModel",
    "RepRange",
    "EmphasisWeight",
    "PeriodizationPlan",
    "Phase",
    "PhaseTemplate",
]
