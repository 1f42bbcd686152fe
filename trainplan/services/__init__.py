"""Planning services."""

from trainplan.services.planning_service import EvolutionaryPlanResponse, TrainingPlanService

__all__ = [
    "EvolutionaryPlanResponse",
    "TrainingPlanService",
]
