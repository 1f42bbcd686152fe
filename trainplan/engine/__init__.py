"""Planning engine core algorithms — interference, NSGA-II scheduler, periodization, progression."""

from trainplan.engine.interference import calculate_interference
from trainplan.engine.periodization import design_periodization_plan
from trainplan.engine.progression import create_progression_model
from trainplan.engine.scheduler import MultiObjectiveScheduler, SchedulerConfig, optimize_training_plan

__all__ = [
    "calculate_interference",
    "design_periodization_plan",
    "create_progression_model",
    "MultiObjectiveScheduler",
    "SchedulerConfig",
    "optimize_training_plan",
]
