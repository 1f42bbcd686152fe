"""
Goal-specific objective functions for the evolutionary scheduler.

Every objective has the form ``priority × (benefit − penalties)`` and is
maximised.  Inputs are the candidate's load distribution, fatigue index
and its embedded :class:`~trainplan.schemas.scheduler.InterferenceRisk`
(the simplified aggregate estimate, not the session-level interference
model).

    strength          load.strength − 20·max(0, fatigue − 0.6) − 15·strength_penalty
    endurance         load.endurance − 10·glycogen_stress − 18·max(0, fatigue − 0.55)
    body-composition  load.conditioning·(1 − hormonal_conflict) − 22·max(0, fatigue − 0.5)
    speed / agility   0.6·load.strength + 0.4·load.conditioning − 10·hormonal_conflict

Any other goal type scores a constant 0.
"""

from __future__ import annotations

from typing import Callable, Sequence

from trainplan.schemas.goal import Goal, GoalType
from trainplan.schemas.scheduler import Candidate

ObjectiveFunction = Callable[[Candidate], float]


def strength_objective(candidate: Candidate, priority: float) -> float:
    strength_load = candidate.load_distribution.get("strength", 0.0)
    fatigue_penalty = max(0.0, candidate.fatigue_index - 0.6) * 20
    interference_penalty = candidate.interference_risk.strength_penalty * 15
    return priority * (strength_load - fatigue_penalty - interference_penalty)


def endurance_objective(candidate: Candidate, priority: float) -> float:
    endurance_load = candidate.load_distribution.get("endurance", 0.0)
    glycogen_penalty = candidate.interference_risk.glycogen_stress * 10
    fatigue_penalty = max(0.0, candidate.fatigue_index - 0.55) * 18
    return priority * (endurance_load - glycogen_penalty - fatigue_penalty)


def composition_objective(candidate: Candidate, priority: float) -> float:
    conditioning_load = candidate.load_distribution.get("conditioning", 0.0)
    hormonal_score = 1 - candidate.interference_risk.hormonal_conflict
    fatigue_penalty = max(0.0, candidate.fatigue_index - 0.5) * 22
    return priority * (conditioning_load * hormonal_score - fatigue_penalty)


def speed_objective(candidate: Candidate, priority: float) -> float:
    strength_contribution = candidate.load_distribution.get("strength", 0.0) * 0.6
    conditioning_contribution = candidate.load_distribution.get("conditioning", 0.0) * 0.4
    hormonal_penalty = candidate.interference_risk.hormonal_conflict * 10
    return priority * (strength_contribution + conditioning_contribution - hormonal_penalty)


_OBJECTIVES: dict[GoalType, Callable[[Candidate, float], float]] = {
    GoalType.STRENGTH: strength_objective,
    GoalType.ENDURANCE: endurance_objective,
    GoalType.BODY_COMPOSITION: composition_objective,
    GoalType.SPEED: speed_objective,
    GoalType.AGILITY: speed_objective,
}


def _zero_objective(candidate: Candidate) -> float:
    return 0.0


def objective_for_goal(goal: Goal) -> ObjectiveFunction:
    """Bind the goal's priority to the objective for its type."""
    fn = _OBJECTIVES.get(goal.known_type) if goal.known_type is not None else None
    if fn is None:
        return _zero_objective
    priority = goal.priority

    def _objective(candidate: Candidate) -> float:
        return fn(candidate, priority)

    return _objective


def define_objective_functions(goals: Sequence[Goal]) -> list[ObjectiveFunction]:
    """One objective per goal, in goal order."""
    return [objective_for_goal(goal) for goal in goals]


def evaluate_objectives(candidate: Candidate, objectives: Sequence[ObjectiveFunction]) -> list[float]:
    return [fn(candidate) for fn in objectives]
