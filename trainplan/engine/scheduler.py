"""
Multi-objective training scheduler (NSGA-II).

Searches for day-by-day schedules that balance competing goals (strength,
endurance, body composition, speed) under time and recovery constraints.
The result is Pareto-improving over a bounded population within a fixed
generation budget, not a global optimum.

Algorithm
---------
1. Normalise constraints over their defaults and build one objective per
   goal (:mod:`trainplan.engine.objectives`).
2. Create ``population_size`` random candidates over
   ``max(7, time_horizon)`` days.
3. For each generation:

   - evaluate every candidate's objectives,
   - fast non-dominated sort into fronts,
   - crowding distance within every front,
   - fill the survivor pool front by front (``population_size // 2``
     slots); the front that overflows is cut by descending crowding
     distance,
   - breed offspring (tournament of 3, single-point crossover, per-session
     mutation) until the population is back to ``population_size``.

4. Evaluate and rank the final population and summarise the candidate
   with the lowest rank and, among equals, the largest crowding distance.

Design choices
--------------
1. **Sort metadata lives outside the candidates.**  Rank, crowding
   distance, domination sets and domination counts are parallel arrays
   keyed by population index and rebuilt every generation
   (:class:`PopulationRanking`).  Candidates only hold the schedule and
   what is derived from it.
2. **Derived fields are always recomputed.**  Crossover and mutation
   rebuild load distribution, fatigue index and interference risk from
   the new schedule.
3. **Injected randomness.**  Every draw goes through the scheduler's
   ``RandomSource``; a seeded source makes a run reproducible.
4. **Two fatigue normalisations.**  The initial random population uses
   ``Σ(intensity·duration/300)/days`` while crossover and mutation use
   :func:`compute_fatigue` (``Σ(duration·intensity/horizon)/90``).  They
   are kept as separate formulas on purpose.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Optional, Sequence

from loguru import logger
from pydantic import BaseModel, Field

from trainplan.core.config import Settings, settings
from trainplan.engine.objectives import (
    ObjectiveFunction,
    define_objective_functions,
    evaluate_objectives,
)
from trainplan.engine.random_source import RandomSource, default_random_source
from trainplan.engine.validation import coerce_goals, coerce_model
from trainplan.schemas.constraints import SchedulerConstraints
from trainplan.schemas.goal import Goal
from trainplan.schemas.scheduler import (
    LOAD_MODALITIES,
    Candidate,
    GoalScore,
    InterferenceRisk,
    PlanSummary,
    Session,
)

_EPSILON = 1e-6

# Modality subsets a random training day can take.
_MODALITY_CHOICES: list[list[str]] = [
    ["strength"],
    ["endurance"],
    ["conditioning"],
    ["strength", "conditioning"],
    ["strength", "endurance"],
]

_MIN_DAYS = 7
_DEFAULT_HORIZON_DAYS = 28

_MUTATION_INTENSITY_RANGE = (0.55, 0.95)
_MUTATION_MIN_DURATION = 30.0


# ======================================================================
# Configuration
# ======================================================================


class SchedulerConfig(BaseModel):
    """Evolutionary search parameters."""

    population_size: int = Field(50, ge=2)
    max_generations: int = Field(80, ge=0)
    crossover_rate: float = Field(0.9, ge=0.0, le=1.0)
    mutation_rate: float = Field(0.15, ge=0.0, le=1.0)
    mutation_scale: float = Field(0.1, ge=0.0)
    tournament_size: int = Field(3, ge=1)

    @classmethod
    def from_settings(cls, cfg: Settings = settings) -> SchedulerConfig:
        return cls(
            population_size=cfg.SCHEDULER_POPULATION_SIZE,
            max_generations=cfg.SCHEDULER_MAX_GENERATIONS,
            crossover_rate=cfg.SCHEDULER_CROSSOVER_RATE,
            mutation_rate=cfg.SCHEDULER_MUTATION_RATE,
            mutation_scale=cfg.SCHEDULER_MUTATION_SCALE,
        )

    @property
    def survivor_cap(self) -> int:
        return max(1, self.population_size // 2)


# ======================================================================
# Derived candidate quantities
# ======================================================================


def estimate_interference(load_distribution: dict[str, float]) -> InterferenceRisk:
    """Aggregate interference estimate from a load split.

    Independent of :func:`trainplan.engine.interference.calculate_interference`.
    """
    strength = load_distribution.get("strength", 0.0)
    endurance = load_distribution.get("endurance", 0.0)
    conditioning = load_distribution.get("conditioning", 0.0)
    total_load = strength + endurance + conditioning + _EPSILON
    ratio = endurance / (strength + _EPSILON)
    strength_penalty = min(1.0, ratio * 0.3)
    glycogen_stress = min(1.0, (endurance + conditioning) / (total_load * 1.2))
    hormonal_conflict = min(1.0, (strength_penalty + glycogen_stress) / 2)
    return InterferenceRisk(
        strength_penalty=strength_penalty,
        glycogen_stress=glycogen_stress,
        hormonal_conflict=hormonal_conflict,
    )


def recompute_load(schedule: Sequence[Session]) -> dict[str, float]:
    """Sum ``duration × intensity`` into every modality of each session."""
    load = {modality: 0.0 for modality in LOAD_MODALITIES}
    for session in schedule:
        for modality in session.modalities:
            load[modality] = load.get(modality, 0.0) + session.load
    return load


def compute_fatigue(schedule: Sequence[Session], time_horizon: Optional[int] = None) -> float:
    """Fatigue density of a schedule.

    ``time_horizon`` defaults to the schedule's own length.
    """
    horizon = time_horizon or len(schedule)
    if horizon <= 0:
        return 0.0
    total = sum(session.load / horizon for session in schedule)
    return total / 90


def _refresh_derived(candidate: Candidate, time_horizon: Optional[int] = None) -> Candidate:
    candidate.load_distribution = recompute_load(candidate.schedule)
    candidate.fatigue_index = compute_fatigue(candidate.schedule, time_horizon)
    candidate.interference_risk = estimate_interference(candidate.load_distribution)
    return candidate


# ======================================================================
# Pareto ranking
# ======================================================================


def dominates(a: Sequence[float], b: Sequence[float]) -> bool:
    """``a`` dominates ``b`` under maximisation."""
    better_in_any = any(x > y for x, y in zip(a, b))
    not_worse_in_all = all(x >= y for x, y in zip(a, b))
    return better_in_any and not_worse_in_all


def fast_non_dominated_sort(objective_vectors: Sequence[Sequence[float]]) -> tuple[list[list[int]], list[int]]:
    """Partition population indices into Pareto fronts.

    Returns:
        ``(fronts, ranks)`` — ``fronts[k]`` lists the indices of rank ``k``;
        ``ranks[i]`` is the rank of individual ``i``.
    """
    n = len(objective_vectors)
    domination_sets: list[list[int]] = [[] for _ in range(n)]
    dominated_count = [0] * n
    ranks = [0] * n
    fronts: list[list[int]] = [[]]

    for i in range(n):
        for j in range(n):
            if i == j:
                continue
            if dominates(objective_vectors[i], objective_vectors[j]):
                domination_sets[i].append(j)
            elif dominates(objective_vectors[j], objective_vectors[i]):
                dominated_count[i] += 1
        if dominated_count[i] == 0:
            ranks[i] = 0
            fronts[0].append(i)

    k = 0
    while k < len(fronts) and fronts[k]:
        next_front: list[int] = []
        for i in fronts[k]:
            for j in domination_sets[i]:
                dominated_count[j] -= 1
                if dominated_count[j] == 0:
                    ranks[j] = k + 1
                    next_front.append(j)
        if next_front:
            fronts.append(next_front)
        k += 1

    if not fronts[0]:
        return [], ranks
    return fronts, ranks


def crowding_distance(objective_vectors: Sequence[Sequence[float]], front: Sequence[int]) -> dict[int, float]:
    """Crowding distance of each member of ``front``.

    Boundary members of every objective get ``+inf``; an objective whose
    values are all equal is skipped.
    """
    distances = {i: 0.0 for i in front}
    if not front:
        return distances
    objective_count = len(objective_vectors[front[0]])

    for m in range(objective_count):
        ordered = sorted(front, key=lambda i: objective_vectors[i][m])
        distances[ordered[0]] = math.inf
        distances[ordered[-1]] = math.inf
        low = objective_vectors[ordered[0]][m]
        high = objective_vectors[ordered[-1]][m]
        if high == low:
            continue
        for pos in range(1, len(ordered) - 1):
            prev_value = objective_vectors[ordered[pos - 1]][m]
            next_value = objective_vectors[ordered[pos + 1]][m]
            distances[ordered[pos]] += (next_value - prev_value) / (high - low)
    return distances


class PopulationRanking(BaseModel):
    """Per-generation sort metadata, indexed like the population."""

    fronts: list[list[int]]
    ranks: list[int]
    crowding: list[float]

    def sort_key(self, index: int) -> tuple[int, float]:
        return self.ranks[index], -self.crowding[index]


def rank_population(objective_vectors: Sequence[Sequence[float]]) -> PopulationRanking:
    fronts, ranks = fast_non_dominated_sort(objective_vectors)
    crowding = [0.0] * len(objective_vectors)
    for front in fronts:
        for index, distance in crowding_distance(objective_vectors, front).items():
            crowding[index] = distance
    return PopulationRanking(fronts=fronts, ranks=ranks, crowding=crowding)


# ======================================================================
# Scheduler
# ======================================================================

GenerationHook = Callable[[int, list[Candidate], PopulationRanking], None]


class MultiObjectiveScheduler:
    """NSGA-II search over candidate training schedules.

    Args:
        config: Search parameters (defaults from settings).
        random_source: ``() -> float`` in ``[0, 1)``; defaults to a PRNG
            seeded from ``settings.RANDOM_SEED`` when set.
        on_generation: Optional callback invoked after each generation's
            evaluation with ``(generation, population, ranking)``.
    """

    def __init__(
        self,
        config: Optional[SchedulerConfig] = None,
        random_source: Optional[RandomSource] = None,
        on_generation: Optional[GenerationHook] = None,
    ):
        self.config = config or SchedulerConfig.from_settings()
        self.random = random_source or default_random_source()
        self.on_generation = on_generation

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def optimize_training_plan(
        self,
        goals: Sequence[Any],
        constraints: Any = None,
        time_horizon: Optional[int] = None,
    ) -> PlanSummary:
        """Run the evolutionary search and summarise the best schedule.

        Args:
            goals: Non-empty sequence of :class:`Goal` or goal mappings.
            constraints: :class:`SchedulerConstraints`, a partial mapping, or
                ``None`` for the defaults.
            time_horizon: Plan length in days (minimum 7, default 28).

        Raises:
            InvalidInputError: If ``goals`` is empty or malformed.
        """
        goal_list = coerce_goals(goals)
        feasible = coerce_model(constraints, SchedulerConstraints)
        objectives = define_objective_functions(goal_list)
        cfg = self.config

        logger.info(
            "Starting evolutionary optimisation",
            goals=[g.type for g in goal_list],
            population_size=cfg.population_size,
            generations=cfg.max_generations,
        )

        population = self.generate_initial_solutions(feasible, cfg.population_size, time_horizon)

        for generation in range(cfg.max_generations):
            self._evaluate_population(population, objectives)
            ranking = rank_population([c.objectives for c in population])
            if self.on_generation is not None:
                self.on_generation(generation, population, ranking)

            survivor_indices = self._select_survivors(ranking, cfg.survivor_cap)
            survivors = [population[i] for i in survivor_indices]
            survivor_ranks = [ranking.ranks[i] for i in survivor_indices]
            survivor_crowding = [ranking.crowding[i] for i in survivor_indices]

            offspring = self.generate_offspring(
                survivors,
                survivor_ranks,
                survivor_crowding,
                cfg.population_size - len(survivors),
                feasible,
                time_horizon,
            )
            population = survivors + offspring

            logger.debug(
                "Generation complete",
                generation=generation,
                fronts=len(ranking.fronts),
                pareto_size=len(ranking.fronts[0]) if ranking.fronts else 0,
            )

        self._evaluate_population(population, objectives)
        ranking = rank_population([c.objectives for c in population])
        order = sorted(range(len(population)), key=ranking.sort_key)
        best = order[0]

        summary = self.select_optimal_solution(
            population[best],
            goal_list,
            rank=ranking.ranks[best],
            crowding=ranking.crowding[best],
            constraints=feasible,
        )
        logger.info(
            "Evolutionary optimisation finished",
            objective_scores=[round(s, 2) for s in summary.objective_scores],
            fatigue_index=round(summary.fatigue_index, 3),
        )
        return summary

    def generate_initial_solutions(
        self,
        constraints: SchedulerConstraints,
        size: int,
        time_horizon: Optional[int] = None,
    ) -> list[Candidate]:
        return [self._random_solution(constraints, time_horizon) for _ in range(size)]

    def generate_offspring(
        self,
        parents: list[Candidate],
        parent_ranks: list[int],
        parent_crowding: list[float],
        count: int,
        constraints: SchedulerConstraints,
        time_horizon: Optional[int] = None,
    ) -> list[Candidate]:
        """Breed ``count`` children from the survivor pool."""
        offspring: list[Candidate] = []
        while len(offspring) < count:
            parent_a = parents[self._tournament_select(parent_ranks, parent_crowding)]
            parent_b = parents[self._tournament_select(parent_ranks, parent_crowding)]
            if self.random() < self.config.crossover_rate:
                child_a, child_b = self._crossover(parent_a, parent_b, time_horizon)
            else:
                child_a, child_b = parent_a.clone(), parent_b.clone()
            offspring.append(self._mutate(child_a, constraints))
            offspring.append(self._mutate(child_b, constraints))
        return offspring[:count]

    def select_optimal_solution(
        self,
        candidate: Candidate,
        goals: Sequence[Goal],
        rank: int = 0,
        crowding: float = 0.0,
        constraints: Optional[SchedulerConstraints] = None,
    ) -> PlanSummary:
        return PlanSummary(
            schedule=candidate.schedule,
            load_distribution=candidate.load_distribution,
            fatigue_index=candidate.fatigue_index,
            interference_risk=candidate.interference_risk,
            objective_scores=list(candidate.objectives),
            goals_satisfied=[
                GoalScore(goal=goal, score=candidate.objectives[index]) for index, goal in enumerate(goals)
            ],
            rank=rank,
            crowding_distance=crowding,
            generations=self.config.max_generations,
            notes=_feasibility_notes(candidate, constraints) if constraints is not None else [],
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _evaluate_population(population: list[Candidate], objectives: Sequence[ObjectiveFunction]) -> None:
        for candidate in population:
            candidate.objectives = evaluate_objectives(candidate, objectives)

    @staticmethod
    def _select_survivors(ranking: PopulationRanking, cap: int) -> list[int]:
        chosen: list[int] = []
        for front in ranking.fronts:
            if len(chosen) + len(front) <= cap:
                chosen.extend(front)
                continue
            by_crowding = sorted(front, key=lambda i: -ranking.crowding[i])
            chosen.extend(by_crowding[: cap - len(chosen)])
            break
        return chosen

    def _random_modalities(self) -> list[str]:
        return list(_MODALITY_CHOICES[int(self.random() * len(_MODALITY_CHOICES))])

    def _random_solution(self, constraints: SchedulerConstraints, time_horizon: Optional[int]) -> Candidate:
        days = max(_MIN_DAYS, time_horizon or _DEFAULT_HORIZON_DAYS)
        schedule: list[Session] = []
        fatigue = 0.0

        for day in range(days):
            modalities = self._random_modalities()
            duration = min(constraints.max_daily_duration, 45 + self.random() * 45)
            intensity = 0.65 + self.random() * 0.3
            schedule.append(
                Session(
                    day=day,
                    modalities=modalities,
                    duration=duration,
                    intensity=intensity,
                    recovery=constraints.min_recovery_hours,
                )
            )
            fatigue += (intensity * duration) / 300

        load = recompute_load(schedule)
        return Candidate(
            schedule=schedule,
            load_distribution=load,
            fatigue_index=fatigue / days,
            interference_risk=estimate_interference(load),
        )

    def _tournament_select(self, ranks: list[int], crowding: list[float]) -> int:
        size = len(ranks)
        contenders = [int(self.random() * size) for _ in range(self.config.tournament_size)]
        contenders.sort(key=lambda i: (ranks[i], -crowding[i]))
        return contenders[0]

    def _crossover(
        self,
        parent_a: Candidate,
        parent_b: Candidate,
        time_horizon: Optional[int],
    ) -> tuple[Candidate, Candidate]:
        child_a = parent_a.clone()
        child_b = parent_b.clone()
        point = int(self.random() * min(len(parent_a.schedule), len(parent_b.schedule)))
        genes_a, genes_b = child_a.schedule, child_b.schedule
        child_a.schedule = genes_a[:point] + genes_b[point:]
        child_b.schedule = genes_b[:point] + genes_a[point:]
        return _refresh_derived(child_a, time_horizon), _refresh_derived(child_b, time_horizon)

    def _mutate(self, candidate: Candidate, constraints: SchedulerConstraints) -> Candidate:
        mutated = candidate.clone()
        low, high = _MUTATION_INTENSITY_RANGE
        for session in mutated.schedule:
            if self.random() < self.config.mutation_rate:
                factor = 1 + (self.random() - 0.5) * self.config.mutation_scale
                session.intensity = min(high, max(low, session.intensity * factor))
                session.duration = min(
                    constraints.max_daily_duration,
                    max(_MUTATION_MIN_DURATION, session.duration * factor),
                )
        return _refresh_derived(mutated)


def _feasibility_notes(candidate: Candidate, constraints: SchedulerConstraints) -> list[str]:
    """Human-readable notes on constraints the schedule does not meet.

    Notes are informational; they never influence selection.
    """
    notes: list[str] = []
    blocks: dict[int, int] = {}
    for session in candidate.schedule:
        if session.modalities:
            blocks[session.day // 7] = blocks.get(session.day // 7, 0) + 1
    for block, count in sorted(blocks.items()):
        if count > constraints.max_weekly_sessions:
            notes.append(
                f"Week {block + 1} has {count} sessions (max {constraints.max_weekly_sessions})"
            )
    if candidate.fatigue_index > constraints.fatigue_ceiling:
        notes.append(
            f"Fatigue index {candidate.fatigue_index:.2f} exceeds ceiling {constraints.fatigue_ceiling:.2f}"
        )
    return notes


def optimize_training_plan(
    goals: Sequence[Any],
    constraints: Any = None,
    time_horizon: Optional[int] = None,
    config: Optional[SchedulerConfig] = None,
    random_source: Optional[RandomSource] = None,
) -> PlanSummary:
    """Functional wrapper around :class:`MultiObjectiveScheduler`."""
    scheduler = MultiObjectiveScheduler(config=config, random_source=random_source)
    return scheduler.optimize_training_plan(goals, constraints, time_horizon)
