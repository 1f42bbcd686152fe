"""
Unit tests for the NSGA-II training scheduler.

Covers Pareto ranking primitives, the derived candidate quantities,
genetic operators (with scripted random sources), population bookkeeping
across generations and full optimisation runs.
"""

import math

import pytest

from trainplan.core.errors import InvalidInputError
from trainplan.engine.random_source import default_random_source, sequence_random_source
from trainplan.engine.scheduler import (
    MultiObjectiveScheduler,
    PopulationRanking,
    SchedulerConfig,
    _feasibility_notes,
    compute_fatigue,
    crowding_distance,
    dominates,
    estimate_interference,
    fast_non_dominated_sort,
    optimize_training_plan,
    rank_population,
    recompute_load,
)
from trainplan.schemas.constraints import SchedulerConstraints
from trainplan.schemas.scheduler import Candidate, Session

SMALL_CONFIG = SchedulerConfig(population_size=12, max_generations=6)
GOALS = [{"type": "strength", "priority": 1.0}, {"type": "endurance", "priority": 0.8}]


# ======================================================================
# Helpers
# ======================================================================


def _make_schedule(n: int = 4, intensity: float = 0.8, duration: float = 60.0) -> list[Session]:
    modalities = [["strength"], ["endurance"], ["conditioning"], ["strength", "endurance"]]
    return [
        Session(day=d, modalities=list(modalities[d % 4]), duration=duration, intensity=intensity, recovery=12)
        for d in range(n)
    ]


def _make_candidate(schedule: list[Session]) -> Candidate:
    load = recompute_load(schedule)
    return Candidate(
        schedule=schedule,
        load_distribution=load,
        fatigue_index=compute_fatigue(schedule),
        interference_risk=estimate_interference(load),
    )


def _scheduler(values=None, config=None, hook=None) -> MultiObjectiveScheduler:
    source = sequence_random_source(values) if values is not None else default_random_source(1234)
    return MultiObjectiveScheduler(config=config or SMALL_CONFIG, random_source=source, on_generation=hook)


# ======================================================================
# Pareto primitives
# ======================================================================


class TestDominates:
    def test_better_everywhere(self):
        assert dominates([2, 2], [1, 1])

    def test_better_in_one_equal_elsewhere(self):
        assert dominates([2, 1], [1, 1])

    def test_equal_vectors_do_not_dominate(self):
        assert not dominates([1, 1], [1, 1])

    def test_trade_off_is_mutual_non_dominance(self):
        assert not dominates([2, 0], [0, 2])
        assert not dominates([0, 2], [2, 0])


class TestFastNonDominatedSort:
    def test_fronts_and_ranks(self):
        vectors = [[3, 3], [1, 1], [2, 2], [3, 1], [0, 4]]
        fronts, ranks = fast_non_dominated_sort(vectors)
        assert [sorted(f) for f in fronts] == [[0, 4], [2, 3], [1]]
        assert ranks == [0, 2, 1, 1, 0]

    def test_all_equal_share_front_zero(self):
        fronts, ranks = fast_non_dominated_sort([[1, 1]] * 4)
        assert fronts == [[0, 1, 2, 3]]
        assert ranks == [0, 0, 0, 0]

    def test_front_zero_has_no_dominated_pair(self):
        vectors = [[i % 5, (7 * i) % 11] for i in range(20)]
        fronts, _ = fast_non_dominated_sort(vectors)
        for a in fronts[0]:
            for b in fronts[0]:
                assert not dominates(vectors[a], vectors[b])

    def test_empty_population(self):
        fronts, ranks = fast_non_dominated_sort([])
        assert fronts == []
        assert ranks == []


class TestCrowdingDistance:
    def test_boundaries_are_infinite(self):
        vectors = [[1, 5], [2, 4], [3, 3], [4, 1]]
        distances = crowding_distance(vectors, [0, 1, 2, 3])
        assert distances[0] == math.inf
        assert distances[3] == math.inf
        assert distances[1] == pytest.approx(2 / 3 + 2 / 4)
        assert distances[2] == pytest.approx(2 / 3 + 3 / 4)

    def test_constant_objective_is_skipped(self):
        vectors = [[1, 7], [2, 7], [3, 7]]
        distances = crowding_distance(vectors, [0, 1, 2])
        assert distances[1] == pytest.approx(1.0)

    def test_single_member_front(self):
        assert crowding_distance([[1, 2]], [0]) == {0: math.inf}

    def test_rank_population_fills_every_front(self):
        ranking = rank_population([[3, 3], [1, 1], [2, 2], [3, 1], [0, 4]])
        assert len(ranking.crowding) == 5
        # Fronts of one or two members are all boundary.
        assert ranking.crowding[1] == math.inf
        assert ranking.crowding[0] == math.inf


# ======================================================================
# Derived candidate quantities
# ======================================================================


class TestDerivedQuantities:
    def test_recompute_load_counts_every_modality(self):
        schedule = [
            Session(day=0, modalities=["strength", "endurance"], duration=60, intensity=0.5),
            Session(day=1, modalities=["conditioning"], duration=30, intensity=1.0),
        ]
        assert recompute_load(schedule) == {"strength": 30.0, "endurance": 30.0, "conditioning": 30.0}

    def test_recompute_load_always_has_base_modalities(self):
        assert recompute_load([]) == {"strength": 0.0, "endurance": 0.0, "conditioning": 0.0}

    def test_compute_fatigue_defaults_to_schedule_length(self):
        schedule = _make_schedule(2, intensity=0.5, duration=60)
        assert compute_fatigue(schedule) == pytest.approx((15 + 15) / 90)
        assert compute_fatigue(schedule, 4) == pytest.approx((7.5 + 7.5) / 90)

    def test_compute_fatigue_empty(self):
        assert compute_fatigue([]) == 0.0

    def test_estimate_interference(self):
        risk = estimate_interference({"strength": 100.0, "endurance": 50.0, "conditioning": 0.0})
        assert risk.strength_penalty == pytest.approx(0.15, rel=1e-4)
        assert risk.glycogen_stress == pytest.approx(50 / 180, rel=1e-4)
        assert risk.hormonal_conflict == pytest.approx((0.15 + 50 / 180) / 2, rel=1e-4)

    def test_estimate_interference_capped(self):
        risk = estimate_interference({"strength": 0.0, "endurance": 500.0, "conditioning": 0.0})
        assert risk.strength_penalty == 1.0


# ======================================================================
# Genetic operators
# ======================================================================


class TestMutation:
    def test_upward_mutation_clamped(self):
        cfg = SchedulerConfig(population_size=4, max_generations=0, mutation_rate=1.0, mutation_scale=10.0)
        scheduler = _scheduler([0.0, 0.99], config=cfg)
        constraints = SchedulerConstraints(max_daily_duration=75)
        mutated = scheduler._mutate(_make_candidate(_make_schedule()), constraints)
        for session in mutated.schedule:
            assert session.intensity == 0.95
            assert session.duration == 75

    def test_downward_mutation_clamped(self):
        cfg = SchedulerConfig(population_size=4, max_generations=0, mutation_rate=1.0, mutation_scale=10.0)
        scheduler = _scheduler([0.0, 0.0], config=cfg)
        mutated = scheduler._mutate(_make_candidate(_make_schedule()), SchedulerConstraints())
        for session in mutated.schedule:
            assert session.intensity == 0.55
            assert session.duration == 30

    def test_derived_fields_recomputed(self):
        cfg = SchedulerConfig(population_size=4, max_generations=0, mutation_rate=1.0, mutation_scale=10.0)
        scheduler = _scheduler([0.0, 0.0], config=cfg)
        mutated = scheduler._mutate(_make_candidate(_make_schedule()), SchedulerConstraints())
        assert mutated.load_distribution == recompute_load(mutated.schedule)
        assert mutated.fatigue_index == pytest.approx(compute_fatigue(mutated.schedule))

    def test_parent_untouched(self):
        cfg = SchedulerConfig(population_size=4, max_generations=0, mutation_rate=1.0, mutation_scale=10.0)
        scheduler = _scheduler([0.0, 0.99], config=cfg)
        parent = _make_candidate(_make_schedule())
        scheduler._mutate(parent, SchedulerConstraints())
        assert all(s.intensity == 0.8 for s in parent.schedule)

    def test_zero_rate_keeps_sessions(self):
        cfg = SchedulerConfig(population_size=4, max_generations=0, mutation_rate=0.0)
        scheduler = _scheduler([0.5], config=cfg)
        parent = _make_candidate(_make_schedule())
        mutated = scheduler._mutate(parent, SchedulerConstraints())
        assert [s.intensity for s in mutated.schedule] == [s.intensity for s in parent.schedule]


class TestCrossover:
    def test_single_point_splice(self):
        scheduler = _scheduler([0.5])
        parent_a = _make_candidate(_make_schedule(4, intensity=0.6))
        parent_b = _make_candidate(_make_schedule(4, intensity=0.9))
        child_a, child_b = scheduler._crossover(parent_a, parent_b, 28)
        assert [s.intensity for s in child_a.schedule] == [0.6, 0.6, 0.9, 0.9]
        assert [s.intensity for s in child_b.schedule] == [0.9, 0.9, 0.6, 0.6]

    def test_children_derived_fields_recomputed(self):
        scheduler = _scheduler([0.5])
        parent_a = _make_candidate(_make_schedule(4, intensity=0.6))
        parent_b = _make_candidate(_make_schedule(4, intensity=0.9, duration=80))
        child_a, _ = scheduler._crossover(parent_a, parent_b, 28)
        assert child_a.load_distribution == recompute_load(child_a.schedule)
        assert child_a.fatigue_index == pytest.approx(compute_fatigue(child_a.schedule, 28))
        assert child_a.interference_risk == estimate_interference(child_a.load_distribution)


class TestSelection:
    def test_tournament_prefers_lower_rank(self):
        scheduler = _scheduler([0.0, 0.4, 0.8])
        assert scheduler._tournament_select([2, 0, 1], [0.0, 0.0, 0.0]) == 1

    def test_tournament_breaks_ties_by_crowding(self):
        scheduler = _scheduler([0.0, 0.4, 0.8])
        assert scheduler._tournament_select([0, 0, 0], [0.1, 0.5, 0.3]) == 1

    def test_survivors_fill_front_by_front(self):
        ranking = PopulationRanking(
            fronts=[[0, 1], [2, 3, 4]],
            ranks=[0, 0, 1, 1, 1],
            crowding=[math.inf, math.inf, 0.2, 0.9, 0.5],
        )
        assert MultiObjectiveScheduler._select_survivors(ranking, 3) == [0, 1, 3]
        assert MultiObjectiveScheduler._select_survivors(ranking, 4) == [0, 1, 3, 4]

    def test_population_ranking_sort_key(self):
        ranking = PopulationRanking(fronts=[[0, 1], [2]], ranks=[0, 0, 1], crowding=[0.5, 2.0, math.inf])
        assert sorted(range(3), key=ranking.sort_key) == [1, 0, 2]


# ======================================================================
# Population bookkeeping
# ======================================================================


class TestGenerations:
    def test_population_size_constant(self):
        sizes = []
        cfg = SchedulerConfig(population_size=11, max_generations=5)
        scheduler = _scheduler(config=cfg, hook=lambda g, pop, ranking: sizes.append(len(pop)))
        scheduler.optimize_training_plan(GOALS, None, 14)
        assert sizes == [11] * 5

    def test_front_zero_non_dominated_every_generation(self):
        def hook(generation, population, ranking):
            for a in ranking.fronts[0]:
                for b in ranking.fronts[0]:
                    assert not dominates(population[a].objectives, population[b].objectives)

        _scheduler(hook=hook).optimize_training_plan(GOALS, None, 14)

    def test_derived_fields_consistent_every_generation(self):
        def hook(generation, population, ranking):
            for candidate in population:
                assert candidate.load_distribution == pytest.approx(recompute_load(candidate.schedule))

        _scheduler(hook=hook).optimize_training_plan(GOALS, None, 14)


# ======================================================================
# Full optimisation runs
# ======================================================================


class TestOptimizeTrainingPlan:
    def test_concurrent_goals_four_weeks(self):
        summary = _scheduler().optimize_training_plan(GOALS, None, 28)
        assert len(summary.schedule) == 28
        assert summary.load_distribution["strength"] > 0
        assert summary.load_distribution["endurance"] > 0
        assert summary.fatigue_index >= 0
        assert [gs.goal.type for gs in summary.goals_satisfied] == ["strength", "endurance"]
        assert len(summary.objective_scores) == 2
        assert summary.generations == SMALL_CONFIG.max_generations

    def test_chosen_candidate_on_first_front(self):
        summary = _scheduler().optimize_training_plan(GOALS, None, 21)
        assert summary.rank == 0

    def test_sessions_respect_duration_and_intensity_bounds(self):
        summary = _scheduler().optimize_training_plan(GOALS, {"maxDailyDuration": 50}, 14)
        for session in summary.schedule:
            assert 0 <= session.duration <= 50
            assert 0 <= session.intensity <= 1
            assert session.recovery == 12

    def test_minimum_horizon_is_one_week(self):
        summary = _scheduler().optimize_training_plan(GOALS, None, 3)
        assert len(summary.schedule) == 7

    def test_default_horizon(self):
        summary = _scheduler().optimize_training_plan(GOALS)
        assert len(summary.schedule) == 28

    def test_same_seed_same_plan(self):
        a = optimize_training_plan(GOALS, None, 14, SMALL_CONFIG, default_random_source(7))
        b = optimize_training_plan(GOALS, None, 14, SMALL_CONFIG, default_random_source(7))
        assert a.model_dump() == b.model_dump()

    def test_zero_generations_still_ranks_initial_population(self):
        cfg = SchedulerConfig(population_size=6, max_generations=0)
        summary = _scheduler(config=cfg).optimize_training_plan(GOALS, None, 7)
        assert summary.rank == 0
        assert summary.generations == 0

    def test_unknown_goal_scores_zero(self):
        summary = _scheduler().optimize_training_plan([{"type": "flexibility"}], None, 7)
        assert summary.objective_scores == [0.0]

    @pytest.mark.parametrize("goals", [[], (), None, "strength", {"type": "strength"}])
    def test_empty_goals_rejected(self, goals):
        with pytest.raises(InvalidInputError) as exc_info:
            _scheduler().optimize_training_plan(goals)
        assert exc_info.value.code == "EMPTY_GOALS"

    @pytest.mark.parametrize("goals", [[{"priority": 1.0}], [{"type": "strength", "priority": -1}], [42]])
    def test_malformed_goals_rejected(self, goals):
        with pytest.raises(InvalidInputError) as exc_info:
            _scheduler().optimize_training_plan(goals)
        assert exc_info.value.code == "MALFORMED_GOALS"
        assert exc_info.value.details


class TestFeasibilityNotes:
    def test_weekly_session_cap_flagged(self):
        candidate = _make_candidate(_make_schedule(14))
        notes = _feasibility_notes(candidate, SchedulerConstraints(max_weekly_sessions=5))
        assert notes == [
            "Week 1 has 7 sessions (max 5)",
            "Week 2 has 7 sessions (max 5)",
        ]

    def test_fatigue_ceiling_flagged(self):
        candidate = _make_candidate(_make_schedule(7))
        candidate.fatigue_index = 0.9
        notes = _feasibility_notes(candidate, SchedulerConstraints())
        assert notes == ["Fatigue index 0.90 exceeds ceiling 0.75"]

    def test_feasible_plan_has_no_notes(self):
        candidate = _make_candidate(_make_schedule(7))
        assert _feasibility_notes(candidate, SchedulerConstraints()) == []

    def test_summary_carries_notes(self):
        summary = _scheduler().optimize_training_plan(GOALS, {"maxWeeklySessions": 3}, 7)
        assert summary.notes
