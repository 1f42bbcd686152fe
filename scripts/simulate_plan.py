"""What plan would the engine build for a concurrent-training athlete?

Runs both planning flows on a fixed example (strength + endurance goals,
a competition in the spring) and prints a readable report:

- the evolutionary 4-week schedule with its interference assessment,
- the periodized block plan with deloads and auto-regulation.

Seeded, so repeated runs print the same plan.
"""

import datetime

from trainplan.core.config import settings
from trainplan.core.logger import setup_logger
from trainplan.engine.random_source import default_random_source
from trainplan.engine.scheduler import SchedulerConfig
from trainplan.services.planning_service import TrainingPlanService

SEED = 2026
START = datetime.datetime(2026, 3, 2, 7, 0)

GOALS = [
    {"type": "strength", "priority": 1.0},
    {"type": "endurance", "priority": 0.8},
]

SCHEDULER_CONSTRAINTS = {
    "maxWeeklySessions": 6,
    "maxDailyDuration": 75,
    "minRecoveryHours": 12,
}

PERIODIZATION_CONSTRAINTS = {
    "sessionsPerWeek": 5,
    "timeFrame": 12,
    "fatigueSensitivity": 0.6,
}

CALENDAR = {"eventDate": datetime.date(2026, 6, 7)}

RECOVERY_PROFILE = {
    "cortisolBaseline": 0.45,
    "testosteroneBaseline": 0.65,
}


def print_evolutionary(response):
    summary = response.summary
    print()
    print("=" * 65)
    print(f"  Evolutionary schedule — {len(summary.schedule)} days from {START:%d %B %Y}")
    print("=" * 65)
    print()
    print(f"  {'Day':<5} {'Modalities':<24} {'Min':>5} {'Int':>5} {'Interf.':>8}")
    print("  " + "-" * 63)
    for session, interference in zip(summary.schedule, response.interference.sessions):
        date = START + datetime.timedelta(days=session.day)
        print(
            f"  {date:%a} {'+'.join(session.modalities):<24} "
            f"{session.duration:>5.0f} {session.intensity:>5.2f} {interference.total:>8.2f}"
        )

    print()
    print("  Load distribution:")
    for modality, load in summary.load_distribution.items():
        print(f"    {modality:<14} {load:>8.0f}")
    print(f"  Fatigue index:      {summary.fatigue_index:.3f}")
    risk = summary.interference_risk
    print(
        f"  Interference risk:  strength {risk.strength_penalty:.2f}  "
        f"glycogen {risk.glycogen_stress:.2f}  hormonal {risk.hormonal_conflict:.2f}"
    )
    avg = response.interference.average
    print(
        f"  Session average:    molecular {avg.molecular:.2f}  hormonal {avg.hormonal:.2f}  "
        f"glycogen {avg.glycogen:.2f}  recovery {avg.recovery:.2f}  total {avg.total:.2f}"
    )
    print()
    print("  Goals:")
    for goal_score in summary.goals_satisfied:
        print(f"    {goal_score.goal.type:<18} priority {goal_score.goal.priority:.1f}  score {goal_score.score:>9.1f}")
    if summary.notes:
        print()
        print("  Notes:")
        for note in summary.notes:
            print(f"    - {note}")


def print_periodized(plan):
    print()
    print("=" * 65)
    print(f"  Periodized plan — performance score {plan.performance_score:.1f}")
    print("=" * 65)
    for phase in plan.phases:
        print()
        print(f"  {phase.name} ({phase.weeks} wk, {phase.intensity_label}, focus {phase.focus})")
        emphasis = "  ".join(f"{e.key} {e.value:.0%}" for e in phase.emphasis)
        print(f"    Emphasis: {emphasis}")
        for session in phase.weekly_plan:
            print(
                f"    day {session.day}  {session.primary_focus:<13} "
                f"int {session.intensity:.2f}  load {session.session_load:>5.1f}  ({session.recovery_focus})"
            )
        if phase.progression is None:
            continue
        deloads = ", ".join(
            f"wk {d.week} (-{d.load_reduction:.0%})" for d in phase.progression.deload_weeks
        ) or "none"
        print(f"    Deloads: {deloads}")
        adjustments = ", ".join(
            f"{a.load_adjustment:+.0%}" for a in phase.progression.auto_regulation
        )
        print(f"    Auto-regulation: {adjustments}")


def main():
    setup_logger(level=settings.LOG_LEVEL, log_file=settings.LOG_FILE, json_logs=settings.LOG_JSON)

    service = TrainingPlanService(
        scheduler_config=SchedulerConfig(population_size=40, max_generations=40),
        random_source=default_random_source(SEED),
    )

    evolutionary = service.build_evolutionary_plan(
        GOALS, SCHEDULER_CONSTRAINTS, time_horizon=28, recovery_profile=RECOVERY_PROFILE
    )
    print_evolutionary(evolutionary)

    periodized = service.build_periodized_plan(GOALS, PERIODIZATION_CONSTRAINTS, CALENDAR)
    print_periodized(periodized)
    print()


if __name__ == "__main__":
    main()
