"""
Complete workflow example: Practice → History → Optimizer → Trends → Report

Demonstrates end-to-end integration of the analytics core:
1. Run simulated practice sessions with adaptive difficulty
2. Persist session history and data points
3. Ask the optimizer when and how long to practise next
4. Analyze trends and predict phase advancement
5. Build parent-facing recommendations and charts
"""

import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pecs_analytics.analytics import (
    SessionOptimizer,
    TrendAnalyzer,
    generate_recommendations,
    generate_session_plan,
)
from pecs_analytics.config import config
from pecs_analytics.models import ChildPerformance, PhaseProgress
from pecs_analytics.practice_session import PracticeSession
from pecs_analytics.reports import ProgressChartRenderer
from pecs_analytics.utils.logger import configure_logging
from pecs_analytics.utils.persistence import HistoryStore

CHILD_ID = "demo-child"


def simulate_session(day: datetime, phase: int, skill: float, rng: random.Random) -> PracticeSession:
    """Run one session of 12-20 trials; success odds drop as the array grows."""
    session = PracticeSession(
        CHILD_ID,
        phase=phase,
        started_at=day,
        on_difficulty_change=lambda level, msg: print(f"    ↳ array size {level}: {msg}"),
    )
    for _ in range(rng.randint(12, 20)):
        odds = skill - 0.08 * (session.current_difficulty - 2)
        session.record_trial(rng.random() < odds, rng.uniform(1500, 6000))
    return session


def main():
    configure_logging("WARNING")
    config.prepare_fs()
    rng = random.Random(7)
    store = HistoryStore()
    store.delete_child(CHILD_ID)

    # ==================== Step 1: Practice ====================
    print("=" * 60)
    print("STEP 1: Simulating three weeks of practice")
    print("=" * 60)

    start = datetime.now(timezone.utc).replace(hour=10, minute=0) - timedelta(days=21)
    for day_index in range(21):
        if day_index % 7 == 6:
            continue
        day = start + timedelta(days=day_index)
        phase = 1 if day_index < 10 else 2
        skill = 0.6 + day_index * 0.015

        session = simulate_session(day, phase, skill, rng)
        history, point = session.complete(
            ended_at=day + timedelta(minutes=rng.randint(8, 16)),
            local_start=day.replace(tzinfo=None),
        )

        # ==================== Step 2: Persist ====================
        ok, errors = store.save_session(CHILD_ID, history)
        if not ok:
            print(f"⚠ Could not save session: {errors}")
        store.save_data_point(CHILD_ID, point)
        print(f"✓ Day {day_index + 1:2d}: phase {phase}, {history.success_rate:.0%} success")

    # ==================== Step 3: Optimizer ====================
    print("\n" + "=" * 60)
    print("STEP 3: Session optimizer")
    print("=" * 60)

    optimizer = SessionOptimizer(store.load_sessions(CHILD_ID))
    duration = optimizer.get_optimal_duration()
    next_session = optimizer.get_next_session_recommendation(current_phase=2)
    schedule = optimizer.get_weekly_schedule()

    print(f"Duration: {duration.reasoning}")
    print(f"Next session: {next_session.suggested_time} for {next_session.suggested_duration}")
    print(f"  Phases: {next_session.suggested_phases}")
    print(f"Weekly goal: {schedule.weekly_goal.sessions_target} sessions, "
          f"{schedule.weekly_goal.minutes_target} minutes")

    # ==================== Step 4: Trends ====================
    print("\n" + "=" * 60)
    print("STEP 4: Trend analysis")
    print("=" * 60)

    points = store.load_data_points(CHILD_ID)
    analysis = TrendAnalyzer(points).get_comprehensive_analysis(current_phase=2)

    trend = analysis.overall_trend
    print(f"Trend: {trend.direction} ({trend.strength}), {trend.rate_of_change:+.1f}%/week")
    for insight in trend.insights:
        print(f"  • {insight}")
    for factor in analysis.phase_prediction.factors:
        print(f"  - {factor}")
    for skill in analysis.skill_breakdown:
        print(f"  Phase {skill.phase} {skill.category}: {skill.level} ({skill.progress}%)")

    # ==================== Step 5: Recommendations ====================
    print("\n" + "=" * 60)
    print("STEP 5: Recommendations and report")
    print("=" * 60)

    recent = points[-5:]
    performance = ChildPerformance(
        current_phase=2,
        recent_success_rate=100 * sum(p.success_rate for p in recent) / len(recent),
        avg_response_time=sum(p.avg_response_time_ms for p in recent) / len(recent) / 1000,
        streak_days=2,
        total_sessions=len(points),
        last_session_date=points[-1].date,
        phase_progress=[
            PhaseProgress(s.phase, s.progress, s.sample_size) for s in analysis.skill_breakdown
        ],
    )
    for rec in generate_recommendations(performance):
        print(f"[{rec.priority}] {rec.title}: {rec.description}")

    plan = generate_session_plan(performance)
    print(f"\nPlan: {plan.recommended_duration} min at difficulty {plan.difficulty_level}")
    for activity in plan.main_activities:
        print(f"  {activity.duration:2d} min  {activity.description}")

    charts = ProgressChartRenderer().render_report(points, prefix=CHILD_ID)
    print(f"\n✓ Generated {len(charts)} charts in {config.paths.reports_dir}")


if __name__ == "__main__":
    main()
