from datetime import date, datetime, timedelta
from types import SimpleNamespace

from app.services.habit_analytics import (
    STREAK_SAFETY_LIMIT_DAYS,
    build_dashboard_snapshot,
    build_weekly_progress,
    completed_days_by_habit,
    compute_streak,
    habit_streak,
    weekly_average,
)

TODAY = date(2026, 3, 12)  # a Thursday


def habit(habit_id, title=None):
    return SimpleNamespace(id=habit_id, title=title or f"Habit {habit_id}", description=None)


def log(habit_id, day, completed=True, log_id=None):
    return SimpleNamespace(id=log_id or hash((habit_id, day)) % 10_000, habit_id=habit_id, date=day, completed=completed)


def day(offset):
    return TODAY - timedelta(days=offset)


def test_zero_habits_yield_zero_streak_and_average():
    snapshot = build_dashboard_snapshot([], [], TODAY)

    assert snapshot.current_streak == 0
    assert snapshot.weekly_average == 0
    assert snapshot.total_habits == 0
    assert [d.total for d in snapshot.weekly_progress] == [0] * 7


def test_none_habit_set_is_treated_as_empty():
    snapshot = build_dashboard_snapshot(None, None, TODAY)

    assert snapshot.current_streak == 0
    assert snapshot.weekly_average == 0
    assert snapshot.today_habits == []
    assert len(snapshot.weekly_progress) == 7


def test_streak_stops_at_first_incomplete_day():
    habits = [habit(1), habit(2), habit(3)]
    logs = [log(h.id, day(offset)) for h in habits for offset in (1, 2)]
    logs += [log(1, day(3)), log(2, day(3))]
    # Older perfect days behind the gap must not count
    logs += [log(h.id, day(4)) for h in habits]

    snapshot = build_dashboard_snapshot(habits, logs, TODAY)

    assert snapshot.current_streak == 2


def test_today_fully_completed_adds_one():
    habits = [habit(1), habit(2)]
    logs = [log(h.id, day(offset)) for h in habits for offset in (0, 1)]

    snapshot = build_dashboard_snapshot(habits, logs, TODAY)

    assert snapshot.completed_today == 2
    assert snapshot.current_streak == 2


def test_partial_today_does_not_break_past_streak():
    habits = [habit(1), habit(2)]
    logs = [log(h.id, day(offset)) for h in habits for offset in (1, 2, 3)]
    logs.append(log(1, day(0)))

    assert build_dashboard_snapshot(habits, logs, TODAY).current_streak == 3


def test_incomplete_logs_do_not_count():
    habits = [habit(1)]
    logs = [log(1, day(1), completed=False), log(1, day(2))]

    assert build_dashboard_snapshot(habits, logs, TODAY).current_streak == 0


def test_streak_scan_is_bounded_by_safety_limit():
    days = {day(offset) for offset in range(0, 500)}

    streak = compute_streak([1], {1: days}, TODAY)

    assert streak == STREAK_SAFETY_LIMIT_DAYS + 1


def test_weekly_progress_runs_oldest_to_newest_with_current_total():
    habits = [habit(1), habit(2)]
    days = completed_days_by_habit([log(1, day(6)), log(2, day(6)), log(1, day(0))])

    progress = build_weekly_progress([h.id for h in habits], days, TODAY)

    assert [p.date for p in progress] == [day(offset) for offset in range(6, -1, -1)]
    assert progress[0].completed == 2
    assert progress[-1].completed == 1
    assert progress[-1].day == "Thu"
    assert all(p.total == 2 for p in progress)


def test_weekly_average_rounds_half_up():
    assert weekly_average(1, 8) == 13
    assert weekly_average(2, 3) == 67
    assert weekly_average(1, 3) == 33
    assert weekly_average(7, 7) == 100
    assert weekly_average(0, 0) == 0


def test_snapshot_weekly_totals():
    habits = [habit(1), habit(2)]
    logs = [log(1, day(offset)) for offset in range(7)]

    snapshot = build_dashboard_snapshot(habits, logs, TODAY)

    assert snapshot.weekly_completed == 7
    assert snapshot.weekly_total == 14
    assert snapshot.weekly_average == 50


def test_log_timestamps_are_bucketed_by_calendar_day():
    habits = [habit(1)]
    stamp = datetime.combine(day(1), datetime.min.time()) + timedelta(hours=22, minutes=30)

    snapshot = build_dashboard_snapshot(habits, [log(1, stamp)], TODAY)

    assert snapshot.current_streak == 1


def test_today_habits_carry_log_id_even_when_incomplete():
    habits = [habit(1, "Stretch"), habit(2, "Journal")]
    logs = [log(1, day(0), completed=False, log_id=41), log(2, day(0), log_id=42)]

    snapshot = build_dashboard_snapshot(habits, logs, TODAY)

    stretch, journal = snapshot.today_habits
    assert (stretch.completed, stretch.log_id) == (False, 41)
    assert (journal.completed, journal.log_id) == (True, 42)
    assert [a.status for a in snapshot.recent_activity] == ["pending", "completed"]


def test_logs_of_unknown_habits_are_ignored():
    snapshot = build_dashboard_snapshot([habit(1)], [log(1, day(1)), log(99, day(0))], TODAY)

    assert snapshot.completed_today == 0
    assert snapshot.current_streak == 1


def test_single_habit_streak_matches_aggregate_rule():
    days = {day(0), day(1), day(2), day(4)}

    assert habit_streak(days, TODAY) == 3
    assert habit_streak(set(), TODAY) == 0
    assert habit_streak(None, TODAY) == 0
