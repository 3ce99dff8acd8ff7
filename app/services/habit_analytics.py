# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Focus Tracker - Habit Analytics project.
# Licensed under the MIT License - see the LICENSE file for details.

"""
Streak & aggregation engine.

Pure computation over a user's active habits and their completion logs.
Nothing here touches the database; callers hand in already-loaded rows
(ORM objects or anything exposing the same attributes).

All comparisons are by calendar day. Log dates are normalized with
``to_local_day`` so a stray timestamp never splits one day into two.
"""

from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Set

from app.schemas.dashboard_schemas import (
    ActivityItem,
    DashboardSnapshot,
    DayProgress,
    TodayHabitStatus,
)
from app.utils.time_utils import to_local_day

# Backward scan never walks further than this many days.
STREAK_SAFETY_LIMIT_DAYS = 365
WEEK_WINDOW_DAYS = 7
DAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def completed_days_by_habit(logs: Optional[Iterable]) -> Dict[int, Set[date]]:
    """
    Groups completed logs into {habit_id: {day, ...}}.
    Logs with completed = False are ignored.
    """
    days: Dict[int, Set[date]] = {}
    for log in logs or []:
        if not log.completed:
            continue
        days.setdefault(log.habit_id, set()).add(to_local_day(log.date))
    return days


def is_perfect_day(habit_ids: List[int], completed_days: Dict[int, Set[date]], day: date) -> bool:
    """True when every habit in ``habit_ids`` has a completed log on ``day``."""
    if not habit_ids:
        return False
    return all(day in completed_days.get(habit_id, ()) for habit_id in habit_ids)


def compute_streak(
    habit_ids: Optional[Iterable[int]],
    completed_days: Dict[int, Set[date]],
    today: date,
    max_days: int = STREAK_SAFETY_LIMIT_DAYS,
) -> int:
    """
    Number of consecutive perfect days counting backward from yesterday,
    plus one if today is also perfect.

    The scan stops at the first day on which any habit is missing a
    completed log, or after ``max_days`` days. Zero habits always yields 0.
    """
    habit_ids = list(habit_ids or [])
    if not habit_ids:
        return 0

    streak = 0
    check_day = today - timedelta(days=1)
    while streak < max_days and is_perfect_day(habit_ids, completed_days, check_day):
        streak += 1
        check_day -= timedelta(days=1)

    if is_perfect_day(habit_ids, completed_days, today):
        streak += 1

    return streak


def habit_streak(days: Optional[Set[date]], today: date) -> int:
    """Per-habit streak: the aggregate rule applied to a single habit."""
    return compute_streak([0], {0: set(days or ())}, today)


def build_weekly_progress(
    habit_ids: Optional[Iterable[int]],
    completed_days: Dict[int, Set[date]],
    today: date,
) -> List[DayProgress]:
    """
    Seven entries, oldest first, ending with today.

    ``total`` is the current active-habit count on every day, including days
    before a habit was created.
    """
    habit_ids = list(habit_ids or [])
    total = len(habit_ids)
    progress = []
    for offset in range(WEEK_WINDOW_DAYS - 1, -1, -1):
        day = today - timedelta(days=offset)
        completed_on_day = sum(1 for habit_id in habit_ids if day in completed_days.get(habit_id, ()))
        progress.append(DayProgress(
            day=DAY_NAMES[day.weekday()],
            date=day,
            completed=completed_on_day,
            total=total,
        ))
    return progress


def weekly_average(completed: int, total: int) -> int:
    """Completion percentage rounded half up; 0 when there is nothing to complete."""
    if total <= 0:
        return 0
    # floor(completed * 100 / total + 0.5) in integer arithmetic
    return (completed * 200 + total) // (2 * total)


def build_dashboard_snapshot(
    habits: Optional[Iterable],
    logs: Optional[Iterable],
    today: date,
    now: Optional[datetime] = None,
) -> DashboardSnapshot:
    """
    Builds the full dashboard view for one user.

    ``habits`` are the user's active habits in display order; ``logs`` may
    contain rows for other habits or outside the window, they are filtered
    here. A ``None`` habit set is treated as zero habits.
    """
    habits = list(habits or [])
    logs = list(logs or [])
    habit_ids = [habit.id for habit in habits]
    known_ids = set(habit_ids)

    relevant_logs = [log for log in logs if log.habit_id in known_ids]
    completed_days = completed_days_by_habit(relevant_logs)

    todays_logs = {}
    for log in relevant_logs:
        if to_local_day(log.date) == today:
            todays_logs[log.habit_id] = log

    today_habits = []
    for habit in habits:
        log = todays_logs.get(habit.id)
        today_habits.append(TodayHabitStatus(
            habit_id=habit.id,
            title=habit.title,
            description=habit.description,
            completed=bool(log and log.completed),
            log_id=log.id if log else None,
        ))

    completed_today = sum(1 for status in today_habits if status.completed)
    weekly_progress = build_weekly_progress(habit_ids, completed_days, today)
    weekly_completed = sum(day.completed for day in weekly_progress)
    weekly_total = sum(day.total for day in weekly_progress)

    recent_activity = [
        ActivityItem(
            habit=status.title,
            habit_id=status.habit_id,
            status="completed" if status.completed else "pending",
        )
        for status in today_habits
    ]

    return DashboardSnapshot(
        completed_today=completed_today,
        total_habits=len(habits),
        current_streak=compute_streak(habit_ids, completed_days, today),
        weekly_average=weekly_average(weekly_completed, weekly_total),
        weekly_completed=weekly_completed,
        weekly_total=weekly_total,
        today_habits=today_habits,
        weekly_progress=weekly_progress,
        recent_activity=recent_activity,
        last_updated=now or datetime.utcnow(),
    )
