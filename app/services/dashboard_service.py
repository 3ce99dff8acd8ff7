# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Focus Tracker - Habit Analytics project.
# Licensed under the MIT License - see the LICENSE file for details.


from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session

from app.models.habit import Habit
from app.schemas.dashboard_schemas import DashboardSnapshot
from app.schemas.habit_schemas import CompletionLogView, HabitDetailView, HabitView
from app.services.completion_store import CompletionStore
from app.services.habit_analytics import (
    STREAK_SAFETY_LIMIT_DAYS,
    build_dashboard_snapshot,
    completed_days_by_habit,
    habit_streak,
)
from app.utils.time_utils import today_local

DETAIL_LOG_LIMIT = 30


def _lookback_start(today: date) -> date:
    # Oldest day the streak scan can reach
    return today - timedelta(days=STREAK_SAFETY_LIMIT_DAYS)


def get_dashboard_stats(db: Session, user_id: int, today: Optional[date] = None) -> DashboardSnapshot:
    """Recomputes the dashboard from scratch; nothing derived is cached."""
    today = today or today_local()
    store = CompletionStore(db)

    habits = store.find_active_habits(user_id)
    logs = store.find_logs([h.id for h in habits], _lookback_start(today), today)
    return build_dashboard_snapshot(habits, logs, today)


def _to_view(habit: Habit, days: set, today: date) -> HabitView:
    view = HabitView.model_validate(habit)
    view.completed_today = today in days
    view.current_streak = habit_streak(days, today)
    return view


def list_habit_views(
    db: Session,
    user_id: int,
    include_inactive: bool = False,
    today: Optional[date] = None,
) -> List[HabitView]:
    """User's habits with per-habit completed_today / current_streak filled in."""
    today = today or today_local()
    store = CompletionStore(db)

    habits = store.find_habits(user_id, include_inactive=include_inactive)
    logs = store.find_logs([h.id for h in habits], _lookback_start(today), today)
    days = completed_days_by_habit(logs)
    return [_to_view(habit, days.get(habit.id, set()), today) for habit in habits]


def build_habit_view(db: Session, habit: Habit, today: Optional[date] = None) -> HabitView:
    today = today or today_local()
    logs = CompletionStore(db).find_logs([habit.id], _lookback_start(today), today)
    return _to_view(habit, completed_days_by_habit(logs).get(habit.id, set()), today)


def get_habit_detail(db: Session, habit_id: int, user_id: int, today: Optional[date] = None) -> HabitDetailView:
    """Single habit plus its most recent logs (newest first)."""
    today = today or today_local()
    store = CompletionStore(db)

    habit = store.get_owned_habit(habit_id, user_id)
    logs = store.find_logs([habit.id], _lookback_start(today), today)
    view = _to_view(habit, completed_days_by_habit(logs).get(habit.id, set()), today)
    return HabitDetailView(
        **view.model_dump(),
        logs=[CompletionLogView.model_validate(log) for log in logs[:DETAIL_LOG_LIMIT]],
    )
