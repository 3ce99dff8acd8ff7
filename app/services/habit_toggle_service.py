# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Focus Tracker - Habit Analytics project.
# Licensed under the MIT License - see the LICENSE file for details.


import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from app.schemas.habit_schemas import ToggleResult
from app.services.completion_store import CompletionStore
from app.utils.exceptions import HabitValidationError
from app.utils.time_utils import resolve_day

logger = logging.getLogger(__name__)


def parse_id(value, name: str) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise HabitValidationError(f"{name} is required")
    if isinstance(value, bool):
        raise HabitValidationError(f"{name} must be an integer")
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise HabitValidationError(f"{name} must be an integer")
    if parsed <= 0:
        raise HabitValidationError(f"{name} must be positive")
    return parsed


def toggle_habit_completion(
    db: Session,
    habit_id,
    user_id,
    target_date=None,
    today: Optional[date] = None,
) -> ToggleResult:
    """
    Flips the completion state of one habit for one calendar day.

    - habit_id / user_id are validated before the store is touched
    - a habit that is missing or owned by someone else raises HabitNotFoundError
    - a day with no log is created as completed, never as incomplete
    - target_date defaults to today in the app time zone
    """
    habit_id = parse_id(habit_id, "Habit ID")
    user_id = parse_id(user_id, "User ID")
    try:
        day = resolve_day(target_date, today=today)
    except ValueError as e:
        raise HabitValidationError(f"Invalid date: {e}")

    store = CompletionStore(db)
    habit = store.get_owned_habit(habit_id, user_id)
    log = store.toggle_log(habit.id, day)

    logger.info(
        f"🔁 Habit {habit.id} on {day.isoformat()} -> {'completed' if log.completed else 'incomplete'}"
    )

    return ToggleResult(
        habit_id=habit.id,
        habit_title=habit.title,
        log_id=log.id,
        completed=log.completed,
        date=log.date,
    )
