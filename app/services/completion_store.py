# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Focus Tracker - Habit Analytics project.
# Licensed under the MIT License - see the LICENSE file for details.


import logging
from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.completion_log import CompletionLog
from app.models.habit import Habit
from app.models.user import User
from app.utils.exceptions import HabitNotFoundError, HabitValidationError, StoreError

logger = logging.getLogger(__name__)

HABIT_FIELDS = ("title", "description", "frequency", "is_active")

# A write that loses the (habit_id, date) unique race is replayed once.
MAX_WRITE_ATTEMPTS = 2


class CompletionStore:
    """
    Narrow read/write interface over habits and their per-day completion logs.
    Every habit read that takes a user_id is ownership-checked.
    """

    def __init__(self, db: Session):
        self.db = db

    # ---------------------- HABITS ----------------------

    def find_active_habits(self, user_id: int) -> List[Habit]:
        return (
            self.db.query(Habit)
            .filter(Habit.user_id == user_id, Habit.is_active.is_(True))
            .order_by(Habit.created_at.desc(), Habit.id.desc())
            .all()
        )

    def find_habits(self, user_id: int, include_inactive: bool = True) -> List[Habit]:
        if not include_inactive:
            return self.find_active_habits(user_id)
        return (
            self.db.query(Habit)
            .filter(Habit.user_id == user_id)
            .order_by(Habit.created_at.desc(), Habit.id.desc())
            .all()
        )

    def get_owned_habit(self, habit_id: int, user_id: int) -> Habit:
        habit = self.db.query(Habit).filter(Habit.id == habit_id, Habit.user_id == user_id).first()
        if not habit:
            raise HabitNotFoundError()
        return habit

    def create_habit(self, user_id: int, data: dict) -> Habit:
        if not self.db.query(User.id).filter(User.id == user_id).first():
            raise HabitValidationError("Unknown user")

        habit = Habit(user_id=user_id, **{k: v for k, v in data.items() if k in HABIT_FIELDS})
        try:
            self.db.add(habit)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Failed to create habit: {e}") from e
        self.db.refresh(habit)
        logger.info(f"✅ Habit {habit.id} created for user {user_id}")
        return habit

    def update_habit(self, habit_id: int, user_id: int, data: dict) -> Habit:
        habit = self.get_owned_habit(habit_id, user_id)
        for field, value in data.items():
            if field in HABIT_FIELDS:
                setattr(habit, field, value)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Failed to update habit: {e}") from e
        self.db.refresh(habit)
        return habit

    def delete_habit(self, habit_id: int, user_id: int) -> None:
        habit = self.get_owned_habit(habit_id, user_id)
        try:
            self.db.delete(habit)  # logs go with it (ORM cascade)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Failed to delete habit: {e}") from e
        logger.info(f"🗑️ Habit {habit_id} deleted for user {user_id}")

    # ---------------------- LOGS ----------------------

    def find_logs(self, habit_ids: Iterable[int], start: date, end: date) -> List[CompletionLog]:
        """Logs for the given habits with start <= date <= end."""
        habit_ids = list(habit_ids)
        if not habit_ids:
            return []
        return (
            self.db.query(CompletionLog)
            .filter(
                CompletionLog.habit_id.in_(habit_ids),
                CompletionLog.date >= start,
                CompletionLog.date <= end,
            )
            .order_by(CompletionLog.date.desc())
            .all()
        )

    def find_log(self, habit_id: int, day: date, for_update: bool = False) -> Optional[CompletionLog]:
        query = self.db.query(CompletionLog).filter(
            CompletionLog.habit_id == habit_id,
            CompletionLog.date == day,
        )
        if for_update:
            query = query.with_for_update()
        return query.first()

    def upsert_log(self, habit_id: int, day: date, completed: bool, notes: Optional[str] = None) -> CompletionLog:
        """Sets the day's state explicitly, creating the row if needed."""

        def apply():
            log = self.find_log(habit_id, day, for_update=True)
            if log is None:
                log = CompletionLog(habit_id=habit_id, date=day, completed=completed, notes=notes)
                self.db.add(log)
            else:
                log.completed = completed
                if notes is not None:
                    log.notes = notes
            return log

        return self._write_log(apply)

    def toggle_log(self, habit_id: int, day: date) -> CompletionLog:
        """
        Flips the day's log, or creates it as completed when absent.
        The read and the write share one transaction; the existing row is
        locked where the backend supports FOR UPDATE.
        """

        def apply():
            log = self.find_log(habit_id, day, for_update=True)
            if log is None:
                log = CompletionLog(habit_id=habit_id, date=day, completed=True)
                self.db.add(log)
            else:
                log.completed = not log.completed
            return log

        return self._write_log(apply)

    def _write_log(self, apply) -> CompletionLog:
        for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
            try:
                log = apply()
                self.db.flush()
                self.db.commit()
                self.db.refresh(log)
                return log
            except IntegrityError as e:
                # Another request inserted the same (habit, day) first
                self.db.rollback()
                logger.warning(f"⚠️ Concurrent log insert detected (attempt {attempt}/{MAX_WRITE_ATTEMPTS})")
                if attempt == MAX_WRITE_ATTEMPTS:
                    raise StoreError(f"Failed to write completion log: {e}") from e
            except SQLAlchemyError as e:
                self.db.rollback()
                raise StoreError(f"Failed to write completion log: {e}") from e

    # ---------------------- MAINTENANCE ----------------------

    def delete_logs_for_inactive_habits(self, cutoff: date) -> int:
        inactive_ids = select(Habit.id).where(Habit.is_active.is_(False))
        count = (
            self.db.query(CompletionLog)
            .filter(
                CompletionLog.habit_id.in_(inactive_ids),
                CompletionLog.date < cutoff,
            )
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return count
