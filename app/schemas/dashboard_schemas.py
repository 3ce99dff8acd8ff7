# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Focus Tracker - Habit Analytics project.
# Licensed under the MIT License - see the LICENSE file for details.

from pydantic import BaseModel
from typing import Optional, List
from datetime import date, datetime


class TodayHabitStatus(BaseModel):
    habit_id: int
    title: str
    description: Optional[str] = None
    completed: bool
    log_id: Optional[int] = None


class DayProgress(BaseModel):
    day: str  # "Mon", "Tue", ...
    date: date
    completed: int
    total: int


class ActivityItem(BaseModel):
    habit: str
    habit_id: int
    status: str  # "completed" | "pending"


class DashboardSnapshot(BaseModel):
    completed_today: int = 0
    total_habits: int = 0
    current_streak: int = 0
    weekly_average: int = 0
    weekly_completed: int = 0
    weekly_total: int = 0

    today_habits: List[TodayHabitStatus] = []
    weekly_progress: List[DayProgress] = []
    recent_activity: List[ActivityItem] = []

    last_updated: datetime
