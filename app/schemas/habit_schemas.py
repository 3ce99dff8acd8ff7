# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Focus Tracker - Habit Analytics project.
# Licensed under the MIT License - see the LICENSE file for details.


from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Union
from datetime import date, datetime

from app.models.habit import HABIT_FREQUENCIES


def _check_frequency(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    normalized = value.strip().lower()
    if normalized not in HABIT_FREQUENCIES:
        raise ValueError(f"Invalid frequency '{value}'. Use one of: {', '.join(HABIT_FREQUENCIES)}")
    return normalized


class HabitCreateRequest(BaseModel):
    user_id: int
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    frequency: str = "daily"

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Habit title is required")
        return v

    @field_validator("frequency")
    @classmethod
    def validate_frequency(cls, v: str) -> str:
        return _check_frequency(v)


class HabitUpdateRequest(BaseModel):
    user_id: int
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    frequency: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Habit title is required")
        return v

    @field_validator("frequency")
    @classmethod
    def validate_frequency(cls, v: Optional[str]) -> Optional[str]:
        return _check_frequency(v)

    def changes(self) -> dict:
        # Only description may be cleared with an explicit null
        fields = self.model_dump(exclude={"user_id"}, exclude_unset=True)
        return {k: v for k, v in fields.items() if v is not None or k == "description"}


class ToggleRequest(BaseModel):
    # Ids are checked by the toggle service so a missing id is a 400, not a 422
    habit_id: Optional[Union[int, str]] = None
    user_id: Optional[Union[int, str]] = None
    date: Optional[str] = None


class LogUpsertRequest(BaseModel):
    user_id: int
    date: str
    completed: bool
    notes: Optional[str] = Field(None, max_length=500)


class CompletionLogView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    habit_id: int
    date: date
    completed: bool
    notes: Optional[str] = None


class HabitView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    description: Optional[str] = None
    frequency: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Derived, never stored
    completed_today: bool = False
    current_streak: int = 0


class HabitDetailView(HabitView):
    logs: List[CompletionLogView] = []


class ToggleResult(BaseModel):
    habit_id: int
    habit_title: str
    log_id: int
    completed: bool
    date: date
