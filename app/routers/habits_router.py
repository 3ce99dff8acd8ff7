# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Focus Tracker - Habit Analytics project.
# Licensed under the MIT License - see the LICENSE file for details.


from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.models.database import get_db
from app.schemas.habit_schemas import (
    HabitCreateRequest,
    HabitUpdateRequest,
    LogUpsertRequest,
    ToggleRequest,
    CompletionLogView,
)
from app.services.completion_store import CompletionStore
from app.services.dashboard_service import build_habit_view, get_habit_detail, list_habit_views
from app.services.habit_toggle_service import parse_id, toggle_habit_completion
from app.utils.auth_utils import ensure_token_user_match, require_token
from app.utils.exceptions import HabitValidationError
from app.utils.time_utils import to_local_day

router = APIRouter(prefix="/habits", tags=["Habits"])


@router.get("")
def list_habits(
    user_id: int = Query(...),
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    user_data: dict = Depends(require_token),
):
    ensure_token_user_match(user_data["sub"], user_id)

    habits = list_habit_views(db, user_id, include_inactive=include_inactive)
    return {"success": True, "data": habits, "message": "Habits fetched successfully"}


@router.post("", status_code=201)
def create_habit(
    payload: HabitCreateRequest,
    db: Session = Depends(get_db),
    user_data: dict = Depends(require_token),
):
    ensure_token_user_match(user_data["sub"], payload.user_id)

    habit = CompletionStore(db).create_habit(
        payload.user_id,
        payload.model_dump(exclude={"user_id"}),
    )
    return {"success": True, "data": build_habit_view(db, habit), "message": "Habit created successfully"}


# ✅ Registered before /{habit_id} routes so "toggle" is never read as an id
@router.post("/toggle")
def toggle_habit(
    payload: ToggleRequest,
    db: Session = Depends(get_db),
    user_data: dict = Depends(require_token),
):
    if payload.user_id is None or payload.habit_id is None:
        raise HabitValidationError("Habit ID and User ID are required")
    habit_id = parse_id(payload.habit_id, "Habit ID")
    user_id = parse_id(payload.user_id, "User ID")
    ensure_token_user_match(user_data["sub"], user_id)

    result = toggle_habit_completion(db, habit_id, user_id, payload.date)
    return {
        "success": True,
        "data": result,
        "message": "Habit marked as completed!" if result.completed else "Habit marked as incomplete",
    }


@router.get("/{habit_id}")
def get_habit(
    habit_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
    user_data: dict = Depends(require_token),
):
    ensure_token_user_match(user_data["sub"], user_id)

    return {"success": True, "data": get_habit_detail(db, habit_id, user_id)}


@router.put("/{habit_id}")
def update_habit(
    habit_id: int,
    payload: HabitUpdateRequest,
    db: Session = Depends(get_db),
    user_data: dict = Depends(require_token),
):
    ensure_token_user_match(user_data["sub"], payload.user_id)

    habit = CompletionStore(db).update_habit(habit_id, payload.user_id, payload.changes())
    return {"success": True, "data": build_habit_view(db, habit), "message": "Habit updated successfully"}


@router.delete("/{habit_id}")
def delete_habit(
    habit_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
    user_data: dict = Depends(require_token),
):
    ensure_token_user_match(user_data["sub"], user_id)

    CompletionStore(db).delete_habit(habit_id, user_id)
    return {"success": True, "message": "Habit deleted successfully"}


@router.put("/{habit_id}/logs")
def set_habit_log(
    habit_id: int,
    payload: LogUpsertRequest,
    db: Session = Depends(get_db),
    user_data: dict = Depends(require_token),
):
    ensure_token_user_match(user_data["sub"], payload.user_id)

    try:
        day = to_local_day(payload.date)
    except ValueError as e:
        raise HabitValidationError(f"Invalid date: {e}")

    store = CompletionStore(db)
    habit = store.get_owned_habit(habit_id, payload.user_id)
    log = store.upsert_log(habit.id, day, payload.completed, notes=payload.notes)
    return {"success": True, "data": CompletionLogView.model_validate(log), "message": "Habit log saved"}
