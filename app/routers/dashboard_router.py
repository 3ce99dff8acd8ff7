# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Focus Tracker - Habit Analytics project.
# Licensed under the MIT License - see the LICENSE file for details.


from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.models.database import get_db
from app.services.dashboard_service import get_dashboard_stats
from app.services.habit_toggle_service import parse_id
from app.utils.auth_utils import ensure_token_user_match, require_token

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


# GET /dashboard/stats?user_id=1
@router.get("/stats")
def dashboard_stats(
    user_id: Optional[str] = None,
    db: Session = Depends(get_db),
    user_data: dict = Depends(require_token),
):
    user_id = parse_id(user_id, "User ID")
    ensure_token_user_match(user_data["sub"], user_id)

    return {"success": True, "data": get_dashboard_stats(db, user_id)}
