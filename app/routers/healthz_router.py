# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Focus Tracker - Habit Analytics project.
# Licensed under the MIT License - see the LICENSE file for details.



from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session
from app.models.database import get_db
from app.models.habit import Habit

router = APIRouter(tags=["Infra"])


@router.get("/healthz")
def health_check(db: Session = Depends(get_db)):
    result = {
        "db_connection": False,
        "habits_table": False,
    }

    try:
        # ✅ Check DB round trip
        db.execute(text("SELECT 1"))
        result["db_connection"] = True

        # ✅ Check schema is in place
        db.query(Habit.id).first()
        result["habits_table"] = True

        return {
            "status": "ok" if all(result.values()) else "partial",
            "details": result
        }

    except Exception as e:
        return {
            "status": "error",
            "error": str(e),
            "details": result
        }
