# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Focus Tracker - Habit Analytics project.
# Licensed under the MIT License - see the LICENSE file for details.

import os
from datetime import timedelta
from sqlalchemy.orm import Session
from app.models.database import SessionLocal
from app.services.completion_store import CompletionStore
from app.utils.time_utils import today_local
import logging

logger = logging.getLogger("cleanup")

INACTIVE_LOG_RETENTION_DAYS = int(os.getenv("INACTIVE_LOG_RETENTION_DAYS", "90"))


def clean_inactive_habit_logs(db: Session = None, retention_days: int = INACTIVE_LOG_RETENTION_DAYS) -> int:
    """
    Deletes completion logs older than the retention window that belong to
    deactivated habits. Active habits keep their full history.
    """
    owns_session = db is None
    db = db or SessionLocal()
    deleted = 0
    try:
        cutoff = today_local() - timedelta(days=retention_days)
        deleted = CompletionStore(db).delete_logs_for_inactive_habits(cutoff)
        logger.info(
            f"✅ Habit log cleanup completed. Deleted {deleted} logs of inactive habits older than {retention_days} days."
        )

    except Exception as e:
        db.rollback()
        logger.error(f"🛑 Habit log cleanup failed: {e}", exc_info=True)
    finally:
        if owns_session:
            db.close()

    return deleted
