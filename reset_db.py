# reset_db.py
import os
import sys

from app.models import database
from app.models import *  # registers User, Habit, CompletionLog

if __name__ == "__main__":
    if os.getenv("ENV") == "production" and "--force" not in sys.argv:
        print("🛑 Refusing to drop habit tables in production without --force")
        sys.exit(1)

    print(f"⚠️ Dropping habits, habit_logs and users on {database.engine.url!r}...")
    database.Base.metadata.drop_all(bind=database.engine)

    database.Base.metadata.create_all(bind=database.engine)
    print("✅ Focus Tracker tables recreated.")
