# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Focus Tracker - Habit Analytics project.
# Licensed under the MIT License - see the LICENSE file for details.

import os
from datetime import date, datetime
from typing import Optional, Union
from pytz import timezone, UnknownTimeZoneError

# ✅ Only load .env in local/dev
if os.environ.get("ENV") != "production":
    from dotenv import load_dotenv
    load_dotenv()

try:
    APP_TIMEZONE = timezone(os.getenv("APP_TIMEZONE", "UTC"))
except UnknownTimeZoneError:
    raise RuntimeError(f"APP_TIMEZONE '{os.getenv('APP_TIMEZONE')}' is not a valid time zone name.")


def get_current_time() -> datetime:
    """Returns the current time in the deployment time zone."""
    return datetime.now(APP_TIMEZONE)


def today_local() -> date:
    return get_current_time().date()


def to_local_day(value: Union[date, datetime, str]) -> date:
    """
    Strips time of day from a date-like value.
    Aware datetimes are converted to the app time zone first; naive ones are
    taken as already local. Strings are parsed as ISO 8601.
    """
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Empty date string")
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            value = date.fromisoformat(text)

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(APP_TIMEZONE)
        return value.date()

    if isinstance(value, date):
        return value

    raise ValueError(f"Unsupported date value: {value!r}")


def resolve_day(value: Optional[Union[date, datetime, str]] = None, today: Optional[date] = None) -> date:
    if value is None:
        return today or today_local()
    return to_local_day(value)
