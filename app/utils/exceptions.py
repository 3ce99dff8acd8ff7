# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Focus Tracker - Habit Analytics project.
# Licensed under the MIT License - see the LICENSE file for details.

"""
Custom Exceptions - Habit tracker error types
"""


class HabitTrackerError(Exception):
    """Base exception for all habit tracker errors"""
    pass


class HabitNotFoundError(HabitTrackerError):
    """Raised when a habit does not exist or is not owned by the requesting user"""

    def __init__(self, message: str = "Habit not found or doesn't belong to user"):
        super().__init__(message)
        self.message = message


class HabitValidationError(HabitTrackerError):
    """Raised when required identifiers or fields are missing or malformed"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class StoreError(HabitTrackerError):
    """Raised when the completion store fails to read or write"""
    pass


class RemoteCommandError(HabitTrackerError):
    """Raised by the API client when a remote command fails for any reason"""

    def __init__(self, message: str, status_code: int = None, detail=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail

    def __repr__(self):
        return f"<RemoteCommandError status={self.status_code} message={self.message!r}>"
