# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Focus Tracker - Habit Analytics project.
# Licensed under the MIT License - see the LICENSE file for details.


from .user import User
from .habit import Habit
from .completion_log import CompletionLog
