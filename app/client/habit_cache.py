# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Focus Tracker - Habit Analytics project.
# Licensed under the MIT License - see the LICENSE file for details.

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from app.schemas.habit_schemas import HabitView


class CachedHabitView(HabitView):
    # True while the habit only exists locally under a negative placeholder id
    is_temporary: bool = False


@dataclass(frozen=True)
class CacheSnapshot:
    entries: Tuple[Tuple[int, CachedHabitView], ...]
    is_loaded: bool
    is_stale: bool

    def habit_ids(self) -> List[int]:
        return [habit_id for habit_id, _ in self.entries]


class HabitCache:
    """
    Client-side view of one user's habit list, keyed by habit id.

    Instances are independent; pass one into HabitMutations rather than
    sharing module state. Reads hand out copies so callers cannot mutate
    cached entries behind the cache's back.
    """

    def __init__(self):
        self._entries: Dict[int, CachedHabitView] = {}
        self.is_loaded = False
        self.is_stale = False

    def __len__(self):
        return len(self._entries)

    def __contains__(self, habit_id):
        return habit_id in self._entries

    def habits(self) -> List[CachedHabitView]:
        return [view.model_copy(deep=True) for view in self._entries.values()]

    def get(self, habit_id: int) -> Optional[CachedHabitView]:
        view = self._entries.get(habit_id)
        return view.model_copy(deep=True) if view is not None else None

    def put(self, view: CachedHabitView) -> None:
        self._entries[view.id] = view.model_copy(deep=True)

    def remove(self, habit_id: int) -> None:
        self._entries.pop(habit_id, None)

    def replace(self, habits: Iterable[HabitView]) -> None:
        """Wholesale replacement with authoritative data."""
        self._entries = {
            habit.id: CachedHabitView(**habit.model_dump(), is_temporary=False)
            for habit in habits
        }
        self.is_loaded = True
        self.is_stale = False

    def mark_stale(self) -> None:
        self.is_stale = True

    def clear(self) -> None:
        self._entries = {}
        self.is_loaded = False
        self.is_stale = False

    def snapshot(self) -> CacheSnapshot:
        return CacheSnapshot(
            entries=tuple((habit_id, view.model_copy(deep=True)) for habit_id, view in self._entries.items()),
            is_loaded=self.is_loaded,
            is_stale=self.is_stale,
        )

    def restore(self, snapshot: CacheSnapshot, keys: Optional[Iterable[int]] = None) -> None:
        """
        Puts the cache back to ``snapshot``.

        With ``keys`` only those entries are reverted (re-added, removed or
        reset) and everything else keeps its current value. Entry order
        follows the snapshot. When nothing outside ``keys`` changed since
        the snapshot, the result equals the snapshot exactly.
        """
        if keys is None:
            self._entries = {habit_id: view.model_copy(deep=True) for habit_id, view in snapshot.entries}
            self.is_loaded = snapshot.is_loaded
            self.is_stale = snapshot.is_stale
            return

        keys = set(keys)
        current = self._entries
        merged: Dict[int, CachedHabitView] = {}
        for habit_id, view in snapshot.entries:
            if habit_id in keys:
                merged[habit_id] = view.model_copy(deep=True)
            elif habit_id in current:
                merged[habit_id] = current[habit_id]
        for habit_id, view in current.items():
            if habit_id not in merged and habit_id not in keys:
                merged[habit_id] = view
        self._entries = merged
