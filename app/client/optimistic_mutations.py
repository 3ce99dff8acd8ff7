# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Focus Tracker - Habit Analytics project.
# Licensed under the MIT License - see the LICENSE file for details.

"""
Optimistic habit mutations.

Each mutation runs the same sequence:

    IDLE -> OPTIMISTIC_APPLIED -> CONFIRMED | ROLLED_BACK

1. snapshot the cache and write the locally projected result (synchronous)
2. issue the remote command
3. on success replace the whole cache with a fresh fetch
4. on failure restore the entries the mutation touched and re-raise

Mutations on the same habit id wait for each other (FIFO); mutations on
different ids may interleave. Steps 1-4 all run while the habit's slot is
held, so a queued mutation's projection only becomes visible once the one
ahead of it has confirmed (revalidation included) or rolled back.

A placeholder created under a temporary negative id is never sent to the
server. Mutations queued on it run against the server id its create
returned, or are dropped (returning None) when that create failed.
Nothing is retried or cancelled here.
"""

import asyncio
import itertools
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Hashable, List, Optional

from app.client.habit_api_client import HabitApiClient
from app.client.habit_cache import CachedHabitView, HabitCache
from app.schemas.habit_schemas import HabitView, ToggleResult
from app.utils.exceptions import HabitValidationError

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "description", "frequency", "is_active")


class MutationState(str, Enum):
    IDLE = "idle"
    OPTIMISTIC_APPLIED = "optimistic-applied"
    CONFIRMED = "confirmed"
    ROLLED_BACK = "rolled-back"


@dataclass
class MutationOutcome:
    kind: str
    habit_id: Optional[int]
    state: MutationState = MutationState.IDLE
    result: Any = None
    error: Optional[BaseException] = None


class KeyedMutationQueue:
    """Serializes work per key with one asyncio.Lock each; idle keys are dropped."""

    def __init__(self):
        self._locks: Dict[Hashable, asyncio.Lock] = {}
        self._holders: Dict[Hashable, int] = {}

    def pending(self, key: Hashable) -> int:
        return self._holders.get(key, 0)

    @asynccontextmanager
    async def hold(self, key: Hashable):
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._holders[key] = self._holders.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[key] -= 1
            if not self._holders[key]:
                del self._holders[key]
                del self._locks[key]


class HabitMutations:
    """
    Create / update / delete / toggle over a HabitCache with optimistic
    updates and rollback. The cache and the API client are injected so
    several users (or tests) never share state.
    """

    def __init__(
        self,
        cache: HabitCache,
        api: HabitApiClient,
        user_id: int,
        queue: Optional[KeyedMutationQueue] = None,
    ):
        self.cache = cache
        self.api = api
        self.user_id = user_id
        self.queue = queue or KeyedMutationQueue()
        self.last_outcome: Optional[MutationOutcome] = None
        self._temp_ids = itertools.count(1)
        # temporary id -> server id, filled when a create confirms
        self._saved_ids: Dict[int, int] = {}

    # ---------------------- QUERIES ----------------------

    async def refresh(self) -> List[CachedHabitView]:
        """Loads the authoritative list into the cache. Failures leave the cache as is."""
        habits = await self.api.list_habits(self.user_id)
        self.cache.replace(habits)
        return self.cache.habits()

    async def _revalidate(self) -> None:
        try:
            habits = await self.api.list_habits(self.user_id)
        except Exception as e:
            # The command already succeeded; keep the projection until the next refresh
            self.cache.mark_stale()
            logger.warning(f"⚠️ Revalidation failed, cache marked stale: {e}")
            return
        self.cache.replace(habits)

    def _server_id(self, habit_id: int) -> Optional[int]:
        if habit_id > 0:
            return habit_id
        return self._saved_ids.get(habit_id)

    # ---------------------- CORE ----------------------

    async def _run(
        self,
        kind: str,
        key: int,
        project: Callable[[int], None],
        command: Callable[[int], Awaitable[Any]],
    ) -> Any:
        """Queues on ``key`` and applies the mutation to its server id."""
        async with self.queue.hold(key):
            habit_id = self._server_id(key)
            if habit_id is None:
                logger.warning(f"⚠️ Habit {key} was never saved, {kind} dropped")
                return None
            if habit_id == key:
                return await self._apply(kind, habit_id, project, command)
            # Queued behind a placeholder's create; continue in the server id's slot
            async with self.queue.hold(habit_id):
                return await self._apply(kind, habit_id, project, command)

    async def _apply(
        self,
        kind: str,
        habit_id: int,
        project: Callable[[int], None],
        command: Callable[[int], Awaitable[Any]],
    ) -> Any:
        outcome = MutationOutcome(kind=kind, habit_id=habit_id)
        snapshot = self.cache.snapshot()
        project(habit_id)
        outcome.state = MutationState.OPTIMISTIC_APPLIED

        try:
            result = await command(habit_id)
        except Exception as e:
            self.cache.restore(snapshot, keys=[habit_id])
            outcome.state = MutationState.ROLLED_BACK
            outcome.error = e
            self.last_outcome = outcome
            logger.error(f"❌ Failed to {kind} habit {habit_id}, rolled back: {e}")
            raise

        outcome.state = MutationState.CONFIRMED
        outcome.result = result
        await self._revalidate()
        self.last_outcome = outcome
        logger.info(f"✅ Habit {kind} confirmed: {habit_id}")
        return result

    # ---------------------- COMMANDS ----------------------

    async def create_habit(self, payload: dict) -> HabitView:
        title = (payload.get("title") or "").strip()
        if not title:
            raise HabitValidationError("Habit title is required")

        temp_id = -next(self._temp_ids)
        now = datetime.utcnow()
        placeholder = CachedHabitView(
            id=temp_id,
            user_id=self.user_id,
            title=title,
            description=payload.get("description"),
            frequency=(payload.get("frequency") or "daily").lower(),
            is_active=True,
            created_at=now,
            updated_at=now,
            completed_today=False,
            current_streak=0,
            is_temporary=True,
        )
        body = {k: payload[k] for k in ("description", "frequency") if payload.get(k) is not None}
        body["title"] = title

        async def command(_):
            created = await self.api.create_habit(self.user_id, body)
            self._saved_ids[temp_id] = created.id
            return created

        async with self.queue.hold(temp_id):
            return await self._apply(
                "create",
                temp_id,
                lambda _: self.cache.put(placeholder),
                command,
            )

    async def update_habit(self, habit_id: int, changes: dict) -> Optional[HabitView]:
        changes = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}

        def project(target: int):
            current = self.cache.get(target)
            if current is None:
                return
            self.cache.put(current.model_copy(update={**changes, "updated_at": datetime.utcnow()}))

        return await self._run(
            "update",
            habit_id,
            project,
            lambda target: self.api.update_habit(target, self.user_id, changes),
        )

    async def delete_habit(self, habit_id: int) -> None:
        await self._run(
            "delete",
            habit_id,
            self.cache.remove,
            lambda target: self.api.delete_habit(target, self.user_id),
        )

    async def toggle_complete(self, habit_id: int) -> Optional[ToggleResult]:
        """
        Flips today's completion. A habit that is not in the cache is left
        alone and nothing is sent.
        """
        if habit_id not in self.cache:
            return None

        def project(target: int):
            current = self.cache.get(target)
            if current is None:
                return
            completed = not current.completed_today
            streak = current.current_streak + 1 if completed else max(0, current.current_streak - 1)
            self.cache.put(current.model_copy(update={"completed_today": completed, "current_streak": streak}))

        return await self._run(
            "toggle",
            habit_id,
            project,
            lambda target: self.api.toggle_habit(target, self.user_id),
        )
