# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Focus Tracker - Habit Analytics project.
# Licensed under the MIT License - see the LICENSE file for details.

import os
import logging
from datetime import date
from typing import List, Optional, Union

import httpx

from app.schemas.dashboard_schemas import DashboardSnapshot
from app.schemas.habit_schemas import HabitDetailView, HabitView, ToggleResult
from app.utils.exceptions import RemoteCommandError

logger = logging.getLogger(__name__)

# ✅ Load environment
if os.getenv("ENV") != "production":
    from dotenv import load_dotenv
    load_dotenv()

DEFAULT_BASE_URL = os.getenv("FOCUS_API_URL", "http://localhost:8000")
DEFAULT_TIMEOUT = float(os.getenv("CLIENT_TIMEOUT_SECONDS", "10"))


class HabitApiClient:
    """
    Async client for the habit API.

    Every failure (transport error, non-2xx status, undecodable body) is
    raised as RemoteCommandError. Nothing is retried here.
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
            },
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> dict:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"[HabitApi] {method} {url} failed: {e}")
            raise RemoteCommandError(f"Request failed: {e}") from e

        if response.is_error:
            try:
                detail = response.json()
            except ValueError:
                detail = {}
            if not isinstance(detail, dict):
                detail = {"detail": detail}
            message = detail.get("message") or detail.get("detail") or "Request failed"
            logger.warning(f"[HabitApi] {method} {url} -> {response.status_code}: {message}")
            raise RemoteCommandError(str(message), status_code=response.status_code, detail=detail)

        try:
            return response.json()
        except ValueError as e:
            raise RemoteCommandError("Invalid JSON in response", status_code=response.status_code) from e

    # ---------------------- QUERIES ----------------------

    async def list_habits(self, user_id: int) -> List[HabitView]:
        body = await self._request("GET", "/habits", params={"user_id": user_id})
        return [HabitView.model_validate(item) for item in body.get("data", [])]

    async def get_habit(self, habit_id: int, user_id: int) -> HabitDetailView:
        body = await self._request("GET", f"/habits/{habit_id}", params={"user_id": user_id})
        return HabitDetailView.model_validate(body["data"])

    async def dashboard_stats(self, user_id: int) -> DashboardSnapshot:
        body = await self._request("GET", "/dashboard/stats", params={"user_id": user_id})
        return DashboardSnapshot.model_validate(body["data"])

    # ---------------------- COMMANDS ----------------------

    async def create_habit(self, user_id: int, payload: dict) -> HabitView:
        body = await self._request("POST", "/habits", json={**payload, "user_id": user_id})
        return HabitView.model_validate(body["data"])

    async def update_habit(self, habit_id: int, user_id: int, payload: dict) -> HabitView:
        body = await self._request("PUT", f"/habits/{habit_id}", json={**payload, "user_id": user_id})
        return HabitView.model_validate(body["data"])

    async def delete_habit(self, habit_id: int, user_id: int) -> None:
        await self._request("DELETE", f"/habits/{habit_id}", params={"user_id": user_id})

    async def toggle_habit(
        self,
        habit_id: int,
        user_id: int,
        day: Optional[Union[date, str]] = None,
    ) -> ToggleResult:
        payload = {"habit_id": habit_id, "user_id": user_id}
        if day is not None:
            payload["date"] = day.isoformat() if isinstance(day, date) else day
        body = await self._request("POST", "/habits/toggle", json=payload)
        return ToggleResult.model_validate(body["data"])
