from datetime import timedelta

from conftest import auth_headers

from app.services.completion_store import CompletionStore
from app.utils.exceptions import StoreError
from app.utils.time_utils import today_local


def test_create_and_list_habits(client, make_user):
    user = make_user()

    created = client.post(
        "/habits",
        json={"user_id": user.id, "title": "  Drink water ", "frequency": "DAILY"},
        headers=auth_headers(user.id),
    )
    assert created.status_code == 201
    body = created.json()["data"]
    assert body["title"] == "Drink water"
    assert body["frequency"] == "daily"
    assert body["id"] > 0

    listed = client.get("/habits", params={"user_id": user.id}, headers=auth_headers(user.id))
    assert listed.status_code == 200
    assert [h["id"] for h in listed.json()["data"]] == [body["id"]]


def test_create_rejects_unknown_frequency(client, make_user):
    user = make_user()

    response = client.post(
        "/habits",
        json={"user_id": user.id, "title": "Nap", "frequency": "hourly"},
        headers=auth_headers(user.id),
    )

    assert response.status_code == 422


def test_list_includes_derived_fields(client, make_user, make_habit, log_days):
    user = make_user()
    habit = make_habit(user)
    today = today_local()
    log_days(habit, [today, today - timedelta(days=1), today - timedelta(days=2)])

    data = client.get("/habits", params={"user_id": user.id}, headers=auth_headers(user.id)).json()["data"]

    assert data[0]["completed_today"] is True
    assert data[0]["current_streak"] == 3


def test_inactive_habits_hidden_unless_requested(client, make_user, make_habit):
    user = make_user()
    make_habit(user, "Active")
    make_habit(user, "Retired", is_active=False)

    default = client.get("/habits", params={"user_id": user.id}, headers=auth_headers(user.id))
    everything = client.get(
        "/habits", params={"user_id": user.id, "include_inactive": True}, headers=auth_headers(user.id)
    )

    assert [h["title"] for h in default.json()["data"]] == ["Active"]
    assert len(everything.json()["data"]) == 2


def test_toggle_endpoint_flips_state(client, make_user, make_habit):
    user = make_user()
    habit = make_habit(user)
    payload = {"habit_id": habit.id, "user_id": user.id}

    first = client.post("/habits/toggle", json=payload, headers=auth_headers(user.id))
    second = client.post("/habits/toggle", json=payload, headers=auth_headers(user.id))

    assert first.status_code == 200
    assert first.json()["data"]["completed"] is True
    assert first.json()["message"] == "Habit marked as completed!"
    assert second.json()["data"]["completed"] is False
    assert first.json()["data"]["date"] == today_local().isoformat()


def test_toggle_requires_ids(client, make_user):
    user = make_user()

    response = client.post("/habits/toggle", json={"user_id": user.id}, headers=auth_headers(user.id))

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Habit ID and User ID are required"}


def test_toggle_on_foreign_habit_is_404(client, make_user, make_habit):
    owner = make_user("Owner")
    other = make_user("Other")
    habit = make_habit(owner)

    response = client.post(
        "/habits/toggle",
        json={"habit_id": habit.id, "user_id": other.id},
        headers=auth_headers(other.id),
    )

    assert response.status_code == 404
    assert response.json()["success"] is False


def test_token_must_match_user(client, make_user, make_habit):
    owner = make_user("Owner")
    other = make_user("Other")
    habit = make_habit(owner)

    response = client.post(
        "/habits/toggle",
        json={"habit_id": habit.id, "user_id": owner.id},
        headers=auth_headers(other.id),
    )

    assert response.status_code == 401


def test_missing_token_is_rejected(client, make_user):
    user = make_user()

    assert client.get("/habits", params={"user_id": user.id}).status_code == 401
    bad = client.get("/habits", params={"user_id": user.id}, headers={"Authorization": "Bearer nope"})
    assert bad.status_code == 401


def test_update_and_deactivate(client, make_user, make_habit):
    user = make_user()
    habit = make_habit(user)

    response = client.put(
        f"/habits/{habit.id}",
        json={"user_id": user.id, "title": "Read 20 pages", "is_active": False},
        headers=auth_headers(user.id),
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert (data["title"], data["is_active"]) == ("Read 20 pages", False)


def test_get_habit_detail_includes_logs(client, make_user, make_habit, log_days):
    user = make_user()
    habit = make_habit(user)
    today = today_local()
    log_days(habit, [today - timedelta(days=n) for n in range(40)])

    response = client.get(f"/habits/{habit.id}", params={"user_id": user.id}, headers=auth_headers(user.id))

    data = response.json()["data"]
    assert len(data["logs"]) == 30
    assert data["logs"][0]["date"] == today.isoformat()
    assert data["current_streak"] == 40


def test_delete_habit(client, make_user, make_habit):
    user = make_user()
    habit = make_habit(user)

    deleted = client.delete(f"/habits/{habit.id}", params={"user_id": user.id}, headers=auth_headers(user.id))
    again = client.delete(f"/habits/{habit.id}", params={"user_id": user.id}, headers=auth_headers(user.id))

    assert deleted.status_code == 200
    assert again.status_code == 404


def test_set_log_with_notes(client, make_user, make_habit):
    user = make_user()
    habit = make_habit(user)
    day = (today_local() - timedelta(days=3)).isoformat()

    response = client.put(
        f"/habits/{habit.id}/logs",
        json={"user_id": user.id, "date": day, "completed": True, "notes": "felt great"},
        headers=auth_headers(user.id),
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert (data["date"], data["completed"], data["notes"]) == (day, True, "felt great")


def test_health_endpoints(client, db):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/healthz").json()["status"] == "ok"


def test_update_rejects_blank_title(client, make_user, make_habit):
    user = make_user()
    habit = make_habit(user)

    response = client.put(
        f"/habits/{habit.id}",
        json={"user_id": user.id, "title": "   "},
        headers=auth_headers(user.id),
    )
    stored = client.get(f"/habits/{habit.id}", params={"user_id": user.id}, headers=auth_headers(user.id))

    assert response.status_code == 422
    assert stored.json()["data"]["title"] == "Read"


def test_update_strips_title(client, make_user, make_habit):
    user = make_user()
    habit = make_habit(user)

    response = client.put(
        f"/habits/{habit.id}",
        json={"user_id": user.id, "title": "  Read 10 pages  "},
        headers=auth_headers(user.id),
    )

    assert response.json()["data"]["title"] == "Read 10 pages"


def test_store_failure_is_a_500(client, make_user, make_habit, monkeypatch):
    user = make_user()
    habit = make_habit(user)

    def broken_toggle_log(self, habit_id, day):
        raise StoreError("database is locked")

    monkeypatch.setattr(CompletionStore, "toggle_log", broken_toggle_log)
    response = client.post(
        "/habits/toggle",
        json={"habit_id": habit.id, "user_id": user.id},
        headers=auth_headers(user.id),
    )

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Failed to process request"}
