from datetime import timedelta

from conftest import auth_headers

from app.utils.time_utils import today_local


def test_dashboard_for_user_without_habits(client, make_user):
    user = make_user()

    response = client.get("/dashboard/stats", params={"user_id": user.id}, headers=auth_headers(user.id))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["current_streak"] == 0
    assert data["weekly_average"] == 0
    assert data["total_habits"] == 0
    assert len(data["weekly_progress"]) == 7


def test_dashboard_streak_and_weekly_numbers(client, make_user, make_habit, log_days):
    user = make_user()
    today = today_local()
    habits = [make_habit(user, title) for title in ("Run", "Read", "Sleep")]
    for habit in habits:
        log_days(habit, [today - timedelta(days=1), today - timedelta(days=2)])
    log_days(habits[0], [today - timedelta(days=3)])
    log_days(habits[1], [today - timedelta(days=3)])
    # Inactive habits never enter the aggregate
    retired = make_habit(user, "Retired", is_active=False)
    log_days(retired, [today])

    data = client.get(
        "/dashboard/stats", params={"user_id": user.id}, headers=auth_headers(user.id)
    ).json()["data"]

    assert data["current_streak"] == 2
    assert data["completed_today"] == 0
    assert data["total_habits"] == 3
    assert data["weekly_completed"] == 8
    assert data["weekly_total"] == 21
    assert data["weekly_average"] == 38
    assert data["weekly_progress"][-1]["date"] == today.isoformat()


def test_dashboard_reflects_toggle(client, make_user, make_habit):
    user = make_user()
    habit = make_habit(user)

    client.post("/habits/toggle", json={"habit_id": habit.id, "user_id": user.id}, headers=auth_headers(user.id))
    data = client.get(
        "/dashboard/stats", params={"user_id": user.id}, headers=auth_headers(user.id)
    ).json()["data"]

    assert data["completed_today"] == 1
    assert data["current_streak"] == 1
    assert data["today_habits"][0]["completed"] is True


def test_dashboard_requires_user_id(client, make_user):
    user = make_user()

    response = client.get("/dashboard/stats", headers=auth_headers(user.id))

    assert response.status_code == 400
    assert response.json()["message"] == "User ID is required"


def test_dashboard_rejects_other_users_token(client, make_user):
    user = make_user()
    other = make_user("Other")

    response = client.get("/dashboard/stats", params={"user_id": user.id}, headers=auth_headers(other.id))

    assert response.status_code == 401
