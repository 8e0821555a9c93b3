import pytest

from tests.utils import signup


@pytest.fixture()
def subject_id(api, auth_headers):
    program = api.post("/programs", json={"name": "BSc Biology"}, headers=auth_headers).json()
    return api.post("/subjects", json={"name": "Biology", "program_id": program["id"]}, headers=auth_headers).json()["id"]


def test_events_are_listed_by_date(api, auth_headers, subject_id):
    for name, day in [("Final", "2024-06-20"), ("Quiz", "2024-03-01"), ("Midterm", "2024-04-15")]:
        res = api.post("/events", json={
            "subject_id": subject_id, "name": name, "event_type": "exam", "event_date": day,
        }, headers=auth_headers)
        assert res.status_code == 201, res.text

    names = [e["name"] for e in api.get("/events", headers=auth_headers).json()]

    assert names == ["Quiz", "Midterm", "Final"]


def test_schedule_slot_must_end_after_start(api, auth_headers, subject_id):
    bad = api.post("/schedules", json={
        "subject_id": subject_id, "day_of_week": 2, "start_time": "10:00", "end_time": "09:00",
    }, headers=auth_headers)
    good = api.post("/schedules", json={
        "subject_id": subject_id, "day_of_week": 2, "start_time": "09:00", "end_time": "10:30", "location": "Lab",
    }, headers=auth_headers)

    assert bad.status_code == 422
    assert good.status_code == 201

    slot_id = good.json()["id"]
    assert api.patch(f"/schedules/{slot_id}", json={"end_time": "08:00"}, headers=auth_headers).status_code == 422
    moved = api.patch(f"/schedules/{slot_id}", json={"day_of_week": 4}, headers=auth_headers)
    assert moved.json()["day_of_week"] == 4


def test_day_of_week_range(api, auth_headers, subject_id):
    res = api.post("/schedules", json={
        "subject_id": subject_id, "day_of_week": 7, "start_time": "09:00", "end_time": "10:00",
    }, headers=auth_headers)

    assert res.status_code == 422


def test_goals_latest_week_first_and_week_validation(api, auth_headers, subject_id):
    for start, end in [("2024-01-01", "2024-01-07"), ("2024-01-08", "2024-01-14")]:
        api.post("/goals", json={
            "subject_id": subject_id, "target_hours": 5, "week_start": start, "week_end": end,
        }, headers=auth_headers)

    goals = api.get("/goals", headers=auth_headers).json()
    assert [g["week_start"] for g in goals] == ["2024-01-08", "2024-01-01"]
    assert goals[0]["current_hours"] == 0

    res = api.patch(f"/goals/{goals[0]['id']}", json={"week_end": "2023-12-31"}, headers=auth_headers)
    assert res.status_code == 422

    res = api.patch(f"/goals/{goals[0]['id']}", json={"current_hours": 2.5}, headers=auth_headers)
    assert res.json()["current_hours"] == 2.5


def test_study_sessions_default_start_time(api, auth_headers, subject_id):
    res = api.post("/study-sessions", json={"subject_id": subject_id, "duration": 45}, headers=auth_headers)

    assert res.status_code == 201, res.text
    assert res.json()["start_time"]
    assert api.delete(f"/study-sessions/{res.json()['id']}", headers=auth_headers).status_code == 204
    assert api.get("/study-sessions", headers=auth_headers).json() == []


def test_plan_rows_require_an_owned_subject(api, auth_headers, subject_id):
    other = signup(api, email="ben@example.com")

    res = api.post("/events", json={
        "subject_id": subject_id, "name": "Sneaky", "event_type": "exam", "event_date": "2024-05-01",
    }, headers=other)

    assert res.status_code == 404
    assert api.get("/events", headers=auth_headers).json() == []


def test_null_for_required_plan_fields_is_rejected(api, auth_headers, subject_id):
    slot = api.post("/schedules", json={
        "subject_id": subject_id, "day_of_week": 1, "start_time": "09:00", "end_time": "10:00",
    }, headers=auth_headers).json()
    goal = api.post("/goals", json={
        "subject_id": subject_id, "target_hours": 4, "week_start": "2024-01-01", "week_end": "2024-01-07",
    }, headers=auth_headers).json()

    assert api.patch(f"/schedules/{slot['id']}", json={"end_time": None}, headers=auth_headers).status_code == 422
    assert api.patch(f"/goals/{goal['id']}", json={"week_start": None}, headers=auth_headers).status_code == 422
    assert api.get("/schedules", headers=auth_headers).json()[0]["end_time"] == "10:00:00"
