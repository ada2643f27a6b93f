from __future__ import annotations

import pytest

from src.gameplan.gameplan.core.exceptions import BackendUnreachableError
from src.gameplan.gameplan.main import create_app


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def accounts(auth_backend, trainer, student):
    auth_backend.accounts["coach@example.com"] = ("t1", "secret1")
    auth_backend.accounts["alex@example.com"] = ("s1", "secret1")
    return auth_backend


def _login(client, email):
    return client.post("/api/auth/login", json={"email": email, "password": "secret1"})


def test_login_and_profile(client, accounts):
    resp = _login(client, "alex@example.com")

    assert resp.status_code == 200
    assert resp.get_json()["profile"]["role"] == "student"

    profile = client.get("/api/profile").get_json()["profile"]
    assert profile["studentID"] == "123456"


def test_bad_credentials(client, accounts):
    resp = client.post("/api/auth/login", json={"email": "alex@example.com", "password": "nope123"})

    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_requires_login(client):
    assert client.get("/api/progress").status_code == 401


def test_logout_clears_session(client, accounts):
    _login(client, "alex@example.com")
    client.post("/api/auth/logout")

    assert client.get("/api/profile").status_code == 401


def test_mark_attendance_flow(client, accounts):
    _login(client, "alex@example.com")

    first = client.post("/api/attendance/mark", json={"latitude": 56.1971946, "longitude": 15.6188414})
    again = client.post("/api/attendance/mark", json={"latitude": 56.1971946, "longitude": 15.6188414})
    calendar = client.get("/api/attendance/calendar").get_json()["markedDates"]

    assert first.status_code == 201
    assert first.get_json()["synced"] is True
    assert again.status_code == 409
    assert list(calendar.values()) == [{"marked": True, "selected": True, "selectedColor": "#DA0037"}]


def test_mark_attendance_rejections(client, accounts):
    _login(client, "alex@example.com")

    far = client.post("/api/attendance/mark", json={"latitude": 59.3293, "longitude": 18.0686})
    denied = client.post("/api/attendance/mark", json={"permission": "denied"})
    unknown = client.post("/api/attendance/mark", json={})

    assert far.status_code == 422
    assert far.get_json()["error"] == "out_of_range"
    assert far.get_json()["distanceMeters"] > 1000
    assert denied.status_code == 403
    assert unknown.status_code == 422
    assert unknown.get_json()["error"] == "location_unavailable"


def test_trainer_reads_student_calendar(client, accounts, documents):
    documents.set_document("students", "s1", {"attendance": {"2025-01-01": {"marked": True}}}, merge=True)
    _login(client, "coach@example.com")

    resp = client.get("/api/attendance/calendar?student=s1")

    assert resp.status_code == 200
    assert resp.get_json()["markedDates"]["2025-01-01"]["selectedColor"] == "#DA0037"


def test_eligibility_endpoint(client):
    resp = client.get("/api/attendance/eligibility?total=10&attended=7.5")

    body = resp.get_json()
    assert body["hasAttendedEnoughClasses"] is True
    assert body["isEligibleForCertification"] is False
    assert client.get("/api/attendance/eligibility?total=10").status_code == 400


def test_progress_flow(client, accounts):
    _login(client, "alex@example.com")

    task = client.post("/api/progress/tasks", json={"category": "Exercise", "name": "Sprints"}).get_json()["task"]
    blocked = client.post("/api/progress/save")
    client.post(f"/api/progress/tasks/Exercise/{task['id']}/toggle")
    saved = client.post("/api/progress/save").get_json()
    reset = client.post("/api/progress/reset").get_json()

    assert blocked.status_code == 422
    assert saved["streak"] == 1 and saved["incremented"] is True
    assert reset["streak"] == 0
    assert client.get("/api/progress").get_json()["lastSavedDate"] == saved["lastSavedDate"]


def test_trainer_roster_and_location(client, accounts):
    _login(client, "coach@example.com")

    moved = client.put("/api/trainer/location", json={"latitude": 59.3293, "longitude": 18.0686, "radius": 250})
    roster = client.get("/api/trainer/students?q=alex&total_classes=4").get_json()["students"]

    assert moved.status_code == 200
    assert moved.get_json()["location"]["radius"] == 250.0
    assert [r["id"] for r in roster] == ["s1"]
    assert roster[0]["hasAttendedEnough"] is False


def test_student_cannot_use_trainer_routes(client, accounts):
    _login(client, "alex@example.com")

    assert client.get("/api/trainer/students").status_code == 403


def test_signup_endpoints(client, trainer):
    sid = client.get("/api/auth/student-id").get_json()["studentID"]
    resp = client.post(
        "/api/auth/signup/student",
        json={
            "fullName": "Sam",
            "age": 15,
            "sport": "Football",
            "gender": "Male",
            "email": "sam@example.com",
            "password": "secret1",
            "confirmPassword": "secret1",
            "trainerID": "t1",
            "studentID": sid,
        },
    )
    missing = client.post("/api/auth/signup/trainer", json={"name": "Coach"})

    assert resp.status_code == 201
    assert resp.get_json()["studentID"] == sid
    assert missing.status_code == 400


def test_unexpected_errors_are_500(app, client, accounts, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(app.extensions["gameplan"].progress_service, "get_state", boom)
    _login(client, "alex@example.com")

    resp = client.get("/api/progress")

    assert resp.status_code == 500
    assert resp.get_json()["error"] == "internal_error"


def test_offline_backend_still_marks_and_saves_locally(client, accounts, documents, local_store_for):
    _login(client, "alex@example.com")
    documents.fail_with = BackendUnreachableError("The server could not be reached. Please try again later.")
    documents.fail_reads = True

    marked = client.post("/api/attendance/mark", json={"latitude": 56.1971946, "longitude": 15.6188414})
    saved = client.post("/api/progress/save")

    assert marked.status_code == 201
    assert marked.get_json()["synced"] is False
    assert marked.get_json()["notice"]
    assert len(local_store_for("s1").load_attendance()) == 1
    assert saved.status_code == 200
    assert saved.get_json()["synced"] is False
    assert saved.get_json()["streak"] == 1


def test_student_summary_from_local_attendance(client, accounts):
    _login(client, "alex@example.com")
    client.post("/api/attendance/mark", json={"latitude": 56.1971946, "longitude": 15.6188414})

    body = client.get("/api/attendance/eligibility?total=1").get_json()

    assert body["rate"] == 1.0
    assert body["isEligibleForCertification"] is True


def test_password_reset_endpoints(client, accounts, reset_mailer):
    empty = client.post("/api/auth/reset-password", json={"email": ""})
    sent = client.post("/api/auth/reset-password", json={"email": "alex@example.com"})
    _, token = reset_mailer.sent[0]
    bad = client.post(
        "/api/auth/reset-password/confirm",
        json={"token": "nope", "password": "newpass1", "confirmPassword": "newpass1"},
    )
    done = client.post(
        "/api/auth/reset-password/confirm",
        json={"token": token, "password": "newpass1", "confirmPassword": "newpass1"},
    )

    assert empty.status_code == 400
    assert empty.get_json()["message"] == "Please enter your email."
    assert sent.status_code == 200
    assert bad.status_code == 400
    assert done.status_code == 200
    assert client.post("/api/auth/login", json={"email": "alex@example.com", "password": "newpass1"}).status_code == 200
