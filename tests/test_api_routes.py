from __future__ import annotations

import pytest

from src.committee_shifts.committee_shifts.main import create_app


@pytest.fixture
def app(container):
    app = create_app(container, settings_module="config.testing")
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client_for(app):
    def _client(user_id=None):
        client = app.test_client()
        if user_id is not None:
            with client.session_transaction() as sess:
                sess["user_id"] = user_id
        return client

    return _client


def test_requires_login(client_for):
    resp = client_for().get("/api/my-attendances")

    assert resp.status_code == 401
    assert resp.get_json()["error"] == "Unauthorized"


def test_book_list_and_cancel(client_for):
    client = client_for(2)

    resp = client.post("/api/mark-attendance", json={"committeeId": 1, "date": "2026-03-03", "shift": "morning"})
    assert resp.status_code == 201
    booked = resp.get_json()
    assert booked["status"] == "confirmed"

    mine = client.get("/api/my-attendances").get_json()
    assert [(m["date"], m["shift"], m["committeeName"]) for m in mine] == [("2026-03-03", "morning", "District Outreach")]

    resp = client.delete(f"/api/attendances/{booked['id']}")
    assert resp.status_code == 200
    assert resp.get_json()["attendance"]["status"] == "cancelled"


def test_booking_errors_map_to_status_codes(client_for):
    client = client_for(2)
    payload = {"committeeId": 1, "date": "2026-03-03", "shift": "afternoon"}
    client.post("/api/mark-attendance", json=payload)

    dup = client.post("/api/mark-attendance", json=payload)
    assert dup.status_code == 400
    assert dup.get_json()["error"] == "AlreadyRegistered"

    bad_shift = client.post("/api/mark-attendance", json={**payload, "shift": "night"})
    assert bad_shift.status_code == 400
    assert bad_shift.get_json()["error"] == "InvalidShift"

    bad_date = client.post("/api/mark-attendance", json={**payload, "date": "03/03/2026"})
    assert bad_date.status_code == 400

    outsider = client_for(99).post("/api/mark-attendance", json=payload)
    assert outsider.status_code == 403
    assert outsider.get_json()["error"] == "NotAMember"

    missing = client.delete("/api/attendances/9999")
    assert missing.status_code == 404


def test_confirm_uses_container_clock(client_for, fixed_now):
    client = client_for(2)
    booked = client.post(
        "/api/mark-attendance", json={"committeeId": 1, "date": fixed_now.strftime("%Y-%m-%d"), "shift": "morning"}
    ).get_json()

    resp = client.patch(f"/api/attendances/{booked['id']}/confirm")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "attended"

    again = client.patch(f"/api/attendances/{booked['id']}/confirm")
    assert again.get_json()["error"] == "InvalidState"


def test_confirm_outside_window(client_for, fixed_now):
    client = client_for(2)
    booked = client.post(
        "/api/mark-attendance", json={"committeeId": 1, "date": fixed_now.strftime("%Y-%m-%d"), "shift": "afternoon"}
    ).get_json()

    resp = client.patch(f"/api/attendances/{booked['id']}/confirm")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "OutsideWindow"


def test_slots_admin_flow(client_for):
    admin = client_for(1)
    created = admin.post("/api/attendance-slots", json={"committeeId": 1, "date": "2026-03-05", "shift": "morning"})
    assert created.status_code == 201
    slot_id = created.get_json()["id"]

    blocked = admin.patch(f"/api/attendance-slots/{slot_id}", json={"isBlocked": True})
    assert blocked.get_json()["isBlocked"] is True

    member = client_for(2)
    assert member.post("/api/attendance-slots", json={"committeeId": 1, "date": "2026-03-06", "shift": "morning"}).status_code == 403

    listed = member.get("/api/attendance-slots?committeeId=1&month=2026-03").get_json()
    assert [(s["date"], s["isBlocked"], s["available"]) for s in listed] == [("2026-03-05", True, 2)]

    refused = member.post("/api/mark-attendance", json={"committeeId": 1, "date": "2026-03-05", "shift": "morning"})
    assert refused.get_json()["error"] == "SlotBlocked"


def test_slots_without_committee_returns_empty(client_for):
    assert client_for(2).get("/api/attendance-slots").get_json() == []


def test_report_csv_export(client_for):
    client_for(2).post("/api/mark-attendance", json={"committeeId": 1, "date": "2026-03-03", "shift": "morning"})

    resp = client_for(1).get("/api/attendance-report.csv?committeeId=1&startDate=2026-03-01&endDate=2026-03-31")

    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert "attendance_1_20260301_20260331.csv" in resp.headers["Content-Disposition"]
    text = resp.data.decode("utf-8-sig")
    assert text.splitlines()[0] == "date,shift,userId,userName,userEmail,registeredAt,id"
    assert "Ben Okafor" in text


def test_report_forbidden_for_members(client_for):
    resp = client_for(2).get("/api/attendance-report?committeeId=1&startDate=2026-03-01&endDate=2026-03-31")
    assert resp.status_code == 403


def test_notification_preferences_roundtrip(client_for):
    client = client_for(3)

    defaults = client.get("/api/notification-preferences").get_json()
    assert defaults["pushEnabled"] is False
    assert defaults["reminderMinutesBefore"] == 60

    updated = client.put("/api/notification-preferences", json={"reminderMinutesBefore": 15, "activityReminders": False})
    assert updated.get_json()["reminderMinutesBefore"] == 15
    assert updated.get_json()["activityReminders"] is False

    too_long = client.put("/api/notification-preferences", json={"reminderMinutesBefore": 5000})
    assert too_long.status_code == 400


def test_push_subscription_and_test_push(client_for, sender):
    client = client_for(3)

    assert client.post("/api/test-push").status_code == 400

    sub = {"endpoint": "https://push.example.org/3", "keys": {"p256dh": "p", "auth": "a"}}
    assert client.post("/api/push-subscription", json={"subscription": sub}).status_code == 200
    assert client.post("/api/test-push").status_code == 200
    assert sender.sent[-1][0] == "https://push.example.org/3"

    sender.failing.add("https://push.example.org/3")
    assert client.post("/api/test-push").status_code == 502

    assert client.delete("/api/push-subscription").status_code == 200
    assert client.get("/api/notification-preferences").get_json()["pushEnabled"] is False


def test_vapid_public_key_is_public(client_for):
    assert client_for().get("/api/vapid-public-key").get_json() == {"publicKey": "test-public-key"}


def test_book_by_slot_id(client_for):
    slot = client_for(1).post(
        "/api/attendance-slots", json={"committeeId": 1, "date": "2026-03-07", "shift": "full_day"}
    ).get_json()

    client = client_for(2)
    resp = client.post("/api/attendances", json={"slotId": slot["id"]})
    assert resp.status_code == 201
    assert resp.get_json()["slotId"] == slot["id"]

    assert client.post("/api/attendances", json={}).status_code == 400
    assert client.post("/api/attendances", json={"slotId": 9999}).status_code == 404


def test_is_blocked_must_be_a_json_boolean(client_for):
    admin = client_for(1)
    bad = admin.post("/api/attendance-slots", json={"committeeId": 1, "date": "2026-03-08", "shift": "morning", "isBlocked": "false"})
    assert bad.status_code == 400

    slot = admin.post("/api/attendance-slots", json={"committeeId": 1, "date": "2026-03-08", "shift": "morning"}).get_json()
    assert slot["isBlocked"] is False

    bad_patch = admin.patch(f"/api/attendance-slots/{slot['id']}", json={"isBlocked": "true"})
    assert bad_patch.status_code == 400
    assert admin.patch(f"/api/attendance-slots/{slot['id']}", json={"isBlocked": False}).get_json()["isBlocked"] is False
