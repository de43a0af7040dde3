from __future__ import annotations

from datetime import date, datetime

import pytest

from src.committee_shifts.committee_shifts.core.exceptions import AuthorizationError, NotAMemberError, ValidationError


def _seed(container):
    book = container.booking_service.book_attendance
    book(user_id=2, committee_id=1, slot_date=date(2026, 3, 10), shift="afternoon", now=datetime(2026, 3, 1, 9, 0))
    book(user_id=3, committee_id=1, slot_date=date(2026, 3, 10), shift="morning", now=datetime(2026, 3, 1, 9, 5))
    book(user_id=2, committee_id=1, slot_date=date(2026, 3, 11), shift="morning", now=datetime(2026, 3, 1, 9, 10))
    cancelled = book(user_id=4, committee_id=1, slot_date=date(2026, 3, 11), shift="morning", now=datetime(2026, 3, 1, 9, 20))
    container.booking_service.cancel_attendance(attendance_id=cancelled.attendance_id, requesting_user_id=4)
    book(user_id=3, committee_id=1, slot_date=date(2026, 4, 2), shift="morning", now=datetime(2026, 3, 1, 9, 30))


def test_report_rows_sorted_and_summarised(container):
    _seed(container)

    data = container.report_service.build_report(
        admin_user_id=1, committee_id=1, start=date(2026, 3, 1), end=date(2026, 3, 31)
    )

    assert [(r["date"], r["shift"], r["userId"]) for r in data.rows] == [
        ("2026-03-10", "morning", 3),
        ("2026-03-10", "afternoon", 2),
        ("2026-03-11", "morning", 2),
    ]
    assert data.rows[0]["userName"] == "Chloe Ruiz"
    assert data.summary[0] == {"userId": 2, "userName": "Ben Okafor", "userEmail": "ben@example.org", "shifts": 2}
    assert data.summary[1]["shifts"] == 1


def test_report_requires_admin(container):
    with pytest.raises(AuthorizationError):
        container.report_service.build_report(admin_user_id=2, committee_id=1, start=date(2026, 3, 1), end=date(2026, 3, 31))


def test_report_rejects_inverted_range(container):
    with pytest.raises(ValidationError):
        container.report_service.build_report(admin_user_id=1, committee_id=1, start=date(2026, 4, 1), end=date(2026, 3, 1))


def test_calendar_visible_to_members_with_unknown_user_fallback(container):
    container.booking_service.book_attendance(user_id=4, committee_id=1, slot_date=date(2026, 3, 12), shift="morning")

    entries = container.report_service.calendar(user_id=2, committee_id=1, start=date(2026, 3, 1), end=date(2026, 3, 31))

    assert len(entries) == 1
    assert entries[0]["userName"] == "Unknown user"


def test_calendar_requires_membership(container):
    with pytest.raises(NotAMemberError):
        container.report_service.calendar(user_id=99, committee_id=1, start=date(2026, 3, 1), end=date(2026, 3, 31))
