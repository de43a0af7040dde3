"""Example: book and list shifts through the service layer (no Flask).

Controllers are thin; the booking rules live in the services.
"""

import importlib
from datetime import timedelta

from config import get_settings_module

from src.committee_shifts.committee_shifts.container import build_container
from src.committee_shifts.committee_shifts.core.exceptions import DomainError


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)

    tomorrow = container.clock().date() + timedelta(days=1)
    try:
        attendance = container.booking_service.book_attendance(
            user_id=2, committee_id=1, slot_date=tomorrow, shift="morning"
        )
        print("booked", attendance.attendance_id)
    except DomainError as e:
        print(f"{e.code}: {e}")

    for row in container.booking_service.list_user_attendances(2):
        print(row.slot_date, row.shift.value, row.attendance.status.value)


if __name__ == "__main__":
    main()
