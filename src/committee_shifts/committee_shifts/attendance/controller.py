from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_user_id, error_response, internal_error, json_body, login_required, require_date
from ..common.validators import require_int, require_non_empty
from ..container import Container
from ..core.exceptions import DomainError
from .model import Attendance, AttendanceWithSlot


def attendance_to_dict(a: Attendance) -> dict:
    return {
        "id": a.attendance_id,
        "slotId": a.slot_id,
        "userId": a.user_id,
        "status": a.status.value,
        "registeredAt": a.registered_at.isoformat(timespec="seconds") if a.registered_at else None,
        "cancelledAt": a.cancelled_at.isoformat(timespec="seconds") if a.cancelled_at else None,
    }


def attendance_with_slot_to_dict(row: AttendanceWithSlot) -> dict:
    data = attendance_to_dict(row.attendance)
    data.update(
        {
            "date": row.slot_date.strftime("%Y-%m-%d"),
            "shift": row.shift.value,
            "committeeId": row.committee_id,
            "committeeName": row.committee_name,
        }
    )
    return data


def register(app: Flask, container: Container) -> None:
    @app.route("/api/mark-attendance", methods=["POST"], endpoint="mark_attendance")
    @login_required
    def mark_attendance():
        data = json_body()
        try:
            committee_id = require_int(data.get("committeeId"), "committeeId", minimum=1)
            slot_date = require_date(data.get("date"), "date")
            shift = require_non_empty(data.get("shift"), "shift")

            attendance = container.booking_service.book_attendance(
                user_id=current_user_id(),
                committee_id=committee_id,
                slot_date=slot_date,
                shift=shift,
            )
            return jsonify(attendance_to_dict(attendance)), 201
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("mark attendance")

    @app.route("/api/attendances", methods=["POST"], endpoint="create_attendance")
    @login_required
    def create_attendance():
        data = json_body()
        try:
            slot_id = require_int(data.get("slotId"), "slotId", minimum=1)
            attendance = container.booking_service.book_slot(user_id=current_user_id(), slot_id=slot_id)
            return jsonify(attendance_to_dict(attendance)), 201
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("create attendance")

    @app.route("/api/attendances/<int:attendance_id>", methods=["DELETE"], endpoint="cancel_attendance")
    @login_required
    def cancel_attendance(attendance_id: int):
        try:
            attendance = container.booking_service.cancel_attendance(
                attendance_id=attendance_id,
                requesting_user_id=current_user_id(),
            )
            return jsonify({"message": "Attendance cancelled", "attendance": attendance_to_dict(attendance)})
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("cancel attendance")

    @app.route("/api/attendances/<int:attendance_id>/confirm", methods=["PATCH"], endpoint="confirm_attendance")
    @login_required
    def confirm_attendance(attendance_id: int):
        try:
            attendance = container.confirmation_gate.confirm_attendance(
                attendance_id=attendance_id,
                requesting_user_id=current_user_id(),
            )
            return jsonify(attendance_to_dict(attendance))
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("confirm attendance")

    @app.route("/api/attendances/<int:attendance_id>/absent", methods=["PATCH"], endpoint="mark_absent")
    @login_required
    def mark_absent(attendance_id: int):
        try:
            attendance = container.booking_service.mark_absent(
                attendance_id=attendance_id,
                admin_user_id=current_user_id(),
            )
            return jsonify(attendance_to_dict(attendance))
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("mark attendance absent")

    @app.route("/api/my-attendances", methods=["GET"], endpoint="my_attendances")
    @login_required
    def my_attendances():
        try:
            rows = container.booking_service.list_user_attendances(current_user_id())
            return jsonify([attendance_with_slot_to_dict(r) for r in rows])
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("fetch attendances")
