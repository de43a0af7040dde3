from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import (
    current_user_id,
    error_response,
    internal_error,
    json_body,
    login_required,
    optional_month,
    require_date,
)
from ..common.validators import optional_bool, require_int
from ..container import Container
from ..core.exceptions import DomainError
from .model import Slot, SlotOverview


def slot_to_dict(s: Slot) -> dict:
    return {
        "id": s.slot_id,
        "committeeId": s.committee_id,
        "date": s.slot_date.strftime("%Y-%m-%d"),
        "shift": s.shift.value,
        "maxCapacity": s.max_capacity,
        "isBlocked": s.is_blocked,
        "notes": s.notes,
    }


def overview_to_dict(o: SlotOverview) -> dict:
    data = slot_to_dict(o.slot)
    data.update({"confirmedCount": o.confirmed_count, "available": o.available})
    if o.committee_name is not None:
        data["committeeName"] = o.committee_name
    return data


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance-slots", methods=["GET"], endpoint="list_attendance_slots")
    @login_required
    def list_attendance_slots():
        committee_id_s = request.args.get("committeeId")
        if not committee_id_s:
            return jsonify([])

        try:
            committee_id = require_int(committee_id_s, "committeeId", minimum=1)
            month = optional_month(request.args.get("month"), container.clock().date())
            overviews = container.slot_service.list_month(user_id=current_user_id(), committee_id=committee_id, month=month)
            return jsonify([overview_to_dict(o) for o in overviews])
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("fetch slots")

    @app.route("/api/upcoming-slots", methods=["GET"], endpoint="upcoming_slots")
    @login_required
    def upcoming_slots():
        try:
            overviews = container.slot_service.list_upcoming(user_id=current_user_id(), today=container.clock().date())
            return jsonify([overview_to_dict(o) for o in overviews])
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("fetch slots")

    @app.route("/api/attendance-slots", methods=["POST"], endpoint="create_attendance_slot")
    @login_required
    def create_attendance_slot():
        data = json_body()
        try:
            slot = container.slot_service.create_slot(
                admin_user_id=current_user_id(),
                committee_id=require_int(data.get("committeeId"), "committeeId", minimum=1),
                slot_date=require_date(data.get("date"), "date"),
                shift=data.get("shift"),
                max_capacity=data.get("maxCapacity"),
                is_blocked=bool(optional_bool(data.get("isBlocked"), "isBlocked")),
                notes=data.get("notes"),
            )
            return jsonify(slot_to_dict(slot)), 201
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("create slot")

    @app.route("/api/attendance-slots/<int:slot_id>", methods=["PATCH"], endpoint="update_attendance_slot")
    @login_required
    def update_attendance_slot(slot_id: int):
        data = json_body()
        try:
            slot = container.slot_service.update_slot(
                admin_user_id=current_user_id(),
                slot_id=slot_id,
                max_capacity=data.get("maxCapacity"),
                is_blocked=optional_bool(data.get("isBlocked"), "isBlocked"),
                notes=data.get("notes"),
            )
            return jsonify(slot_to_dict(slot))
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("update slot")
