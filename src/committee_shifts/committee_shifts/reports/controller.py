from __future__ import annotations

import csv
import io

from flask import Flask, jsonify, request

from ..common.http import current_user_id, error_response, internal_error, login_required, require_date
from ..common.validators import require_int
from ..container import Container
from ..core.exceptions import DomainError
from .service import ReportData


def register(app: Flask, container: Container) -> None:
    def _report_from_args() -> ReportData:
        committee_id = require_int(request.args.get("committeeId"), "committeeId", minimum=1)
        start = require_date(request.args.get("startDate"), "startDate")
        end = require_date(request.args.get("endDate"), "endDate")
        return container.report_service.build_report(
            admin_user_id=current_user_id(),
            committee_id=committee_id,
            start=start,
            end=end,
        )

    def _write_report_csv(*, data: ReportData, filename: str):
        out = io.StringIO()
        writer = csv.DictWriter(
            out,
            fieldnames=["date", "shift", "userId", "userName", "userEmail", "registeredAt", "id"],
        )
        writer.writeheader()
        for row in data.rows:
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/attendance-report", methods=["GET"], endpoint="attendance_report")
    @login_required
    def attendance_report():
        try:
            data = _report_from_args()
            return jsonify({"rows": data.rows, "summary": data.summary})
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("fetch attendance report")

    @app.route("/api/attendance-report.csv", methods=["GET"], endpoint="attendance_report_csv")
    @login_required
    def attendance_report_csv():
        try:
            data = _report_from_args()
            filename = (
                f"attendance_{request.args.get('committeeId')}_"
                f"{request.args.get('startDate', '').replace('-', '')}_{request.args.get('endDate', '').replace('-', '')}.csv"
            )
            return _write_report_csv(data=data, filename=filename)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("export attendance report")

    @app.route(
        "/api/committees/<int:committee_id>/calendar-attendances",
        methods=["GET"],
        endpoint="calendar_attendances",
    )
    @login_required
    def calendar_attendances(committee_id: int):
        try:
            start = require_date(request.args.get("startDate"), "startDate")
            end = require_date(request.args.get("endDate"), "endDate")
            rows = container.report_service.calendar(
                user_id=current_user_id(),
                committee_id=committee_id,
                start=start,
                end=end,
            )
            return jsonify(rows)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("fetch calendar attendances")
