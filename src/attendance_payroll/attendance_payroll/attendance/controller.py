from __future__ import annotations

from flask import Flask

from ..common.responses import json_body, json_endpoint, ok
from ..common.validators import require_int
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    @json_endpoint
    def check_in():
        data = json_body()
        attendance_id = container.attendance_service.check_in(require_int(data.get("user_id"), "User"))
        return ok("Checked in", 201, attendance_id=attendance_id)

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="attendance_check_out")
    @json_endpoint
    def check_out():
        data = json_body()
        metrics = container.attendance_service.check_out(require_int(data.get("user_id"), "User"))
        return ok(
            "Checked out",
            working_hours=str(metrics.working_hours),
            extra_hours=str(metrics.extra_hours),
        )

    @app.route("/api/attendance/summary/<int:user_id>/<int:year>/<int:month>", methods=["GET"], endpoint="attendance_summary")
    @json_endpoint
    def summary(user_id: int, year: int, month: int):
        result = container.attendance_service.monthly_summary(user_id, year, month)
        return ok("Attendance summary", summary=result.to_dict())

    @app.route("/api/admin/attendance/correction", methods=["POST"], endpoint="admin_attendance_correction")
    @json_endpoint
    def correction():
        data = json_body()
        attendance_id = container.attendance_service.correct_record(
            user_id=data.get("user_id"),
            work_date=data.get("date"),
            check_in=data.get("check_in"),
            check_out=data.get("check_out"),
        )
        return ok("Attendance corrected", attendance_id=attendance_id)

    @app.route(
        "/api/admin/attendance/mark-absent-forgotten-checkout",
        methods=["POST"],
        endpoint="admin_mark_forgotten_checkout",
    )
    @json_endpoint
    def mark_forgotten_checkout():
        data = json_body()
        user_id = data.get("user_id")
        count = container.attendance_service.mark_forgotten_checkout_absent(
            data.get("date"),
            user_id=require_int(user_id, "User") if user_id is not None else None,
        )
        return ok(f"{count} record(s) marked absent", updated=count)
