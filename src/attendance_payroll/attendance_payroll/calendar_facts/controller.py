from __future__ import annotations

from flask import Flask

from ..common.responses import json_body, json_endpoint, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/weekly-offs", methods=["POST"], endpoint="admin_save_weekly_off")
    @json_endpoint
    def save_weekly_off():
        data = json_body()
        config_id = container.calendar_service.save_weekly_off(
            user_id=data.get("user_id"),
            weekdays=data.get("weekly_off_days"),
            effective_date=data.get("effective_date"),
            end_date=data.get("end_date"),
        )
        return ok("Weekly off saved", id=config_id)

    @app.route("/api/admin/weekly-offs/<int:config_id>", methods=["DELETE"], endpoint="admin_delete_weekly_off")
    @json_endpoint
    def delete_weekly_off(config_id: int):
        container.calendar_service.delete_weekly_off(config_id)
        return ok("Weekly off deleted")

    @app.route("/api/admin/holidays", methods=["POST"], endpoint="admin_add_holiday")
    @json_endpoint
    def add_holiday():
        data = json_body()
        holiday_id = container.calendar_service.add_holiday(
            holiday_date=data.get("holiday_date"),
            name=data.get("holiday_name"),
        )
        return ok("Holiday added", 201, id=holiday_id)

    @app.route("/api/admin/holidays/<int:holiday_id>", methods=["DELETE"], endpoint="admin_delete_holiday")
    @json_endpoint
    def delete_holiday(holiday_id: int):
        container.calendar_service.delete_holiday(holiday_id)
        return ok("Holiday deleted")
