from __future__ import annotations

from dataclasses import asdict

from flask import Flask

from ..common.responses import json_body, json_endpoint, ok
from ..container import Container
from .model import LeaveApplication, LeaveBalance


def _application_json(app: LeaveApplication) -> dict:
    data = asdict(app)
    data["status"] = app.status.value
    data["duration"] = str(app.duration)
    data["from_date"] = app.from_date.isoformat()
    data["to_date"] = app.to_date.isoformat()
    return data


def _balance_json(balance: LeaveBalance) -> dict:
    return {
        "user_id": balance.user_id,
        "leave_type": balance.leave_type,
        "current_balance": str(balance.current_balance),
        "total_days_allocated": str(balance.total_days_allocated),
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/leaves/apply", methods=["POST"], endpoint="leave_apply")
    @json_endpoint
    def apply_leave():
        data = json_body()
        application = container.leave_service.apply(
            user_id=data.get("user_id"),
            leave_type_id=data.get("leave_type_id"),
            from_date=data.get("from_date"),
            to_date=data.get("to_date"),
            is_half_day=bool(data.get("is_half_day", False)),
            reason=data.get("reason"),
        )
        return ok("Leave application submitted", 201, leave=_application_json(application))

    @app.route("/api/leaves/<int:leave_id>/request-cancellation", methods=["PUT"], endpoint="leave_request_cancellation")
    @json_endpoint
    def request_cancellation(leave_id: int):
        data = json_body()
        application = container.leave_service.request_cancellation(
            leave_id,
            user_id=data.get("user_id"),
            reason=data.get("cancellation_reason"),
        )
        return ok("Cancellation requested", leave=_application_json(application))

    @app.route("/api/leaves/balances/<int:user_id>", methods=["GET"], endpoint="leave_balances")
    @json_endpoint
    def balances(user_id: int):
        rows = container.leave_service.list_balances(user_id)
        return ok("Leave balances", balances=[_balance_json(b) for b in rows])

    @app.route("/api/admin/leaves/<int:leave_id>/status", methods=["PUT"], endpoint="admin_leave_status")
    @json_endpoint
    def update_status(leave_id: int):
        data = json_body()
        application = container.leave_service.decide(
            leave_id,
            status=data.get("status"),
            admin_comment=data.get("admin_comment"),
        )
        return ok(f"Leave application is now {application.status.value}", leave=_application_json(application))

    @app.route("/api/admin/leave-balances", methods=["POST"], endpoint="admin_leave_balance")
    @json_endpoint
    def adjust_balance():
        data = json_body()
        balance = container.leave_service.adjust_balance(
            user_id=data.get("user_id"),
            leave_type=data.get("leave_type"),
            current_balance=data.get("current_balance"),
            total_days_allocated=data.get("total_days_allocated"),
        )
        return ok("Leave balance saved", balance=_balance_json(balance))
