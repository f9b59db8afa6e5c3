from __future__ import annotations

from flask import Flask

from ..common.responses import json_body, json_endpoint, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route(
        "/api/admin/payroll/preview/<int:user_id>/<int:year>/<int:month>",
        methods=["GET"],
        endpoint="admin_payroll_preview",
    )
    @json_endpoint
    def preview(user_id: int, year: int, month: int):
        payslip = container.payroll_service.preview(user_id, year, month)
        return ok("Payslip preview", payslip=payslip.to_dict())

    @app.route("/api/admin/payroll/run", methods=["POST"], endpoint="admin_payroll_run")
    @json_endpoint
    def run():
        data = json_body()
        result = container.payroll_service.run(data.get("year"), data.get("month"))
        return ok(f"Payroll run {result.status.value}", run=result.to_dict())

    @app.route(
        "/api/payroll/payslips/<int:user_id>/<int:year>/<int:month>",
        methods=["GET"],
        endpoint="payroll_payslip",
    )
    @json_endpoint
    def payslip(user_id: int, year: int, month: int):
        found = container.payroll_service.get_payslip(user_id, year, month)
        return ok("Payslip", payslip=found.to_dict())
