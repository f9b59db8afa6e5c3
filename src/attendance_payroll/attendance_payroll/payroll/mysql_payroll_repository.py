from __future__ import annotations

from datetime import date
from typing import Mapping, Optional, Sequence

from ..common.money import to_decimal
from ..core.enums import PayrollRunStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import Payslip, SalaryStructure
from .repository import PayrollRepository

# payslip column -> earnings key
_FIXED_EARNING_COLUMNS = {
    "basic_salary": "basic",
    "hra": "hra",
    "conveyance_allowance": "conveyance",
    "medical_allowance": "medical",
    "special_allowance": "special",
    "lta": "lta",
}

# Admins draw salary too.
PAYROLL_ROLES = ("employee", "admin")

_PAYSLIP_VALUE_COLUMNS = (
    "calendar_days",
    "paid_days",
    "unpaid_leaves",
    *_FIXED_EARNING_COLUMNS,
    "other_earnings",
    "gross_earnings",
    "epf_employee",
    "epf_employer",
    "esi_employee",
    "esi_employer",
    "professional_tax",
    "mediclaim_deduction",
    "tds",
    "loan_deduction",
    "other_deductions",
    "total_deductions",
    "net_pay",
    "payroll_run_id",
)


def _decimal_map(value) -> dict:
    return {str(k): to_decimal(v) for k, v in (load_json(value, {}) or {}).items()}


def row_to_salary_structure(r: dict) -> SalaryStructure:
    return SalaryStructure(
        user_id=int(r["user_id"]),
        effective_date=r["effective_date"],
        basic=to_decimal(r.get("basic_salary")),
        hra=to_decimal(r.get("hra")),
        conveyance=to_decimal(r.get("conveyance_allowance")),
        medical=to_decimal(r.get("medical_allowance")),
        special=to_decimal(r.get("special_allowance")),
        lta=to_decimal(r.get("lta")),
        other_earnings=_decimal_map(r.get("other_earnings")),
        other_deductions=_decimal_map(r.get("other_deductions")),
    )


def _payslip_values(payslip: Payslip, run_id: Optional[int]) -> tuple:
    earnings = dict(payslip.earnings)
    fixed = [earnings.pop(key, to_decimal(0)) for key in _FIXED_EARNING_COLUMNS.values()]
    return (
        payslip.calendar_days,
        payslip.paid_days,
        payslip.unpaid_leaves,
        *fixed,
        dump_json({k: str(v) for k, v in earnings.items()}),
        payslip.gross_earnings,
        payslip.epf_employee,
        payslip.epf_employer,
        payslip.esi_employee,
        payslip.esi_employer,
        payslip.professional_tax,
        payslip.mediclaim,
        payslip.tds,
        payslip.loan_deduction,
        dump_json({k: str(v) for k, v in payslip.other_deductions.items()}),
        payslip.total_deductions,
        payslip.net_pay,
        run_id,
    )


def row_to_payslip(r: dict) -> Payslip:
    earnings = {key: to_decimal(r.get(col)) for col, key in _FIXED_EARNING_COLUMNS.items()}
    earnings.update(_decimal_map(r.get("other_earnings")))
    return Payslip(
        user_id=int(r["user_id"]),
        month=int(r["payslip_month"]),
        year=int(r["payslip_year"]),
        calendar_days=int(r["calendar_days"]),
        paid_days=to_decimal(r["paid_days"]),
        unpaid_leaves=to_decimal(r["unpaid_leaves"]),
        earnings=earnings,
        gross_earnings=to_decimal(r["gross_earnings"]),
        epf_employee=to_decimal(r["epf_employee"]),
        epf_employer=to_decimal(r["epf_employer"]),
        esi_employee=to_decimal(r["esi_employee"]),
        esi_employer=to_decimal(r["esi_employer"]),
        professional_tax=to_decimal(r["professional_tax"]),
        mediclaim=to_decimal(r["mediclaim_deduction"]),
        other_deductions=_decimal_map(r.get("other_deductions")),
        total_deductions=to_decimal(r["total_deductions"]),
        net_pay=to_decimal(r["net_pay"]),
        tds=to_decimal(r.get("tds")),
        loan_deduction=to_decimal(r.get("loan_deduction")),
    )


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_active_employee_ids(self) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            placeholders = ",".join(["%s"] * len(PAYROLL_ROLES))
            cur.execute(
                f"SELECT id FROM users WHERE is_active=1 AND role IN ({placeholders}) ORDER BY id",
                PAYROLL_ROLES,
            )
            return [int(r["id"]) for r in fetchall(cur)]

    def get_salary_structure(self, user_id: int, as_of: date) -> Optional[SalaryStructure]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT *
                FROM salary_structures
                WHERE user_id=%s AND effective_date <= %s
                ORDER BY effective_date DESC, id DESC
                LIMIT 1
                """,
                (int(user_id), as_of),
            )
            r = fetchone(cur)
            return row_to_salary_structure(r) if r else None

    def get_settings(self) -> Mapping[str, str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT setting_name, setting_value FROM payroll_settings")
            return {r["setting_name"]: r["setting_value"] for r in fetchall(cur)}

    def save_payslip(self, payslip: Payslip, *, run_id: Optional[int] = None) -> int:
        values = _payslip_values(payslip, run_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id FROM payslips
                WHERE user_id=%s AND payslip_month=%s AND payslip_year=%s
                FOR UPDATE
                """,
                (payslip.user_id, payslip.month, payslip.year),
            )
            existing = fetchone(cur)
            if existing:
                assignments = ", ".join(f"{col}=%s" for col in _PAYSLIP_VALUE_COLUMNS)
                cur.execute(
                    f"UPDATE payslips SET {assignments} WHERE id=%s",
                    (*values, int(existing["id"])),
                )
                return int(existing["id"])

            columns = ", ".join(("user_id", "payslip_month", "payslip_year", *_PAYSLIP_VALUE_COLUMNS))
            placeholders = ", ".join(["%s"] * (3 + len(_PAYSLIP_VALUE_COLUMNS)))
            cur.execute(
                f"INSERT INTO payslips({columns}) VALUES({placeholders})",
                (payslip.user_id, payslip.month, payslip.year, *values),
            )
            return int(cur.lastrowid)

    def get_payslip(self, user_id: int, year: int, month: int) -> Optional[Payslip]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT * FROM payslips WHERE user_id=%s AND payslip_month=%s AND payslip_year=%s",
                (int(user_id), int(month), int(year)),
            )
            r = fetchone(cur)
            return row_to_payslip(r) if r else None

    def start_run(self, year: int, month: int) -> tuple[int, PayrollRunStatus]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id FROM payroll_runs WHERE payroll_month=%s AND payroll_year=%s FOR UPDATE",
                (int(month), int(year)),
            )
            existing = fetchone(cur)
            if existing:
                status = PayrollRunStatus.RECALCULATING
                cur.execute(
                    "UPDATE payroll_runs SET status=%s, run_date=CURRENT_TIMESTAMP WHERE id=%s",
                    (status.value, int(existing["id"])),
                )
                return int(existing["id"]), status

            status = PayrollRunStatus.CALCULATING
            cur.execute(
                "INSERT INTO payroll_runs(payroll_month, payroll_year, status) VALUES(%s,%s,%s)",
                (int(month), int(year), status.value),
            )
            return int(cur.lastrowid), status

    def finish_run(self, run_id: int, status: PayrollRunStatus) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE payroll_runs SET status=%s WHERE id=%s", (status.value, int(run_id)))
