from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any, Optional

from ..calendar_facts.repository import CalendarFactProvider
from ..common.datetime_utils import month_bounds, now_local
from ..common.validators import parse_time, require_date, require_int, require_month
from ..core.constants import DEFAULT_LATE_GRACE_MINUTES, DEFAULT_TIMEZONE
from ..core.enums import NotificationType
from ..core.exceptions import NotFoundError, ValidationError
from ..notifications.model import Notification
from ..notifications.repository import NotificationRepository
from .factory import AttendanceStrategyFactory
from .metrics import SessionMetrics, session_metrics
from .repository import AttendanceRepository
from .resolver import DailyStatusResolver
from .summary import AttendanceSummary, AttendanceSummaryAggregator

logger = logging.getLogger(__name__)


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        calendar_facts: CalendarFactProvider,
        notifications: NotificationRepository,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        aggregator: AttendanceSummaryAggregator | None = None,
        grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
        timezone: str = DEFAULT_TIMEZONE,
    ):
        self._attendance = attendance
        self._calendar_facts = calendar_facts
        self._notifications = notifications
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._aggregator = aggregator or AttendanceSummaryAggregator()
        self._grace_minutes = int(grace_minutes)
        self._timezone = timezone

    def _now(self) -> datetime:
        return now_local(self._timezone)

    def _shift_start(self, user_id: int):
        shift_type = self._attendance.get_shift_type(user_id)
        if shift_type is None:
            raise NotFoundError("Employee not found")
        return self._factory.shift_start_for(shift_type)

    def check_in(self, user_id: int, *, now: datetime | None = None) -> int:
        now = now or self._now()
        today = now.date()

        shift_start = self._shift_start(user_id)
        existing = self._attendance.get_for_user_and_date(user_id, today)
        if existing is not None and existing.check_in is not None:
            raise ValidationError("Already checked in today")

        strategy = self._factory.for_checkin(now=now, shift_start=shift_start, grace_minutes=self._grace_minutes)
        decision = strategy.decide_checkin(now=now, shift_start=shift_start, grace_minutes=self._grace_minutes)

        if existing is not None:
            # A leave or absence row for today keeps its status; only the time is recorded.
            ok = self._attendance.record_checkin(
                attendance_id=existing.attendance_id,
                check_in=now,
                status=decision.status,
                late_minutes=decision.late_minutes,
            )
            if not ok:
                raise ValidationError("Already checked in today")
            return existing.attendance_id

        return self._attendance.create_checkin(
            user_id=user_id,
            work_date=today,
            check_in=now,
            status=decision.status,
            late_minutes=decision.late_minutes,
        )

    def check_out(self, user_id: int, *, now: datetime | None = None) -> SessionMetrics:
        now = now or self._now()
        today = now.date()

        record = self._attendance.get_for_user_and_date(user_id, today)
        if record is None or record.check_out is not None:
            # An evening shift checked in yesterday may still be open.
            previous = self._attendance.get_for_user_and_date(user_id, today - timedelta(days=1))
            if previous is not None and previous.check_in is not None and previous.check_out is None:
                record = previous

        if record is None or record.check_in is None:
            raise ValidationError("No check-in found for today")
        if record.check_out is not None:
            raise ValidationError("Already checked out")

        metrics = session_metrics(record.check_in, now)
        ok = self._attendance.update_checkout(
            attendance_id=record.attendance_id,
            check_out=metrics.check_out,
            working_hours=metrics.working_hours,
            extra_hours=metrics.extra_hours,
        )
        if not ok:
            raise ValidationError("Already checked out")
        return metrics

    def correct_record(
        self,
        *,
        user_id: Any,
        work_date: Any,
        check_in: Any,
        check_out: Any = None,
    ) -> int:
        """Admin correction: recompute the day's metrics from the supplied times and overwrite the row."""
        uid = require_int(user_id, "User")
        day = require_date(work_date, "Date")
        in_time = parse_time(check_in, "Check-in time")
        if in_time is None:
            raise ValidationError("Check-in time is required")
        out_time = parse_time(check_out, "Check-out time")

        shift_start = self._shift_start(uid)
        in_dt = datetime.combine(day, in_time)
        out_dt = datetime.combine(day, out_time) if out_time else None

        strategy = self._factory.for_checkin(now=in_dt, shift_start=shift_start, grace_minutes=self._grace_minutes)
        decision = strategy.decide_checkin(now=in_dt, shift_start=shift_start, grace_minutes=self._grace_minutes)
        metrics = session_metrics(in_dt, out_dt)

        attendance_id = self._attendance.save_correction(
            user_id=uid,
            work_date=day,
            check_in=in_dt,
            check_out=metrics.check_out,
            status=decision.status,
            working_hours=metrics.working_hours,
            late_minutes=decision.late_minutes,
            extra_hours=metrics.extra_hours,
        )
        self._notifications.add(
            Notification(
                user_id=uid,
                message=f"Your attendance for {day.isoformat()} was corrected by an administrator.",
                type=NotificationType.ATTENDANCE,
                related_id=attendance_id,
            )
        )
        return attendance_id

    def mark_forgotten_checkout_absent(self, work_date: Any, *, user_id: Optional[int] = None) -> int:
        day = require_date(work_date, "Date")
        user_ids = self._attendance.mark_forgotten_checkouts_absent(day, user_id=user_id)
        for uid in user_ids:
            self._notifications.add(
                Notification(
                    user_id=uid,
                    message=f"You were marked absent on {day.isoformat()} because no check-out was recorded.",
                    type=NotificationType.ATTENDANCE,
                )
            )
        logger.info("Marked %d forgotten check-out(s) absent for %s", len(user_ids), day)
        return len(user_ids)

    def monthly_summary(self, user_id: int, year: Any, month: Any, *, as_of: date | None = None) -> AttendanceSummary:
        y, m = require_month(year, month)
        start, end = month_bounds(y, m)
        facts = self._calendar_facts.get_facts(int(user_id), start, end)
        resolver = DailyStatusResolver(facts, as_of=as_of or self._now().date())
        return self._aggregator.summarize(resolver, user_id=int(user_id), year=y, month=m)
