from __future__ import annotations

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .model import Notification
from .repository import NotificationRepository


def insert_notification(cur, notification: Notification) -> int:
    """Also used inside leave ledger transactions so the notification commits with them."""
    cur.execute(
        """
        INSERT INTO notifications(user_id, message, type, related_id)
        VALUES(%s,%s,%s,%s)
        """,
        (int(notification.user_id), notification.message, notification.type.value, notification.related_id),
    )
    return int(cur.lastrowid)


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, notification: Notification) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            return insert_notification(cur, notification)
