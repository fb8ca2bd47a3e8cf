"""
hangout.services.notification_service — Notification Rows
==========================================================

Other services drop rows here with :func:`notify`; users read and clear
their own.  Delivery (push, email) happens elsewhere.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from hangout.constants import now_ms
from hangout.database.engine import get_session
from hangout.database.models import Notification, NotificationType
from hangout.errors import NotFound
from hangout.services.permissions import get_current_user

if TYPE_CHECKING:
    from sqlalchemy import Engine
    from sqlalchemy.orm import Session

NOTIFICATION_PAGE_SIZE = 100


def notify(
    session: Session,
    user_id: int,
    group_id: int,
    kind: NotificationType,
    title: str,
    body: str,
    channel_id: int | None = None,
) -> Notification:
    """Queue a notification row inside the caller's transaction."""
    notification = Notification(
        user_id=user_id,
        group_id=group_id,
        channel_id=channel_id,
        type=kind.value,
        title=title,
        body=body,
        is_read=False,
        created_at=now_ms(),
    )
    session.add(notification)
    return notification


def list_notifications(
    engine: Engine, subject: str | None, unread_only: bool = False
) -> list[Notification]:
    with get_session(engine) as session:
        user = get_current_user(session, subject)
        stmt = select(Notification).where(Notification.user_id == user.id)
        if unread_only:
            stmt = stmt.where(Notification.is_read.is_(False))
        stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc())
        return list(session.scalars(stmt.limit(NOTIFICATION_PAGE_SIZE)))


def mark_notification_read(
    engine: Engine, subject: str | None, notification_id: int
) -> Notification:
    """Mark one of the caller's notifications read.

    Someone else's notification is reported as missing.
    """
    with get_session(engine) as session:
        user = get_current_user(session, subject)
        notification = session.get(Notification, notification_id)
        if notification is None or notification.user_id != user.id:
            raise NotFound("Notification not found")
        notification.is_read = True
        return notification
