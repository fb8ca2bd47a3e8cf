"""
hangout.api.routes.notifications — The caller's notifications
==============================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from hangout.api.deps import get_engine, get_subject
from hangout.api.serializers import notification_dict
from hangout.services import notification_service

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("")
def list_notifications(
    unread_only: bool = False,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    rows = notification_service.list_notifications(engine, subject, unread_only)
    return {"notifications": [notification_dict(n) for n in rows]}


@router.post("/{notification_id}/read")
def mark_read(
    notification_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    return notification_dict(
        notification_service.mark_notification_read(engine, subject, notification_id)
    )
