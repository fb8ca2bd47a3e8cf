"""
hangout.api.routes.channels — Channels, forks & archival
=========================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from hangout.api.deps import get_engine, get_subject
from hangout.api.serializers import channel_dict
from hangout.services import channel_service

router = APIRouter(tags=["channels"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class ChannelCreate(BaseModel):
    name: str
    type: str  # hangout | event | bracket
    icon: str | None = None
    event_date: int | None = None
    event_end_date: int | None = None
    event_location: str | None = None
    bracket_question: str | None = None


class ChannelFork(BaseModel):
    message_id: int
    type: str
    name: str
    event_date: int | None = None
    bracket_question: str | None = None


class ChannelUpdate(BaseModel):
    name: str | None = None
    icon: str | None = None


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@router.get("/groups/{group_id}/channels")
def list_channels(
    group_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    channels = channel_service.list_channels(engine, subject, group_id)
    return {"channels": [channel_dict(c) for c in channels]}


@router.post("/groups/{group_id}/channels", status_code=201)
def create_channel(
    group_id: int,
    body: ChannelCreate,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    channel = channel_service.create_channel(
        engine,
        subject,
        group_id,
        body.name,
        body.type,
        icon=body.icon,
        event_date=body.event_date,
        event_end_date=body.event_end_date,
        event_location=body.event_location,
        bracket_question=body.bracket_question,
    )
    return channel_dict(channel)


@router.post("/channels/fork", status_code=201)
def fork_from_message(
    body: ChannelFork,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    channel = channel_service.fork_from_message(
        engine,
        subject,
        body.message_id,
        body.type,
        body.name,
        event_date=body.event_date,
        bracket_question=body.bracket_question,
    )
    return channel_dict(channel)


@router.get("/channels/{channel_id}")
def get_channel(
    channel_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    return channel_dict(channel_service.get_channel(engine, subject, channel_id))


@router.patch("/channels/{channel_id}")
def update_channel(
    channel_id: int,
    body: ChannelUpdate,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    channel = channel_service.update_channel(
        engine, subject, channel_id, name=body.name, icon=body.icon
    )
    return channel_dict(channel)


@router.post("/channels/{channel_id}/archive")
def archive_channel(
    channel_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    return channel_dict(channel_service.archive_channel(engine, subject, channel_id))
