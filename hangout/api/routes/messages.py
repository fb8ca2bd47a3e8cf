"""
hangout.api.routes.messages — Messages & threads
=================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from hangout.api.deps import get_engine, get_subject
from hangout.api.serializers import message_dict
from hangout.services import message_service

router = APIRouter(tags=["messages"])


class MessageSend(BaseModel):
    body: str
    thread_parent_id: int | None = None


class MessageEdit(BaseModel):
    body: str


@router.get("/channels/{channel_id}/messages")
def list_channel_messages(
    channel_id: int,
    limit: int = message_service.DEFAULT_PAGE_SIZE,
    before: int | None = None,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    """Top-level messages, newest first; page with ``before=<created_at>``."""
    rows = message_service.list_channel_messages(engine, subject, channel_id, limit, before)
    return {
        "messages": [message_dict(m) for m in rows],
        "next_before": rows[-1].created_at if len(rows) == limit else None,
    }


@router.get("/channels/{channel_id}/messages/search")
def search_messages(
    channel_id: int,
    q: str,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    rows = message_service.search_messages(engine, subject, channel_id, q)
    return {"messages": [message_dict(m) for m in rows]}


@router.post("/channels/{channel_id}/messages", status_code=201)
def send_message(
    channel_id: int,
    body: MessageSend,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    message = message_service.send_message(
        engine, subject, channel_id, body.body, body.thread_parent_id
    )
    return message_dict(message)


@router.get("/messages/{message_id}/thread")
def list_thread(
    message_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    rows = message_service.list_thread(engine, subject, message_id)
    return {"messages": [message_dict(m) for m in rows]}


@router.patch("/messages/{message_id}")
def edit_message(
    message_id: int,
    body: MessageEdit,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    return message_dict(message_service.edit_message(engine, subject, message_id, body.body))


@router.delete("/messages/{message_id}", status_code=204)
def delete_message(
    message_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    message_service.delete_message(engine, subject, message_id)
    return None
