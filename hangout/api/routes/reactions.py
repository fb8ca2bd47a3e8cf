"""
hangout.api.routes.reactions — Reactions & pins
================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from hangout.api.deps import get_engine, get_subject
from hangout.api.serializers import message_dict
from hangout.services import reaction_service

router = APIRouter(tags=["reactions"])


class ReactionBody(BaseModel):
    emoji: str


@router.get("/messages/{message_id}/reactions")
def get_reactions(
    message_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    summaries = reaction_service.get_reactions(engine, subject, message_id)
    return {
        "reactions": [
            {"emoji": s.emoji, "count": s.count, "user_ids": s.user_ids}
            for s in summaries
        ]
    }


@router.post("/messages/{message_id}/reactions")
def add_reaction(
    message_id: int,
    body: ReactionBody,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    added = reaction_service.add_reaction(engine, subject, message_id, body.emoji)
    return {"added": added}


@router.delete("/messages/{message_id}/reactions", status_code=204)
def remove_reaction(
    message_id: int,
    emoji: str,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    reaction_service.remove_reaction(engine, subject, message_id, emoji)
    return None


@router.get("/channels/{channel_id}/pins")
def list_pins(
    channel_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    rows = reaction_service.list_pins(engine, subject, channel_id)
    return {"messages": [message_dict(m) for m in rows]}
