"""
hangout.api.routes.users — Caller profile
==========================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from hangout.api.deps import get_engine, get_subject
from hangout.api.serializers import user_dict
from hangout.errors import Unauthenticated
from hangout.services import user_service

router = APIRouter(prefix="/users", tags=["users"])


class ProfileUpsert(BaseModel):
    name: str
    username: str
    avatar_url: str | None = None


@router.get("/me")
def get_me(subject: str | None = Depends(get_subject), engine=Depends(get_engine)):
    return user_dict(user_service.get_me(engine, subject))


@router.put("/me")
def upsert_me(
    body: ProfileUpsert,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    """Register the caller on first sign-in, refresh their profile afterwards."""
    if subject is None:
        raise Unauthenticated("Not authenticated")
    user = user_service.create_or_update_user(
        engine, subject, body.name, body.username, body.avatar_url
    )
    return user_dict(user)
