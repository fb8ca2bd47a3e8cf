"""
hangout.api.routes.groups — Groups, members & group settings
=============================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from hangout.api.deps import get_engine, get_subject
from hangout.api.serializers import group_dict, hall_of_fame_dict, member_dict
from hangout.services import group_service, reaction_service, senpai_service

router = APIRouter(prefix="/groups", tags=["groups"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class GroupCreate(BaseModel):
    name: str


class GroupJoin(BaseModel):
    invite_code: str


class RoleUpdate(BaseModel):
    role: str  # admin | member


class OwnershipTransfer(BaseModel):
    new_owner_id: int


class ThresholdUpdate(BaseModel):
    threshold: int


class SenpaiSettingsUpdate(BaseModel):
    enabled: bool | None = None
    frequency: str | None = None  # quiet | normal | chatty
    personality: str | None = None


# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------
@router.get("")
def list_groups(subject: str | None = Depends(get_subject), engine=Depends(get_engine)):
    return {"groups": [group_dict(g) for g in group_service.list_groups(engine, subject)]}


@router.post("", status_code=201)
def create_group(
    body: GroupCreate,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    return group_dict(group_service.create_group(engine, subject, body.name))


@router.post("/join")
def join_group(
    body: GroupJoin,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    return group_dict(group_service.join_group(engine, subject, body.invite_code))


@router.get("/{group_id}")
def get_group(
    group_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    group = group_service.get_group(engine, subject, group_id)
    return {**group_dict(group), "members": [member_dict(m) for m in group.members]}


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------
@router.put("/{group_id}/members/{user_id}/role")
def update_member_role(
    group_id: int,
    user_id: int,
    body: RoleUpdate,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    member = group_service.update_member_role(engine, subject, group_id, user_id, body.role)
    return {"user_id": member.user_id, "role": member.role}


@router.delete("/{group_id}/members/{user_id}", status_code=204)
def remove_member(
    group_id: int,
    user_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    group_service.remove_member(engine, subject, group_id, user_id)
    return None


@router.post("/{group_id}/leave", status_code=204)
def leave_group(
    group_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    group_service.leave_group(engine, subject, group_id)
    return None


@router.post("/{group_id}/transfer-ownership", status_code=204)
def transfer_ownership(
    group_id: int,
    body: OwnershipTransfer,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    group_service.transfer_ownership(engine, subject, group_id, body.new_owner_id)
    return None


# ---------------------------------------------------------------------------
# Hall of Fame & Senpai settings
# ---------------------------------------------------------------------------
@router.get("/{group_id}/hall-of-fame")
def list_hall_of_fame(
    group_id: int,
    limit: int = 50,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    entries = reaction_service.list_hall_of_fame(engine, subject, group_id, limit)
    return {"entries": [hall_of_fame_dict(e) for e in entries]}


@router.put("/{group_id}/hall-of-fame/threshold")
def update_hall_of_fame_threshold(
    group_id: int,
    body: ThresholdUpdate,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    threshold = reaction_service.update_hall_of_fame_threshold(
        engine, subject, group_id, body.threshold
    )
    return {"hall_of_fame_threshold": threshold}


@router.put("/{group_id}/senpai")
def update_senpai_settings(
    group_id: int,
    body: SenpaiSettingsUpdate,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    group = senpai_service.update_senpai_settings(
        engine,
        subject,
        group_id,
        enabled=body.enabled,
        frequency=body.frequency,
        personality=body.personality,
    )
    return group_dict(group)
