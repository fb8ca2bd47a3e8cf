"""
hangout.services.group_service — Groups, Membership & Ownership
================================================================

Group lifecycle and member management.  Role rules live in
:mod:`hangout.engine.roles`; this module resolves rows and applies them.

Ownership invariant: every group has exactly one ``owner`` membership.
:func:`transfer_ownership` demotes and promotes inside a single
:func:`get_session` block so no committed state ever has zero or two
owners.
"""

from __future__ import annotations

import logging
import secrets
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from hangout.constants import INVITE_CODE_ALPHABET, INVITE_CODE_LENGTH, now_ms
from hangout.database.engine import get_session
from hangout.database.models import (
    Channel,
    ChannelType,
    Group,
    GroupMember,
    Role,
    SenpaiFrequency,
)
from hangout.engine.roles import (
    ASSIGNABLE_ROLES,
    check_can_leave,
    check_can_remove,
    parse_role,
)
from hangout.errors import NotFound, PermissionDenied, ValidationError
from hangout.services.permissions import (
    get_current_user,
    get_membership,
    require_membership,
)

if TYPE_CHECKING:
    from sqlalchemy import Engine
    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL_NAME = "Hangout"


def generate_invite_code() -> str:
    return "".join(
        secrets.choice(INVITE_CODE_ALPHABET) for _ in range(INVITE_CODE_LENGTH)
    )


def _unique_invite_code(session: Session) -> str:
    while True:
        code = generate_invite_code()
        if session.scalar(select(Group.id).where(Group.invite_code == code)) is None:
            return code


# ---------------------------------------------------------------------------
# Create / join / read
# ---------------------------------------------------------------------------
def create_group(engine: Engine, subject: str | None, name: str) -> Group:
    """Create a group owned by the caller, with its default hangout channel."""
    name = name.strip()
    if not name:
        raise ValidationError("Group name cannot be empty")

    with get_session(engine) as session:
        user = get_current_user(session, subject)
        now = now_ms()

        group = Group(
            name=name,
            created_by=user.id,
            created_at=now,
            invite_code=_unique_invite_code(session),
            senpai_enabled=True,
            senpai_frequency=SenpaiFrequency.NORMAL.value,
        )
        session.add(group)
        session.flush()

        session.add(GroupMember(
            group_id=group.id,
            user_id=user.id,
            role=Role.OWNER.value,
            joined_at=now,
            last_active_at=now,
        ))
        session.add(Channel(
            group_id=group.id,
            name=DEFAULT_CHANNEL_NAME,
            type=ChannelType.HANGOUT.value,
            created_by=user.id,
            created_at=now,
            fork_depth=0,
            is_archived=False,
        ))
        logger.info("Group %d (%s) created by user %d", group.id, name, user.id)
        return group


def join_group(engine: Engine, subject: str | None, invite_code: str) -> Group:
    """Join by invite code.  Joining a group you're already in is a no-op."""
    with get_session(engine) as session:
        user = get_current_user(session, subject)
        group = session.scalar(select(Group).where(Group.invite_code == invite_code))
        if group is None:
            raise NotFound("Invalid invite code")

        if get_membership(session, group.id, user.id) is None:
            now = now_ms()
            session.add(GroupMember(
                group_id=group.id,
                user_id=user.id,
                role=Role.MEMBER.value,
                joined_at=now,
                last_active_at=now,
            ))
            logger.info("User %d joined group %d", user.id, group.id)
        return group


def list_groups(engine: Engine, subject: str | None) -> list[Group]:
    with get_session(engine) as session:
        user = get_current_user(session, subject)
        return list(session.scalars(
            select(Group)
            .join(GroupMember, GroupMember.group_id == Group.id)
            .where(GroupMember.user_id == user.id)
            .order_by(GroupMember.joined_at)
        ))


def get_group(engine: Engine, subject: str | None, group_id: int) -> Group:
    """Return the group with its members (and their users) loaded."""
    with get_session(engine) as session:
        user = get_current_user(session, subject)
        require_membership(session, group_id, user.id)
        return session.scalar(
            select(Group)
            .where(Group.id == group_id)
            .options(selectinload(Group.members).selectinload(GroupMember.user))
        )


# ---------------------------------------------------------------------------
# Member management
# ---------------------------------------------------------------------------
def _target_membership(session: Session, group_id: int, user_id: int) -> GroupMember:
    membership = get_membership(session, group_id, user_id)
    if membership is None:
        raise NotFound("Member not found")
    return membership


def update_member_role(
    engine: Engine,
    subject: str | None,
    group_id: int,
    target_user_id: int,
    new_role: str,
) -> GroupMember:
    """Owner-only: set a member's role to ``admin`` or ``member``."""
    role = parse_role(new_role)
    if role not in ASSIGNABLE_ROLES:
        raise ValidationError("Use an ownership transfer to assign the owner role")

    with get_session(engine) as session:
        user = get_current_user(session, subject)
        require_membership(session, group_id, user.id, Role.OWNER)
        if target_user_id == user.id:
            raise PermissionDenied("Cannot change your own role")

        target = _target_membership(session, group_id, target_user_id)
        target.role = role.value
        logger.info(
            "Group %d: user %d is now %s", group_id, target_user_id, role.value
        )
        return target


def remove_member(
    engine: Engine, subject: str | None, group_id: int, target_user_id: int
) -> None:
    """Admin+: remove another member.  Admins may only remove plain members."""
    with get_session(engine) as session:
        user = get_current_user(session, subject)
        actor = require_membership(session, group_id, user.id, Role.ADMIN)
        if target_user_id == user.id:
            raise PermissionDenied("Use leave to remove yourself")

        target = _target_membership(session, group_id, target_user_id)
        check_can_remove(actor.role, target.role)
        session.delete(target)
        logger.info(
            "Group %d: user %d removed by user %d", group_id, target_user_id, user.id
        )


def leave_group(engine: Engine, subject: str | None, group_id: int) -> None:
    with get_session(engine) as session:
        user = get_current_user(session, subject)
        membership = require_membership(session, group_id, user.id)
        check_can_leave(membership.role)
        session.delete(membership)
        logger.info("User %d left group %d", user.id, group_id)


def transfer_ownership(
    engine: Engine, subject: str | None, group_id: int, new_owner_id: int
) -> None:
    """Owner-only: hand ownership to another member.

    The previous owner becomes an admin.  Both patches commit together.
    """
    with get_session(engine) as session:
        user = get_current_user(session, subject)
        current = require_membership(session, group_id, user.id, Role.OWNER)
        if new_owner_id == user.id:
            raise ValidationError("You already own this group")

        target = _target_membership(session, group_id, new_owner_id)
        current.role = Role.ADMIN.value
        target.role = Role.OWNER.value
        logger.info(
            "Group %d ownership transferred: %d → %d", group_id, user.id, new_owner_id
        )


def touch_membership(session: Session, group_id: int, user_id: int) -> None:
    """Bump ``last_active_at`` for an existing membership."""
    membership = get_membership(session, group_id, user_id)
    if membership is not None:
        membership.last_active_at = now_ms()
