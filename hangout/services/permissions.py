"""
hangout.services.permissions — Identity & Membership Guard
===========================================================

Every externally-invoked operation starts here: resolve the caller's
opaque identity to a :class:`User`, then resolve their membership row in
the target group and check its role.

These helpers take an open :class:`Session` so the lookups run in the
same transaction as the mutation they protect.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from hangout.database.models import (
    Channel,
    Group,
    GroupMember,
    Message,
    Role,
    User,
)
from hangout.engine.roles import check_minimum_role
from hangout.errors import NotFound, PermissionDenied, Unauthenticated


def get_current_user(session: Session, subject: str | None) -> User:
    """Resolve *subject* to a user row.

    Raises :class:`Unauthenticated` when no identity was supplied and
    :class:`NotFound` when no user is registered for it.
    """
    if not subject:
        raise Unauthenticated("Not authenticated")
    user = session.scalar(select(User).where(User.subject == subject))
    if user is None:
        raise NotFound("User not found")
    return user


def get_membership(session: Session, group_id: int, user_id: int) -> GroupMember | None:
    return session.scalar(
        select(GroupMember).where(
            GroupMember.group_id == group_id,
            GroupMember.user_id == user_id,
        )
    )


def require_membership(
    session: Session,
    group_id: int,
    user_id: int,
    minimum: Role = Role.MEMBER,
) -> GroupMember:
    """Return the caller's membership, or raise :class:`PermissionDenied`.

    Not being a member at all is also :class:`PermissionDenied`; a missing
    group is :class:`NotFound`.
    """
    membership = get_membership(session, group_id, user_id)
    if membership is None:
        if session.get(Group, group_id) is None:
            raise NotFound("Group not found")
        raise PermissionDenied("Not a member of this group")
    check_minimum_role(membership.role, minimum)
    return membership


# ---------------------------------------------------------------------------
# Entity lookups that raise NotFound
# ---------------------------------------------------------------------------
def get_group_or_404(session: Session, group_id: int) -> Group:
    group = session.get(Group, group_id)
    if group is None:
        raise NotFound("Group not found")
    return group


def get_channel_or_404(session: Session, channel_id: int) -> Channel:
    channel = session.get(Channel, channel_id)
    if channel is None:
        raise NotFound("Channel not found")
    return channel


def get_message_or_404(session: Session, message_id: int) -> Message:
    message = session.get(Message, message_id)
    if message is None:
        raise NotFound("Message not found")
    return message
