"""
hangout.services.channel_service — Channels, Forks & Archival
==============================================================

Channel CRUD for a group, forking a message into a new channel, and the
daily sweep that archives event channels whose date has passed.

A channel's ``type`` is fixed at creation; :func:`update_channel` only
touches name and icon.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select

from hangout.constants import CHANNEL_TYPE_ORDER, now_ms
from hangout.database.engine import get_session
from hangout.database.models import (
    BracketStatus,
    Channel,
    ChannelType,
    Message,
    MessageType,
    Role,
)
from hangout.errors import ValidationError
from hangout.services.permissions import (
    get_channel_or_404,
    get_current_user,
    get_message_or_404,
    require_membership,
)

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


def parse_channel_type(value: str) -> ChannelType:
    try:
        return ChannelType(value)
    except ValueError:
        raise ValidationError(f"Unknown channel type: {value!r}") from None


def _clean_name(name: str) -> str:
    trimmed = name.strip()
    if not trimmed:
        raise ValidationError("Channel name cannot be empty")
    return trimmed


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def list_channels(engine: Engine, subject: str | None, group_id: int) -> list[Channel]:
    """All channels of a group: hangout first, then events, then brackets."""
    with get_session(engine) as session:
        user = get_current_user(session, subject)
        require_membership(session, group_id, user.id)
        channels = session.scalars(
            select(Channel)
            .where(Channel.group_id == group_id)
            .order_by(Channel.created_at, Channel.id)
        ).all()
        return sorted(channels, key=lambda c: CHANNEL_TYPE_ORDER.get(c.type, 99))


def get_channel(engine: Engine, subject: str | None, channel_id: int) -> Channel:
    with get_session(engine) as session:
        user = get_current_user(session, subject)
        channel = get_channel_or_404(session, channel_id)
        require_membership(session, channel.group_id, user.id)
        return channel


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------
def create_channel(
    engine: Engine,
    subject: str | None,
    group_id: int,
    name: str,
    channel_type: str,
    *,
    icon: str | None = None,
    event_date: int | None = None,
    event_end_date: int | None = None,
    event_location: str | None = None,
    bracket_question: str | None = None,
) -> Channel:
    kind = parse_channel_type(channel_type)
    name = _clean_name(name)

    with get_session(engine) as session:
        user = get_current_user(session, subject)
        require_membership(session, group_id, user.id)

        channel = Channel(
            group_id=group_id,
            name=name,
            icon=icon,
            type=kind.value,
            created_by=user.id,
            created_at=now_ms(),
            fork_depth=0,
            is_archived=False,
            event_date=event_date,
            event_end_date=event_end_date,
            event_location=event_location,
            bracket_question=bracket_question,
            bracket_status=(
                BracketStatus.NOMINATING.value if kind == ChannelType.BRACKET else None
            ),
        )
        session.add(channel)
        session.flush()
        logger.info("Channel %d (#%s, %s) created in group %d",
                    channel.id, name, kind.value, group_id)
        return channel


def fork_from_message(
    engine: Engine,
    subject: str | None,
    message_id: int,
    channel_type: str,
    name: str,
    *,
    event_date: int | None = None,
    bracket_question: str | None = None,
) -> Channel:
    """Spin a message off into a new channel one fork level deeper.

    The source message records where it was forked to, and the parent
    channel gets a system message announcing the fork.
    """
    kind = parse_channel_type(channel_type)
    name = _clean_name(name)

    with get_session(engine) as session:
        user = get_current_user(session, subject)
        message = get_message_or_404(session, message_id)
        parent = get_channel_or_404(session, message.channel_id)
        require_membership(session, parent.group_id, user.id)

        now = now_ms()
        channel = Channel(
            group_id=parent.group_id,
            name=name,
            type=kind.value,
            created_by=user.id,
            created_at=now,
            parent_channel_id=parent.id,
            parent_message_id=message.id,
            fork_depth=parent.fork_depth + 1,
            is_archived=False,
            event_date=event_date,
            bracket_question=bracket_question,
            bracket_status=(
                BracketStatus.NOMINATING.value if kind == ChannelType.BRACKET else None
            ),
        )
        session.add(channel)
        session.flush()

        message.forked_to_channel_id = channel.id
        session.add(Message(
            channel_id=parent.id,
            author_id=user.id,
            body=f"Forked to #{name}",
            created_at=now,
            is_deleted=False,
            thread_reply_count=0,
            message_type=MessageType.SYSTEM.value,
        ))
        logger.info("Message %d forked into channel %d (depth %d)",
                    message.id, channel.id, channel.fork_depth)
        return channel


def update_channel(
    engine: Engine,
    subject: str | None,
    channel_id: int,
    *,
    name: str | None = None,
    icon: str | None = None,
) -> Channel:
    """Rename and/or re-icon a channel.  An empty *icon* clears it."""
    with get_session(engine) as session:
        user = get_current_user(session, subject)
        channel = get_channel_or_404(session, channel_id)
        require_membership(session, channel.group_id, user.id)

        if name is not None:
            channel.name = _clean_name(name)
        if icon is not None:
            channel.icon = icon or None
        return channel


def archive_channel(engine: Engine, subject: str | None, channel_id: int) -> Channel:
    with get_session(engine) as session:
        user = get_current_user(session, subject)
        channel = get_channel_or_404(session, channel_id)
        require_membership(session, channel.group_id, user.id, Role.ADMIN)

        if not channel.is_archived:
            channel.is_archived = True
            channel.archived_at = now_ms()
            logger.info("Channel %d archived by user %d", channel.id, user.id)
        return channel


# ---------------------------------------------------------------------------
# Cron
# ---------------------------------------------------------------------------
def archive_past_events(engine: Engine, now: int | None = None) -> int:
    """Archive every live event channel whose date has passed.

    The end date is used when set, otherwise the start date.  Event
    channels without any date are left alone.  Returns the number of
    channels archived.
    """
    now = now_ms() if now is None else now
    archived = 0

    with get_session(engine) as session:
        candidates = session.scalars(
            select(Channel).where(
                Channel.type == ChannelType.EVENT.value,
                Channel.is_archived.is_(False),
            )
        ).all()

        for channel in candidates:
            ends_at = channel.event_end_date or channel.event_date
            if ends_at is None or ends_at >= now:
                continue
            channel.is_archived = True
            channel.archived_at = now
            archived += 1

    if archived:
        logger.info("Archived %d past event channel(s)", archived)
    return archived
