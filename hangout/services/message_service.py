"""
hangout.services.message_service — Messages & Thread Counters
==============================================================

Send, edit, soft-delete and read messages.

Thread counters are denormalised onto the parent message:
``thread_reply_count`` is bumped when a reply is sent and decremented when
a live reply is soft-deleted (never below zero).  If the two ever drift,
:func:`reconcile_thread_reply_count` recomputes the value from the rows.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import func, select

from hangout.constants import now_ms
from hangout.database.engine import get_session
from hangout.database.models import Channel, ChannelType, Message, MessageType
from hangout.errors import NotFound, PermissionDenied, ValidationError
from hangout.services.group_service import touch_membership
from hangout.services.permissions import (
    get_channel_or_404,
    get_current_user,
    get_message_or_404,
    require_membership,
)

if TYPE_CHECKING:
    from sqlalchemy import Engine
    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200


# ---------------------------------------------------------------------------
# Send / edit / delete
# ---------------------------------------------------------------------------
def send_message(
    engine: Engine,
    subject: str | None,
    channel_id: int,
    body: str,
    thread_parent_id: int | None = None,
) -> Message:
    """Post a message, optionally as a reply in a thread."""
    if not body.strip():
        raise ValidationError("Message body cannot be empty")

    with get_session(engine) as session:
        user = get_current_user(session, subject)
        channel = get_channel_or_404(session, channel_id)
        require_membership(session, channel.group_id, user.id)

        parent = None
        if thread_parent_id is not None:
            parent = session.get(Message, thread_parent_id)
            if parent is None:
                raise NotFound("Parent message not found")
            if parent.channel_id != channel_id:
                raise ValidationError("Thread parent belongs to another channel")

        now = now_ms()
        message = Message(
            channel_id=channel_id,
            author_id=user.id,
            body=body,
            created_at=now,
            is_deleted=False,
            thread_parent_id=thread_parent_id,
            thread_reply_count=0,
            message_type=MessageType.TEXT.value,
        )
        session.add(message)

        if parent is not None:
            parent.thread_reply_count = (parent.thread_reply_count or 0) + 1
            parent.thread_last_reply_at = now

        touch_membership(session, channel.group_id, user.id)
        session.flush()
        return message


def edit_message(
    engine: Engine, subject: str | None, message_id: int, body: str
) -> Message:
    if not body.strip():
        raise ValidationError("Message body cannot be empty")

    with get_session(engine) as session:
        user = get_current_user(session, subject)
        message = get_message_or_404(session, message_id)
        if message.author_id != user.id:
            raise PermissionDenied("Can only edit your own messages")
        message.body = body
        message.edited_at = now_ms()
        return message


def delete_message(engine: Engine, subject: str | None, message_id: int) -> None:
    """Soft-delete the caller's own message.

    Deleting a live thread reply decrements its parent's counter.
    """
    with get_session(engine) as session:
        user = get_current_user(session, subject)
        message = get_message_or_404(session, message_id)
        if message.author_id != user.id:
            raise PermissionDenied("Can only delete your own messages")
        if message.is_deleted:
            return

        message.is_deleted = True
        if message.thread_parent_id is not None:
            parent = session.get(Message, message.thread_parent_id)
            if parent is not None:
                parent.thread_reply_count = max((parent.thread_reply_count or 0) - 1, 0)


def reconcile_thread_reply_count(engine: Engine, message_id: int) -> tuple[int, int]:
    """Recompute a parent's reply counter from its live replies.

    Returns ``(old, new)``.
    """
    with get_session(engine) as session:
        parent = get_message_or_404(session, message_id)
        live = session.scalar(
            select(func.count(Message.id)).where(
                Message.thread_parent_id == message_id,
                Message.is_deleted.is_(False),
            )
        ) or 0
        old = parent.thread_reply_count
        if old != live:
            logger.warning(
                "Thread counter drift on message %d: stored=%d actual=%d",
                message_id, old, live,
            )
            parent.thread_reply_count = live
        return old, live


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def list_channel_messages(
    engine: Engine,
    subject: str | None,
    channel_id: int,
    limit: int = DEFAULT_PAGE_SIZE,
    before: int | None = None,
) -> list[Message]:
    """Top-level messages, newest first.  *before* is a ``created_at`` cursor."""
    limit = max(1, min(limit, MAX_PAGE_SIZE))

    with get_session(engine) as session:
        user = get_current_user(session, subject)
        channel = get_channel_or_404(session, channel_id)
        require_membership(session, channel.group_id, user.id)

        stmt = select(Message).where(
            Message.channel_id == channel_id,
            Message.thread_parent_id.is_(None),
        )
        if before is not None:
            stmt = stmt.where(Message.created_at < before)
        stmt = stmt.order_by(Message.created_at.desc(), Message.id.desc()).limit(limit)
        return list(session.scalars(stmt))


def list_thread(engine: Engine, subject: str | None, parent_id: int) -> list[Message]:
    with get_session(engine) as session:
        user = get_current_user(session, subject)
        parent = get_message_or_404(session, parent_id)
        channel = get_channel_or_404(session, parent.channel_id)
        require_membership(session, channel.group_id, user.id)

        return list(session.scalars(
            select(Message)
            .where(Message.thread_parent_id == parent_id)
            .order_by(Message.created_at, Message.id)
        ))


def search_messages(
    engine: Engine, subject: str | None, channel_id: int, query: str
) -> list[Message]:
    """Case-insensitive substring search over live message bodies."""
    query = query.strip()
    if not query:
        return []

    with get_session(engine) as session:
        user = get_current_user(session, subject)
        channel = get_channel_or_404(session, channel_id)
        require_membership(session, channel.group_id, user.id)

        return list(session.scalars(
            select(Message)
            .where(
                Message.channel_id == channel_id,
                Message.is_deleted.is_(False),
                Message.body.ilike(f"%{query}%"),
            )
            .order_by(Message.created_at.desc())
            .limit(MAX_PAGE_SIZE)
        ))


# ---------------------------------------------------------------------------
# Senpai (internal, no caller identity)
# ---------------------------------------------------------------------------
def get_hangout_channel(session: Session, group_id: int) -> Channel | None:
    return session.scalar(
        select(Channel)
        .where(Channel.group_id == group_id, Channel.type == ChannelType.HANGOUT.value)
        .order_by(Channel.created_at, Channel.id)
        .limit(1)
    )


def get_recent_for_senpai(session: Session, group_id: int, limit: int) -> list[Message]:
    """The last *limit* messages of the group's hangout channel, oldest first."""
    hangout = get_hangout_channel(session, group_id)
    if hangout is None:
        return []

    newest_first = session.scalars(
        select(Message)
        .where(Message.channel_id == hangout.id, Message.is_deleted.is_(False))
        .order_by(Message.created_at.desc(), Message.id.desc())
        .limit(limit)
    ).all()
    return list(reversed(newest_first))


def post_senpai_message(
    engine: Engine, channel_id: int, body: str, trigger_type: str
) -> Message:
    """Insert a Senpai reply, attributed to the channel's creator."""
    with get_session(engine) as session:
        channel = get_channel_or_404(session, channel_id)
        message = Message(
            channel_id=channel.id,
            author_id=channel.created_by,
            body=body,
            created_at=now_ms(),
            is_deleted=False,
            thread_reply_count=0,
            message_type=MessageType.SENPAI.value,
            senpai_trigger=trigger_type,
        )
        session.add(message)
        session.flush()
        logger.info("Senpai posted message %d in channel %d (%s)",
                    message.id, channel.id, trigger_type)
        return message
