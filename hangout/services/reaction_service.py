"""
hangout.services.reaction_service — Reactions, Pins & Hall of Fame
===================================================================

Adding a reaction is one transaction:

  dedup check → insert reaction → decide side effects → pin / enshrine

Side effects (see :mod:`hangout.engine.thresholds`) only ever add rows.
Removing a reaction never un-pins or un-enshrines a message, and
enshrinement happens at most once per (group, message), backed by the
``uq_hall_of_fame_group_message`` constraint.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import func, select

from hangout.constants import TROPHY_EMOJI, now_ms
from hangout.database.engine import get_session
from hangout.database.models import (
    Channel,
    HallOfFameEntry,
    Message,
    NotificationType,
    Pin,
    Reaction,
    Role,
)
from hangout.engine.reactions import ReactionSummary, aggregate_reactions, unique_reactors
from hangout.engine.thresholds import evaluate_side_effects
from hangout.errors import ValidationError
from hangout.services.notification_service import notify
from hangout.services.permissions import (
    get_channel_or_404,
    get_current_user,
    get_group_or_404,
    get_message_or_404,
    require_membership,
)

if TYPE_CHECKING:
    from sqlalchemy import Engine
    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def _message_and_channel(
    session: Session, message_id: int, user_id: int
) -> tuple[Message, Channel]:
    message = get_message_or_404(session, message_id)
    channel = get_channel_or_404(session, message.channel_id)
    require_membership(session, channel.group_id, user_id)
    return message, channel


def _reactions_for(session: Session, message_id: int) -> list[Reaction]:
    return list(session.scalars(
        select(Reaction)
        .where(Reaction.message_id == message_id)
        .order_by(Reaction.created_at, Reaction.id)
    ))


# ---------------------------------------------------------------------------
# Reactions
# ---------------------------------------------------------------------------
def get_reactions(
    engine: Engine, subject: str | None, message_id: int
) -> list[ReactionSummary]:
    with get_session(engine) as session:
        user = get_current_user(session, subject)
        _message_and_channel(session, message_id, user.id)
        return aggregate_reactions(_reactions_for(session, message_id))


def add_reaction(
    engine: Engine, subject: str | None, message_id: int, emoji: str
) -> bool:
    """React to a message.  Returns ``False`` if the reaction already existed."""
    emoji = emoji.strip()
    if not emoji:
        raise ValidationError("Emoji cannot be empty")

    with get_session(engine) as session:
        user = get_current_user(session, subject)
        message, channel = _message_and_channel(session, message_id, user.id)

        existing = session.scalar(
            select(Reaction.id).where(
                Reaction.message_id == message_id,
                Reaction.user_id == user.id,
                Reaction.emoji == emoji,
            )
        )
        if existing is not None:
            return False

        now = now_ms()
        session.add(Reaction(
            message_id=message_id, user_id=user.id, emoji=emoji, created_at=now
        ))
        session.flush()

        group = get_group_or_404(session, channel.group_id)
        reactors = unique_reactors(_reactions_for(session, message_id), emoji)
        already_enshrined = emoji == TROPHY_EMOJI and _is_enshrined(
            session, group.id, message_id
        )
        effects = evaluate_side_effects(
            emoji, len(reactors), group.hall_of_fame_threshold, already_enshrined
        )

        if effects.pin:
            session.add(Pin(
                channel_id=channel.id,
                message_id=message_id,
                pinned_by=user.id,
                pinned_at=now,
            ))

        if effects.enshrine:
            _enshrine(session, group.id, message, len(reactors), now)

        return True


def remove_reaction(
    engine: Engine, subject: str | None, message_id: int, emoji: str
) -> None:
    """Remove the caller's reaction.  Missing reactions are ignored."""
    with get_session(engine) as session:
        user = get_current_user(session, subject)
        _message_and_channel(session, message_id, user.id)

        reaction = session.scalar(
            select(Reaction).where(
                Reaction.message_id == message_id,
                Reaction.user_id == user.id,
                Reaction.emoji == emoji.strip(),
            )
        )
        if reaction is not None:
            session.delete(reaction)


# ---------------------------------------------------------------------------
# Hall of Fame
# ---------------------------------------------------------------------------
def _is_enshrined(session: Session, group_id: int, message_id: int) -> bool:
    return session.scalar(
        select(HallOfFameEntry.id).where(
            HallOfFameEntry.group_id == group_id,
            HallOfFameEntry.message_id == message_id,
        )
    ) is not None


def _enshrine(
    session: Session, group_id: int, message: Message, trophy_count: int, now: int
) -> HallOfFameEntry:
    entry = HallOfFameEntry(
        group_id=group_id,
        message_id=message.id,
        channel_id=message.channel_id,
        author_id=message.author_id,
        body=message.body,
        trophy_count=trophy_count,
        enshrine_date=now,
    )
    session.add(entry)
    notify(
        session,
        user_id=message.author_id,
        group_id=group_id,
        kind=NotificationType.HALL_OF_FAME,
        title="Your message made the Hall of Fame",
        body=message.body,
        channel_id=message.channel_id,
    )
    logger.info(
        "Message %d enshrined in group %d with %d trophies",
        message.id, group_id, trophy_count,
    )
    return entry


def list_hall_of_fame(
    engine: Engine, subject: str | None, group_id: int, limit: int = 50
) -> list[HallOfFameEntry]:
    with get_session(engine) as session:
        user = get_current_user(session, subject)
        require_membership(session, group_id, user.id)
        return list(session.scalars(
            select(HallOfFameEntry)
            .where(HallOfFameEntry.group_id == group_id)
            .order_by(HallOfFameEntry.enshrine_date.desc(), HallOfFameEntry.id.desc())
            .limit(limit)
        ))


def update_hall_of_fame_threshold(
    engine: Engine, subject: str | None, group_id: int, threshold: int
) -> int:
    """Admin+: set how many distinct 🏆 reactors enshrine a message."""
    if isinstance(threshold, bool) or not isinstance(threshold, int) or threshold < 1:
        raise ValidationError("Threshold must be a positive integer")

    with get_session(engine) as session:
        user = get_current_user(session, subject)
        require_membership(session, group_id, user.id, Role.ADMIN)
        group = get_group_or_404(session, group_id)
        group.hall_of_fame_threshold = threshold
        logger.info("Group %d Hall of Fame threshold set to %d", group_id, threshold)
        return threshold


# ---------------------------------------------------------------------------
# Pins
# ---------------------------------------------------------------------------
def list_pins(engine: Engine, subject: str | None, channel_id: int) -> list[Message]:
    """Pinned messages of a channel, each once, most recently pinned first."""
    with get_session(engine) as session:
        user = get_current_user(session, subject)
        channel = get_channel_or_404(session, channel_id)
        require_membership(session, channel.group_id, user.id)

        last_pinned = (
            select(Pin.message_id, func.max(Pin.pinned_at).label("last_pinned_at"))
            .where(Pin.channel_id == channel_id)
            .group_by(Pin.message_id)
            .subquery()
        )
        return list(session.scalars(
            select(Message)
            .join(last_pinned, last_pinned.c.message_id == Message.id)
            .where(Message.is_deleted.is_(False))
            .order_by(last_pinned.c.last_pinned_at.desc(), Message.id.desc())
        ))
