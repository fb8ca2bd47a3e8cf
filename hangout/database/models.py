"""
hangout.database.models — SQLAlchemy 2.0 Data Models
=====================================================

Tables:
- users                 — One row per authenticated identity
- groups                — Friend groups (Hall of Fame + Senpai settings)
- group_members         — (group, user) membership with role
- channels              — hangout / event / bracket channels, forkable
- messages              — Channel messages with thread counters
- reactions             — (message, user, emoji) triples
- pins                  — 📌 pin events
- hall_of_fame          — Enshrined messages, one per (group, message)
- splits / split_items / split_item_claims — Bills and who ate what
- split_balances        — Net directed debts produced by settlement
- event_rsvps / event_checklist / event_flights / event_accommodations
- senpai_memory         — Context snippets fed into Senpai prompts
- notifications         — Per-user notification rows

Conventions: money is integer minor units (cents); every timestamp is
epoch milliseconds in a ``BigInteger`` column; role / status / type
columns hold values of the ``StrEnum`` classes below and nothing else.
"""

from __future__ import annotations

import enum

from sqlalchemy import (
    BigInteger,
    Boolean,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from hangout.constants import now_ms


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Hangout ORM models."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class Role(enum.StrEnum):
    """Membership roles, strictly ordered owner > admin > member."""
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"

    @property
    def rank(self) -> int:
        return _ROLE_RANK[self]

    def at_least(self, minimum: Role) -> bool:
        return self.rank >= minimum.rank


_ROLE_RANK: dict[Role, int] = {
    Role.OWNER: 3,
    Role.ADMIN: 2,
    Role.MEMBER: 1,
}


class SenpaiFrequency(enum.StrEnum):
    QUIET = "quiet"
    NORMAL = "normal"
    CHATTY = "chatty"


class ChannelType(enum.StrEnum):
    HANGOUT = "hangout"
    EVENT = "event"
    BRACKET = "bracket"


class BracketStatus(enum.StrEnum):
    NOMINATING = "nominating"
    VOTING = "voting"
    COMPLETE = "complete"


class MessageType(enum.StrEnum):
    """Stored values.  Only text, system and senpai are written here."""
    TEXT = "text"
    SYSTEM = "system"
    SENPAI = "senpai"
    BRACKET_RESULT = "bracket_result"
    GAME_SCORE = "game_score"
    SPLIT_REQUEST = "split_request"


class SplitStatus(enum.StrEnum):
    """Lifecycle: claiming → calculated → settled."""
    CLAIMING = "claiming"
    CALCULATED = "calculated"
    SETTLED = "settled"


class RsvpStatus(enum.StrEnum):
    GOING = "going"
    MAYBE = "maybe"
    NOT_GOING = "not_going"


class BookingStatus(enum.StrEnum):
    OPTION = "option"
    BOOKED = "booked"


class AccommodationType(enum.StrEnum):
    AIRBNB = "airbnb"
    HOTEL = "hotel"
    HOSTEL = "hostel"
    OTHER = "other"


class MemoryType(enum.StrEnum):
    INSIDE_JOKE = "inside_joke"
    RUNNING_BIT = "running_bit"
    PREFERENCE = "preference"
    MILESTONE = "milestone"


class NotificationType(enum.StrEnum):
    MESSAGE = "message"
    MENTION = "mention"
    REACTION = "reaction"
    EVENT_RSVP = "event_rsvp"
    BRACKET_VOTE = "bracket_vote"
    SPLIT_REQUEST = "split_request"
    HALL_OF_FAME = "hall_of_fame"
    SENPAI = "senpai"


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    subject: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    avatar_url: Mapped[str | None] = mapped_column(String(500), default=None)
    created_at: Mapped[int] = mapped_column(BigInteger, default=now_ms)

    __table_args__ = (
        Index("ix_users_username", "username"),
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"


# ---------------------------------------------------------------------------
# Groups & membership
# ---------------------------------------------------------------------------
class Group(Base):
    __tablename__ = "groups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    created_by: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    created_at: Mapped[int] = mapped_column(BigInteger, default=now_ms)
    invite_code: Mapped[str] = mapped_column(String(16), nullable=False, unique=True)
    hall_of_fame_threshold: Mapped[int | None] = mapped_column(Integer, default=None)

    # Senpai
    senpai_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    senpai_frequency: Mapped[str] = mapped_column(
        String(10), nullable=False, default=SenpaiFrequency.NORMAL.value
    )
    senpai_personality: Mapped[str | None] = mapped_column(Text, default=None)

    members: Mapped[list[GroupMember]] = relationship(
        back_populates="group", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Group id={self.id} name={self.name!r}>"


class GroupMember(Base):
    __tablename__ = "group_members"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    group_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    role: Mapped[str] = mapped_column(String(10), nullable=False, default=Role.MEMBER.value)
    nickname: Mapped[str | None] = mapped_column(String(100), default=None)
    joined_at: Mapped[int] = mapped_column(BigInteger, default=now_ms)
    last_active_at: Mapped[int] = mapped_column(BigInteger, default=now_ms)

    group: Mapped[Group] = relationship(back_populates="members")
    user: Mapped[User] = relationship()

    __table_args__ = (
        UniqueConstraint("group_id", "user_id", name="uq_group_members_group_user"),
        Index("ix_group_members_user", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<GroupMember group={self.group_id} user={self.user_id} role={self.role}>"


# ---------------------------------------------------------------------------
# Channels
# ---------------------------------------------------------------------------
class Channel(Base):
    """A conversation space inside a group.

    ``type`` never changes after creation.  Forked channels remember the
    channel and message they were forked from.
    """
    __tablename__ = "channels"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    group_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    icon: Mapped[str | None] = mapped_column(String(50), default=None)
    type: Mapped[str] = mapped_column(String(10), nullable=False)
    created_by: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    created_at: Mapped[int] = mapped_column(BigInteger, default=now_ms)

    # Fork relationships
    parent_channel_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("channels.id", ondelete="SET NULL"), default=None
    )
    parent_message_id: Mapped[int | None] = mapped_column(Integer, default=None)
    fork_depth: Mapped[int] = mapped_column(Integer, default=0)

    # State
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False)
    archived_at: Mapped[int | None] = mapped_column(BigInteger, default=None)

    # Event-specific
    event_date: Mapped[int | None] = mapped_column(BigInteger, default=None)
    event_end_date: Mapped[int | None] = mapped_column(BigInteger, default=None)
    event_location: Mapped[str | None] = mapped_column(String(200), default=None)

    # Bracket-specific
    bracket_question: Mapped[str | None] = mapped_column(Text, default=None)
    bracket_status: Mapped[str | None] = mapped_column(String(12), default=None)

    __table_args__ = (
        Index("ix_channels_group_type", "group_id", "type"),
        Index("ix_channels_group_archived", "group_id", "is_archived"),
        Index("ix_channels_parent", "parent_channel_id"),
    )

    def __repr__(self) -> str:
        return f"<Channel id={self.id} name={self.name!r} type={self.type!r}>"


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------
class Message(Base):
    """A chat message.

    ``thread_reply_count`` equals the number of live replies whose
    ``thread_parent_id`` points here.  It is maintained incrementally by
    :mod:`hangout.services.message_service`, which also offers a
    reconciliation path.
    """
    __tablename__ = "messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    channel_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("channels.id", ondelete="CASCADE"), nullable=False
    )
    author_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    body: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, default=now_ms)
    edited_at: Mapped[int | None] = mapped_column(BigInteger, default=None)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)

    # Threads
    thread_parent_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("messages.id", ondelete="SET NULL"), default=None
    )
    thread_reply_count: Mapped[int] = mapped_column(Integer, default=0)
    thread_last_reply_at: Mapped[int | None] = mapped_column(BigInteger, default=None)

    # Fork tracking
    forked_to_channel_id: Mapped[int | None] = mapped_column(Integer, default=None)

    message_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=MessageType.TEXT.value
    )
    senpai_trigger: Mapped[str | None] = mapped_column(String(50), default=None)

    __table_args__ = (
        Index("ix_messages_channel_created", "channel_id", "created_at"),
        Index("ix_messages_thread_created", "thread_parent_id", "created_at"),
        Index("ix_messages_author_created", "author_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Message id={self.id} channel={self.channel_id} type={self.message_type}>"


# ---------------------------------------------------------------------------
# Reactions, pins, Hall of Fame
# ---------------------------------------------------------------------------
class Reaction(Base):
    __tablename__ = "reactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    message_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("messages.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    emoji: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, default=now_ms)

    __table_args__ = (
        UniqueConstraint(
            "message_id", "user_id", "emoji", name="uq_reactions_message_user_emoji"
        ),
        Index("ix_reactions_message_emoji", "message_id", "emoji"),
    )

    def __repr__(self) -> str:
        return f"<Reaction message={self.message_id} user={self.user_id} emoji={self.emoji!r}>"


class Pin(Base):
    """One row per pin event (not deduplicated per message)."""
    __tablename__ = "pins"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    channel_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("channels.id", ondelete="CASCADE"), nullable=False
    )
    message_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("messages.id", ondelete="CASCADE"), nullable=False
    )
    pinned_by: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    pinned_at: Mapped[int] = mapped_column(BigInteger, default=now_ms)

    __table_args__ = (
        Index("ix_pins_channel_pinned", "channel_id", "pinned_at"),
    )

    def __repr__(self) -> str:
        return f"<Pin id={self.id} message={self.message_id}>"


class HallOfFameEntry(Base):
    """A message enshrined once its 🏆 unique-reactor count met the threshold."""
    __tablename__ = "hall_of_fame"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    group_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False
    )
    message_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("messages.id", ondelete="CASCADE"), nullable=False
    )
    channel_id: Mapped[int] = mapped_column(Integer, nullable=False)
    author_id: Mapped[int] = mapped_column(Integer, nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    trophy_count: Mapped[int] = mapped_column(Integer, nullable=False)
    enshrine_date: Mapped[int] = mapped_column(BigInteger, default=now_ms)

    __table_args__ = (
        UniqueConstraint("group_id", "message_id", name="uq_hall_of_fame_group_message"),
        Index("ix_hall_of_fame_group_date", "group_id", "enshrine_date"),
    )

    def __repr__(self) -> str:
        return f"<HallOfFameEntry group={self.group_id} message={self.message_id}>"


# ---------------------------------------------------------------------------
# Bill splits
# ---------------------------------------------------------------------------
class Split(Base):
    __tablename__ = "splits"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    channel_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("channels.id", ondelete="CASCADE"), nullable=False
    )
    group_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    total_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    tax_amount: Mapped[int] = mapped_column(Integer, default=0)
    tip_amount: Mapped[int] = mapped_column(Integer, default=0)
    created_by: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    created_at: Mapped[int] = mapped_column(BigInteger, default=now_ms)
    status: Mapped[str] = mapped_column(
        String(12), nullable=False, default=SplitStatus.CLAIMING.value
    )

    items: Mapped[list[SplitItem]] = relationship(
        back_populates="split", cascade="all, delete-orphan", order_by="SplitItem.id"
    )

    __table_args__ = (
        Index("ix_splits_channel", "channel_id"),
        Index("ix_splits_group", "group_id"),
    )

    def __repr__(self) -> str:
        return f"<Split id={self.id} name={self.name!r} status={self.status}>"


class SplitItem(Base):
    __tablename__ = "split_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    split_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("splits.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, default=1)

    split: Mapped[Split] = relationship(back_populates="items")
    claims: Mapped[list[SplitItemClaim]] = relationship(
        cascade="all, delete-orphan", order_by="SplitItemClaim.claimed_at"
    )

    @property
    def claimant_ids(self) -> list[int]:
        return [c.user_id for c in self.claims]

    def __repr__(self) -> str:
        return f"<SplitItem id={self.id} name={self.name!r} price={self.price}>"


class SplitItemClaim(Base):
    """A user claiming (a share of) one split item."""
    __tablename__ = "split_item_claims"

    item_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("split_items.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    claimed_at: Mapped[int] = mapped_column(BigInteger, default=now_ms)

    def __repr__(self) -> str:
        return f"<SplitItemClaim item={self.item_id} user={self.user_id}>"


class SplitBalance(Base):
    """A net directed debt edge: ``from_user_id`` owes ``to_user_id``."""
    __tablename__ = "split_balances"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    split_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("splits.id", ondelete="CASCADE"), nullable=False
    )
    channel_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("channels.id", ondelete="CASCADE"), nullable=False
    )
    group_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False
    )
    from_user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    to_user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    is_paid: Mapped[bool] = mapped_column(Boolean, default=False)
    paid_at: Mapped[int | None] = mapped_column(BigInteger, default=None)

    __table_args__ = (
        Index("ix_split_balances_split", "split_id"),
        Index("ix_split_balances_channel_paid", "channel_id", "is_paid"),
        Index("ix_split_balances_group_paid", "group_id", "is_paid"),
        Index("ix_split_balances_from_paid", "from_user_id", "is_paid"),
    )

    def __repr__(self) -> str:
        return (
            f"<SplitBalance {self.from_user_id}→{self.to_user_id} "
            f"amount={self.amount} paid={self.is_paid}>"
        )


# ---------------------------------------------------------------------------
# Event logistics
# ---------------------------------------------------------------------------
class EventRsvp(Base):
    __tablename__ = "event_rsvps"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    channel_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("channels.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(String(10), nullable=False)
    updated_at: Mapped[int] = mapped_column(BigInteger, default=now_ms)

    __table_args__ = (
        UniqueConstraint("channel_id", "user_id", name="uq_event_rsvps_channel_user"),
    )

    def __repr__(self) -> str:
        return f"<EventRsvp channel={self.channel_id} user={self.user_id} {self.status}>"


class EventChecklistItem(Base):
    __tablename__ = "event_checklist"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    channel_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("channels.id", ondelete="CASCADE"), nullable=False
    )
    item: Mapped[str] = mapped_column(String(200), nullable=False)
    assigned_to: Mapped[int | None] = mapped_column(Integer, default=None)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    created_by: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, default=now_ms)

    __table_args__ = (
        Index("ix_event_checklist_channel", "channel_id"),
    )

    def __repr__(self) -> str:
        return f"<EventChecklistItem id={self.id} item={self.item!r}>"


class EventFlight(Base):
    __tablename__ = "event_flights"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    channel_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("channels.id", ondelete="CASCADE"), nullable=False
    )
    created_by: Mapped[int] = mapped_column(Integer, nullable=False)
    airline: Mapped[str] = mapped_column(String(100), nullable=False)
    flight_number: Mapped[str] = mapped_column(String(20), nullable=False)
    departure_airport: Mapped[str] = mapped_column(String(10), nullable=False)
    arrival_airport: Mapped[str] = mapped_column(String(10), nullable=False)
    departure_time: Mapped[int] = mapped_column(BigInteger, nullable=False)
    arrival_time: Mapped[int] = mapped_column(BigInteger, nullable=False)
    status: Mapped[str] = mapped_column(
        String(10), nullable=False, default=BookingStatus.OPTION.value
    )
    passengers: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    notes: Mapped[str | None] = mapped_column(Text, default=None)
    created_at: Mapped[int] = mapped_column(BigInteger, default=now_ms)

    __table_args__ = (
        Index("ix_event_flights_channel", "channel_id"),
    )

    def __repr__(self) -> str:
        return f"<EventFlight id={self.id} {self.airline} {self.flight_number}>"


class EventAccommodation(Base):
    __tablename__ = "event_accommodations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    channel_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("channels.id", ondelete="CASCADE"), nullable=False
    )
    created_by: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[str] = mapped_column(String(10), nullable=False)
    address: Mapped[str | None] = mapped_column(String(300), default=None)
    check_in: Mapped[int | None] = mapped_column(BigInteger, default=None)
    check_out: Mapped[int | None] = mapped_column(BigInteger, default=None)
    booking_link: Mapped[str | None] = mapped_column(String(500), default=None)
    price_per_night: Mapped[int | None] = mapped_column(Integer, default=None)
    total_price: Mapped[int | None] = mapped_column(Integer, default=None)
    status: Mapped[str] = mapped_column(
        String(10), nullable=False, default=BookingStatus.OPTION.value
    )
    guests: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    notes: Mapped[str | None] = mapped_column(Text, default=None)
    created_at: Mapped[int] = mapped_column(BigInteger, default=now_ms)

    __table_args__ = (
        Index("ix_event_accommodations_channel", "channel_id"),
    )

    def __repr__(self) -> str:
        return f"<EventAccommodation id={self.id} name={self.name!r}>"


# ---------------------------------------------------------------------------
# Senpai
# ---------------------------------------------------------------------------
class SenpaiMemory(Base):
    """Free-form group context fed into Senpai prompts.

    Rows are produced by a separate extraction process; Hangout only
    stores and reads them.
    """
    __tablename__ = "senpai_memory"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    group_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False
    )
    memory_type: Mapped[str] = mapped_column(String(20), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    source_message_ids: Mapped[list | None] = mapped_column(JSONB, default=None)
    created_at: Mapped[int] = mapped_column(BigInteger, default=now_ms)
    relevance_score: Mapped[float] = mapped_column(Float, default=1.0)

    __table_args__ = (
        Index("ix_senpai_memory_group_relevance", "group_id", "relevance_score"),
    )

    def __repr__(self) -> str:
        return f"<SenpaiMemory id={self.id} type={self.memory_type}>"


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------
class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    group_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False
    )
    channel_id: Mapped[int | None] = mapped_column(Integer, default=None)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[int] = mapped_column(BigInteger, default=now_ms)

    __table_args__ = (
        Index("ix_notifications_user_unread", "user_id", "is_read", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Notification id={self.id} user={self.user_id} type={self.type}>"
