"""Initial Hangout schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("subject", sa.String(255), nullable=False, unique=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("avatar_url", sa.String(500), nullable=True),
        sa.Column("created_at", sa.BigInteger(), nullable=True),
    )
    op.create_index("ix_users_username", "users", ["username"])

    op.create_table(
        "groups",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=True),
        sa.Column("invite_code", sa.String(16), nullable=False, unique=True),
        sa.Column("hall_of_fame_threshold", sa.Integer(), nullable=True),
        sa.Column("senpai_enabled", sa.Boolean(), nullable=True),
        sa.Column("senpai_frequency", sa.String(10), nullable=False, server_default="normal"),
        sa.Column("senpai_personality", sa.Text(), nullable=True),
    )

    op.create_table(
        "group_members",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("group_id", sa.Integer(), sa.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("role", sa.String(10), nullable=False, server_default="member"),
        sa.Column("nickname", sa.String(100), nullable=True),
        sa.Column("joined_at", sa.BigInteger(), nullable=True),
        sa.Column("last_active_at", sa.BigInteger(), nullable=True),
        sa.UniqueConstraint("group_id", "user_id", name="uq_group_members_group_user"),
    )
    op.create_index("ix_group_members_user", "group_members", ["user_id"])

    op.create_table(
        "channels",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("group_id", sa.Integer(), sa.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("icon", sa.String(50), nullable=True),
        sa.Column("type", sa.String(10), nullable=False),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=True),
        sa.Column("parent_channel_id", sa.Integer(), sa.ForeignKey("channels.id", ondelete="SET NULL"), nullable=True),
        sa.Column("parent_message_id", sa.Integer(), nullable=True),
        sa.Column("fork_depth", sa.Integer(), nullable=True),
        sa.Column("is_archived", sa.Boolean(), nullable=True),
        sa.Column("archived_at", sa.BigInteger(), nullable=True),
        sa.Column("event_date", sa.BigInteger(), nullable=True),
        sa.Column("event_end_date", sa.BigInteger(), nullable=True),
        sa.Column("event_location", sa.String(200), nullable=True),
        sa.Column("bracket_question", sa.Text(), nullable=True),
        sa.Column("bracket_status", sa.String(12), nullable=True),
    )
    op.create_index("ix_channels_group_type", "channels", ["group_id", "type"])
    op.create_index("ix_channels_group_archived", "channels", ["group_id", "is_archived"])
    op.create_index("ix_channels_parent", "channels", ["parent_channel_id"])

    op.create_table(
        "messages",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("channel_id", sa.Integer(), sa.ForeignKey("channels.id", ondelete="CASCADE"), nullable=False),
        sa.Column("author_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=True),
        sa.Column("edited_at", sa.BigInteger(), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=True),
        sa.Column("thread_parent_id", sa.Integer(), sa.ForeignKey("messages.id", ondelete="SET NULL"), nullable=True),
        sa.Column("thread_reply_count", sa.Integer(), nullable=True),
        sa.Column("thread_last_reply_at", sa.BigInteger(), nullable=True),
        sa.Column("forked_to_channel_id", sa.Integer(), nullable=True),
        sa.Column("message_type", sa.String(20), nullable=False, server_default="text"),
        sa.Column("senpai_trigger", sa.String(50), nullable=True),
    )
    op.create_index("ix_messages_channel_created", "messages", ["channel_id", "created_at"])
    op.create_index("ix_messages_thread_created", "messages", ["thread_parent_id", "created_at"])
    op.create_index("ix_messages_author_created", "messages", ["author_id", "created_at"])

    op.create_table(
        "reactions",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("message_id", sa.Integer(), sa.ForeignKey("messages.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("emoji", sa.String(64), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=True),
        sa.UniqueConstraint("message_id", "user_id", "emoji", name="uq_reactions_message_user_emoji"),
    )
    op.create_index("ix_reactions_message_emoji", "reactions", ["message_id", "emoji"])

    op.create_table(
        "pins",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("channel_id", sa.Integer(), sa.ForeignKey("channels.id", ondelete="CASCADE"), nullable=False),
        sa.Column("message_id", sa.Integer(), sa.ForeignKey("messages.id", ondelete="CASCADE"), nullable=False),
        sa.Column("pinned_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("pinned_at", sa.BigInteger(), nullable=True),
    )
    op.create_index("ix_pins_channel_pinned", "pins", ["channel_id", "pinned_at"])

    op.create_table(
        "hall_of_fame",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("group_id", sa.Integer(), sa.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False),
        sa.Column("message_id", sa.Integer(), sa.ForeignKey("messages.id", ondelete="CASCADE"), nullable=False),
        sa.Column("channel_id", sa.Integer(), nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("trophy_count", sa.Integer(), nullable=False),
        sa.Column("enshrine_date", sa.BigInteger(), nullable=True),
        sa.UniqueConstraint("group_id", "message_id", name="uq_hall_of_fame_group_message"),
    )
    op.create_index("ix_hall_of_fame_group_date", "hall_of_fame", ["group_id", "enshrine_date"])

    op.create_table(
        "splits",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("channel_id", sa.Integer(), sa.ForeignKey("channels.id", ondelete="CASCADE"), nullable=False),
        sa.Column("group_id", sa.Integer(), sa.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("total_amount", sa.Integer(), nullable=False),
        sa.Column("tax_amount", sa.Integer(), nullable=True),
        sa.Column("tip_amount", sa.Integer(), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=True),
        sa.Column("status", sa.String(12), nullable=False, server_default="claiming"),
    )
    op.create_index("ix_splits_channel", "splits", ["channel_id"])
    op.create_index("ix_splits_group", "splits", ["group_id"])

    op.create_table(
        "split_items",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("split_id", sa.Integer(), sa.ForeignKey("splits.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=True),
    )

    op.create_table(
        "split_item_claims",
        sa.Column("item_id", sa.Integer(), sa.ForeignKey("split_items.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("claimed_at", sa.BigInteger(), nullable=True),
    )

    op.create_table(
        "split_balances",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("split_id", sa.Integer(), sa.ForeignKey("splits.id", ondelete="CASCADE"), nullable=False),
        sa.Column("channel_id", sa.Integer(), sa.ForeignKey("channels.id", ondelete="CASCADE"), nullable=False),
        sa.Column("group_id", sa.Integer(), sa.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False),
        sa.Column("from_user_id", sa.Integer(), nullable=False),
        sa.Column("to_user_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("is_paid", sa.Boolean(), nullable=True),
        sa.Column("paid_at", sa.BigInteger(), nullable=True),
    )
    op.create_index("ix_split_balances_split", "split_balances", ["split_id"])
    op.create_index("ix_split_balances_channel_paid", "split_balances", ["channel_id", "is_paid"])
    op.create_index("ix_split_balances_group_paid", "split_balances", ["group_id", "is_paid"])
    op.create_index("ix_split_balances_from_paid", "split_balances", ["from_user_id", "is_paid"])

    op.create_table(
        "event_rsvps",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("channel_id", sa.Integer(), sa.ForeignKey("channels.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", sa.String(10), nullable=False),
        sa.Column("updated_at", sa.BigInteger(), nullable=True),
        sa.UniqueConstraint("channel_id", "user_id", name="uq_event_rsvps_channel_user"),
    )

    op.create_table(
        "event_checklist",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("channel_id", sa.Integer(), sa.ForeignKey("channels.id", ondelete="CASCADE"), nullable=False),
        sa.Column("item", sa.String(200), nullable=False),
        sa.Column("assigned_to", sa.Integer(), nullable=True),
        sa.Column("is_completed", sa.Boolean(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=True),
    )
    op.create_index("ix_event_checklist_channel", "event_checklist", ["channel_id"])

    op.create_table(
        "event_flights",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("channel_id", sa.Integer(), sa.ForeignKey("channels.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=False),
        sa.Column("airline", sa.String(100), nullable=False),
        sa.Column("flight_number", sa.String(20), nullable=False),
        sa.Column("departure_airport", sa.String(10), nullable=False),
        sa.Column("arrival_airport", sa.String(10), nullable=False),
        sa.Column("departure_time", sa.BigInteger(), nullable=False),
        sa.Column("arrival_time", sa.BigInteger(), nullable=False),
        sa.Column("status", sa.String(10), nullable=False, server_default="option"),
        sa.Column("passengers", postgresql.JSONB(), nullable=False, server_default="[]"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.BigInteger(), nullable=True),
    )
    op.create_index("ix_event_flights_channel", "event_flights", ["channel_id"])

    op.create_table(
        "event_accommodations",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("channel_id", sa.Integer(), sa.ForeignKey("channels.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("type", sa.String(10), nullable=False),
        sa.Column("address", sa.String(300), nullable=True),
        sa.Column("check_in", sa.BigInteger(), nullable=True),
        sa.Column("check_out", sa.BigInteger(), nullable=True),
        sa.Column("booking_link", sa.String(500), nullable=True),
        sa.Column("price_per_night", sa.Integer(), nullable=True),
        sa.Column("total_price", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(10), nullable=False, server_default="option"),
        sa.Column("guests", postgresql.JSONB(), nullable=False, server_default="[]"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.BigInteger(), nullable=True),
    )
    op.create_index("ix_event_accommodations_channel", "event_accommodations", ["channel_id"])

    op.create_table(
        "senpai_memory",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("group_id", sa.Integer(), sa.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False),
        sa.Column("memory_type", sa.String(20), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("source_message_ids", postgresql.JSONB(), nullable=True),
        sa.Column("created_at", sa.BigInteger(), nullable=True),
        sa.Column("relevance_score", sa.Float(), nullable=True),
    )
    op.create_index("ix_senpai_memory_group_relevance", "senpai_memory", ["group_id", "relevance_score"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("group_id", sa.Integer(), sa.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False),
        sa.Column("channel_id", sa.Integer(), nullable=True),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.BigInteger(), nullable=True),
    )
    op.create_index("ix_notifications_user_unread", "notifications", ["user_id", "is_read", "created_at"])


def downgrade() -> None:
    for table in (
        "notifications",
        "senpai_memory",
        "event_accommodations",
        "event_flights",
        "event_checklist",
        "event_rsvps",
        "split_balances",
        "split_item_claims",
        "split_items",
        "splits",
        "hall_of_fame",
        "pins",
        "reactions",
        "messages",
        "channels",
        "group_members",
        "groups",
        "users",
    ):
        op.drop_table(table)
