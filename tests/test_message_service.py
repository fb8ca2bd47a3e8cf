"""
tests/test_message_service.py — Messages & Thread Counters
===========================================================
"""

from __future__ import annotations

import pytest
from sqlalchemy.orm import Session

from conftest import hangout_channel_id, make_group
from hangout.database.models import Channel, GroupMember, Message
from hangout.errors import NotFound, PermissionDenied, ValidationError
from hangout.services import channel_service, message_service


@pytest.fixture
def channel_id(db_engine, users):
    return hangout_channel_id(db_engine, make_group(db_engine, "alice", "bob", "carol"))


def _message(engine, message_id: int) -> Message:
    with Session(engine) as session:
        return session.get(Message, message_id)


class TestSend:
    def test_blank_body_rejected(self, db_engine, channel_id):
        with pytest.raises(ValidationError):
            message_service.send_message(db_engine, "alice", channel_id, "  \n ")

    def test_score_shaped_body_is_plain_text(self, db_engine, channel_id):
        sent = message_service.send_message(
            db_engine, "alice", channel_id, "Wordle 1,024 3/6\n\u2b1b\U0001f7e8\U0001f7e9"
        )
        assert _message(db_engine, sent.id).message_type == "text"

    def test_non_member_rejected(self, db_engine, users, channel_id):
        with pytest.raises(PermissionDenied):
            message_service.send_message(db_engine, "dave", channel_id, "hi")

    def test_sending_touches_membership(self, db_engine, users, channel_id):
        with Session(db_engine) as session:
            session.query(GroupMember).filter_by(user_id=users["bob"]).update(
                {"last_active_at": 0}
            )
            session.commit()

        message_service.send_message(db_engine, "bob", channel_id, "hi")

        with Session(db_engine) as session:
            after = session.query(GroupMember).filter_by(user_id=users["bob"]).one()
            assert after.last_active_at > 0

    def test_parent_must_be_in_same_channel(self, db_engine, users, channel_id):
        other = channel_service.create_channel(
            db_engine, "alice", make_group(db_engine, "alice"), "Elsewhere", "event"
        )
        parent = message_service.send_message(db_engine, "alice", other.id, "over here")
        with pytest.raises(ValidationError):
            message_service.send_message(
                db_engine, "alice", channel_id, "reply", thread_parent_id=parent.id
            )

    def test_missing_parent(self, db_engine, channel_id):
        with pytest.raises(NotFound):
            message_service.send_message(
                db_engine, "alice", channel_id, "reply", thread_parent_id=999
            )


class TestThreads:
    def test_replies_bump_parent_counter(self, db_engine, channel_id):
        parent = message_service.send_message(db_engine, "alice", channel_id, "plans?")
        message_service.send_message(db_engine, "bob", channel_id, "yes", thread_parent_id=parent.id)
        reply = message_service.send_message(
            db_engine, "carol", channel_id, "me too", thread_parent_id=parent.id
        )

        stored = _message(db_engine, parent.id)
        assert stored.thread_reply_count == 2
        assert stored.thread_last_reply_at == reply.created_at

        thread = message_service.list_thread(db_engine, "alice", parent.id)
        assert [m.body for m in thread] == ["yes", "me too"]

    def test_delete_reply_decrements(self, db_engine, channel_id):
        parent = message_service.send_message(db_engine, "alice", channel_id, "plans?")
        reply = message_service.send_message(
            db_engine, "bob", channel_id, "yes", thread_parent_id=parent.id
        )

        message_service.delete_message(db_engine, "bob", reply.id)
        message_service.delete_message(db_engine, "bob", reply.id)

        assert _message(db_engine, parent.id).thread_reply_count == 0
        assert _message(db_engine, reply.id).is_deleted is True

    def test_reconcile_fixes_drift(self, db_engine, channel_id):
        parent = message_service.send_message(db_engine, "alice", channel_id, "plans?")
        message_service.send_message(db_engine, "bob", channel_id, "yes", thread_parent_id=parent.id)

        with Session(db_engine) as session:
            session.get(Message, parent.id).thread_reply_count = 7
            session.commit()

        assert message_service.reconcile_thread_reply_count(db_engine, parent.id) == (7, 1)
        assert _message(db_engine, parent.id).thread_reply_count == 1
        assert message_service.reconcile_thread_reply_count(db_engine, parent.id) == (1, 1)


class TestEditDelete:
    def test_only_author_edits(self, db_engine, channel_id):
        message = message_service.send_message(db_engine, "alice", channel_id, "typo")
        with pytest.raises(PermissionDenied):
            message_service.edit_message(db_engine, "bob", message.id, "fixed")

        edited = message_service.edit_message(db_engine, "alice", message.id, "fixed")
        assert edited.body == "fixed"
        assert edited.edited_at is not None

    def test_only_author_deletes(self, db_engine, channel_id):
        message = message_service.send_message(db_engine, "alice", channel_id, "mine")
        with pytest.raises(PermissionDenied):
            message_service.delete_message(db_engine, "bob", message.id)


class TestReads:
    def test_listing_is_top_level_newest_first(self, db_engine, channel_id):
        first = message_service.send_message(db_engine, "alice", channel_id, "one")
        message_service.send_message(db_engine, "bob", channel_id, "reply", thread_parent_id=first.id)
        message_service.send_message(db_engine, "carol", channel_id, "two")

        listed = message_service.list_channel_messages(db_engine, "alice", channel_id)
        assert [m.body for m in listed] == ["two", "one"]

        assert len(message_service.list_channel_messages(db_engine, "alice", channel_id, limit=1)) == 1

    def test_search_is_case_insensitive_and_skips_deleted(self, db_engine, channel_id):
        message_service.send_message(db_engine, "alice", channel_id, "Taco Tuesday?")
        gone = message_service.send_message(db_engine, "bob", channel_id, "tacos again")
        message_service.send_message(db_engine, "carol", channel_id, "pizza")
        message_service.delete_message(db_engine, "bob", gone.id)

        hits = message_service.search_messages(db_engine, "alice", channel_id, "TACO")
        assert [m.body for m in hits] == ["Taco Tuesday?"]
        assert message_service.search_messages(db_engine, "alice", channel_id, "  ") == []

    def test_recent_for_senpai_excludes_deleted(self, db_engine, channel_id):
        message_service.send_message(db_engine, "alice", channel_id, "a")
        gone = message_service.send_message(db_engine, "bob", channel_id, "b")
        message_service.send_message(db_engine, "carol", channel_id, "c")
        message_service.delete_message(db_engine, "bob", gone.id)

        with Session(db_engine) as session:
            group_id = session.get(Channel, channel_id).group_id
            recent = message_service.get_recent_for_senpai(session, group_id, 10)
            assert [m.body for m in recent] == ["a", "c"]
