"""
tests/test_reaction_service.py — Reactions, Pins & Hall of Fame
================================================================
"""

from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from conftest import hangout_channel_id, make_group, make_user
from hangout.constants import PIN_EMOJI, TROPHY_EMOJI
from hangout.database.models import HallOfFameEntry, Notification, Pin, Reaction
from hangout.errors import PermissionDenied, ValidationError
from hangout.services import message_service, reaction_service

CREW = ("bob", "carol", "dave", "erin", "frank", "gina")


@pytest.fixture
def crew(db_engine, users):
    for subject in ("erin", "frank", "gina"):
        make_user(db_engine, subject)
    group_id = make_group(db_engine, "alice", *CREW)
    channel_id = hangout_channel_id(db_engine, group_id)
    message = message_service.send_message(db_engine, "alice", channel_id, "legendary take")
    return group_id, channel_id, message.id


def _count(engine, model, *where) -> int:
    with Session(engine) as session:
        return session.scalar(select(func.count()).select_from(model).where(*where))


class TestAddReaction:
    def test_duplicate_is_a_no_op(self, db_engine, crew):
        _, _, message_id = crew
        assert reaction_service.add_reaction(db_engine, "bob", message_id, "🔥") is True
        assert reaction_service.add_reaction(db_engine, "bob", message_id, " 🔥 ") is False
        assert _count(db_engine, Reaction, Reaction.message_id == message_id) == 1

    def test_empty_emoji_rejected(self, db_engine, crew):
        _, _, message_id = crew
        with pytest.raises(ValidationError):
            reaction_service.add_reaction(db_engine, "bob", message_id, "   ")

    def test_outsider_cannot_react(self, db_engine, crew):
        _, _, message_id = crew
        make_user(db_engine, "mallory")
        with pytest.raises(PermissionDenied):
            reaction_service.add_reaction(db_engine, "mallory", message_id, "🔥")

    def test_aggregation_by_emoji(self, db_engine, crew):
        _, _, message_id = crew
        reaction_service.add_reaction(db_engine, "bob", message_id, "🔥")
        reaction_service.add_reaction(db_engine, "carol", message_id, "😂")
        reaction_service.add_reaction(db_engine, "dave", message_id, "🔥")

        summaries = reaction_service.get_reactions(db_engine, "alice", message_id)
        assert [(s.emoji, s.count) for s in summaries] == [("🔥", 2), ("😂", 1)]

    def test_remove_missing_reaction_is_ignored(self, db_engine, crew):
        _, _, message_id = crew
        reaction_service.remove_reaction(db_engine, "bob", message_id, "🔥")
        assert _count(db_engine, Reaction) == 0


class TestPins:
    def test_every_pin_reaction_records_a_pin(self, db_engine, crew):
        _, channel_id, message_id = crew
        reaction_service.add_reaction(db_engine, "bob", message_id, PIN_EMOJI)
        reaction_service.add_reaction(db_engine, "carol", message_id, PIN_EMOJI)
        assert _count(db_engine, Pin, Pin.message_id == message_id) == 2

        pinned = reaction_service.list_pins(db_engine, "alice", channel_id)
        assert [m.id for m in pinned] == [message_id]

    def test_duplicate_pin_reaction_adds_no_pin(self, db_engine, crew):
        _, _, message_id = crew
        reaction_service.add_reaction(db_engine, "bob", message_id, PIN_EMOJI)
        reaction_service.add_reaction(db_engine, "bob", message_id, PIN_EMOJI)
        assert _count(db_engine, Pin) == 1

    def test_other_emoji_never_pins(self, db_engine, crew):
        _, _, message_id = crew
        reaction_service.add_reaction(db_engine, "bob", message_id, TROPHY_EMOJI)
        assert _count(db_engine, Pin) == 0

    def test_deleted_messages_drop_out_of_pin_list(self, db_engine, crew):
        _, channel_id, message_id = crew
        reaction_service.add_reaction(db_engine, "bob", message_id, PIN_EMOJI)
        message_service.delete_message(db_engine, "alice", message_id)
        assert reaction_service.list_pins(db_engine, "alice", channel_id) == []


class TestHallOfFame:
    def _trophies(self, engine, message_id, subjects):
        for subject in subjects:
            reaction_service.add_reaction(engine, subject, message_id, TROPHY_EMOJI)

    def test_default_threshold_is_five(self, db_engine, crew):
        group_id, _, message_id = crew

        self._trophies(db_engine, message_id, CREW[:4])
        assert _count(db_engine, HallOfFameEntry) == 0

        self._trophies(db_engine, message_id, CREW[4:5])
        entries = reaction_service.list_hall_of_fame(db_engine, "alice", group_id)
        assert len(entries) == 1
        assert entries[0].message_id == message_id
        assert entries[0].trophy_count == 5
        assert entries[0].body == "legendary take"

    def test_enshrined_only_once(self, db_engine, crew):
        group_id, _, message_id = crew
        self._trophies(db_engine, message_id, CREW)
        assert _count(db_engine, HallOfFameEntry, HallOfFameEntry.group_id == group_id) == 1

    def test_custom_threshold(self, db_engine, crew):
        group_id, _, message_id = crew
        assert reaction_service.update_hall_of_fame_threshold(
            db_engine, "alice", group_id, 2
        ) == 2

        self._trophies(db_engine, message_id, ["bob", "carol"])
        assert _count(db_engine, HallOfFameEntry) == 1

    def test_removing_trophy_does_not_unenshrine(self, db_engine, crew):
        group_id, _, message_id = crew
        reaction_service.update_hall_of_fame_threshold(db_engine, "alice", group_id, 1)
        self._trophies(db_engine, message_id, ["bob"])
        reaction_service.remove_reaction(db_engine, "bob", message_id, TROPHY_EMOJI)

        assert _count(db_engine, HallOfFameEntry) == 1
        # Re-adding past the threshold does not enshrine a second time
        self._trophies(db_engine, message_id, ["bob", "carol"])
        assert _count(db_engine, HallOfFameEntry) == 1

    def test_author_is_notified(self, db_engine, users, crew):
        group_id, _, message_id = crew
        reaction_service.update_hall_of_fame_threshold(db_engine, "alice", group_id, 1)
        self._trophies(db_engine, message_id, ["bob"])

        assert _count(
            db_engine, Notification,
            Notification.user_id == users["alice"],
            Notification.type == "hall_of_fame",
        ) == 1

    @pytest.mark.parametrize("threshold", [0, -3, True])
    def test_threshold_must_be_positive_int(self, db_engine, crew, threshold):
        group_id, _, _ = crew
        with pytest.raises(ValidationError):
            reaction_service.update_hall_of_fame_threshold(
                db_engine, "alice", group_id, threshold
            )

    def test_members_cannot_change_threshold(self, db_engine, crew):
        group_id, _, _ = crew
        with pytest.raises(PermissionDenied):
            reaction_service.update_hall_of_fame_threshold(db_engine, "bob", group_id, 3)
