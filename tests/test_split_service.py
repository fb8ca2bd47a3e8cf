"""
tests/test_split_service.py — Splits, Claims & Settlement
==========================================================

End-to-end settlement through the service layer: RSVPs decide who
shares the unclaimed remainder, balances are persisted per channel.
"""

from __future__ import annotations

import pytest

from conftest import make_group, make_user
from hangout.errors import NotFound, PermissionDenied, ValidationError
from hangout.services import channel_service, event_service, split_service


@pytest.fixture
def trip(db_engine, users):
    """An event channel where alice, bob and carol are going; dave is not."""
    group_id = make_group(db_engine, "alice", "bob", "carol", "dave")
    channel = channel_service.create_channel(
        db_engine, "alice", group_id, "Lake trip", "event"
    )
    for subject in ("alice", "bob", "carol"):
        event_service.set_rsvp(db_engine, subject, channel.id, "going")
    event_service.set_rsvp(db_engine, "dave", channel.id, "not_going")
    return channel.id


@pytest.fixture
def dinner(db_engine, trip):
    """$100 paid by alice: $8 tax, $12 tip, a $60 platter for alice and bob."""
    split = split_service.create_split(db_engine, "alice", trip, "Dinner", 10000, 800, 1200)
    item = split_service.add_item(db_engine, "alice", split.id, "Platter", 6000)
    split_service.claim_item(db_engine, "alice", item.id)
    split_service.claim_item(db_engine, "bob", item.id)
    return split


def dinner_items(engine, channel_id):
    splits = split_service.get_splits_by_channel(engine, "alice", channel_id)
    return [
        {"id": item.id, "claimed_by": sorted(item.claimant_ids)}
        for item in splits[0].items
    ]


def _edges(balances) -> dict[tuple[int, int], int]:
    return {(b.from_user_id, b.to_user_id): b.amount for b in balances}


class TestCreate:
    def test_defaults(self, db_engine, users, trip):
        split = split_service.create_split(db_engine, "bob", trip, " Gas ", 4000)
        assert split.name == "Gas"
        assert split.status == "claiming"
        assert split.created_by == users["bob"]
        assert (split.tax_amount, split.tip_amount) == (0, 0)

    @pytest.mark.parametrize("total", [-1, 12.5, True])
    def test_amounts_must_be_non_negative_ints(self, db_engine, trip, total):
        with pytest.raises(ValidationError):
            split_service.create_split(db_engine, "alice", trip, "Bad", total)

    def test_quantity_at_least_one(self, db_engine, trip):
        split = split_service.create_split(db_engine, "alice", trip, "Snacks", 500)
        with pytest.raises(ValidationError):
            split_service.add_item(db_engine, "alice", split.id, "Chips", 500, quantity=0)

    def test_claims_are_idempotent(self, db_engine, users, dinner):
        item_id = dinner_items(db_engine, dinner.channel_id)[0]["id"]
        assert split_service.claim_item(db_engine, "bob", item_id) is False

        split_service.unclaim_item(db_engine, "bob", item_id)
        assert dinner_items(db_engine, dinner.channel_id)[0]["claimed_by"] == [users["alice"]]

    def test_outsider_cannot_create(self, db_engine, users, trip):
        make_user(db_engine, "mallory")
        with pytest.raises(PermissionDenied):
            split_service.create_split(db_engine, "mallory", trip, "Sneaky", 100)


class TestSettlement:
    def test_concrete_scenario(self, db_engine, users, trip, dinner):
        balances = split_service.calculate_settlement(db_engine, "carol", trip)

        assert _edges(balances) == {
            (users["bob"], users["alice"]): 4584,
            (users["carol"], users["alice"]): 834,
        }
        assert all(b.split_id == dinner.id for b in balances)

        splits = split_service.get_splits_by_channel(db_engine, "alice", trip)
        assert splits[0].status == "calculated"

    def test_no_splits_is_not_found(self, db_engine, trip):
        with pytest.raises(NotFound):
            split_service.calculate_settlement(db_engine, "alice", trip)

    def test_rerun_credits_paid_balances(self, db_engine, users, trip, dinner):
        first = split_service.calculate_settlement(db_engine, "alice", trip)
        paid = next(b for b in first if b.from_user_id == users["carol"])
        split_service.mark_paid(db_engine, "bob", paid.id)

        again = split_service.calculate_settlement(db_engine, "alice", trip)

        outstanding = split_service.get_balances_by_channel(db_engine, "alice", trip)
        assert _edges(again) == _edges(outstanding) == {(users["bob"], users["alice"]): 4584}
        assert paid.id not in {b.id for b in outstanding}

    def test_rerun_bills_only_new_spending(self, db_engine, users, trip, dinner):
        for balance in split_service.calculate_settlement(db_engine, "alice", trip):
            split_service.mark_paid(db_engine, "alice", balance.id)

        taxi = split_service.create_split(db_engine, "alice", trip, "Taxi", 900)
        item = split_service.add_item(db_engine, "alice", taxi.id, "Ride", 900)
        for subject in ("alice", "bob", "carol"):
            split_service.claim_item(db_engine, subject, item.id)

        balances = split_service.calculate_settlement(db_engine, "alice", trip)
        assert _edges(balances) == {
            (users["bob"], users["alice"]): 300,
            (users["carol"], users["alice"]): 300,
        }

    def test_two_payers_net_to_one_edge(self, db_engine, users, trip):
        lunch = split_service.create_split(db_engine, "alice", trip, "Lunch", 2000)
        item = split_service.add_item(db_engine, "alice", lunch.id, "Pizza", 2000)
        split_service.claim_item(db_engine, "alice", item.id)
        split_service.claim_item(db_engine, "bob", item.id)

        coffee = split_service.create_split(db_engine, "bob", trip, "Coffee", 800)
        item = split_service.add_item(db_engine, "bob", coffee.id, "Lattes", 800)
        split_service.claim_item(db_engine, "alice", item.id)
        split_service.claim_item(db_engine, "bob", item.id)

        balances = split_service.calculate_settlement(db_engine, "alice", trip)
        assert _edges(balances) == {(users["bob"], users["alice"]): 600}


class TestPayAndSettle:
    def test_settle_requires_calculation(self, db_engine, dinner):
        with pytest.raises(ValidationError):
            split_service.settle_split(db_engine, "alice", dinner.id)

    def test_settle_requires_all_paid(self, db_engine, trip, dinner):
        balances = split_service.calculate_settlement(db_engine, "alice", trip)
        split_service.mark_paid(db_engine, "alice", balances[0].id)

        with pytest.raises(ValidationError):
            split_service.settle_split(db_engine, "alice", dinner.id)

    def test_settle_after_all_paid(self, db_engine, trip, dinner):
        for balance in split_service.calculate_settlement(db_engine, "alice", trip):
            paid = split_service.mark_paid(db_engine, "dave", balance.id)
            assert paid.is_paid is True
            assert paid.paid_at is not None

        assert split_service.get_balances_by_channel(db_engine, "alice", trip) == []
        assert split_service.settle_split(db_engine, "alice", dinner.id).status == "settled"
        # Settling twice is a no-op
        assert split_service.settle_split(db_engine, "bob", dinner.id).status == "settled"

    def test_settled_split_stays_settled_on_rerun(self, db_engine, trip, dinner):
        for balance in split_service.calculate_settlement(db_engine, "alice", trip):
            split_service.mark_paid(db_engine, "alice", balance.id)
        split_service.settle_split(db_engine, "alice", dinner.id)

        assert split_service.calculate_settlement(db_engine, "alice", trip) == []
        assert split_service.get_balances_by_channel(db_engine, "alice", trip) == []
        splits = split_service.get_splits_by_channel(db_engine, "alice", trip)
        assert splits[0].status == "settled"

    def test_missing_balance(self, db_engine, trip):
        with pytest.raises(NotFound):
            split_service.mark_paid(db_engine, "alice", 999)
