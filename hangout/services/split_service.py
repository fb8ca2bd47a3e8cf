"""
hangout.services.split_service — Bill Splits, Claims & Settlement
==================================================================

Splits live in a channel (usually an event).  Members add line items,
claim what they had, and anyone in the group can run settlement, which
turns every split of the channel into net "who owes whom" balances via
:func:`hangout.engine.ledger.settle`.

Settlement is re-runnable.  Each run replaces the channel's *unpaid*
balances; balances already marked paid are kept as history and credited
against the recomputed debts, so a re-run only bills what is still owed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import delete, select
from sqlalchemy.orm import selectinload

from hangout.constants import now_ms
from hangout.database.engine import get_session
from hangout.database.models import (
    EventRsvp,
    RsvpStatus,
    Split,
    SplitBalance,
    SplitItem,
    SplitItemClaim,
    SplitStatus,
)
from hangout.engine.ledger import ItemSnapshot, NetBalance, SplitSnapshot, settle
from hangout.errors import NotFound, ValidationError
from hangout.services.permissions import (
    get_channel_or_404,
    get_current_user,
    require_membership,
)

if TYPE_CHECKING:
    from sqlalchemy import Engine
    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def _split_or_404(session: Session, split_id: int) -> Split:
    split = session.get(Split, split_id)
    if split is None:
        raise NotFound("Split not found")
    return split


def _item_or_404(session: Session, item_id: int) -> SplitItem:
    item = session.get(SplitItem, item_id)
    if item is None:
        raise NotFound("Split item not found")
    return item


def _require_amount(value: int, label: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f"{label} must be a non-negative integer amount")


# ---------------------------------------------------------------------------
# Splits & items
# ---------------------------------------------------------------------------
def create_split(
    engine: Engine,
    subject: str | None,
    channel_id: int,
    name: str,
    total_amount: int,
    tax_amount: int = 0,
    tip_amount: int = 0,
) -> Split:
    """Record a bill paid by the caller.  Amounts are minor units."""
    name = name.strip()
    if not name:
        raise ValidationError("Split name cannot be empty")
    _require_amount(total_amount, "Total")
    _require_amount(tax_amount, "Tax")
    _require_amount(tip_amount, "Tip")

    with get_session(engine) as session:
        user = get_current_user(session, subject)
        channel = get_channel_or_404(session, channel_id)
        require_membership(session, channel.group_id, user.id)

        split = Split(
            channel_id=channel.id,
            group_id=channel.group_id,
            name=name,
            total_amount=total_amount,
            tax_amount=tax_amount,
            tip_amount=tip_amount,
            created_by=user.id,
            created_at=now_ms(),
            status=SplitStatus.CLAIMING.value,
        )
        session.add(split)
        session.flush()
        return split


def add_item(
    engine: Engine,
    subject: str | None,
    split_id: int,
    name: str,
    price: int,
    quantity: int = 1,
) -> SplitItem:
    name = name.strip()
    if not name:
        raise ValidationError("Item name cannot be empty")
    _require_amount(price, "Price")
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValidationError("Quantity must be at least 1")

    with get_session(engine) as session:
        user = get_current_user(session, subject)
        split = _split_or_404(session, split_id)
        require_membership(session, split.group_id, user.id)

        item = SplitItem(split_id=split.id, name=name, price=price, quantity=quantity)
        session.add(item)
        session.flush()
        return item


def claim_item(engine: Engine, subject: str | None, item_id: int) -> bool:
    """Claim a share of an item.  Returns ``False`` if already claimed."""
    with get_session(engine) as session:
        user = get_current_user(session, subject)
        item = _item_or_404(session, item_id)
        split = _split_or_404(session, item.split_id)
        require_membership(session, split.group_id, user.id)

        if session.get(SplitItemClaim, (item.id, user.id)) is not None:
            return False
        session.add(SplitItemClaim(item_id=item.id, user_id=user.id, claimed_at=now_ms()))
        return True


def unclaim_item(engine: Engine, subject: str | None, item_id: int) -> None:
    with get_session(engine) as session:
        user = get_current_user(session, subject)
        item = _item_or_404(session, item_id)
        split = _split_or_404(session, item.split_id)
        require_membership(session, split.group_id, user.id)

        claim = session.get(SplitItemClaim, (item.id, user.id))
        if claim is not None:
            session.delete(claim)


def get_splits_by_channel(
    engine: Engine, subject: str | None, channel_id: int
) -> list[Split]:
    """Splits of a channel with their items and claims loaded."""
    with get_session(engine) as session:
        user = get_current_user(session, subject)
        channel = get_channel_or_404(session, channel_id)
        require_membership(session, channel.group_id, user.id)
        return list(session.scalars(
            select(Split)
            .where(Split.channel_id == channel_id)
            .order_by(Split.created_at, Split.id)
            .options(selectinload(Split.items).selectinload(SplitItem.claims))
        ))


# ---------------------------------------------------------------------------
# Settlement
# ---------------------------------------------------------------------------
def _snapshot(split: Split) -> SplitSnapshot:
    return SplitSnapshot(
        created_by=split.created_by,
        total_amount=split.total_amount,
        tax_amount=split.tax_amount or 0,
        tip_amount=split.tip_amount or 0,
        items=tuple(
            ItemSnapshot(
                price=item.price,
                claimant_ids=tuple(item.claimant_ids),
                quantity=item.quantity,
            )
            for item in split.items
        ),
    )


def calculate_settlement(
    engine: Engine, subject: str | None, channel_id: int
) -> list[SplitBalance]:
    """Settle every split of a channel into net balances.

    Unclaimed remainders are shared by the users who RSVP'd ``going``.
    Paid balances are subtracted, existing unpaid balances for the channel
    are replaced, and each ``claiming`` split is marked ``calculated``.
    """
    with get_session(engine) as session:
        user = get_current_user(session, subject)
        channel = get_channel_or_404(session, channel_id)
        require_membership(session, channel.group_id, user.id)

        splits = session.scalars(
            select(Split)
            .where(Split.channel_id == channel_id)
            .order_by(Split.created_at, Split.id)
            .options(selectinload(Split.items).selectinload(SplitItem.claims))
        ).all()
        if not splits:
            raise NotFound("No splits found for this channel")

        going = session.scalars(
            select(EventRsvp.user_id)
            .where(
                EventRsvp.channel_id == channel_id,
                EventRsvp.status == RsvpStatus.GOING.value,
            )
            .order_by(EventRsvp.id)
        ).all()

        paid = session.scalars(
            select(SplitBalance).where(
                SplitBalance.channel_id == channel_id,
                SplitBalance.is_paid.is_(True),
            )
        ).all()
        payments = [
            NetBalance(b.from_user_id, b.to_user_id, b.amount) for b in paid
        ]

        net = settle([_snapshot(s) for s in splits], list(going), payments)

        session.execute(
            delete(SplitBalance).where(
                SplitBalance.channel_id == channel_id,
                SplitBalance.is_paid.is_(False),
            )
        )

        balances = [
            SplitBalance(
                split_id=splits[0].id,
                channel_id=channel_id,
                group_id=channel.group_id,
                from_user_id=b.from_user_id,
                to_user_id=b.to_user_id,
                amount=b.amount,
                is_paid=False,
            )
            for b in net
        ]
        session.add_all(balances)

        for split in splits:
            if split.status == SplitStatus.CLAIMING:
                split.status = SplitStatus.CALCULATED.value

        session.flush()
        logger.info(
            "Settled channel %d: %d split(s) → %d balance(s)",
            channel_id, len(splits), len(balances),
        )
        return balances


def get_balances_by_channel(
    engine: Engine, subject: str | None, channel_id: int
) -> list[SplitBalance]:
    """Outstanding (unpaid) balances for a channel."""
    with get_session(engine) as session:
        user = get_current_user(session, subject)
        channel = get_channel_or_404(session, channel_id)
        require_membership(session, channel.group_id, user.id)
        return list(session.scalars(
            select(SplitBalance)
            .where(
                SplitBalance.channel_id == channel_id,
                SplitBalance.is_paid.is_(False),
            )
            .order_by(SplitBalance.id)
        ))


def mark_paid(engine: Engine, subject: str | None, balance_id: int) -> SplitBalance:
    """Any member of the balance's group may mark it paid."""
    with get_session(engine) as session:
        user = get_current_user(session, subject)
        balance = session.get(SplitBalance, balance_id)
        if balance is None:
            raise NotFound("Balance not found")
        require_membership(session, balance.group_id, user.id)

        if not balance.is_paid:
            balance.is_paid = True
            balance.paid_at = now_ms()
        return balance


def settle_split(engine: Engine, subject: str | None, split_id: int) -> Split:
    """Close a calculated split once all of its channel's balances are paid."""
    with get_session(engine) as session:
        user = get_current_user(session, subject)
        split = _split_or_404(session, split_id)
        require_membership(session, split.group_id, user.id)

        if split.status == SplitStatus.SETTLED:
            return split
        if split.status != SplitStatus.CALCULATED:
            raise ValidationError("Split has not been calculated yet")

        outstanding = session.scalar(
            select(SplitBalance.id).where(
                SplitBalance.channel_id == split.channel_id,
                SplitBalance.is_paid.is_(False),
            ).limit(1)
        )
        if outstanding is not None:
            raise ValidationError("Split still has unpaid balances")

        split.status = SplitStatus.SETTLED.value
        logger.info("Split %d settled", split.id)
        return split
