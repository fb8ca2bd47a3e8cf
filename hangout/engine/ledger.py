"""
hangout.engine.ledger — Bill-Split Settlement
==============================================

Pure settlement pipeline.  No DB I/O; the split service builds the
snapshots, calls :func:`settle`, and persists the resulting rows.

Pipeline stages (per split, then across the channel):

  claimed items → unclaimed remainder → proportional tax/tip
      → debts to the payer → minus recorded payments
      → pairwise netting → NetBalance rows

Rounding: per-person shares are kept as floats until the very end.
Tax and tip portions are rounded half-up individually and the final
share is rounded half-up when it becomes a debt.  There is no
remainder correction, so totals can drift from the bill by at most
a cent per distinct participant.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from hangout.constants import js_round

logger = logging.getLogger(__name__)

__all__ = [
    "ItemSnapshot",
    "NetBalance",
    "SplitSnapshot",
    "accumulate_debts",
    "apply_payments",
    "compute_shares",
    "net_debts",
    "settle",
]


# ---------------------------------------------------------------------------
# Inputs / outputs
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class ItemSnapshot:
    """A line item and the users who claimed it.

    ``price`` is the line total in minor units; ``quantity`` is
    informational only.
    """

    price: int
    claimant_ids: tuple[int, ...] = ()
    quantity: int = 1


@dataclass(frozen=True, slots=True)
class SplitSnapshot:
    """Everything settlement needs to know about one bill."""

    created_by: int
    total_amount: int
    tax_amount: int = 0
    tip_amount: int = 0
    items: tuple[ItemSnapshot, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class NetBalance:
    """``from_user_id`` owes ``to_user_id`` ``amount`` minor units."""

    from_user_id: int
    to_user_id: int
    amount: int


# ---------------------------------------------------------------------------
# Stages 1–3: per-person shares for one split
# ---------------------------------------------------------------------------
def compute_shares(
    split: SplitSnapshot, going_user_ids: Sequence[int]
) -> dict[int, float]:
    """Return each participant's final share of *split* (unrounded).

    Claimed items are divided evenly among their claimants.  Whatever the
    items don't account for (after tax and tip) is divided evenly among
    the users who RSVP'd ``going``.  Tax and tip are then distributed in
    proportion to each person's subtotal.
    """
    subtotals: dict[int, float] = defaultdict(float)
    claimed_total = 0

    for item in split.items:
        if not item.claimant_ids:
            continue
        per_person = item.price / len(item.claimant_ids)
        for user_id in item.claimant_ids:
            subtotals[user_id] += per_person
        claimed_total += item.price

    unclaimed = (
        split.total_amount - split.tax_amount - split.tip_amount - claimed_total
    )
    if unclaimed > 0 and going_user_ids:
        per_person = unclaimed / len(going_user_ids)
        for user_id in going_user_ids:
            subtotals[user_id] += per_person

    total_subtotal = sum(subtotals.values())
    if total_subtotal <= 0:
        return {}

    shares: dict[int, float] = {}
    for user_id, subtotal in subtotals.items():
        proportion = subtotal / total_subtotal
        shares[user_id] = (
            subtotal
            + js_round(split.tax_amount * proportion)
            + js_round(split.tip_amount * proportion)
        )
    return shares


# ---------------------------------------------------------------------------
# Stage 4: debts owed to each split's payer
# ---------------------------------------------------------------------------
def accumulate_debts(
    splits: Iterable[SplitSnapshot],
    going_user_ids: Sequence[int],
    debts: dict[tuple[int, int], int] | None = None,
) -> dict[tuple[int, int], int]:
    """Sum ``(debtor, creditor) → amount`` across *splits*.

    The creator of a split paid for it, so every other participant owes
    the creator their rounded share.  The creator owes nothing to
    themselves.
    """
    if debts is None:
        debts = defaultdict(int)

    for split in splits:
        payer = split.created_by
        for user_id, share in compute_shares(split, going_user_ids).items():
            if user_id == payer:
                continue
            debts[(user_id, payer)] += js_round(share)

    return debts


def apply_payments(
    debts: dict[tuple[int, int], int],
    payments: Iterable[NetBalance],
) -> dict[tuple[int, int], int]:
    """Credit balances that were already paid against *debts*.

    A payment of X from A to B cancels X of what A owes B, so it is
    booked as X owed the other way and netting does the rest.  Paying
    more than is now owed leaves the payer as the creditor.
    """
    for paid in payments:
        key = (paid.to_user_id, paid.from_user_id)
        debts[key] = debts.get(key, 0) + paid.amount
    return debts


# ---------------------------------------------------------------------------
# Stage 5: pairwise netting
# ---------------------------------------------------------------------------
def net_debts(debts: dict[tuple[int, int], int]) -> list[NetBalance]:
    """Collapse opposing debts between each pair of users into one edge.

    Every unordered pair is visited exactly once.  Pairs that cancel
    out produce no row.
    """
    seen: set[tuple[int, int]] = set()
    balances: list[NetBalance] = []

    for debtor, creditor in debts:
        pair = (min(debtor, creditor), max(debtor, creditor))
        if pair in seen:
            continue
        seen.add(pair)

        a, b = pair
        net = debts.get((a, b), 0) - debts.get((b, a), 0)
        if net > 0:
            balances.append(NetBalance(from_user_id=a, to_user_id=b, amount=net))
        elif net < 0:
            balances.append(NetBalance(from_user_id=b, to_user_id=a, amount=-net))

    return balances


# ---------------------------------------------------------------------------
# Full pipeline
# ---------------------------------------------------------------------------
def settle(
    splits: Iterable[SplitSnapshot],
    going_user_ids: Sequence[int],
    payments: Iterable[NetBalance] = (),
) -> list[NetBalance]:
    """Settle every split of a channel into net directed balances.

    *payments* are balances already marked paid; the result is what is
    still outstanding after them.
    """
    debts = apply_payments(accumulate_debts(splits, going_user_ids), payments)
    balances = net_debts(debts)
    logger.debug("Settlement produced %d net balance(s)", len(balances))
    return balances
