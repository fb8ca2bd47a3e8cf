"""
hangout.engine.thresholds — Reaction Side-Effect Decisions
===========================================================

Decides which durable side effects a newly inserted reaction triggers:

- 📌 always records a pin event.
- 🏆 enshrines the message in the group's Hall of Fame once the number of
  distinct trophy reactors reaches the group threshold, unless it is
  already there.

Side effects are one-way.  Nothing here ever un-pins or un-enshrines.
"""

from __future__ import annotations

from dataclasses import dataclass

from hangout.constants import DEFAULT_HALL_OF_FAME_THRESHOLD, PIN_EMOJI, TROPHY_EMOJI


@dataclass(frozen=True, slots=True)
class SideEffects:
    pin: bool = False
    enshrine: bool = False


def resolve_threshold(group_threshold: int | None) -> int:
    """Group setting, or the default when the group never set one."""
    if group_threshold is None:
        return DEFAULT_HALL_OF_FAME_THRESHOLD
    return group_threshold


def evaluate_side_effects(
    emoji: str,
    unique_count: int,
    threshold: int | None,
    already_enshrined: bool,
) -> SideEffects:
    """Return the side effects for a reaction with *emoji*.

    *unique_count* is the number of distinct users currently reacting with
    *emoji* on the message, the new reaction included.
    """
    if emoji == PIN_EMOJI:
        return SideEffects(pin=True)

    if emoji == TROPHY_EMOJI:
        enshrine = (
            not already_enshrined
            and unique_count >= resolve_threshold(threshold)
        )
        return SideEffects(enshrine=enshrine)

    return SideEffects()
