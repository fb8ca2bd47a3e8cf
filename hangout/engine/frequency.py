"""
hangout.engine.frequency — Senpai Trigger Gating
=================================================

Each group picks how talkative Senpai is.  A trigger only produces a reply
when its type is allowed at the group's frequency:

============  ==============================================================
quiet         inactivity_nudge, milestone
normal        quiet + throwback, suggestion, we_should, random
chatty        every trigger type
============  ==============================================================

Trigger types outside the known set are rejected at quiet and normal.
"""

from __future__ import annotations

import enum

from hangout.database.models import SenpaiFrequency


class TriggerType(enum.StrEnum):
    INACTIVITY_NUDGE = "inactivity_nudge"
    MILESTONE = "milestone"
    THROWBACK = "throwback"
    SUGGESTION = "suggestion"
    WE_SHOULD = "we_should"
    RANDOM = "random"
    MENTION = "mention"
    TOPIC = "topic"


QUIET_TRIGGERS: frozenset[str] = frozenset({
    TriggerType.INACTIVITY_NUDGE,
    TriggerType.MILESTONE,
})

NORMAL_TRIGGERS: frozenset[str] = QUIET_TRIGGERS | {
    TriggerType.THROWBACK,
    TriggerType.SUGGESTION,
    TriggerType.WE_SHOULD,
    TriggerType.RANDOM,
}


def should_respond(frequency: str, trigger_type: str) -> bool:
    """True when a group at *frequency* answers a *trigger_type* trigger.

    Unknown frequencies fail closed.
    """
    if frequency == SenpaiFrequency.CHATTY:
        return True
    if frequency == SenpaiFrequency.NORMAL:
        return trigger_type in NORMAL_TRIGGERS
    if frequency == SenpaiFrequency.QUIET:
        return trigger_type in QUIET_TRIGGERS
    return False
