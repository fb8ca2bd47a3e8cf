"""
hangout.engine.prompt — Senpai Prompt Building
===============================================

Turns group context into the two chat-completion messages Senpai sends:
a system prompt (persona + memories + Hall of Fame) and a user prompt
(recent chat + trigger type).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol

DEFAULT_PERSONALITY = (
    "You are Senpai, the friendly, slightly chaotic older friend of this "
    "group chat.  You remember the group's history, keep replies short and "
    "casual, and never lecture."
)


class ChatLine(Protocol):
    author_id: int
    body: str


class MemoryLike(Protocol):
    memory_type: str
    content: str


class EnshrinedLike(Protocol):
    body: str
    trophy_count: int


def format_messages(messages: Iterable[ChatLine]) -> str:
    """Render messages as ``[author]: body`` lines, one per message."""
    return "\n".join(f"[{m.author_id}]: {m.body}" for m in messages)


def build_senpai_prompt(
    group_name: str,
    personality: str | None,
    memories: Sequence[MemoryLike],
    hall_of_fame: Sequence[EnshrinedLike],
    trigger_type: str,
) -> str:
    """Build the system prompt for one Senpai reply."""
    sections = [
        personality.strip() if personality and personality.strip() else DEFAULT_PERSONALITY,
        f'You are chatting in the group "{group_name}".',
    ]

    if memories:
        lines = "\n".join(f"- ({m.memory_type}) {m.content}" for m in memories)
        sections.append(f"Things you remember about this group:\n{lines}")

    if hall_of_fame:
        lines = "\n".join(
            f"- \"{entry.body}\" ({entry.trophy_count} trophies)"
            for entry in hall_of_fame
        )
        sections.append(f"Hall of Fame messages:\n{lines}")

    sections.append(
        f"You were triggered by: {trigger_type}.  "
        "Reply with a single chat message, no more than a few sentences."
    )
    return "\n\n".join(sections)


def build_user_prompt(recent_messages: Iterable[ChatLine], trigger_type: str) -> str:
    return f"Recent chat:\n{format_messages(recent_messages)}\n\nTrigger: {trigger_type}"
