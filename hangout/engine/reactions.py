"""
hangout.engine.reactions — Reaction Aggregation
================================================

Groups raw (user, emoji) reaction rows into per-emoji summaries.
Aggregates are never stored; every read recomputes them.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol


class ReactionLike(Protocol):
    user_id: int
    emoji: str


@dataclass(slots=True)
class ReactionSummary:
    emoji: str
    count: int = 0
    user_ids: list[int] = field(default_factory=list)


def aggregate_reactions(rows: Iterable[ReactionLike]) -> list[ReactionSummary]:
    """Group *rows* by emoji, preserving the order each emoji first appears."""
    summaries: dict[str, ReactionSummary] = {}
    for row in rows:
        summary = summaries.get(row.emoji)
        if summary is None:
            summary = summaries[row.emoji] = ReactionSummary(emoji=row.emoji)
        summary.count += 1
        summary.user_ids.append(row.user_id)
    return list(summaries.values())


def unique_reactors(rows: Iterable[ReactionLike], emoji: str) -> set[int]:
    """Distinct users who reacted with *emoji*."""
    return {row.user_id for row in rows if row.emoji == emoji}
