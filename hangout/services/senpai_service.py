"""
hangout.services.senpai_service — Senpai Orchestration
=======================================================

Senpai is the group's AI sidekick.  A trigger (a cron sweep, a mention,
a milestone) asks :func:`evaluate_and_respond` whether Senpai should say
something, and if so what:

  load context (1 read txn) → frequency gate → completion call
      → post reply (1 write txn)

The completion call happens between the two transactions so no DB
connection is held open while waiting on the network.  A failed call is
logged and dropped: nothing is posted and nothing is retried.

The random sweep (:func:`random_cron_trigger`) samples enabled groups and
hands each picked group to the scheduler with its own random delay so
replies don't all land at once.
"""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from sqlalchemy import select

from hangout.constants import (
    SENPAI_HALL_OF_FAME_LIMIT,
    SENPAI_MEMORY_LIMIT,
    SENPAI_RECENT_MESSAGES,
    now_ms,
)
from hangout.database.engine import get_session, run_db
from hangout.database.models import (
    Group,
    HallOfFameEntry,
    MemoryType,
    Message,
    Role,
    SenpaiFrequency,
    SenpaiMemory,
)
from hangout.engine.frequency import TriggerType, should_respond
from hangout.engine.prompt import build_senpai_prompt, build_user_prompt
from hangout.errors import ExternalServiceError, ValidationError
from hangout.services.message_service import (
    get_hangout_channel,
    get_recent_for_senpai,
    post_senpai_message,
)
from hangout.services.permissions import (
    get_current_user,
    get_group_or_404,
    require_membership,
)

if TYPE_CHECKING:
    from sqlalchemy import Engine
    from sqlalchemy.orm import Session

    from hangout.services.completion_client import CompletionClient

logger = logging.getLogger(__name__)


class Scheduler(Protocol):
    def run_after(
        self, delay_ms: int, coro_factory: Callable[[], Awaitable[object]]
    ) -> object: ...


@dataclass
class SenpaiContext:
    group_id: int
    group_name: str
    enabled: bool
    frequency: str
    personality: str | None
    hangout_channel_id: int | None
    recent_messages: list[Message] = field(default_factory=list)
    memories: list[SenpaiMemory] = field(default_factory=list)
    hall_of_fame: list[HallOfFameEntry] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Memories
# ---------------------------------------------------------------------------
def _relevant_memories(session: Session, group_id: int, limit: int) -> list[SenpaiMemory]:
    return list(session.scalars(
        select(SenpaiMemory)
        .where(SenpaiMemory.group_id == group_id)
        .order_by(SenpaiMemory.relevance_score.desc(), SenpaiMemory.created_at.desc())
        .limit(limit)
    ))


def get_relevant_memories(
    engine: Engine, group_id: int, limit: int = SENPAI_MEMORY_LIMIT
) -> list[SenpaiMemory]:
    with get_session(engine) as session:
        return _relevant_memories(session, group_id, limit)


def store_memory(
    engine: Engine,
    group_id: int,
    memory_type: str,
    content: str,
    source_message_ids: list[int] | None = None,
) -> SenpaiMemory:
    """Save a memory for later prompts.  New memories start fully relevant."""
    try:
        kind = MemoryType(memory_type)
    except ValueError:
        raise ValidationError(f"Unknown memory type: {memory_type!r}") from None
    if not content.strip():
        raise ValidationError("Memory content cannot be empty")

    with get_session(engine) as session:
        get_group_or_404(session, group_id)
        memory = SenpaiMemory(
            group_id=group_id,
            memory_type=kind.value,
            content=content.strip(),
            source_message_ids=source_message_ids,
            created_at=now_ms(),
            relevance_score=1.0,
        )
        session.add(memory)
        session.flush()
        return memory


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------
def update_senpai_settings(
    engine: Engine,
    subject: str | None,
    group_id: int,
    *,
    enabled: bool | None = None,
    frequency: str | None = None,
    personality: str | None = None,
) -> Group:
    """Admin+: toggle Senpai, set its frequency, or replace its personality.

    An empty *personality* string resets it to the default persona.
    """
    if frequency is not None:
        try:
            frequency = SenpaiFrequency(frequency).value
        except ValueError:
            raise ValidationError(f"Unknown Senpai frequency: {frequency!r}") from None

    with get_session(engine) as session:
        user = get_current_user(session, subject)
        require_membership(session, group_id, user.id, Role.ADMIN)
        group = get_group_or_404(session, group_id)

        if enabled is not None:
            group.senpai_enabled = enabled
        if frequency is not None:
            group.senpai_frequency = frequency
        if personality is not None:
            group.senpai_personality = personality.strip() or None
        return group


# ---------------------------------------------------------------------------
# Evaluate & respond
# ---------------------------------------------------------------------------
def load_context(engine: Engine, group_id: int) -> SenpaiContext | None:
    """Everything a reply needs, read in one transaction."""
    with get_session(engine) as session:
        group = session.get(Group, group_id)
        if group is None:
            return None

        hangout = get_hangout_channel(session, group_id)
        hall_of_fame = list(session.scalars(
            select(HallOfFameEntry)
            .where(HallOfFameEntry.group_id == group_id)
            .order_by(HallOfFameEntry.enshrine_date.desc(), HallOfFameEntry.id.desc())
            .limit(SENPAI_HALL_OF_FAME_LIMIT)
        ))
        return SenpaiContext(
            group_id=group.id,
            group_name=group.name,
            enabled=bool(group.senpai_enabled),
            frequency=group.senpai_frequency,
            personality=group.senpai_personality,
            hangout_channel_id=hangout.id if hangout is not None else None,
            recent_messages=get_recent_for_senpai(session, group_id, SENPAI_RECENT_MESSAGES),
            memories=_relevant_memories(session, group_id, SENPAI_MEMORY_LIMIT),
            hall_of_fame=hall_of_fame,
        )


async def evaluate_and_respond(
    engine: Engine,
    client: CompletionClient,
    group_id: int,
    trigger_type: str,
    trigger_message_id: int | None = None,
) -> int | None:
    """Maybe post a Senpai reply for *trigger_type*.

    Returns the id of the posted message, or ``None`` when Senpai stayed
    silent (disabled, gated out, no hangout channel, or the completion
    service failed).
    """
    ctx = await run_db(load_context, engine, group_id)
    if ctx is None:
        logger.debug("Senpai: group %d not found, skipping", group_id)
        return None
    if not ctx.enabled:
        logger.debug("Senpai: disabled for group %d", group_id)
        return None
    if not should_respond(ctx.frequency, trigger_type):
        logger.debug(
            "Senpai: %s trigger gated out at %s frequency (group %d)",
            trigger_type, ctx.frequency, group_id,
        )
        return None
    if ctx.hangout_channel_id is None:
        logger.warning("Senpai: group %d has no hangout channel", group_id)
        return None

    system_prompt = build_senpai_prompt(
        ctx.group_name, ctx.personality, ctx.memories, ctx.hall_of_fame, trigger_type
    )
    user_prompt = build_user_prompt(ctx.recent_messages, trigger_type)

    try:
        reply = await client.complete(system_prompt, user_prompt)
    except ExternalServiceError as exc:
        logger.error(
            "Senpai completion failed for group %d (%s trigger, message %s): %s",
            group_id, trigger_type, trigger_message_id, exc,
        )
        return None

    message = await run_db(
        post_senpai_message, engine, ctx.hangout_channel_id, reply, trigger_type
    )
    return message.id


# ---------------------------------------------------------------------------
# Random engagement sweep
# ---------------------------------------------------------------------------
def _enabled_group_ids(engine: Engine) -> list[int]:
    with get_session(engine) as session:
        return list(session.scalars(
            select(Group.id).where(Group.senpai_enabled.is_(True)).order_by(Group.id)
        ))


async def random_cron_trigger(
    engine: Engine,
    scheduler: Scheduler,
    client: CompletionClient,
    rng: random.Random | None = None,
    sample_rate: float = 0.3,
    max_delay_ms: int = 10 * 60 * 1000,
) -> list[tuple[int, int]]:
    """Schedule a ``random`` trigger for a sample of Senpai-enabled groups.

    Each group is kept with probability *sample_rate* and, when kept, is
    scheduled after a uniform random delay below *max_delay_ms*.  Returns
    the ``(group_id, delay_ms)`` pairs that were scheduled.
    """
    rng = rng or random.Random()
    scheduled: list[tuple[int, int]] = []

    for group_id in await run_db(_enabled_group_ids, engine):
        if rng.random() >= sample_rate:
            continue
        delay_ms = math.floor(rng.random() * max_delay_ms)
        scheduler.run_after(
            delay_ms,
            lambda gid=group_id: evaluate_and_respond(
                engine, client, gid, TriggerType.RANDOM.value
            ),
        )
        scheduled.append((group_id, delay_ms))

    logger.info("Senpai random sweep scheduled %d group(s)", len(scheduled))
    return scheduled
