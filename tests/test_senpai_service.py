"""
tests/test_senpai_service.py — Senpai Orchestration
====================================================

The completion service is replaced with an ``httpx.MockTransport`` so no
network is touched.  The scheduler is a recording fake.
"""

from __future__ import annotations

import asyncio
import json
import random

import httpx
import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from conftest import hangout_channel_id, make_group
from hangout.database.models import Channel, Message
from hangout.errors import ExternalServiceError, PermissionDenied, ValidationError
from hangout.services import message_service, senpai_service
from hangout.services.completion_client import CompletionClient

URL = "https://llm.test/v1/chat/completions"


def _run(coro):
    """Run an async coroutine synchronously for testing."""
    return asyncio.get_event_loop_policy().new_event_loop().run_until_complete(coro)


class FakeCompletion:
    """Canned reply handler that records every request body it sees."""

    def __init__(self, status: int = 200, content: str | None = "  yo, what's up  "):
        self.status = status
        self.content = content
        self.requests: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        if self.status != 200:
            return httpx.Response(self.status, json={"error": "nope"})
        return httpx.Response(
            200, json={"choices": [{"message": {"content": self.content}}]}
        )


def _client(handler, api_key: str | None = "sk-test") -> CompletionClient:
    return CompletionClient(URL, api_key, transport=httpx.MockTransport(handler))


class RecordingScheduler:
    def __init__(self):
        self.calls: list[tuple[int, object]] = []

    def run_after(self, delay_ms, coro_factory):
        self.calls.append((delay_ms, coro_factory))


@pytest.fixture
def group_id(db_engine, users):
    gid = make_group(db_engine, "alice", "bob", name="Night Owls")
    channel_id = hangout_channel_id(db_engine, gid)
    message_service.send_message(db_engine, "bob", channel_id, "anyone up?")
    message_service.send_message(db_engine, "alice", channel_id, "always")
    return gid


def _senpai_messages(engine, group_id: int) -> list[Message]:
    with Session(engine) as session:
        return list(session.scalars(
            select(Message)
            .join(Channel, Channel.id == Message.channel_id)
            .where(Channel.group_id == group_id, Message.message_type == "senpai")
        ))


# ---------------------------------------------------------------------------
# Completion client
# ---------------------------------------------------------------------------
class TestCompletionClient:
    def test_returns_stripped_content_and_sends_both_prompts(self):
        handler = FakeCompletion()
        reply = _run(_client(handler).complete("be nice", "hello"))

        assert reply == "yo, what's up"
        sent = handler.requests[0]["messages"]
        assert sent == [
            {"role": "system", "content": "be nice"},
            {"role": "user", "content": "hello"},
        ]

    def test_missing_key(self):
        with pytest.raises(ExternalServiceError):
            _run(_client(FakeCompletion(), api_key=None).complete("s", "u"))

    def test_non_success_status(self):
        with pytest.raises(ExternalServiceError) as exc_info:
            _run(_client(FakeCompletion(status=503)).complete("s", "u"))
        assert exc_info.value.status == 503

    def test_empty_content(self):
        with pytest.raises(ExternalServiceError):
            _run(_client(FakeCompletion(content="   ")).complete("s", "u"))

    def test_malformed_body(self):
        def handler(request):
            return httpx.Response(200, json={"choices": []})

        with pytest.raises(ExternalServiceError):
            _run(_client(handler).complete("s", "u"))

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ExternalServiceError):
            _run(_client(handler).complete("s", "u"))

    def test_invalid_url(self):
        client = CompletionClient("https://llm.test/\x00", "sk-test",
                                  transport=httpx.MockTransport(FakeCompletion()))
        with pytest.raises(ExternalServiceError):
            _run(client.complete("s", "u"))

    def test_injected_transport_survives_repeated_calls(self):
        handler = FakeCompletion()
        client = _client(handler)

        async def scenario():
            replies = [await client.complete("s", f"u{i}") for i in range(3)]
            await client.aclose()
            replies.append(await client.complete("s", "after close"))
            await client.aclose()
            return replies

        assert _run(scenario()) == ["yo, what's up"] * 4
        assert len(handler.requests) == 4


# ---------------------------------------------------------------------------
# evaluate_and_respond
# ---------------------------------------------------------------------------
class TestEvaluateAndRespond:
    def test_posts_reply_as_channel_creator(self, db_engine, users, group_id):
        handler = FakeCompletion()
        message_id = _run(senpai_service.evaluate_and_respond(
            db_engine, _client(handler), group_id, "milestone"
        ))

        posted = _senpai_messages(db_engine, group_id)
        assert [m.id for m in posted] == [message_id]
        assert posted[0].body == "yo, what's up"
        assert posted[0].author_id == users["alice"]
        assert posted[0].senpai_trigger == "milestone"

        system, user = handler.requests[0]["messages"]
        assert 'You are chatting in the group "Night Owls".' in system["content"]
        assert user["content"].startswith("Recent chat:\n")
        assert user["content"].endswith("Trigger: milestone")
        assert "anyone up?" in user["content"]

    def test_disabled_group_stays_silent(self, db_engine, group_id):
        senpai_service.update_senpai_settings(db_engine, "alice", group_id, enabled=False)
        handler = FakeCompletion()

        assert _run(senpai_service.evaluate_and_respond(
            db_engine, _client(handler), group_id, "milestone"
        )) is None
        assert handler.requests == []
        assert _senpai_messages(db_engine, group_id) == []

    def test_gated_trigger_makes_no_call(self, db_engine, group_id):
        senpai_service.update_senpai_settings(db_engine, "alice", group_id, frequency="quiet")
        handler = FakeCompletion()

        assert _run(senpai_service.evaluate_and_respond(
            db_engine, _client(handler), group_id, "random"
        )) is None
        assert handler.requests == []

    def test_chatty_answers_mentions(self, db_engine, group_id):
        senpai_service.update_senpai_settings(db_engine, "alice", group_id, frequency="chatty")
        assert _run(senpai_service.evaluate_and_respond(
            db_engine, _client(FakeCompletion()), group_id, "mention"
        )) is not None

    def test_completion_failure_posts_nothing(self, db_engine, group_id):
        assert _run(senpai_service.evaluate_and_respond(
            db_engine, _client(FakeCompletion(status=500)), group_id, "milestone"
        )) is None
        assert _senpai_messages(db_engine, group_id) == []

    def test_missing_group(self, db_engine):
        handler = FakeCompletion()
        assert _run(senpai_service.evaluate_and_respond(
            db_engine, _client(handler), 404, "milestone"
        )) is None
        assert handler.requests == []

    def test_memories_reach_the_prompt(self, db_engine, group_id):
        senpai_service.store_memory(db_engine, group_id, "inside_joke", "the goose incident")
        handler = FakeCompletion()
        _run(senpai_service.evaluate_and_respond(
            db_engine, _client(handler), group_id, "throwback"
        ))

        system = handler.requests[0]["messages"][0]["content"]
        assert "- (inside_joke) the goose incident" in system


# ---------------------------------------------------------------------------
# Settings & memories
# ---------------------------------------------------------------------------
class TestSettings:
    def test_members_cannot_change_settings(self, db_engine, group_id):
        with pytest.raises(PermissionDenied):
            senpai_service.update_senpai_settings(db_engine, "bob", group_id, enabled=False)

    def test_unknown_frequency(self, db_engine, group_id):
        with pytest.raises(ValidationError):
            senpai_service.update_senpai_settings(db_engine, "alice", group_id, frequency="loud")

    def test_blank_personality_resets(self, db_engine, group_id):
        group = senpai_service.update_senpai_settings(
            db_engine, "alice", group_id, personality="A pirate."
        )
        assert group.senpai_personality == "A pirate."
        group = senpai_service.update_senpai_settings(
            db_engine, "alice", group_id, personality="  "
        )
        assert group.senpai_personality is None

    def test_memories_ranked_by_relevance(self, db_engine, group_id):
        senpai_service.store_memory(db_engine, group_id, "preference", "likes tacos")
        senpai_service.store_memory(db_engine, group_id, "milestone", "100th message")

        memories = senpai_service.get_relevant_memories(db_engine, group_id, limit=1)
        assert len(memories) == 1
        assert memories[0].relevance_score == 1.0

    def test_unknown_memory_type(self, db_engine, group_id):
        with pytest.raises(ValidationError):
            senpai_service.store_memory(db_engine, group_id, "gossip", "shh")


# ---------------------------------------------------------------------------
# Random sweep
# ---------------------------------------------------------------------------
class TestRandomCronTrigger:
    def test_schedules_sampled_groups(self, db_engine, group_id):
        other = make_group(db_engine, "bob", name="Second")
        scheduler = RecordingScheduler()

        scheduled = _run(senpai_service.random_cron_trigger(
            db_engine, scheduler, _client(FakeCompletion()),
            rng=random.Random(7), sample_rate=1.0, max_delay_ms=1000,
        ))

        assert [gid for gid, _ in scheduled] == sorted([group_id, other])
        assert all(0 <= delay < 1000 for _, delay in scheduled)
        assert [delay for delay, _ in scheduler.calls] == [d for _, d in scheduled]

    def test_zero_sample_rate_schedules_nothing(self, db_engine, group_id):
        scheduler = RecordingScheduler()
        assert _run(senpai_service.random_cron_trigger(
            db_engine, scheduler, _client(FakeCompletion()),
            rng=random.Random(1), sample_rate=0.0,
        )) == []
        assert scheduler.calls == []

    def test_zero_sample_rate_skips_a_zero_draw(self, db_engine, group_id):
        class ZeroDraws(random.Random):
            def random(self):
                return 0.0

        scheduler = RecordingScheduler()
        assert _run(senpai_service.random_cron_trigger(
            db_engine, scheduler, _client(FakeCompletion()),
            rng=ZeroDraws(), sample_rate=0.0,
        )) == []
        assert scheduler.calls == []

    def test_disabled_groups_are_skipped(self, db_engine, group_id):
        senpai_service.update_senpai_settings(db_engine, "alice", group_id, enabled=False)
        scheduler = RecordingScheduler()
        assert _run(senpai_service.random_cron_trigger(
            db_engine, scheduler, _client(FakeCompletion()), sample_rate=1.0,
        )) == []

    def test_scheduled_job_posts_random_reply(self, db_engine, group_id):
        scheduler = RecordingScheduler()
        _run(senpai_service.random_cron_trigger(
            db_engine, scheduler, _client(FakeCompletion()),
            rng=random.Random(3), sample_rate=1.0,
        ))

        _, factory = scheduler.calls[0]
        message_id = _run(factory())
        posted = _senpai_messages(db_engine, group_id)
        assert [(m.id, m.senpai_trigger) for m in posted] == [(message_id, "random")]
