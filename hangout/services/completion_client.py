"""
hangout.services.completion_client — Chat Completion HTTP Client
=================================================================

Thin async client for an OpenAI-compatible ``/chat/completions``
endpoint.  Text in, text out; every failure mode surfaces as
:class:`~hangout.errors.ExternalServiceError` so the Senpai orchestrator
has a single thing to catch.

One ``httpx.AsyncClient`` is opened lazily and reused for every call;
the owner closes it with :meth:`CompletionClient.aclose`.  No retries
are attempted here.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

import httpx

from hangout.errors import ExternalServiceError

if TYPE_CHECKING:
    from hangout.config import HangoutConfig

logger = logging.getLogger(__name__)


class CompletionClient:
    """POSTs a system + user prompt pair and returns the reply text."""

    def __init__(
        self,
        url: str,
        api_key: str | None,
        *,
        model: str = "gpt-4o-mini",
        max_tokens: int = 300,
        timeout: float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

    @classmethod
    def from_config(cls, cfg: HangoutConfig) -> CompletionClient:
        """Build a client from config; the key comes from ``OPENAI_API_KEY``."""
        return cls(
            cfg.completion_url,
            os.getenv("OPENAI_API_KEY"),
            model=cfg.completion_model,
            max_tokens=cfg.completion_max_tokens,
            timeout=cfg.completion_timeout,
        )

    def _client(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._http

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    def _payload(self, system_prompt: str, user_prompt: str) -> dict:
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        if not self.api_key:
            raise ExternalServiceError("OPENAI_API_KEY is not configured")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            resp = await self._client().post(
                self.url, json=self._payload(system_prompt, user_prompt), headers=headers
            )
        except httpx.TimeoutException as exc:
            raise ExternalServiceError(f"Completion request timed out: {exc}") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise ExternalServiceError(f"Completion request failed: {exc}") from exc

        if not resp.is_success:
            raise ExternalServiceError(
                f"Completion service returned HTTP {resp.status_code}",
                status=resp.status_code,
            )

        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise ExternalServiceError("Malformed completion response") from exc

        if not isinstance(content, str) or not content.strip():
            raise ExternalServiceError("Empty completion response")
        return content.strip()
