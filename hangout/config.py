"""
hangout.config — YAML Configuration Loader
===========================================

Reads ``config.yaml`` for **infrastructure-only** settings: where the AI
completion service lives, how large its replies may be, and how the cron
sweeps are paced.  Secrets (``DATABASE_URL``, ``JWT_SECRET``,
``OPENAI_API_KEY``) stay in the environment / ``.env``.

Usage::

    from hangout.config import load_config

    cfg = load_config()              # reads ./config.yaml by default
    print(cfg.completion_model)      # "gpt-4o-mini"
    print(cfg.senpai_sample_rate)    # 0.3
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class HangoutConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Identity
    app_name: str

    # API
    api_port: int

    # Completion service
    completion_url: str
    completion_model: str = "gpt-4o-mini"
    completion_max_tokens: int = 300
    completion_timeout: float = 20.0

    # Random engagement sweep
    senpai_sample_rate: float = 0.3
    senpai_max_delay_ms: int = 10 * 60 * 1000
    senpai_interval_hours: int = 4

    # Daily event archival sweep (UTC)
    archive_hour_utc: int = 6


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> HangoutConfig:
    """Read *path* and return a :class:`HangoutConfig` instance.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh)

    senpai = raw.get("senpai") or {}
    completion = raw["completion"]

    return HangoutConfig(
        app_name=raw["app_name"],
        api_port=int(raw["api_port"]),
        completion_url=completion["url"],
        completion_model=completion.get("model", "gpt-4o-mini"),
        completion_max_tokens=int(completion.get("max_tokens", 300)),
        completion_timeout=float(completion.get("timeout_seconds", 20.0)),
        senpai_sample_rate=float(senpai.get("sample_rate", 0.3)),
        senpai_max_delay_ms=int(senpai.get("max_delay_ms", 10 * 60 * 1000)),
        senpai_interval_hours=int(senpai.get("interval_hours", 4)),
        archive_hour_utc=int(raw.get("archive_hour_utc", 6)),
    )
