"""
Hangout — Group Chat Backend with Bill Splits and an AI Sidekick
=================================================================
Groups, channels and threaded messages, reactions that pin and enshrine
messages, event logistics, bill-splitting with debt settlement, and
"Senpai", a scheduled AI persona that chimes in on the conversation.

Package layout::

    hangout/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Emoji, defaults, time helpers
    ├── errors.py          # Domain error taxonomy
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + session + async helper
    │   └── models.py      # All ORM models
    ├── engine/
    │   ├── ledger.py      # Bill-split settlement (pure)
    │   ├── reactions.py   # Reaction aggregation (pure)
    │   ├── thresholds.py  # Pin / Hall of Fame decisions (pure)
    │   ├── frequency.py   # Senpai trigger gating (pure)
    │   ├── prompt.py      # Senpai prompt building (pure)
    │   └── roles.py       # Role hierarchy rules (pure)
    ├── services/
    │   ├── permissions.py      # Identity + membership guard
    │   ├── user_service.py     # User upsert from identity
    │   ├── group_service.py    # Groups, roles, ownership
    │   ├── channel_service.py  # Channels, forks, archival
    │   ├── message_service.py  # Messages + thread counters
    │   ├── reaction_service.py # Reactions, pins, Hall of Fame
    │   ├── split_service.py    # Splits, claims, settlement
    │   ├── event_service.py    # RSVPs, checklist, travel
    │   ├── notification_service.py # Notification rows
    │   ├── senpai_service.py   # AI persona orchestration
    │   └── completion_client.py # HTTP completion client
    ├── worker/
    │   ├── __main__.py    # python -m hangout.worker
    │   ├── scheduler.py   # run-after-delay helper
    │   └── tasks.py       # Cron loops (archival, random Senpai)
    └── api/
        ├── main.py        # FastAPI app
        ├── deps.py        # Engine / identity dependencies
        ├── errors.py      # Domain error → HTTP mapping
        ├── serializers.py # ORM row → JSON dicts
        └── routes/        # REST endpoints per resource
"""

__version__ = "0.1.0"
