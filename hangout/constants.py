"""
hangout.constants — Shared Constants & Helpers
===============================================

Single source of truth for the special reaction emoji, default thresholds,
and the millisecond clock used for every persisted timestamp.
"""

from __future__ import annotations

import math
import time

# ---------------------------------------------------------------------------
# Reaction side effects
# ---------------------------------------------------------------------------
PIN_EMOJI = "\U0001f4cc"     # 📌
TROPHY_EMOJI = "\U0001f3c6"  # 🏆

DEFAULT_HALL_OF_FAME_THRESHOLD = 5

# ---------------------------------------------------------------------------
# Senpai context sizes
# ---------------------------------------------------------------------------
SENPAI_RECENT_MESSAGES = 50
SENPAI_MEMORY_LIMIT = 20
SENPAI_HALL_OF_FAME_LIMIT = 10

# ---------------------------------------------------------------------------
# Invite codes
# ---------------------------------------------------------------------------
INVITE_CODE_ALPHABET = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
)
INVITE_CODE_LENGTH = 8

# Sidebar ordering for channel types
CHANNEL_TYPE_ORDER: dict[str, int] = {
    "hangout": 0,
    "event": 1,
    "bracket": 2,
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def now_ms() -> int:
    """Current wall-clock time as epoch milliseconds."""
    return int(time.time() * 1000)


def js_round(value: float) -> int:
    """Round half toward positive infinity.

    Python's :func:`round` uses banker's rounding, which would shift
    settlement totals by a cent on exact ``.5`` shares.
    """
    return math.floor(value + 0.5)
