"""Daily fortune cooldown and profile display helpers."""

from __future__ import annotations

import math
import time

FORTUNE_COOLDOWN_SEC = 86400
XP_PER_LEVEL = 100

ELEMENT_NAMES = ("Fire", "Water", "Air", "Earth")


def can_claim_fortune(last_fortune: int, now: float | None = None) -> bool:
    """True once a full cooldown has elapsed since last_fortune (epoch seconds)."""
    now = time.time() if now is None else now
    return now - last_fortune >= FORTUNE_COOLDOWN_SEC


def fortune_cooldown_remaining(last_fortune: int, now: float | None = None) -> int:
    """Whole seconds until the next claim; 0 when claimable."""
    now = time.time() if now is None else now
    elapsed = math.floor(now - last_fortune)
    return max(0, FORTUNE_COOLDOWN_SEC - elapsed)


def element_name(element: int) -> str:
    """Display name for an element index; unknown values show as Fire."""
    if 0 <= element < len(ELEMENT_NAMES):
        return ELEMENT_NAMES[element]
    return ELEMENT_NAMES[0]


def xp_for_next_level(level: int) -> int:
    return level * XP_PER_LEVEL
