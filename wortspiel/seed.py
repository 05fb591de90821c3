# wortspiel/seed.py
from __future__ import annotations

from datetime import date as date_type, datetime
from typing import List, Optional, Sequence, TypeVar, Union

from .config import GAME_TZ

T = TypeVar("T")

# LCG constants for the shuffle recurrence
_LCG_MUL, _LCG_INC, _LCG_MOD = 9301, 49297, 233280


class NoContentAvailable(LookupError):
    """Raised when a selection is requested from an empty candidate list."""


class InvalidSeed(ValueError):
    pass


def today_ymd(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(GAME_TZ)
    return now.strftime("%Y-%m-%d")


def today_seed(day: Union[date_type, datetime, str], language: str) -> str:
    if isinstance(day, (date_type, datetime)):
        day = day.strftime("%Y-%m-%d")
    return f"{day}:{language}"


def parse_seed(seed: str):
    """Split a seed into (date, language); language may be None."""
    parts = (seed or "").split(":")
    ymd = parts[0].strip()
    if not ymd:
        raise InvalidSeed(f"Invalid seed format: {seed!r}")
    lang = parts[1].strip() if len(parts) > 1 and parts[1].strip() else None
    return ymd, lang


def seed_number(seed: str) -> int:
    """Sum of code points; stable index source for daily picks."""
    return sum(ord(ch) for ch in seed)


def seed_hash(seed: str) -> int:
    """32-bit rolling hash (h*31 + c), kept unsigned."""
    h = 0
    for ch in seed:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    return h


def seeded_shuffle(items: Sequence[T], seed: str) -> List[T]:
    """Return a reproducible Fisher-Yates permutation of `items`.

    Swap targets come from the linear-congruential recurrence
    h = (h * 9301 + 49297) % 233280 started at seed_hash(seed), so the same
    seed always yields the same order. Not suitable for anything that needs
    unpredictability.
    """
    shuffled = list(items)
    h = seed_hash(seed)
    i = len(shuffled)
    while i:
        h = (h * _LCG_MUL + _LCG_INC) % _LCG_MOD
        j = (h * i) // _LCG_MOD
        i -= 1
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def select_seeded_items(items: Sequence[T], count: int, seed: str) -> List[T]:
    return seeded_shuffle(items, seed)[:count]


def pick_index(seed: Union[str, int], size: int) -> int:
    if size <= 0:
        raise NoContentAvailable("No content available")
    n = seed_number(seed) if isinstance(seed, str) else int(seed)
    return n % size
