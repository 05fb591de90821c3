from __future__ import annotations

import math
from typing import Optional, Sequence

from .schema import GameAnswer
from .seed import today_ymd


def make_grid(answers: Sequence[GameAnswer]) -> str:
    return "".join("🟩" if a.correct else "🟥" for a in answers)


def format_share(score: int, total_items: int, time_ms: int, perfect: bool,
                 answers: Sequence[GameAnswer], day: Optional[str] = None) -> str:
    seconds = math.floor(time_ms / 1000 + 0.5)
    star = " ⭐" if perfect else ""
    return f"WordMatch {day or today_ymd()} {score}/{total_items}{star} in {seconds}s\n{make_grid(answers)}"
