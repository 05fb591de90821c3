# wortspiel/scoring.py
from __future__ import annotations

import math
from typing import Sequence, Tuple

from .schema import GameAnswer, UserState

PASS_RATIO = 0.625  # 5 of 8


def compute_score(answers: Sequence[GameAnswer]) -> Tuple[int, bool]:
    score = sum(1 for a in answers if a.correct)
    return score, score == len(answers)


def pass_threshold(total_items: int) -> int:
    return math.ceil(total_items * PASS_RATIO)


def has_passed(score: int, total_items: int) -> bool:
    return score >= pass_threshold(total_items)


def update_streak(current_streak: int, score: int, total_items: int) -> Tuple[int, bool]:
    passed = has_passed(score, total_items)
    return (current_streak + 1 if passed else 0), passed


def calculate_total_time(answers: Sequence[GameAnswer]) -> int:
    return sum(a.ms for a in answers)


def next_user_state(state: UserState, passed: bool, seed: str) -> UserState:
    streak = state.streak + 1 if passed else 0
    return UserState(streak=streak, max_streak=max(state.max_streak, streak), last_played=seed)


async def update_user_progress(storage, user_id: str, seed: str, passed: bool) -> UserState:
    """Read-modify-write of the user's streak.

    Two overlapping submissions for the same user can lose one update; the
    store only guarantees single-key atomicity.
    """
    current = await storage.get_user_state(user_id)
    updated = next_user_state(current, passed, seed)
    await storage.update_user_state(user_id, updated)
    return updated
