# wortspiel/storage.py
from __future__ import annotations

import json
from typing import Any, List, Optional

from .kv_store import KeyValueStore
from .schema import (
    HangmanGame, HangmanUserResult, UserResult, UserState, WordMatchItem, WordMatchPuzzle,
)
from .words import Difficulty, pool_key


def _dump(model) -> str:
    return model.model_dump_json(by_alias=True, exclude_none=True)


def _int(value: Optional[str]) -> int:
    try:
        return max(0, int(value)) if value is not None else 0
    except ValueError:
        return 0


class GameStorage:
    """Typed accessors over the key layout used by the game."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    # ───────── user state ─────────
    async def get_user_state(self, user_id: str) -> UserState:
        streak, max_streak, last_played = await self.store.mget(
            f"user:{user_id}:streak",
            f"user:{user_id}:maxStreak",
            f"user:{user_id}:lastPlayed",
        )
        return UserState(streak=_int(streak), max_streak=_int(max_streak), last_played=last_played or None)

    async def update_user_state(self, user_id: str, state: UserState) -> None:
        values = {
            f"user:{user_id}:streak": str(state.streak),
            f"user:{user_id}:maxStreak": str(state.max_streak),
        }
        if state.last_played:
            values[f"user:{user_id}:lastPlayed"] = state.last_played
        await self.store.mset(values)

    # ───────── results ─────────
    async def save_user_result(self, result: UserResult) -> None:
        await self.store.set(f"user:{result.user_id}:played:{result.seed}", _dump(result))

    async def save_hangman_result(self, result: HangmanUserResult) -> None:
        await self.store.set(f"user:{result.user_id}:hangman:{result.seed}", _dump(result))

    # ───────── sessions ─────────
    async def save_puzzle(self, puzzle: WordMatchPuzzle) -> None:
        await self.store.set(f"wm:puzzle:{puzzle.id}", _dump(puzzle))

    async def get_puzzle(self, seed: str) -> Optional[WordMatchPuzzle]:
        raw = await self.store.get(f"wm:puzzle:{seed}")
        return WordMatchPuzzle.model_validate_json(raw) if raw else None

    async def save_hangman_game(self, game: HangmanGame) -> None:
        await self.store.set(f"hangman:game:{game.id}", _dump(game))

    async def get_hangman_game(self, seed: str) -> Optional[HangmanGame]:
        raw = await self.store.get(f"hangman:game:{seed}")
        return HangmanGame.model_validate_json(raw) if raw else None

    # ───────── word-match bank ─────────
    async def save_word_bank(self, lang: str, items: List[WordMatchItem]) -> None:
        payload: List[Any] = [i.model_dump(by_alias=True, exclude_none=True) for i in items]
        await self.store.set(f"wm:bank:{lang}", json.dumps(payload, ensure_ascii=False))

    async def get_word_bank(self, lang: str) -> Optional[List[WordMatchItem]]:
        raw = await self.store.get(f"wm:bank:{lang}")
        if raw is None:
            return None
        return [WordMatchItem.model_validate(i) for i in json.loads(raw)]

    # ───────── pool stats ─────────
    async def existing_pool_keys(self) -> List[str]:
        keys = [pool_key(d) for d in Difficulty]
        return [k for k in keys if await self.store.exists(k)]
