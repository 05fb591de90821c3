# wortspiel/hangman.py
from __future__ import annotations

import math
import time
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from .config import DEFAULT_LANGUAGE, GAME_TZ, HANGMAN_MAX_ATTEMPTS
from .schema import GuessRecord, HangmanGame, PuzzleMeta
from .seed import seed_number, today_ymd
from .storage import GameStorage
from .words import Difficulty, WordPool

IN_PROGRESS, WON, LOST = "in_progress", "won", "lost"


class GuessError(ValueError):
    pass


def word_letters(word: str) -> set:
    """Distinct letters a player has to find; spaces and hyphens are given."""
    return {ch for ch in word.lower() if ch.isalpha()}


def _now_ms() -> int:
    return int(time.time() * 1000)


class HangmanRound:
    """Guess-by-guess state of one hangman session."""

    def __init__(self, word: str, max_attempts: int = HANGMAN_MAX_ATTEMPTS):
        self.word = word
        self.max_attempts = max_attempts
        self.letters = word_letters(word)
        if not self.letters:
            raise GuessError(f"Nothing to guess in {word!r}")
        self.guesses: List[GuessRecord] = []

    @property
    def guessed(self) -> set:
        return {g.letter for g in self.guesses}

    @property
    def incorrect(self) -> int:
        return sum(1 for g in self.guesses if not g.correct)

    @property
    def status(self) -> str:
        if self.letters <= {g.letter for g in self.guesses if g.correct}:
            return WON
        if self.incorrect >= self.max_attempts:
            return LOST
        return IN_PROGRESS

    def masked(self) -> str:
        found = self.guessed
        return "".join(ch if (not ch.isalpha() or ch.lower() in found) else "_" for ch in self.word)

    def guess(self, letter: str, timestamp: Optional[int] = None) -> GuessRecord:
        if self.status != IN_PROGRESS:
            raise GuessError(f"Game is already {self.status}")
        letter = (letter or "").strip().lower()
        if len(letter) != 1 or not letter.isalpha():
            raise GuessError(f"Not a single letter: {letter!r}")
        if letter in self.guessed:
            raise GuessError(f"Letter already guessed: {letter!r}")
        record = GuessRecord(letter=letter, correct=letter in self.letters,
                             timestamp=_now_ms() if timestamp is None else timestamp)
        self.guesses.append(record)
        return record


def _time_bonus(seconds: float) -> int:
    if seconds < 30:
        return 50
    if seconds < 60:
        return 30
    if seconds < 90:
        return 15
    return 0


def calculate_score(word: str, guesses: Sequence[GuessRecord], success: bool,
                    time_ms: int) -> Tuple[int, bool]:
    incorrect = sum(1 for g in guesses if not g.correct)
    correct = len(guesses) - incorrect
    unique = len(word_letters(word)) or 1

    if success:
        score = 100 + (HANGMAN_MAX_ATTEMPTS - incorrect) * 15 + _time_bonus(time_ms / 1000)
        if correct <= unique:
            score += 50
        elif correct <= unique + 2:
            score += 25
    else:
        score = math.floor(50 * correct / unique)

    return score, success and incorrect == 0


def format_share_text(word: str, guesses: Sequence[GuessRecord], success: bool,
                      time_ms: int, day: Optional[str] = None) -> str:
    incorrect = sum(1 for g in guesses if not g.correct)
    lines = [f"Deutsch Hangman {day or today_ymd()}"]
    if success:
        lines.append(f'✅ I guessed "{word}" with {incorrect} wrong guesses in {time_ms // 1000}s!')
    else:
        remaining = max(0, HANGMAN_MAX_ATTEMPTS - incorrect)
        lines.append(f'❌ Failed to guess "{word}" ({remaining}/{HANGMAN_MAX_ATTEMPTS} attempts remaining)')
    marks = min(incorrect, HANGMAN_MAX_ATTEMPTS)
    lines.append("❌" * marks + "⬜" * (HANGMAN_MAX_ATTEMPTS - marks))
    return "\n".join(lines)


class HangmanService:
    def __init__(self, storage: GameStorage, pool: WordPool):
        self.storage = storage
        self.pool = pool

    async def create_daily_game(self, day: Optional[datetime] = None, language: str = DEFAULT_LANGUAGE,
                                difficulty: Difficulty = Difficulty.MEDIUM) -> HangmanGame:
        ymd = today_ymd(day)
        seed = f"{ymd}:{language}:hangman"
        existing = await self.storage.get_hangman_game(seed)
        if existing:
            return existing

        entry = await self.pool.get_word_by_index(difficulty, seed_number(seed))
        game = HangmanGame(
            id=seed, lang=language, date=ymd, word=entry.word, hint=entry.hint,
            max_attempts=HANGMAN_MAX_ATTEMPTS, difficulty=Difficulty(difficulty).value,
            meta=PuzzleMeta(source="hangman"),
        )
        await self.storage.save_hangman_game(game)
        return game

    async def create_practice_game(self, language: str = DEFAULT_LANGUAGE,
                                   difficulty: Difficulty = Difficulty.MEDIUM) -> HangmanGame:
        ymd = today_ymd(datetime.now(GAME_TZ))
        entry = await self.pool.get_random_word(difficulty)
        # practice rounds are never stored
        return HangmanGame(
            id=f"{ymd}:{language}:hangman:practice:{_now_ms()}", lang=language, date=ymd,
            word=entry.word, hint=entry.hint, max_attempts=HANGMAN_MAX_ATTEMPTS,
            difficulty=Difficulty(difficulty).value, meta=PuzzleMeta(source="practice"),
        )
