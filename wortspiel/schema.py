from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ChoiceKey = Literal["A", "B", "C"]


class WordEntry(BaseModel):
    word: str
    hint: str


class Choice(BaseModel):
    key: ChoiceKey
    label: str


class WordMatchItem(BaseModel):
    """One multiple-choice translation prompt."""

    id: str
    prompt_en: str
    direction: Literal["EN->L2", "L2->EN"] = "EN->L2"
    choices: List[Choice]
    answer_key: ChoiceKey = Field(alias="answerKey")
    note: Optional[str] = None
    tags: Optional[List[str]] = None
    variants: Optional[List[str]] = None
    ref: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class PuzzleMeta(BaseModel):
    author: Optional[str] = None
    source: Optional[str] = None
    difficulty: Optional[Literal[1, 2, 3]] = None


class WordMatchPuzzle(BaseModel):
    id: str
    lang: str
    date: str
    items: List[WordMatchItem]
    meta: Optional[PuzzleMeta] = None


class HangmanGame(BaseModel):
    id: str
    lang: str
    date: str
    word: str
    hint: str
    max_attempts: int = Field(6, alias="maxAttempts")
    difficulty: Literal["easy", "medium", "hard"]
    meta: Optional[PuzzleMeta] = None

    model_config = ConfigDict(populate_by_name=True)


class GameAnswer(BaseModel):
    item_id: str = Field(alias="itemId")
    pick: ChoiceKey
    correct: bool
    ms: int = Field(ge=0)

    model_config = ConfigDict(populate_by_name=True)


class UserResult(BaseModel):
    user_id: str = Field(alias="userId")
    seed: str
    score: int
    time_ms: int = Field(alias="timeMs")
    answers: List[GameAnswer]

    model_config = ConfigDict(populate_by_name=True)


class GuessRecord(BaseModel):
    letter: str
    correct: bool
    timestamp: int


class HangmanUserResult(BaseModel):
    user_id: str = Field(alias="userId")
    seed: str
    word: str
    success: bool
    score: int
    perfect: bool
    time_ms: int = Field(alias="timeMs")
    guesses: List[GuessRecord]

    model_config = ConfigDict(populate_by_name=True)


class UserState(BaseModel):
    streak: int = Field(0, ge=0)
    max_streak: int = Field(0, ge=0, alias="maxStreak")
    last_played: Optional[str] = Field(None, alias="lastPlayed")

    model_config = ConfigDict(populate_by_name=True)
