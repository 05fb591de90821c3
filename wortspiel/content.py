# wortspiel/content.py
from __future__ import annotations

import logging
from typing import List

from .config import DEFAULT_LANGUAGE, PUZZLE_SIZE
from .schema import Choice, PuzzleMeta, WordMatchItem, WordMatchPuzzle
from .seed import NoContentAvailable, parse_seed, select_seeded_items
from .storage import GameStorage

logger = logging.getLogger(__name__)


def _item(item_id, prompt, choices, answer, note, tags, variants=None) -> WordMatchItem:
    return WordMatchItem(
        id=item_id,
        prompt_en=prompt,
        choices=[Choice(key=k, label=label) for k, label in zip("ABC", choices)],
        answer_key=answer,
        note=note,
        tags=tags,
        variants=variants,
    )


GERMAN_WORD_BANK: List[WordMatchItem] = [
    _item("w1", "embarrassed", ["embarazada", "verlegen", "peinlich"], "B",
          "Verlegen means embarrassed/shy. Peinlich means embarrassing (adjective).",
          ["emotion", "de-DE"], ["schüchtern"]),
    _item("w2", "kitchen", ["die Küche", "das Zimmer", "der Keller"], "A",
          "Die Küche is the kitchen. Das Zimmer is room, der Keller is basement.",
          ["house", "de-DE"]),
    _item("w3", "friend", ["der Feind", "der Fremde", "der Freund"], "C",
          "Der Freund is friend (male). Der Feind is enemy, der Fremde is stranger.",
          ["people", "de-DE"], ["die Freundin"]),
    _item("w4", "beautiful", ["hässlich", "schön", "groß"], "B",
          "Schön means beautiful. Hässlich means ugly, groß means big/tall.",
          ["adjective", "de-DE"]),
    _item("w5", "to eat", ["trinken", "schlafen", "essen"], "C",
          "Essen means to eat. Trinken is to drink, schlafen is to sleep.",
          ["verb", "de-DE"]),
    _item("w6", "car", ["das Auto", "der Zug", "das Fahrrad"], "A",
          "Das Auto is car. Der Zug is train, das Fahrrad is bicycle.",
          ["transport", "de-DE"]),
    _item("w7", "water", ["das Bier", "das Wasser", "der Wein"], "B",
          "Das Wasser is water. Das Bier is beer, der Wein is wine.",
          ["drink", "de-DE"]),
    _item("w8", "house", ["das Haus", "die Straße", "der Park"], "A",
          "Das Haus is house. Die Straße is street, der Park is park.",
          ["building", "de-DE"]),
    _item("w9", "good", ["schlecht", "gut", "okay"], "B",
          "Gut means good. Schlecht means bad, okay means okay.",
          ["adjective", "de-DE"]),
    _item("w10", "dog", ["die Katze", "der Vogel", "der Hund"], "C",
          "Der Hund is dog. Die Katze is cat, der Vogel is bird.",
          ["animal", "de-DE"]),
    _item("w11", "book", ["das Buch", "der Stift", "das Papier"], "A",
          "Das Buch is book. Der Stift is pen, das Papier is paper.",
          ["object", "de-DE"]),
    _item("w12", "red", ["blau", "rot", "grün"], "B",
          "Rot means red. Blau is blue, grün is green.",
          ["color", "de-DE"]),
]


class PuzzleService:
    """Daily word-match puzzles, materialized once per seed."""

    def __init__(self, storage: GameStorage, size: int = PUZZLE_SIZE):
        self.storage = storage
        self.size = size

    async def initialize_content(self) -> None:
        if await self.storage.get_word_bank(DEFAULT_LANGUAGE) is None:
            await self.storage.save_word_bank(DEFAULT_LANGUAGE, GERMAN_WORD_BANK)
            logger.info("Seeded %s word bank with %d items", DEFAULT_LANGUAGE, len(GERMAN_WORD_BANK))

    async def get_daily_puzzle(self, seed: str) -> WordMatchPuzzle:
        puzzle = await self.storage.get_puzzle(seed)
        if puzzle is None:
            puzzle = await self.generate_puzzle_from_bank(seed)
            await self.storage.save_puzzle(puzzle)
        return puzzle

    async def generate_puzzle_from_bank(self, seed: str) -> WordMatchPuzzle:
        ymd, lang = parse_seed(seed)
        lang = lang or DEFAULT_LANGUAGE

        bank = await self.storage.get_word_bank(lang)
        if bank is None and lang == DEFAULT_LANGUAGE:
            bank = list(GERMAN_WORD_BANK)
            await self.storage.save_word_bank(lang, bank)
        if not bank:
            raise NoContentAvailable(f"No word bank for language {lang!r}")

        return WordMatchPuzzle(
            id=seed,
            lang=lang,
            date=ymd,
            items=select_seeded_items(bank, self.size, seed),
            meta=PuzzleMeta(author="system", difficulty=1),
        )
