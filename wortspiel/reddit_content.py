# wortspiel/reddit_content.py
from __future__ import annotations

import logging
import random
import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import httpx

from .config import (
    DEFAULT_LANGUAGE, DEFAULT_SUBREDDIT, HOT_POSTS_LIMIT, HTTP_TIMEOUT, PUZZLE_SIZE,
    REDDIT_API_BASE, REDDIT_USER_AGENT,
)
from .schema import Choice, PuzzleMeta, WordMatchItem, WordMatchPuzzle
from .seed import today_ymd
from .storage import GameStorage

logger = logging.getLogger(__name__)

# English topic words that show up in language-learning post titles
TOPIC_TRANSLATIONS: Dict[str, List[str]] = {
    "learn": ["lernen", "studieren", "üben"],
    "help": ["Hilfe", "helfen", "unterstützen"],
    "question": ["Frage", "fragen", "Anfrage"],
    "beginner": ["Anfänger", "Neuling", "Einsteiger"],
    "practice": ["Übung", "üben", "praktizieren"],
    "grammar": ["Grammatik", "Sprachlehre", "Syntax"],
    "vocabulary": ["Wortschatz", "Vokabular", "Wörter"],
    "language": ["Sprache", "Sprachkenntnisse", "Linguistik"],
    "course": ["Kurs", "Lehrgang", "Unterricht"],
    "book": ["Buch", "Lehrbuch", "Lektüre"],
    "website": ["Webseite", "Internetseite", "Homepage"],
    "music": ["Musik", "Lieder", "Melodie"],
    "movie": ["Film", "Kinofilm", "Spielfilm"],
    "news": ["Nachrichten", "Neuigkeiten", "Berichterstattung"],
    "article": ["Artikel", "Beitrag", "Aufsatz"],
    "conversation": ["Gespräch", "Konversation", "Unterhaltung"],
    "speaking": ["Sprechen", "Aussprache", "mündlich"],
    "listening": ["Hören", "Hörverstehen", "zuhören"],
    "reading": ["Lesen", "Leseverständnis", "Lektüre"],
    "writing": ["Schreiben", "Aufsatz", "verfassen"],
    "translation": ["Übersetzung", "übersetzen", "Dolmetschen"],
    "word": ["Wort", "Begriff", "Ausdruck"],
    "sentence": ["Satz", "Aussage", "Phrase"],
    "pronunciation": ["Aussprache", "Betonung", "Artikulation"],
    "dialect": ["Dialekt", "Mundart", "regionale Sprache"],
    "idiom": ["Redewendung", "Sprichwort", "Redensart"],
    "verb": ["Verb", "Zeitwort", "Tätigkeitswort"],
    "noun": ["Substantiv", "Nomen", "Hauptwort"],
    "adjective": ["Adjektiv", "Eigenschaftswort", "Beiwort"],
    "preposition": ["Präposition", "Verhältniswort", "Vorwort"],
    "tense": ["Zeitform", "Tempus", "Verbform"],
    "case": ["Fall", "Kasus", "grammatischer Fall"],
    "gender": ["Geschlecht", "Genus", "grammatisches Geschlecht"],
    "plural": ["Plural", "Mehrzahl", "Pluralform"],
}

_NON_WORD = re.compile(r"[^\w]")


def extract_pairs(title: str, rng: random.Random) -> List[Tuple[str, str]]:
    """(english, german) pairs for known topic words in a post title."""
    pairs = []
    for raw in (title or "").lower().split():
        word = _NON_WORD.sub("", raw)
        if len(word) < 3 or word not in TOPIC_TRANSLATIONS:
            continue
        pairs.append((word, rng.choice(TOPIC_TRANSLATIONS[word])))
    return pairs


def build_item(english: str, german: str, index: int, rng: random.Random) -> WordMatchItem:
    pool = sorted({g for gs in TOPIC_TRANSLATIONS.values() for g in gs if g != german})
    wrong = rng.sample(pool, 2)
    labels = [german] + wrong
    rng.shuffle(labels)
    choices = [Choice(key=k, label=label) for k, label in zip("ABC", labels)]
    answer = next(c.key for c in choices if c.label == german)
    return WordMatchItem(
        id=f"reddit-{english}",
        prompt_en=english,
        choices=choices,
        answer_key=answer,
        note="This word was derived from Reddit content.",
        tags=["reddit", "de-DE"],
        ref=str(index),
    )


class RedditContentManager:
    """Word-match content built from a community's hot post titles."""

    def __init__(self, storage: GameStorage, transport: Optional[httpx.AsyncBaseTransport] = None,
                 rng: Optional[random.Random] = None):
        self.storage = storage
        self._transport = transport
        self.rng = rng or random.Random()

    async def fetch_hot_titles(self, subreddit: str = DEFAULT_SUBREDDIT,
                               limit: int = HOT_POSTS_LIMIT) -> List[str]:
        url = f"{REDDIT_API_BASE}/r/{subreddit}/hot.json"
        headers = {"accept": "application/json", "user-agent": REDDIT_USER_AGENT}
        async with httpx.AsyncClient(timeout=HTTP_TIMEOUT, transport=self._transport) as client:
            r = await client.get(url, headers=headers, params={"limit": limit})
            r.raise_for_status()
            data: Any = r.json()
        listing = data.get("data") if isinstance(data, dict) else None
        children = listing.get("children") if isinstance(listing, dict) else None
        if not isinstance(children, list):
            raise ValueError("Unexpected listing payload")
        titles = []
        for child in children:
            post = child.get("data") if isinstance(child, dict) else None
            title = post.get("title") if isinstance(post, dict) else None
            if isinstance(title, str) and title.strip():
                titles.append(title)
        return titles

    async def fetch_items(self, subreddit: str = DEFAULT_SUBREDDIT) -> List[WordMatchItem]:
        try:
            titles = await self.fetch_hot_titles(subreddit)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Fetching hot posts from r/%s failed: %s", subreddit, e)
            return []

        unique: Dict[str, str] = {}
        for title in titles:
            for english, german in extract_pairs(title, self.rng):
                unique.setdefault(english, german)
        pairs = list(unique.items())[:PUZZLE_SIZE]
        return [build_item(en, de, i, self.rng) for i, (en, de) in enumerate(pairs)]

    async def refresh_word_bank(self, subreddit: Optional[str] = None) -> bool:
        items = await self.fetch_items(subreddit or DEFAULT_SUBREDDIT)
        if not items:
            return False
        bank = await self.storage.get_word_bank(DEFAULT_LANGUAGE) or []
        existing = {i.id for i in bank}
        new_items = [i for i in items if i.id not in existing]
        await self.storage.save_word_bank(DEFAULT_LANGUAGE, bank + new_items)
        logger.info("Added %d community items to the %s bank", len(new_items), DEFAULT_LANGUAGE)
        return True

    async def create_puzzle(self, day: Optional[datetime] = None,
                            lang: str = DEFAULT_LANGUAGE) -> Optional[WordMatchPuzzle]:
        ymd = today_ymd(day)
        items = await self.fetch_items()
        if len(items) < PUZZLE_SIZE:
            logger.info("Not enough community content for a full puzzle (%d items)", len(items))
            return None
        puzzle = WordMatchPuzzle(
            id=f"{ymd}:{lang}:reddit",
            lang=lang,
            date=ymd,
            items=items[:PUZZLE_SIZE],
            meta=PuzzleMeta(author="reddit", source=DEFAULT_SUBREDDIT, difficulty=2),
        )
        await self.storage.save_puzzle(puzzle)
        return puzzle
