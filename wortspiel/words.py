# wortspiel/words.py
from __future__ import annotations

import enum
import logging
import random
from typing import Dict, List, Optional, Sequence

from .kv_store import KeyValueStore
from .providers import WordProvider, OpenThesaurusClient, length_hint
from .schema import WordEntry
from .seed import NoContentAvailable

logger = logging.getLogger(__name__)

POOL_KEY_PREFIX = "german_words"
FALLBACK_ENRICH_COUNT = 6


class Difficulty(str, enum.Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


def classify_difficulty(word: str) -> Difficulty:
    """Length tiers on code points: <=5 easy, 6-9 medium, >=10 hard."""
    n = len(word.strip())
    if n <= 5:
        return Difficulty.EASY
    if n <= 9:
        return Difficulty.MEDIUM
    return Difficulty.HARD


def pool_key(tier: Difficulty) -> str:
    return f"{POOL_KEY_PREFIX}:{Difficulty(tier).value}"


def normalize_word(word: str) -> str:
    return (word or "").strip().lower()


def has_letters(word: str) -> bool:
    return any(ch.isalpha() for ch in word)


class WordPool:
    """Hangman word pool: three difficulty tiers of (word, hint) pairs.

    A word appears at most once across all tiers, compared lower-cased. The
    in-memory copy mirrors the `german_words:{tier}` hashes; it is filled by
    `load()` and only ever appended to afterwards.

    Use `await WordPool.open(store, providers)` to get a loaded handle.
    Providers are tried in the given order during enrichment.
    """

    def __init__(self, store: KeyValueStore, providers: Sequence[WordProvider] = (),
                 rng: Optional[random.Random] = None):
        self.store = store
        self.providers = list(providers)
        self.rng = rng or random.Random()
        self.loaded = False
        self._words: Dict[Difficulty, List[WordEntry]] = {d: [] for d in Difficulty}
        self._known: set = set()

    @classmethod
    async def open(cls, store: KeyValueStore, providers: Sequence[WordProvider] = (), **kwargs) -> "WordPool":
        pool = cls(store, providers, **kwargs)
        await pool.load()
        return pool

    async def load(self) -> None:
        words: Dict[Difficulty, List[WordEntry]] = {d: [] for d in Difficulty}
        try:
            for tier in Difficulty:
                raw = await self.store.hgetall(pool_key(tier))
                words[tier] = [WordEntry(word=w, hint=h or length_hint(w)) for w, h in raw.items()]
        except Exception:
            # an unreadable store starts empty; enrichment refills it later
            logger.exception("Could not load word pool; starting empty")
            words = {d: [] for d in Difficulty}
        self._words = words
        self._known = {normalize_word(e.word) for entries in words.values() for e in entries}
        self.loaded = True
        logger.info(
            "Word pools ready - easy: %d, medium: %d, hard: %d",
            len(words[Difficulty.EASY]), len(words[Difficulty.MEDIUM]), len(words[Difficulty.HARD]),
        )

    async def _ensure_loaded(self) -> None:
        if not self.loaded:
            await self.load()

    # ───────── reads ─────────
    async def get_words(self, tier: Difficulty) -> List[WordEntry]:
        await self._ensure_loaded()
        return list(self._words[Difficulty(tier)])

    async def get_all_words(self) -> Dict[Difficulty, List[WordEntry]]:
        await self._ensure_loaded()
        return {d: list(entries) for d, entries in self._words.items()}

    async def counts(self) -> Dict[str, int]:
        await self._ensure_loaded()
        out = {d.value: len(self._words[d]) for d in Difficulty}
        out["total"] = sum(out.values())
        return out

    def contains(self, word: str) -> bool:
        return normalize_word(word) in self._known

    async def _non_empty_tier(self, tier: Difficulty) -> List[WordEntry]:
        """Tier contents; reload from the store, then enrich, before giving up."""
        tier = Difficulty(tier)
        await self._ensure_loaded()
        if not self._words[tier]:
            await self.load()
        if not self._words[tier]:
            await self.enrich_from_external_source(FALLBACK_ENRICH_COUNT)
        if not self._words[tier]:
            raise NoContentAvailable(f"No words available for difficulty {tier.value}")
        return self._words[tier]

    async def get_word_by_index(self, tier: Difficulty, index: int) -> WordEntry:
        words = await self._non_empty_tier(tier)
        return words[index % len(words)]

    async def get_random_word(self, tier: Difficulty) -> WordEntry:
        words = await self._non_empty_tier(tier)
        return self.rng.choice(words)

    # ───────── writes ─────────
    def _append(self, entry: WordEntry, tier: Difficulty) -> None:
        self._words[tier].append(entry)
        self._known.add(entry.word)

    async def _persist(self, batch: Dict[Difficulty, List[WordEntry]]) -> None:
        """Write each tier hash, then mirror it in memory. A failed write leaves memory untouched."""
        for tier, entries in batch.items():
            if entries:
                await self.store.hset(pool_key(tier), {e.word: e.hint or length_hint(e.word) for e in entries})
                for e in entries:
                    self._append(e, tier)
                logger.info("Saved %d %s words to %s", len(entries), tier.value, pool_key(tier))

    async def add_word(self, word: str, hint: str, tier: Optional[Difficulty] = None) -> bool:
        await self._ensure_loaded()
        normalized = normalize_word(word)
        if not normalized:
            raise ValueError("word must not be empty")
        if not has_letters(normalized):
            raise ValueError(f"word has no letters: {normalized!r}")
        if normalized in self._known:
            return False
        tier = Difficulty(tier) if tier else classify_difficulty(normalized)
        entry = WordEntry(word=normalized, hint=(hint or "").strip() or length_hint(normalized))
        await self._persist({tier: [entry]})
        logger.debug("Added %s to %s: %s", normalized, tier.value, entry.hint)
        return True

    async def _add_candidates(self, candidates: Sequence[WordEntry], limit: int) -> None:
        batch: Dict[Difficulty, List[WordEntry]] = {d: [] for d in Difficulty}
        seen: set = set()
        for cand in candidates:
            if len(seen) >= limit:
                break
            w = normalize_word(cand.word)
            if not has_letters(w) or w in self._known or w in seen:
                continue
            seen.add(w)
            batch[classify_difficulty(w)].append(WordEntry(word=w, hint=cand.hint or length_hint(w)))
        await self._persist(batch)

    async def enrich_from_external_source(self, count: int, term: Optional[str] = None) -> int:
        """Add up to `count` new words from the providers, in priority order.

        Provider failures count as zero results. Returns how many words were
        actually appended across all tiers.
        """
        await self._ensure_loaded()
        added = 0
        for provider in self.providers:
            if added >= count:
                break
            before = len(self._known)
            try:
                candidates = await provider.fetch_candidate_words(term, count - added)
                await self._add_candidates(candidates, count - added)
            except Exception:
                logger.exception("Enrichment from %s failed", getattr(provider, "name", provider))
            # tiers written before a failed write still count
            added += len(self._known) - before
        logger.info("Enrichment added %d/%d words", added, count)
        return added

    async def search_and_add(self, term: str, count: int,
                             thesaurus: Optional[OpenThesaurusClient] = None) -> int:
        """Thesaurus-driven enrichment around `term`."""
        await self._ensure_loaded()
        thesaurus = thesaurus or next(
            (p for p in self.providers if isinstance(p, OpenThesaurusClient)), None
        ) or OpenThesaurusClient()
        before = len(self._known)
        try:
            related = await thesaurus.collect_related_words(term, count)
            fresh = [w for w in related if w not in self._known]
            self.rng.shuffle(fresh)
            candidates = [WordEntry(word=w, hint=await thesaurus.generate_hint(w)) for w in fresh[:count]]
            await self._add_candidates(candidates, count)
        except Exception:
            logger.exception("Searching and adding words for %r failed", term)
        added = len(self._known) - before
        logger.info("Added %d words related to %r", added, term)
        return added
