# wortspiel/providers.py
from __future__ import annotations

import logging
import random
from typing import Any, Dict, List, Optional, Protocol, Sequence

import httpx

from .config import RANDOM_WORDS_API_BASE, OPENTHESAURUS_API_BASE, HTTP_TIMEOUT
from .schema import WordEntry

logger = logging.getLogger(__name__)

HEADERS = {"accept": "application/json"}
MIN_WORD_LEN = 3

RANDOM_WORD_CATEGORIES = ["wordle", "sports", "animals", "birds", "softwares", "companies"]

# Seeds for thesaurus lookups when no term is given
SEED_TERMS = [
    "wetter", "essen", "sport", "haus", "stadt", "arbeit", "schule", "reise",
    "natur", "musik", "farbe", "tier", "zeit", "spiel", "wasser", "freund",
]


class WordProvider(Protocol):
    name: str

    async def fetch_candidate_words(self, term: Optional[str], count: int) -> List[WordEntry]:
        ...


def length_hint(word: str) -> str:
    return f"A German word with {len(word)} letters"


def _clean(words: Sequence[Any]) -> List[str]:
    """Lower-case, trim, drop short/non-string/phrase values, keep first occurrence."""
    seen = set()
    out: List[str] = []
    for w in words:
        if not isinstance(w, str):
            continue
        w = w.strip().lower()
        if len(w) < MIN_WORD_LEN or w in seen:
            continue
        # thesaurus terms may be phrases like "(sich) freuen"
        if not w.replace("-", "").isalpha():
            continue
        seen.add(w)
        out.append(w)
    return out


def _words_from_payload(data: Any) -> List[str]:
    """Accepts list[str], list[{"word": ...}] or {"words": [...]}."""
    if isinstance(data, dict):
        data = data.get("words")
    if not isinstance(data, list):
        return []
    out = []
    for x in data:
        if isinstance(x, str):
            out.append(x)
        elif isinstance(x, dict) and isinstance(x.get("word"), str):
            out.append(x["word"])
    return out


class _HttpProvider:
    def __init__(self, base_url: str, transport: Optional[httpx.AsyncBaseTransport] = None,
                 timeout: float = HTTP_TIMEOUT):
        self.base_url = base_url
        self._transport = transport
        self._timeout = timeout

    async def _http_get(self, params: Dict[str, Any]):
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            r = await client.get(self.base_url, headers=HEADERS, params=params)
            r.raise_for_status()
            return r.json()


class RandomWordsClient(_HttpProvider):
    """Random Words API (https://random-words-api.kushcreates.com)."""

    name = "random-words-api"

    def __init__(self, base_url: str = RANDOM_WORDS_API_BASE, language: str = "de",
                 rng: Optional[random.Random] = None, **kwargs):
        super().__init__(base_url, **kwargs)
        self.language = language
        self.rng = rng or random.Random()

    async def fetch_words(self, *, category: Optional[str] = None, length: Optional[int] = None,
                          words: Optional[int] = None, firstletter: Optional[str] = None) -> List[str]:
        params: Dict[str, Any] = {"language": self.language, "type": "lowercase", "alphabetize": "false"}
        if category:
            params["category"] = category
        if length:
            params["length"] = length
        if words:
            params["words"] = words
        if firstletter:
            params["firstletter"] = firstletter
        try:
            data = await self._http_get(params)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("random words request failed: %s", e)
            return []
        return _words_from_payload(data)

    @staticmethod
    def build_hint(word: str, category: Optional[str] = None, length: Optional[int] = None) -> str:
        parts = []
        if category:
            parts.append(f"Category: {category}")
        if length:
            parts.append(f"{length} letters")
        if not parts:
            return f"Random German word ({len(word)} letters)"
        return " · ".join(parts)

    async def fetch_candidate_words(self, term: Optional[str], count: int) -> List[WordEntry]:
        # the service has no search; term is ignored
        category = self.rng.choice(RANDOM_WORD_CATEGORIES)
        length = self.rng.randint(4, 10)
        wanted = max(3, min(count, 12))
        words = await self.fetch_words(category=category, length=length, words=wanted)
        return [WordEntry(word=w, hint=self.build_hint(w, category, length)) for w in _clean(words)]


class OpenThesaurusClient(_HttpProvider):
    """OpenThesaurus synonym search (https://www.openthesaurus.de/about/api)."""

    name = "openthesaurus"

    def __init__(self, base_url: str = OPENTHESAURUS_API_BASE, rng: Optional[random.Random] = None, **kwargs):
        super().__init__(base_url, **kwargs)
        self.rng = rng or random.Random()

    async def search(self, query: str, *, similar: bool = False, substring: bool = False,
                     startswith: bool = False) -> Dict[str, Any]:
        params: Dict[str, Any] = {"q": query, "format": "application/json"}
        if similar:
            params["similar"] = "true"
        if substring:
            params["substring"] = "true"
        if startswith:
            params["startswith"] = "true"
        try:
            data = await self._http_get(params)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("openthesaurus request for %r failed: %s", query, e)
            return {}
        return data if isinstance(data, dict) else {}

    async def get_synonyms(self, word: str) -> List[str]:
        data = await self.search(word)
        out: List[str] = []
        for synset in data.get("synsets") or []:
            if not isinstance(synset, dict):
                continue
            for t in synset.get("terms") or []:
                term = t.get("term") if isinstance(t, dict) else None
                if isinstance(term, str) and term.lower() != word.lower() and term not in out:
                    out.append(term)
        return out

    async def get_similar_words(self, word: str) -> List[Dict[str, Any]]:
        data = await self.search(word, similar=True)
        return [s for s in data.get("similar") or [] if isinstance(s, dict) and isinstance(s.get("term"), str)]

    @staticmethod
    def _substring_terms(data: Dict[str, Any]) -> List[str]:
        return [s["term"] for s in data.get("substring") or []
                if isinstance(s, dict) and isinstance(s.get("term"), str)]

    async def get_words_with_substring(self, substring: str) -> List[str]:
        return self._substring_terms(await self.search(substring, substring=True))

    async def get_words_starting_with(self, prefix: str) -> List[str]:
        return self._substring_terms(await self.search(prefix, startswith=True))

    async def generate_hint(self, word: str) -> str:
        synonyms = await self.get_synonyms(word)
        if synonyms:
            return f"Similar to: {synonyms[0]}"
        return length_hint(word)

    async def collect_related_words(self, term: str, count: int) -> List[str]:
        """Prefix matches, then substring matches, then synonyms; short words dropped."""
        pool = list(await self.get_words_starting_with(term))
        if len(pool) < count * 2:
            pool += await self.get_words_with_substring(term)
        if len(pool) < count and len(term) >= 3:
            pool += await self.get_synonyms(term)
        return _clean(pool)

    async def fetch_candidate_words(self, term: Optional[str], count: int) -> List[WordEntry]:
        term = (term or self.rng.choice(SEED_TERMS)).strip()
        pool = await self.collect_related_words(term, count)
        self.rng.shuffle(pool)
        return [WordEntry(word=w, hint=await self.generate_hint(w)) for w in pool[:count]]


def default_providers() -> List[WordProvider]:
    return [RandomWordsClient(), OpenThesaurusClient()]
