import random

import httpx
import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker

from wortspiel.db import create_tables, make_engine
from wortspiel.kv_store import KeyValueStore
from wortspiel.schema import WordEntry
from wortspiel.storage import GameStorage
from wortspiel.words import WordPool


class FakeProvider:
    """In-memory provider; records calls, optionally fails."""

    name = "fake"

    def __init__(self, words=(), fail=False):
        self.words = list(words)
        self.fail = fail
        self.calls = []

    async def fetch_candidate_words(self, term, count):
        self.calls.append((term, count))
        if self.fail:
            raise RuntimeError("provider down")
        return [WordEntry(word=w, hint=f"hint for {w}") for w in self.words]


@pytest.fixture
async def engine(tmp_path):
    eng = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await create_tables(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def kv(engine):
    return KeyValueStore(async_sessionmaker(engine, expire_on_commit=False))


@pytest.fixture
def storage(kv):
    return GameStorage(kv)


@pytest.fixture
def provider():
    return FakeProvider(["Schule", "Baum", "Krankenhaus", "Fenster", "Haus"])


@pytest.fixture
async def pool(kv, provider):
    return await WordPool.open(kv, [provider], rng=random.Random(7))


@pytest.fixture
def hot_posts_transport():
    titles = [
        "Best book to learn grammar?",
        "Vocabulary question about a verb",
        "Pronunciation help for a beginner",
        "Reading and writing practice",
        "Translation of this sentence",
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        children = [{"data": {"title": t}} for t in titles]
        return httpx.Response(200, json={"data": {"children": children}})

    return httpx.MockTransport(handler)
