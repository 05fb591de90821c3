import pytest

from wortspiel.seed import NoContentAvailable
from wortspiel.words import Difficulty, WordPool, classify_difficulty, pool_key

from conftest import FakeProvider


@pytest.mark.parametrize("word,tier", [
    ("a", Difficulty.EASY),
    ("apfel", Difficulty.EASY),
    ("größe", Difficulty.EASY),
    ("banane", Difficulty.MEDIUM),
    ("schmetterl", Difficulty.HARD),
    ("zeitungsen", Difficulty.HARD),
    ("bibliothek", Difficulty.HARD),
    ("computer", Difficulty.MEDIUM),
    ("fahrrades", Difficulty.MEDIUM),
])
def test_classify_difficulty(word, tier):
    assert classify_difficulty(word) is tier


async def test_open_returns_loaded_handle(kv):
    await kv.hset(pool_key(Difficulty.EASY), {"baum": "tree"})
    pool = await WordPool.open(kv)
    assert pool.loaded
    assert [w.word for w in await pool.get_words(Difficulty.EASY)] == ["baum"]


async def test_add_word_normalizes_and_rejects_duplicates(pool):
    assert await pool.add_word("Apfel", "A fruit") is True
    assert await pool.add_word("apfel ", "A fruit") is False
    words = await pool.get_words(Difficulty.EASY)
    assert [w.word for w in words] == ["apfel"]


async def test_duplicate_rejected_across_tiers(pool):
    assert await pool.add_word("Haus", "house", Difficulty.HARD)
    assert not await pool.add_word("HAUS", "house")
    assert await pool.get_words(Difficulty.EASY) == []


async def test_add_word_persists(pool, kv):
    await pool.add_word("Bibliothek", "A place with books")
    assert await kv.hgetall(pool_key(Difficulty.HARD)) == {"bibliothek": "A place with books"}
    reopened = await WordPool.open(kv)
    assert reopened.contains("BIBLIOTHEK")


async def test_add_word_rejects_empty(pool):
    with pytest.raises(ValueError):
        await pool.add_word("   ", "nothing")


async def test_enrichment_classifies_and_counts(pool, kv):
    added = await pool.enrich_from_external_source(10)
    assert added == 5
    assert {w.word for w in await pool.get_words(Difficulty.EASY)} == {"baum", "haus"}
    assert {w.word for w in await pool.get_words(Difficulty.MEDIUM)} == {"schule", "fenster"}
    assert {w.word for w in await pool.get_words(Difficulty.HARD)} == {"krankenhaus"}
    assert (await kv.hgetall(pool_key(Difficulty.HARD)))["krankenhaus"] == "hint for Krankenhaus"


async def test_enrichment_never_adds_existing_words(pool):
    await pool.add_word("schule", "school")
    await pool.add_word("BAUM", "tree")
    assert await pool.enrich_from_external_source(10) == 3
    assert (await pool.counts())["total"] == 5
    assert await pool.enrich_from_external_source(10) == 0


async def test_enrichment_dedups_within_batch(kv):
    pool = await WordPool.open(kv, [FakeProvider(["Wald", "wald", " WALD "])])
    assert await pool.enrich_from_external_source(5) == 1


async def test_enrichment_respects_count(pool):
    assert await pool.enrich_from_external_source(2) == 2
    assert (await pool.counts())["total"] == 2


async def test_enrichment_falls_through_failing_provider(kv):
    broken = FakeProvider(fail=True)
    backup = FakeProvider(["Tisch", "Stuhl"])
    pool = await WordPool.open(kv, [broken, backup])
    assert await pool.enrich_from_external_source(4) == 2
    assert broken.calls == [(None, 4)]
    assert backup.calls == [(None, 4)]


async def test_enrichment_stops_when_quota_met(kv):
    first = FakeProvider(["Tisch", "Stuhl"])
    second = FakeProvider(["Lampe"])
    pool = await WordPool.open(kv, [first, second])
    assert await pool.enrich_from_external_source(2) == 2
    assert second.calls == []


async def test_enrichment_with_only_failures_returns_zero(kv):
    pool = await WordPool.open(kv, [FakeProvider(fail=True)])
    assert await pool.enrich_from_external_source(5) == 0


async def test_get_word_by_index_wraps(pool):
    await pool.add_word("baum", "tree")
    await pool.add_word("haus", "house")
    words = await pool.get_words(Difficulty.EASY)
    for idx in (0, 1, 2, 3, 1001):
        assert await pool.get_word_by_index(Difficulty.EASY, idx) == words[idx % 2]


async def test_get_word_by_index_enriches_empty_tier(pool, provider):
    entry = await pool.get_word_by_index(Difficulty.HARD, 42)
    assert entry.word == "krankenhaus"
    assert provider.calls


async def test_get_word_by_index_reloads_from_store(kv):
    pool = await WordPool.open(kv)
    await kv.hset(pool_key(Difficulty.MEDIUM), {"fenster": "window"})
    assert (await pool.get_word_by_index(Difficulty.MEDIUM, 3)).word == "fenster"


async def test_no_content_when_everything_is_empty(kv):
    pool = await WordPool.open(kv, [FakeProvider(fail=True)])
    with pytest.raises(NoContentAvailable):
        await pool.get_word_by_index(Difficulty.EASY, 0)
    with pytest.raises(NoContentAvailable):
        await pool.get_random_word(Difficulty.EASY)


async def test_get_random_word(pool):
    await pool.add_word("baum", "tree")
    assert (await pool.get_random_word(Difficulty.EASY)).word == "baum"


async def test_unreadable_store_degrades_to_empty_pool():
    class BrokenStore:
        async def hgetall(self, key):
            raise ConnectionError("store offline")

    pool = await WordPool.open(BrokenStore())
    assert pool.loaded
    assert (await pool.counts())["total"] == 0


async def test_missing_hint_gets_length_hint(kv):
    await kv.hset(pool_key(Difficulty.EASY), {"baum": ""})
    pool = await WordPool.open(kv)
    assert (await pool.get_words(Difficulty.EASY))[0].hint == "A German word with 4 letters"


async def test_search_and_add(pool):
    class FakeThesaurus:
        async def collect_related_words(self, term, count):
            return ["wetterbericht", "wetter", "unwetter"]

        async def generate_hint(self, word):
            return f"Similar to: {word[::-1]}"

    await pool.add_word("wetter", "weather")
    added = await pool.search_and_add("wetter", 5, thesaurus=FakeThesaurus())
    assert added == 2
    assert pool.contains("unwetter")
    assert pool.contains("wetterbericht")


class FlakyStore:
    """Real store for reads; hash writes fail while `down` is set."""

    def __init__(self, store, fail_keys=None):
        self.store = store
        self.fail_keys = fail_keys
        self.down = True

    async def hgetall(self, key):
        return await self.store.hgetall(key)

    async def hset(self, key, mapping):
        if self.down and (self.fail_keys is None or key in self.fail_keys):
            raise ConnectionError("store offline")
        return await self.store.hset(key, mapping)


async def test_failed_write_leaves_pool_unchanged(kv):
    store = FlakyStore(kv)
    pool = await WordPool.open(store, [FakeProvider(["Tisch", "Stuhl"])])

    assert await pool.enrich_from_external_source(5) == 0
    assert (await pool.counts())["total"] == 0
    assert not pool.contains("tisch")
    assert await kv.hgetall(pool_key(Difficulty.EASY)) == {}

    store.down = False
    assert await pool.add_word("Tisch", "table") is True
    assert await kv.hgetall(pool_key(Difficulty.EASY)) == {"tisch": "table"}


async def test_enrichment_counts_only_written_tiers(kv):
    store = FlakyStore(kv, fail_keys={pool_key(Difficulty.HARD)})
    pool = await WordPool.open(store, [FakeProvider(["Tisch", "Krankenhaus"])])

    assert await pool.enrich_from_external_source(5) == 1
    assert pool.contains("tisch")
    assert not pool.contains("krankenhaus")
    assert await pool.get_words(Difficulty.HARD) == []


async def test_add_word_failed_write_is_not_remembered(kv):
    store = FlakyStore(kv)
    pool = await WordPool.open(store)
    with pytest.raises(ConnectionError):
        await pool.add_word("Tisch", "table")
    assert not pool.contains("tisch")

    store.down = False
    assert await pool.add_word("Tisch", "table") is True


async def test_words_without_letters_are_rejected(kv):
    pool = await WordPool.open(kv, [FakeProvider(["1234", "--", "Baum"])])
    with pytest.raises(ValueError):
        await pool.add_word("123", "digits")
    assert await pool.enrich_from_external_source(5) == 1
    assert (await pool.counts())["total"] == 1
