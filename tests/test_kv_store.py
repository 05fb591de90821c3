async def test_string_keys(kv):
    assert await kv.get("missing") is None
    await kv.set("user:anna:streak", "2")
    await kv.set("user:anna:streak", "3")
    assert await kv.get("user:anna:streak") == "3"
    assert await kv.exists("user:anna:streak")
    assert not await kv.exists("user:anna:maxStreak")


async def test_mget_and_mset(kv):
    await kv.mset({"a": "1", "b": "2"})
    assert await kv.mget("a", "missing", "b") == ["1", None, "2"]


async def test_hash_keys(kv):
    assert await kv.hgetall("german_words:easy") == {}
    assert await kv.hset("german_words:easy", {"baum": "tree", "haus": "house"}) == 2
    await kv.hset("german_words:easy", {"baum": "a tall plant"})
    assert await kv.hgetall("german_words:easy") == {"baum": "a tall plant", "haus": "house"}
    assert await kv.exists("german_words:easy")


async def test_delete(kv):
    await kv.set("k", "v")
    await kv.hset("h", {"f": "v"})
    await kv.delete("k")
    await kv.delete("h")
    assert await kv.get("k") is None
    assert await kv.hgetall("h") == {}
