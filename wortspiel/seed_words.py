# wortspiel/seed_words.py
"""Grow the hangman word pool to a target size.

    python -m wortspiel.seed_words

Reads POOL_TARGET_COUNT / POOL_BATCH_SIZE / POOL_ATTEMPT_CAP from the
environment. Safe to re-run: words already in the pool are skipped.
"""
from __future__ import annotations

import asyncio
import logging
import random
from typing import Optional, Sequence

from .config import LOG_LEVEL, POOL_ATTEMPT_CAP, POOL_BATCH_SIZE, POOL_TARGET_COUNT
from .db import SessionLocal, create_tables
from .kv_store import KeyValueStore
from .providers import SEED_TERMS, WordProvider, default_providers
from .words import WordPool

logger = logging.getLogger("wortspiel.seed_words")


async def fill_pool(pool: WordPool, target: int = POOL_TARGET_COUNT, batch_size: int = POOL_BATCH_SIZE,
                    attempt_cap: int = POOL_ATTEMPT_CAP, terms: Sequence[str] = SEED_TERMS) -> int:
    """Enrich in batches until `target` words exist or `attempt_cap` rounds pass.

    Rounds rotate through `terms` so thesaurus lookups do not repeat the
    same neighbourhood. Returns the number of words added.
    """
    total = (await pool.counts())["total"]
    added = 0
    attempts = 0
    while total < target and attempts < attempt_cap:
        term = terms[attempts % len(terms)] if terms else None
        attempts += 1
        n = await pool.enrich_from_external_source(min(batch_size, target - total), term=term)
        added += n
        total += n
        if n:
            logger.info("staged %d/%d words (round %d)", total, target, attempts)
    if total < target:
        logger.warning("only collected %d/%d words after %d rounds", total, target, attempts)
    else:
        logger.info("done: pool holds %d words", total)
    return added


async def main(providers: Optional[Sequence[WordProvider]] = None):
    await create_tables()
    pool = await WordPool.open(KeyValueStore(SessionLocal), providers or default_providers())
    terms = list(SEED_TERMS)
    random.shuffle(terms)
    await fill_pool(pool, terms=terms)


if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    asyncio.run(main())
