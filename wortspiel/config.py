# wortspiel/config.py
from __future__ import annotations

import os

import pytz

# ───────── Storage ─────────
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./wortspiel.db")

# ───────── Game ─────────
GAME_TZ = pytz.timezone(os.getenv("GAME_TZ", "UTC"))
DEFAULT_LANGUAGE = os.getenv("DEFAULT_LANGUAGE", "de")
PUZZLE_SIZE = 8
HANGMAN_MAX_ATTEMPTS = 6

# ───────── Word providers ─────────
RANDOM_WORDS_API_BASE = os.getenv("RANDOM_WORDS_API_BASE", "https://random-words-api.kushcreates.com/api")
OPENTHESAURUS_API_BASE = os.getenv("OPENTHESAURUS_API_BASE", "https://api.openthesaurus.de/synonyme/search")
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "30"))

# ───────── Community content ─────────
REDDIT_API_BASE = os.getenv("REDDIT_API_BASE", "https://www.reddit.com")
REDDIT_USER_AGENT = os.getenv("REDDIT_USER_AGENT", "wortspiel/0.1 (vocabulary game)")
DEFAULT_SUBREDDIT = os.getenv("DEFAULT_SUBREDDIT", "German")
HOT_POSTS_LIMIT = int(os.getenv("HOT_POSTS_LIMIT", "20"))

# ───────── Server ─────────
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
PORT = int(os.getenv("PORT", "8000"))

# ───────── Pool batch job ─────────
POOL_TARGET_COUNT = int(os.getenv("POOL_TARGET_COUNT", "300"))
POOL_BATCH_SIZE = int(os.getenv("POOL_BATCH_SIZE", "12"))
POOL_ATTEMPT_CAP = int(os.getenv("POOL_ATTEMPT_CAP", "200"))
