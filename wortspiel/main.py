# wortspiel/main.py
from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, Depends, Query, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import CORS_ORIGINS, DEFAULT_LANGUAGE, LOG_LEVEL, PORT
from .content import PuzzleService
from .db import SessionLocal, create_tables, ping
from .hangman import HangmanRound, HangmanService, GuessError, WON, calculate_score, format_share_text
from .kv_store import KeyValueStore
from .providers import default_providers
from .reddit_content import RedditContentManager
from .schema import (
    GameAnswer, GuessRecord, HangmanGame, HangmanUserResult, UserResult, UserState, WordEntry,
    WordMatchPuzzle,
)
from .scoring import calculate_total_time, compute_score, has_passed, update_user_progress
from .seed import InvalidSeed, NoContentAvailable, parse_seed, today_seed, today_ymd
from .share import format_share
from .storage import GameStorage
from .words import Difficulty, WordPool, pool_key

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

# ───────── App ─────────
app = FastAPI(title="Wortspiel API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

_kv = KeyValueStore(SessionLocal)

# ───────── Pydantic models ─────────
class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class InitResponse(_Body):
    type: str = "init"
    post_id: str = Field(alias="postId")
    username: str
    user_state: UserState = Field(alias="userState")


class PuzzleResponse(_Body):
    type: str = "puzzle"
    puzzle: WordMatchPuzzle


class UserStateResponse(_Body):
    type: str = "userState"
    user_state: UserState = Field(alias="userState")


class SubmitResultIn(_Body):
    user_id: str = Field(alias="userId", min_length=1)
    seed: str
    answers: List[GameAnswer] = Field(min_length=1)


class SubmitResultResponse(_Body):
    type: str = "result"
    score: int
    perfect: bool
    passed: bool
    time_ms: int = Field(alias="timeMs")
    new_streak: int = Field(alias="newStreak")
    max_streak: int = Field(alias="maxStreak")
    share_text: str = Field(alias="shareText")
    answers: List[GameAnswer]


class HangmanGameResponse(_Body):
    type: str = "hangman"
    game: HangmanGame


class HangmanGuessIn(_Body):
    letter: str
    timestamp: Optional[int] = None


class HangmanSubmitIn(_Body):
    user_id: str = Field(alias="userId", min_length=1)
    seed: str
    guesses: List[HangmanGuessIn]
    time_ms: int = Field(alias="timeMs", ge=0)
    word: Optional[str] = None  # practice rounds are not stored server-side


class HangmanSubmitResponse(_Body):
    type: str = "hangmanResult"
    status: str
    score: int
    perfect: bool
    time_ms: int = Field(alias="timeMs")
    new_streak: int = Field(alias="newStreak")
    max_streak: int = Field(alias="maxStreak")
    share_text: str = Field(alias="shareText")
    guesses: List[GuessRecord]


class EnrichIn(BaseModel):
    count: Optional[int] = 10


class EnrichTermIn(BaseModel):
    term: str = Field(min_length=1)
    count: int = Field(5, ge=1, le=20)


class AddWordIn(BaseModel):
    word: Optional[str] = None
    hint: Optional[str] = None
    difficulty: Optional[Difficulty] = None

# ───────── Dependencies ─────────
async def get_storage() -> GameStorage:
    return GameStorage(_kv)


async def get_word_pool(request: Request) -> WordPool:
    pool = getattr(request.app.state, "word_pool", None)
    if pool is None:
        pool = await WordPool.open(_kv, default_providers())
        request.app.state.word_pool = pool
    return pool


async def get_reddit(storage: GameStorage = Depends(get_storage)) -> RedditContentManager:
    return RedditContentManager(storage)

# ───────── Errors ─────────
def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "success": False, "message": message},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    return _error(400, f"Invalid request: {where} {first.get('msg', '')}".strip())


def _internal(what: str) -> HTTPException:
    logger.exception("%s failed", what)
    return HTTPException(status_code=500, detail="Internal server error")

# ───────── Lifecycle ─────────
@app.on_event("startup")
async def on_startup():
    await ping()
    await create_tables()
    app.state.word_pool = await WordPool.open(_kv, default_providers())


@app.get("/healthz")
async def healthz():
    return {"ok": True}

# ───────── Word-match ─────────
@app.get("/api/init", response_model=InitResponse)
async def init(
    post_id: Optional[str] = Header(None, alias="X-Post-Id"),
    username: Optional[str] = Header(None, alias="X-Username"),
    storage: GameStorage = Depends(get_storage),
):
    if not post_id:
        logger.error("init called without a post id")
        raise HTTPException(status_code=400, detail="postId is required but missing from context")
    try:
        username = username or "anonymous"
        state = await storage.get_user_state(username)
        await PuzzleService(storage).initialize_content()
        return InitResponse(post_id=post_id, username=username, user_state=state)
    except Exception:
        raise _internal(f"init for post {post_id}")


@app.get("/api/puzzle/today", response_model=PuzzleResponse)
async def puzzle_today(storage: GameStorage = Depends(get_storage)):
    return await _puzzle(today_seed(today_ymd(), DEFAULT_LANGUAGE), storage)


@app.get("/api/puzzle/reddit", response_model=PuzzleResponse)
async def puzzle_reddit(
    storage: GameStorage = Depends(get_storage),
    reddit: RedditContentManager = Depends(get_reddit),
):
    try:
        seed = f"{today_ymd()}:{DEFAULT_LANGUAGE}:reddit"
        puzzle = await storage.get_puzzle(seed) or await reddit.create_puzzle()
    except Exception:
        raise _internal("community puzzle")
    if puzzle is None:
        raise HTTPException(status_code=404, detail="Reddit puzzle not found and could not be created")
    return PuzzleResponse(puzzle=puzzle)


@app.get("/api/puzzle/{seed}", response_model=PuzzleResponse)
async def puzzle_by_seed(seed: str, storage: GameStorage = Depends(get_storage)):
    return await _puzzle(seed, storage)


async def _puzzle(seed: str, storage: GameStorage) -> PuzzleResponse:
    try:
        return PuzzleResponse(puzzle=await PuzzleService(storage).get_daily_puzzle(seed))
    except InvalidSeed as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NoContentAvailable as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception:
        raise _internal(f"puzzle {seed}")


@app.post("/api/submit-result", response_model=SubmitResultResponse)
async def submit_result(body: SubmitResultIn, storage: GameStorage = Depends(get_storage)):
    try:
        ymd, _lang = parse_seed(body.seed)
    except InvalidSeed as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        answers = body.answers
        puzzle = await storage.get_puzzle(body.seed)
        if puzzle:
            # grade against the stored answer keys instead of trusting the client
            keys = {item.id: item.answer_key for item in puzzle.items}
            answers = [
                a.model_copy(update={"correct": a.pick == keys[a.item_id]}) if a.item_id in keys else a
                for a in answers
            ]

        score, perfect = compute_score(answers)
        time_ms = calculate_total_time(answers)
        passed = has_passed(score, len(answers))
        state = await update_user_progress(storage, body.user_id, body.seed, passed)

        await storage.save_user_result(UserResult(
            user_id=body.user_id, seed=body.seed, score=score, time_ms=time_ms, answers=answers,
        ))
        return SubmitResultResponse(
            score=score,
            perfect=perfect,
            passed=passed,
            time_ms=time_ms,
            new_streak=state.streak,
            max_streak=state.max_streak,
            share_text=format_share(score, len(answers), time_ms, perfect, answers, day=ymd),
            answers=answers,
        )
    except Exception:
        raise _internal("submit result")


@app.get("/api/user/{user_id}/state", response_model=UserStateResponse)
async def user_state(user_id: str, storage: GameStorage = Depends(get_storage)):
    try:
        return UserStateResponse(user_state=await storage.get_user_state(user_id))
    except Exception:
        raise _internal(f"user state for {user_id}")

# ───────── Hangman ─────────
@app.get("/api/hangman/daily", response_model=HangmanGameResponse)
async def hangman_daily(
    difficulty: Difficulty = Query(Difficulty.MEDIUM),
    lang: str = Query(DEFAULT_LANGUAGE, min_length=2, max_length=8),
    storage: GameStorage = Depends(get_storage),
    pool: WordPool = Depends(get_word_pool),
):
    try:
        game = await HangmanService(storage, pool).create_daily_game(language=lang, difficulty=difficulty)
        return HangmanGameResponse(game=game)
    except NoContentAvailable as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception:
        raise _internal("daily hangman")


@app.get("/api/hangman/practice", response_model=HangmanGameResponse)
async def hangman_practice(
    difficulty: Difficulty = Query(Difficulty.MEDIUM),
    lang: str = Query(DEFAULT_LANGUAGE, min_length=2, max_length=8),
    storage: GameStorage = Depends(get_storage),
    pool: WordPool = Depends(get_word_pool),
):
    try:
        game = await HangmanService(storage, pool).create_practice_game(language=lang, difficulty=difficulty)
        return HangmanGameResponse(game=game)
    except NoContentAvailable as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception:
        raise _internal("practice hangman")


@app.post("/api/hangman/submit-result", response_model=HangmanSubmitResponse)
async def hangman_submit(body: HangmanSubmitIn, storage: GameStorage = Depends(get_storage)):
    try:
        ymd, _lang = parse_seed(body.seed)
        game = await storage.get_hangman_game(body.seed)
        word = game.word if game else (body.word or "").strip().lower()
        if not word:
            raise HTTPException(status_code=404, detail=f"Hangman game {body.seed} not found")

        rnd = HangmanRound(word, max_attempts=game.max_attempts if game else 6)
        for g in body.guesses:
            rnd.guess(g.letter, g.timestamp)

        # a round still in progress was ended by the client clock
        success = rnd.status == WON
        score, perfect = calculate_score(word, rnd.guesses, success, body.time_ms)
        state = await update_user_progress(storage, body.user_id, body.seed, success)
        await storage.save_hangman_result(HangmanUserResult(
            user_id=body.user_id, seed=body.seed, word=word, success=success, score=score,
            perfect=perfect, time_ms=body.time_ms, guesses=rnd.guesses,
        ))
        return HangmanSubmitResponse(
            status=rnd.status,
            score=score,
            perfect=perfect,
            time_ms=body.time_ms,
            new_streak=state.streak,
            max_streak=state.max_streak,
            share_text=format_share_text(word, rnd.guesses, success, body.time_ms,
                                         day=game.date if game else ymd),
            guesses=rnd.guesses,
        )
    except HTTPException:
        raise
    except (InvalidSeed, GuessError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        raise _internal("submit hangman result")

# ───────── Words ─────────
def _entries(words: List[WordEntry]) -> List[Dict[str, str]]:
    return [w.model_dump() for w in words]


@app.get("/api/words")
async def all_words(pool: WordPool = Depends(get_word_pool)):
    try:
        words = await pool.get_all_words()
        return {
            "success": True,
            "data": {d.value: _entries(ws) for d, ws in words.items()},
            "counts": await pool.counts(),
        }
    except Exception:
        raise _internal("list words")


@app.get("/api/words/{difficulty}")
async def words_by_difficulty(difficulty: str, pool: WordPool = Depends(get_word_pool)):
    try:
        tier = Difficulty(difficulty)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid difficulty level. Must be easy, medium, or hard.")
    try:
        words = await pool.get_words(tier)
        return {"success": True, "data": _entries(words), "count": len(words)}
    except Exception:
        raise _internal(f"list {difficulty} words")


@app.post("/api/words/enrich")
async def enrich_words(body: Optional[EnrichIn] = None, pool: WordPool = Depends(get_word_pool)):
    count = min(max((body.count if body else None) or 10, 1), 20)
    try:
        added = await pool.enrich_from_external_source(count)
        return {"success": True, "requested": count, "addedCount": added,
                "message": f"Added {added} random German words"}
    except Exception:
        raise _internal("enrich words")


@app.post("/api/words/enrich/random")
async def enrich_words_random(pool: WordPool = Depends(get_word_pool)):
    count = random.randint(4, 8)
    try:
        added = await pool.enrich_from_external_source(count)
        return {"success": True, "source": "random-words-api", "requested": count, "addedCount": added}
    except Exception:
        raise _internal("random enrichment")


@app.post("/api/words/enrich/term")
async def enrich_words_term(body: EnrichTermIn, pool: WordPool = Depends(get_word_pool)):
    try:
        added = await pool.search_and_add(body.term.strip(), body.count)
        return {"success": True, "term": body.term, "addedCount": added}
    except Exception:
        raise _internal(f"enrichment for {body.term!r}")


@app.post("/api/words/add")
async def add_word(body: AddWordIn, pool: WordPool = Depends(get_word_pool)):
    if not (body.word or "").strip() or not (body.hint or "").strip():
        raise HTTPException(status_code=400, detail="Word and hint are required")
    try:
        added = await pool.add_word(body.word, body.hint, body.difficulty)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        raise _internal(f"add word {body.word!r}")
    if not added:
        raise HTTPException(status_code=409, detail=f'Word "{body.word}" already exists in the list')
    return {"success": True, "message": f'Successfully added "{body.word}" to the word list'}

# ───────── Community content / store ─────────
@app.get("/api/reddit/refresh")
async def reddit_refresh(
    subreddit: Optional[str] = Query(None),
    reddit: RedditContentManager = Depends(get_reddit),
):
    try:
        ok = await reddit.refresh_word_bank(subreddit)
    except Exception:
        raise _internal("community refresh")
    if not ok:
        raise HTTPException(status_code=400, detail="Failed to refresh word bank with Reddit content")
    return {"status": "success", "success": True, "message": "Word bank refreshed with Reddit content"}


@app.get("/api/reddit/puzzle/create")
async def reddit_puzzle_create(reddit: RedditContentManager = Depends(get_reddit)):
    try:
        puzzle = await reddit.create_puzzle()
    except Exception:
        raise _internal("create community puzzle")
    if puzzle is None:
        raise HTTPException(status_code=400, detail="Failed to create Reddit puzzle")
    return {"status": "success", "success": True, "message": "Reddit puzzle created",
            "puzzle": puzzle.model_dump(by_alias=True, exclude_none=True)}


@app.get("/api/store/status")
async def store_status(
    storage: GameStorage = Depends(get_storage),
    pool: WordPool = Depends(get_word_pool),
):
    try:
        return {
            "success": True,
            "status": "Store is operational",
            "stats": {
                "germanWordsKeys": await storage.existing_pool_keys(),
                "wordCounts": await pool.counts(),
            },
        }
    except Exception:
        raise _internal("store status")


@app.get("/api/store/keys")
async def store_keys(
    user_id: Optional[str] = Query(None, alias="userId"),
    key: Optional[List[str]] = Query(None),
    storage: GameStorage = Depends(get_storage),
):
    keys = list(key or [])
    if not keys:
        keys = [pool_key(d) for d in Difficulty]
        if user_id:
            keys += [f"user:{user_id}:{k}" for k in ("streak", "maxStreak", "lastPlayed")]
        keys.append(f"hangman:game:{today_ymd()}:{DEFAULT_LANGUAGE}:hangman")
    try:
        return {"success": True, "keyStatus": {k: await storage.store.exists(k) for k in keys}}
    except Exception:
        raise _internal("check store keys")


@app.get("/api/store/hash/{key:path}")
async def store_hash(key: str, storage: GameStorage = Depends(get_storage)):
    try:
        data = await storage.store.hgetall(key)
    except Exception:
        raise _internal(f"read hash {key!r}")
    if not data:
        raise HTTPException(status_code=404, detail=f'Key "{key}" does not exist')
    return {"success": True, "key": key, "type": "hash", "data": data, "count": len(data)}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=PORT)
