"""FastAPI server exposing the vocabulary analytics engine."""

import logging
import os
import threading
from typing import Optional, Union

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from analytics.config import DATA_VERSION, DEFAULT_CONFIG, DIFFICULTIES, TEST_TYPES, StatsConfig
from analytics.facade import StatsFacade
from analytics.interfaces import Storage
from analytics.models import SessionStats, Word, WordTime

from server.file_storage import FileStorage

logger = logging.getLogger(__name__)


# Pydantic models for API
class WordModel(BaseModel):
    id: str
    english: str
    italian: str
    chapter: Optional[Union[str, int]] = None
    group: Optional[str] = None
    learned: bool = False
    difficult: bool = False
    sentence: Optional[str] = None
    notes: Optional[str] = None


class WordsRequest(BaseModel):
    words: list[WordModel]
    user_id: str = "default"


class AttemptRequest(BaseModel):
    word_id: str
    is_correct: bool
    used_hint: bool = False
    time_spent: float = 0
    user_id: str = "default"


class ClassifyRequest(BaseModel):
    word_ids: list[str]
    user_id: str = "default"


class WordTimeModel(BaseModel):
    word_id: str
    is_correct: bool
    used_hint: bool = False
    time_spent: float = 0
    hints_used: Optional[int] = None


class CompleteTestRequest(BaseModel):
    word_ids: list[str]
    wrong_word_ids: list[str] = []
    correct: int = 0
    incorrect: int = 0
    hints: int = 0
    total_time: float = 0
    word_times: list[WordTimeModel] = []
    user_id: str = "default"


class DifficultyResponse(BaseModel):
    difficulty: str
    rationale: str
    total_words: int
    weighted_score: float
    size_adjustment: float
    distribution: dict
    status_breakdown: dict


# Global state (in production, use proper DI)
storage: Storage = None
stats_config: StatsConfig = DEFAULT_CONFIG
user_facades: dict[str, StatsFacade] = {}
user_locks: dict[str, threading.Lock] = {}
_locks_guard = threading.Lock()


def configure(new_storage: Storage, config: StatsConfig = None) -> None:
    """Point the app at a storage backend and drop cached facades."""
    global storage, stats_config
    storage = new_storage
    stats_config = config or DEFAULT_CONFIG
    user_facades.clear()
    user_locks.clear()


def load_stats_config(backend: Storage) -> StatsConfig:
    """Read threshold overrides from the host config file, if there is one."""
    try:
        config = backend.load_config()
    except FileNotFoundError:
        return DEFAULT_CONFIG
    return StatsConfig.from_dict(config.get('stats'))


def get_lock(user_id: str) -> threading.Lock:
    """Mutations for one user are serialized through this lock."""
    with _locks_guard:
        if user_id not in user_locks:
            user_locks[user_id] = threading.Lock()
        return user_locks[user_id]


def get_facade(user_id: str = "default") -> StatsFacade:
    """Get or load the stats facade for a user."""
    if user_id not in user_facades:
        user_facades[user_id] = StatsFacade.from_storage(storage, user_id, config=stats_config)
    return user_facades[user_id]


def resolve_words(facade: StatsFacade, word_ids: list[str]) -> list[Word]:
    try:
        return [facade.require_word(word_id) for word_id in word_ids]
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e.args[0]))


app = FastAPI(title="Vocabulary Analytics API", description="Learning statistics for vocabulary tests")


@app.on_event("startup")
async def startup():
    """Initialize storage on startup."""
    # File storage by default, set VOCAB_STORAGE=postgres to use PostgreSQL
    storage_type = os.environ.get('VOCAB_STORAGE', 'file')
    if storage_type == 'postgres':
        from server.postgres_storage import PostgresStorage
        backend = PostgresStorage()
        logger.info("Using PostgreSQL storage")
    else:
        backend = FileStorage()
        logger.info("Using file storage")
    configure(backend, load_stats_config(backend))


@app.get("/")
async def root():
    return {"name": "vocab-analytics", "data_version": DATA_VERSION}


@app.get("/api/config")
async def get_config():
    """Thresholds currently used by the analytics engine."""
    return stats_config.to_dict()


@app.get("/api/users")
async def list_users():
    """List all existing users."""
    return {"users": storage.list_users() if hasattr(storage, 'list_users') else []}


# Word catalogue
@app.get("/api/words")
async def get_words(user_id: str = "default"):
    return {"words": [w.to_dict() for w in get_facade(user_id).words]}


@app.put("/api/words")
async def replace_words(request: WordsRequest):
    """Replace the word catalogue."""
    words = [Word.from_dict(w.model_dump()) for w in request.words]
    with get_lock(request.user_id):
        get_facade(request.user_id).set_words(words)
    return {"success": True, "count": len(words)}


# Ledger
@app.post("/api/attempts")
async def record_attempt(request: AttemptRequest):
    facade = get_facade(request.user_id)
    word = resolve_words(facade, [request.word_id])[0]
    with get_lock(request.user_id):
        attempt = facade.record_attempt(word, request.is_correct, request.used_hint, request.time_spent)
    return {"success": True, "attempt": attempt.to_dict()}


@app.post("/api/tests/classify", response_model=DifficultyResponse)
async def classify_test(request: ClassifyRequest):
    """Smart difficulty of a word set before the test starts."""
    facade = get_facade(request.user_id)
    words = resolve_words(facade, request.word_ids)
    return facade.classify_test(words).to_dict()


@app.post("/api/tests/complete")
async def complete_test(request: CompleteTestRequest):
    facade = get_facade(request.user_id)
    words_used = resolve_words(facade, request.word_ids)
    wrong_ids = set(request.wrong_word_ids)
    wrong_words = [w for w in words_used if w.id in wrong_ids]
    session = SessionStats(
        correct=request.correct,
        incorrect=request.incorrect,
        hints=request.hints,
        total_time=request.total_time,
        word_times=[WordTime.from_dict(wt.model_dump()) for wt in request.word_times]
    )
    try:
        with get_lock(request.user_id):
            test = facade.complete_test(session, words_used, wrong_words)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "test": test.to_dict()}


@app.get("/api/tests")
async def get_tests(user_id: str = "default"):
    return {"tests": [t.to_dict() for t in get_facade(user_id).tests]}


@app.delete("/api/tests")
async def clear_tests(user_id: str = "default"):
    """Clear test history and word performance, keeping the words."""
    with get_lock(user_id):
        get_facade(user_id).clear_history()
    return {"success": True}


# Derived statistics
@app.get("/api/stats/global")
async def get_global_stats(user_id: str = "default", start: Optional[str] = None,
                           end: Optional[str] = None, test_type: Optional[str] = None,
                           difficulty: Optional[str] = None):
    """Global statistics, optionally restricted by date range, test type or difficulty."""
    facade = get_facade(user_id)
    if start or end:
        stats = facade.stats_for_date_range(start or '0000-01-01', end or '9999-12-31')
    elif test_type:
        if test_type not in TEST_TYPES:
            raise HTTPException(status_code=400, detail=f"Invalid test type: {test_type}")
        stats = facade.stats_for_test_type(test_type)
    elif difficulty:
        if difficulty not in DIFFICULTIES:
            raise HTTPException(status_code=400, detail=f"Invalid difficulty: {difficulty}")
        stats = facade.stats_for_difficulty(difficulty)
    else:
        stats = facade.global_stats
    return stats.to_dict()


@app.get("/api/stats/chapters")
async def get_chapter_stats(user_id: str = "default"):
    return {"chapters": [c.to_dict() for c in get_facade(user_id).chapter_stats]}


@app.get("/api/stats/chapters/{chapter}")
async def get_single_chapter_stats(chapter: str, user_id: str = "default"):
    stats = get_facade(user_id).get_chapter_stats(chapter)
    if stats is None:
        raise HTTPException(status_code=404, detail=f"Unknown chapter: {chapter}")
    return stats.to_dict()


@app.get("/api/stats/words")
async def get_word_analyses(user_id: str = "default"):
    return {"words": [a.to_dict() for a in get_facade(user_id).word_analyses]}


@app.get("/api/stats/words/{word_id}")
async def get_word_analysis(word_id: str, user_id: str = "default"):
    """Ledger analysis, practice-history analysis and recency of one word."""
    facade = get_facade(user_id)
    analysis = facade.get_word_analysis(word_id)
    if analysis is None:
        raise HTTPException(status_code=404, detail=f"Unknown word: {word_id}")
    practice = facade.get_practice_analysis(word_id)
    return {
        "analysis": analysis.to_dict(),
        "practice": practice.to_dict(),
        "recency": facade.word_recency(word_id)
    }


@app.get("/api/stats/performance")
async def get_words_performance(user_id: str = "default"):
    """Practised words, most troubled first."""
    return {"words": [a.to_dict() for a in get_facade(user_id).get_all_words_performance()]}


@app.get("/api/stats/activity")
async def get_activity(user_id: str = "default"):
    """Calendar streak, today's activity and the last week's totals."""
    return get_facade(user_id).activity()


def create_app():
    """Factory function for creating the app (useful for testing)."""
    return app
