"""PostgreSQL storage implementation."""

import json
import logging
import os

import psycopg2
from psycopg2.extras import RealDictCursor

from analytics.interfaces import Storage
from analytics.models import TestResult, Word, WordPerformance
from server.file_storage import DEFAULT_CONFIG_FILE

logger = logging.getLogger(__name__)


class PostgresStorage(Storage):
    """PostgreSQL-based storage: one catalogue row per user, one row per test."""

    def __init__(self, config_file: str = None, db_url: str = None):
        self.config_file = config_file or os.path.expanduser(DEFAULT_CONFIG_FILE)
        self.db_url = db_url or os.environ.get(
            'DATABASE_URL',
            'postgresql://localhost:5432/vocab_analytics'
        )
        self._conn = None
        self._initialized = False

    @property
    def conn(self):
        """Lazy connection initialization."""
        if self._conn is None or self._conn.closed:
            self._conn = psycopg2.connect(self.db_url)
            if not self._initialized:
                self._init_db()
                self._initialized = True
        return self._conn

    def _init_db(self):
        """Create tables if they don't exist."""
        with self._conn.cursor() as cur:
            cur.execute("""
                CREATE TABLE IF NOT EXISTS user_words (
                    user_id VARCHAR(255) PRIMARY KEY,
                    words JSONB NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            cur.execute("""
                CREATE TABLE IF NOT EXISTS test_results (
                    id SERIAL PRIMARY KEY,
                    user_id VARCHAR(255) NOT NULL,
                    test_id BIGINT NOT NULL,
                    taken_at VARCHAR(64),
                    data JSONB NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            cur.execute("""
                CREATE INDEX IF NOT EXISTS idx_test_results_user ON test_results(user_id)
            """)
            cur.execute("""
                CREATE TABLE IF NOT EXISTS word_performance (
                    user_id VARCHAR(255) PRIMARY KEY,
                    performance JSONB NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
        self._conn.commit()

    def close(self):
        """Close the database connection."""
        if self._conn and not self._conn.closed:
            self._conn.close()

    def load_config(self) -> dict:
        if not os.path.exists(self.config_file):
            raise FileNotFoundError(f"Config file not found at {self.config_file}")
        with open(self.config_file, 'r') as f:
            return json.load(f)

    def _fetch_one(self, query: str, params: tuple):
        with self.conn.cursor(cursor_factory=RealDictCursor) as cur:
            cur.execute(query, params)
            return cur.fetchone()

    def _write(self, query: str, params: tuple, what: str) -> None:
        try:
            with self.conn.cursor() as cur:
                cur.execute(query, params)
            self.conn.commit()
        except Exception as e:
            logger.error(f"Error saving {what}: {e}")
            self.conn.rollback()
            raise

    def list_users(self) -> list[str]:
        """List all users with a catalogue."""
        with self.conn.cursor() as cur:
            cur.execute("SELECT user_id FROM user_words ORDER BY user_id")
            return [row[0] for row in cur.fetchall()]

    def get_words(self, user_id: str = "default") -> list:
        row = self._fetch_one("SELECT words FROM user_words WHERE user_id = %s", (user_id,))
        if not row:
            return []
        return [Word.from_dict(w) for w in row['words']]

    def save_words(self, words: list, user_id: str = "default") -> None:
        self._write("""
            INSERT INTO user_words (user_id, words, updated_at)
            VALUES (%s, %s, CURRENT_TIMESTAMP)
            ON CONFLICT (user_id)
            DO UPDATE SET words = EXCLUDED.words, updated_at = CURRENT_TIMESTAMP
        """, (user_id, json.dumps([w.to_dict() for w in words])), 'words')

    def get_tests(self, user_id: str = "default") -> list:
        with self.conn.cursor(cursor_factory=RealDictCursor) as cur:
            cur.execute(
                "SELECT data FROM test_results WHERE user_id = %s ORDER BY id",
                (user_id,)
            )
            return [TestResult.from_dict(row['data']) for row in cur.fetchall()]

    def append_test(self, test, user_id: str = "default") -> None:
        self._write("""
            INSERT INTO test_results (user_id, test_id, taken_at, data)
            VALUES (%s, %s, %s, %s)
        """, (user_id, test.id, test.timestamp, json.dumps(test.to_dict())), 'test result')

    def get_word_performance(self, user_id: str = "default") -> dict:
        row = self._fetch_one(
            "SELECT performance FROM word_performance WHERE user_id = %s", (user_id,)
        )
        if not row:
            return {}
        return {word_id: WordPerformance.from_dict(p) for word_id, p in row['performance'].items()}

    def set_word_performance(self, performance: dict, user_id: str = "default") -> None:
        payload = {word_id: p.to_dict() for word_id, p in performance.items()}
        self._write("""
            INSERT INTO word_performance (user_id, performance, updated_at)
            VALUES (%s, %s, CURRENT_TIMESTAMP)
            ON CONFLICT (user_id)
            DO UPDATE SET performance = EXCLUDED.performance, updated_at = CURRENT_TIMESTAMP
        """, (user_id, json.dumps(payload)), 'word performance')

    def clear_ledger(self, user_id: str = "default") -> None:
        try:
            with self.conn.cursor() as cur:
                cur.execute("DELETE FROM test_results WHERE user_id = %s", (user_id,))
                cur.execute("DELETE FROM word_performance WHERE user_id = %s", (user_id,))
            self.conn.commit()
        except Exception as e:
            logger.error(f"Error clearing ledger for {user_id}: {e}")
            self.conn.rollback()
            raise
