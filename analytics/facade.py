"""Stats facade: the single owner and writer of a learner's ledger."""

import copy
import logging
from datetime import datetime, timezone

from .chapter_stats import compute_chapter_stats, find_chapter_stats
from .config import DEFAULT_CONFIG
from .difficulty import classify_test_difficulty, legacy_difficulty
from .global_stats import compute_global_stats, stats_for_date_range, stats_for_difficulty, stats_for_test_type
from .models import DetailedWordResponse, TestResult, WordAttempt, WordPerformance
from .progress import calendar_streak, empty_day, is_active_today, weekly_progress
from .utils import date_part, format_timestamp, percent, round_half_up, safe_div
from .word_analysis import WORD_STATUSES, compute_performance_analyses, compute_word_analyses, word_recency

logger = logging.getLogger(__name__)

STATUS_PRIORITY = {status: i for i, status in enumerate(WORD_STATUSES)}


def _empty_counters() -> dict:
    return {
        'tests_completed': 0,
        'correct_answers': 0,
        'incorrect_answers': 0,
        'hints_used': 0,
        'time_spent': 0,
        'average_score': 0,
        'last_study_date': None,
        'daily_progress': {}
    }


def _add_to_counters(counters: dict, test: TestResult) -> None:
    hints = sum(r.hints_used for r in test.responses)
    counters['tests_completed'] += 1
    counters['correct_answers'] += len(test.right_words)
    counters['incorrect_answers'] += len(test.wrong_words)
    counters['hints_used'] += hints
    counters['time_spent'] += sum(r.time_response for r in test.responses)
    counters['average_score'] = percent(
        counters['correct_answers'], counters['correct_answers'] + counters['incorrect_answers']
    )

    day = date_part(test.timestamp)
    if day is None:
        return
    entry = counters['daily_progress'].setdefault(day, empty_day())
    entry['tests'] += 1
    entry['correct'] += len(test.right_words)
    entry['incorrect'] += len(test.wrong_words)
    entry['hints'] += hints
    if counters['last_study_date'] is None or day > counters['last_study_date']:
        counters['last_study_date'] = day


class StatsFacade:
    """Holds the ledger and word catalogue and serves derived views.

    Derived views are pure functions of the ledger, memoized on a version
    number that every mutation bumps. Callers in a concurrent host must
    serialize calls to the mutating methods.
    """

    def __init__(self, words: list = None, tests: list = None, word_performance: dict = None,
                 config=None, storage=None, user_id: str = "default", clock=None):
        self.config = config or DEFAULT_CONFIG
        self.storage = storage
        self.user_id = user_id
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self._words = list(words or [])
        self._tests = list(tests or [])
        self._word_performance = dict(word_performance or {})
        self._last_test_id = max((t.id for t in self._tests if isinstance(t.id, int)), default=0)
        self._version = 0
        self._memo = {}
        self._counters = _empty_counters()
        for test in self._tests:
            _add_to_counters(self._counters, test)

    @classmethod
    def from_storage(cls, storage, user_id: str = "default", config=None, clock=None) -> 'StatsFacade':
        return cls(
            words=storage.get_words(user_id),
            tests=storage.get_tests(user_id),
            word_performance=storage.get_word_performance(user_id),
            config=config,
            storage=storage,
            user_id=user_id,
            clock=clock
        )

    # Ledger access (copies, so callers cannot mutate the ledger)

    @property
    def version(self) -> int:
        return self._version

    @property
    def words(self) -> list:
        return list(self._words)

    @property
    def tests(self) -> list:
        return list(self._tests)

    @property
    def word_performance(self) -> dict:
        return dict(self._word_performance)

    @property
    def counters(self) -> dict:
        """Running totals updated on each completed test."""
        return copy.deepcopy(self._counters)

    def find_word(self, word_id: str):
        for word in self._words:
            if word.id == str(word_id):
                return word
        return None

    def require_word(self, word_id: str):
        word = self.find_word(word_id)
        if word is None:
            raise KeyError(f"Unknown word: {word_id}")
        return word

    # Derived views

    def _memoized(self, key: str, compute):
        entry = self._memo.get(key)
        if entry is not None and entry[0] == self._version:
            return entry[1]
        value = compute()
        self._memo[key] = (self._version, value)
        return value

    def _invalidate(self) -> None:
        self._version += 1
        self._memo.clear()

    def _word_analyses(self) -> list:
        return self._memoized('words', lambda: compute_word_analyses(self._tests, self._words, self.config))

    def _chapter_stats(self) -> list:
        return self._memoized('chapters', lambda: compute_chapter_stats(
            self._tests, self._words, self.config, word_analyses=self._word_analyses()
        ))

    def _performance_analyses(self) -> dict:
        return self._memoized('performance', lambda: compute_performance_analyses(
            self._word_performance, self._words, self.config
        ))

    @property
    def global_stats(self):
        return self._memoized('global', lambda: compute_global_stats(self._tests, self.config))

    @property
    def word_analyses(self) -> list:
        """Ledger analysis of every catalogue word."""
        return list(self._word_analyses())

    @property
    def chapter_stats(self) -> list:
        return list(self._chapter_stats())

    @property
    def performance_analyses(self) -> dict:
        """Analysis of every practised word from its attempt history."""
        return dict(self._performance_analyses())

    def _analyses_by_id(self) -> dict:
        return self._memoized('words_by_id', lambda: {a.word_id: a for a in self._word_analyses()})

    def get_word_analysis(self, word_id: str):
        return self._analyses_by_id().get(str(word_id))

    def get_practice_analysis(self, word_id: str):
        """Analysis from the word's attempt history, or from the ledger if it has none."""
        analysis = self._performance_analyses().get(str(word_id))
        if analysis is None:
            analysis = self.get_word_analysis(word_id)
        return analysis

    def get_chapter_stats(self, chapter: str):
        return find_chapter_stats(self._chapter_stats(), chapter)

    def get_all_words_performance(self) -> list:
        """Analyses of every word with recorded attempts, most troubled first."""
        analyses = self._performance_analyses().values()
        return sorted(analyses, key=lambda a: STATUS_PRIORITY.get(a.status, len(STATUS_PRIORITY)))

    def stats_for_date_range(self, start: str, end: str):
        return stats_for_date_range(self._tests, start, end, self.config)

    def stats_for_test_type(self, test_type: str):
        return stats_for_test_type(self._tests, test_type, self.config)

    def stats_for_difficulty(self, difficulty: str):
        return stats_for_difficulty(self._tests, difficulty, self.config)

    # Clock-relative views, never cached

    def word_recency(self, word_id: str) -> dict:
        """Days since first/last attempt."""
        analysis = self.get_practice_analysis(word_id)
        if analysis is None:
            raise KeyError(f"Unknown word: {word_id}")
        return word_recency(analysis, self.clock(), self.config)

    def weekly_progress(self) -> list:
        return weekly_progress(self._counters['daily_progress'], self.clock(), self.config)

    def streak_days(self) -> int:
        """Consecutive calendar days with at least one test."""
        return calendar_streak(self._counters['daily_progress'], self.clock(), self.config)

    def is_active_today(self) -> bool:
        return is_active_today(self._counters['daily_progress'], self.clock())

    def activity(self) -> dict:
        return {
            'streak_days': self.streak_days(),
            'is_active_today': self.is_active_today(),
            'average_score': self._counters['average_score'],
            'last_study_date': self._counters['last_study_date'],
            'weekly_progress': self.weekly_progress()
        }

    def classify_test(self, words: list):
        """Smart difficulty of a candidate word set against the current history."""
        return classify_test_difficulty(words, self.get_practice_analysis, self.config)

    # Mutations

    def set_words(self, words: list) -> None:
        """Replace the word catalogue."""
        self._words = list(words)
        self._invalidate()
        if self.storage:
            self.storage.save_words(self._words, self.user_id)

    def _append_attempt(self, word, is_correct: bool, used_hint: bool, time_spent: float, timestamp: str) -> None:
        performance = self._word_performance.get(word.id)
        if performance is None:
            performance = WordPerformance.for_word(word)
        else:
            # Refresh the display snapshot, history stays append-only
            performance = WordPerformance(word.english, word.italian, word.chapter, performance.attempts)
        performance.attempts.append(WordAttempt(timestamp, is_correct, used_hint, time_spent))
        self._word_performance[word.id] = performance

    def _save_word_performance(self) -> None:
        if self.storage:
            self.storage.set_word_performance(self._word_performance, self.user_id)

    def record_attempt(self, word, is_correct: bool, used_hint: bool = False, time_spent: float = 0) -> WordAttempt:
        """Append one attempt to the word's performance history."""
        timestamp = format_timestamp(self.clock())
        self._append_attempt(word, is_correct, used_hint, time_spent, timestamp)
        self._invalidate()
        self._save_word_performance()
        return self._word_performance[word.id].attempts[-1]

    def _next_test_id(self, now: datetime) -> int:
        test_id = max(int(now.timestamp() * 1000), self._last_test_id + 1)
        self._last_test_id = test_id
        return test_id

    def _build_responses(self, session_stats, words_used: list, wrong_words: list,
                         timestamp: str, difficulty: str) -> list:
        """One response per distinct word used, in presentation order."""
        word_times = {}
        for word_time in session_stats.word_times:
            word_times.setdefault(word_time.word_id, word_time)
        wrong_ids = {w.id for w in wrong_words}
        used_ids = [w.id for w in words_used]

        unknown = set(word_times) - set(used_ids)
        if unknown:
            logger.warning(f"Ignoring timings for {len(unknown)} words not in the test")

        responses = []
        seen = set()
        for word in words_used:
            if word.id in seen:
                continue
            seen.add(word.id)
            word_time = word_times.get(word.id)
            if word_time is not None:
                response = DetailedWordResponse(
                    word.id, word_time.is_correct, word_time.hints_used,
                    word_time.time_spent, timestamp, difficulty
                )
            else:
                response = DetailedWordResponse(
                    word.id, word.id not in wrong_ids, 0, 0, timestamp, difficulty
                )
            responses.append(response)
        return responses

    def _session_chapter_stats(self, words_used: list, responses: list) -> dict:
        chapter_of = {w.id: w.chapter_key for w in words_used}
        chapter_stats = {}
        for response in responses:
            chapter = chapter_of[response.word_id]
            entry = chapter_stats.setdefault(chapter, {
                'total_words': 0, 'correct_words': 0, 'incorrect_words': 0,
                'hints_used': 0, 'percentage': 0
            })
            entry['total_words'] += 1
            if response.is_correct:
                entry['correct_words'] += 1
            else:
                entry['incorrect_words'] += 1
            entry['hints_used'] += response.hints_used
        for entry in chapter_stats.values():
            entry['percentage'] = percent(entry['correct_words'], entry['total_words'])
        return chapter_stats

    def complete_test(self, session_stats, words_used: list, wrong_words: list = None) -> TestResult:
        """Turn a finished session into a TestResult and append it to the ledger.

        The difficulty is classified against the history as it was before this
        test, and stays frozen on the record.
        """
        if not words_used:
            raise ValueError("A test needs at least one word")
        wrong_words = wrong_words or []

        analysis = self.classify_test(words_used)
        now = self.clock()
        timestamp = format_timestamp(now)
        responses = self._build_responses(session_stats, words_used, wrong_words, timestamp, analysis.difficulty)
        right = [r for r in responses if r.is_correct]
        wrong = [r for r in responses if not r.is_correct]
        chapter_stats = self._session_chapter_stats(words_used, responses)

        if session_stats.word_times:
            hints_used = sum(r.hints_used for r in responses)
            total_time = session_stats.total_time or sum(r.time_response for r in responses)
        else:
            hints_used = session_stats.hints
            total_time = session_stats.total_time

        test = TestResult(
            self._next_test_id(now),
            timestamp,
            right_words=right,
            wrong_words=wrong,
            percentage=percent(len(right), len(responses)),
            total_time=total_time,
            hints_used=hints_used,
            difficulty=analysis.difficulty,
            test_type='selective' if len(chapter_stats) == 1 else 'complete',
            chapter_stats=chapter_stats
        )
        test.avg_time_per_word = round_half_up(safe_div(total_time, len(responses)))
        test.selected_chapters = list(chapter_stats)
        test.difficulty_analysis = analysis.to_dict()
        test.legacy_difficulty = legacy_difficulty(len(responses))

        self._tests.append(test)
        words_by_id = {w.id: w for w in words_used}
        for response in responses:
            self._append_attempt(
                words_by_id[response.word_id], response.is_correct,
                response.hints_used > 0, response.time_response, timestamp
            )
        _add_to_counters(self._counters, test)
        self._invalidate()

        logger.info(
            f"Test {test.id} completed for {self.user_id}: {test.percentage}% "
            f"({test.difficulty}, {len(responses)} words)"
        )
        if self.storage:
            try:
                self.storage.append_test(test, self.user_id)
                self.storage.set_word_performance(self._word_performance, self.user_id)
            except Exception as e:
                logger.error(f"Failed to persist test {test.id} for {self.user_id}: {e}")
                raise
        return test

    def clear_history(self) -> None:
        """Drop every test and attempt, keeping the word catalogue."""
        self._tests = []
        self._word_performance = {}
        self._counters = _empty_counters()
        self._invalidate()
        if self.storage:
            self.storage.clear_ledger(self.user_id)
        logger.info(f"Cleared test history for {self.user_id}")
