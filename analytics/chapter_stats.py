"""Per-chapter statistics over the test ledger."""

import logging

from .config import DEFAULT_CONFIG
from .results import StatsResult
from .utils import mean, parse_timestamp, percent, round_half_up, safe_div, sort_chronologically
from .word_analysis import compute_word_analyses

logger = logging.getLogger(__name__)


class ChapterStats(StatsResult):
    _FIELDS = (
        'chapter', 'total_words_in_chapter', 'tested_words', 'unique_words_tested',
        'total_attempts', 'correct_attempts', 'incorrect_attempts', 'accuracy',
        'total_time_spent', 'avg_time_per_word', 'total_hints_used', 'hints_per_word',
        'hints_efficiency', 'first_test_date', 'last_test_date', 'improvement_trend',
        'words_distribution'
    )

    def _defaults(self) -> dict:
        return {
            'chapter': None,
            'first_test_date': None,
            'last_test_date': None,
            'words_distribution': {'learned': 0, 'difficult': 0, 'mastered': 0, 'struggling': 0}
        }


class _ChapterAccumulator:
    """Mutable running totals for one chapter while the ledger is walked."""

    def __init__(self, chapter: str):
        self.chapter = chapter
        self.words = 0
        self.learned = 0
        self.difficult = 0
        self.mastered = 0
        self.struggling = 0
        self.word_ids = set()
        self.attempts = 0
        self.correct = 0
        self.time = 0
        self.hints = 0
        self.first_date = None
        self.last_date = None
        # One (correct, total) pair per test the chapter took part in, ledger order
        self.per_test = []

    def add_response(self, response, test_timestamp):
        self.word_ids.add(response.word_id)
        self.attempts += 1
        if response.is_correct:
            self.correct += 1
        self.time += response.time_response
        self.hints += response.hints_used
        answered_at = response.timestamp or test_timestamp
        moment = parse_timestamp(answered_at)
        if self.first_date is None or moment < parse_timestamp(self.first_date):
            self.first_date = answered_at
        if self.last_date is None or moment > parse_timestamp(self.last_date):
            self.last_date = answered_at

    def improvement_trend(self, config) -> float:
        if len(self.per_test) < config.chapter_trend_min_tests:
            return 0
        window = config.chapter_trend_window
        accuracies = [safe_div(correct, total) * 100 for correct, total in self.per_test]
        recent = accuracies[-window:]
        previous = accuracies[-2 * window:-window]
        return round_half_up(mean(recent) - mean(previous), 1)

    def finish(self, config) -> ChapterStats:
        attempts = self.attempts
        return ChapterStats(
            chapter=self.chapter,
            total_words_in_chapter=self.words,
            tested_words=attempts,
            unique_words_tested=len(self.word_ids),
            total_attempts=attempts,
            correct_attempts=self.correct,
            incorrect_attempts=attempts - self.correct,
            accuracy=percent(self.correct, attempts),
            total_time_spent=self.time,
            avg_time_per_word=round_half_up(safe_div(self.time, attempts)),
            total_hints_used=self.hints,
            hints_per_word=round_half_up(safe_div(self.hints, attempts), 2),
            hints_efficiency=max(0, 100 - percent(self.hints, attempts)) if attempts else 0,
            first_test_date=self.first_date,
            last_test_date=self.last_date,
            improvement_trend=self.improvement_trend(config),
            words_distribution={
                'learned': self.learned,
                'difficult': self.difficult,
                'mastered': self.mastered,
                'struggling': self.struggling
            }
        )


def compute_chapter_stats(tests: list, words: list, config=None, word_analyses: list = None) -> list:
    """Group every resolvable response by its word's chapter.

    Chapters come from the catalogue, so chapters nobody has tested yet still
    appear with zero metrics. Responses whose word is no longer in the
    catalogue are skipped. `word_analyses` may be passed in when the caller
    already has them for the same ledger.
    """
    config = config or DEFAULT_CONFIG
    chapters = {}
    words_by_id = {}
    for word in words:
        words_by_id[word.id] = word
        acc = chapters.get(word.chapter_key)
        if acc is None:
            acc = chapters[word.chapter_key] = _ChapterAccumulator(word.chapter_key)
        acc.words += 1
        if word.learned:
            acc.learned += 1
        if word.difficult:
            acc.difficult += 1

    if word_analyses is None:
        word_analyses = compute_word_analyses(tests, words, config)
    for analysis in word_analyses:
        word = words_by_id.get(analysis.word_id)
        if word is None:
            continue
        acc = chapters[word.chapter_key]
        if analysis.is_well_mastered:
            acc.mastered += 1
        if analysis.status in ('critical', 'struggling'):
            acc.struggling += 1

    skipped = 0
    for test in sort_chronologically(tests):
        in_test = {}
        for response in test.responses:
            word = words_by_id.get(response.word_id)
            if word is None:
                skipped += 1
                continue
            acc = chapters[word.chapter_key]
            acc.add_response(response, test.timestamp)
            correct, total = in_test.get(acc.chapter, (0, 0))
            in_test[acc.chapter] = (correct + int(response.is_correct), total + 1)
        for chapter, counts in in_test.items():
            chapters[chapter].per_test.append(counts)

    if skipped:
        logger.warning(f"Skipped {skipped} responses for words missing from the catalogue")

    return [acc.finish(config) for acc in chapters.values()]


def find_chapter_stats(chapter_stats: list, chapter: str) -> ChapterStats | None:
    for stats in chapter_stats:
        if stats.chapter == chapter:
            return stats
    return None
