"""Per-word proficiency analysis from the attempt history of a word."""

import math

from .config import (
    DEFAULT_CONFIG, MIN_RETENTION_ATTEMPTS, MIN_TIMED_ATTEMPTS, MIN_VELOCITY_ATTEMPTS,
    NEVER_TESTED_RECOMMENDATION
)
from .models import DetailedWordResponse, Word
from .results import StatsResult
from .utils import compute_streaks, mean, parse_timestamp, percent, round_half_up, safe_div

WORD_STATUSES = ['critical', 'inconsistent', 'struggling', 'promising', 'improving', 'consolidated', 'new']

ACTION_RECOMMENDATIONS = {
    'maintain': 'Well mastered - a quick review now and then keeps it fresh',
    'practice_speed': 'Answers are right but slow - practise recalling it faster',
    'review_occasionally': 'Mostly right - review it occasionally',
    'study_more': 'Often missed - study this word more'
}


class WordAnalysis(StatsResult):
    """Proficiency profile of one word. Contains no clock-dependent fields."""

    _FIELDS = (
        'word_id', 'english', 'italian', 'chapter', 'group', 'learned', 'difficult',
        'sentence', 'notes',
        'total_attempts', 'correct_attempts', 'incorrect_attempts', 'accuracy',
        'recent_accuracy', 'consistency_score',
        'total_time_spent', 'avg_time_per_attempt', 'fastest_time', 'slowest_time',
        'time_improvement',
        'total_hints_used', 'hints_per_attempt', 'hints_decreasing_trend', 'independence',
        'current_streak', 'best_streak', 'learning_velocity', 'retention_score',
        'first_attempt', 'last_attempt',
        'status', 'proficiency_level', 'needs_work', 'is_well_mastered',
        'recommended_action', 'recommendations', 'recent_attempts'
    )

    def _defaults(self) -> dict:
        return {
            'word_id': None, 'english': '', 'italian': '', 'chapter': None, 'group': None,
            'learned': False, 'difficult': False, 'sentence': None, 'notes': None,
            'independence': 100,
            'first_attempt': None, 'last_attempt': None,
            'status': 'new', 'proficiency_level': 'beginner',
            'needs_work': True, 'is_well_mastered': False,
            'recommended_action': 'study_more',
            'recommendations': [NEVER_TESTED_RECOMMENDATION],
            'recent_attempts': []
        }


def classify_word_status(total_attempts: int, current_streak: int, correct_ratio: float, config=None) -> str:
    """Status decision table; the first matching row wins."""
    config = config or DEFAULT_CONFIG
    if total_attempts >= config.status_min_attempts:
        if current_streak >= config.status_consolidated_streak:
            return 'consolidated'
        if correct_ratio >= config.status_improving_ratio:
            return 'improving'
        if correct_ratio <= config.status_critical_ratio:
            return 'critical'
        return 'inconsistent'
    if total_attempts > 0:
        return 'promising' if current_streak > 0 else 'struggling'
    return 'new'


def classify_proficiency(accuracy: int, current_streak: int, config=None) -> str:
    config = config or DEFAULT_CONFIG
    if accuracy >= config.proficiency_expert_accuracy and current_streak >= config.proficiency_expert_streak:
        return 'expert'
    if accuracy >= config.proficiency_advanced_accuracy and current_streak >= config.proficiency_advanced_streak:
        return 'advanced'
    if accuracy >= config.proficiency_intermediate_accuracy:
        return 'intermediate'
    return 'beginner'


def consistency_score(attempts: list, window: int) -> int:
    """100 minus the standard deviation of recent 100/0 outcomes."""
    values = [100 if a.is_correct else 0 for a in attempts[-window:]]
    if not values:
        return 0
    avg = mean(values)
    variance = mean((v - avg) ** 2 for v in values)
    return round_half_up(max(0, 100 - math.sqrt(variance)))


def _half_change(values: list, floor: float = None) -> int:
    """Percentage drop from the first half of values to the second half.

    Positive means the later values are smaller.
    """
    half = len(values) // 2
    first_avg = mean(values[:half])
    second_avg = mean(values[-half:])
    denominator = max(first_avg, floor) if floor is not None else first_avg
    return round_half_up(safe_div(first_avg - second_avg, denominator) * 100)


def learning_velocity(attempts: list) -> float:
    """Accuracy of the last third minus accuracy of the first third."""
    if len(attempts) < MIN_VELOCITY_ATTEMPTS:
        return 0
    third = len(attempts) // 3
    first = attempts[:third]
    last = attempts[-third:]
    first_accuracy = safe_div(sum(a.is_correct for a in first), len(first)) * 100
    last_accuracy = safe_div(sum(a.is_correct for a in last), len(last)) * 100
    return round_half_up(last_accuracy - first_accuracy, 1)


def retention_score(attempts: list) -> int:
    """Mean accuracy of overlapping 3-attempt windows, stepping by 2."""
    if len(attempts) < MIN_RETENTION_ATTEMPTS:
        return 0
    windows = []
    for i in range(2, len(attempts), 2):
        window = attempts[max(0, i - 2):i + 1]
        windows.append(sum(a.is_correct for a in window) / len(window))
    return round_half_up(mean(windows) * 100)


def _recommended_action(is_well_mastered: bool, accuracy: int, avg_time: float, config) -> str:
    if is_well_mastered:
        return 'maintain'
    if accuracy >= config.speed_practice_accuracy and avg_time > config.slow_response_ms:
        return 'practice_speed'
    if accuracy >= config.review_accuracy:
        return 'review_occasionally'
    return 'study_more'


def _word_fields(word) -> dict:
    return {
        'word_id': word.id,
        'english': word.english,
        'italian': word.italian,
        'chapter': word.chapter,
        'group': word.group,
        'learned': word.learned,
        'difficult': word.difficult,
        'sentence': word.sentence,
        'notes': word.notes
    }


def analyze_attempts(word, attempts: list, config=None) -> WordAnalysis:
    """Analyze a word from its responses, which must already be chronological."""
    config = config or DEFAULT_CONFIG
    if not attempts:
        return WordAnalysis(**_word_fields(word))

    total = len(attempts)
    correct = sum(1 for a in attempts if a.is_correct)
    accuracy = percent(correct, total)
    recent = attempts[-config.recent_window:]
    recent_accuracy = percent(sum(1 for a in recent if a.is_correct), len(recent))

    times = [a.time_response for a in attempts if a.time_response > 0]
    total_time = sum(times)
    avg_time = round_half_up(safe_div(total_time, len(times)))
    time_improvement = _half_change(times) if len(times) >= MIN_TIMED_ATTEMPTS else 0

    hints = [a.hints_used for a in attempts]
    total_hints = sum(hints)
    hints_per_attempt = round_half_up(total_hints / total, 2)
    hints_trend = _half_change(hints, floor=0.1) if total >= MIN_TIMED_ATTEMPTS else 0
    independence = max(0, 100 - percent(total_hints, total))

    current_streak, best_streak = compute_streaks(a.is_correct for a in attempts)
    is_well_mastered = (
        accuracy >= config.mastery_threshold
        and current_streak >= config.mastery_streak
        and independence >= config.mastery_independence
    )
    action = _recommended_action(is_well_mastered, accuracy, avg_time, config)

    return WordAnalysis(
        **_word_fields(word),
        total_attempts=total,
        correct_attempts=correct,
        incorrect_attempts=total - correct,
        accuracy=accuracy,
        recent_accuracy=recent_accuracy,
        consistency_score=consistency_score(attempts, config.consistency_window),
        total_time_spent=total_time,
        avg_time_per_attempt=avg_time,
        fastest_time=min(times) if times else 0,
        slowest_time=max(times) if times else 0,
        time_improvement=time_improvement,
        total_hints_used=total_hints,
        hints_per_attempt=hints_per_attempt,
        hints_decreasing_trend=hints_trend,
        independence=independence,
        current_streak=current_streak,
        best_streak=best_streak,
        learning_velocity=learning_velocity(attempts),
        retention_score=retention_score(attempts),
        first_attempt=attempts[0].timestamp,
        last_attempt=attempts[-1].timestamp,
        status=classify_word_status(total, current_streak, correct / total, config),
        proficiency_level=classify_proficiency(accuracy, current_streak, config),
        needs_work=accuracy < config.needs_work_accuracy or hints_per_attempt > config.needs_work_hints,
        is_well_mastered=is_well_mastered,
        recommended_action=action,
        recommendations=[ACTION_RECOMMENDATIONS[action]],
        recent_attempts=[a.to_dict() for a in attempts[-config.recent_attempts_kept:]]
    )


def _chronological(responses: list) -> list:
    return sorted(responses, key=lambda r: parse_timestamp(r.timestamp))


def collect_responses(tests: list) -> dict:
    """Index every response in the ledger by word id, oldest first."""
    by_word = {}
    for test in tests:
        for response in test.responses:
            by_word.setdefault(response.word_id, []).append(response)
    return {word_id: _chronological(responses) for word_id, responses in by_word.items()}


def compute_word_analysis(word, all_tests: list, config=None) -> WordAnalysis:
    """Analyze one word against the full test ledger."""
    attempts = [r for test in all_tests for r in test.responses if r.word_id == word.id]
    return analyze_attempts(word, _chronological(attempts), config)


def compute_word_analyses(tests: list, words: list, config=None) -> list:
    """Analyze every catalogue word with a single pass over the ledger."""
    by_word = collect_responses(tests)
    return [analyze_attempts(word, by_word.get(word.id, []), config) for word in words]


def performance_attempts(word_id: str, performance) -> list:
    """A word's practice history as responses the analyzer can read.

    Practice attempts only record whether a hint was used, so each one
    counts as at most one hint.
    """
    return [
        DetailedWordResponse(word_id, a.correct, int(a.used_hint), a.time_spent, a.timestamp)
        for a in performance.attempts
    ]


def snapshot_word(word_id: str, performance) -> Word:
    """Rebuild a display word from the snapshot kept with its performance."""
    return Word(word_id, performance.english, performance.italian, chapter=performance.chapter)


def compute_performance_analyses(word_performance: dict, words: list, config=None) -> dict:
    """Analyze every word with a practice history, keyed by word id.

    Display fields come from the catalogue, or from the performance snapshot
    for words that have since left it.
    """
    catalogue = {w.id: w for w in words}
    analyses = {}
    for word_id, performance in word_performance.items():
        word = catalogue.get(word_id) or snapshot_word(word_id, performance)
        attempts = _chronological(performance_attempts(word_id, performance))
        analyses[word_id] = analyze_attempts(word, attempts, config)
    return analyses


def word_recency(analysis: WordAnalysis, now, config=None) -> dict:
    """Clock-relative display fields, kept apart from the cached analysis."""
    config = config or DEFAULT_CONFIG
    if not analysis.total_attempts:
        return {'days_since_first': 0, 'days_since_last': 0, 'needs_review': True}
    now = parse_timestamp(now)
    day = 24 * 3600
    days_since_first = max(0, math.floor((now - parse_timestamp(analysis.first_attempt)).total_seconds() / day))
    days_since_last = max(0, math.floor((now - parse_timestamp(analysis.last_attempt)).total_seconds() / day))
    return {
        'days_since_first': days_since_first,
        'days_since_last': days_since_last,
        'needs_review': analysis.needs_work or days_since_last > config.stale_after_days
    }
