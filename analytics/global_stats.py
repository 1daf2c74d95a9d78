"""Global statistics over the whole test ledger."""

from .config import DATA_VERSION, DEFAULT_CONFIG, DEFAULT_DIFFICULTY, DEFAULT_TEST_TYPE, DIFFICULTIES
from .results import StatsResult
from .utils import (
    compute_streaks, date_part, mean, parse_timestamp, percent, round_half_up, safe_div,
    sort_chronologically
)


def _empty_difficulty_distribution() -> dict:
    return {d: {'count': 0, 'avg_accuracy': 0, 'avg_time': 0} for d in DIFFICULTIES}


class GlobalStats(StatsResult):
    """Snapshot of the learner's overall performance.

    Two accuracies are exposed on purpose: `global_accuracy` weighs every
    answered word equally, `avg_test_accuracy` weighs every test equally.
    """

    _FIELDS = (
        'total_tests', 'total_words_answered', 'total_correct_answers',
        'total_incorrect_answers', 'total_hints_used', 'total_time_spent',
        'global_accuracy', 'avg_test_accuracy', 'avg_time_per_word',
        'avg_time_per_test', 'avg_hints_per_test', 'avg_hints_per_word',
        'hints_efficiency', 'current_streak', 'best_streak', 'last_study_date',
        'study_frequency', 'improvement_trend', 'difficulty_distribution',
        'test_type_stats', 'data_version'
    )

    def _defaults(self) -> dict:
        return {
            'last_study_date': None,
            'difficulty_distribution': _empty_difficulty_distribution(),
            'test_type_stats': {},
            'data_version': DATA_VERSION
        }


def _study_frequency(tests: list) -> float:
    """Tests per week between the first and the last test."""
    if len(tests) < 2:
        return 0
    times = [parse_timestamp(t.timestamp) for t in tests]
    weeks = (max(times) - min(times)).total_seconds() / (7 * 24 * 3600)
    if weeks <= 0:
        return 0
    return round_half_up(len(tests) / weeks, 1)


def _improvement_trend(ordered: list, config) -> float:
    """Mean percentage of the latest window minus the window before it."""
    if len(ordered) < config.trend_min_tests:
        return 0
    window = config.trend_window
    recent = ordered[-window:]
    previous = ordered[-2 * window:-window]
    recent_avg = mean(t.percentage for t in recent)
    previous_avg = mean(t.percentage for t in previous) if previous else recent_avg
    return round_half_up(recent_avg - previous_avg, 1)


def _difficulty_distribution(tests: list) -> dict:
    groups = {d: [] for d in DIFFICULTIES}
    for test in tests:
        groups.get(test.difficulty, groups[DEFAULT_DIFFICULTY]).append(test)

    distribution = _empty_difficulty_distribution()
    for difficulty, group in groups.items():
        if group:
            distribution[difficulty] = {
                'count': len(group),
                'avg_accuracy': round_half_up(mean(t.percentage for t in group)),
                'avg_time': round_half_up(mean(t.avg_time_per_word for t in group))
            }
    return distribution


def _test_type_stats(tests: list) -> dict:
    groups = {}
    for test in tests:
        groups.setdefault(test.test_type or DEFAULT_TEST_TYPE, []).append(test)

    return {
        test_type: {
            'count': len(group),
            'avg_accuracy': round_half_up(mean(t.percentage for t in group)),
            'avg_time': round_half_up(mean(t.total_time for t in group)),
            'avg_hints': round_half_up(mean(t.hints_used for t in group), 1)
        }
        for test_type, group in groups.items()
    }


def compute_global_stats(tests: list, config=None) -> GlobalStats:
    """Reduce the test ledger to a single GlobalStats snapshot.

    Counts, hints and time come from the detailed responses, not from the
    summary fields of each test, which may be stale.
    """
    config = config or DEFAULT_CONFIG
    if not tests:
        return GlobalStats()

    total_tests = len(tests)
    total_correct = 0
    total_incorrect = 0
    total_hints = 0
    total_time = 0
    for test in tests:
        total_correct += len(test.right_words)
        total_incorrect += len(test.wrong_words)
        for response in test.responses:
            total_hints += response.hints_used
            total_time += response.time_response
    total_answered = total_correct + total_incorrect

    ordered = sort_chronologically(tests)
    current_streak, best_streak = compute_streaks(
        t.percentage >= config.streak_threshold for t in ordered
    )

    return GlobalStats(
        total_tests=total_tests,
        total_words_answered=total_answered,
        total_correct_answers=total_correct,
        total_incorrect_answers=total_incorrect,
        total_hints_used=total_hints,
        total_time_spent=total_time,
        global_accuracy=percent(total_correct, total_answered),
        avg_test_accuracy=round_half_up(mean(t.percentage for t in tests)),
        avg_time_per_word=round_half_up(safe_div(total_time, total_answered)),
        avg_time_per_test=round_half_up(safe_div(total_time, total_tests)),
        avg_hints_per_test=round_half_up(safe_div(total_hints, total_tests), 1),
        avg_hints_per_word=round_half_up(safe_div(total_hints, total_answered), 2),
        hints_efficiency=max(0, 100 - percent(total_hints, total_answered)) if total_answered else 0,
        current_streak=current_streak,
        best_streak=best_streak,
        last_study_date=date_part(ordered[-1].timestamp),
        study_frequency=_study_frequency(tests),
        improvement_trend=_improvement_trend(ordered, config),
        difficulty_distribution=_difficulty_distribution(tests),
        test_type_stats=_test_type_stats(tests)
    )


def stats_for_date_range(tests: list, start: str, end: str, config=None) -> GlobalStats:
    """Global stats restricted to tests whose date falls in [start, end] (YYYY-MM-DD)."""
    selected = [t for t in tests if start <= (date_part(t.timestamp) or '') <= end]
    return compute_global_stats(selected, config)


def stats_for_test_type(tests: list, test_type: str, config=None) -> GlobalStats:
    return compute_global_stats([t for t in tests if t.test_type == test_type], config)


def stats_for_difficulty(tests: list, difficulty: str, config=None) -> GlobalStats:
    return compute_global_stats([t for t in tests if t.difficulty == difficulty], config)
