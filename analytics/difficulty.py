"""Smart test difficulty from the history of the words picked for a test."""

from .config import DEFAULT_CONFIG, EASY_WEIGHT, HARD_WEIGHT, LEGACY_EASY_MAX_WORDS, LEGACY_MEDIUM_MAX_WORDS, MEDIUM_WEIGHT
from .results import StatsResult
from .utils import round_half_up, safe_div

STATUS_BUCKETS = {
    'critical': 'hard',
    'inconsistent': 'hard',
    'struggling': 'hard',
    'promising': 'medium',
    'new': 'medium',
    'improving': 'easy',
    'consolidated': 'easy'
}


class DifficultyAnalysis(StatsResult):
    """Classifier output, frozen onto a test record when the test starts."""

    _FIELDS = (
        'difficulty', 'rationale', 'total_words', 'weighted_score',
        'size_adjustment', 'distribution', 'status_breakdown'
    )

    def _defaults(self) -> dict:
        return {
            'difficulty': 'medium',
            'rationale': '',
            'distribution': {b: {'count': 0, 'percentage': 0} for b in ('hard', 'medium', 'easy')},
            'status_breakdown': {status: 0 for status in STATUS_BUCKETS}
        }


def size_adjustment(total_words: int, config=None) -> float:
    """Large sets drift towards the mean, small sets amplify outliers."""
    config = config or DEFAULT_CONFIG
    if total_words > config.large_test_size:
        return config.large_test_adjustment
    if total_words < config.small_test_size:
        return config.small_test_adjustment
    return 0


def legacy_difficulty(total_words: int) -> str:
    """Old word-count heuristic, kept on test records for comparison."""
    if total_words < LEGACY_EASY_MAX_WORDS:
        return 'easy'
    if total_words < LEGACY_MEDIUM_MAX_WORDS:
        return 'medium'
    return 'hard'


def classify_test_difficulty(candidate_words: list, analyze, config=None) -> DifficultyAnalysis:
    """Label a candidate word set easy, medium or hard.

    `analyze` maps a word id to its WordAnalysis, or None for a word that
    has never been analyzed (treated as 'new').
    """
    config = config or DEFAULT_CONFIG
    total = len(candidate_words)
    if not total:
        return DifficultyAnalysis(rationale='Balanced test: no words selected')

    status_breakdown = {status: 0 for status in STATUS_BUCKETS}
    for word in candidate_words:
        analysis = analyze(word.id)
        status = analysis.status if analysis is not None else 'new'
        status_breakdown[status] += 1

    counts = {'hard': 0, 'medium': 0, 'easy': 0}
    for status, count in status_breakdown.items():
        counts[STATUS_BUCKETS[status]] += count
    hard, medium, easy = counts['hard'], counts['medium'], counts['easy']

    hard_pct = safe_div(hard, total) * 100
    medium_pct = safe_div(medium, total) * 100
    easy_pct = safe_div(easy, total) * 100

    weighted = (hard * HARD_WEIGHT + medium * MEDIUM_WEIGHT + easy * EASY_WEIGHT) / total
    adjustment = size_adjustment(total, config)
    score = weighted + adjustment

    if hard_pct >= config.hard_percent_threshold or score >= config.hard_score_threshold:
        difficulty = 'hard'
        rationale = f"Hard test: {hard_pct:.1f}% problem words ({hard}/{total})"
    elif easy_pct >= config.easy_percent_threshold or score <= config.easy_score_threshold:
        difficulty = 'easy'
        rationale = f"Easy test: {easy_pct:.1f}% consolidated or improving words ({easy}/{total})"
    else:
        difficulty = 'medium'
        rationale = (
            f"Balanced test: {hard_pct:.1f}% hard ({hard}), {easy_pct:.1f}% easy ({easy}), "
            f"{total} words"
        )

    return DifficultyAnalysis(
        difficulty=difficulty,
        rationale=rationale,
        total_words=total,
        weighted_score=round_half_up(score, 2),
        size_adjustment=adjustment,
        distribution={
            'hard': {'count': hard, 'percentage': round_half_up(hard_pct, 1)},
            'medium': {'count': medium, 'percentage': round_half_up(medium_pct, 1)},
            'easy': {'count': easy, 'percentage': round_half_up(easy_pct, 1)}
        },
        status_breakdown=status_breakdown
    )
