"""Configuration constants for the vocabulary analytics engine."""

DATA_VERSION = '3.0.0'
DEFAULT_CHAPTER = 'No Chapter'

DIFFICULTIES = ['easy', 'medium', 'hard']
DEFAULT_DIFFICULTY = 'medium'
TEST_TYPES = ['selective', 'complete']
DEFAULT_TEST_TYPE = 'complete'

# Global streaks and trends
STREAK_THRESHOLD = 75         # Test percentage needed to extend a streak
TREND_MIN_TESTS = 6           # Tests needed before a trend is reported
TREND_WINDOW = 5              # Recent tests compared against the window before

# Chapter trends
CHAPTER_TREND_MIN_TESTS = 6
CHAPTER_TREND_WINDOW = 3

# Word analysis windows
RECENT_WINDOW = 5             # Attempts used for recent accuracy
CONSISTENCY_WINDOW = 10       # Attempts used for the consistency score
RECENT_ATTEMPTS_KEPT = 10     # Attempts echoed back in an analysis
MIN_TIMED_ATTEMPTS = 4        # Half-vs-half comparisons need this many
MIN_VELOCITY_ATTEMPTS = 6
MIN_RETENTION_ATTEMPTS = 3

# Word status decision table
STATUS_MIN_ATTEMPTS = 3
STATUS_CONSOLIDATED_STREAK = 3
STATUS_IMPROVING_RATIO = 0.7
STATUS_CRITICAL_RATIO = 0.3

# Proficiency tiers: (accuracy, current streak) needed for each level
PROFICIENCY_EXPERT_ACCURACY = 90
PROFICIENCY_EXPERT_STREAK = 5
PROFICIENCY_ADVANCED_ACCURACY = 80
PROFICIENCY_ADVANCED_STREAK = 3
PROFICIENCY_INTERMEDIATE_ACCURACY = 60

# Mastery and recommendations
MASTERY_THRESHOLD = 90        # Accuracy needed to count as well mastered
MASTERY_STREAK = 3
MASTERY_INDEPENDENCE = 90
SLOW_RESPONSE_MS = 10000      # Average time above this suggests speed practice
NEEDS_WORK_ACCURACY = 70
NEEDS_WORK_HINTS = 0.5        # Hints per attempt
SPEED_PRACTICE_ACCURACY = 80  # Accurate enough that slowness is the issue
REVIEW_ACCURACY = 70          # Below this a word needs more study
STALE_AFTER_DAYS = 14

# Calendar activity
WEEKLY_PROGRESS_DAYS = 7
CALENDAR_STREAK_MAX_DAYS = 365

NEVER_TESTED_RECOMMENDATION = 'Word never tested - take a test to see how it performs'

# Smart difficulty classifier
HARD_WEIGHT = 3
MEDIUM_WEIGHT = 1
EASY_WEIGHT = -1
LARGE_TEST_SIZE = 50          # Above this the score is nudged towards easy
LARGE_TEST_ADJUSTMENT = -0.3
SMALL_TEST_SIZE = 15          # Below this the score is nudged towards hard
SMALL_TEST_ADJUSTMENT = 0.2
HARD_PERCENT_THRESHOLD = 50
HARD_SCORE_THRESHOLD = 1.5
EASY_PERCENT_THRESHOLD = 70
EASY_SCORE_THRESHOLD = -0.5

# Word-count heuristic kept on test records for comparison
LEGACY_EASY_MAX_WORDS = 10
LEGACY_MEDIUM_MAX_WORDS = 25


class StatsConfig:
    """Tunable thresholds, defaulting to the module constants above."""

    _DEFAULTS = {
        'streak_threshold': STREAK_THRESHOLD,
        'trend_min_tests': TREND_MIN_TESTS,
        'trend_window': TREND_WINDOW,
        'chapter_trend_min_tests': CHAPTER_TREND_MIN_TESTS,
        'chapter_trend_window': CHAPTER_TREND_WINDOW,
        'recent_window': RECENT_WINDOW,
        'consistency_window': CONSISTENCY_WINDOW,
        'recent_attempts_kept': RECENT_ATTEMPTS_KEPT,
        'status_min_attempts': STATUS_MIN_ATTEMPTS,
        'status_consolidated_streak': STATUS_CONSOLIDATED_STREAK,
        'status_improving_ratio': STATUS_IMPROVING_RATIO,
        'status_critical_ratio': STATUS_CRITICAL_RATIO,
        'proficiency_expert_accuracy': PROFICIENCY_EXPERT_ACCURACY,
        'proficiency_expert_streak': PROFICIENCY_EXPERT_STREAK,
        'proficiency_advanced_accuracy': PROFICIENCY_ADVANCED_ACCURACY,
        'proficiency_advanced_streak': PROFICIENCY_ADVANCED_STREAK,
        'proficiency_intermediate_accuracy': PROFICIENCY_INTERMEDIATE_ACCURACY,
        'mastery_threshold': MASTERY_THRESHOLD,
        'mastery_streak': MASTERY_STREAK,
        'mastery_independence': MASTERY_INDEPENDENCE,
        'slow_response_ms': SLOW_RESPONSE_MS,
        'needs_work_accuracy': NEEDS_WORK_ACCURACY,
        'needs_work_hints': NEEDS_WORK_HINTS,
        'speed_practice_accuracy': SPEED_PRACTICE_ACCURACY,
        'review_accuracy': REVIEW_ACCURACY,
        'stale_after_days': STALE_AFTER_DAYS,
        'weekly_progress_days': WEEKLY_PROGRESS_DAYS,
        'calendar_streak_max_days': CALENDAR_STREAK_MAX_DAYS,
        'large_test_size': LARGE_TEST_SIZE,
        'large_test_adjustment': LARGE_TEST_ADJUSTMENT,
        'small_test_size': SMALL_TEST_SIZE,
        'small_test_adjustment': SMALL_TEST_ADJUSTMENT,
        'hard_percent_threshold': HARD_PERCENT_THRESHOLD,
        'hard_score_threshold': HARD_SCORE_THRESHOLD,
        'easy_percent_threshold': EASY_PERCENT_THRESHOLD,
        'easy_score_threshold': EASY_SCORE_THRESHOLD,
    }

    def __init__(self, **overrides):
        unknown = set(overrides) - set(self._DEFAULTS)
        if unknown:
            raise ValueError(f"Unknown stats config keys: {', '.join(sorted(unknown))}")
        for key, default in self._DEFAULTS.items():
            setattr(self, key, overrides.get(key, default))

    def to_dict(self) -> dict:
        return {key: getattr(self, key) for key in self._DEFAULTS}

    @classmethod
    def from_dict(cls, data: dict | None) -> 'StatsConfig':
        """Build a config from a (possibly partial) dict, ignoring unknown keys."""
        data = data or {}
        return cls(**{k: v for k, v in data.items() if k in cls._DEFAULTS})


DEFAULT_CONFIG = StatsConfig()
