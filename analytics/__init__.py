from .models import (
    Word, DetailedWordResponse, TestResult, WordAttempt, WordPerformance,
    WordTime, SessionStats
)
from .interfaces import CatalogueProvider, LedgerStore, Storage
from .config import StatsConfig, DEFAULT_CONFIG, DATA_VERSION, DEFAULT_CHAPTER
from .global_stats import GlobalStats, compute_global_stats
from .chapter_stats import ChapterStats, compute_chapter_stats
from .word_analysis import (
    WordAnalysis, compute_word_analysis, compute_word_analyses, compute_performance_analyses,
    classify_word_status, classify_proficiency, word_recency
)
from .difficulty import DifficultyAnalysis, classify_test_difficulty
from .progress import calendar_streak, is_active_today, weekly_progress
from .facade import StatsFacade

__all__ = [
    'Word', 'DetailedWordResponse', 'TestResult', 'WordAttempt', 'WordPerformance',
    'WordTime', 'SessionStats',
    'CatalogueProvider', 'LedgerStore', 'Storage',
    'StatsConfig', 'DEFAULT_CONFIG', 'DATA_VERSION', 'DEFAULT_CHAPTER',
    'GlobalStats', 'compute_global_stats',
    'ChapterStats', 'compute_chapter_stats',
    'WordAnalysis', 'compute_word_analysis', 'compute_word_analyses', 'compute_performance_analyses',
    'classify_word_status', 'classify_proficiency', 'word_recency',
    'DifficultyAnalysis', 'classify_test_difficulty',
    'calendar_streak', 'is_active_today', 'weekly_progress',
    'StatsFacade'
]
