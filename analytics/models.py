"""Ledger models for the vocabulary analytics engine.

`from_dict` is where stored records are normalized: missing optional fields
get their defaults here, so the aggregators can rely on fully populated
objects.
"""

from .config import DATA_VERSION, DEFAULT_CHAPTER, DEFAULT_DIFFICULTY, DEFAULT_TEST_TYPE, DIFFICULTIES, TEST_TYPES
from .utils import normalize_chapter


def _non_negative_int(value) -> int:
    try:
        return max(0, int(value or 0))
    except (TypeError, ValueError):
        return 0


def _non_negative_number(value) -> float:
    try:
        number = float(value or 0)
    except (TypeError, ValueError):
        return 0
    if number != number or number < 0:  # NaN or negative
        return 0
    return int(number) if number.is_integer() else number


class Word:
    """A vocabulary entry from the word catalogue."""

    def __init__(self, id: str, english: str, italian: str, chapter: str = None,
                 group: str = None, learned: bool = False, difficult: bool = False,
                 sentence: str = None, notes: str = None):
        self.id = str(id)
        self.english = english
        self.italian = italian
        self.chapter = normalize_chapter(chapter)
        self.group = group or None
        self.learned = bool(learned)
        self.difficult = bool(difficult)
        self.sentence = sentence or None
        self.notes = notes or None

    @property
    def chapter_key(self) -> str:
        """Chapter label used for grouping; unassigned words share one bucket."""
        return self.chapter or DEFAULT_CHAPTER

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'english': self.english,
            'italian': self.italian,
            'chapter': self.chapter,
            'group': self.group,
            'learned': self.learned,
            'difficult': self.difficult,
            'sentence': self.sentence,
            'notes': self.notes
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Word':
        return cls(
            data['id'],
            data.get('english', ''),
            data.get('italian', ''),
            chapter=data.get('chapter'),
            group=data.get('group'),
            learned=data.get('learned', False),
            difficult=data.get('difficult', False),
            sentence=data.get('sentence'),
            notes=data.get('notes')
        )


class DetailedWordResponse:
    """One answer to one word within one test."""

    def __init__(self, word_id: str, is_correct: bool, hints_used: int = 0,
                 time_response: float = 0, timestamp: str = None,
                 current_difficulty: str = None):
        self.word_id = str(word_id)
        self.is_correct = bool(is_correct)
        self.hints_used = _non_negative_int(hints_used)
        self.time_response = _non_negative_number(time_response)
        self.timestamp = timestamp
        self.current_difficulty = current_difficulty

    def to_dict(self) -> dict:
        return {
            'word_id': self.word_id,
            'is_correct': self.is_correct,
            'hints_used': self.hints_used,
            'time_response': self.time_response,
            'timestamp': self.timestamp,
            'current_difficulty': self.current_difficulty
        }

    @classmethod
    def from_dict(cls, data: dict, default_timestamp: str = None) -> 'DetailedWordResponse':
        return cls(
            data['word_id'],
            data.get('is_correct', False),
            hints_used=data.get('hints_used'),
            time_response=data.get('time_response'),
            timestamp=data.get('timestamp') or default_timestamp,
            current_difficulty=data.get('current_difficulty')
        )


class TestResult:
    """One completed test session. Never mutated once it enters the ledger."""

    __test__ = False  # keep pytest from collecting this as a test class

    def __init__(self, id: int, timestamp: str, right_words: list = None,
                 wrong_words: list = None, percentage: int = 0, total_time: float = 0,
                 hints_used: int = 0, difficulty: str = DEFAULT_DIFFICULTY,
                 test_type: str = DEFAULT_TEST_TYPE, chapter_stats: dict = None):
        self.id = id
        self.timestamp = timestamp
        self.right_words = list(right_words or [])
        self.wrong_words = list(wrong_words or [])
        self.percentage = percentage
        self.total_time = total_time
        self.hints_used = hints_used
        self.difficulty = difficulty if difficulty in DIFFICULTIES else DEFAULT_DIFFICULTY
        self.test_type = test_type if test_type in TEST_TYPES else DEFAULT_TEST_TYPE
        self.chapter_stats = dict(chapter_stats or {})
        self.avg_time_per_word = 0
        self.selected_chapters = []
        self.difficulty_analysis = None
        self.legacy_difficulty = None
        self.version = DATA_VERSION

    @property
    def responses(self) -> list:
        """All detailed responses of the session, right ones first."""
        return self.right_words + self.wrong_words

    @property
    def total_words(self) -> int:
        return len(self.right_words) + len(self.wrong_words)

    @property
    def correct_words(self) -> int:
        return len(self.right_words)

    @property
    def incorrect_words(self) -> int:
        return len(self.wrong_words)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'timestamp': self.timestamp,
            'right_words': [r.to_dict() for r in self.right_words],
            'wrong_words': [r.to_dict() for r in self.wrong_words],
            'total_words': self.total_words,
            'correct_words': self.correct_words,
            'incorrect_words': self.incorrect_words,
            'percentage': self.percentage,
            'total_time': self.total_time,
            'avg_time_per_word': self.avg_time_per_word,
            'hints_used': self.hints_used,
            'difficulty': self.difficulty,
            'difficulty_analysis': self.difficulty_analysis,
            'legacy_difficulty': self.legacy_difficulty,
            'test_type': self.test_type,
            'selected_chapters': self.selected_chapters,
            'chapter_stats': self.chapter_stats,
            'version': self.version
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'TestResult':
        timestamp = data.get('timestamp')
        right = [DetailedWordResponse.from_dict(r, timestamp) for r in data.get('right_words') or []]
        wrong = [DetailedWordResponse.from_dict(r, timestamp) for r in data.get('wrong_words') or []]
        # Responses are re-partitioned by their own flag, the list they came in is advisory
        responses = right + wrong
        test = cls(
            data.get('id', 0),
            timestamp,
            right_words=[r for r in responses if r.is_correct],
            wrong_words=[r for r in responses if not r.is_correct],
            percentage=_non_negative_number(data.get('percentage')),
            total_time=_non_negative_number(data.get('total_time')),
            hints_used=_non_negative_int(data.get('hints_used')),
            difficulty=data.get('difficulty') or DEFAULT_DIFFICULTY,
            test_type=data.get('test_type') or DEFAULT_TEST_TYPE,
            chapter_stats=data.get('chapter_stats') or {}
        )
        test.avg_time_per_word = _non_negative_number(data.get('avg_time_per_word'))
        test.selected_chapters = list(data.get('selected_chapters') or [])
        test.difficulty_analysis = data.get('difficulty_analysis')
        test.legacy_difficulty = data.get('legacy_difficulty')
        test.version = data.get('version', DATA_VERSION)
        return test


class WordAttempt:
    """One entry of a word's denormalized performance history."""

    def __init__(self, timestamp: str, correct: bool, used_hint: bool = False, time_spent: float = 0):
        self.timestamp = timestamp
        self.correct = bool(correct)
        self.used_hint = bool(used_hint)
        self.time_spent = _non_negative_number(time_spent)

    def to_dict(self) -> dict:
        return {
            'timestamp': self.timestamp,
            'correct': self.correct,
            'used_hint': self.used_hint,
            'time_spent': self.time_spent
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'WordAttempt':
        return cls(
            data.get('timestamp'),
            data.get('correct', False),
            used_hint=data.get('used_hint', False),
            time_spent=data.get('time_spent')
        )


class WordPerformance:
    """Per-word attempt history with a display snapshot of the word."""

    def __init__(self, english: str, italian: str, chapter: str = None, attempts: list = None):
        self.english = english
        self.italian = italian
        self.chapter = normalize_chapter(chapter)
        self.attempts = list(attempts or [])

    @classmethod
    def for_word(cls, word: Word) -> 'WordPerformance':
        return cls(word.english, word.italian, word.chapter)

    def to_dict(self) -> dict:
        return {
            'english': self.english,
            'italian': self.italian,
            'chapter': self.chapter,
            'attempts': [a.to_dict() for a in self.attempts]
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'WordPerformance':
        return cls(
            data.get('english', ''),
            data.get('italian', ''),
            chapter=data.get('chapter'),
            attempts=[WordAttempt.from_dict(a) for a in data.get('attempts') or []]
        )


class WordTime:
    """Per-word timing reported by the test-taking flow."""

    def __init__(self, word_id: str, is_correct: bool, used_hint: bool = False,
                 time_spent: float = 0, hints_used: int = None):
        self.word_id = str(word_id)
        self.is_correct = bool(is_correct)
        self.used_hint = bool(used_hint)
        self.time_spent = _non_negative_number(time_spent)
        # Hint count defaults to the boolean flag when the flow only tracks that
        self.hints_used = _non_negative_int(hints_used) if hints_used is not None else int(self.used_hint)

    @classmethod
    def from_dict(cls, data: dict) -> 'WordTime':
        return cls(
            data['word_id'],
            data.get('is_correct', False),
            used_hint=data.get('used_hint', False),
            time_spent=data.get('time_spent'),
            hints_used=data.get('hints_used')
        )


class SessionStats:
    """Summary of a finished test session, as produced by the test-taking flow."""

    def __init__(self, correct: int = 0, incorrect: int = 0, hints: int = 0,
                 total_time: float = 0, word_times: list = None):
        self.correct = _non_negative_int(correct)
        self.incorrect = _non_negative_int(incorrect)
        self.hints = _non_negative_int(hints)
        self.total_time = _non_negative_number(total_time)
        self.word_times = list(word_times or [])

    @classmethod
    def from_dict(cls, data: dict) -> 'SessionStats':
        return cls(
            correct=data.get('correct'),
            incorrect=data.get('incorrect'),
            hints=data.get('hints'),
            total_time=data.get('total_time'),
            word_times=[WordTime.from_dict(wt) for wt in data.get('word_times') or []]
        )
