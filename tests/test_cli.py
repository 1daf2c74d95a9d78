"""Tests for the console report printer."""

import io
import sys
import unittest
from contextlib import redirect_stdout
from unittest.mock import MagicMock, patch

import requests

from analytics.chapter_stats import ChapterStats
from analytics.difficulty import DifficultyAnalysis
from analytics.global_stats import GlobalStats
from analytics.word_analysis import WordAnalysis
from cli import __main__ as cli_main
from cli.console import ConsoleUI


class TestConsoleUI(unittest.TestCase):

    def setUp(self):
        self.client = MagicMock()
        self.ui = ConsoleUI(self.client)

    def capture(self, func, *args, **kwargs) -> str:
        out = io.StringIO()
        with redirect_stdout(out):
            func(*args, **kwargs)
        return out.getvalue()

    def test_empty_report(self):
        self.client.get_global_stats.return_value = GlobalStats().to_dict()
        self.client.get_activity.return_value = {
            'streak_days': 0, 'is_active_today': False, 'average_score': 0,
            'last_study_date': None, 'weekly_progress': []
        }
        self.client.get_chapters.return_value = []
        self.client.get_words_performance.return_value = []
        output = self.capture(self.ui.report)
        self.assertIn('No tests taken yet.', output)
        self.assertIn('Study streak:      0 days (studied today: not yet)', output)
        self.assertIn('No words practised yet.', output)

    def test_global_section(self):
        stats = GlobalStats(total_tests=2, total_words_answered=15, total_correct_answers=11,
                            total_incorrect_answers=4, global_accuracy=73, avg_test_accuracy=70,
                            improvement_trend=-5.5, last_study_date='2024-01-02').to_dict()
        output = self.capture(self.ui.print_global, stats)
        self.assertIn('73% (avg per test 70%)', output)
        self.assertIn('-5.5%', output)

    def test_chapters_section(self):
        chapter = ChapterStats(chapter='1', accuracy=67, unique_words_tested=2,
                               total_words_in_chapter=3).to_dict()
        output = self.capture(self.ui.print_chapters, [chapter])
        self.assertIn('2/3 tested', output)

    def test_words_are_limited(self):
        words = [WordAnalysis(word_id=str(i), english='dog', italian='cane').to_dict() for i in range(5)]
        output = self.capture(self.ui.print_words, words, limit=2)
        self.assertIn('... and 3 more', output)

    def test_word_detail(self):
        analysis = WordAnalysis(word_id='1', english='dog', italian='cane', total_attempts=3,
                                status='struggling').to_dict()
        result = {'analysis': analysis,
                  'recency': {'days_since_first': 20, 'days_since_last': 15, 'needs_review': True}}
        output = self.capture(self.ui.print_word, result)
        self.assertIn('dog = cane', output)
        self.assertIn('Last seen 15 days ago - review due', output)

    def test_word_detail_with_practice_history(self):
        analysis = WordAnalysis(word_id='1', english='dog', italian='cane').to_dict()
        practice = WordAnalysis(word_id='1', english='dog', italian='cane', total_attempts=3,
                                status='critical').to_dict()
        result = {'analysis': analysis, 'practice': practice,
                  'recency': {'days_since_first': 0, 'days_since_last': 0, 'needs_review': True}}
        output = self.capture(self.ui.print_word, result)
        self.assertIn('Practice history: 3 attempts, 0%, status critical', output)
        self.assertIn('Last seen 0 days ago - review due', output)

    def test_activity_section(self):
        activity = {
            'streak_days': 2, 'is_active_today': True, 'average_score': 75,
            'last_study_date': '2024-01-03',
            'weekly_progress': [{'date': '2024-01-03', 'tests': 1, 'correct': 3, 'incorrect': 1, 'hints': 0}]
        }
        output = self.capture(self.ui.print_activity, activity)
        self.assertIn('2 days (studied today: yes)', output)
        self.assertIn('Average score:     75%', output)
        self.assertIn('2024-01-03   1 tests,   3 right,   1 wrong,  0 hints', output)

    def test_classification(self):
        result = DifficultyAnalysis(difficulty='hard', rationale='Hard test: 100.0% problem words (1/1)',
                                    total_words=1).to_dict()
        result['status_breakdown']['critical'] = 1
        output = self.capture(self.ui.print_classification, result)
        self.assertIn('Difficulty: hard (1 words)', output)
        self.assertIn('1 critical', output)


# ============================================================================
# Command line entry point
# ============================================================================

class TestMain(unittest.TestCase):

    def run_main(self, *argv) -> tuple:
        out = io.StringIO()
        with patch('cli.__main__.AnalyticsAPIClient') as client_cls, \
                patch.object(sys, 'argv', ['cli', *argv]), redirect_stdout(out):
            client = client_cls.return_value
            client.classify.return_value = DifficultyAnalysis(difficulty='medium').to_dict()
            client.get_words_performance.return_value = []
            try:
                cli_main.main()
                code = 0
            except SystemExit as e:
                code = e.code
        return client, code, out.getvalue()

    def test_health_is_checked_first(self):
        client, code, _ = self.run_main('words')
        self.assertEqual(code, 0)
        client.health_check.assert_called_once_with()
        client.get_words_performance.assert_called_once_with()

    def test_classify_command(self):
        client, code, output = self.run_main('--user', 'anna', 'classify', '1', '2')
        self.assertEqual(code, 0)
        client.classify.assert_called_once_with(['1', '2'])
        self.assertIn('Difficulty: medium', output)

    def test_unreachable_server(self):
        out = io.StringIO()
        with patch('cli.__main__.AnalyticsAPIClient') as client_cls, \
                patch.object(sys, 'argv', ['cli', 'report']), redirect_stdout(out):
            client_cls.return_value.health_check.side_effect = requests.ConnectionError()
            with self.assertRaises(SystemExit) as cm:
                cli_main.main()
        self.assertEqual(cm.exception.code, 1)
        self.assertIn('Cannot reach server', out.getvalue())
        client_cls.return_value.get_global_stats.assert_not_called()


if __name__ == '__main__':
    unittest.main()
