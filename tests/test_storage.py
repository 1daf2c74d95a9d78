"""Unit tests for the file storage backend."""

import json
import os
import tempfile
import unittest

from analytics.models import DetailedWordResponse, TestResult, Word, WordAttempt, WordPerformance
from server.file_storage import FileStorage


class TestFileStorage(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.storage = FileStorage(
            config_file=os.path.join(self.tmp.name, 'config.json'),
            state_dir=self.tmp.name
        )

    def make_test(self) -> TestResult:
        timestamp = '2024-01-01T10:00:00.000Z'
        test = TestResult(
            1704103200000, timestamp,
            right_words=[DetailedWordResponse('1', True, 0, 2500, timestamp, 'easy')],
            wrong_words=[DetailedWordResponse('2', False, 1, 4000, timestamp, 'easy')],
            percentage=50, total_time=6500, hints_used=1, difficulty='easy',
            test_type='selective', chapter_stats={'1': {'total_words': 2}}
        )
        test.difficulty_analysis = {'difficulty': 'easy'}
        return test

    def test_missing_state_is_empty(self):
        self.assertEqual(self.storage.get_words(), [])
        self.assertEqual(self.storage.get_tests(), [])
        self.assertEqual(self.storage.get_word_performance(), {})

    def test_words_persist(self):
        self.storage.save_words([Word('1', 'dog', 'cane', chapter='3')])
        words = self.storage.get_words()
        self.assertEqual(len(words), 1)
        self.assertEqual(words[0].italian, 'cane')
        self.assertEqual(words[0].chapter, '3')

    def test_tests_are_appended(self):
        self.storage.append_test(self.make_test())
        self.storage.append_test(self.make_test())
        tests = self.storage.get_tests()
        self.assertEqual(len(tests), 2)
        self.assertEqual(tests[0].difficulty, 'easy')
        self.assertEqual(tests[0].test_type, 'selective')
        self.assertEqual(tests[0].wrong_words[0].hints_used, 1)
        self.assertEqual(tests[0].difficulty_analysis, {'difficulty': 'easy'})

    def test_word_performance_persists(self):
        performance = WordPerformance('dog', 'cane', '3', [WordAttempt('2024-01-01T10:00:00.000Z', True)])
        self.storage.set_word_performance({'1': performance})
        loaded = self.storage.get_word_performance()
        self.assertEqual(loaded['1'].english, 'dog')
        self.assertTrue(loaded['1'].attempts[0].correct)

    def test_clear_ledger_keeps_words(self):
        self.storage.save_words([Word('1', 'dog', 'cane')])
        self.storage.append_test(self.make_test())
        self.storage.clear_ledger()
        self.assertEqual(self.storage.get_tests(), [])
        self.assertEqual(len(self.storage.get_words()), 1)

    def test_users_are_separate(self):
        self.storage.save_words([Word('1', 'dog', 'cane')], user_id='anna')
        self.assertEqual(self.storage.get_words(), [])
        self.assertEqual(len(self.storage.get_words('anna')), 1)
        self.storage.save_words([], user_id='default')
        self.assertEqual(self.storage.list_users(), ['anna', 'default'])

    def test_load_config(self):
        with self.assertRaises(FileNotFoundError):
            self.storage.load_config()
        with open(self.storage.config_file, 'w') as f:
            json.dump({'stats': {'streak_threshold': 80}}, f)
        self.assertEqual(self.storage.load_config()['stats']['streak_threshold'], 80)

    def test_corrupt_state_file_is_an_error(self):
        with open(os.path.join(self.tmp.name, 'vocab_state.json'), 'w') as f:
            f.write('{not json')
        with self.assertLogs('server.file_storage', level='ERROR'):
            with self.assertRaises(ValueError):
                self.storage.get_tests()

    def test_truncated_state_file_is_not_overwritten(self):
        self.storage.save_words([Word('1', 'dog', 'cane')])
        self.storage.append_test(self.make_test())
        state_file = os.path.join(self.tmp.name, 'vocab_state.json')
        with open(state_file, 'r') as f:
            content = f.read()
        truncated = content[:len(content) // 2]
        with open(state_file, 'w') as f:
            f.write(truncated)

        with self.assertLogs('server.file_storage', level='ERROR'):
            with self.assertRaises(ValueError):
                self.storage.append_test(self.make_test())
        with self.assertLogs('server.file_storage', level='ERROR'):
            with self.assertRaises(ValueError):
                self.storage.save_words([])
        with open(state_file, 'r') as f:
            self.assertEqual(f.read(), truncated)


if __name__ == '__main__':
    unittest.main()
