"""API tests for the analytics server."""

import os
import tempfile
import unittest

from fastapi.testclient import TestClient

import server.app as server_app
from analytics.config import StatsConfig
from server.file_storage import FileStorage


WORDS = [
    {'id': '1', 'english': 'dog', 'italian': 'cane', 'chapter': 1},
    {'id': '2', 'english': 'cat', 'italian': 'gatto', 'chapter': 1},
    {'id': '3', 'english': 'house', 'italian': 'casa', 'chapter': '2'},
]


class TestServer(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        storage = FileStorage(
            config_file=os.path.join(self.tmp.name, 'config.json'),
            state_dir=self.tmp.name
        )
        server_app.configure(storage)
        self.client = TestClient(server_app.app)
        response = self.client.put('/api/words', json={'words': WORDS})
        self.assertEqual(response.status_code, 200)

    def complete(self, word_ids, wrong=(), word_times=None):
        payload = {'word_ids': list(word_ids), 'wrong_word_ids': list(wrong)}
        if word_times is not None:
            payload['word_times'] = word_times
        return self.client.post('/api/tests/complete', json=payload)

    def test_root(self):
        self.assertEqual(self.client.get('/').json()['data_version'], '3.0.0')

    def test_words_roundtrip(self):
        words = self.client.get('/api/words').json()['words']
        self.assertEqual([w['id'] for w in words], ['1', '2', '3'])
        self.assertEqual(words[0]['chapter'], '1')

    def test_empty_ledger_stats(self):
        stats = self.client.get('/api/stats/global').json()
        self.assertEqual(stats['total_tests'], 0)
        self.assertIsNone(stats['last_study_date'])

    def test_complete_test_updates_stats(self):
        response = self.complete(['1', '2', '3'], wrong=['3'])
        self.assertEqual(response.status_code, 200)
        test = response.json()['test']
        self.assertEqual(test['percentage'], 67)
        self.assertEqual(test['test_type'], 'complete')

        stats = self.client.get('/api/stats/global').json()
        self.assertEqual(stats['total_tests'], 1)
        self.assertEqual(stats['total_correct_answers'], 2)

        chapters = self.client.get('/api/stats/chapters').json()['chapters']
        self.assertEqual([c['chapter'] for c in chapters], ['1', '2'])
        self.assertEqual(chapters[1]['accuracy'], 0)

    def test_complete_test_with_word_times(self):
        response = self.complete(['1'], word_times=[
            {'word_id': '1', 'is_correct': True, 'used_hint': True, 'time_spent': 4200}
        ])
        test = response.json()['test']
        self.assertEqual(test['hints_used'], 1)
        self.assertEqual(test['total_time'], 4200)
        self.assertEqual(test['test_type'], 'selective')

    def test_tests_persist_across_facades(self):
        self.complete(['1'])
        server_app.user_facades.clear()
        self.assertEqual(len(self.client.get('/api/tests').json()['tests']), 1)

    def test_classify(self):
        response = self.client.post('/api/tests/classify', json={'word_ids': ['1', '2', '3']})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['difficulty'], 'medium')

        self.complete(['1', '2', '3'], wrong=['1', '2', '3'])
        response = self.client.post('/api/tests/classify', json={'word_ids': ['1', '2', '3']})
        self.assertEqual(response.json()['difficulty'], 'hard')

    def test_unknown_word_is_404(self):
        response = self.client.post('/api/tests/classify', json={'word_ids': ['1', 'nope']})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(self.client.get('/api/stats/words/nope').status_code, 404)
        self.assertEqual(self.client.get('/api/stats/chapters/99').status_code, 404)

    def test_empty_test_is_400(self):
        self.assertEqual(self.complete([]).status_code, 400)

    def test_invalid_filter_is_400(self):
        self.assertEqual(self.client.get('/api/stats/global', params={'test_type': 'quiz'}).status_code, 400)
        self.assertEqual(self.client.get('/api/stats/global', params={'difficulty': 'brutal'}).status_code, 400)

    def test_filtered_stats(self):
        self.complete(['1'])
        self.complete(['1', '3'])
        stats = self.client.get('/api/stats/global', params={'test_type': 'selective'}).json()
        self.assertEqual(stats['total_tests'], 1)
        stats = self.client.get('/api/stats/global', params={'start': '2000-01-01'}).json()
        self.assertEqual(stats['total_tests'], 2)

    def test_word_detail(self):
        self.complete(['1', '2'], wrong=['2'])
        detail = self.client.get('/api/stats/words/2').json()
        self.assertEqual(detail['analysis']['status'], 'struggling')
        self.assertEqual(detail['recency']['days_since_last'], 0)
        self.assertTrue(detail['recency']['needs_review'])

        performance = self.client.get('/api/stats/performance').json()['words']
        self.assertEqual([w['word_id'] for w in performance], ['2', '1'])
        self.assertEqual(len(self.client.get('/api/stats/words').json()['words']), 3)

    def test_record_attempt(self):
        response = self.client.post('/api/attempts', json={'word_id': '3', 'is_correct': False})
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()['attempt']['correct'])
        self.assertEqual(self.client.post('/api/attempts', json={'word_id': 'x', 'is_correct': True}).status_code, 404)

    def test_recorded_attempts_drive_performance_and_classify(self):
        for _ in range(3):
            self.client.post('/api/attempts', json={'word_id': '3', 'is_correct': False})
        performance = self.client.get('/api/stats/performance').json()['words']
        self.assertEqual([(w['word_id'], w['status'], w['total_attempts']) for w in performance],
                         [('3', 'critical', 3)])
        result = self.client.post('/api/tests/classify', json={'word_ids': ['3']}).json()
        self.assertEqual(result['difficulty'], 'hard')
        self.assertEqual(result['status_breakdown']['critical'], 1)

        detail = self.client.get('/api/stats/words/3').json()
        self.assertEqual(detail['analysis']['total_attempts'], 0)
        self.assertEqual(detail['practice']['total_attempts'], 3)

    def test_activity(self):
        self.assertEqual(self.client.get('/api/stats/activity').json()['streak_days'], 0)
        self.complete(['1', '2'], wrong=['2'])
        activity = self.client.get('/api/stats/activity').json()
        self.assertEqual(activity['streak_days'], 1)
        self.assertTrue(activity['is_active_today'])
        self.assertEqual(activity['average_score'], 50)
        self.assertEqual(len(activity['weekly_progress']), 7)
        self.assertEqual(activity['weekly_progress'][0]['tests'], 1)
        self.assertEqual(activity['weekly_progress'][0]['date'], activity['last_study_date'])

    def test_clear_tests(self):
        self.complete(['1'])
        self.assertEqual(self.client.delete('/api/tests').status_code, 200)
        self.assertEqual(self.client.get('/api/tests').json()['tests'], [])
        self.assertEqual(len(self.client.get('/api/words').json()['words']), 3)

    def test_users_are_isolated(self):
        self.complete(['1'])
        stats = self.client.get('/api/stats/global', params={'user_id': 'other'}).json()
        self.assertEqual(stats['total_tests'], 0)
        self.assertIn('default', self.client.get('/api/users').json()['users'])

    def test_config_override(self):
        storage = server_app.storage
        server_app.configure(storage, StatsConfig(streak_threshold=101))
        self.complete(['1'])
        self.assertEqual(self.client.get('/api/stats/global').json()['current_streak'], 0)
        self.assertEqual(self.client.get('/api/config').json()['streak_threshold'], 101)

    def test_load_stats_config_without_file(self):
        config = server_app.load_stats_config(server_app.storage)
        self.assertEqual(config.streak_threshold, 75)


if __name__ == '__main__':
    unittest.main()
