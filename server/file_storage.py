"""File-based storage implementation."""

import json
import logging
import os

from analytics.interfaces import Storage
from analytics.models import TestResult, Word, WordPerformance

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = '~/.config/vocab_analytics/config.json'


class FileStorage(Storage):
    """Keeps each user's catalogue and ledger in one JSON file."""

    def __init__(self, config_file: str = None, state_dir: str = None):
        self.config_file = config_file or os.path.expanduser(DEFAULT_CONFIG_FILE)
        # Project root is one level up from server/
        project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        self.state_dir = state_dir or os.environ.get('VOCAB_STATE_DIR') or project_root

    def _get_state_file(self, user_id: str) -> str:
        """Get state file path for a user."""
        if user_id == "default":
            return os.path.join(self.state_dir, 'vocab_state.json')
        return os.path.join(self.state_dir, f'vocab_state_{user_id}.json')

    def _load_state(self, user_id: str) -> dict:
        state_file = self._get_state_file(user_id)
        if os.path.exists(state_file):
            try:
                with open(state_file, 'r') as f:
                    return json.load(f)
            except (OSError, ValueError) as e:
                # Writing after an empty fallback would replace the ledger
                logger.error(f"Unreadable state file {state_file}: {e}")
                raise
        return {}

    def _save_state(self, state: dict, user_id: str) -> None:
        os.makedirs(self.state_dir, exist_ok=True)
        state_file = self._get_state_file(user_id)
        tmp_file = state_file + '.tmp'
        with open(tmp_file, 'w') as f:
            json.dump(state, f, indent=2)
        os.replace(tmp_file, state_file)

    def _update_state(self, user_id: str, key: str, value) -> None:
        state = self._load_state(user_id)
        state[key] = value
        self._save_state(state, user_id)

    def load_config(self) -> dict:
        if not os.path.exists(self.config_file):
            raise FileNotFoundError(
                f"Config file not found at {self.config_file}\n"
                f'Create it with e.g.: {{"stats": {{"streak_threshold": 75}}}}'
            )
        with open(self.config_file, 'r') as f:
            return json.load(f)

    def list_users(self) -> list[str]:
        """List all existing user IDs."""
        users = []
        if os.path.exists(self.state_dir):
            for filename in os.listdir(self.state_dir):
                if filename == 'vocab_state.json':
                    users.append('default')
                elif filename.startswith('vocab_state_') and filename.endswith('.json'):
                    users.append(filename[len('vocab_state_'):-len('.json')])
        return sorted(users)

    def get_words(self, user_id: str = "default") -> list:
        return [Word.from_dict(w) for w in self._load_state(user_id).get('words', [])]

    def save_words(self, words: list, user_id: str = "default") -> None:
        self._update_state(user_id, 'words', [w.to_dict() for w in words])

    def get_tests(self, user_id: str = "default") -> list:
        return [TestResult.from_dict(t) for t in self._load_state(user_id).get('tests', [])]

    def append_test(self, test, user_id: str = "default") -> None:
        state = self._load_state(user_id)
        state.setdefault('tests', []).append(test.to_dict())
        self._save_state(state, user_id)

    def get_word_performance(self, user_id: str = "default") -> dict:
        data = self._load_state(user_id).get('word_performance', {})
        return {word_id: WordPerformance.from_dict(p) for word_id, p in data.items()}

    def set_word_performance(self, performance: dict, user_id: str = "default") -> None:
        self._update_state(
            user_id, 'word_performance',
            {word_id: p.to_dict() for word_id, p in performance.items()}
        )

    def clear_ledger(self, user_id: str = "default") -> None:
        state = self._load_state(user_id)
        state['tests'] = []
        state['word_performance'] = {}
        self._save_state(state, user_id)
