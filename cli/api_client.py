"""REST API client for the vocabulary analytics server."""

import requests


class AnalyticsAPIClient:
    """Client for communicating with the analytics REST API."""

    def __init__(self, base_url: str = "http://localhost:8000", user_id: str = "default"):
        self.base_url = base_url.rstrip('/')
        self.user_id = user_id
        self.session = requests.Session()

    def _get(self, endpoint: str, params: dict = None) -> dict:
        """Make a GET request."""
        if params is None:
            params = {}
        params['user_id'] = self.user_id
        response = self.session.get(f"{self.base_url}{endpoint}", params=params)
        response.raise_for_status()
        return response.json()

    def _post(self, endpoint: str, data: dict) -> dict:
        """Make a POST request."""
        data['user_id'] = self.user_id
        response = self.session.post(f"{self.base_url}{endpoint}", json=data)
        response.raise_for_status()
        return response.json()

    def health_check(self) -> dict:
        """Check if the server is running."""
        response = self.session.get(f"{self.base_url}/")
        response.raise_for_status()
        return response.json()

    def get_global_stats(self, **filters) -> dict:
        """Global stats; filters are start, end, test_type or difficulty."""
        params = {k: v for k, v in filters.items() if v is not None}
        return self._get("/api/stats/global", params)

    def get_chapters(self) -> list:
        return self._get("/api/stats/chapters")['chapters']

    def get_words_performance(self) -> list:
        return self._get("/api/stats/performance")['words']

    def get_word(self, word_id: str) -> dict:
        return self._get(f"/api/stats/words/{word_id}")

    def classify(self, word_ids: list) -> dict:
        return self._post("/api/tests/classify", {'word_ids': list(word_ids)})

    def get_activity(self) -> dict:
        return self._get("/api/stats/activity")
