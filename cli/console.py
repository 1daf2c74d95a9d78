"""Console reports for the analytics CLI."""

from cli.api_client import AnalyticsAPIClient


def _ms_to_seconds(ms) -> str:
    return f'{(ms or 0) / 1000:.1f}s'


class ConsoleUI:
    """Prints analytics fetched from the server."""

    def __init__(self, client: AnalyticsAPIClient):
        self.client = client

    def print_global(self, stats: dict):
        print('=' * 60)
        print('OVERALL')
        print('=' * 60)
        if not stats['total_tests']:
            print('No tests taken yet.')
            return
        print(f"Tests taken:       {stats['total_tests']}")
        print(f"Words answered:    {stats['total_words_answered']} "
              f"({stats['total_correct_answers']} right, {stats['total_incorrect_answers']} wrong)")
        print(f"Accuracy:          {stats['global_accuracy']}% (avg per test {stats['avg_test_accuracy']}%)")
        print(f"Avg time per word: {_ms_to_seconds(stats['avg_time_per_word'])}")
        print(f"Hints per test:    {stats['avg_hints_per_test']}")
        print(f"Streak:            {stats['current_streak']} (best {stats['best_streak']})")
        print(f"Trend:             {stats['improvement_trend']:+}%")
        print(f"Last study date:   {stats['last_study_date']}")
        distribution = stats['difficulty_distribution']
        for difficulty in ('easy', 'medium', 'hard'):
            entry = distribution.get(difficulty, {})
            print(f"  {difficulty:<7} {entry.get('count', 0):>4} tests, {entry.get('avg_accuracy', 0)}%")

    def print_chapters(self, chapters: list):
        print('=' * 60)
        print('CHAPTERS')
        print('=' * 60)
        for chapter in chapters:
            dist = chapter['words_distribution']
            print(f"{chapter['chapter']:<20} {chapter['accuracy']:>3}%  "
                  f"{chapter['unique_words_tested']}/{chapter['total_words_in_chapter']} tested, "
                  f"{dist['mastered']} mastered, {dist['struggling']} struggling")

    def print_words(self, words: list, limit: int = 20):
        print('=' * 60)
        print('WORDS NEEDING ATTENTION FIRST')
        print('=' * 60)
        if not words:
            print('No words practised yet.')
            return
        for analysis in words[:limit]:
            print(f"[{analysis['status']:<12}] {analysis['english']} = {analysis['italian']} "
                  f"({analysis['accuracy']}%, {analysis['total_attempts']} attempts)")
        if len(words) > limit:
            print(f'... and {len(words) - limit} more')

    def print_word(self, result: dict):
        analysis = result['analysis']
        recency = result['recency']
        print('-' * 40)
        print(f"{analysis['english']} = {analysis['italian']}  [{analysis['chapter']}]")
        print(f"Status: {analysis['status']} ({analysis['proficiency_level']})")
        print(f"Attempts: {analysis['total_attempts']}, accuracy {analysis['accuracy']}%, "
              f"recent {analysis['recent_accuracy']}%")
        print(f"Streak: {analysis['current_streak']} (best {analysis['best_streak']})")
        print(f"Avg time: {_ms_to_seconds(analysis['avg_time_per_attempt'])}, "
              f"hints per attempt {analysis['hints_per_attempt']}")
        practice = result.get('practice') or analysis
        if practice['total_attempts'] != analysis['total_attempts']:
            print(f"Practice history: {practice['total_attempts']} attempts, "
                  f"{practice['accuracy']}%, status {practice['status']}")
        if practice['total_attempts']:
            print(f"Last seen {recency['days_since_last']} days ago"
                  + (' - review due' if recency['needs_review'] else ''))
        print(f"Next step: {analysis['recommended_action']}")
        for recommendation in analysis['recommendations']:
            print(f'  * {recommendation}')
        print('-' * 40)

    def print_activity(self, activity: dict):
        print('=' * 60)
        print('ACTIVITY')
        print('=' * 60)
        today = 'yes' if activity['is_active_today'] else 'not yet'
        print(f"Study streak:      {activity['streak_days']} days (studied today: {today})")
        print(f"Average score:     {activity['average_score']}%")
        for day in activity['weekly_progress']:
            print(f"  {day['date']}  {day['tests']:>2} tests, {day['correct']:>3} right, "
                  f"{day['incorrect']:>3} wrong, {day['hints']:>2} hints")

    def print_classification(self, result: dict):
        print(f"Difficulty: {result['difficulty']} ({result['total_words']} words)")
        print(f"  {result['rationale']}")
        breakdown = ', '.join(f'{n} {status}' for status, n in result['status_breakdown'].items() if n)
        if breakdown:
            print(f"  {breakdown}")

    def report(self):
        self.print_global(self.client.get_global_stats())
        self.print_activity(self.client.get_activity())
        self.print_chapters(self.client.get_chapters())
        self.print_words(self.client.get_words_performance())
