"""Entry point for the analytics CLI client."""

import argparse
import sys

import requests

from cli.api_client import AnalyticsAPIClient
from cli.console import ConsoleUI


def main():
    parser = argparse.ArgumentParser(description='Vocabulary learning statistics')
    parser.add_argument(
        '--server',
        default='http://localhost:8000',
        help='Server URL (default: http://localhost:8000)'
    )
    parser.add_argument(
        '--user',
        default='default',
        help='User ID (default: default)'
    )
    subparsers = parser.add_subparsers(dest='command')
    subparsers.add_parser('report', help='Overall, chapter and word summary (default)')
    words_parser = subparsers.add_parser('words', help='Practised words, most troubled first')
    words_parser.add_argument('--limit', type=int, default=20)
    word_parser = subparsers.add_parser('word', help='Detailed analysis of one word')
    word_parser.add_argument('word_id')
    classify_parser = subparsers.add_parser('classify', help='Difficulty a test on these words would get')
    classify_parser.add_argument('word_ids', nargs='+')
    args = parser.parse_args()

    client = AnalyticsAPIClient(base_url=args.server, user_id=args.user)
    ui = ConsoleUI(client)

    try:
        client.health_check()
        if args.command == 'words':
            ui.print_words(client.get_words_performance(), limit=args.limit)
        elif args.command == 'word':
            ui.print_word(client.get_word(args.word_id))
        elif args.command == 'classify':
            ui.print_classification(client.classify(args.word_ids))
        else:
            ui.report()
    except requests.HTTPError as e:
        print(f'Server error: {e}')
        sys.exit(1)
    except requests.ConnectionError:
        print(f'Cannot reach server at {args.server}')
        sys.exit(1)


if __name__ == '__main__':
    main()
