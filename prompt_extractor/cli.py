"""
Command Line Interface

Entry point for parsing curl commands from the command line.

Usage:
    python -m prompt_extractor request.sh
    pbpaste | python -m prompt_extractor --stats
    python -m prompt_extractor request.sh --rebuild
"""

import argparse
import json
import sys

from .decoder import build_curl, normalize_command, parse_curl
from .exceptions import MalformedCommandError
from .messages import get_message_stats, validate_messages


def _read_input(path: str) -> str:
    if path == '-':
        return sys.stdin.read()
    with open(path, encoding='utf-8') as f:
        return f.read()


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Extract chat messages and settings from a curl command",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m prompt_extractor request.sh
  python -m prompt_extractor request.sh --rebuild
  pbpaste | python -m prompt_extractor --stats
  python -m prompt_extractor request.sh --validate
        """
    )

    parser.add_argument(
        "file",
        nargs="?",
        default="-",
        help="File holding the curl command (default: read stdin)"
    )

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--rebuild",
        action="store_true",
        help="Print the command rebuilt from the parsed request"
    )
    mode.add_argument(
        "--normalize",
        action="store_true",
        help="Print the command collapsed onto one line"
    )
    mode.add_argument(
        "--stats",
        action="store_true",
        help="Print message counts and token estimates"
    )
    mode.add_argument(
        "--validate",
        action="store_true",
        help="Check the extracted messages; exit 1 on problems"
    )
    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indentation (default: 2)"
    )

    args = parser.parse_args(argv)

    try:
        command = _read_input(args.file)

        if args.normalize:
            print(normalize_command(command))
            return 0

        parsed = parse_curl(command)
        for warning in parsed.warnings:
            print(f"Warning: {warning}", file=sys.stderr)

        if args.rebuild:
            print(build_curl(parsed))
        elif args.stats:
            stats = get_message_stats(parsed.messages)
            print(json.dumps(stats.to_dict(), indent=args.indent))
        elif args.validate:
            errors = validate_messages(parsed.messages)
            for error in errors:
                print(error)
            if errors:
                return 1
            print(f"OK: {len(parsed.messages)} messages")
        else:
            print(parsed.to_json(indent=args.indent))

        return 0

    except (MalformedCommandError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n\nInterrupted by user.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
