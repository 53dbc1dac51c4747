"""
PAINLENS CLI
============

Command-line access to the analysis engine.

Usage:
    painlens analyze diary.json
    painlens analyze diary.json --profile conservative --output result.json
    painlens analyze diary.json --config my_settings.yaml --log-level DEBUG
    painlens profiles

Input is a JSON list of records, or an object with a "records" list.
The result is written as JSON to --output or stdout.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from painlens.config import ConfigLoader
from painlens.orchestration.pipeline import analyze
from painlens.utils.logging import get_logger, setup_logging

logger = get_logger("cli")

EXIT_OK = 0
EXIT_BAD_INPUT = 2


class InputError(Exception):
    """Input or configuration file could not be used."""
    pass


def load_records(path: Path) -> List[Any]:
    """Read diary records from a JSON file."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise InputError(f"Records file not found: {path}")
    except json.JSONDecodeError as e:
        raise InputError(f"Invalid JSON in records file: {e}")
    except UnicodeDecodeError as e:
        raise InputError(f"Records file is not UTF-8 text: {e}")
    except OSError as e:
        raise InputError(f"Cannot read records file {path}: {e.strerror or e}")

    if isinstance(data, dict):
        if "records" not in data:
            raise InputError("Records JSON object must contain a 'records' key")
        data = data["records"]

    if not isinstance(data, list):
        raise InputError(f"Records must be a list, got {type(data).__name__}")

    return data


def load_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Combine a named preset and/or a YAML file into one override mapping."""
    loader = ConfigLoader()
    overrides: Dict[str, Any] = {}
    try:
        if args.profile:
            overrides.update(loader.load(args.profile))
        if args.config:
            overrides.update(loader.load_file(args.config))
    except (OSError, ValueError) as e:
        raise InputError(str(e))
    return overrides


def cmd_analyze(args: argparse.Namespace) -> int:
    records = load_records(Path(args.records))
    overrides = load_overrides(args)

    result = analyze(records, overrides)
    payload = json.dumps(result.to_dict(), indent=2)

    if args.output:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(payload + "\n")
        logger.info(f"Analysis written to: {output}")
    else:
        print(payload)

    return EXIT_OK


def cmd_profiles(args: argparse.Namespace) -> int:
    loader = ConfigLoader()
    for name in loader.list_configs():
        print(name)
        if args.verbose:
            for key, value in sorted(loader.load(name).items()):
                print(f"  {key}: {value}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="painlens",
        description="PAINLENS - pattern analysis for pain diaries",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  painlens analyze diary.json
  painlens analyze diary.json --profile conservative -o result.json
  painlens profiles -v
        """
    )
    parser.add_argument(
        '--log-level',
        type=str,
        default='WARNING',
        help='Logging level (default: WARNING)'
    )
    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also write logs to this file'
    )

    subparsers = parser.add_subparsers(dest="command")

    analyze_parser = subparsers.add_parser("analyze", help="Analyze a diary JSON file")
    analyze_parser.add_argument("records", help="Path to a JSON file of records")
    analyze_parser.add_argument(
        '--config', '-c',
        type=str,
        default=None,
        help='YAML file with configuration overrides'
    )
    analyze_parser.add_argument(
        '--profile', '-p',
        type=str,
        default=None,
        help='Bundled configuration preset (see: painlens profiles)'
    )
    analyze_parser.add_argument(
        '--output', '-o',
        type=str,
        default=None,
        help='Write JSON result here instead of stdout'
    )
    analyze_parser.set_defaults(func=cmd_analyze)

    profiles_parser = subparsers.add_parser("profiles", help="List bundled presets")
    profiles_parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Show preset values'
    )
    profiles_parser.set_defaults(func=cmd_profiles)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level, log_file=args.log_file)

    if not getattr(args, "func", None):
        parser.print_help()
        return EXIT_BAD_INPUT

    try:
        return args.func(args)
    except InputError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT


if __name__ == "__main__":
    sys.exit(main())
