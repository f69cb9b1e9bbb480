"""CLI entry point for inspecting bearer tokens."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime, timezone

import yaml
from dotenv import load_dotenv

from tokenwatch.config import InspectorConfig, load_config
from tokenwatch.inspector import inspect_token
from tokenwatch.models import TokenInspection

logger = logging.getLogger(__name__)


def _read_token(arg: str) -> str:
    """Token from the command line, or from stdin when given as ``-``."""
    if arg == "-":
        return sys.stdin.read().strip()
    return arg


def _load_config_or_exit(path: str | None) -> InspectorConfig:
    try:
        return load_config(path)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as exc:
        print(f"Error: {exc}")
        sys.exit(1)


def _format_expiry(result: TokenInspection) -> str:
    exp = (result.claims or {}).get("exp")
    if result.expires_in is None:
        return "exp: none"
    try:
        when = datetime.fromtimestamp(exp, tz=timezone.utc).isoformat()
    except (OverflowError, OSError, ValueError):
        when = str(exp)
    if result.expires_in > 0:
        return f"exp: {when} (in {int(result.expires_in)}s)"
    return f"exp: {when} ({int(-result.expires_in)}s ago)"


def print_inspection(result: TokenInspection) -> None:
    """Human-readable summary of an inspection."""
    print(f"Status: {result.status.value}")
    print(f"Reason: {result.reason}")
    if result.claims is not None:
        print(f"  {_format_expiry(result)}")
    if result.header is not None:
        print(f"  header: {json.dumps(result.header, sort_keys=True)}")
    if result.claims is not None:
        print(f"  claims: {json.dumps(result.claims, sort_keys=True)}")


def run_inspect(token: str, now: int | None, config: InspectorConfig, as_json: bool) -> None:
    result = inspect_token(token, now=now, config=config)
    logger.debug("Inspected token: %s", result.status.value)
    if as_json:
        print(result.model_dump_json(indent=2))
    else:
        print_inspection(result)


def run_check(token: str, now: int | None, config: InspectorConfig) -> int:
    """Print the token status and return the process exit code."""
    result = inspect_token(token, now=now, config=config)
    print(result.status.value)
    return 0 if result.is_valid else 1


def main() -> None:
    """CLI entry point."""
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="tokenwatch",
        description="Inspect bearer tokens for structure and expiry (no signature check)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--config", default=None,
        help="YAML config path (default: env TOKENWATCH_CONFIG or TOKENWATCH_* vars)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # inspect subcommand
    inspect_parser = subparsers.add_parser(
        "inspect", help="Decode a token and report its status"
    )
    inspect_parser.add_argument("token", help="Token string, or - to read from stdin")
    inspect_parser.add_argument(
        "--json", action="store_true", dest="as_json", help="Print the result as JSON"
    )
    inspect_parser.add_argument(
        "--at", type=int, default=None, metavar="EPOCH",
        help="Evaluate at this epoch second instead of now",
    )

    # check subcommand
    check_parser = subparsers.add_parser(
        "check", help="Exit 0 if the token is valid, 1 otherwise"
    )
    check_parser.add_argument("token", help="Token string, or - to read from stdin")
    check_parser.add_argument(
        "--at", type=int, default=None, metavar="EPOCH",
        help="Evaluate at this epoch second instead of now",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    config = _load_config_or_exit(args.config)
    token = _read_token(args.token)

    if args.command == "inspect":
        run_inspect(token, args.at, config, args.as_json)
    elif args.command == "check":
        sys.exit(run_check(token, args.at, config))
