"""Run one process builder from the command line and print the result as JSON."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Any

from app.core.database import close_db
from app.core.exceptions import ProcessBuilderNotFoundError, ValidationError
from app.core.logging import setup_logging
from app.process_builders.core.types import ProcessBuilderOptions
from app.process_builders.registry import list_process_builders, run_process_builder

logger = logging.getLogger(__name__)

EXIT_CODES = {"success": 0, "partial": 1, "error": 2}


def parse_rule(raw: str) -> tuple[str, Any]:
    """Split `key=value`; the value is JSON when it parses, else a plain string."""
    key, separator, value = raw.partition("=")
    if not separator or not key.strip():
        raise argparse.ArgumentTypeError(f"Rule must look like key=value: {raw!r}")
    try:
        parsed: Any = json.loads(value)
    except json.JSONDecodeError:
        parsed = value
    return key.strip(), parsed


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "process_id",
        choices=[metadata.id for metadata in list_process_builders()],
        help="Process builder to run.",
    )
    parser.add_argument("--goal", required=True, help="Goal text for the run.")
    parser.add_argument(
        "--rule",
        action="append",
        type=parse_rule,
        default=[],
        metavar="KEY=VALUE",
        help="Rule value; JSON values are decoded. Repeat for multiple rules.",
    )
    parser.add_argument(
        "--allow-partial",
        action="store_true",
        help="Keep running after a failed task.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Run every task but skip database writes.",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    setup_logging(debug=args.debug)
    options = ProcessBuilderOptions(
        allow_partial_results=args.allow_partial,
        dry_run=args.dry_run,
    )
    try:
        result = await run_process_builder(
            args.process_id,
            {"text": args.goal},
            dict(args.rule),
            options,
        )
    except (ValidationError, ProcessBuilderNotFoundError) as exc:
        print(json.dumps({"status": "error", "error": exc.message}, indent=2))
        return EXIT_CODES["error"]
    finally:
        await close_db()

    print(json.dumps(result.to_dict(), indent=2, default=str))
    return EXIT_CODES[result.status]


def main(argv: list[str] | None = None) -> int:
    """Run the CLI."""
    args = parse_args(argv)
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
