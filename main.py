"""
Command-line availability lookup over a JSON snapshot of the store.

The snapshot holds ``engineers``, ``rules`` and ``sessions`` lists in
the shapes of the schemas under ``src/schemas``.

Usage:
    python main.py --data snapshot.json --date 2025-03-14
    python main.py --data snapshot.json --date 2025-03-14 --start 09:00 --end 12:00
    python main.py --data snapshot.json --date 2025-03-14 --engineer "Dana Ortiz" --detailed
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from src.config import settings
from src.errors import AvailabilityError
from src.logging_context import request_scope
from src.tools.availability import query_availability
from src.tools.store import RuleStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Query resolved engineer availability from a store snapshot."
    )
    parser.add_argument(
        "--data",
        type=str,
        required=True,
        help="Path to a JSON snapshot with engineers, rules and sessions.",
    )
    parser.add_argument("--date", type=str, required=True, help="Target date (YYYY-MM-DD).")
    parser.add_argument("--start", type=str, default=None, help="Window start (HH:MM).")
    parser.add_argument("--end", type=str, default=None, help="Window end (HH:MM).")
    parser.add_argument(
        "--engineer", type=str, default=None, help="Restrict to one engineer by name or id."
    )
    parser.add_argument(
        "--detailed",
        action="store_true",
        help="Print every slot instead of the five-bucket summary.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging output.",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    data_path = Path(args.data)
    if not data_path.exists():
        logger.error("Snapshot file not found: %s", data_path)
        return 1

    with request_scope():
        logger.debug("Loading snapshot %s", data_path)
        try:
            snapshot = json.loads(data_path.read_text(encoding="utf-8"))
            store = RuleStore.from_snapshot(snapshot, settings)
            result = query_availability(
                store,
                args.date,
                start=args.start,
                end=args.end,
                engineer=args.engineer,
                detailed=args.detailed,
            )
        except (AvailabilityError, ValueError) as exc:
            logger.error("%s", exc)
            return 1

    sys.stdout.write(json.dumps(result, indent=2) + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
