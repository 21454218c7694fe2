"""Entry point: ``python -m jobgenie "senior python developer in Austin"``."""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

from jobgenie.pipeline import build_default_pipeline
from jobgenie.schemas.search_outcome import SearchOutcome
from jobgenie.services.credit_ledger import InMemoryCreditLedger
from jobgenie.utils.logger import get_logger

logger = get_logger("jobgenie")

EXIT_CODES = {"ok": 0, "no_results": 0, "invalid_input": 2, "insufficient_credits": 3, "failed": 1}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jobgenie",
        description="JobGenie - find fresh job postings that match a search prompt or resume",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m jobgenie "senior python developer in Austin, TX"
  python -m jobgenie --resume resume.txt --days 7
""",
    )
    parser.add_argument("search_text", nargs="?", default="", help="Free-text job search prompt")
    parser.add_argument("--resume", type=Path, default=None, help="Plain-text resume to search from")
    parser.add_argument("--user", default="local", help="User id charged for the search (default: local)")
    parser.add_argument("--credits", type=int, default=1, help="Credits granted to the user (default: 1)")
    parser.add_argument("--days", type=int, default=None, help="Maximum posting age in days")
    return parser


def _read_resume(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8", errors="ignore")
    except OSError as e:
        raise SystemExit(f"Cannot read resume {path}: {e}") from e


async def _async_main(args: argparse.Namespace) -> SearchOutcome:
    ledger = InMemoryCreditLedger()
    if args.credits > 0:
        ledger.grant(args.user, args.credits)
    pipeline = build_default_pipeline(credit_ledger=ledger)

    is_resume = args.resume is not None
    text = _read_resume(args.resume) if is_resume else args.search_text
    return await pipeline.run(text, args.user, is_resume=is_resume, max_age_days=args.days)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        outcome = asyncio.run(_async_main(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
        return 130
    print(json.dumps(outcome.model_dump(mode="json"), indent=2, ensure_ascii=False))
    return EXIT_CODES.get(outcome.status, 1)


if __name__ == "__main__":
    sys.exit(main())
