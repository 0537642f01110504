"""
Command-line entrypoint for the reference checker.

Discovers markup files, extracts their references, checks them with a
single shared ReferenceChecker and prints a report.

Exit status:
    0  every reference is valid or skipped
    1  at least one reference is broken
    2  invalid arguments, or files that cannot be found or read

stdout carries the report only. Logging goes to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from refcheck.app.config import CheckerConfig
from refcheck.app.checks.remote import build_http_client
from refcheck.app.coordinator.checker import ReferenceChecker
from refcheck.app.driver.arguments import parse_arguments
from refcheck.app.driver.discovery import DiscoveryError, find_markup_files
from refcheck.app.driver.extraction import extract_references
from refcheck.app.driver.report import FileReport, render_report
from refcheck.app.results import MemoryQueueResultStream

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_BROKEN_REFERENCES = 1
EXIT_USAGE_ERROR = 2


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ---------------------------------------------------------------------------
# Checking
# ---------------------------------------------------------------------------

async def check_file(
    checker: ReferenceChecker,
    path: Path,
    text: str,
) -> FileReport:
    """
    Check every reference of one document.

    The consumer drains the stream while the batch is still running.
    """
    references = extract_references(text)

    stream = MemoryQueueResultStream()
    producer = asyncio.create_task(
        checker.check_many(references, str(path), stream)
    )
    results = await stream.drain()
    await producer

    return FileReport(path=str(path), results=results)


async def run(args: argparse.Namespace) -> int:
    config = CheckerConfig.from_arguments(args)

    try:
        files = find_markup_files(args.filenames, args.recursive)
    except DiscoveryError as exc:
        logger.error("%s", exc)
        return EXIT_USAGE_ERROR

    try:
        documents = [(path, path.read_text(encoding="utf-8")) for path in files]
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("cannot read document: %s", exc)
        return EXIT_USAGE_ERROR

    async with build_http_client(config) as client:
        checker = ReferenceChecker(config, client=client)
        reports: List[FileReport] = await asyncio.gather(
            *(check_file(checker, path, text) for path, text in documents)
        )

    print(render_report(reports, verbose=args.verbose))

    if any(report.has_failures for report in reports):
        return EXIT_BROKEN_REFERENCES
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_arguments(argv)
    configure_logging(args.verbose)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
