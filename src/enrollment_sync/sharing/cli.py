#!/usr/bin/env python3
"""Command-line interface for sharing a document with paying students.

Usage:
    python -m enrollment_sync.sharing.cli share --document-id FILE_ID --description "Course title"
    python -m enrollment_sync.sharing.cli share --start 2024-01-01 --end 2024-01-31 --format text
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timedelta
from typing import Optional

from pydantic import ValidationError

from ..config import default_window, get_settings
from .models import SharingRequest, SharingStatus
from .service import SharingService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def parse_datetime(dt_string: str) -> datetime:
    """Parse datetime string in various formats.

    Raises:
        ValueError: If the string cannot be parsed.
    """
    formats = [
        "%Y-%m-%dT%H:%M:%S",
        "%Y-%m-%dT%H:%M:%S.%f",
        "%Y-%m-%d %H:%M:%S",
        "%Y-%m-%d",
    ]

    for fmt in formats:
        try:
            return datetime.strptime(dt_string, fmt)
        except ValueError:
            continue

    raise ValueError(
        f"Unable to parse datetime: {dt_string}. "
        f"Expected formats: YYYY-MM-DD or YYYY-MM-DDTHH:MM:SS"
    )


async def run_sharing_async(
    request: SharingRequest,
    output_file: Optional[str] = None,
    output_format: str = "text",
    service: Optional[SharingService] = None,
) -> int:
    """Run a sharing pass and write its report.

    Returns:
        Exit code (0 for success, 2 for a failed pass).
    """
    service = service or SharingService()
    report = await service.run_sharing(request)
    output = service.generate_report(report=report, format=output_format)

    if output_file:
        with open(output_file, 'w') as f:
            f.write(output)
        logger.info(f"Report written to {output_file}")
    else:
        print(output)

    if report.status == SharingStatus.COMPLETED:
        return 0
    logger.error(f"Sharing failed: {report.error_message}")
    return 2


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="enrollment-sync",
        description="Grant document access to students whose payments succeeded.",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    share_parser = subparsers.add_parser(
        "share",
        help="Run a sharing pass for one document",
    )
    share_parser.add_argument(
        "--document-id", "-d",
        help="Document to share (default: SHARING_DOCUMENT_ID)",
    )
    share_parser.add_argument(
        "--description",
        help="Expected payment description (default: SHARING_EXPECTED_DESCRIPTION)",
    )
    share_parser.add_argument(
        "--start", "-s",
        help="Start date/time (YYYY-MM-DD or YYYY-MM-DDTHH:MM:SS)",
    )
    share_parser.add_argument(
        "--end", "-e",
        help="End date/time (YYYY-MM-DD or YYYY-MM-DDTHH:MM:SS)",
    )
    share_parser.add_argument(
        "--provider", "-p",
        help="Payment gateway: liqpay or stripe (default: SHARING_PAYMENT_PROVIDER)",
    )
    share_parser.add_argument(
        "--output", "-o",
        help="Output file path (default: stdout)",
    )
    share_parser.add_argument(
        "--format", "-f",
        choices=["json", "csv", "text"],
        default="text",
        help="Output format (default: text)",
    )

    return parser


def build_request(parsed_args: argparse.Namespace) -> SharingRequest:
    """Merge command-line arguments with environment settings.

    Raises:
        ValueError: If a date is malformed or a required value is missing.
    """
    settings = get_settings()
    start_time, end_time = default_window(settings.lookback_days)

    if parsed_args.end:
        end_time = parse_datetime(parsed_args.end)
        # A bare date covers the whole day
        if "T" not in parsed_args.end and " " not in parsed_args.end:
            end_time = end_time + timedelta(days=1) - timedelta(seconds=1)
    if parsed_args.start:
        start_time = parse_datetime(parsed_args.start)
    if start_time >= end_time:
        raise ValueError("start must be before end")

    document_id = parsed_args.document_id or settings.document_id
    description = parsed_args.description or settings.expected_description
    if not document_id:
        raise ValueError("--document-id or SHARING_DOCUMENT_ID is required")
    if not description:
        raise ValueError("--description or SHARING_EXPECTED_DESCRIPTION is required")

    try:
        return SharingRequest(
            document_id=document_id,
            expected_description=description,
            start_time=start_time,
            end_time=end_time,
            provider=parsed_args.provider or settings.provider,
        )
    except ValidationError as e:
        raise ValueError(str(e)) from e


def main(args: Optional[list] = None) -> int:
    """Main entry point for the CLI.

    Args:
        args: Optional list of command-line arguments (for testing).

    Returns:
        Exit code.
    """
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == "share":
        try:
            request = build_request(parsed_args)
        except ValueError as e:
            logger.error(str(e))
            return 1

        return asyncio.run(run_sharing_async(
            request=request,
            output_file=parsed_args.output,
            output_format=parsed_args.format,
        ))

    return 0


if __name__ == "__main__":
    sys.exit(main())
