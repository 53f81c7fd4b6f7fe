import argparse
import logging
import os
import sys
from datetime import datetime, timedelta
from typing import List, Optional, Tuple
from urllib.parse import urlparse

from dotenv import load_dotenv

from slog.content import ContentProfile
from slog.errors import SlogError
from slog.logger_config import setup_logger
from slog.read import display_log
from slog.session import SlogSession

DEFAULT_START = "2020-01-01T00:00:00+00:00"

_WINDOW_UNITS = {
    "d": timedelta(days=1),
    "h": timedelta(hours=1),
    "m": timedelta(minutes=1),
    "s": timedelta(seconds=1),
}


def parse_time_window(text: str) -> timedelta:
    """Parse a window such as '90s', '25m', '36h' or '7d'."""
    unit = _WINDOW_UNITS.get(text[-1:])
    count = text[:-1]
    if unit is None or not count.isdigit():
        raise ValueError(f"Cannot parse time window length: {text!r}")
    return unit * int(count)


def parse_start_time(text: str) -> datetime:
    start = datetime.fromisoformat(text)
    if start.tzinfo is None:
        raise ValueError(f"Start time needs a time zone offset: {text!r}")
    return start


def parse_bucket_arg(bucket: str, path: str) -> Tuple[str, str]:
    """Accept either a bare bucket name or an s3://bucket/folder URL."""
    parsed = urlparse(bucket)
    if parsed.scheme == "":
        return bucket, path
    if parsed.scheme != "s3":
        raise ValueError("Bucket must be a bucket name or an s3:// URL")
    folder = parsed.path.lstrip('/').rstrip('/')
    return parsed.netloc, folder or path


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="slog",
        description="The slog utility manages web access logs stored in S3",
    )
    commands = parser.add_subparsers(dest="command", required=True)
    read = commands.add_parser("read", help="Display S3 hosted web logs for a given time window")
    read.add_argument("bucket", nargs="?", default=os.getenv("SLOG_BUCKET"),
                      help="Log bucket name or s3://bucket/path URL")
    read.add_argument("--path", default=os.getenv("SLOG_PATH", "root"),
                      help="The path of the log data within the S3 bucket")
    read.add_argument("--start", default=DEFAULT_START,
                      help="Start date time in 2020-01-02T15:04:05+07:00 form with time zone offset")
    read.add_argument("--window", default="1h",
                      help="Time window in days (d), hours (h), minutes (m) or seconds (s), e.g. '90s' or '36h'")
    read.add_argument("--content", default=ContentProfile.BASIC.value,
                      help="Content to display: " + ", ".join(p.value for p in ContentProfile))
    read.add_argument("--bucket", dest="source_buckets", action="append", default=[],
                      help="Only display requests served from this bucket (repeatable, ignored for raw)")
    read.add_argument("--region", default=os.getenv("SLOG_REGION", "us-east-1"),
                      help="the aws region to target")
    read.add_argument("--verbose", "-v", action="store_true", help="log debug detail to stderr")
    return parser.parse_args(argv)


def build_session(args: argparse.Namespace) -> SlogSession:
    if not args.bucket:
        raise ValueError("An S3 bucket name must be provided")
    try:
        start = parse_start_time(args.start)
    except ValueError as e:
        raise ValueError(f"Invalid start date time: {e}") from e
    try:
        window = parse_time_window(args.window)
    except ValueError as e:
        raise ValueError(f"Invalid time window: {e}") from e

    log_bucket, folder = parse_bucket_arg(args.bucket, args.path)
    return SlogSession(
        region=args.region,
        log_bucket=log_bucket,
        folder=folder,
        start=start,
        end=start + window,
        content=ContentProfile.parse(args.content),
        source_buckets=args.source_buckets,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logger("slog", level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        session = build_session(args)
        display_log(session)
    except (SlogError, ValueError) as e:
        print(e, file=sys.stderr)
        return 1
    return 0
