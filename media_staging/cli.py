"""
Command-Line Interface (CLI) setup for Media Staging.

This module uses Python's `argparse` to define and parse the command-line
arguments that control the application.
"""
import argparse
from pathlib import Path
from typing import List, Optional


def get_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parses command-line arguments for Media Staging.

    Sub-commands:
        stage PATH...  Stage files, or every media file of a directory.
        snap FILE      Stage the raw bytes of a camera photo.
        clean          Delete the staging directory and everything in it.
        where          Print the staging directory path.

    Args:
        argv: Arguments to parse. Defaults to `sys.argv[1:]`.

    Returns:
        argparse.Namespace: The parsed arguments.
    """
    parser = argparse.ArgumentParser(
        prog="media-staging",
        description="Stage photos and videos as JPEG/MP4 files in a temporary directory.",
    )
    parser.add_argument(
        "--documents-dir", type=str, default=None,
        help="Application document root. The staging directory is '<documents-dir>/tmp'.",
    )
    parser.add_argument(
        "--workers", type=int, default=None, help="Number of staging threads to use."
    )
    parser.add_argument(
        "--log-level", type=str, default="INFO", choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set the logging level."
    )
    parser.add_argument(
        "--log-dir", type=str, default=None,
        help="Directory for the error log and the YAML staging log. Disabled when omitted."
    )
    parser.add_argument(
        "--config", type=str, default=None, help="Path of a YAML user config file."
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    stage_parser = subparsers.add_parser("stage", help="Stage media files as JPEG/MP4.")
    stage_parser.add_argument("paths", nargs="+", help="Media files or library directories.")
    stage_parser.add_argument(
        "--no-recursive", action="store_true", help="Do not scan subdirectories of library directories."
    )
    stage_parser.add_argument(
        "--preset", type=str, default="highest_quality",
        choices=["highest_quality", "medium_quality", "low_quality"],
        help="Video export preset."
    )

    snap_parser = subparsers.add_parser("snap", help="Stage the raw bytes of a camera photo.")
    snap_parser.add_argument("photo", help="Encoded JPEG file to copy into the staging directory.")

    subparsers.add_parser("clean", help="Delete the staging directory.")
    subparsers.add_parser("where", help="Print the staging directory path.")

    args = parser.parse_args(argv)

    if args.workers is not None and args.workers < 1:
        parser.error("--workers must be at least 1.")
    if args.documents_dir:
        args.documents_dir = Path(args.documents_dir).expanduser().resolve()
    if args.log_dir:
        args.log_dir = Path(args.log_dir).expanduser().resolve()
    if args.config:
        args.config = Path(args.config).expanduser()

    return args
