"""CLI entrypoint for fetching and parsing UCD files."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys
from typing import Sequence

from dotenv import load_dotenv
import requests

from ucd_cache.cache.fetcher import UcdFetcher
from ucd_cache.config import settings_from_env
from ucd_cache.errors import FetchError, ParseError, VersionInfoError
from ucd_cache.io.json_io import dumps
from ucd_cache.reporting.summary import build_summary
from ucd_cache.ucd.parser import parse_lines

LOGGER = logging.getLogger(__name__)


def _add_cache_arguments(parser: argparse.ArgumentParser) -> None:
    """Attach options shared by the network-backed subcommands."""

    parser.add_argument(
        "--cache-dir",
        type=Path,
        default=None,
        help="Cache root directory (default: $UCD_CACHE_DIR or current directory).",
    )
    parser.add_argument(
        "--prefix",
        default=None,
        help="Upstream URL prefix (default: $UCD_PREFIX or the latest UCD).",
    )
    parser.add_argument(
        "--check-in-ci",
        action="store_true",
        default=None,
        help="Contact the server even when a CI environment is detected.",
    )


def build_arg_parser() -> argparse.ArgumentParser:
    """Construct CLI argument parser.

    Returns:
        Configured parser with ``parse``, ``fetch`` and ``version`` subcommands.
    """

    parser = argparse.ArgumentParser(
        prog="ucd-cache",
        description="Fetch, cache and parse Unicode Character Database files.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_cmd = subparsers.add_parser("parse", help="Parse local UCD files.")
    parse_cmd.add_argument("files", nargs="*", default=["-"], help="Files to parse ('-' = stdin).")
    parse_cmd.add_argument("--json", action="store_true", help="Print the full parse as JSON.")

    fetch_cmd = subparsers.add_parser("fetch", help="Fetch UCD files through the cache.")
    fetch_cmd.add_argument("names", nargs="+", help="Logical names such as Blocks.txt.")
    fetch_cmd.add_argument(
        "--force-parse",
        action="store_true",
        help="Parse cached copies even when the server reports no change.",
    )
    _add_cache_arguments(fetch_cmd)

    version_cmd = subparsers.add_parser("version", help="Show the upstream UCD version.")
    _add_cache_arguments(version_cmd)
    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _build_fetcher(args: argparse.Namespace) -> UcdFetcher:
    settings = settings_from_env(
        cache_dir=args.cache_dir,
        prefix=args.prefix,
        check_in_ci=args.check_in_ci,
    )
    return UcdFetcher.create(settings)


def _run_parse(args: argparse.Namespace) -> int:
    status = 0
    for name in args.files:
        try:
            if name == "-":
                parsed = parse_lines(sys.stdin)
            else:
                with Path(name).open("r", encoding="utf-8") as handle:
                    parsed = parse_lines(handle)
        except ParseError as exc:
            print(f"{name}: {exc.format()}")
            status = 1
            continue

        if args.json:
            print(dumps(parsed))
        else:
            print(build_summary(parsed, label=name))
    return status


def _run_fetch(args: argparse.Namespace) -> int:
    with _build_fetcher(args) as fetcher:
        for name in args.names:
            info = fetcher.parse(name, force=args.force_parse)
            print(f"{name}: status={info.status} etag={info.etag} last-modified={info.last_modified}")
            if info.parsed is not None:
                print(build_summary(info.parsed, label=name))
    return 0


def _run_version(args: argparse.Namespace) -> int:
    with _build_fetcher(args) as fetcher:
        version = fetcher.fetch_version()
    print(f"Unicode {version.version} ({version.date.isoformat()})")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI.

    Returns:
        Zero on success, one when any input failed to parse or fetch.
    """

    load_dotenv()
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    commands = {"parse": _run_parse, "fetch": _run_fetch, "version": _run_version}
    try:
        return commands[args.command](args)
    except (FetchError, VersionInfoError, ParseError, requests.RequestException, OSError) as exc:
        LOGGER.error("%s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
