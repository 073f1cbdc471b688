"""CLI entrypoint for contact-extractor."""

from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Sequence

import uvicorn

from .api import create_app
from .config import (
    DEFAULT_HOST,
    DEFAULT_MAX_RETRIES,
    DEFAULT_MAX_URLS_PER_JOB,
    DEFAULT_POLITENESS_DELAY,
    DEFAULT_PORT,
    DEFAULT_RETRY_BASE_DELAY,
    DEFAULT_WORKERS,
    ExtractorConfig,
)
from .errors import ConfigError
from .fetchers import StrategyFetcher
from .io_csv import write_rows
from .jobs import InMemoryJobStore
from .logging_utils import configure_logging, get_logger
from .pipeline import run_job
from .validation import cap_url_batch, load_lines_from_file

COMMANDS = ("serve", "extract")


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--max-urls",
        type=int,
        default=DEFAULT_MAX_URLS_PER_JOB,
        help="URLs processed per job; the rest of a batch is skipped.",
    )
    parser.add_argument(
        "--max-retries",
        type=int,
        default=DEFAULT_MAX_RETRIES,
        help="Fetch attempts per URL before giving up.",
    )
    parser.add_argument(
        "--retry-base-delay",
        type=float,
        default=DEFAULT_RETRY_BASE_DELAY,
        help="Base delay in seconds, multiplied by the attempt number.",
    )
    parser.add_argument(
        "--politeness-delay",
        type=float,
        default=DEFAULT_POLITENESS_DELAY,
        help="Pause in seconds between consecutive URLs of a job.",
    )
    parser.add_argument("--progress", action="store_true", help="Show tqdm progress bars.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(
        description="Contact Extractor - pull email addresses from web pages."
    )
    subparsers = parser.add_subparsers(dest="command")

    serve = subparsers.add_parser("serve", help="Run the HTTP API (default).")
    serve.add_argument("--host", help=f"Bind address (or HOST env var, default {DEFAULT_HOST}).")
    serve.add_argument(
        "--port", type=int, help=f"Bind port (or PORT env var, default {DEFAULT_PORT})."
    )
    serve.add_argument(
        "--workers",
        type=int,
        default=DEFAULT_WORKERS,
        help="Jobs allowed to run at the same time.",
    )
    _add_common_arguments(serve)

    extract = subparsers.add_parser("extract", help="Run one batch and write a CSV file.")
    extract.add_argument("--urls-file", required=True, help="Path to URL file (one per line).")
    extract.add_argument("--output", default="contacts.csv", help="Output CSV path.")
    _add_common_arguments(extract)
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse CLI input, defaulting to the serve command."""
    parser = build_parser()
    tokens = list(sys.argv[1:] if argv is None else argv)
    if not tokens or (tokens[0] not in COMMANDS and tokens[0] not in ("-h", "--help")):
        tokens.insert(0, "serve")
    return parser.parse_args(tokens)


def _resolve_port(args: argparse.Namespace) -> int:
    if getattr(args, "port", None) is not None:
        return int(args.port)
    raw = os.getenv("PORT")
    if not raw:
        return DEFAULT_PORT
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"PORT must be an integer, got {raw!r}.") from exc


def namespace_to_config(args: argparse.Namespace) -> ExtractorConfig:
    """Convert CLI args and environment to a validated ExtractorConfig."""
    return ExtractorConfig(
        host=getattr(args, "host", None) or os.getenv("HOST") or DEFAULT_HOST,
        port=_resolve_port(args),
        workers=getattr(args, "workers", DEFAULT_WORKERS),
        max_urls_per_job=args.max_urls,
        max_retries=args.max_retries,
        retry_base_delay=args.retry_base_delay,
        politeness_delay=args.politeness_delay,
        show_progress=args.progress,
    )


def run_batch(urls: list[str], config: ExtractorConfig, output: str) -> int:
    """Extract one batch in-process and write its records; returns the record count."""
    logger = get_logger()
    accepted, limited = cap_url_batch(urls, config.max_urls_per_job)
    if limited:
        logger.warning(limited)
    store = InMemoryJobStore()
    job = store.create(accepted)
    run_job(
        job.id,
        store=store,
        fetcher=StrategyFetcher(logger=logger),
        config=config,
        logger=logger,
    )
    records = store.completed_results(job.id)
    write_rows(output, records)
    return len(records)


def serve(config: ExtractorConfig) -> None:
    """Run the HTTP API until interrupted."""
    logger = get_logger()
    logger.info("Contact extractor listening on http://%s:%d", config.host, config.port)
    uvicorn.run(
        create_app(config, logger=logger),
        host=config.host,
        port=config.port,
        log_config=None,
    )


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entrypoint."""
    args = parse_args(argv)
    configure_logging(args.verbose)
    logger = get_logger()
    try:
        config = namespace_to_config(args)
        urls = load_lines_from_file(args.urls_file) if args.command == "extract" else []
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2
    except OSError as exc:
        logger.error("Cannot read URL file: %s", exc)
        return 2

    if args.command == "extract":
        if not urls:
            logger.error("No URLs found in %s", args.urls_file)
            return 2
        count = run_batch(urls, config, args.output)
        logger.info("Wrote %d contacts to %s", count, args.output)
        return 0

    serve(config)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
