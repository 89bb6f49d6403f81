"""Command-line interface for periodical-archiver."""

import argparse
import logging
import sys
from http.cookiejar import CookieJar
from pathlib import Path

from periodical_archiver.aggregators import ArchiveWalker
from periodical_archiver.assemblers import (
    ArticleMergeAssembler,
    DocumentAssembler,
    WholeIssueAssembler,
)
from periodical_archiver.clients import Fetcher, LoginError, SessionManager, SizeGuardedFetcher
from periodical_archiver.config import ArchiveSettings, ConfigurationError, load_settings
from periodical_archiver.transformers import PageRenderer, get_merger


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def build_assembler(
    settings: ArchiveSettings, fetcher: Fetcher, cookies: CookieJar
) -> DocumentAssembler:
    """Create the assembler selected by the settings' strategy."""
    if settings.strategy == "issue":
        issue_fetcher: Fetcher | SizeGuardedFetcher = fetcher
        if settings.min_issue_bytes is not None:
            issue_fetcher = SizeGuardedFetcher(
                fetcher,
                min_bytes=settings.min_issue_bytes,
                attempts=settings.size_check_attempts,
                delay=settings.size_check_delay,
            )
        return WholeIssueAssembler(issue_fetcher, settings.site, settings.output_dir)

    return ArticleMergeAssembler(
        fetcher,
        PageRenderer(cookies, timeout=settings.render_timeout),
        get_merger(settings.merger),
        settings.site,
        settings.output_dir,
        prefer_article_pdf=settings.prefer_article_pdf,
    )


def run_archive(args: argparse.Namespace) -> int:
    """Execute the run command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    end_year = args.end_year if args.end_year is not None else args.start_year
    if end_year < args.start_year:
        logger.error(f"End year {end_year} is before start year {args.start_year}")
        return 1

    try:
        settings = load_settings(
            output_dir=args.output,
            session_path=args.session,
            strategy=args.strategy,
            first_issue=args.first_issue,
            last_issue=args.last_issue,
            min_issue_bytes=args.min_size,
            merger=args.merger,
        )
    except ConfigurationError as e:
        logger.error(str(e))
        return 1

    with SessionManager(settings) as sessions:
        try:
            client = sessions.ensure_session(force_login=args.login)
        except LoginError as e:
            logger.error(str(e))
            return 1

        fetcher = Fetcher(
            client,
            retry_attempts=settings.retry_attempts,
            retry_delay=settings.retry_delay,
        )
        with build_assembler(settings, fetcher, client.cookies.jar) as assembler:
            walker = ArchiveWalker(
                fetcher,
                assembler,
                settings.site,
                settings.output_dir,
                first_issue=settings.first_issue,
                last_issue=settings.last_issue,
            )
            summary = walker.walk(args.publication, args.start_year, end_year)

    logger.info(f"Finished {args.publication} {args.start_year}-{end_year}")
    logger.info(f"  Completed: {len(summary.completed)}")
    logger.info(f"  Skipped: {len(summary.skipped)}")
    logger.info(f"  Missing: {len(summary.missing)}")
    if summary.failed:
        logger.warning(f"  Failed: {len(summary.failed)}")
        for key in summary.failed:
            logger.warning(f"    - {key}")

    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        prog="periodical-archiver",
        description="Download a periodical's back catalog from a paywalled archive",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    run_parser = subparsers.add_parser(
        "run",
        help="Download every issue of a publication in a year range",
        description=(
            "Log in (or restore the saved session), then download each issue of the "
            "publication from START_YEAR to END_YEAR. Issues whose PDF already exists "
            "are skipped."
        ),
    )
    run_parser.add_argument("publication", help="Publication short name (e.g., ct, ix)")
    run_parser.add_argument("start_year", type=int, help="First year to download")
    run_parser.add_argument(
        "end_year",
        type=int,
        nargs="?",
        default=None,
        help="Last year to download (default: START_YEAR)",
    )
    run_parser.add_argument(
        "--strategy",
        choices=["articles", "issue"],
        default=None,
        help="Render and merge articles, or download whole-issue PDFs (default: articles)",
    )
    run_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Root directory for downloaded issues (default: current directory)",
    )
    run_parser.add_argument(
        "--session",
        type=Path,
        default=None,
        help="Session cookie file (default: cookiejar.json)",
    )
    run_parser.add_argument(
        "--first-issue",
        type=int,
        default=None,
        help="First issue number to try each year (default: 1)",
    )
    run_parser.add_argument(
        "--last-issue",
        type=int,
        default=None,
        help="Last issue number to try each year (default: 32)",
    )
    run_parser.add_argument(
        "--min-size",
        type=int,
        default=None,
        help=(
            "Refetch whole-issue PDFs smaller than this many bytes; with --strategy "
            "issue the last issue defaults to 10 unless --last-issue is given"
        ),
    )
    run_parser.add_argument(
        "--merger",
        choices=["pymupdf", "ghostscript"],
        default=None,
        help="PDF merge backend (default: pymupdf)",
    )
    run_parser.add_argument(
        "--login",
        action="store_true",
        help="Ignore the saved session and log in again",
    )
    run_parser.set_defaults(func=run_archive)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
