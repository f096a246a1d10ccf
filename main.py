#!/usr/bin/env python3
"""Card Identity Sync CLI.

This module provides a command-line interface that bulk-assigns card-number
identities to user accounts of a cloud print-management tenant, driven by a
CSV file with the columns ``login`` and ``tid``.

Architecture:
    - CsvInputLoader reads and checks the CSV before anything else happens
    - ApiAuthProvider obtains one Session (interactive or client credentials)
    - AssignIdentitiesUseCase validates and submits rows one at a time
    - TableReportWriter renders the outcome for the chosen reporting detail

Commands:
    notify-identities       Basic run: per-row errors go to stderr
    notify-identities-log   Extended run: results table written to a log
                            file, summary printed to stdout

Exit Codes:
    0: The batch ran to completion (individual rows may still have failed)
    1: Fatal precondition failure (missing module, input file, schema,
       configuration or authentication)

Environment Variables (used when the matching flag is absent):
    CARDSYNC_UFO_URL, CARDSYNC_DOMAIN, CARDSYNC_CLIENT_ID,
    CARDSYNC_CLIENT_SECRET, CARDSYNC_IDENTITY_TYPE, CARDSYNC_LOG_FILE,
    CARDSYNC_REQUEST_TIMEOUT

Example Usage:
    $ python main.py notify-identities --path users.csv \\
          --ufo-url https://acme.printcloud.example --domain acme.com --interactive
    $ python main.py notify-identities-log --path users.csv \\
          --ufo-url https://acme.printcloud.example --domain acme.com \\
          --client-id worker --client-secret "$SECRET" --log-file run.log
    $ python main.py notify-identities-log --path users.csv --domain acme.com --validate-only
"""
import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

_IMPORT_ERROR: Optional[ImportError] = None

try:
    from dotenv import load_dotenv

    from src.cardsync.api import FATAL_ERRORS, IdentityManager, PrintClient
    from src.cardsync.config import RunConfig
    from src.cardsync.identities.adapters import (
        ApiAuthProvider,
        ApiIdentityAssigner,
        CsvInputLoader,
        TableReportWriter,
    )
    from src.cardsync.identities.domain import (
        BatchResult,
        IAuthProvider,
        IInputLoader,
        InputRow,
        IResultReporter,
        ReportingDetail,
    )
    from src.cardsync.identities.use_cases import AssignIdentitiesUseCase
except ImportError as e:
    _IMPORT_ERROR = e

logger = logging.getLogger("cardsync")


def print_progress(index: int, total: int, row: "InputRow") -> None:
    print(f"[Notify] ({index}/{total}) Processing {row.login}")


async def run_notify(
    config: "RunConfig",
    loader: Optional["IInputLoader"] = None,
    auth_provider: Optional["IAuthProvider"] = None,
    reporter: Optional["IResultReporter"] = None,
) -> "BatchResult":
    """Run the whole pipeline for one configuration.

    Args:
        config: Validated run configuration
        loader: Input loader (defaults to CsvInputLoader)
        auth_provider: Session provider (defaults to ApiAuthProvider)
        reporter: Result reporter (defaults to TableReportWriter)

    Returns:
        BatchResult with one result per input row

    Raises:
        InputError: If the CSV is missing or has the wrong columns
        AuthenticationError: If no session can be established
    """
    loader = loader or CsvInputLoader(strict_column_order=config.strict_columns)
    auth_provider = auth_provider or ApiAuthProvider()
    reporter = reporter or TableReportWriter(config.reporting, config.log_file)

    rows = loader.load(config.path)
    print(f"[Notify] Loaded {len(rows)} rows from {config.path}")

    if config.validate_only:
        use_case = AssignIdentitiesUseCase(identity_assigner=None, progress=print_progress)
        batch = await use_case.execute(
            None,
            rows,
            config.domain,
            config.identity_type,
            dry_run=True,
        )
    else:
        session = await auth_provider.establish(config.auth.mode, config.auth)
        print(f"[Notify] Authenticated to {session.tenant_url}")

        async with PrintClient(request_timeout=config.request_timeout) as client:
            assigner = ApiIdentityAssigner(IdentityManager(client))
            use_case = AssignIdentitiesUseCase(assigner, progress=print_progress)
            batch = await use_case.execute(
                session,
                rows,
                config.domain,
                config.identity_type,
            )

    reporter.report(batch)
    return batch


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    input_group = parser.add_argument_group("Input")
    input_group.add_argument(
        "--path",
        required=True,
        metavar="FILE",
        help="CSV file with the columns login and tid",
    )
    input_group.add_argument(
        "--strict-columns",
        action="store_true",
        help="Require the header to be exactly 'login,tid' in that order",
    )
    input_group.add_argument(
        "--validate-only",
        action="store_true",
        help="Validate the file without logging in or calling the API",
    )

    tenant_group = parser.add_argument_group("Tenant")
    tenant_group.add_argument(
        "--ufo-url",
        metavar="URL",
        help="Tenant endpoint used for authentication (env: CARDSYNC_UFO_URL)",
    )
    tenant_group.add_argument(
        "--domain",
        help="Email domain appended to each login (env: CARDSYNC_DOMAIN)",
    )

    auth_group = parser.add_argument_group("Authentication")
    mode = auth_group.add_mutually_exclusive_group()
    mode.add_argument(
        "--interactive",
        action="store_true",
        help="Log in interactively in a browser",
    )
    mode.add_argument(
        "--client-id",
        help="OAuth2 client ID (env: CARDSYNC_CLIENT_ID)",
    )
    auth_group.add_argument(
        "--client-secret",
        help="OAuth2 client secret (env: CARDSYNC_CLIENT_SECRET)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Bulk-assign card-number identities to print-management users",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py notify-identities --path users.csv --ufo-url URL --domain acme.com --interactive
  python main.py notify-identities-log --path users.csv --ufo-url URL --domain acme.com \\
      --client-id ID --client-secret SECRET --log-file results.log
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    basic = subparsers.add_parser(
        "notify-identities",
        help="assign identities, print per-row errors to stderr",
    )
    _add_common_arguments(basic)
    basic.set_defaults(reporting=ReportingDetail.BASIC_ERRORS_ONLY.value)

    extended = subparsers.add_parser(
        "notify-identities-log",
        help="assign identities, write a results log and print a summary",
    )
    _add_common_arguments(extended)
    output_group = extended.add_argument_group("Output")
    output_group.add_argument(
        "--identity-type",
        help="Identity kind to assign (default: CardNumber)",
    )
    output_group.add_argument(
        "--log-file",
        metavar="FILE",
        help="Destination of the per-row results table (default: results.log)",
    )
    extended.set_defaults(reporting=ReportingDetail.FULL_RESULTS_LOG.value)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Parse arguments, run the pipeline and return the process exit code."""
    if _IMPORT_ERROR is not None:
        print(
            f"[Notify] ERROR: Required module unavailable: {_IMPORT_ERROR}. "
            "Run: pip install -e .",
            file=sys.stderr,
        )
        return 1

    load_dotenv()
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )
    logging.getLogger("aiohttp").setLevel(logging.WARNING)

    start_time = datetime.now(timezone.utc)
    print(f"[Notify] Starting {args.command} at {start_time.isoformat()}")

    try:
        config = RunConfig.from_args(args)
        config.validate()
        logger.debug(f"Config: {config!r}")
        asyncio.run(run_notify(config))
    except FATAL_ERRORS as e:
        logger.debug(f"Fatal error: {e.to_dict()}")
        print(f"[Notify] ERROR: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n[Notify] Cancelled by user", file=sys.stderr)
        return 1

    duration = (datetime.now(timezone.utc) - start_time).total_seconds()
    print(f"[Notify] Completed in {duration:.1f} seconds")
    return 0


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
