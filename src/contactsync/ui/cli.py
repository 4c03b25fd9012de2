# ruff: noqa: T201

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from contactsync.app import clear_contacts_cache, sync_contacts_file
from contactsync.config import ConfigurationError, configure_logging, get_sync_config
from contactsync.domain import phone

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from contactsync.domain.model import ReconciledContact

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile phone contacts with the user directory")
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Logging level name (defaults to CONTACTSYNC_LOG_LEVEL or INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    normalize = subparsers.add_parser("normalize", help="Print canonical phone numbers")
    normalize.add_argument("phones", nargs="+", help="Phone numbers in any format")
    normalize.add_argument(
        "--country-code",
        type=str,
        help="Country code assumed for local numbers (defaults to config)",
    )

    display = subparsers.add_parser("format", help="Format phone numbers for display")
    display.add_argument("phones", nargs="+", help="Phone numbers in any format")
    display.add_argument(
        "--country-code",
        type=str,
        help="Country code assumed for local numbers (defaults to config)",
    )

    sync = subparsers.add_parser(
        "sync", help="Match an exported address book against the directory"
    )
    sync.add_argument(
        "--contacts",
        type=Path,
        required=True,
        help="Path to the exported contacts JSON file",
    )
    sync.add_argument(
        "--force",
        action="store_true",
        help="Ignore the cached snapshot and resync",
    )
    sync.add_argument(
        "--known-only",
        action="store_true",
        help="Only list contacts that are directory users",
    )
    sync.add_argument(
        "--search",
        type=str,
        help="Only list contacts whose name, username or phone contains this text",
    )

    subparsers.add_parser("clear-cache", help="Delete the cached reconciliation snapshot")

    return parser.parse_args(list(argv))


def _country_code(args: argparse.Namespace) -> str:
    if args.country_code:
        code = args.country_code.strip().lstrip("+")
        if not code.isdigit():
            raise ValueError(f"Invalid country code: {args.country_code}")
        return code
    return get_sync_config().default_country_code


def _print_normalized(args: argparse.Namespace) -> int:
    country_code = _country_code(args)
    failures = 0
    for value in args.phones:
        canonical = phone.normalize(value, country_code)
        if not canonical:
            failures += 1
            log.warning("Could not normalize %r", value)
        print(f"{value}\t{canonical}")
    return 1 if failures else 0


def _print_formatted(args: argparse.Namespace) -> int:
    country_code = _country_code(args)
    for value in args.phones:
        print(f"{value}\t{phone.display(value, country_code)}")
    return 0


def _format_contact(contact: ReconciledContact) -> str:
    numbers = ", ".join(phone.display(number) for number in contact.normalized_phones)
    if contact.user is None:
        return f"{contact.name}\t{numbers}"
    status = "online" if contact.is_online else "offline"
    username = contact.user.username or contact.user.user_id
    return f"{contact.name}\t{numbers}\t@{username}\t{status}"


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=parsed_args.log_level)
    except (ValueError, ConfigurationError):
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "normalize":
            exit_code = _print_normalized(parsed_args)
        elif parsed_args.command == "format":
            exit_code = _print_formatted(parsed_args)
        elif parsed_args.command == "sync":
            contacts = asyncio.run(
                sync_contacts_file(
                    parsed_args.contacts,
                    force=parsed_args.force,
                    known_only=parsed_args.known_only,
                    search=parsed_args.search,
                )
            )
            for contact in contacts:
                print(_format_contact(contact))
            exit_code = 0
        elif parsed_args.command == "clear-cache":
            cleared = asyncio.run(clear_contacts_cache())
            exit_code = 0 if cleared else 1
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except (ValueError, ConfigurationError):
        log.exception("Invalid configuration or arguments")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)

    if exit_code:
        sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
