"""Command-line entry point for the card image localizer."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Iterable, Sequence

from .collector import collect_urls, count_references
from .config import DEFAULT_SCAN_FIELDS, LocalizeConfig
from .localizer import run_localize
from .models import CharacterRef, LocalizeResult

logger = logging.getLogger("card_localizer.cli")

LOCALIZE_ALIASES = ("locimg", "li")


def _ensure_command_prefix(argv: Sequence[str], commands: Iterable[str]) -> Sequence[str]:
    if not argv:
        return argv
    first = argv[0]
    if first in commands or first.startswith("-"):
        return argv
    return ("localize", *argv)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--field",
        dest="fields",
        action="append",
        default=None,
        help=(
            "Dot-separated field path to scan; repeat for several "
            f"(default: {', '.join(DEFAULT_SCAN_FIELDS)})"
        ),
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def _add_localize_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("avatar", help="Avatar filename of the character card, e.g. Alice3.png")
    parser.add_argument(
        "--name",
        default=None,
        help="Character name used for the image folder (default: read from the card)",
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="Host application URL (default: $CARD_LOCALIZER_BASE_URL or http://127.0.0.1:8000)",
    )
    parser.add_argument(
        "--csrf-token",
        default=None,
        help="CSRF token sent with API requests (default: $CARD_LOCALIZER_CSRF_TOKEN)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-request timeout in seconds",
    )
    parser.add_argument(
        "--no-proxy",
        action="store_true",
        help="Download images directly instead of through the host's CORS proxy",
    )
    _add_common_arguments(parser)


def _add_scan_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "file",
        help="Character card JSON file to scan, or '-' to read from STDIN",
    )
    _add_common_arguments(parser)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Download the remote images embedded in a character card and point the card at local copies.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    localize_parser = subparsers.add_parser(
        "localize",
        aliases=list(LOCALIZE_ALIASES),
        help="Localize every remote image in a card stored on the host",
    )
    _add_localize_arguments(localize_parser)

    scan_parser = subparsers.add_parser(
        "scan", help="List the image URLs a card JSON file references"
    )
    _add_scan_arguments(scan_parser)

    argv = list(sys.argv[1:] if argv is None else argv)
    argv = list(_ensure_command_prefix(argv, subparsers.choices.keys()))
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def _run_localize(args: argparse.Namespace) -> int:
    config = LocalizeConfig.from_env(
        base_url=args.base_url,
        csrf_token=args.csrf_token,
        request_timeout=args.timeout,
        scan_fields=tuple(args.fields) if args.fields else None,
        use_proxy=False if args.no_proxy else None,
    )
    character = CharacterRef(avatar=args.avatar, name=args.name)
    try:
        result = run_localize(character, config)
    except Exception:  # pylint: disable=broad-except
        logger.exception("Unexpected error localizing %s", args.avatar)
        result = LocalizeResult.FAILURE
    sys.stdout.write(f"{int(result)}\n")
    sys.stdout.flush()
    return 1 if result is LocalizeResult.FAILURE else 0


def _read_record(source: str) -> object:
    if source == "-":
        return json.load(sys.stdin)
    return json.loads(Path(source).read_text(encoding="utf-8"))


def _run_scan(args: argparse.Namespace) -> int:
    try:
        record = _read_record(args.file)
    except (OSError, ValueError) as exc:
        logger.error("Could not read %s: %s", args.file, exc)
        return 1
    if not isinstance(record, dict):
        logger.error("%s does not contain a JSON object", args.file)
        return 1
    fields = tuple(args.fields) if args.fields else DEFAULT_SCAN_FIELDS
    urls = collect_urls(record, fields)
    for url in urls:
        sys.stdout.write(url + "\n")
    sys.stdout.flush()
    logger.info(
        "%d reference(s), %d unique URL(s)",
        count_references(record, fields),
        len(urls),
    )
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.verbose)
    if args.command == "scan":
        return _run_scan(args)
    return _run_localize(args)


if __name__ == "__main__":
    sys.exit(main())
