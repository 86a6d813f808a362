"""Command line access to the LearnWorlds API.

Usage:
    python -m learnworlds authorize-url --state xyz
    python -m learnworlds token --scope read_user_profile
    python -m learnworlds courses --page 1 --per-page 20
    python -m learnworlds enrollments USER_ID

Configuration is read from LEARNWORLDS_* environment variables (.env supported).
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

import httpx

from learnworlds.clients import LearnWorldsClient
from learnworlds.config import LearnWorldsConfig
from learnworlds.exceptions import ApiError, TokenError
from learnworlds.utils import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="learnworlds",
        description="Query the LearnWorlds API",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Log level (default: WARNING)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit logs as JSON lines",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    authorize = subparsers.add_parser("authorize-url", help="Print the authorization URL")
    authorize.add_argument("--scope", default="read_user_profile")
    authorize.add_argument("--state", default=None)

    token = subparsers.add_parser("token", help="Run the client credentials grant")
    token.add_argument("--scope", default=None)

    for name in ("courses", "bundles"):
        listing = subparsers.add_parser(name, help=f"List {name}")
        listing.add_argument("--page", type=int, default=None)
        listing.add_argument("--per-page", type=int, default=None)

    for name, arg in (
        ("course", "course_id"),
        ("bundle", "bundle_id"),
        ("user", "user_id"),
        ("enrollments", "user_id"),
    ):
        single = subparsers.add_parser(name, help=f"Show {name}")
        single.add_argument(arg)

    return parser


async def run_command(
    args: argparse.Namespace,
    config: LearnWorldsConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
):
    """Run a parsed command and return its JSON-serializable result."""
    async with LearnWorldsClient(config, transport=transport) as client:
        if args.command == "authorize-url":
            return client.auth.build_authorization_url(args.scope, args.state)

        if args.command == "token":
            token_response = await client.auth.authenticate_with_client_credentials(args.scope)
            return token_response.raw

        if not client.auth.is_authenticated():
            logger.info("No access token configured, using client_credentials grant")
            await client.auth.authenticate_with_client_credentials()

        if args.command == "courses":
            return await client.get_all_courses(page=args.page, per_page=args.per_page)
        if args.command == "bundles":
            return await client.get_all_bundles(page=args.page, per_page=args.per_page)
        if args.command == "course":
            return await client.get_course(args.course_id)
        if args.command == "bundle":
            return await client.get_bundle(args.bundle_id)
        if args.command == "user":
            return await client.get_user(args.user_id)
        if args.command == "enrollments":
            return await client.get_user_enrollments(args.user_id)

        raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entrypoint."""
    args = build_parser().parse_args(argv)

    setup_logging(level=args.log_level, json_format=args.json_logs)

    try:
        config = LearnWorldsConfig.from_env()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    try:
        result = asyncio.run(run_command(args, config))
    except ApiError as e:
        print(json.dumps(e.to_dict(), default=str), file=sys.stderr)
        return 1
    except (TokenError, httpx.HTTPError) as e:
        print(f"Authentication error: {e}", file=sys.stderr)
        return 1

    if isinstance(result, str):
        print(result)
    else:
        print(json.dumps(result, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
