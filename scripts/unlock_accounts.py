#!/usr/bin/env python3
"""Clear login lockouts.

Usage:
    python scripts/unlock_accounts.py unlock-all
    python scripts/unlock_accounts.py unlock jane@x.com
"""

import argparse
import asyncio
import sys

import logfire

from kycauth.config import Settings
from kycauth.domain.error import NotFoundError
from kycauth.domain.service import LockoutService
from kycauth.util.di.container import create_container
from kycauth.util.logging import get_logger, setup_logging
from kycauth.util.observability import configure_logfire

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Clear login lockouts")
    subcommands = parser.add_subparsers(dest="command", required=True)
    subcommands.add_parser("unlock-all", help="Reset every account's lockout state")
    unlock = subcommands.add_parser("unlock", help="Reset one account by email")
    unlock.add_argument("email")
    return parser


async def run(args: argparse.Namespace) -> int:
    container = create_container()
    try:
        # Lockout service is request-scoped (one session, one transaction)
        async with container() as request_container:
            lockout_service = await request_container.get(LockoutService)
            if args.command == "unlock-all":
                count = await lockout_service.unlock_all()
                logger.info(f"Unlocked {count} accounts")
            else:
                try:
                    await lockout_service.unlock(args.email)
                except NotFoundError:
                    logger.warning(f"User with email {args.email} not found")
                    return 1
                logger.info(f"Account {args.email} has been unlocked")
        return 0
    finally:
        await container.close()


def main() -> int:
    args = build_parser().parse_args()

    settings = Settings()
    configure_logfire(settings)
    setup_logging(settings)

    try:
        return asyncio.run(run(args))
    except Exception as e:
        logfire.error(
            "Unlock failed",
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        raise


if __name__ == "__main__":
    sys.exit(main())
