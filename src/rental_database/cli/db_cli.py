"""
Command-line interface for database bootstrap operations.

```
rental-database init   # connect, create collections/indexes, sync languages
rental-database ping   # connect and run a health check
```

Both commands exit with status 0 on success and 1 on failure.
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from rental_database.database import DatabaseManager
from rental_database.main import bootstrap
from rental_database.managers.logging_manager import get_logger

logger = get_logger(prefix="[DatabaseCLI]")


class DatabaseCLI:
    """CLI tool for database bootstrap operations."""

    def __init__(self, db_manager: Optional[DatabaseManager] = None):
        self.db_manager = db_manager or DatabaseManager()

    async def init(self) -> bool:
        """
        Connect, initialize and close.

        Returns:
            True if the database is fully initialized, False otherwise
        """
        try:
            return await bootstrap(self.db_manager)
        finally:
            await self.db_manager.disconnect()

    async def ping(self) -> bool:
        """
        Connect and check that the server answers.

        Returns:
            True if the database is reachable, False otherwise
        """
        if not await self.db_manager.connect():
            return False
        try:
            healthy = await self.db_manager.health_check()
            if healthy:
                logger.info("✅ Database is reachable")
            else:
                logger.error("❌ Database did not answer the health check")
            return healthy
        finally:
            await self.db_manager.disconnect()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rental-database",
        description="Rental marketplace database bootstrap",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("init", help="Create collections and indexes, synchronize multilingual data")
    subparsers.add_parser("ping", help="Check that the database is reachable")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    cli = DatabaseCLI()

    if args.command == "init":
        success = asyncio.run(cli.init())
    else:
        success = asyncio.run(cli.ping())

    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
