#!/usr/bin/env python3
"""
Database migration runner for the schedule store.

Applies numbered PostgreSQL scripts in name order and records each
applied file so reruns only pick up new scripts.
"""

import asyncio
import os
from pathlib import Path
from typing import List, Dict, Any, Optional
import argparse
import asyncpg
import structlog

from shared.storage.postgres import PostgresClient, PostgresConfig
from shared.utils.logging import setup_logging


DEFAULT_MIGRATION_DIR = Path(__file__).parent / "postgres"

CREATE_LEDGER = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    filename TEXT PRIMARY KEY,
    applied_at TIMESTAMPTZ NOT NULL DEFAULT now()
)
"""


class MigrationRunner:
    """Database migration runner."""

    def __init__(self, dsn: str, postgres: Optional[PostgresClient] = None):
        self.logger = structlog.get_logger("migration-runner")
        self.postgres = postgres or PostgresClient(
            PostgresConfig(dsn=dsn, min_size=1, max_size=2, timeout=60)
        )

    async def run_migrations(self, migration_dir: Path = DEFAULT_MIGRATION_DIR) -> List[str]:
        """Apply pending migrations and return the names of the files applied."""
        migration_path = Path(migration_dir)

        if not migration_path.exists():
            self.logger.error("Migration directory not found", path=str(migration_path))
            return []

        migration_files = sorted(migration_path.glob("*.sql"))
        if not migration_files:
            self.logger.warning("No migration files found", path=str(migration_path))
            return []

        await self.postgres.connect()
        try:
            await self.postgres.execute_script(CREATE_LEDGER)
            applied = {
                row["filename"]
                for row in await self.postgres.execute("SELECT filename FROM schema_migrations")
            }
            pending = [path for path in migration_files if path.name not in applied]

            self.logger.info(
                "Starting migrations",
                pending=len(pending),
                already_applied=len(applied),
            )

            for migration_file in pending:
                await self._run_migration(migration_file)

            self.logger.info("All migrations completed successfully")
            return [path.name for path in pending]
        finally:
            await self.postgres.disconnect()

    async def _run_migration(self, migration_file: Path) -> None:
        """Run a single migration file."""
        self.logger.info("Running migration", file=migration_file.name)

        try:
            migration_sql = migration_file.read_text()
            await self.postgres.execute_script(migration_sql)
            await self.postgres.execute(
                "INSERT INTO schema_migrations (filename) VALUES ($1)",
                migration_file.name,
            )
        except Exception as e:
            self.logger.error(
                "Migration failed",
                file=migration_file.name,
                error=str(e),
                exc_info=True
            )
            raise

        self.logger.info("Migration completed", file=migration_file.name)

    async def check_status(self) -> Dict[str, Any]:
        """Check connectivity and list public tables."""
        status: Dict[str, Any] = {"connected": False, "tables": []}

        try:
            await self.postgres.connect()
            status["connected"] = True

            tables = await self.postgres.execute("""
                SELECT table_name
                FROM information_schema.tables
                WHERE table_schema = 'public'
                ORDER BY table_name
            """)
            status["tables"] = [table["table_name"] for table in tables]
        except (OSError, asyncpg.PostgresError) as e:
            self.logger.error("PostgreSQL status check failed", error=str(e))
        finally:
            await self.postgres.disconnect()

        return status


async def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Schedule store migration runner")
    parser.add_argument("--migration-dir", type=Path, default=DEFAULT_MIGRATION_DIR, help="Migration directory")
    parser.add_argument("--status", action="store_true", help="Check migration status")
    parser.add_argument("--dsn", default=os.getenv("SCHEDULE_POSTGRES_DSN", "postgresql://localhost:5432/schedule"))

    args = parser.parse_args()

    setup_logging("schedule-migrations", format_type="console")

    runner = MigrationRunner(args.dsn)

    if args.status:
        status = await runner.check_status()
        print(f"PostgreSQL: {'Connected' if status['connected'] else 'Disconnected'}")
        print(f"Tables: {', '.join(status['tables']) or '-'}")
        return

    await runner.run_migrations(args.migration_dir)


if __name__ == "__main__":
    asyncio.run(main())
