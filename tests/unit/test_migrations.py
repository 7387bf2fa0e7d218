"""Unit tests for the migration runner."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from migrations.migrate import DEFAULT_MIGRATION_DIR, MigrationRunner


def _mock_postgres(applied=()):
    postgres = MagicMock()
    postgres.connect = AsyncMock()
    postgres.disconnect = AsyncMock()
    postgres.execute_script = AsyncMock()
    postgres.execute = AsyncMock(return_value=[{"filename": name} for name in applied])
    return postgres


class TestMigrationRunner:
    """Test MigrationRunner."""

    @pytest.mark.asyncio
    async def test_applies_pending_files_in_order(self, tmp_path: Path):
        (tmp_path / "002_second.sql").write_text("CREATE TABLE b (id int);")
        (tmp_path / "001_first.sql").write_text("CREATE TABLE a (id int);")
        postgres = _mock_postgres()
        runner = MigrationRunner("postgresql://localhost/schedule", postgres=postgres)

        applied = await runner.run_migrations(tmp_path)

        assert applied == ["001_first.sql", "002_second.sql"]
        scripts = [call.args[0] for call in postgres.execute_script.await_args_list]
        assert scripts[1:] == ["CREATE TABLE a (id int);", "CREATE TABLE b (id int);"]
        postgres.disconnect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_skips_already_applied(self, tmp_path: Path):
        (tmp_path / "001_first.sql").write_text("CREATE TABLE a (id int);")
        (tmp_path / "002_second.sql").write_text("CREATE TABLE b (id int);")
        postgres = _mock_postgres(applied=["001_first.sql"])
        runner = MigrationRunner("postgresql://localhost/schedule", postgres=postgres)

        applied = await runner.run_migrations(tmp_path)

        assert applied == ["002_second.sql"]

    @pytest.mark.asyncio
    async def test_failure_propagates_and_disconnects(self, tmp_path: Path):
        (tmp_path / "001_first.sql").write_text("CREATE TABLE broken (")
        postgres = _mock_postgres()
        postgres.execute_script = AsyncMock(side_effect=[None, RuntimeError("syntax error")])
        runner = MigrationRunner("postgresql://localhost/schedule", postgres=postgres)

        with pytest.raises(RuntimeError):
            await runner.run_migrations(tmp_path)

        postgres.disconnect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_directory(self, tmp_path: Path):
        postgres = _mock_postgres()
        runner = MigrationRunner("postgresql://localhost/schedule", postgres=postgres)

        assert await runner.run_migrations(tmp_path / "nope") == []
        postgres.connect.assert_not_awaited()

    def test_schema_script_defines_projection_tables(self):
        schema = (DEFAULT_MIGRATION_DIR / "001_schedule_schema.sql").read_text()

        for table in ("teams", "owners", "schedule_events"):
            assert f"CREATE TABLE IF NOT EXISTS {table}" in schema
        assert "idx_schedule_events_team_starts_at" in schema
