"""Unit tests for database migrator."""

from pathlib import Path

import aiosqlite
import pytest

from loanledger.infrastructure.storage.sqlite.migrations.migrator import (
    MIGRATIONS_DIR,
    REQUIRED_TABLES,
    MigrationInfo,
    MigrationResult,
    create_backup,
    discover_migrations,
    get_applied_migrations,
    get_current_version,
    get_migration_status,
    initialize_database,
    plan_migrations,
    restore_backup,
    verify_schema_integrity,
)


class TestMigrationInfo:
    """Tests for MigrationInfo dataclass."""

    def test_from_file_parses_filename(self, tmp_path: Path):
        """from_file() parses version and name from filename."""
        migration_file = tmp_path / "v001_initial_schema.sql"
        migration_file.write_text("-- Test migration\nSELECT 1;")

        info = MigrationInfo.from_file(migration_file)

        assert info.version == "001"
        assert info.name == "initial_schema"
        assert info.path == migration_file

    def test_from_file_calculates_checksum(self, tmp_path: Path):
        """Checksum is the first 16 hex chars of SHA-256."""
        migration_file = tmp_path / "v001_test.sql"
        migration_file.write_text("SELECT 1;")

        info = MigrationInfo.from_file(migration_file)

        assert len(info.checksum) == 16

    def test_from_file_invalid_filename_raises(self, tmp_path: Path):
        invalid_file = tmp_path / "invalid_migration.sql"
        invalid_file.write_text("SELECT 1;")

        with pytest.raises(ValueError, match="Invalid migration filename"):
            MigrationInfo.from_file(invalid_file)


class TestMigrationResult:
    def test_failed_result(self):
        result = MigrationResult(
            version="001",
            name="test",
            success=False,
            execution_time_ms=50,
            error="SQL syntax error",
        )

        assert result.success is False
        assert result.error == "SQL syntax error"


class TestVersionTracking:
    """Tests for get_applied_migrations() and get_current_version()."""

    async def test_empty_when_no_table(self, tmp_path: Path):
        async with aiosqlite.connect(tmp_path / "test.db") as conn:
            assert await get_applied_migrations(conn) == {}
            assert await get_current_version(conn) is None

    async def test_returns_latest_version(self, tmp_path: Path):
        async with aiosqlite.connect(tmp_path / "test.db") as conn:
            await conn.execute(
                "CREATE TABLE schema_migrations (version TEXT PRIMARY KEY, checksum TEXT)"
            )
            await conn.executemany(
                "INSERT INTO schema_migrations (version, checksum) VALUES (?, ?)",
                [("001", "abc"), ("002", "def")],
            )
            await conn.commit()

            assert await get_applied_migrations(conn) == {"001": "abc", "002": "def"}
            assert await get_current_version(conn) == "002"


class TestDiscoverMigrations:
    def test_bundled_initial_schema_is_discovered(self):
        versions = [m.version for m in discover_migrations(MIGRATIONS_DIR)]
        assert versions[0] == "001"

    def test_returns_sorted_and_skips_invalid(self, tmp_path: Path):
        (tmp_path / "v002_second.sql").write_text("SELECT 2;")
        (tmp_path / "v001_first.sql").write_text("SELECT 1;")
        (tmp_path / "vX_broken.sql").write_text("SELECT 3;")

        result = discover_migrations(tmp_path)

        assert [m.version for m in result] == ["001", "002"]


class TestPlanMigrations:
    def _migrations(self, tmp_path: Path) -> list[MigrationInfo]:
        (tmp_path / "v001_a.sql").write_text("SELECT 1;")
        (tmp_path / "v002_b.sql").write_text("SELECT 2;")
        (tmp_path / "v003_c.sql").write_text("SELECT 3;")
        return discover_migrations(tmp_path)

    def test_skips_applied(self, tmp_path: Path):
        available = self._migrations(tmp_path)
        applied = {"001": available[0].checksum}

        assert [m.version for m in plan_migrations(applied, available)] == ["002", "003"]

    def test_stops_at_checksum_drift(self, tmp_path: Path):
        available = self._migrations(tmp_path)
        applied = {"001": available[0].checksum, "002": "0000000000000000"}

        assert plan_migrations(applied, available) == []


class TestBackup:
    def test_backup_and_restore(self, tmp_path: Path):
        db_path = tmp_path / "test.db"
        db_path.write_bytes(b"original")

        backup_path = create_backup(db_path)
        assert backup_path.exists()
        assert ".backup_" in backup_path.name

        db_path.write_bytes(b"changed")
        restore_backup(db_path, backup_path)

        assert db_path.read_bytes() == b"original"


class TestInitializeDatabase:
    """Tests for initialize_database()."""

    async def test_creates_schema(self, tmp_path: Path):
        db_path = tmp_path / "subdir" / "nested" / "test.db"

        results = await initialize_database(db_path, create_backup_before=False)

        assert db_path.exists()
        assert [r.version for r in results] == ["001"]
        assert all(r.success for r in results)

        async with aiosqlite.connect(db_path) as conn:
            cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            tables = {row[0] for row in await cursor.fetchall()}
        assert set(REQUIRED_TABLES) <= tables

    async def test_skips_already_applied_migrations(self, tmp_path: Path):
        db_path = tmp_path / "test.db"

        first = await initialize_database(db_path, create_backup_before=False)
        second = await initialize_database(db_path, create_backup_before=False)

        assert len(first) == 1
        assert second == []

    async def test_backup_cleaned_up_on_success(self, tmp_path: Path):
        db_path = tmp_path / "test.db"
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("CREATE TABLE existing (id INTEGER)")
            await conn.commit()

        await initialize_database(db_path, create_backup_before=True)

        assert list(tmp_path.glob("*.backup_*.db")) == []

    async def test_failed_migration_stops_and_reports(self, tmp_path: Path):
        db_path = tmp_path / "test.db"
        migrations_dir = tmp_path / "migrations"
        migrations_dir.mkdir()
        (migrations_dir / "v001_ok.sql").write_text("CREATE TABLE a (id INTEGER);")
        (migrations_dir / "v002_bad.sql").write_text("CREATE TABLE oops (;")
        (migrations_dir / "v003_never.sql").write_text("CREATE TABLE c (id INTEGER);")

        results = await initialize_database(
            db_path, create_backup_before=False, migrations_dir=migrations_dir
        )

        assert [r.success for r in results] == [True, False]
        assert results[1].error

    async def test_checksum_mismatch_blocks_migration(self, tmp_path: Path):
        db_path = tmp_path / "test.db"
        migrations_dir = tmp_path / "migrations"
        migrations_dir.mkdir()
        migration = migrations_dir / "v001_init.sql"
        migration.write_text("CREATE TABLE a (id INTEGER);")
        await initialize_database(db_path, create_backup_before=False, migrations_dir=migrations_dir)

        migration.write_text("CREATE TABLE a (id INTEGER, name TEXT);")
        (migrations_dir / "v002_next.sql").write_text("CREATE TABLE b (id INTEGER);")
        results = await initialize_database(
            db_path, create_backup_before=False, migrations_dir=migrations_dir
        )

        assert results == []


class TestMigrationStatus:
    async def test_not_exists_when_no_database(self, tmp_path: Path):
        status = await get_migration_status(tmp_path / "missing.db")

        assert status["exists"] is False
        assert status["current_version"] is None

    async def test_reports_applied(self, initialized_db: Path):
        status = await get_migration_status(initialized_db)

        assert status["exists"] is True
        assert status["current_version"] == "001"
        assert status["pending_migrations"] == []


class TestVerifySchemaIntegrity:
    async def test_fresh_schema_passes(self, initialized_db: Path):
        checks = await verify_schema_integrity(initialized_db)

        by_name = {c["check"]: c for c in checks}
        assert by_name["foreign_keys"]["status"] == "PASS"
        assert by_name["integrity"]["status"] == "PASS"
        assert by_name["required_tables"]["missing"] == []
        assert by_name["non_negative_quantity"]["status"] == "PASS"

    async def test_reports_missing_tables(self, tmp_path: Path):
        db_path = tmp_path / "empty.db"
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("CREATE TABLE unrelated (id INTEGER)")
            await conn.commit()

        checks = await verify_schema_integrity(db_path)

        tables_check = next(c for c in checks if c["check"] == "required_tables")
        assert tables_check["status"] == "FAIL"
        assert "materials" in tables_check["missing"]
