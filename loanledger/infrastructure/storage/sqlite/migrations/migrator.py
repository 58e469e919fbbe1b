"""
Versioned schema migrations for the ledger database.

Migration files live next to this module and are named ``vNNN_name.sql``.
Each applied file is recorded in ``schema_migrations`` together with a short
checksum; a recorded migration whose file has since changed stops the run
rather than being applied again.

Run from the command line::

    python -m loanledger.infrastructure.storage.sqlite.migrations.migrator --status
"""

import asyncio
import hashlib
import re
import shutil
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite

from loanledger.config import get_logger, get_settings

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

REQUIRED_TABLES = ["materials", "movements", "schema_migrations", "users"]

_FILENAME = re.compile(r"v(\d+)_(.+)\.sql")

_CREATE_TRACKING_TABLE = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    version TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    checksum TEXT NOT NULL,
    execution_time_ms INTEGER NOT NULL DEFAULT 0,
    applied_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
)
"""


@dataclass(frozen=True)
class MigrationInfo:
    """One migration file on disk."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = _FILENAME.fullmatch(path.name)
        if match is None:
            raise ValueError(f"Invalid migration filename: {path.name}")
        sql = path.read_text(encoding="utf-8")
        return cls(
            version=match.group(1),
            name=match.group(2),
            path=path,
            checksum=hashlib.sha256(sql.encode("utf-8")).hexdigest()[:16],
        )


@dataclass
class MigrationResult:
    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def _check(name: str, passed: bool, **detail: Any) -> dict[str, Any]:
    return {"check": name, "status": "PASS" if passed else "FAIL", **detail}


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Map of applied version to recorded checksum; empty before the first run."""
    try:
        cursor = await conn.execute(
            "SELECT version, checksum FROM schema_migrations ORDER BY version"
        )
    except aiosqlite.OperationalError:
        return {}
    return {version: checksum for version, checksum in await cursor.fetchall()}


async def get_current_version(conn: aiosqlite.Connection) -> str | None:
    applied = await get_applied_migrations(conn)
    return max(applied) if applied else None


def discover_migrations(directory: Path = MIGRATIONS_DIR) -> list[MigrationInfo]:
    """Migration files in ``directory`` ordered by version; misnamed files are skipped."""
    found = []
    for path in directory.glob("v*.sql"):
        try:
            found.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return sorted(found, key=lambda m: int(m.version))


def plan_migrations(
    applied: dict[str, str], available: list[MigrationInfo]
) -> list[MigrationInfo]:
    """
    Pick the migrations still to run.

    Planning stops at the first migration whose file no longer matches the
    recorded checksum; nothing after it is applied.
    """
    pending = []
    for migration in available:
        recorded = applied.get(migration.version)
        if recorded is None:
            pending.append(migration)
        elif recorded != migration.checksum:
            logger.error(
                "migration_checksum_mismatch",
                version=migration.version,
                recorded=recorded,
                on_disk=migration.checksum,
            )
            break
    return pending


async def apply_migration(
    conn: aiosqlite.Connection, migration: MigrationInfo
) -> MigrationResult:
    """Run one migration script and record it. SQL errors are reported, not raised."""
    log = logger.bind(version=migration.version, name=migration.name)
    log.info("applying_migration")
    started = time.perf_counter()

    try:
        await conn.executescript(migration.path.read_text(encoding="utf-8"))
        await conn.execute(
            "INSERT OR REPLACE INTO schema_migrations "
            "(version, name, checksum, execution_time_ms) VALUES (?, ?, ?, ?)",
            (migration.version, migration.name, migration.checksum, _elapsed_ms(started)),
        )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        log.error("migration_failed", error=str(e))
        return MigrationResult(
            version=migration.version,
            name=migration.name,
            success=False,
            execution_time_ms=_elapsed_ms(started),
            error=str(e),
        )

    elapsed = _elapsed_ms(started)
    log.info("migration_applied", execution_time_ms=elapsed)
    return MigrationResult(
        version=migration.version,
        name=migration.name,
        success=True,
        execution_time_ms=elapsed,
    )


async def _post_migration_problems(
    conn: aiosqlite.Connection, migration: MigrationInfo
) -> list[str]:
    problems = []
    if migration.version not in await get_applied_migrations(conn):
        problems.append(f"v{migration.version} missing from schema_migrations")
    cursor = await conn.execute("PRAGMA foreign_key_check")
    violations = await cursor.fetchall()
    if violations:
        problems.append(f"{len(violations)} foreign key violations")
    return problems


def create_backup(db_path: Path) -> Path:
    """Copy the database file aside before migrating it."""
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_path = db_path.with_suffix(f".backup_{stamp}.db")
    shutil.copy2(db_path, backup_path)
    logger.info("database_backup_created", backup_path=str(backup_path))
    return backup_path


def restore_backup(db_path: Path, backup_path: Path) -> None:
    shutil.copy2(backup_path, db_path)
    logger.warning("database_restored_from_backup", backup_path=str(backup_path))


@contextmanager
def _backup_guard(db_path: Path, enabled: bool) -> Iterator[Path | None]:
    """Restore the database from a fresh backup if the block raises."""
    backup_path = create_backup(db_path) if enabled and db_path.exists() else None
    try:
        yield backup_path
    except Exception:
        if backup_path is not None and backup_path.exists():
            restore_backup(db_path, backup_path)
        raise


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
    migrations_dir: Path = MIGRATIONS_DIR,
) -> list[MigrationResult]:
    """
    Bring the database at ``db_path`` up to the newest schema.

    Args:
        db_path: Database file; defaults to the configured storage path.
        create_backup_before: Copy an existing file aside first. The copy is
            removed when every migration succeeds and kept otherwise.
        migrations_dir: Directory holding the ``vNNN_*.sql`` files.

    Returns:
        One result per migration attempted, in order. A failed migration is
        the last entry.
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("initializing_database", db_path=str(db_path))

    results: list[MigrationResult] = []
    with _backup_guard(db_path, create_backup_before) as backup_path:
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA foreign_keys=ON")
            await conn.execute(_CREATE_TRACKING_TABLE)
            await conn.commit()

            available = discover_migrations(migrations_dir)
            if not available:
                logger.warning("no_migrations_found", directory=str(migrations_dir))
            pending = plan_migrations(await get_applied_migrations(conn), available)

            for migration in pending:
                result = await apply_migration(conn, migration)
                results.append(result)
                if not result.success:
                    break
                problems = await _post_migration_problems(conn, migration)
                if problems:
                    logger.error(
                        "post_migration_check_failed",
                        version=migration.version,
                        problems=problems,
                    )
                    break

    if backup_path is not None:
        if all(r.success for r in results):
            backup_path.unlink()
        else:
            logger.warning("backup_kept", backup_path=str(backup_path))

    logger.info("database_ready", applied=[r.version for r in results if r.success])
    return results


run_migrations = initialize_database


async def get_migration_status(
    db_path: Path | None = None,
    migrations_dir: Path = MIGRATIONS_DIR,
) -> dict[str, Any]:
    """Applied and pending versions for the database at ``db_path``."""
    db_path = db_path or get_settings().storage.db_path
    if not db_path.exists():
        return {
            "exists": False,
            "current_version": None,
            "applied_migrations": [],
            "pending_migrations": [],
        }

    async with aiosqlite.connect(db_path) as conn:
        applied = await get_applied_migrations(conn)
    available = discover_migrations(migrations_dir)
    return {
        "exists": True,
        "current_version": max(applied) if applied else None,
        "applied_migrations": sorted(applied),
        "pending_migrations": [m.version for m in available if m.version not in applied],
        "total_migrations": len(available),
    }


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict[str, Any]]:
    """
    Structural checks on an existing database.

    Covers foreign keys, SQLite's own integrity check, the presence of the
    ledger tables and that no material has a negative shelf count.
    """
    db_path = db_path or get_settings().storage.db_path
    checks = []

    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("PRAGMA foreign_key_check")
        violations = len(await cursor.fetchall())
        checks.append(_check("foreign_keys", violations == 0, violations=violations))

        cursor = await conn.execute("PRAGMA integrity_check")
        (verdict,) = await cursor.fetchone()
        checks.append(_check("integrity", verdict == "ok", result=verdict))

        cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        tables = {name for (name,) in await cursor.fetchall()}
        missing = [t for t in REQUIRED_TABLES if t not in tables]
        checks.append(_check("required_tables", not missing, missing=missing))

        if "materials" in tables:
            cursor = await conn.execute("SELECT COUNT(*) FROM materials WHERE quantity < 0")
            (negative,) = await cursor.fetchone()
            checks.append(_check("non_negative_quantity", negative == 0, violations=negative))

    return checks


def main() -> None:
    """Command line entry point (``loanledger-migrate``)."""
    import argparse

    parser = argparse.ArgumentParser(description="Migrate the loan ledger database")
    parser.add_argument("--db-path", type=Path, help="database file (default from settings)")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--status", action="store_true", help="show applied and pending versions")
    mode.add_argument("--verify", action="store_true", help="run integrity checks")
    parser.add_argument("--no-backup", action="store_true", help="do not copy the file first")
    args = parser.parse_args()

    async def run() -> int:
        if args.status:
            status = await get_migration_status(args.db_path)
            for key in ("exists", "current_version", "applied_migrations", "pending_migrations"):
                print(f"{key}: {status.get(key)}")
            return 0

        if args.verify:
            checks = await verify_schema_integrity(args.db_path)
            for check in checks:
                extra = {k: v for k, v in check.items() if k not in ("check", "status")}
                print(f"[{check['status']}] {check['check']} {extra}")
            return 0 if all(c["status"] == "PASS" for c in checks) else 1

        results = await initialize_database(args.db_path, create_backup_before=not args.no_backup)
        if not results:
            print("schema up to date")
        for result in results:
            outcome = "ok" if result.success else f"FAILED: {result.error}"
            print(f"v{result.version} {result.name} ({result.execution_time_ms}ms) {outcome}")
        return 0 if all(r.success for r in results) else 1

    raise SystemExit(asyncio.run(run()))


if __name__ == "__main__":
    main()
