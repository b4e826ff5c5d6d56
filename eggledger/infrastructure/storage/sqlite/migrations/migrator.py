"""
Versioned schema migrations for the ledger database.

Migration files live next to this module as ``v<NNN>_<name>.sql`` and are
applied in version order. Applied versions and their checksums are recorded
in ``schema_migrations``. When a database already exists it is copied with
SQLite's online backup first, and restored from that copy if the run fails.
"""

import asyncio
import hashlib
import re
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import aiosqlite

from eggledger.config import get_logger, get_settings

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

_FILENAME = re.compile(r"^v(\d+)_(\w+)\.sql$")


@dataclass(frozen=True)
class MigrationInfo:
    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = _FILENAME.match(path.name)
        if match is None:
            raise ValueError(f"Invalid migration filename: {path.name}")
        digest = hashlib.sha256(path.read_bytes()).hexdigest()
        return cls(version=match.group(1), name=match.group(2), path=path, checksum=digest[:16])

    @property
    def sql(self) -> str:
        return self.path.read_text(encoding="utf-8")


@dataclass
class MigrationResult:
    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


@dataclass
class MigrationStatus:
    exists: bool
    applied: list[str] = field(default_factory=list)
    pending: list[str] = field(default_factory=list)

    @property
    def up_to_date(self) -> bool:
        return self.exists and not self.pending


def discover_migrations(directory: Path = MIGRATIONS_DIR) -> list[MigrationInfo]:
    """Migration files in version order; badly named files are skipped."""
    found = []
    for path in directory.glob("v*.sql"):
        try:
            found.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return sorted(found, key=lambda m: int(m.version))


async def _applied_checksums(conn: aiosqlite.Connection) -> dict[str, str]:
    cursor = await conn.execute(
        "SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'schema_migrations'"
    )
    if await cursor.fetchone() is None:
        return {}
    cursor = await conn.execute("SELECT version, checksum FROM schema_migrations ORDER BY version")
    return {row[0]: row[1] for row in await cursor.fetchall()}


async def _apply(conn: aiosqlite.Connection, migration: MigrationInfo) -> MigrationResult:
    started = time.perf_counter()

    def elapsed_ms() -> int:
        return int((time.perf_counter() - started) * 1000)

    try:
        # executescript commits anything pending first; the explicit BEGIN keeps
        # the script and its schema_migrations row in one transaction
        await conn.executescript(f"BEGIN;\n{migration.sql}")
        await conn.execute(
            "INSERT OR REPLACE INTO schema_migrations (version, name, checksum, execution_time_ms) "
            "VALUES (?, ?, ?, ?)",
            (migration.version, migration.name, migration.checksum, elapsed_ms()),
        )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        logger.error("migration_failed", version=migration.version, error=str(e))
        return MigrationResult(migration.version, migration.name, False, elapsed_ms(), str(e))

    logger.info("migration_applied", version=migration.version, name=migration.name)
    return MigrationResult(migration.version, migration.name, True, elapsed_ms())


async def _copy_database(source: Path, target: Path) -> None:
    async with aiosqlite.connect(source) as src, aiosqlite.connect(target) as dst:
        await src.backup(dst)


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """
    Apply every pending migration to ``db_path`` (default from settings).

    Stops at the first failing migration. Each script runs in its own
    transaction, so a failing one leaves nothing behind; when a backup was
    taken, the whole run is also undone by restoring it, and the backup is
    kept. Returns one result per migration attempted; an up-to-date database
    yields an empty list.
    """
    db_path = Path(db_path or get_settings().storage.db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    backup_path = None
    if create_backup_before and db_path.exists():
        backup_path = db_path.with_name(
            f"{db_path.stem}.backup_{datetime.now():%Y%m%d_%H%M%S}{db_path.suffix}"
        )
        await _copy_database(db_path, backup_path)
        logger.info("database_backup_created", backup_path=str(backup_path))

    results: list[MigrationResult] = []
    try:
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("PRAGMA journal_mode=WAL")
            applied = await _applied_checksums(conn)
            for migration in discover_migrations():
                if migration.version in applied:
                    if applied[migration.version] != migration.checksum:
                        logger.warning("migration_checksum_changed", version=migration.version)
                    continue
                result = await _apply(conn, migration)
                results.append(result)
                if not result.success:
                    break
    except aiosqlite.Error as e:
        logger.error("database_initialization_failed", db_path=str(db_path), error=str(e))
        if backup_path is not None:
            await _copy_database(backup_path, db_path)
            logger.info("database_restored_from_backup", backup_path=str(backup_path))
        raise

    if not all(r.success for r in results):
        if backup_path is not None:
            await _copy_database(backup_path, db_path)
            logger.warning("database_restored_from_backup", backup_path=str(backup_path))
        return results

    if backup_path is not None:
        backup_path.unlink()
    logger.info("database_initialized", db_path=str(db_path), applied=len(results))
    return results


run_migrations = initialize_database


async def get_migration_status(db_path: Path | None = None) -> MigrationStatus:
    db_path = Path(db_path or get_settings().storage.db_path)
    versions = [m.version for m in discover_migrations()]
    if not db_path.exists():
        return MigrationStatus(exists=False, pending=versions)

    async with aiosqlite.connect(db_path) as conn:
        applied = await _applied_checksums(conn)
    return MigrationStatus(
        exists=True,
        applied=list(applied),
        pending=[v for v in versions if v not in applied],
    )


def main() -> None:
    """``eggledger-migrate`` entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Egg Ledger database migrator")
    parser.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    parser.add_argument("--status", action="store_true", help="Show migration status and exit")
    parser.add_argument("--no-backup", action="store_true", help="Skip the pre-migration backup")
    args = parser.parse_args()

    if args.status:
        status = asyncio.run(get_migration_status(args.db_path))
        print(f"Database exists: {status.exists}")
        print(f"Applied: {', '.join(status.applied) or '-'}")
        print(f"Pending: {', '.join(status.pending) or '-'}")
        return

    results = asyncio.run(initialize_database(args.db_path, create_backup_before=not args.no_backup))
    if not results:
        print("Database is up to date")
    for result in results:
        outcome = "ok" if result.success else f"FAILED: {result.error}"
        print(f"v{result.version} {result.name} ({result.execution_time_ms}ms) {outcome}")
    if not all(r.success for r in results):
        raise SystemExit(1)


if __name__ == "__main__":
    main()
