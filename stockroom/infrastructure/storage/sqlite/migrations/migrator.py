"""
Versioned schema migrations for the stockroom database.

Files named vNNN_name.sql in this directory are applied in version order
and recorded with a checksum in schema_migrations. A run stops at the first
migration that fails, and a recorded migration whose file has since changed
counts as a failure, so the application refuses to start on a schema it
cannot vouch for. The existing file is copied aside first and restored if
the run raises.
"""

import asyncio
import hashlib
import re
import shutil
import sys
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import aiosqlite

from stockroom.config import get_logger, get_settings

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

REQUIRED_TABLES = (
    "materials",
    "stock_movements",
    "machines",
    "bom_items",
    "work_orders",
    "schema_migrations",
)

# Tolerance for float drift between stock and the ledger sum
LEDGER_EPSILON = 1e-6


@dataclass
class MigrationInfo:
    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = re.match(r"v(\d+)_(.+)\.sql", path.name)
        if not match:
            raise ValueError(f"Invalid migration filename: {path.name}")

        content = path.read_text(encoding="utf-8")
        checksum = hashlib.sha256(content.encode()).hexdigest()[:16]
        return cls(version=match.group(1), name=match.group(2), path=path, checksum=checksum)


@dataclass
class MigrationResult:
    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


def _elapsed_ms(start: float) -> int:
    return int((time.time() - start) * 1000)


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Applied migration versions mapped to their checksums."""
    try:
        cursor = await conn.execute(
            "SELECT version, checksum FROM schema_migrations ORDER BY version"
        )
        return {row[0]: row[1] for row in await cursor.fetchall()}
    except aiosqlite.OperationalError:
        # Fresh database
        return {}


def discover_migrations() -> list[MigrationInfo]:
    migrations = []
    for path in sorted(MIGRATIONS_DIR.glob("v*.sql")):
        try:
            migrations.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return migrations


async def _missing_tables(conn: aiosqlite.Connection) -> list[str]:
    cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
    existing = {row[0] for row in await cursor.fetchall()}
    return [t for t in REQUIRED_TABLES if t not in existing]


async def _post_migration_problems(
    conn: aiosqlite.Connection,
    migration: MigrationInfo,
    is_last: bool,
) -> list[str]:
    """Reasons the database is not usable after applying a migration."""
    problems = []

    cursor = await conn.execute(
        "SELECT 1 FROM schema_migrations WHERE version = ?", (migration.version,)
    )
    if not await cursor.fetchone():
        problems.append(f"migration {migration.version} not recorded")

    cursor = await conn.execute("PRAGMA foreign_key_check")
    violations = await cursor.fetchall()
    if violations:
        problems.append(f"{len(violations)} foreign key violations")

    # Earlier migrations may legitimately leave tables for later ones
    if is_last:
        missing = await _missing_tables(conn)
        if missing:
            problems.append(f"missing tables: {', '.join(missing)}")

    return problems


async def apply_migration(
    conn: aiosqlite.Connection,
    migration: MigrationInfo,
) -> MigrationResult:
    """Run one migration script and record it in schema_migrations."""
    logger.info("applying_migration", version=migration.version, name=migration.name)
    start = time.time()

    try:
        await conn.executescript(migration.path.read_text(encoding="utf-8"))
        await conn.execute(
            """
            INSERT OR REPLACE INTO schema_migrations (version, name, checksum, execution_time_ms)
            VALUES (?, ?, ?, ?)
            """,
            (migration.version, migration.name, migration.checksum, _elapsed_ms(start)),
        )
        await conn.commit()
    except (aiosqlite.Error, OSError) as e:
        await conn.rollback()
        logger.error("migration_failed", version=migration.version, error=str(e))
        return MigrationResult(
            migration.version, migration.name, False, _elapsed_ms(start), error=str(e)
        )

    elapsed = _elapsed_ms(start)
    logger.info("migration_applied", version=migration.version, execution_time_ms=elapsed)
    return MigrationResult(migration.version, migration.name, True, elapsed)


def create_backup(db_path: Path) -> Path:
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_path = db_path.with_suffix(f".backup_{timestamp}.db")
    shutil.copy2(db_path, backup_path)
    logger.info("database_backup_created", backup_path=str(backup_path))
    return backup_path


def restore_backup(db_path: Path, backup_path: Path) -> None:
    shutil.copy2(backup_path, db_path)
    logger.info("database_restored_from_backup", backup_path=str(backup_path))


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """
    Apply pending migrations and return a result for each one attempted.

    An empty list means the schema is current. A failed result is always
    the last entry; callers must not serve requests when one is present.
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("initializing_database", db_path=str(db_path))

    backup_path = None
    if create_backup_before and db_path.exists():
        backup_path = create_backup(db_path)

    results: list[MigrationResult] = []
    try:
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA foreign_keys=ON")

            migrations = discover_migrations()
            applied = await get_applied_migrations(conn)

            for i, migration in enumerate(migrations):
                recorded = applied.get(migration.version)
                if recorded is not None:
                    if recorded != migration.checksum:
                        logger.error(
                            "migration_checksum_changed",
                            version=migration.version,
                            recorded=recorded,
                            actual=migration.checksum,
                        )
                        results.append(MigrationResult(
                            migration.version, migration.name, False, 0,
                            error=f"checksum changed since it was applied ({recorded})",
                        ))
                        break
                    continue

                result = await apply_migration(conn, migration)
                results.append(result)
                if not result.success:
                    break

                problems = await _post_migration_problems(
                    conn, migration, is_last=i == len(migrations) - 1
                )
                if problems:
                    logger.error("post_migration_validation_failed", problems=problems)
                    result.success = False
                    result.error = "; ".join(problems)
                    break

        if backup_path and all(r.success for r in results):
            backup_path.unlink()

    except Exception as e:
        logger.error("database_initialization_failed", error=str(e))
        if backup_path and backup_path.exists():
            restore_backup(db_path, backup_path)
        raise

    return results


async def get_migration_status(db_path: Path | None = None) -> dict:
    db_path = db_path or get_settings().storage.db_path
    discovered = discover_migrations()

    if not db_path.exists():
        return {
            "exists": False,
            "current_version": None,
            "applied_migrations": [],
            "pending_migrations": [m.version for m in discovered],
        }

    async with aiosqlite.connect(db_path) as conn:
        applied = await get_applied_migrations(conn)

    return {
        "exists": True,
        "current_version": max(applied) if applied else None,
        "applied_migrations": list(applied),
        "pending_migrations": [m.version for m in discovered if m.version not in applied],
        "total_migrations": len(discovered),
    }


async def find_ledger_mismatches(conn: aiosqlite.Connection) -> list[dict]:
    """Materials whose current_stock differs from the sum of their movements."""
    cursor = await conn.execute(
        """
        SELECT m.id, m.code, m.current_stock,
               COALESCE(SUM(CASE s.movement_type
                                WHEN 'IN' THEN s.quantity
                                ELSE -s.quantity END), 0) AS ledger_stock
        FROM materials m
        LEFT JOIN stock_movements s ON s.material_id = m.id
        GROUP BY m.id
        HAVING ABS(m.current_stock - ledger_stock) > ?
        """,
        (LEDGER_EPSILON,),
    )
    return [
        {"material_id": row[0], "code": row[1], "current_stock": row[2], "ledger_stock": row[3]}
        for row in await cursor.fetchall()
    ]


def _check(name: str, ok: bool, **extra) -> dict:
    return {"check": name, "status": "PASS" if ok else "FAIL", **extra}


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict]:
    """
    PASS/FAIL checks over an existing database: foreign keys, SQLite
    integrity, required tables, and stock agreeing with the movement ledger.
    The ledger check only runs when every required table exists.
    """
    db_path = db_path or get_settings().storage.db_path

    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("PRAGMA foreign_key_check")
        fk_violations = await cursor.fetchall()
        cursor = await conn.execute("PRAGMA integrity_check")
        integrity = (await cursor.fetchone())[0]
        missing = await _missing_tables(conn)

        checks = [
            _check("foreign_keys", not fk_violations, violations=len(fk_violations)),
            _check("integrity", integrity == "ok", result=integrity),
            _check("required_tables", not missing, missing=missing),
        ]
        if not missing:
            mismatches = await find_ledger_mismatches(conn)
            checks.append(_check("ledger_consistency", not mismatches, mismatches=mismatches))

    return checks


def main() -> None:
    """stockroom-migrate: apply migrations, or report status / integrity."""
    import argparse

    parser = argparse.ArgumentParser(description="Stockroom database migrations")
    parser.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    parser.add_argument("--status", action="store_true", help="Show migration status")
    parser.add_argument("--verify", action="store_true", help="Verify schema and ledger integrity")
    parser.add_argument("--no-backup", action="store_true", help="Skip backup before migrating")
    args = parser.parse_args()

    async def run() -> bool:
        if args.status:
            status = await get_migration_status(args.db_path)
            print(f"Database exists: {status['exists']}")
            print(f"Current version: {status['current_version'] or 'N/A'}")
            print(f"Pending migrations: {status['pending_migrations']}")
            return True

        if args.verify:
            checks = await verify_schema_integrity(args.db_path)
            for check in checks:
                print(f"[{check['status']}] {check['check']}")
                if check["status"] != "PASS":
                    for key, value in check.items():
                        if key not in ("check", "status"):
                            print(f"       {key}: {value}")
            return all(c["status"] == "PASS" for c in checks)

        results = await initialize_database(
            args.db_path, create_backup_before=not args.no_backup
        )
        if not results:
            print("Database is up to date.")
        for result in results:
            status = "SUCCESS" if result.success else "FAILED"
            print(f"[{status}] v{result.version}: {result.name} ({result.execution_time_ms}ms)")
            if result.error:
                print(f"         Error: {result.error}")
        return all(r.success for r in results)

    if not asyncio.run(run()):
        sys.exit(1)


if __name__ == "__main__":
    main()
