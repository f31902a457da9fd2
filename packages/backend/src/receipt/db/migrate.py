"""One-time upgrade from integer entry ids to UUID strings.

Older databases were created with `id INTEGER PRIMARY KEY AUTOINCREMENT`
and a `created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP` column. On startup
we look at the declared type of entries.id; if it is an integer type the
table is rebuilt with string ids inside a single transaction:

    entries → old_entries, create entries, copy rows with fresh ids,
    drop old_entries

Any failure rolls everything back and raises MigrationError.
"""

from datetime import datetime, timezone

import structlog
from sqlalchemy import Integer, inspect, insert
from sqlalchemy import text as sa_text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from receipt.db.models import Entry, new_id, now_ms
from receipt.errors import MigrationError

logger = structlog.get_logger()

LEGACY_TABLE = "old_entries"


def _declared_id_type(sync_conn):
    insp = inspect(sync_conn)
    if not insp.has_table(Entry.__tablename__):
        return None
    for column in insp.get_columns(Entry.__tablename__):
        if column["name"] == "id":
            return column["type"]
    return None


def legacy_timestamp_to_ms(value) -> int:
    """Normalize a legacy created_at value to epoch milliseconds.

    The old server wrote epoch-ms integers, but rows inserted without an
    explicit value got SQLite's CURRENT_TIMESTAMP text ("YYYY-MM-DD HH:MM:SS", UTC).
    """
    if value is None:
        return now_ms()
    if isinstance(value, (int, float)):
        return int(value)
    value = str(value).strip()
    if value.lstrip("-").isdigit():
        return int(value)
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


async def upgrade_legacy_ids(engine: AsyncEngine) -> bool:
    """Rebuild the entries table with string ids if it still uses integers.

    Returns True when a migration ran, False when there was nothing to do.
    """
    try:
        async with engine.begin() as conn:
            id_type = await conn.run_sync(_declared_id_type)
            if id_type is None or not isinstance(id_type, Integer):
                logger.debug("receipt.migration_not_needed", id_type=str(id_type))
                return False

            logger.info("receipt.migration_started", from_type=str(id_type))
            await conn.exec_driver_sql(
                f"ALTER TABLE {Entry.__tablename__} RENAME TO {LEGACY_TABLE}"
            )
            await conn.run_sync(
                Entry.metadata.create_all, tables=[Entry.__table__]
            )

            result = await conn.execute(
                sa_text(f"SELECT text, created_at FROM {LEGACY_TABLE} ORDER BY id")
            )
            rows = [
                {
                    "id": new_id(),
                    "text": row.text,
                    "created_at": legacy_timestamp_to_ms(row.created_at),
                }
                for row in result
            ]
            if rows:
                await conn.execute(insert(Entry.__table__), rows)

            await conn.exec_driver_sql(f"DROP TABLE {LEGACY_TABLE}")
    except (SQLAlchemyError, ValueError) as e:
        logger.error("receipt.migration_failed", error=str(e))
        raise MigrationError(f"legacy id migration failed: {e}") from e

    logger.info("receipt.migration_applied", rows=len(rows))
    return True
