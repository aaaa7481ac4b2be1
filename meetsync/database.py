import aiosqlite

from meetsync.config import settings

CREATE_RECORDS = """
CREATE TABLE IF NOT EXISTS records (
    namespace TEXT NOT NULL,
    meeting_id TEXT NOT NULL,
    record_key TEXT NOT NULL,
    payload TEXT NOT NULL,
    seen_at INTEGER NOT NULL,
    PRIMARY KEY (namespace, meeting_id, record_key)
)
"""

CREATE_RECORDS_SEEN_INDEX = """
CREATE INDEX IF NOT EXISTS records_seen_at
    ON records (namespace, meeting_id, seen_at)
"""

CREATE_ENDED_MEETINGS = """
CREATE TABLE IF NOT EXISTS ended_meetings (
    meeting_id TEXT PRIMARY KEY,
    ended_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
)
"""

_DDL = [CREATE_RECORDS, CREATE_RECORDS_SEEN_INDEX, CREATE_ENDED_MEETINGS]


async def init_db(db_path: str | None = None) -> None:
    """Create all tables. Called once per process via the FastAPI lifespan."""
    async with aiosqlite.connect(db_path or settings.sqlite_path) as db:
        await db.execute("PRAGMA journal_mode = WAL")
        for stmt in _DDL:
            await db.execute(stmt)
        await db.commit()


async def get_async_conn(db_path: str | None = None) -> aiosqlite.Connection:
    """Short-lived connection. Every worker process opens its own against the
    same file, so all of them see the same registries."""
    conn = await aiosqlite.connect(db_path or settings.sqlite_path)
    await conn.execute("PRAGMA busy_timeout = 5000")
    conn.row_factory = aiosqlite.Row
    return conn
