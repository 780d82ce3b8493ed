from __future__ import annotations

from sqlalchemy import text as sql_text

from habits_api.db import get_engine


CATEGORIES_TABLE = "habit_categories"
HABITS_TABLE = "habits"
RECORDS_TABLE = "habit_records"
SETTINGS_TABLE = "settings"


async def init_db():
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {CATEGORIES_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_email TEXT NOT NULL,
                    name TEXT NOT NULL,
                    color TEXT DEFAULT '#4F46E5',
                    icon TEXT DEFAULT '📋',
                    created_at TEXT NOT NULL,
                    updated_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {HABITS_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_email TEXT NOT NULL,
                    name TEXT NOT NULL,
                    description TEXT,
                    frequency TEXT NOT NULL DEFAULT 'daily',
                    target INTEGER NOT NULL DEFAULT 1,
                    uom TEXT NOT NULL DEFAULT 'times',
                    category_id TEXT,
                    archived INTEGER DEFAULT 0,
                    created_at TEXT NOT NULL,
                    updated_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {RECORDS_TABLE} (
                    id TEXT PRIMARY KEY,
                    habit_id TEXT NOT NULL,
                    date TEXT NOT NULL,
                    value INTEGER NOT NULL,
                    notes TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT,
                    UNIQUE (habit_id, date)
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {SETTINGS_TABLE} (
                    key TEXT PRIMARY KEY,
                    value TEXT
                )
                """
            )
        )

    async def ensure_index(index_sql: str) -> None:
        try:
            async with engine.begin() as conn:
                await conn.execute(sql_text(index_sql))
        except Exception:
            return

    await ensure_index(
        f"CREATE INDEX IF NOT EXISTS idx_{HABITS_TABLE}_user_category "
        f"ON {HABITS_TABLE} (user_email, category_id)"
    )
    await ensure_index(
        f"CREATE INDEX IF NOT EXISTS idx_{RECORDS_TABLE}_habit_date "
        f"ON {RECORDS_TABLE} (habit_id, date)"
    )
    await ensure_index(
        f"CREATE INDEX IF NOT EXISTS idx_{CATEGORIES_TABLE}_user "
        f"ON {CATEGORIES_TABLE} (user_email, name)"
    )
