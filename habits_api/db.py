from __future__ import annotations

import logging
from urllib.parse import urlparse, urlunparse, parse_qsl, urlencode

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncEngine
from sqlalchemy.pool import NullPool

from habits_api.settings import get_settings

logger = logging.getLogger(__name__)

ASYNC_SCHEMES = {
    "sqlite": "sqlite+aiosqlite",
    "postgres": "postgresql+asyncpg",
    "postgresql": "postgresql+asyncpg",
    "postgresql+psycopg2": "postgresql+asyncpg",
}

# libpq options asyncpg does not understand.
DROPPED_QUERY_KEYS = {"channel_binding", "ssl", "sslmode"}


def _async_scheme(url: str) -> str:
    scheme, sep, rest = url.partition("://")
    if not sep:
        return url
    return f"{ASYNC_SCHEMES.get(scheme.lower(), scheme)}://{rest}"


def normalize_database_url(database_url: str) -> str:
    """Rewrite a sync DATABASE_URL to its async driver; `sslmode` becomes asyncpg's `ssl=true`."""
    url = _async_scheme(str(database_url or "").strip())
    if not url or is_sqlite_url(url):
        return url
    try:
        parsed = urlparse(url)
    except ValueError:
        return url
    query = parse_qsl(parsed.query, keep_blank_values=True)
    clean = [(key, value) for key, value in query if key not in DROPPED_QUERY_KEYS]
    if any(key == "sslmode" for key, _ in query):
        clean.append(("ssl", "true"))
    return urlunparse(parsed._replace(query=urlencode(clean)))


def is_sqlite_url(database_url: str) -> bool:
    return str(database_url or "").strip().lower().startswith("sqlite")


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker | None = None


def _remote_connect_args(db_url: str) -> dict:
    try:
        host = urlparse(db_url).hostname or ""
    except ValueError:
        logger.debug("Failed to parse database URL for SSL hint.")
        return {}
    if host and host not in {"localhost", "127.0.0.1"}:
        return {"ssl": True}
    return {}


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        db_url = normalize_database_url(get_settings().database_url)
        if is_sqlite_url(db_url):
            # A fresh connection per session keeps aiosqlite off stale event loops.
            _engine = create_async_engine(db_url, poolclass=NullPool, future=True)
        else:
            _engine = create_async_engine(
                db_url,
                connect_args=_remote_connect_args(db_url),
                pool_pre_ping=True,
                future=True,
                pool_size=10,
                max_overflow=5,
            )
        logger.info("Database engine ready (%s)", db_url.split("://", 1)[0])
    return _engine


def get_sessionmaker() -> async_sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


async def dispose_engine() -> None:
    if _engine is not None:
        await _engine.dispose()
    reset_engine()


def reset_engine() -> None:
    """Forget the cached engine; the next call builds one from current settings."""
    global _engine, _session_factory
    _engine = None
    _session_factory = None
