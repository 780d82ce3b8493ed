from habits_api.db import is_sqlite_url, normalize_database_url


def test_sqlite_url_uses_async_driver():
    assert normalize_database_url("sqlite:///./habits.db") == "sqlite+aiosqlite:///./habits.db"
    assert normalize_database_url("sqlite+aiosqlite:///x.db") == "sqlite+aiosqlite:///x.db"


def test_postgres_urls_use_asyncpg():
    assert normalize_database_url("postgres://u:p@db:5432/app") == "postgresql+asyncpg://u:p@db:5432/app"
    assert normalize_database_url("postgresql://u:p@db/app") == "postgresql+asyncpg://u:p@db/app"
    assert normalize_database_url("postgresql+psycopg2://u:p@db/app") == "postgresql+asyncpg://u:p@db/app"


def test_sslmode_is_translated():
    url = normalize_database_url("postgresql://u:p@db/app?sslmode=require&channel_binding=require&application_name=x")
    assert url == "postgresql+asyncpg://u:p@db/app?application_name=x&ssl=true"


def test_empty_url_passes_through():
    assert normalize_database_url("") == ""
    assert normalize_database_url(None) == ""


def test_is_sqlite_url():
    assert is_sqlite_url("sqlite+aiosqlite:///x.db")
    assert is_sqlite_url(" SQLITE:///x.db")
    assert not is_sqlite_url("postgresql+asyncpg://db/app")
