from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from config import Settings, get_settings


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _create_engine(settings: Settings) -> Engine:
    url = settings.database_url
    if _is_sqlite(url):
        # Report fetches run on worker threads, each with its own connection.
        eng = create_engine(url, connect_args={"check_same_thread": False})
        event.listen(eng, "connect", _enable_sqlite_pragmas)
        return eng
    return create_engine(
        url,
        pool_size=max(5, settings.fetch_workers),
        max_overflow=settings.fetch_workers,
        pool_pre_ping=True,
    )


def _enable_sqlite_pragmas(dbapi_conn, _record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL;")
    cursor.execute("PRAGMA foreign_keys=ON;")
    cursor.close()


engine = _create_engine(get_settings())
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


def get_session_factory() -> sessionmaker:
    """Factory handed to the report layer; each concurrent fetch opens its own session."""
    return SessionLocal
