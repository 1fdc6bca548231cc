"""
Database Connection Management

Engine and session factory for the catalogue and progress store.
Sessions are handed out through a commit-or-rollback context manager;
FastAPI routes get theirs through the `get_db` dependency.
"""
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from audioshelf.config import DATABASE_PATH, DATABASE_ECHO
from audioshelf.models.base import Base


# Listener progress saves and admin edits can overlap; wait instead of failing
SQLITE_BUSY_TIMEOUT_MS = 30000

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def _configure_sqlite_connection(dbapi_conn, connection_record) -> None:
    """WAL journal and busy timeout on every new connection."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute(f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT_MS}")
    cursor.close()


def init_database(database_url: Optional[str] = None) -> None:
    """
    Create the engine and session factory.

    Args:
        database_url: SQLAlchemy URL; defaults to the SQLite file at
            DATABASE_PATH, whose directory is created on demand.
    """
    global _engine, _session_factory

    if database_url is None:
        db_file = Path(DATABASE_PATH)
        db_file.parent.mkdir(parents=True, exist_ok=True)
        database_url = f"sqlite:///{db_file}"

    _engine = create_engine(
        database_url,
        echo=DATABASE_ECHO,
        connect_args={
            "check_same_thread": False,
            "timeout": SQLITE_BUSY_TIMEOUT_MS / 1000,
        },
    )
    event.listen(_engine, "connect", _configure_sqlite_connection)

    # Route handlers serialize ORM objects after the session closes
    _session_factory = sessionmaker(
        bind=_engine,
        autoflush=False,
        expire_on_commit=False,
    )


def get_engine() -> Engine:
    """Engine, initialized on first use."""
    if _engine is None:
        init_database()
    return _engine


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """
    Transactional session scope.

    Commits when the block exits normally, rolls back and re-raises
    otherwise, and always closes the session.

    Example:
        with get_session() as session:
            book = session.get(Book, book_id)
            book.title = "New Title"
    """
    if _session_factory is None:
        init_database()

    session = _session_factory()
    try:
        yield session
        if session.is_active:
            session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: one transactional session per request."""
    with get_session() as session:
        yield session


def create_tables() -> None:
    """Create missing tables (existing tables are left untouched)."""
    Base.metadata.create_all(get_engine())


def drop_tables() -> None:
    """Drop every table. Deletes the whole library and all progress."""
    Base.metadata.drop_all(get_engine())


def reset_database() -> None:
    """Drop and recreate every table."""
    drop_tables()
    create_tables()
