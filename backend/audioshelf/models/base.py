"""
SQLAlchemy Base Model and Mixins

This module defines the declarative base and common mixins for all models.
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Engine, event
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, declarative_mixin


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what SQLite stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    """Opaque string primary key."""
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Custom declarative base for all models."""
    pass


@declarative_mixin
class TimestampMixin:
    """
    Mixin that adds timestamp fields to a model.

    Attributes:
        created_at: DateTime when the record was created
        updated_at: DateTime when the record was last updated
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        nullable=False,
        doc="Timestamp when the record was created"
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
        doc="Timestamp when the record was last updated"
    )


# Enable foreign key constraints for SQLite
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """
    Enable foreign key constraints for SQLite.

    SQLite has foreign keys disabled by default. This event listener
    enables them when the database connection is established, so that
    deleting a Book cascades to its chapters and progress records.
    """
    if type(dbapi_conn).__module__.startswith("sqlite3"):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
