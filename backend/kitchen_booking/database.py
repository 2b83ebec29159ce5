import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from .config import settings
from .errors import Unavailable

logger = logging.getLogger(__name__)


def build_engine(url: str, **kwargs):
    """Create an engine; SQLite gets cross-thread access and foreign keys."""
    if url.startswith("sqlite"):
        # check_same_thread=False: FastAPI serves sync endpoints from a threadpool
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        engine = create_engine(url, connect_args=connect_args, **kwargs)
        event.listen(engine, "connect", enable_sqlite_fk)
        return engine
    return create_engine(url, pool_pre_ping=True, **kwargs)


def enable_sqlite_fk(dbapi_connection, _):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


engine = build_engine(settings.resolved_database_url)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


# Dependency for FastAPI
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session):
    """
    Commit on success, roll back on any error.

    Storage failures surface as Unavailable: nothing was committed, so the
    caller may retry.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Storage failure, transaction rolled back")
        raise Unavailable() from e
    except Exception:
        db.rollback()
        raise
