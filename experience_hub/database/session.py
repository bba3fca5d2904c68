from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from experience_hub.core.config import DATABASE_URL
from experience_hub.core.log import logger
from contextlib import contextmanager


def _engine_kwargs(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}

    kwargs: dict = {"connect_args": {"check_same_thread": False}}

    # In-memory databases live on a single connection
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool

    return kwargs


def _enable_sqlite_savepoints(engine):
    """Let SQLAlchemy emit BEGIN itself so SAVEPOINT and rollback behave on pysqlite"""

    @event.listens_for(engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")


engine = create_engine(DATABASE_URL, **_engine_kwargs(DATABASE_URL))
if DATABASE_URL.startswith("sqlite"):
    _enable_sqlite_savepoints(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """
    Request-scoped session. Routes that write commit before building their
    response; anything left uncommitted is rolled back on close.
    """
    db = SessionLocal()

    try:
        yield db
    except Exception as e:
        logger.error(f"Rolling back database transaction: {e}")
        db.rollback()
        raise e
    finally:
        db.close()


@contextmanager
def db_session():
    """Context manager for database sessions outside of a request"""
    db = SessionLocal()

    try:
        yield db
        db.commit()
    except Exception as e:
        logger.error(f"Error committing database transaction: {e}")
        db.rollback()
        raise e
    finally:
        db.close()
