from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker, declarative_base, Session
from sqlalchemy.pool import StaticPool
from boxoffice.core.config import settings


def make_engine(url: str) -> Engine:
    url = make_url(url)
    engine_kwargs = {"pool_pre_ping": True}
    if url.get_backend_name() == "sqlite":
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            # Single shared connection so an in-memory database survives across sessions
            engine_kwargs["poolclass"] = StaticPool

    engine = create_engine(url, **engine_kwargs)

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine, "connect")
        def _configure_sqlite_connection(dbapi_connection, connection_record):
            # Let SQLAlchemy emit BEGIN itself instead of pysqlite's deferred one
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(engine, "begin")
        def _begin_immediate(conn):
            # Take the write lock up front so validation reads and the write
            # that follows them are serialised against other writers
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


engine = make_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session):
    """Run a block as one transaction: commit on success, roll back on any error."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
