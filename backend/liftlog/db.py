from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from .settings import get_settings

settings = get_settings()


def make_engine(url: str, **kwargs) -> Engine:
    """Build an engine; SQLite gets enforced foreign keys and working SAVEPOINTs."""
    is_sqlite = url.startswith("sqlite")
    if is_sqlite:
        # FastAPI runs sync routes in a threadpool
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    engine = create_engine(url, pool_pre_ping=True, echo=settings.SQL_ECHO, **kwargs)
    if is_sqlite:
        _configure_sqlite(engine)
    return engine


def _configure_sqlite(engine: Engine) -> None:
    # pysqlite emits its own BEGIN lazily, which breaks SAVEPOINT; take it over.
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


# Create the SQLAlchemy engine
engine = make_engine(settings.DATABASE_URL)

# Define the base class that all models should inherit from
class Base(DeclarativeBase):
    pass

# Session factory
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

def init_db(bind: Engine | None = None) -> None:
    """Create missing tables (CREATE TABLE IF NOT EXISTS semantics)."""
    from . import models  # noqa: F401  # registers the mappers on Base.metadata

    Base.metadata.create_all(bind=bind or engine)

# Dependency for FastAPI routes
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
