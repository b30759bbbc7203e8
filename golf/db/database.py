"""Database connection and session management."""

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from ..config import DATABASE_URL, DATA_DIR
from .models import Base


def make_engine(url: str, **kwargs):
    """
    Create an engine whose transactions are serializable.
    
    SQLite transactions start with BEGIN IMMEDIATE so the rank read-modify-write
    in a solution save holds the write lock from its first read. Other
    databases run at SERIALIZABLE isolation.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, isolation_level="SERIALIZABLE", **kwargs)
    
    connect_args = kwargs.pop("connect_args", {})
    connect_args.setdefault("check_same_thread", False)  # Needed for SQLite + FastAPI
    engine = create_engine(url, connect_args=connect_args, **kwargs)
    
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
    
    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")
    
    return engine


# Ensure data directory exists
DATA_DIR.mkdir(parents=True, exist_ok=True)

engine = make_engine(DATABASE_URL, echo=False)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db():
    """Initialize database tables."""
    Base.metadata.create_all(bind=engine)


def get_db():
    """Dependency for FastAPI to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
