"""
Record store connection (SQLAlchemy).

The engine is read-only in practice: every scoring computation fans out
up to READ_WORKERS concurrent reads, each on its own short session, so the
pool is sized to that fan-out.
"""
import psycopg
from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from fleetscore.config import get_settings


class Base(DeclarativeBase):
    """Declarative base for the operative record tables"""
    pass


_engine = None
_SessionLocal = None


def get_engine():
    """Shared engine for the record store, pool sized for concurrent reads"""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_engine(
            settings.get_sqlalchemy_url(),
            pool_pre_ping=True,
            pool_size=settings.READ_WORKERS,
        )
    return _engine


def get_session_factory():
    """Factory handed to RecordStore; one session per source read"""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(
            bind=get_engine(), autoflush=False, autocommit=False, expire_on_commit=False,
        )
    return _SessionLocal


def check_db_connection() -> None:
    """
    Readiness probe: the execution records table answers a query (raw psycopg)

    Raises:
        psycopg.Error: if the database or the table is unreachable
    """
    settings = get_settings()
    with psycopg.connect(settings.DATABASE_URL, connect_timeout=3) as conn:
        with conn.cursor() as cur:
            cur.execute("SELECT 1 FROM execution_records LIMIT 1;")
            cur.fetchall()
