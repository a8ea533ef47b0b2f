"""
database.py — Database Session & Connection Management

Purpose:
- Create and provide access to the Postgres database (Supabase) used by the backend.
- Manage SQLAlchemy Engine + Session lifecycle.
- Expose a FastAPI dependency `get_db()` that yields a session per-request.
- Provide the declarative `Base` shared by every ORM model in ebom.models.

Key Characteristics:
- Synchronous SQLAlchemy engine.
- No Alembic migrations — `init_db()` creates missing tables.
- If SUPABASE_DB_URL is empty, engine and SessionLocal stay None; endpoints that
  don't touch the database (pure LCA computation) keep working.

This module does NOT:
- Define ORM models (see ebom/models/*).
- Perform any queries or business logic.
"""

from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from ebom.core.config import settings

Base = declarative_base()

# -----------------------------------------------------------------------------
# SQLAlchemy Engine
# -----------------------------------------------------------------------------

db_url = settings.SUPABASE_DB_URL

if not db_url or not db_url.strip():
    engine = None
    SessionLocal = None
else:
    # Use psycopg (v3) driver
    if db_url.startswith("postgresql://") and "+" not in db_url.split("://")[0]:
        db_url = db_url.replace("postgresql://", "postgresql+psycopg://", 1)

    engine = create_engine(
        db_url,
        pool_pre_ping=True  # Ensures connections are valid before use
    )

    SessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine
    )


def init_db(bind=None) -> None:
    """
    Create all tables registered on Base.

    Importing ebom.models registers every model with Base.metadata.
    """
    import ebom.models  # noqa: F401

    target = bind if bind is not None else engine
    if target is None:
        raise RuntimeError("Database is not configured. Please set SUPABASE_DB_URL.")
    Base.metadata.create_all(bind=target)

# -----------------------------------------------------------------------------
# FastAPI Dependency
# -----------------------------------------------------------------------------

def get_db() -> Iterator[Session]:
    """
    FastAPI dependency: yields a database session for the duration of the request.

    Usage in API endpoint:
        def endpoint(db: Session = Depends(get_db)):
            db.query(...)

    Raises:
        RuntimeError: If database is not configured (SUPABASE_DB_URL is empty)
    """
    if SessionLocal is None:
        raise RuntimeError(
            "Database is not configured. Please set SUPABASE_DB_URL environment variable. "
            "The /lca computation endpoints work without a database, but treetable, "
            "target, report and workflow endpoints require one."
        )

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
