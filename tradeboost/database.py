"""TradeBoost — Database Engine & Session Factory.

PostgreSQL in production, SQLite for local runs and tests. Both dialects
support ``INSERT ... ON CONFLICT``, which the call recorder, snapshot store
and sync lease rely on for race-free writes.
"""

from sqlalchemy import text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import ArgumentError
from sqlmodel import SQLModel, Session, create_engine

from tradeboost.config import settings
from tradeboost.core.logging import get_logger

logger = get_logger("database")

db_url = settings.effective_database_url


def mask_url(url: str) -> str:
    """Render ``url`` with its password replaced by ``***``."""
    try:
        return make_url(url).render_as_string(hide_password=True)
    except ArgumentError:
        return url


def build_engine(url: str) -> Engine:
    """Create an engine with pool settings suited to the backend."""
    if url.startswith("sqlite"):
        logger.info(f"Database backend: SQLite ({url})")
        return create_engine(url, echo=False, connect_args={"check_same_thread": False})

    logger.info(f"Database backend: PostgreSQL ({mask_url(url)})")
    return create_engine(
        url,
        echo=False,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        pool_recycle=300,
    )


engine = build_engine(db_url)


def test_connection() -> bool:
    """Run ``SELECT 1``; False (logged) if the database is unreachable."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database connection test failed: {e}")
        return False
    return True


def init_db(bind=None) -> None:
    """Create all tables on ``bind`` (default: the application engine)."""
    # Table classes register themselves on import
    from tradeboost.models import account_models, call_models, compliance_models, spend_models  # noqa: F401

    SQLModel.metadata.create_all(bind if bind is not None else engine)
    logger.info("Database tables ready")


def native_insert(session: Session):
    """Return the dialect ``insert`` that supports ON CONFLICT, if any.

    Other backends get None and callers fall back to select-then-write.
    """
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert

        return insert
    if dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert

        return insert
    return None


def get_session():
    """FastAPI dependency yielding a session bound to the application engine."""
    with Session(engine) as session:
        yield session
