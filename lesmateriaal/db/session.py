"""Database session management."""
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from lesmateriaal.core.config import settings
from lesmateriaal.db.db_url import resolve_db_url
from lesmateriaal.models import Base

resolved_db_url = resolve_db_url(settings.database_url)

_connect_args = {"check_same_thread": False} if resolved_db_url.startswith("sqlite") else {}

engine = create_engine(
    resolved_db_url,
    pool_pre_ping=True,
    connect_args=_connect_args,
    echo=False,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency for FastAPI routes to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create tables (development only; migrations handle production)."""
    Base.metadata.create_all(bind=engine)
