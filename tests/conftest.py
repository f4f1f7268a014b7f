"""Pytest configuration and shared fixtures.

Set DATABASE_URL before any app module imports to use SQLite for tests.
Provides reusable fixtures: db session, API client, record/material
factories, seeding helpers.
"""
import os
import uuid
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Force SQLite before any app import
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///./test.db"
os.environ.setdefault("ADMIN_API_KEY", "test-admin-key")

from lesmateriaal.models import Base, CourseMaterial, MaterialStatus
from lesmateriaal.services.catalog_loader import invalidate_catalog_cache
from lesmateriaal.services.faceted_search import MaterialRecord, Term, Vocabularies

ADMIN_HEADERS = {"X-Admin-Key": "test-admin-key"}


# ── Database fixtures ────────────────────────────────────────────────

@pytest.fixture()
def db_engine():
    """In-memory SQLite engine with all tables (one connection, shared across threads)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db(db_engine):
    """SQLAlchemy session bound to in-memory SQLite."""
    Session = sessionmaker(bind=db_engine, autocommit=False, autoflush=False)
    session = Session()
    yield session
    session.close()


@pytest.fixture()
def client(db_engine):
    """TestClient whose get_db yields sessions on the in-memory engine."""
    from fastapi.testclient import TestClient

    from lesmateriaal.core.auth import rate_limit_admin, rate_limit_public
    from lesmateriaal.db.session import get_db
    from lesmateriaal.main import app

    Session = sessionmaker(bind=db_engine, autocommit=False, autoflush=False)
    # limiters are module-level; every test starts with an empty window
    rate_limit_public.reset()
    rate_limit_admin.reset()

    def override_get_db():
        session = Session()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def fresh_catalog_cache():
    """The catalog cache is module-level; never let it leak between tests."""
    invalidate_catalog_cache()
    yield
    invalidate_catalog_cache()


# ── Factories ────────────────────────────────────────────────────────

def make_record(id, **kwargs) -> MaterialRecord:
    """Factory for engine records with sensible defaults."""
    defaults = {
        "title_nl": f"Materiaal {id}",
        "created_at": datetime(2024, 1, 15),
    }
    defaults.update(kwargs)
    return MaterialRecord(id=str(id), **defaults)


def make_vocabularies(**kwargs) -> Vocabularies:
    """Vocabularies from `facet=[(id, title_nl, title_de), ...]` tuples."""
    return Vocabularies(**{
        facet: tuple(Term(*entry) for entry in entries)
        for facet, entries in kwargs.items()
    })


def make_material(**kwargs) -> CourseMaterial:
    """Factory for CourseMaterial (published) with sensible defaults."""
    defaults = {
        "id": str(uuid.uuid4()),
        "title_nl": "Default materiaal",
        "status": MaterialStatus.PUBLISHED.value,
        "created_at": datetime(2024, 1, 15),
        "language": ["nl"],
        "cefr": [],
    }
    defaults.update(kwargs)
    if "slug" not in defaults:
        defaults["slug"] = f"materiaal_{defaults['id'][:8]}"
    return CourseMaterial(**defaults)


def seed(db, objects: list):
    """Add objects to session and commit."""
    for obj in objects:
        db.add(obj)
    db.commit()


# ── Markers ──────────────────────────────────────────────────────────

def pytest_configure(config):
    config.addinivalue_line("markers", "slow: marks slow tests")
    config.addinivalue_line("markers", "integration: marks integration tests")
    config.addinivalue_line("markers", "unit: marks unit tests")
