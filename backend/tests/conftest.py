"""Pytest configuration to ensure local testing defaults."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

# Tests always run against a throwaway sqlite file, never the configured database.
test_sqlite_url = f"sqlite:///{(BACKEND_DIR / 'tests' / 'test_storefront.db').resolve().as_posix()}"
os.environ["DATABASE_URL"] = test_sqlite_url
os.environ["SEED_DEMO_DATA"] = "false"
os.environ.pop("SMTP_HOST", None)

from storefront.database import Base, engine  # noqa: E402
from storefront.dependencies import get_outcome_generator  # noqa: E402
from storefront.main import app  # noqa: E402
from storefront.migrations import run_migrations  # noqa: E402
from storefront.services.gateway import FixedOutcomeGenerator  # noqa: E402


@pytest.fixture
def clean_db():
    Base.metadata.drop_all(bind=engine)
    run_migrations(engine)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def force_outcome(clean_db):
    """Pin the mock gateway: ``force_outcome("SUCCESS", "SERVER_ERROR")``."""

    def _force(*outcomes: str) -> FixedOutcomeGenerator:
        generator = FixedOutcomeGenerator(*outcomes)
        app.dependency_overrides[get_outcome_generator] = lambda: generator
        return generator

    return _force
