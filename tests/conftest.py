# flake8: noqa
import sys
from pathlib import Path

# Ensure project root is on sys.path so `swiftbites` can be imported when tests are run
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))  # noqa: E402

import pytest
from sqlalchemy.pool import StaticPool

from swiftbites.db import init_db, make_engine, make_session_factory
from swiftbites.store import EntityStore


@pytest.fixture
def engine():
    # Use StaticPool so the same in-memory database is shared across connections
    engine = make_engine("sqlite:///:memory:", poolclass=StaticPool)
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def store(session_factory):
    return EntityStore(session_factory)
