import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Keep the app's own engine off disk while the suite runs
os.environ["DATABASE_URL"] = "sqlite://"

from compute_market import config
from compute_market.ledger import InMemoryLedgerStore, Ledger, SqlLedgerStore
from compute_market.ledger.models import Base
from compute_market.ledger_api.auth import create_caller_token
from compute_market.ledger_api.database import get_ledger
from compute_market.ledger_api.main import app

# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def session_factory():
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def sql_ledger(session_factory):
    return Ledger(SqlLedgerStore(session_factory))


@pytest.fixture(params=["memory", "sql"])
def ledger(request):
    """A fresh ledger over each store implementation."""
    if request.param == "memory":
        return Ledger(InMemoryLedgerStore())
    return request.getfixturevalue("sql_ledger")


@pytest.fixture(scope="function")
def client(sql_ledger):
    # Override the ledger dependency to use the test database
    app.dependency_overrides[get_ledger] = lambda: sql_ledger

    from fastapi.testclient import TestClient
    with TestClient(app) as client:
        yield client

    app.dependency_overrides = {}


@pytest.fixture
def auth_headers():
    """Build bearer headers for a caller identity."""

    def _headers(identity):
        token, _ = create_caller_token(identity)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def issuer_key():
    return config.TOKEN_ISSUER_KEY
