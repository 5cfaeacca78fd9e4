"""
Pytest configuration and shared fixtures.

Every test gets a fresh in-memory SQLite database, a fake clock and an
in-process token ledger where alice, bob and eve each hold 999 tokens and
have approved 10 for the escrow account.
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, Settings, get_db
from core.engine import RpsEngine
from core.token_ledger import InMemoryTokenLedger
import models  # noqa: F401

CUSTODY = "rps-escrow"
TIMEOUT = 60 * 60


class FakeClock:
    def __init__(self, now: int = 1_700_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture()
def session_factory():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=test_engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def token_ledger():
    ledger = InMemoryTokenLedger(CUSTODY, {"alice": 999, "bob": 999, "eve": 999})
    for owner in ("alice", "bob", "eve"):
        ledger.approve(owner, 10)
    return ledger


@pytest.fixture()
def rps_engine(token_ledger, clock):
    settings = Settings(claim_timeout_sec=TIMEOUT, custody_account=CUSTODY)
    return RpsEngine(token_ledger, clock=clock, settings=settings)


@pytest.fixture()
def registry(rps_engine):
    return rps_engine.registry


@pytest.fixture()
def escrow(rps_engine):
    return rps_engine.escrow


@pytest.fixture()
def client(rps_engine, session_factory):
    from fastapi.testclient import TestClient
    from main import create_app

    app = create_app(rps_engine)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)
