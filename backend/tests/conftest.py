"""Shared fixtures: in-memory database, deployed token, API client."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bondline import models, service
from bondline.auth import issue_access_token
from bondline.curve import BancorCurve, PricingCurve
from bondline.database import Base, get_db
from bondline.main import app


INITIAL_SUPPLY = 1_000 * 10**18
RESERVE_RATIO_PPM = 500_000
# Reserve asset alice can spend on buys.
ALICE_CREDIT = 10**30


class StubCurve(PricingCurve):
    """Curve returning fixed amounts and recording what it was asked."""

    def __init__(self, purchase: int = 0, sale: int = 0):
        self.purchase = purchase
        self.sale = sale
        self.calls = []

    def purchase_return(self, supply, reserve_held, reserve_ratio_ppm, deposit_amount):
        self.calls.append(("purchase", supply, reserve_held, reserve_ratio_ppm, deposit_amount))
        return self.purchase

    def sale_return(self, supply, reserve_held, reserve_ratio_ppm, sell_amount):
        self.calls.append(("sale", supply, reserve_held, reserve_ratio_ppm, sell_amount))
        return self.sale


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def published(monkeypatch):
    """Events handed to the realtime publisher, instead of Redis."""
    events = []
    monkeypatch.setattr(service, "publish_event_sync", events.append)
    return events


@pytest.fixture(autouse=True)
def default_curve():
    service.set_curve(BancorCurve())
    yield
    service.set_curve(BancorCurve())


@pytest.fixture
def stub_curve():
    curve = StubCurve()
    service.set_curve(curve)
    return curve


def make_account(db, email: str, reserve_credit: int = 0) -> models.Account:
    account = models.Account(email=email, hashed_password="unused", reserve_credit=reserve_credit)
    db.add(account)
    db.commit()
    db.refresh(account)
    return account


@pytest.fixture
def owner(db):
    return make_account(db, "owner@example.com")


@pytest.fixture
def alice(db):
    return make_account(db, "alice@example.com", reserve_credit=ALICE_CREDIT)


@pytest.fixture
def token(db, owner):
    return service.deploy_token(
        db,
        owner,
        name="Test Token",
        symbol="TST",
        initial_supply=INITIAL_SUPPLY,
        reserve_ratio_ppm=RESERVE_RATIO_PPM,
    )


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def auth_headers(account: models.Account) -> dict:
    access_token, _ = issue_access_token(account)
    return {"Authorization": f"Bearer {access_token}"}
