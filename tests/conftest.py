"""
Shared fixtures: in-memory SQLite per test, fake Meta and LLM clients.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from creative_analytics.database import Base, get_db
from creative_analytics.deps import get_llm_service, get_meta_service
from creative_analytics.main import app
from creative_analytics.models import Ad, AdAccount, AdAnalysis


class FakeLLMService:
    """Records prompts and returns canned completions."""

    def __init__(self, content="", error=None):
        self.content = content
        self.error = error
        self.calls = []

    def ensure_configured(self, model=None):
        return None

    def execute_prompt(self, user_message, system_message="", model=None, max_tokens=1024):
        self.calls.append({"user_message": user_message, "model": model, "max_tokens": max_tokens})
        if self.error:
            raise self.error
        return {"content": self.content, "tokens_used": 10, "model": model or "fake"}


class FakeMetaService:
    """Canned Graph API responses keyed the way MetaAdsService returns them."""

    def __init__(self, ads=None, insights=None, account=None, accounts=None, error=None):
        self.ads = ads or []
        self.insights = insights or []
        self.account = account or {}
        self.accounts = accounts or []
        self.error = error
        self.calls = []

    async def list_ad_accounts(self, access_token):
        self.calls.append(("list_ad_accounts", access_token))
        if self.error:
            raise self.error
        return self.accounts

    async def get_ad_account(self, access_token, account_id):
        self.calls.append(("get_ad_account", account_id))
        if self.error:
            raise self.error
        return self.account

    async def list_ads(self, access_token, account_id):
        self.calls.append(("list_ads", account_id))
        if self.error:
            raise self.error
        return self.ads

    async def list_ad_insights(self, access_token, account_id):
        self.calls.append(("list_ad_insights", account_id))
        if self.error:
            raise self.error
        return self.insights


@pytest.fixture
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def fake_llm():
    llm = FakeLLMService()
    app.dependency_overrides[get_llm_service] = lambda: llm
    return llm


@pytest.fixture
def fake_meta():
    meta = FakeMetaService()
    app.dependency_overrides[get_meta_service] = lambda: meta
    return meta


def add_account(db, account_id="act_1", name="Main account", currency="EUR"):
    account = AdAccount(id=account_id, name=name, currency=currency)
    db.add(account)
    db.commit()
    return account


def add_ad(db, ad_id, account_id="act_1", **metrics):
    values = {
        "name": f"Ad {ad_id}",
        "status": "ACTIVE",
        "thumbnail_url": "",
        "spend": 0.0,
        "impressions": 0,
        "clicks": 0,
        "ctr": 0.0,
        "leads": 0,
        "cpl": 0.0,
        "hook_rate": 0.0,
        "hold_rate": 0.0,
        "video_views_3s": 0,
        "video_views_100pct": 0,
    }
    values.update(metrics)
    ad = Ad(id=ad_id, account_id=account_id, **values)
    db.add(ad)
    db.commit()
    return ad


def add_analysis(db, ad_id, **fields):
    analysis = AdAnalysis(ad_id=ad_id, strengths="[]", improvements="[]", iterations="[]", **fields)
    db.add(analysis)
    db.commit()
    return analysis
