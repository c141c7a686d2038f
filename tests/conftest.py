import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENCODE_KEY", "test-encode-key-0123456789abcdef0123456789")

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from typing import Callable, Generator

from main import app
from app.db.base import Base
from app.db.session import get_db


# Create in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db() -> Generator:
    """Override database dependency for testing"""
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def tables() -> Generator:
    """Fresh schema for every test"""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client() -> TestClient:
    """Create a test client for the FastAPI application"""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def sign_message(account, message: str) -> str:
    """personal_sign ``message`` with ``account`` and return 0x-prefixed hex"""
    signed = Account.sign_message(encode_defunct(text=message), private_key=account.key)
    return "0x" + bytes(signed.signature).hex()


@pytest.fixture
def wallet():
    return Account.create()


@pytest.fixture
def other_wallet():
    return Account.create()


@pytest.fixture
def wallet_login(client: TestClient) -> Callable:
    """Run the nonce + verify round for ``account`` and return the verify response"""

    def _login(account):
        nonce_response = client.post("/api/nonce", json={"address": account.address})
        assert nonce_response.status_code == 200
        message = nonce_response.json()["message"]
        return client.post(
            "/api/verify",
            json={"address": account.address, "signature": sign_message(account, message)},
        )

    return _login


@pytest.fixture
def auth_headers(wallet_login: Callable) -> Callable:
    """Bearer header for a wallet session of ``account``"""

    def _headers(account) -> dict:
        response = wallet_login(account)
        assert response.status_code == 200
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _headers
