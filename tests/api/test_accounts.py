import jwt
import pytest
from fastapi import status
from fastapi.testclient import TestClient

from app.core.config import settings
from app.models.users import User, UserProfile


@pytest.fixture
def signup(client: TestClient):
    def _signup(email: str = "alice@example.com", password: str = "correct horse"):
        return client.post("/api/auth/signup", json={"email": email, "password": password})

    return _signup


class TestSignupAPI:
    """Test cases for POST /api/auth/signup"""

    def test_signup_creates_user_and_profile(self, signup, db_session):
        response = signup()

        assert response.status_code == status.HTTP_201_CREATED
        user_id = response.json()["user_id"]
        user = db_session.get(User, user_id)
        assert user.email == "alice@example.com"
        assert user.password_hash.startswith("scrypt$")
        assert "correct horse" not in user.password_hash
        profile = db_session.get(UserProfile, user_id)
        assert profile.public_username == "alice"

    def test_signup_duplicate_email(self, signup):
        signup()
        response = signup(email="ALICE@example.com")

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["detail"]["kind"] == "conflict"

    def test_signup_username_collision_gets_suffix(self, signup, db_session):
        signup(email="bob@example.com")
        user_id = signup(email="bob@example.org").json()["user_id"]

        assert db_session.get(UserProfile, user_id).public_username == "bob_1"

    def test_signup_long_local_part_fits_username(self, signup, db_session):
        local = "x" * 64
        signup(email=f"{local}@example.com")
        user_id = signup(email=f"{local}@example.org").json()["user_id"]

        username = db_session.get(UserProfile, user_id).public_username
        assert len(username) <= 64
        assert username == "x" * 62 + "_1"

    def test_signup_short_password(self, signup):
        response = signup(password="short")
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_signup_invalid_email(self, signup):
        response = signup(email="not-an-email")
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_signup_reserved_wallet_domain(self, signup):
        response = signup(email=f"0xabc@{settings.WALLET_EMAIL_DOMAIN}")
        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestLoginAPI:
    """Test cases for POST /api/auth/login"""

    def test_login_success(self, client: TestClient, signup):
        user_id = signup().json()["user_id"]

        response = client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": "correct horse"}
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["user_id"] == user_id
        payload = jwt.decode(data["token"], settings.ENCODE_KEY, algorithms=[settings.ENCODE_ALGORITHM])
        assert payload["sub"] == user_id
        assert payload["exp"] - payload["iat"] == settings.ACCOUNT_TOKEN_EXPIRE_SECONDS

    def test_account_and_wallet_sessions_have_distinct_lifetimes(self):
        assert settings.ACCOUNT_TOKEN_EXPIRE_SECONDS != settings.WALLET_TOKEN_EXPIRE_SECONDS

    def test_login_wrong_password(self, client: TestClient, signup):
        signup()

        response = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "wrong pass"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"]["kind"] == "invalid_credentials"

    def test_login_unknown_email(self, client: TestClient):
        response = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "whatever1"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_wallet_identity_cannot_password_login(self, client: TestClient, wallet, wallet_login):
        wallet_login(wallet)

        response = client.post(
            "/api/auth/login",
            json={"email": f"{wallet.address.lower()}@{settings.WALLET_EMAIL_DOMAIN}", "password": "anything1"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_account_session_can_link_wallet(self, client: TestClient, signup, wallet):
        signup()
        token = client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": "correct horse"}
        ).json()["token"]
        headers = {"Authorization": f"Bearer {token}"}

        from tests.conftest import sign_message

        message = client.get("/api/users/me/wallets/nonce", headers=headers).json()["message"]
        response = client.post(
            "/api/users/me/wallets",
            headers=headers,
            json={"address": wallet.address, "signature": sign_message(wallet, message)},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["wallet"]["is_primary"] is True
