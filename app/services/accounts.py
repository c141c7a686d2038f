"""
Email/password accounts

Sign-up creates a user together with its public profile; login issues an
account session, which lives longer than a wallet session
(ACCOUNT_TOKEN_EXPIRE_SECONDS). Passwords are stored as scrypt hashes in the
form ``scrypt$<salt_hex>$<digest_hex>``.
"""

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone

from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.jwt_utils import create_account_session
from app.models.users import User, UserProfile
from app.services.auth_result import AuthErrorKind, AuthResult

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
_SALT_BYTES = 16
_SCRYPT_N = 2**14
_SCRYPT_R = 8
_SCRYPT_P = 1
_KEY_LENGTH = 32
USERNAME_MAX_LENGTH = 64


def _scrypt(salt: bytes) -> Scrypt:
    return Scrypt(salt=salt, length=_KEY_LENGTH, n=_SCRYPT_N, r=_SCRYPT_R, p=_SCRYPT_P)


def unique_username(db: Session, base: str) -> str:
    """First free ``base``, ``base_1``, ``base_2``... that fits the username column"""
    base = base or "user"
    username = base[:USERNAME_MAX_LENGTH]
    counter = 1
    while (
        db.query(UserProfile.user_id)
        .filter(UserProfile.public_username == username)
        .first()
        is not None
    ):
        suffix = f"_{counter}"
        username = base[: USERNAME_MAX_LENGTH - len(suffix)] + suffix
        counter += 1
    return username


def hash_password(password: str) -> str:
    salt = os.urandom(_SALT_BYTES)
    digest = _scrypt(salt).derive(password.encode("utf-8"))
    return f"scrypt${salt.hex()}${digest.hex()}"


def verify_password(password: str, stored_hash: str) -> bool:
    try:
        scheme, salt_hex, digest_hex = stored_hash.split("$")
        salt = bytes.fromhex(salt_hex)
        digest = bytes.fromhex(digest_hex)
    except ValueError:
        return False
    if scheme != "scrypt":
        return False
    try:
        _scrypt(salt).verify(password.encode("utf-8"), digest)
    except InvalidKey:
        return False
    return True


@dataclass(frozen=True)
class AccountSession:
    token: str
    user_id: str
    email: str


class AccountService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def signup(self, email: str, password: str) -> AuthResult[User]:
        email = (email or "").strip().lower()
        if not email or "@" not in email:
            return AuthResult.failure(AuthErrorKind.BAD_REQUEST, "A valid email is required.")
        if email.endswith("@" + settings.WALLET_EMAIL_DOMAIN):
            # reserved for identities provisioned by wallet login
            return AuthResult.failure(AuthErrorKind.BAD_REQUEST, "This email domain is reserved.")
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            return AuthResult.failure(
                AuthErrorKind.BAD_REQUEST,
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters.",
            )

        try:
            if self.db.query(User.id).filter(User.email == email).first() is not None:
                return AuthResult.failure(AuthErrorKind.CONFLICT, "Email is already registered.")

            user = User(email=email, password_hash=hash_password(password))
            self.db.add(user)
            self.db.flush()
            self.db.add(
                UserProfile(
                    user_id=user.id,
                    email=email,
                    public_username=unique_username(self.db, email.split("@")[0]),
                    bio="",
                    profile_image_url="",
                )
            )
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return AuthResult.failure(AuthErrorKind.CONFLICT, "Email is already registered.")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("signup failed: %s", e)
            return AuthResult.failure(AuthErrorKind.UPSTREAM_FAILURE, "Error creating user.")

        logger.info("created account %s", user.id)
        return AuthResult.success(user)

    def login(self, email: str, password: str) -> AuthResult[AccountSession]:
        email = (email or "").strip().lower()
        if not email or not password:
            return AuthResult.failure(AuthErrorKind.BAD_REQUEST, "Email and password are required.")

        try:
            user = self.db.query(User).filter(User.email == email).first()
            if user is None or not user.password_hash or not verify_password(password, user.password_hash):
                return AuthResult.failure(
                    AuthErrorKind.INVALID_CREDENTIALS, "Invalid email or password."
                )
            user.last_active_at = datetime.now(timezone.utc)  # type: ignore
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("login failed: %s", e)
            return AuthResult.failure(AuthErrorKind.UPSTREAM_FAILURE, "Error logging in.")

        token = create_account_session(user.id, email)
        return AuthResult.success(AccountSession(token=token, user_id=user.id, email=email))
