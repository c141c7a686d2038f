from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

from fastapi import HTTPException, status

T = TypeVar("T")


class AuthErrorKind(str, Enum):
    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"
    INVALID_SIGNATURE = "invalid_signature"
    INVALID_CREDENTIALS = "invalid_credentials"
    CONFLICT = "conflict"
    UPSTREAM_FAILURE = "upstream_failure"


HTTP_STATUS = {
    AuthErrorKind.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    # a missing nonce is reported as a bad request, the client has to ask for a new one
    AuthErrorKind.NOT_FOUND: status.HTTP_400_BAD_REQUEST,
    AuthErrorKind.INVALID_SIGNATURE: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    AuthErrorKind.UPSTREAM_FAILURE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@dataclass(frozen=True)
class AuthError:
    kind: AuthErrorKind
    message: str

    @property
    def status_code(self) -> int:
        return HTTP_STATUS[self.kind]

    def to_http(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={"kind": self.kind.value, "message": self.message},
        )


@dataclass(frozen=True)
class AuthResult(Generic[T]):
    """Either a value or an AuthError, never both."""

    value: Optional[T] = None
    error: Optional[AuthError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "AuthResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: AuthErrorKind, message: str) -> "AuthResult[T]":
        return cls(error=AuthError(kind=kind, message=message))

    def unwrap(self) -> T:
        """Return the value or raise the matching HTTPException."""
        if self.error is not None:
            raise self.error.to_http()
        return self.value  # type: ignore[return-value]
