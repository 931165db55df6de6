# dormhub/services/common/security.py
"""
Identity token utilities.

Tokens are issued by the identity provider; this module verifies them and
resolves the acting principal. ``create_access_token`` exists for tests
and operational tooling.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import ExpiredSignatureError, JWTError, jwt

from dormhub.schemas.common.enums import UserRole

from .errors import AuthenticationError
from .permissions import Principal


@dataclass(frozen=True)
class JWTSettings:
    """
    JWT configuration settings.

    Example:
        >>> jwt_settings = JWTSettings(
        ...     secret_key=settings.JWT_SECRET_KEY,
        ...     algorithm=settings.JWT_ALGORITHM,
        ... )
    """
    secret_key: str
    algorithm: str = "HS256"
    access_token_expires_minutes: int = 60

    def __post_init__(self) -> None:
        if not self.secret_key:
            raise ValueError("JWT secret_key cannot be empty")
        if self.access_token_expires_minutes <= 0:
            raise ValueError("access_token_expires_minutes must be positive")


class TokenDecodeError(AuthenticationError):
    """Raised when JWT token decoding fails."""

    def __init__(self, message: str = "Invalid or expired token") -> None:
        super().__init__(message)


class TokenExpiredError(TokenDecodeError):
    """Raised when JWT token has expired."""

    def __init__(self) -> None:
        super().__init__("Token has expired")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(
    *,
    subject: int,
    role: UserRole,
    jwt_settings: JWTSettings,
    additional_claims: Optional[dict[str, Any]] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed access token for ``subject``.

    Example:
        >>> token = create_access_token(
        ...     subject=user.id,
        ...     role=UserRole.ADMIN,
        ...     jwt_settings=jwt_settings,
        ... )
    """
    now = _utcnow()
    if expires_delta is None:
        expires_delta = timedelta(minutes=jwt_settings.access_token_expires_minutes)

    payload: dict[str, Any] = {
        "sub": str(subject),
        "user_id": subject,
        "role": role.value,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_delta).timestamp()),
        "type": "access",
    }
    if additional_claims:
        payload.update(additional_claims)

    return jwt.encode(payload, jwt_settings.secret_key, algorithm=jwt_settings.algorithm)


def decode_token(token: str, jwt_settings: JWTSettings) -> dict[str, Any]:
    """
    Decode and validate a JWT token.

    Raises:
        TokenDecodeError: If token is invalid
        TokenExpiredError: If token has expired
    """
    try:
        return jwt.decode(
            token,
            jwt_settings.secret_key,
            algorithms=[jwt_settings.algorithm],
        )
    except ExpiredSignatureError as exc:
        raise TokenExpiredError() from exc
    except JWTError as exc:
        raise TokenDecodeError("Invalid or malformed token") from exc


def principal_from_token(token: str, jwt_settings: JWTSettings) -> Principal:
    """
    Resolve the acting principal from an access token.

    Raises:
        TokenDecodeError: If the token is invalid or lacks identity claims
    """
    payload = decode_token(token, jwt_settings)

    raw_user_id = payload.get("user_id", payload.get("sub"))
    try:
        user_id = int(raw_user_id)
    except (TypeError, ValueError) as exc:
        raise TokenDecodeError("Token missing user identifier") from exc

    try:
        role = UserRole(payload.get("role"))
    except ValueError as exc:
        raise TokenDecodeError("Token carries an unknown role") from exc

    return Principal(user_id=user_id, role=role)
