"""
Ulyngo Backend — Password Hashing and Bearer Tokens
=====================================================

What:  bcrypt password hashing and HS256 JWT issue/verify.
Who:   AuthService (register, login) and the get_current_user dependency.

Token claims:
    sub       user id (UUID string)
    username  login name
    role      'user' or 'admin'
    iat, exp  issued-at / expiry (JWT_EXPIRE_HOURS after issue)
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import bcrypt
import jwt

from app.config import settings
from app.exceptions import AuthenticationError, ConfigurationError

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        logger.warning("Password hash in unexpected format")
        return False


def _secret() -> str:
    if not settings.jwt_secret:
        raise ConfigurationError(
            message="Authentication is not configured",
            details="Set JWT_SECRET",
        )
    return settings.jwt_secret


def create_access_token(user_id: uuid.UUID, username: str, role: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "username": username,
        "role": role,
        "iat": now,
        "exp": now + timedelta(hours=settings.jwt_expire_hours),
    }
    return jwt.encode(payload, _secret(), algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verifies signature and expiry and returns the claims.

    Raises:
        AuthenticationError: Token is malformed, tampered with or expired.
        ConfigurationError: JWT_SECRET is not set.
    """
    secret = _secret()
    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.PyJWTError as e:
        logger.info("Rejected bearer token: %s", type(e).__name__)
        raise AuthenticationError(
            message="Invalid or expired token",
            context={"error_type": type(e).__name__},
        ) from e
    return claims
