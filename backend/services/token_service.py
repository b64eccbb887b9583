"""
Token Service - signed, time-bound bearer tokens.

Pure functions of (secret, input): nothing here touches the database or the
request. Callers map the two failure types onto HTTP errors.
"""

from datetime import timedelta
from typing import Optional, TypedDict
from jose import JWTError, ExpiredSignatureError, jwt
import logging
import time

from config.settings import settings
from exceptions import InvalidSignatureError, TokenExpiredError

logger = logging.getLogger(__name__)


class TokenClaims(TypedDict):
    """Strongly-typed JWT token payload."""
    sub: str      # User ID
    email: str
    role: str
    iat: float    # Issued-at, fractional seconds so back-to-back tokens differ
    exp: float    # Expiry, iat + lifetime


def _default_lifetime() -> timedelta:
    return timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)


def issue_token(
    user_id: str,
    email: str,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed token for an identity.

    Args:
        user_id: Subject of the token
        email: User's email at issuance
        role: User's role at issuance
        expires_delta: Lifetime; defaults to ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        Encoded JWT string
    """
    issued_at = time.time()
    lifetime = expires_delta if expires_delta is not None else _default_lifetime()
    claims: TokenClaims = {
        "sub": str(user_id),
        "email": email,
        "role": role,
        "iat": issued_at,
        "exp": issued_at + lifetime.total_seconds(),
    }
    token = jwt.encode(dict(claims), settings.JWT_SECRET_KEY, algorithm=settings.ALGORITHM)
    logger.debug(f"Issued token for user_id={user_id}")
    return token


def verify_token(token: str) -> TokenClaims:
    """
    Verify signature and expiry.

    Raises:
        InvalidSignatureError: signature mismatch or malformed token
        TokenExpiredError: current time is at or past the exp claim
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError as e:
        raise TokenExpiredError(str(e)) from e
    except JWTError as e:
        raise InvalidSignatureError(str(e)) from e

    exp = payload.get("exp")
    if exp is None or payload.get("sub") is None:
        raise InvalidSignatureError("Token is missing required claims")

    # jose compares whole seconds; expiry here is exact
    if time.time() >= float(exp):
        raise TokenExpiredError("Signature has expired")

    return TokenClaims(
        sub=str(payload["sub"]),
        email=payload.get("email", ""),
        role=payload.get("role", ""),
        iat=float(payload.get("iat", 0)),
        exp=float(exp),
    )
