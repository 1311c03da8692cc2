"""
Password hashing, token signing and the bearer-token guard.

Tokens bind a user id and carry no ``exp`` claim, so they stay valid until the
signing secret changes. There is no revocation list and the guard performs no
store lookup.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

import bcrypt
from fastapi import Depends, Header
from jose import JWTError, jwt

from config import Settings, get_settings
from errors import AuthError

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 12
BEARER_PREFIX = "Bearer "

NO_TOKEN_MESSAGE = "Access denied. No token provided."
INVALID_TOKEN_MESSAGE = "Invalid token."
BAD_CREDENTIALS_MESSAGE = "Invalid email or password"


def _secret(password: str) -> bytes:
    # bcrypt only uses the first 72 bytes
    return password.encode("utf-8")[:72]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_secret(password), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(_secret(password), hashed_password.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def create_token(user_id: str, settings: Settings) -> str:
    claims = {"id": user_id, "iat": int(datetime.now(timezone.utc).timestamp())}
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings) -> str:
    """Verify ``token`` and return the user id it binds.

    Raises AuthError (400) for a bad signature, a malformed token or a token
    without an ``id`` claim.
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.info("Rejected token: %s", e)
        raise AuthError(INVALID_TOKEN_MESSAGE, status_code=400)
    user_id = payload.get("id")
    if not isinstance(user_id, str) or not user_id:
        logger.info("Rejected token: missing id claim")
        raise AuthError(INVALID_TOKEN_MESSAGE, status_code=400)
    return user_id


def extract_bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    token = authorization
    if token.startswith(BEARER_PREFIX):
        token = token[len(BEARER_PREFIX):]
    token = token.strip()
    return token or None


def get_current_user_id(
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> str:
    """Guard dependency for protected routes; returns the caller's user id."""
    token = extract_bearer(authorization)
    if token is None:
        raise AuthError(NO_TOKEN_MESSAGE, status_code=401)
    return decode_token(token, settings)
