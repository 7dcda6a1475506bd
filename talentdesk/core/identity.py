"""Resolution of the current user id.

The session context asks an identity provider who is signed in. The
default deployment uses a fixed id from settings; ``TokenUserIdProvider``
reads the ``sub`` claim of a signed JWT instead.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Optional

from jose import JWTError, jwt

from talentdesk.core.config import get_settings

logger = logging.getLogger(__name__)


class IdentityError(Exception):
    """Raised when the current user id cannot be resolved."""


class UserIdProvider(ABC):
    @abstractmethod
    async def current_user_id(self) -> str:
        pass


class FixedUserIdProvider(UserIdProvider):
    """Always resolves to the same user id."""

    def __init__(self, user_id: Optional[str] = None):
        self.user_id = user_id or get_settings().current_user_id

    async def current_user_id(self) -> str:
        return self.user_id


class TokenUserIdProvider(UserIdProvider):
    """Resolves the user id from a bearer token issued by ``create_user_token``."""

    def __init__(self, token: str, secret_key: Optional[str] = None, algorithm: Optional[str] = None):
        settings = get_settings()
        self.token = token
        self.secret_key = secret_key or settings.secret_key
        self.algorithm = algorithm or settings.algorithm

    async def current_user_id(self) -> str:
        user_id = decode_user_token(self.token, self.secret_key, self.algorithm)
        if user_id is None:
            raise IdentityError("Could not validate credentials")
        return user_id


def create_user_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed token whose subject is the user id."""
    settings = get_settings()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode = {"sub": user_id, "exp": expire, "type": "access"}
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_user_token(token: str, secret_key: str, algorithm: str) -> Optional[str]:
    """Return the user id carried by a valid token, or None."""
    try:
        payload = jwt.decode(token, secret_key, algorithms=[algorithm])
    except JWTError as e:
        logger.warning(f"Invalid token: {e}")
        return None
    return payload.get("sub")
