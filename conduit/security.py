"""
Credentials and identity.

- Passwords are hashed with passlib's bcrypt scheme.
- Tokens are signed JWTs; a user has exactly one valid token at a time
  (the one stored on their row), so issuing a new token on login
  invalidates every earlier one.
- ``resolve_user_id`` is the identity resolver: a token maps to a user
  only by literal equality with the stored value.
"""
import logging
import uuid
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.config import settings
from conduit.errors import Unauthorized
from conduit.models import User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    """Sign a new token for *user_id*. Every call yields a distinct value."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    claims = {"sub": str(user_id), "jti": uuid.uuid4().hex, "exp": expire}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def verify_access_token(token: str) -> dict:
    """Check signature and expiry; raise ``Unauthorized`` otherwise."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as exc:
        logger.warning("Rejected token: %s", exc)
        raise Unauthorized("Invalid or expired token") from exc


async def resolve_user_id(db: AsyncSession, token: str | None) -> int | None:
    """
    Return the id of the user whose stored token equals *token*, or None.

    Empty tokens never reach the database; a blank value must not match
    users who have never logged in.
    """
    if not token:
        return None
    result = await db.execute(select(User.id).where(User.token == token))
    return result.scalar_one_or_none()
