"""
User service: registration, login and account updates.

Email and username uniqueness is enforced at the database level; a
violation surfaces as ``InternalError`` (500), the documented behaviour
of the registration endpoint.
"""
import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.errors import InternalError, Unauthorized
from conduit.models import User
from conduit.schemas import LoginUser, NewUser, UpdateUser, UserResponse
from conduit.security import create_access_token, get_password_hash, verify_password

logger = logging.getLogger(__name__)


def _user_to_schema(user: User) -> UserResponse:
    return UserResponse(
        bio=user.bio,
        email=user.email,
        image=user.image,
        token=user.token,
        username=user.username,
    )


async def _get_user(db: AsyncSession, user_id: int) -> User | None:
    result = await db.execute(
        select(User).where(User.id == user_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def register_user(db: AsyncSession, data: NewUser) -> UserResponse:
    """Create a user.  The new account has no token until it logs in."""
    user = User(
        email=data.email,
        username=data.username,
        password=get_password_hash(data.password),
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as exc:
        logger.warning("Registration rejected for %r: %s", data.username, exc.orig)
        raise InternalError("Could not register user") from exc
    return _user_to_schema(user)


async def login(db: AsyncSession, data: LoginUser) -> UserResponse:
    """
    Check credentials and issue a fresh token, replacing (and thereby
    revoking) any token issued earlier.
    """
    user = (
        await db.execute(select(User).where(User.email == data.email))
    ).scalar_one_or_none()
    if user is None or not verify_password(data.password, user.password):
        logger.warning("Failed login for %r", data.email)
        raise Unauthorized("Invalid email or password")

    user.token = create_access_token(user.id)
    await db.flush()
    logger.info("User %s logged in", user.id)
    return _user_to_schema(user)


async def get_current_user(db: AsyncSession, user_id: int) -> UserResponse:
    user = await _get_user(db, user_id)
    if user is None:
        raise Unauthorized()
    return _user_to_schema(user)


async def update_user(db: AsyncSession, user_id: int, data: UpdateUser) -> UserResponse:
    """
    Apply a partial update.  A new password is re-hashed before storage;
    the current token is left untouched.
    """
    values = data.model_dump(exclude_unset=True)
    if values.get("password") is not None:
        values["password"] = get_password_hash(values["password"])
    # Columns that may not be NULL are skipped when sent as null.
    for field in ("email", "password", "username"):
        if field in values and values[field] is None:
            del values[field]

    if values:
        try:
            await db.execute(update(User).where(User.id == user_id).values(**values))
        except IntegrityError as exc:
            logger.warning("Update rejected for user %s: %s", user_id, exc.orig)
            raise InternalError("Could not update user") from exc
    return await get_current_user(db, user_id)
