"""
Profile service: public user profiles and the follow relation.

A profile is always shaped relative to a requesting user: ``following``
is True only when a ``followers`` row links the requester to the target.
"""
import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.database import insert_ignore
from conduit.errors import NotFound, SelfFollow, Unauthorized
from conduit.models import Follow, User
from conduit.schemas import Profile

logger = logging.getLogger(__name__)


def profile_from_user(user: User, following: bool) -> Profile:
    return Profile(
        bio=user.bio,
        image=user.image,
        username=user.username,
        following=following,
    )


async def _get_user_by_username(db: AsyncSession, username: str) -> User | None:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def followed_ids(
    db: AsyncSession, follower_id: int | None, candidate_ids: set[int]
) -> set[int]:
    """Return the subset of *candidate_ids* that *follower_id* follows."""
    if follower_id is None or not candidate_ids:
        return set()
    result = await db.execute(
        select(Follow.following_id).where(
            Follow.user_id == follower_id,
            Follow.following_id.in_(candidate_ids),
        )
    )
    return set(result.scalars().all())


async def get_profile(
    db: AsyncSession, username: str, user_id: int | None = None
) -> Profile | None:
    """Return *username*'s profile as seen by *user_id*, or None."""
    user = await _get_user_by_username(db, username)
    if user is None:
        return None
    following = user.id in await followed_ids(db, user_id, {user.id})
    return profile_from_user(user, following)


async def follow_user(db: AsyncSession, user_id: int | None, username: str) -> Profile:
    """
    Make *user_id* follow *username*.  Following twice is a no-op;
    following yourself raises ``SelfFollow``.
    """
    if user_id is None:
        raise Unauthorized()
    target = await _get_user_by_username(db, username)
    if target is None:
        raise NotFound(f"Profile '{username}' not found")
    if target.id == user_id:
        raise SelfFollow()

    await db.execute(insert_ignore(db, Follow).values(user_id=user_id, following_id=target.id))
    logger.info("User %s follows user %s", user_id, target.id)
    return profile_from_user(target, True)


async def unfollow_user(db: AsyncSession, user_id: int | None, username: str) -> Profile:
    """Remove the follow from *user_id* to *username*, if present."""
    if user_id is None:
        raise Unauthorized()
    target = await _get_user_by_username(db, username)
    if target is None:
        raise NotFound(f"Profile '{username}' not found")

    await db.execute(
        delete(Follow).where(Follow.user_id == user_id, Follow.following_id == target.id)
    )
    return profile_from_user(target, False)
