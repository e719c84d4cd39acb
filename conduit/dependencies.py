from fastapi import Depends, Header, Query
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.config import settings
from conduit.database import get_db
from conduit.errors import Unauthorized
from conduit.security import resolve_user_id, verify_access_token


class PaginationParams:
    """
    Reusable FastAPI dependency that parses ``limit`` / ``offset``.

    Attributes
    ----------
    limit:
        Maximum number of items returned, between 1 and
        ``settings.MAX_PAGE_LIMIT``; anything outside that range is a 422.
    offset:
        Number of matching items to skip.
    """

    def __init__(
        self,
        limit: int = Query(
            settings.DEFAULT_PAGE_LIMIT,
            ge=1,
            le=settings.MAX_PAGE_LIMIT,
            description="Number of articles to return.",
        ),
        offset: int = Query(
            0,
            ge=0,
            description="Number of articles to skip.",
        ),
    ) -> None:
        self.limit = limit
        self.offset = offset


class ArticleFilterParams:
    """Optional ``GET /articles`` filters; all supplied filters are ANDed."""

    def __init__(
        self,
        author: str | None = Query(None, description="Author username."),
        tag: str | None = Query(None, description="Tag carried by the article."),
        favorited: str | None = Query(
            None, description="Username of a user who favorited the article."
        ),
    ) -> None:
        self.author = author
        self.tag = tag
        self.favorited = favorited


def get_bearer_token(authorization: str | None = Header(None)) -> str | None:
    """Extract the token from ``Authorization: Bearer <token>``."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme != "Bearer":
        return None
    return token.strip() or None


async def get_optional_user_id(
    token: str | None = Depends(get_bearer_token),
    db: AsyncSession = Depends(get_db),
) -> int | None:
    """Requesting user for optional-auth routes; unknown tokens mean anonymous."""
    return await resolve_user_id(db, token)


async def get_current_user_id(
    token: str | None = Depends(get_bearer_token),
    db: AsyncSession = Depends(get_db),
) -> int:
    """Requesting user for routes that require one."""
    if not token:
        raise Unauthorized("Missing authorization token")
    verify_access_token(token)
    user_id = await resolve_user_id(db, token)
    if user_id is None:
        raise Unauthorized("Token does not match any user")
    return user_id
