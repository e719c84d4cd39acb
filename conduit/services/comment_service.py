"""
Comment service: comments on articles.

Each comment embeds its author's profile as seen by the requesting
user.  A user never follows themself, so ``following`` is always False
on the requester's own comments.
"""
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from conduit.errors import NotFound, Unauthorized
from conduit.models import Article, Comment, isoformat_utc
from conduit.schemas import Comment as CommentSchema
from conduit.schemas import NewComment
from conduit.services.profile_service import followed_ids, profile_from_user


def _comment_to_schema(comment: Comment, following: bool) -> CommentSchema:
    return CommentSchema(
        id=comment.id,
        body=comment.body,
        created_at=isoformat_utc(comment.created_at),
        updated_at=isoformat_utc(comment.updated_at),
        author=profile_from_user(comment.author, following),
    )


async def _load_comments(db: AsyncSession, stmt) -> list[Comment]:
    stmt = stmt.options(joinedload(Comment.author)).execution_options(populate_existing=True)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def add_comment(
    db: AsyncSession, user_id: int | None, slug: str, data: NewComment
) -> CommentSchema:
    """
    Add a comment by *user_id* to the article *slug*.

    Raises ``NotFound`` when the article does not exist rather than
    storing an orphaned comment.
    """
    if user_id is None:
        raise Unauthorized()
    exists = (
        await db.execute(select(Article.slug).where(Article.slug == slug))
    ).scalar_one_or_none()
    if exists is None:
        raise NotFound(f"Article '{slug}' not found")

    comment = Comment(body=data.body, article_slug=slug, author_id=user_id)
    db.add(comment)
    await db.flush()

    comments = await _load_comments(db, select(Comment).where(Comment.id == comment.id))
    return _comment_to_schema(comments[0], following=False)


async def list_comments(
    db: AsyncSession, slug: str, user_id: int | None = None
) -> list[CommentSchema]:
    """Return the comments on *slug*, oldest first."""
    comments = await _load_comments(
        db,
        select(Comment)
        .where(Comment.article_slug == slug)
        .order_by(Comment.created_at, Comment.id),
    )
    author_ids = {c.author_id for c in comments if c.author_id != user_id}
    following = await followed_ids(db, user_id, author_ids)
    return [_comment_to_schema(c, c.author_id in following) for c in comments]


async def delete_comment(
    db: AsyncSession, user_id: int | None, slug: str, comment_id: int
) -> None:
    """
    Delete the comment if *user_id* wrote it and it belongs to *slug*.

    Anything else (someone else's comment, wrong article, already gone)
    is a silent no-op.
    """
    if user_id is None:
        raise Unauthorized()
    await db.execute(
        delete(Comment).where(
            Comment.id == comment_id,
            Comment.article_slug == slug,
            Comment.author_id == user_id,
        )
    )
