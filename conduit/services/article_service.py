"""
Article service: business logic for the Article aggregate.

Design notes
------------
- Every read goes through ``_load_articles``: one SELECT for the article
  rows with the author joined (``joinedload``) plus one ``selectinload``
  each for tags and favorites.  ``populate_existing`` is set so that rows
  already in the session's identity map pick up tag / favorite changes
  made earlier in the same transaction by Core-level statements.
- ``favorited`` is computed against the requesting user's id and is
  always False for anonymous callers; ``favoritesCount`` counts every
  user's favorite.
- Service functions flush but do not commit; the write routes commit
  through ``conduit.database.commit`` before responding, so a
  multi-statement write either lands completely or not at all.
- The tag cache is cleared by an ``after_commit`` hook, so a reader racing
  the write cannot put the pre-commit tag list back into Redis.
"""
import logging
import re
import unicodedata

from sqlalchemy import delete, desc, func, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload, selectinload

from conduit.cache import cache
from conduit.config import settings
from conduit.database import after_commit, insert_ignore
from conduit.errors import DuplicateSlug, InvalidTitle, NotFound, Unauthorized
from conduit.models import (
    MAX_SLUG_LENGTH,
    Article,
    ArticleTag,
    Comment,
    Favorite,
    User,
    isoformat_utc,
    utcnow,
)
from conduit.schemas import Article as ArticleSchema
from conduit.schemas import ArticleList, NewArticle, UpdateArticle

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Slug policy
# ---------------------------------------------------------------------------

_SLUG_INVALID_RE = re.compile(r"[^a-z0-9]+")


def clamp_title(title: str, max_length: int = MAX_SLUG_LENGTH) -> str:
    """
    Return the longest prefix of whole words of *title* that fits in
    *max_length* characters.

    Raises ``InvalidTitle`` when the title has no words or when its first
    word alone is longer than *max_length*.
    """
    words = title.strip().split(" ")
    if not words[0]:
        raise InvalidTitle("Title must contain at least one word")
    if len(words[0]) > max_length:
        raise InvalidTitle(f"First word of title exceeds {max_length} characters")

    result = words[0]
    for word in words[1:]:
        candidate = f"{result} {word}"
        if len(candidate) > max_length:
            break
        result = candidate
    return result


def slugify(title: str) -> str:
    """Return a URL-safe, lowercase slug of at most 60 characters for *title*."""
    clamped = clamp_title(title)
    ascii_text = unicodedata.normalize("NFKD", clamped).encode("ascii", "ignore").decode()
    slug = _SLUG_INVALID_RE.sub("-", ascii_text.lower()).strip("-")
    # Compatibility decompositions can lengthen the text again.
    slug = slug[:MAX_SLUG_LENGTH].strip("-")
    if not slug:
        raise InvalidTitle("Title has no URL-safe characters")
    return slug


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------

def _article_to_schema(article: Article, user_id: int | None) -> ArticleSchema:
    favorite_users = {f.user_id for f in article.favorites}
    return ArticleSchema(
        slug=article.slug,
        title=article.title,
        description=article.description,
        body=article.body,
        tag_list=[t.tag for t in article.tags],
        created_at=isoformat_utc(article.created_at),
        updated_at=isoformat_utc(article.updated_at),
        favorited=user_id is not None and user_id in favorite_users,
        favorites_count=len(favorite_users),
        author=article.author.username,
    )


async def _load_articles(db: AsyncSession, stmt) -> list[Article]:
    stmt = stmt.options(
        joinedload(Article.author),
        selectinload(Article.tags),
        selectinload(Article.favorites),
    ).execution_options(populate_existing=True)
    result = await db.execute(stmt)
    return list(result.unique().scalars().all())


async def _require_article(db: AsyncSession, slug: str) -> Article:
    article = (
        await db.execute(select(Article).where(Article.slug == slug))
    ).scalar_one_or_none()
    if article is None:
        raise NotFound(f"Article '{slug}' not found")
    return article


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

async def get_article(
    db: AsyncSession, slug: str, user_id: int | None = None
) -> ArticleSchema | None:
    """
    Return the public shape of the article identified by *slug*, or None
    when it does not exist.
    """
    articles = await _load_articles(db, select(Article).where(Article.slug == slug))
    if not articles:
        return None
    return _article_to_schema(articles[0], user_id)


async def list_articles(
    db: AsyncSession,
    *,
    author: str | None = None,
    tag: str | None = None,
    favorited: str | None = None,
    limit: int = settings.DEFAULT_PAGE_LIMIT,
    offset: int = 0,
    user_id: int | None = None,
) -> ArticleList:
    """
    Return one page of articles matching every supplied filter plus the
    total match count before pagination.

    Filters that cannot match anything (no article carries *tag*, no user
    is called *favorited*) return an empty list without querying the
    articles table.
    """
    stmt = select(Article)

    if author is not None:
        stmt = stmt.join(User, User.id == Article.created_by).where(User.username == author)

    if tag is not None:
        tagged = select(ArticleTag.article_slug).where(ArticleTag.tag == tag)
        if not (await db.execute(select(tagged.exists()))).scalar():
            return ArticleList(articles=[], articles_count=0)
        stmt = stmt.where(Article.slug.in_(tagged))

    if favorited is not None:
        fan_id = (
            await db.execute(select(User.id).where(User.username == favorited))
        ).scalar_one_or_none()
        if fan_id is None:
            return ArticleList(articles=[], articles_count=0)
        stmt = stmt.where(
            Article.slug.in_(
                select(Favorite.article_slug).where(Favorite.user_id == fan_id)
            )
        )

    total: int = (
        await db.execute(select(func.count()).select_from(stmt.subquery()))
    ).scalar_one()

    page = stmt.order_by(desc(Article.created_at)).offset(offset).limit(limit)
    articles = await _load_articles(db, page)
    return ArticleList(
        articles=[_article_to_schema(a, user_id) for a in articles],
        articles_count=total,
    )


async def get_feed(db: AsyncSession, user_id: int) -> ArticleList:
    """Return every article written by *user_id*, newest first."""
    stmt = (
        select(Article)
        .where(Article.created_by == user_id)
        .order_by(desc(Article.created_at))
    )
    articles = await _load_articles(db, stmt)
    return ArticleList(
        articles=[_article_to_schema(a, user_id) for a in articles],
        articles_count=len(articles),
    )


async def list_tags(db: AsyncSession) -> list[str]:
    """Return every distinct tag in use, alphabetically, via the Redis cache."""
    cached = await cache.get_tags()
    if cached is not None:
        return cached

    result = await db.execute(select(ArticleTag.tag).distinct().order_by(ArticleTag.tag))
    tags = list(result.scalars().all())
    await cache.store_tags(tags)
    return tags


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

async def create_article(
    db: AsyncSession, user_id: int | None, data: NewArticle
) -> ArticleSchema:
    """
    Create an article owned by *user_id* together with its tags.

    The slug is derived from the title and never altered to dodge a
    collision; the unique key on ``articles.slug`` turns a clash into
    ``DuplicateSlug``.
    """
    if user_id is None:
        raise Unauthorized()

    slug = slugify(data.title)
    # A plain INSERT, not session.add(): the database key, not the
    # identity map, decides whether the slug is taken.
    try:
        await db.execute(
            insert(Article).values(
                slug=slug,
                title=data.title,
                body=data.body,
                description=data.description,
                created_by=user_id,
            )
        )
    except IntegrityError as exc:
        raise DuplicateSlug(f"An article with slug '{slug}' already exists") from exc

    # Duplicate tags in the request collapse to one row.
    tags = list(dict.fromkeys(data.tag_list))
    db.add_all(ArticleTag(article_slug=slug, tag=t) for t in tags)
    await db.flush()

    after_commit(db, cache.invalidate_tags)
    logger.info("Article %s created by user %s", slug, user_id)
    return await get_article(db, slug, user_id)


async def update_article(
    db: AsyncSession, user_id: int | None, slug: str, data: UpdateArticle
) -> ArticleSchema:
    """
    Apply a partial update to the article's body and refresh
    ``updated_at``.  Only the article's creator may update it.
    """
    if user_id is None:
        raise Unauthorized()
    article = await _require_article(db, slug)
    if article.created_by != user_id:
        raise Unauthorized("Only the author may update this article")

    values = data.model_dump(exclude_unset=True)
    values["updated_at"] = utcnow()
    await db.execute(
        update(Article)
        .where(Article.slug == slug, Article.created_by == user_id)
        .values(**values)
    )
    return await get_article(db, slug, user_id)


async def delete_article(db: AsyncSession, user_id: int | None, slug: str) -> None:
    """
    Delete the article and every row that references it (favorites, tags,
    comments).  Only the article's creator may delete it.
    """
    if user_id is None:
        raise Unauthorized()
    article = await _require_article(db, slug)
    if article.created_by != user_id:
        raise Unauthorized("Only the author may delete this article")

    # Children first so foreign keys hold at every step.
    await db.execute(delete(Favorite).where(Favorite.article_slug == slug))
    await db.execute(delete(ArticleTag).where(ArticleTag.article_slug == slug))
    await db.execute(delete(Comment).where(Comment.article_slug == slug))
    await db.execute(delete(Article).where(Article.slug == slug))
    await db.flush()

    after_commit(db, cache.invalidate_tags)
    logger.info("Article %s deleted by user %s", slug, user_id)


async def favorite_article(db: AsyncSession, user_id: int | None, slug: str) -> ArticleSchema:
    """Mark *slug* as favorited by *user_id*.  Repeating the call is a no-op."""
    if user_id is None:
        raise Unauthorized()
    await _require_article(db, slug)
    await db.execute(insert_ignore(db, Favorite).values(user_id=user_id, article_slug=slug))
    return await get_article(db, slug, user_id)


async def unfavorite_article(db: AsyncSession, user_id: int | None, slug: str) -> ArticleSchema:
    """Remove *user_id*'s favorite of *slug*, if any."""
    if user_id is None:
        raise Unauthorized()
    await _require_article(db, slug)
    await db.execute(
        delete(Favorite).where(Favorite.user_id == user_id, Favorite.article_slug == slug)
    )
    return await get_article(db, slug, user_id)
