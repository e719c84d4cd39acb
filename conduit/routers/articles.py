from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.config import settings
from conduit.database import commit, get_db
from conduit.dependencies import (
    ArticleFilterParams,
    PaginationParams,
    get_current_user_id,
    get_optional_user_id,
)
from conduit.errors import NotFound
from conduit.schemas import (
    ArticleEnvelope,
    ArticleList,
    CommentEnvelope,
    CommentList,
    NewArticleRequest,
    NewCommentRequest,
    UpdateArticleRequest,
)
from conduit.services import article_service, comment_service

router = APIRouter(prefix=f"{settings.API_PREFIX}/articles", tags=["articles"])


@router.get("", response_model=ArticleList)
async def list_articles(
    filters: ArticleFilterParams = Depends(),
    pagination: PaginationParams = Depends(),
    user_id: int | None = Depends(get_optional_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await article_service.list_articles(
        db,
        author=filters.author,
        tag=filters.tag,
        favorited=filters.favorited,
        limit=pagination.limit,
        offset=pagination.offset,
        user_id=user_id,
    )


# Declared before "/{slug}" so "feed" is not taken for a slug.
@router.get("/feed", response_model=ArticleList)
async def get_feed(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await article_service.get_feed(db, user_id)


@router.post("", status_code=201, response_model=ArticleEnvelope)
async def create_article(
    data: NewArticleRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    article = await article_service.create_article(db, user_id, data.article)
    await commit(db)
    return ArticleEnvelope(article=article)


@router.get("/{slug}", response_model=ArticleEnvelope)
async def get_article(
    slug: str,
    user_id: int | None = Depends(get_optional_user_id),
    db: AsyncSession = Depends(get_db),
):
    article = await article_service.get_article(db, slug, user_id)
    if not article:
        raise NotFound(f"Article '{slug}' not found")
    return ArticleEnvelope(article=article)


@router.put("/{slug}", response_model=ArticleEnvelope)
async def update_article(
    slug: str,
    data: UpdateArticleRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    article = await article_service.update_article(db, user_id, slug, data.article)
    await commit(db)
    return ArticleEnvelope(article=article)


@router.delete("/{slug}", status_code=204)
async def delete_article(
    slug: str,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    await article_service.delete_article(db, user_id, slug)
    await commit(db)
    return Response(status_code=204)


@router.post("/{slug}/favorite", response_model=ArticleEnvelope)
async def favorite_article(
    slug: str,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    article = await article_service.favorite_article(db, user_id, slug)
    await commit(db)
    return ArticleEnvelope(article=article)


@router.delete("/{slug}/favorite", response_model=ArticleEnvelope)
async def unfavorite_article(
    slug: str,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    article = await article_service.unfavorite_article(db, user_id, slug)
    await commit(db)
    return ArticleEnvelope(article=article)


@router.get("/{slug}/comments", response_model=CommentList)
async def list_comments(
    slug: str,
    user_id: int | None = Depends(get_optional_user_id),
    db: AsyncSession = Depends(get_db),
):
    return CommentList(comments=await comment_service.list_comments(db, slug, user_id))


@router.post("/{slug}/comments", status_code=201, response_model=CommentEnvelope)
async def add_comment(
    slug: str,
    data: NewCommentRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    comment = await comment_service.add_comment(db, user_id, slug, data.comment)
    await commit(db)
    return CommentEnvelope(comment=comment)


@router.delete("/{slug}/comments/{comment_id}", status_code=204)
async def delete_comment(
    slug: str,
    comment_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    await comment_service.delete_comment(db, user_id, slug, comment_id)
    await commit(db)
    return Response(status_code=204)
