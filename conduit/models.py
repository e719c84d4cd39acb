from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from conduit.database import Base

MAX_SLUG_LENGTH = 60


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def isoformat_utc(value: datetime) -> str:
    """
    Render *value* as ISO-8601 UTC with millisecond precision,
    e.g. ``2022-04-01T21:51:00.000Z``.

    Naive values (SQLite returns these) are taken to be UTC already.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------
class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    # Only the most recently issued token is valid.
    token: Mapped[Optional[str]] = mapped_column(Text, nullable=True, index=True)


# ---------------------------------------------------------------------------
# Article
# ---------------------------------------------------------------------------
class Article(Base):
    __tablename__ = "articles"

    slug: Mapped[str] = mapped_column(String(MAX_SLUG_LENGTH), primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    body: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )
    # Set explicitly on content updates only; favorites never touch it.
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # Foreign key
    created_by: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )

    # Relationships are read-only views; rows are written through their own tables.
    author: Mapped["User"] = relationship("User", lazy="noload", viewonly=True)
    tags: Mapped[List["ArticleTag"]] = relationship(
        "ArticleTag", lazy="noload", viewonly=True, order_by="ArticleTag.id"
    )
    favorites: Mapped[List["Favorite"]] = relationship(
        "Favorite", lazy="noload", viewonly=True
    )


# ---------------------------------------------------------------------------
# Article tags
# ---------------------------------------------------------------------------
class ArticleTag(Base):
    __tablename__ = "articles_tags"
    __table_args__ = (UniqueConstraint("article_slug", "tag", name="uq_articles_tags_slug_tag"),)

    # Surrogate key keeps tag lists in insertion order.
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    article_slug: Mapped[str] = mapped_column(
        String(MAX_SLUG_LENGTH),
        ForeignKey("articles.slug", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tag: Mapped[str] = mapped_column(Text, nullable=False, index=True)


# ---------------------------------------------------------------------------
# Favorites
# ---------------------------------------------------------------------------
class Favorite(Base):
    __tablename__ = "favorites"

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    article_slug: Mapped[str] = mapped_column(
        String(MAX_SLUG_LENGTH),
        ForeignKey("articles.slug", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )


# ---------------------------------------------------------------------------
# Followers
# ---------------------------------------------------------------------------
class Follow(Base):
    __tablename__ = "followers"

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    following_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True
    )


# ---------------------------------------------------------------------------
# Comment
# ---------------------------------------------------------------------------
class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # Foreign keys
    article_slug: Mapped[str] = mapped_column(
        String(MAX_SLUG_LENGTH),
        ForeignKey("articles.slug", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Relationships
    author: Mapped["User"] = relationship("User", lazy="noload", viewonly=True)
