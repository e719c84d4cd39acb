"""Create articles, articles_tags and favorites tables

Revision ID: 0002
Revises: 0001
Create Date: 2022-04-04 05:52:08

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "articles",
        sa.Column("slug", sa.String(length=60), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("body", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("slug"),
    )
    op.create_index(op.f("ix_articles_created_at"), "articles", ["created_at"], unique=False)
    op.create_index(op.f("ix_articles_created_by"), "articles", ["created_by"], unique=False)

    op.create_table(
        "articles_tags",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("article_slug", sa.String(length=60), nullable=False),
        sa.Column("tag", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["article_slug"], ["articles.slug"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("article_slug", "tag", name="uq_articles_tags_slug_tag"),
    )
    op.create_index(
        op.f("ix_articles_tags_article_slug"), "articles_tags", ["article_slug"], unique=False
    )
    op.create_index(op.f("ix_articles_tags_tag"), "articles_tags", ["tag"], unique=False)

    op.create_table(
        "favorites",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("article_slug", sa.String(length=60), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["article_slug"], ["articles.slug"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "article_slug"),
    )
    op.create_index(
        op.f("ix_favorites_article_slug"), "favorites", ["article_slug"], unique=False
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_favorites_article_slug"), table_name="favorites")
    op.drop_table("favorites")
    op.drop_index(op.f("ix_articles_tags_tag"), table_name="articles_tags")
    op.drop_index(op.f("ix_articles_tags_article_slug"), table_name="articles_tags")
    op.drop_table("articles_tags")
    op.drop_index(op.f("ix_articles_created_by"), table_name="articles")
    op.drop_index(op.f("ix_articles_created_at"), table_name="articles")
    op.drop_table("articles")
