"""Create followers table

Revision ID: 0003
Revises: 0002
Create Date: 2022-04-25 19:23:42

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0003"
down_revision = "0002"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "followers",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("following_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["following_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "following_id"),
    )
    op.create_index(
        op.f("ix_followers_following_id"), "followers", ["following_id"], unique=False
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_followers_following_id"), table_name="followers")
    op.drop_table("followers")
