"""businesses and reviews

Revision ID: 0001_directory
Revises: 
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_directory"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "businesses",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("category", sa.Text(), nullable=False),
        sa.Column("location", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("phone", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("email", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("website", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("hours", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("image", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("latitude", sa.Float()),
        sa.Column("longitude", sa.Float()),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("status IN ('pending', 'approved')", name="businesses_status_check"),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "reviews",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("business_id", sa.Integer(), sa.ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("reviewer_name", sa.Text(), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="reviews_rating_check"),
        sqlite_autoincrement=True,
    )

    op.create_index("businesses_status_idx", "businesses", ["status"])
    op.create_index("businesses_category_idx", "businesses", ["category"])
    op.create_index("reviews_business_idx", "reviews", ["business_id"])


def downgrade():
    op.drop_index("reviews_business_idx", table_name="reviews")
    op.drop_index("businesses_category_idx", table_name="businesses")
    op.drop_index("businesses_status_idx", table_name="businesses")

    op.drop_table("reviews")
    op.drop_table("businesses")
