# mypy: ignore-errors
"""
Migration Alembic pour créer les tables users, weddings et wedding_access.

`wedding_access` porte le rôle (`access_level`) et le blob JSON `permissions`, avec au plus une
ligne par couple (user_id, wedding_id).
"""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "20260301_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Crée les trois tables nécessaires au compte à rebours et au contrôle d'accès."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("role", sa.String(length=32), nullable=False, server_default="user"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "weddings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("unique_url", sa.String(length=255), nullable=False, unique=True),
        sa.Column("bride", sa.String(length=255), nullable=False),
        sa.Column("groom", sa.String(length=255), nullable=False),
        sa.Column("wedding_date", sa.Date(), nullable=False),
        sa.Column("wedding_time", sa.String(length=32), nullable=False, server_default="4:00 PM"),
        sa.Column(
            "timezone", sa.String(length=64), nullable=False, server_default="Asia/Tashkent"
        ),
        sa.Column("venue", sa.String(length=255), nullable=False),
        sa.Column("venue_address", sa.String(length=512), nullable=False, server_default=""),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("available_languages", sa.JSON(), nullable=False),
        sa.Column("default_language", sa.String(length=8), nullable=False, server_default="en"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "wedding_access",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("wedding_id", sa.Integer(), sa.ForeignKey("weddings.id"), nullable=False),
        sa.Column("access_level", sa.String(length=32), nullable=False, server_default="viewer"),
        sa.Column("permissions", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("user_id", "wedding_id", name="uq_wedding_access_user_wedding"),
    )


def downgrade() -> None:
    """Supprime les tables dans l'ordre inverse des dépendances."""
    op.drop_table("wedding_access")
    op.drop_table("weddings")
    op.drop_table("users")
