"""create_namedrop_schema

Revision ID: 4c1d7e2a9b10
Revises:
Create Date: 2026-10-12 10:14:37.512904

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "4c1d7e2a9b10"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create users, profiles, link tiles, analytics, domain and moderation tables."""
    op.create_table(
        "users",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("username", sa.String(length=64), nullable=True),
        sa.Column("first_name", sa.String(length=100), nullable=True),
        sa.Column("last_name", sa.String(length=100), nullable=True),
        sa.Column("profile_image_url", sa.String(length=500), nullable=True),
        sa.Column("is_pro", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("is_admin", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("is_banned", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
        sa.UniqueConstraint("username"),
    )

    op.create_table(
        "profiles",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("slug", sa.String(length=32), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=True),
        sa.Column("tagline", sa.String(length=300), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("skills", postgresql.JSONB(), server_default="[]", nullable=True),
        sa.Column("work_history", postgresql.JSONB(), server_default="[]", nullable=True),
        sa.Column("projects", postgresql.JSONB(), server_default="[]", nullable=True),
        sa.Column("social_links", postgresql.JSONB(), server_default="{}", nullable=True),
        sa.Column("resume_url", sa.String(length=500), nullable=True),
        sa.Column("custom_domain", sa.String(length=253), nullable=True),
        sa.Column(
            "custom_domain_verified", sa.Boolean(), server_default=sa.false(), nullable=False
        ),
        sa.Column("theme", sa.String(length=20), server_default="classic", nullable=False),
        sa.Column("is_published", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("seo_title", sa.String(length=200), nullable=True),
        sa.Column("seo_description", sa.String(length=500), nullable=True),
        sa.Column("og_image", sa.String(length=500), nullable=True),
        sa.Column("qr_code_url", sa.String(length=1000), nullable=True),
        sa.Column("view_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("download_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("link_click_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("last_slug_change", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.CheckConstraint(
            "theme IN ('classic', 'modern', 'minimal', 'creative', 'professional')",
            name="ck_profiles_theme",
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id"),
        sa.UniqueConstraint("slug"),
        sa.UniqueConstraint("custom_domain"),
    )
    # Public resolution only ever looks at published profiles
    op.create_index(
        "ix_profiles_published_slug",
        "profiles",
        ["slug"],
        unique=False,
        postgresql_where=sa.text("is_published"),
    )

    op.create_table(
        "external_links",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("profile_id", sa.UUID(), nullable=False),
        sa.Column("label", sa.String(length=100), nullable=False),
        sa.Column("url", sa.String(length=2000), nullable=False),
        sa.Column("icon", sa.String(length=50), nullable=True),
        sa.Column("click_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("position", sa.Integer(), server_default="0", nullable=False),
        sa.ForeignKeyConstraint(["profile_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_external_links_profile_id", "external_links", ["profile_id"])

    op.create_table(
        "profile_views",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("profile_id", sa.UUID(), nullable=False),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("referrer", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["profile_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_profile_views_profile_id",
        "profile_views",
        ["profile_id", sa.text("created_at DESC")],
    )

    op.create_table(
        "link_clicks",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("profile_id", sa.UUID(), nullable=False),
        sa.Column("link_id", sa.UUID(), nullable=True),
        sa.Column("link_url", sa.String(length=2000), nullable=True),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("referrer", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["profile_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_link_clicks_profile_id",
        "link_clicks",
        ["profile_id", sa.text("created_at DESC")],
    )

    op.create_table(
        "domain_verifications",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("profile_id", sa.UUID(), nullable=False),
        sa.Column("domain", sa.String(length=253), nullable=False),
        sa.Column(
            "verification_status", sa.String(length=20), server_default="pending", nullable=False
        ),
        sa.Column("cname_target", sa.String(length=253), nullable=False),
        sa.Column("dns_records", postgresql.JSONB(), server_default="[]", nullable=True),
        sa.Column("ssl_status", sa.String(length=20), server_default="pending", nullable=False),
        sa.Column("ssl_requested_at", sa.DateTime(), nullable=True),
        sa.Column("consecutive_failures", sa.Integer(), server_default="0", nullable=False),
        sa.Column("last_checked", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "verification_status IN ('pending', 'verified', 'failed')",
            name="ck_domain_verifications_status",
        ),
        sa.CheckConstraint(
            "ssl_status IN ('pending', 'issued', 'failed')",
            name="ck_domain_verifications_ssl_status",
        ),
        sa.ForeignKeyConstraint(["profile_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_domain_verifications_profile_id", "domain_verifications", ["profile_id"]
    )
    # Lookup of the active holder of a domain
    op.create_index(
        "ix_domain_verifications_domain_status",
        "domain_verifications",
        ["domain", "verification_status"],
    )
    # Periodic recheck scan
    op.create_index(
        "ix_domain_verifications_status_checked",
        "domain_verifications",
        ["verification_status", "last_checked"],
    )

    op.create_table(
        "moderation_reports",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("profile_id", sa.UUID(), nullable=False),
        sa.Column("reported_by", sa.String(length=255), nullable=True),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=20), server_default="pending", nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "status IN ('pending', 'reviewed', 'dismissed')",
            name="ck_moderation_reports_status",
        ),
        sa.ForeignKeyConstraint(["profile_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_moderation_reports_profile_id", "moderation_reports", ["profile_id"])

    op.create_table(
        "admin_logs",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("admin_id", sa.UUID(), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("resource_type", sa.String(length=50), nullable=False),
        sa.Column("resource_id", sa.String(length=64), nullable=True),
        sa.Column("details", postgresql.JSONB(), nullable=True),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["admin_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_admin_logs_admin_id",
        "admin_logs",
        ["admin_id", sa.text("created_at DESC")],
    )
    op.create_index(
        "ix_admin_logs_resource",
        "admin_logs",
        ["resource_type", "resource_id", sa.text("created_at DESC")],
    )


def downgrade() -> None:
    """Drop all NameDrop tables."""
    op.drop_index("ix_admin_logs_resource", table_name="admin_logs")
    op.drop_index("ix_admin_logs_admin_id", table_name="admin_logs")
    op.drop_table("admin_logs")
    op.drop_index("ix_moderation_reports_profile_id", table_name="moderation_reports")
    op.drop_table("moderation_reports")
    op.drop_index("ix_domain_verifications_status_checked", table_name="domain_verifications")
    op.drop_index("ix_domain_verifications_domain_status", table_name="domain_verifications")
    op.drop_index("ix_domain_verifications_profile_id", table_name="domain_verifications")
    op.drop_table("domain_verifications")
    op.drop_index("ix_link_clicks_profile_id", table_name="link_clicks")
    op.drop_table("link_clicks")
    op.drop_index("ix_profile_views_profile_id", table_name="profile_views")
    op.drop_table("profile_views")
    op.drop_index("ix_external_links_profile_id", table_name="external_links")
    op.drop_table("external_links")
    op.drop_index("ix_profiles_published_slug", table_name="profiles")
    op.drop_table("profiles")
    op.drop_table("users")
