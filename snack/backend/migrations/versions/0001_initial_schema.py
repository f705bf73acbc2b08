"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18 00:00:00
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("username", sa.String(30), nullable=True),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("profile_picture_url", sa.Text(), nullable=True),
        sa.Column("profile_is_public", sa.Boolean(), nullable=False),
        sa.Column("stripe_account_id", sa.String(255), nullable=True),
        sa.Column("stripe_account_status", sa.String(20), nullable=False),
        sa.Column("stripe_connected_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_stripe_account_id", "users", ["stripe_account_id"])

    op.create_table(
        "lists",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("public_id", sa.String(16), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("emoji", sa.String(16), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.Column("price_cents", sa.Integer(), nullable=True),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("view_mode", sa.String(10), nullable=False),
        sa.Column("save_count", sa.Integer(), nullable=False),
        sa.Column("view_count", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_lists_user_id", "lists", ["user_id"])
    op.create_index("ix_lists_public_id", "lists", ["public_id"], unique=True)
    op.create_index("ix_lists_is_public", "lists", ["is_public"])

    op.create_table(
        "links",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("list_id", sa.String(), sa.ForeignKey("lists.id", ondelete="CASCADE"), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("favicon_url", sa.Text(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_links_list_id_position", "links", ["list_id", "position"])

    op.create_table(
        "saved_lists",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("list_id", sa.String(), sa.ForeignKey("lists.id", ondelete="CASCADE"), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("user_id", "list_id", name="uq_saved_lists_user_list"),
    )
    op.create_index("ix_saved_lists_user_id", "saved_lists", ["user_id"])
    op.create_index("ix_saved_lists_list_id", "saved_lists", ["list_id"])

    op.create_table(
        "list_purchases",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("list_id", sa.String(), sa.ForeignKey("lists.id", ondelete="CASCADE"), nullable=False),
        sa.Column("amount_paid", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("platform_fee", sa.Integer(), nullable=False),
        sa.Column("creator_earnings", sa.Integer(), nullable=False),
        sa.Column("stripe_payment_intent_id", sa.String(255), nullable=False, unique=True),
        sa.Column("stripe_charge_id", sa.String(255), nullable=True),
        sa.Column("stripe_receipt_url", sa.Text(), nullable=True),
        sa.Column("purchased_at", sa.DateTime(), nullable=False),
        sa.Column("refunded_at", sa.DateTime(), nullable=True),
        sa.Column("refund_reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_list_purchases_user_id", "list_purchases", ["user_id"])
    op.create_index("ix_list_purchases_list_id", "list_purchases", ["list_id"])
    op.create_index("ix_list_purchases_stripe_charge_id", "list_purchases", ["stripe_charge_id"])

    op.create_table(
        "extension_auth_codes",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("code", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("callback_url", sa.Text(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("used_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_extension_auth_codes_code", "extension_auth_codes", ["code"], unique=True)

    op.create_table(
        "extension_tokens",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("access_token", sa.String(128), nullable=False),
        sa.Column("refresh_token", sa.String(128), nullable=False),
        sa.Column("access_token_expires_at", sa.DateTime(), nullable=False),
        sa.Column("refresh_token_expires_at", sa.DateTime(), nullable=False),
        sa.Column("last_used_at", sa.DateTime(), nullable=True),
        sa.Column("revoked_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_extension_tokens_user_id", "extension_tokens", ["user_id"])
    op.create_index("ix_extension_tokens_access_token", "extension_tokens", ["access_token"], unique=True)
    op.create_index("ix_extension_tokens_refresh_token", "extension_tokens", ["refresh_token"], unique=True)

    op.create_table(
        "link_clicks",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("link_id", sa.String(), sa.ForeignKey("links.id", ondelete="CASCADE"), nullable=False),
        sa.Column("list_id", sa.String(), sa.ForeignKey("lists.id", ondelete="CASCADE"), nullable=False),
        sa.Column("clicker_id", sa.String(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("clicker_ip", sa.String(64), nullable=True),
        sa.Column("clicker_user_agent", sa.Text(), nullable=True),
        sa.Column("referrer", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_link_clicks_link_id", "link_clicks", ["link_id"])
    op.create_index("ix_link_clicks_list_id", "link_clicks", ["list_id"])

    op.create_table(
        "list_views",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("list_id", sa.String(), sa.ForeignKey("lists.id", ondelete="CASCADE"), nullable=False),
        sa.Column("viewer_id", sa.String(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("viewer_ip", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_list_views_list_id", "list_views", ["list_id"])


def downgrade() -> None:
    op.drop_table("list_views")
    op.drop_table("link_clicks")
    op.drop_table("extension_tokens")
    op.drop_table("extension_auth_codes")
    op.drop_table("list_purchases")
    op.drop_table("saved_lists")
    op.drop_table("links")
    op.drop_table("lists")
    op.drop_table("users")
