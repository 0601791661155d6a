"""initial

Revision ID: 0001_initial
Revises: 
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("role", sa.Enum("CLIENT", "SELLER", "ADMIN", name="userrole"), nullable=False),
        sa.Column("status", sa.Enum("ACTIVE", "SUSPENDED", "BANNED", name="userstatus"), nullable=False),
        sa.Column("balance", sa.Numeric(14, 4), nullable=False, server_default="0"),
        sa.Column("api_key", sa.String(64), nullable=True),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reset_token", sa.String(128), nullable=True),
        sa.Column("reset_token_expires_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_api_key", "users", ["api_key"], unique=True)
    op.create_index("ix_users_reset_token", "users", ["reset_token"])
    op.create_index("ix_users_role_status", "users", ["role", "status"])

    op.create_table(
        "categories",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="active"),
        *_timestamps(),
    )
    op.create_index("ix_categories_id", "categories", ["id"])
    op.create_index("ix_categories_status_name", "categories", ["status", "name"])

    op.create_table(
        "services",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("category_id", sa.Integer, sa.ForeignKey("categories.id"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("price", sa.Numeric(14, 4), nullable=False),
        sa.Column("reseller_price", sa.Numeric(14, 4), nullable=False),
        sa.Column("min_quantity", sa.Integer, nullable=False, server_default="100"),
        sa.Column("max_quantity", sa.Integer, nullable=False, server_default="10000"),
        sa.Column("speed", sa.String(32), nullable=False, server_default="fast"),
        sa.Column("status", sa.String(16), nullable=False, server_default="active"),
        sa.Column("api_service_id", sa.String(64), nullable=True, unique=True),
        *_timestamps(),
    )
    op.create_index("ix_services_id", "services", ["id"])
    op.create_index("ix_services_category_id", "services", ["category_id"])
    op.create_index("ix_services_category_status", "services", ["category_id", "status"])

    op.create_table(
        "orders",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("service_id", sa.Integer, sa.ForeignKey("services.id"), nullable=False),
        sa.Column("seller_id", sa.Integer, sa.ForeignKey("users.id"), nullable=True),
        sa.Column("link", sa.String(500), nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False),
        sa.Column("price", sa.Numeric(14, 4), nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "PENDING",
                "PROCESSING",
                "IN_PROGRESS",
                "COMPLETED",
                "PARTIAL",
                "CANCELED",
                "REFUNDED",
                name="orderstatus",
            ),
            nullable=False,
        ),
        sa.Column("start_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("remains", sa.Integer, nullable=False, server_default="0"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_orders_id", "orders", ["id"])
    op.create_index("ix_orders_user_status", "orders", ["user_id", "status"])
    op.create_index("ix_orders_seller_status", "orders", ["seller_id", "status"])

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "type",
            sa.Enum("DEPOSIT", "ORDER", "REFUND", "ADMIN_ADD", "ADMIN_REMOVE", name="transactiontype"),
            nullable=False,
        ),
        sa.Column("amount", sa.Numeric(14, 4), nullable=False),
        sa.Column("balance_before", sa.Numeric(14, 4), nullable=False),
        sa.Column("balance_after", sa.Numeric(14, 4), nullable=False),
        sa.Column("order_id", sa.Integer, sa.ForeignKey("orders.id"), nullable=True),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("created_by", sa.Integer, sa.ForeignKey("users.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_transactions_id", "transactions", ["id"])
    op.create_index("ix_transactions_user_type", "transactions", ["user_id", "type"])
    op.create_index("ix_transactions_order_id", "transactions", ["order_id"])

    op.create_table(
        "tickets",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("subject", sa.String(200), nullable=False),
        sa.Column("status", sa.Enum("OPEN", "ANSWERED", "CLOSED", name="ticketstatus"), nullable=False),
        sa.Column("priority", sa.Enum("LOW", "MEDIUM", "HIGH", name="ticketpriority"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_tickets_id", "tickets", ["id"])
    op.create_index("ix_tickets_user_id", "tickets", ["user_id"])
    op.create_index("ix_tickets_status_created", "tickets", ["status", "created_at"])

    op.create_table(
        "ticket_messages",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("ticket_id", sa.Integer, sa.ForeignKey("tickets.id"), nullable=False),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("is_admin", sa.Boolean, nullable=False, server_default=sa.text("false")),
        *_timestamps(),
    )
    op.create_index("ix_ticket_messages_id", "ticket_messages", ["id"])
    op.create_index("ix_ticket_messages_ticket_id", "ticket_messages", ["ticket_id"])

    op.create_table(
        "coupons",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("code", sa.String(50), nullable=False),
        sa.Column("discount_type", sa.Enum("PERCENTAGE", "FIXED", name="discounttype"), nullable=False),
        sa.Column("discount_value", sa.Numeric(14, 4), nullable=False),
        sa.Column("max_discount", sa.Numeric(14, 4), nullable=True),
        sa.Column("usage_limit", sa.Integer, nullable=True),
        sa.Column("used_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("valid_from", sa.DateTime(timezone=True), nullable=True),
        sa.Column("valid_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="active"),
        *_timestamps(),
    )
    op.create_index("ix_coupons_id", "coupons", ["id"])
    op.create_index("ix_coupons_code", "coupons", ["code"], unique=True)

    op.create_table(
        "coupon_usage",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("coupon_id", sa.Integer, sa.ForeignKey("coupons.id"), nullable=False),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("order_id", sa.Integer, sa.ForeignKey("orders.id"), nullable=True),
        sa.Column("discount_amount", sa.Numeric(14, 4), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_coupon_usage_id", "coupon_usage", ["id"])
    op.create_index("ix_coupon_usage_coupon_id", "coupon_usage", ["coupon_id"])
    op.create_index("ix_coupon_usage_user", "coupon_usage", ["user_id", "coupon_id"])

    op.create_table(
        "settings",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("setting_key", sa.String(100), nullable=False),
        sa.Column("setting_value", sa.Text, nullable=True),
        sa.Column("setting_type", sa.String(16), nullable=False, server_default="string"),
        *_timestamps(),
    )
    op.create_index("ix_settings_id", "settings", ["id"])
    op.create_index("ix_settings_setting_key", "settings", ["setting_key"], unique=True)

    op.create_table(
        "login_logs",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("user_agent", sa.String(512), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_login_logs_id", "login_logs", ["id"])
    op.create_index("ix_login_logs_status_created", "login_logs", ["status", "created_at"])
    op.create_index("ix_login_logs_user_id", "login_logs", ["user_id"])

    op.create_table(
        "api_logs",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=True),
        sa.Column("endpoint", sa.String(255), nullable=False),
        sa.Column("method", sa.String(8), nullable=False),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("request_data", sa.JSON, nullable=True),
        sa.Column("response_data", sa.JSON, nullable=True),
        sa.Column("status_code", sa.Integer, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_api_logs_id", "api_logs", ["id"])
    op.create_index("ix_api_logs_user_created", "api_logs", ["user_id", "created_at"])

    op.create_table(
        "affiliates",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False, unique=True),
        sa.Column("referral_code", sa.String(32), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="active"),
        *_timestamps(),
    )
    op.create_index("ix_affiliates_id", "affiliates", ["id"])
    op.create_index("ix_affiliates_referral_code", "affiliates", ["referral_code"], unique=True)

    op.create_table(
        "affiliate_referrals",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("affiliate_id", sa.Integer, sa.ForeignKey("affiliates.id"), nullable=False),
        sa.Column("referred_user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False, unique=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        *_timestamps(),
    )
    op.create_index("ix_affiliate_referrals_id", "affiliate_referrals", ["id"])
    op.create_index(
        "ix_affiliate_referrals_affiliate_status",
        "affiliate_referrals",
        ["affiliate_id", "status"],
    )


def downgrade():
    op.drop_table("affiliate_referrals")
    op.drop_table("affiliates")
    op.drop_table("api_logs")
    op.drop_table("login_logs")
    op.drop_table("settings")
    op.drop_table("coupon_usage")
    op.drop_table("coupons")
    op.drop_table("ticket_messages")
    op.drop_table("tickets")
    op.drop_table("transactions")
    op.drop_table("orders")
    op.drop_table("services")
    op.drop_table("categories")
    op.drop_table("users")
    for enum_name in (
        "discounttype",
        "ticketpriority",
        "ticketstatus",
        "transactiontype",
        "orderstatus",
        "userstatus",
        "userrole",
    ):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
