from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3f2a9c1d7e40"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "languages",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("culture", sa.String(length=20), nullable=False),
        sa.Column("is_default", sa.Boolean(), nullable=False),
        sa.UniqueConstraint("culture"),
    )
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=120), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column(
            "role", sa.Enum("ADMIN", "STAFF", name="userrole"),
            nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("time_zone_id", sa.String(length=64), nullable=True),
        sa.Column(
            "language_id", sa.Integer(), sa.ForeignKey("languages.id"),
            nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("last_login_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "stores",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False),
    )
    op.create_table(
        "locale_string_resources",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "language_id", sa.Integer(),
            sa.ForeignKey("languages.id", ondelete="CASCADE"),
            nullable=False),
        sa.Column("resource_name", sa.String(length=200), nullable=False),
        sa.Column("resource_value", sa.Text(), nullable=False),
        sa.UniqueConstraint(
            "language_id", "resource_name",
            name="uq_language_resource_name"),
    )
    op.create_index(
        "ix_locale_string_resources_language_id",
        "locale_string_resources", ["language_id"])

    op.create_table(
        "settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("value", sa.Text(), nullable=True),
        sa.Column("store_id", sa.Integer(), nullable=False),
        sa.Column("language_id", sa.Integer(), nullable=False),
        sa.UniqueConstraint(
            "name", "store_id", "language_id", name="uq_setting_scope"),
    )
    op.create_index("ix_settings_name", "settings", ["name"])

    op.create_table(
        "currencies",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("code", sa.String(length=5), nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("symbol", sa.String(length=10), nullable=True),
        sa.Column("rounding_decimals", sa.Integer(), nullable=False),
        sa.Column("is_primary", sa.Boolean(), nullable=False),
        sa.UniqueConstraint("code"),
    )
    op.create_table(
        "addresses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("first_name", sa.String(length=100), nullable=True),
        sa.Column("last_name", sa.String(length=100), nullable=True),
        sa.Column("email", sa.String(length=120), nullable=True),
        sa.Column("company", sa.String(length=200), nullable=True),
        sa.Column("city", sa.String(length=100), nullable=True),
        sa.Column("address1", sa.String(length=200), nullable=True),
    )
    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=120), nullable=True),
        sa.Column("first_name", sa.String(length=100), nullable=True),
        sa.Column("last_name", sa.String(length=100), nullable=True),
        sa.Column(
            "billing_address_id", sa.Integer(),
            sa.ForeignKey("addresses.id", ondelete="SET NULL"),
            nullable=True),
        sa.Column(
            "shipping_address_id", sa.Integer(),
            sa.ForeignKey("addresses.id", ondelete="SET NULL"),
            nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_customers_email", "customers", ["email"])

    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=400), nullable=False),
        sa.Column("sku", sa.String(length=100), nullable=True),
        sa.Column("product_type_id", sa.Integer(), nullable=False),
    )
    op.create_index("ix_products_name", "products", ["name"])
    op.create_index("ix_products_sku", "products", ["sku"])

    op.create_table(
        "orders",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_number", sa.String(length=50), nullable=True),
        sa.Column("customer_id", sa.Integer(), nullable=False),
        sa.Column("store_id", sa.Integer(), nullable=False),
        sa.Column("order_status_id", sa.Integer(), nullable=False),
        sa.Column("customer_language_id", sa.Integer(), nullable=True),
        sa.Column("reward_points_were_added", sa.Boolean(), nullable=False),
        sa.Column("created_on_utc", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_orders_customer_id", "orders", ["customer_id"])

    op.create_table(
        "order_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "order_id", sa.Integer(),
            sa.ForeignKey("orders.id", ondelete="CASCADE"),
            nullable=False),
        sa.Column(
            "product_id", sa.Integer(), sa.ForeignKey("products.id"),
            nullable=False),
        sa.Column(
            "unit_price_incl_tax", sa.Numeric(18, 4), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("attribute_description", sa.Text(), nullable=True),
        sa.CheckConstraint(
            "quantity > 0", name="check_order_quantity_positive"),
    )
    op.create_index("ix_order_items_order_id", "order_items", ["order_id"])
    op.create_index(
        "ix_order_items_product_id", "order_items", ["product_id"])

    op.create_table(
        "return_requests",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_item_id", sa.Integer(), nullable=False),
        sa.Column("customer_id", sa.Integer(), nullable=False),
        sa.Column("store_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column(
            "return_request_status_id", sa.Integer(), nullable=False),
        sa.Column("reason_for_return", sa.String(length=400), nullable=True),
        sa.Column("requested_action", sa.String(length=400), nullable=True),
        sa.Column(
            "requested_action_updated_on_utc", sa.DateTime(), nullable=True),
        sa.Column("customer_comments", sa.Text(), nullable=True),
        sa.Column("staff_notes", sa.Text(), nullable=True),
        sa.Column("admin_comment", sa.Text(), nullable=True),
        sa.Column("created_on_utc", sa.DateTime(), nullable=False),
        sa.Column("updated_on_utc", sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "quantity > 0", name="check_return_quantity_positive"),
    )
    op.create_index(
        "ix_return_requests_order_item_id",
        "return_requests", ["order_item_id"])
    op.create_index(
        "ix_return_requests_customer_id", "return_requests", ["customer_id"])
    op.create_index(
        "ix_return_requests_store_id", "return_requests", ["store_id"])
    op.create_index(
        "ix_return_requests_return_request_status_id",
        "return_requests", ["return_request_status_id"])
    op.create_index(
        "ix_return_requests_created_on_utc",
        "return_requests", ["created_on_utc"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "actor_id", sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True),
        sa.Column("actor_role", sa.String(length=20), nullable=False),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("target_type", sa.String(length=50), nullable=True),
        sa.Column("target_id", sa.Integer(), nullable=True),
        sa.Column("ip", sa.String(length=45), nullable=True),
        sa.Column("user_agent", sa.String(length=500), nullable=True),
        sa.Column("payload_json", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index(
        "ix_audit_logs_created_at", "audit_logs", ["created_at"])


def downgrade():
    op.drop_table("audit_logs")
    op.drop_table("return_requests")
    op.drop_table("order_items")
    op.drop_table("orders")
    op.drop_table("products")
    op.drop_table("customers")
    op.drop_table("addresses")
    op.drop_table("currencies")
    op.drop_table("settings")
    op.drop_table("locale_string_resources")
    op.drop_table("stores")
    op.drop_table("users")
    op.drop_table("languages")
