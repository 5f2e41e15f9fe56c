"""warranty tracker tables

Revision ID: 0001_init
Revises: 
Create Date: 2025-01-01 00:00:00
"""
from alembic import op
import sqlalchemy as sa

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=150), nullable=False),
        sa.Column("phone", sa.String(length=20)),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("brand", sa.String(length=100)),
        sa.Column("model", sa.String(length=100)),
        sa.Column("warranty_months", sa.Integer(), server_default="12"),
        *_timestamps(),
    )

    op.create_table(
        "purchases",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column(
            "product_id", sa.Integer(), sa.ForeignKey("products.id"), nullable=False, index=True
        ),
        sa.Column("invoice_number", sa.String(length=100), nullable=False),
        sa.Column("invoice_file_url", sa.Text()),
        sa.Column("purchase_date", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "tickets",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column(
            "purchase_id", sa.Integer(), sa.ForeignKey("purchases.id"), nullable=False, index=True
        ),
        sa.Column("issue_type", sa.String(length=50), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("status", sa.String(length=30), server_default="pending", index=True),
        sa.Column(
            "tracking_code",
            sa.Uuid(),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        *_timestamps(),
    )
    op.create_index("ix_tickets_tracking_code", "tickets", ["tracking_code"], unique=True)

    op.create_table(
        "agent_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "ticket_id", sa.Integer(), sa.ForeignKey("tickets.id"), nullable=False, index=True
        ),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("success", sa.Boolean(), server_default=sa.false()),
        sa.Column("details", sa.Text()),
        *_timestamps(),
    )

    op.create_table(
        "manager_actions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "ticket_id", sa.Integer(), sa.ForeignKey("tickets.id"), nullable=False, index=True
        ),
        sa.Column("approved", sa.Boolean(), server_default=sa.false()),
        sa.Column("remarks", sa.Text()),
        sa.Column(
            "action_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    )

    op.create_table(
        "service_appointments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "ticket_id", sa.Integer(), sa.ForeignKey("tickets.id"), nullable=False, index=True
        ),
        sa.Column("service_center", sa.String(length=150)),
        sa.Column("appointment_date", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table("service_appointments")
    op.drop_table("manager_actions")
    op.drop_table("agent_logs")
    op.drop_index("ix_tickets_tracking_code", table_name="tickets")
    op.drop_table("tickets")
    op.drop_table("purchases")
    op.drop_table("products")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
