"""create AppUsers and password_reset_otps

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa


revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "AppUsers",
        sa.Column("email", sa.String(255), primary_key=True),
        sa.Column("full_name", sa.String(150), nullable=False),
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column("status", sa.Enum("Pending", "Approved", name="user_status", native_enum=False, length=20),
                  nullable=False, server_default="Pending"),
    )
    op.create_index("ix_AppUsers_email", "AppUsers", ["email"])

    op.create_table(
        "password_reset_otps",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("otp", sa.String(10), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("expires_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("used", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_password_reset_otps_id", "password_reset_otps", ["id"])
    op.create_index("ix_password_reset_otps_email_otp", "password_reset_otps", ["email", "otp"])
    op.create_index("ix_password_reset_otps_expires_at", "password_reset_otps", ["expires_at"])


def downgrade() -> None:
    op.drop_table("password_reset_otps")
    op.drop_table("AppUsers")
