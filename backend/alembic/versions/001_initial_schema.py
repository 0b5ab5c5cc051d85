"""Initial schema: auths, users.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "auths",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("hashed_password", sa.String(255), nullable=True),
        sa.Column("google_id", sa.String(255), nullable=True),
        sa.Column("role", sa.Enum("USER", "ADMIN", name="role"), nullable=False, server_default="USER"),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_blocked", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("verification_otp", sa.String(10), nullable=True),
        sa.Column("verification_otp_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("recovery_otp", sa.String(10), nullable=True),
        sa.Column("recovery_otp_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_auths_id", "auths", ["id"])
    op.create_index("ix_auths_email", "auths", ["email"], unique=True)
    op.create_index("ix_auths_google_id", "auths", ["google_id"], unique=True)

    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("auth_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("phone_number", sa.String(64), nullable=True),
        sa.Column("avatar", sa.String(512), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["auth_id"], ["auths.id"]),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_auth_id", "users", ["auth_id"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_users_auth_id", table_name="users")
    op.drop_index("ix_users_id", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_auths_google_id", table_name="auths")
    op.drop_index("ix_auths_email", table_name="auths")
    op.drop_index("ix_auths_id", table_name="auths")
    op.drop_table("auths")
    sa.Enum(name="role").drop(op.get_bind(), checkfirst=True)
