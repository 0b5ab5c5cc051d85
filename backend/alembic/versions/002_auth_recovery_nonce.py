"""Add recovery_nonce to auths.

Revision ID: 002
Revises: 001
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column("auths", sa.Column("recovery_nonce", sa.String(64), nullable=True))


def downgrade() -> None:
    op.drop_column("auths", "recovery_nonce")
