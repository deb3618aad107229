"""Create tasks table

Revision ID: 20250621075439
Revises:
Create Date: 2025-06-21 07:54:39

"""
from typing import Sequence, Union

from alembic import context, op
import sqlalchemy as sa

from src.migrations.errors import IrreversibleMigrationError, SchemaConflictError


# revision identifiers, used by Alembic.
revision: str = '20250621075439'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TABLE_NAME: str = "tasks"


def upgrade() -> None:
    """Upgrade schema."""
    if not context.is_offline_mode() and sa.inspect(op.get_bind()).has_table(TABLE_NAME):
        raise SchemaConflictError(f"table {TABLE_NAME!r} already exists")

    op.create_table(
        TABLE_NAME,
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("description", sa.String(length=255), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        # ids are never handed out again after a delete
        sqlite_autoincrement=True,
    )


def downgrade() -> None:
    """Downgrade schema. Forward-only: the tasks table is never dropped by a migration."""
    raise IrreversibleMigrationError(revision)
