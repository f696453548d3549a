"""create profiles and tickets

Revision ID: 3f1c9a7d2b64
Revises:
Create Date: 2026-10-19 09:12:40.118302

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3f1c9a7d2b64"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = postgresql.ENUM("customer", "support_agent", name="user_role")
ticket_status = postgresql.ENUM("open", "in_progress", "resolved", name="ticket_status")
ticket_priority = postgresql.ENUM("low", "medium", "high", name="ticket_priority")


def upgrade() -> None:
    """Create the profiles and tickets tables."""
    op.create_table(
        "profiles",
        sa.Column(
            "id",
            sa.Uuid(),
            nullable=False,
            comment="Corresponds to the id of the user in Supabase auth.users.",
        ),
        sa.Column("full_name", sa.String(length=255), nullable=True),
        sa.Column("role", user_role, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
            comment="The time the record was created.",
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
            comment="The time the record was last updated.",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "tickets",
        sa.Column(
            "id",
            sa.Uuid(),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
            comment="The unique identifier for the record.",
        ),
        sa.Column("customer_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column(
            "priority",
            ticket_priority,
            server_default="medium",
            nullable=False,
        ),
        sa.Column("status", ticket_status, server_default="open", nullable=False),
        sa.Column(
            "assigned_agent_id",
            sa.Uuid(),
            nullable=True,
            comment="Support agent currently working the ticket, if any.",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
            comment="The time the record was created.",
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
            comment="The time the record was last updated.",
        ),
        sa.ForeignKeyConstraint(["customer_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_tickets_customer_id", "tickets", ["customer_id"])
    op.create_index("ix_tickets_assigned_agent_id", "tickets", ["assigned_agent_id"])
    op.create_index("ix_tickets_created_at", "tickets", [sa.text("created_at DESC")])


def downgrade() -> None:
    """Drop the profiles and tickets tables."""
    op.drop_index("ix_tickets_created_at", table_name="tickets")
    op.drop_index("ix_tickets_assigned_agent_id", table_name="tickets")
    op.drop_index("ix_tickets_customer_id", table_name="tickets")
    op.drop_table("tickets")
    op.drop_table("profiles")
    ticket_priority.drop(op.get_bind(), checkfirst=True)
    ticket_status.drop(op.get_bind(), checkfirst=True)
    user_role.drop(op.get_bind(), checkfirst=True)
