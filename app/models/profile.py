"""Profile model, one row per authenticated identity."""

import enum
import uuid

from sqlalchemy import Enum as EnumType
from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin


class UserRole(enum.Enum):
    CUSTOMER = "customer"
    SUPPORT_AGENT = "support_agent"


class Profile(Base, TimestampMixin):
    __tablename__ = "profiles"

    # This ID is populated with the ID from Supabase's auth.users table.
    # There is no foreign key because auth.users is not part of our metadata.
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        comment="Corresponds to the id of the user in Supabase auth.users.",
    )
    full_name: Mapped[str] = mapped_column(String(255), nullable=True)
    role: Mapped[UserRole] = mapped_column(
        EnumType(
            UserRole,
            name="user_role",
            values_callable=lambda roles: [role.value for role in roles],
        ),
        nullable=False,
        default=UserRole.CUSTOMER,
    )

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, role='{self.role.value}')>"
