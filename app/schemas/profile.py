import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from app.models.profile import UserRole


class AgentSummary(BaseModel):
    """The slice of an agent's profile embedded in ticket responses."""

    id: uuid.UUID
    full_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ProfileRead(BaseModel):
    id: uuid.UUID
    full_name: Optional[str] = None
    role: UserRole
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
