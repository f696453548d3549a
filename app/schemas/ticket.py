"""Pydantic schemas for ticket requests and responses."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.ticket import TicketPriority, TicketStatus
from app.schemas.profile import AgentSummary


class TicketCreate(BaseModel):
    # Emptiness and enum membership are checked by the ticket service so
    # that they surface as 400s with the service's own messages.
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None


class TicketUpdate(BaseModel):
    status: Optional[str] = None
    assigned_agent_id: Optional[str] = Field(
        default=None,
        description="Agent to assign. An explicit null unassigns the ticket.",
    )


class TicketRead(BaseModel):
    id: uuid.UUID
    customer_id: uuid.UUID
    title: str
    description: str
    priority: TicketPriority
    status: TicketStatus
    assigned_agent_id: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TicketWithAgent(TicketRead):
    """A ticket with its assigned agent's display name denormalized in."""

    assigned_agent: Optional[AgentSummary] = None


class TicketStats(BaseModel):
    total: int = 0
    open: int = 0
    in_progress: int = 0
    resolved: int = 0
    assigned_to_me: int = 0
