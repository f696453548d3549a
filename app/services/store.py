"""Storage contract for profiles and tickets."""

import abc
import uuid
from typing import Any, Iterable, Optional

from app.models.ticket import TicketPriority, TicketStatus
from app.schemas.profile import AgentSummary, ProfileRead
from app.schemas.ticket import TicketRead


class TicketStore(abc.ABC):
    """
    Point lookups, filtered listing, insert and partial update over the
    ``profiles`` and ``tickets`` tables.

    Implementations raise ``StoreError`` with the backend's message when the
    backend fails. Each method is a single backend call; nothing spans
    more than one of them.
    """

    @abc.abstractmethod
    async def get_profile(self, profile_id: uuid.UUID) -> Optional[ProfileRead]:
        ...

    @abc.abstractmethod
    async def get_agent_summaries(
        self, profile_ids: Iterable[uuid.UUID]
    ) -> list[AgentSummary]:
        """Batched ``{id, full_name}`` lookup. Unknown ids are left out."""

    @abc.abstractmethod
    async def get_ticket(self, ticket_id: uuid.UUID) -> Optional[TicketRead]:
        ...

    @abc.abstractmethod
    async def list_tickets(
        self,
        customer_id: Optional[uuid.UUID] = None,
        status: Optional[TicketStatus] = None,
    ) -> list[TicketRead]:
        """Tickets matching the filters, newest ``created_at`` first."""

    @abc.abstractmethod
    async def create_ticket(
        self,
        customer_id: uuid.UUID,
        title: str,
        description: str,
        priority: TicketPriority,
    ) -> TicketRead:
        """Insert an open, unassigned ticket. The store sets id and timestamps."""

    @abc.abstractmethod
    async def update_ticket(
        self, ticket_id: uuid.UUID, changes: dict[str, Any]
    ) -> Optional[TicketRead]:
        """
        Apply ``changes`` (any of ``status``, ``assigned_agent_id``,
        ``updated_at``) and return the stored ticket, or None if it is gone.
        """
