"""TicketStore backed by the Supabase PostgREST API."""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Optional

from supabase import AsyncClient, PostgrestAPIError

from app.models.ticket import TicketPriority, TicketStatus
from app.schemas.profile import AgentSummary, ProfileRead
from app.schemas.ticket import TicketRead
from app.services.store import TicketStore
from app.utils.errors import StoreError
from app.utils.logging_config import logger

PROFILES_TABLE = "profiles"
TICKETS_TABLE = "tickets"


def _to_json(value: Any) -> Any:
    """Coerce a column value into something PostgREST accepts."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class SupabaseTicketStore(TicketStore):
    def __init__(self, client: AsyncClient):
        self.client = client

    async def _execute(self, query):
        try:
            return await query.execute()
        except PostgrestAPIError as e:
            message = e.message or str(e)
            logger.error(f"Supabase ticket store error: {message}")
            raise StoreError(message) from e

    async def get_profile(self, profile_id: uuid.UUID) -> Optional[ProfileRead]:
        response = await self._execute(
            self.client.table(PROFILES_TABLE)
            .select("id, full_name, role, created_at")
            .eq("id", str(profile_id))
            .limit(1)
        )
        return ProfileRead.model_validate(response.data[0]) if response.data else None

    async def get_agent_summaries(
        self, profile_ids: Iterable[uuid.UUID]
    ) -> list[AgentSummary]:
        ids = [str(profile_id) for profile_id in profile_ids]
        if not ids:
            return []
        response = await self._execute(
            self.client.table(PROFILES_TABLE).select("id, full_name").in_("id", ids)
        )
        return [AgentSummary.model_validate(row) for row in response.data or []]

    async def get_ticket(self, ticket_id: uuid.UUID) -> Optional[TicketRead]:
        response = await self._execute(
            self.client.table(TICKETS_TABLE)
            .select("*")
            .eq("id", str(ticket_id))
            .limit(1)
        )
        return TicketRead.model_validate(response.data[0]) if response.data else None

    async def list_tickets(
        self,
        customer_id: Optional[uuid.UUID] = None,
        status: Optional[TicketStatus] = None,
    ) -> list[TicketRead]:
        query = (
            self.client.table(TICKETS_TABLE)
            .select("*")
            .order("created_at", desc=True)
        )
        if customer_id is not None:
            query = query.eq("customer_id", str(customer_id))
        if status is not None:
            query = query.eq("status", status.value)
        response = await self._execute(query)
        return [TicketRead.model_validate(row) for row in response.data or []]

    async def create_ticket(
        self,
        customer_id: uuid.UUID,
        title: str,
        description: str,
        priority: TicketPriority,
    ) -> TicketRead:
        response = await self._execute(
            self.client.table(TICKETS_TABLE).insert(
                {
                    "customer_id": str(customer_id),
                    "title": title,
                    "description": description,
                    "priority": priority.value,
                    "status": TicketStatus.OPEN.value,
                }
            )
        )
        if not response.data:
            raise StoreError("Insert returned no row")
        return TicketRead.model_validate(response.data[0])

    async def update_ticket(
        self, ticket_id: uuid.UUID, changes: dict[str, Any]
    ) -> Optional[TicketRead]:
        response = await self._execute(
            self.client.table(TICKETS_TABLE)
            .update({field: _to_json(value) for field, value in changes.items()})
            .eq("id", str(ticket_id))
        )
        return TicketRead.model_validate(response.data[0]) if response.data else None
