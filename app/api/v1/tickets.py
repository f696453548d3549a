from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_current_profile, get_ticket_store
from app.schemas.profile import ProfileRead
from app.schemas.ticket import (
    TicketCreate,
    TicketRead,
    TicketStats,
    TicketUpdate,
    TicketWithAgent,
)
from app.services import tickets as ticket_service
from app.services.store import TicketStore

router = APIRouter()


@router.get("", response_model=list[TicketWithAgent])
async def list_tickets(
    status_filter: Optional[str] = Query(None, alias="status"),
    caller: ProfileRead = Depends(get_current_profile),
    store: TicketStore = Depends(get_ticket_store),
):
    """
    List tickets, newest first. Customers get their own tickets only,
    support agents get every ticket.
    """
    return await ticket_service.list_tickets(store, caller, status=status_filter)


@router.post("", response_model=TicketRead, status_code=status.HTTP_201_CREATED)
async def create_ticket(
    payload: TicketCreate,
    caller: ProfileRead = Depends(get_current_profile),
    store: TicketStore = Depends(get_ticket_store),
):
    return await ticket_service.create_ticket(store, caller, payload)


@router.get("/stats", response_model=TicketStats)
async def get_ticket_stats(
    caller: ProfileRead = Depends(get_current_profile),
    store: TicketStore = Depends(get_ticket_store),
):
    return await ticket_service.ticket_stats(store, caller)


@router.get("/{ticket_id}", response_model=TicketWithAgent)
async def get_ticket(
    ticket_id: str,
    caller: ProfileRead = Depends(get_current_profile),
    store: TicketStore = Depends(get_ticket_store),
):
    return await ticket_service.get_ticket(store, caller, ticket_id)


@router.patch("/{ticket_id}", response_model=TicketWithAgent)
async def update_ticket(
    ticket_id: str,
    payload: TicketUpdate,
    caller: ProfileRead = Depends(get_current_profile),
    store: TicketStore = Depends(get_ticket_store),
):
    """
    Change a ticket's status and/or assignee. Support agents only.
    """
    return await ticket_service.update_ticket(store, caller, ticket_id, payload)


@router.post("/{ticket_id}/assign", response_model=TicketWithAgent)
async def assign_ticket_to_me(
    ticket_id: str,
    caller: ProfileRead = Depends(get_current_profile),
    store: TicketStore = Depends(get_ticket_store),
):
    """
    Assign the ticket to the calling agent, overriding any prior assignee.
    """
    return await ticket_service.assign_to_self(store, caller, ticket_id)
