"""
Ticket access rules and the assignment workflow.

Every operation takes the caller's profile, resolved once at the HTTP
boundary, and performs all of its checks before the single mutating store
call. Customers file tickets and read their own; support agents read
everything, move tickets between statuses and (re)assign them.
"""

import uuid
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from app.models.profile import UserRole
from app.models.ticket import TicketPriority, TicketStatus
from app.schemas.profile import ProfileRead
from app.schemas.ticket import (
    TicketCreate,
    TicketRead,
    TicketStats,
    TicketUpdate,
    TicketWithAgent,
)
from app.services.store import TicketStore
from app.settings import settings
from app.utils.errors import BadRequest, Forbidden, NotFound
from app.utils.logging_config import logger

ALLOWED_PRIORITIES = [p.value for p in TicketPriority]


def parse_status(value: str) -> TicketStatus:
    try:
        return TicketStatus(value)
    except ValueError:
        raise BadRequest("Invalid status") from None


def parse_priority(value: Optional[str]) -> TicketPriority:
    """Missing or empty priority falls back to medium."""
    if not value:
        return TicketPriority.MEDIUM
    try:
        return TicketPriority(value)
    except ValueError:
        raise BadRequest(
            f"Invalid priority '{value}'. Allowed: {', '.join(ALLOWED_PRIORITIES)}"
        ) from None


def _ticket_uuid(ticket_id: str | uuid.UUID) -> uuid.UUID:
    # A malformed id can not match any ticket.
    if isinstance(ticket_id, uuid.UUID):
        return ticket_id
    try:
        return uuid.UUID(ticket_id)
    except ValueError:
        raise NotFound("Ticket not found") from None


async def _load_ticket(store: TicketStore, ticket_id: str | uuid.UUID) -> TicketRead:
    ticket = await store.get_ticket(_ticket_uuid(ticket_id))
    if ticket is None:
        raise NotFound("Ticket not found")
    return ticket


# -----------------------------
# Agent enrichment
# -----------------------------
async def attach_agents(
    store: TicketStore, tickets: Iterable[TicketRead]
) -> list[TicketWithAgent]:
    """
    Denormalize each ticket's assigned agent with one batched profile lookup.
    Unassigned tickets, and tickets whose agent has no profile, get None.
    """
    tickets = list(tickets)
    agent_ids = {t.assigned_agent_id for t in tickets if t.assigned_agent_id}
    agents = {a.id: a for a in await store.get_agent_summaries(agent_ids)}
    return [
        TicketWithAgent(
            **t.model_dump(),
            assigned_agent=agents.get(t.assigned_agent_id)
            if t.assigned_agent_id
            else None,
        )
        for t in tickets
    ]


async def attach_agent(store: TicketStore, ticket: TicketRead) -> TicketWithAgent:
    """Single-ticket variant of attach_agents."""
    agent = None
    if ticket.assigned_agent_id:
        agents = await store.get_agent_summaries([ticket.assigned_agent_id])
        agent = agents[0] if agents else None
    return TicketWithAgent(**ticket.model_dump(), assigned_agent=agent)


# -----------------------------
# Read path
# -----------------------------
async def list_tickets(
    store: TicketStore, caller: ProfileRead, status: Optional[str] = None
) -> list[TicketWithAgent]:
    status_filter = parse_status(status) if status else None
    # Customers only ever see their own tickets; agents see all of them.
    customer_id = caller.id if caller.role == UserRole.CUSTOMER else None
    tickets = await store.list_tickets(customer_id=customer_id, status=status_filter)
    return await attach_agents(store, tickets)


async def get_ticket(
    store: TicketStore, caller: ProfileRead, ticket_id: str | uuid.UUID
) -> TicketWithAgent:
    ticket = await _load_ticket(store, ticket_id)
    if caller.role == UserRole.CUSTOMER and ticket.customer_id != caller.id:
        raise Forbidden("Forbidden")
    return await attach_agent(store, ticket)


async def ticket_stats(store: TicketStore, caller: ProfileRead) -> TicketStats:
    """Dashboard counters over the tickets the caller is allowed to see."""
    customer_id = caller.id if caller.role == UserRole.CUSTOMER else None
    tickets = await store.list_tickets(customer_id=customer_id)
    by_status = Counter(t.status for t in tickets)
    return TicketStats(
        total=len(tickets),
        open=by_status[TicketStatus.OPEN],
        in_progress=by_status[TicketStatus.IN_PROGRESS],
        resolved=by_status[TicketStatus.RESOLVED],
        assigned_to_me=sum(1 for t in tickets if t.assigned_agent_id == caller.id),
    )


# -----------------------------
# Write path
# -----------------------------
async def create_ticket(
    store: TicketStore, caller: ProfileRead, payload: TicketCreate
) -> TicketRead:
    if caller.role != UserRole.CUSTOMER:
        raise Forbidden("Only customers can create tickets")
    if not payload.title or not payload.description:
        raise BadRequest("Title and description are required")
    priority = parse_priority(payload.priority)

    ticket = await store.create_ticket(
        customer_id=caller.id,
        title=payload.title,
        description=payload.description,
        priority=priority,
    )
    logger.info(
        f"Ticket {ticket.id} created by customer {caller.id} "
        f"with priority '{ticket.priority.value}'"
    )
    return ticket


async def _check_assignee(store: TicketStore, assignee: Optional[str]) -> None:
    if assignee is None:
        return
    try:
        assignee_id = uuid.UUID(str(assignee))
    except ValueError:
        raise BadRequest("Invalid assigned_agent_id") from None
    profile = await store.get_profile(assignee_id)
    if profile is None or profile.role != UserRole.SUPPORT_AGENT:
        raise BadRequest("assigned_agent_id must reference a support agent")


def _check_override(
    caller: ProfileRead, ticket: TicketRead, assignee: Optional[str]
) -> None:
    current = ticket.assigned_agent_id
    if current is None or current == caller.id:
        return
    if assignee is not None and str(assignee) == str(current):
        return
    raise Forbidden("Ticket is already assigned to another agent")


async def update_ticket(
    store: TicketStore,
    caller: ProfileRead,
    ticket_id: str | uuid.UUID,
    payload: TicketUpdate,
) -> TicketWithAgent:
    """
    Move a ticket between statuses and/or (re)assign it.

    Any status may follow any other. With ALLOW_ASSIGNMENT_OVERRIDE on
    (the default) any agent may reassign any ticket to any id and the last
    write wins; the assignee id is only checked when VALIDATE_ASSIGNEE is on.
    """
    if caller.role != UserRole.SUPPORT_AGENT:
        raise Forbidden("Only support agents can update tickets")

    # An empty string counts as not sent. An explicit null assignee unassigns.
    has_status = bool(payload.status)
    has_assignee = (
        "assigned_agent_id" in payload.model_fields_set
        and payload.assigned_agent_id != ""
    )
    if not has_status and not has_assignee:
        raise BadRequest("Status or assigned_agent_id required")

    changes: dict[str, Any] = {"updated_at": datetime.now(timezone.utc)}
    if has_status:
        changes["status"] = parse_status(payload.status)

    ticket = await _load_ticket(store, ticket_id)

    if has_assignee:
        assignee = payload.assigned_agent_id
        if not settings.ALLOW_ASSIGNMENT_OVERRIDE:
            _check_override(caller, ticket, assignee)
        if settings.VALIDATE_ASSIGNEE:
            await _check_assignee(store, assignee)
        changes["assigned_agent_id"] = assignee

        previous = ticket.assigned_agent_id
        if previous is not None and str(previous) != str(assignee):
            logger.info(
                f"Ticket {ticket.id} reassigned from {previous} to {assignee} "
                f"by agent {caller.id}"
            )

    updated = await store.update_ticket(ticket.id, changes)
    if updated is None:
        raise NotFound("Ticket not found")
    logger.info(
        f"Ticket {updated.id} updated by agent {caller.id}: "
        f"status='{updated.status.value}', assigned_agent_id={updated.assigned_agent_id}"
    )
    return await attach_agent(store, updated)


async def assign_to_self(
    store: TicketStore, caller: ProfileRead, ticket_id: str | uuid.UUID
) -> TicketWithAgent:
    """The "Assign to me" action: a plain update naming the caller."""
    return await update_ticket(
        store, caller, ticket_id, TicketUpdate(assigned_agent_id=str(caller.id))
    )
