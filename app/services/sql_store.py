"""TicketStore backed by the Postgres tables through SQLAlchemy."""

import uuid
from typing import Any, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.profile import Profile
from app.models.ticket import Ticket, TicketPriority, TicketStatus
from app.schemas.profile import AgentSummary, ProfileRead
from app.schemas.ticket import TicketRead
from app.services.store import TicketStore
from app.utils.errors import StoreError
from app.utils.logging_config import logger


def _store_error(exc: SQLAlchemyError) -> StoreError:
    """
    Surface what the database reported. Async drivers are adapted to DBAPI,
    so ``orig`` is an adapter error prefixed with the driver's class name and
    the driver's own exception is its ``__cause__``.
    """
    orig = getattr(exc, "orig", None)
    if orig is None:
        message = str(exc)
    else:
        message = str(orig.__cause__ or orig)
    logger.error(f"Ticket store error: {message}")
    return StoreError(message)


def _as_uuid(value: Any) -> Optional[uuid.UUID]:
    # The Uuid column can not bind a malformed id, so this error is ours,
    # not the database's.
    if value is None or isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        logger.error(f"Ticket store error: malformed assigned_agent_id {value!r}")
        raise StoreError(f"assigned_agent_id is not a valid UUID: {value!r}") from None


class SqlTicketStore(TicketStore):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_profile(self, profile_id: uuid.UUID) -> Optional[ProfileRead]:
        try:
            profile = await self.session.get(Profile, profile_id)
        except SQLAlchemyError as e:
            raise _store_error(e) from e
        return ProfileRead.model_validate(profile) if profile else None

    async def get_agent_summaries(
        self, profile_ids: Iterable[uuid.UUID]
    ) -> list[AgentSummary]:
        ids = list(profile_ids)
        if not ids:
            return []
        try:
            result = await self.session.execute(
                select(Profile).where(Profile.id.in_(ids))
            )
        except SQLAlchemyError as e:
            raise _store_error(e) from e
        return [AgentSummary.model_validate(p) for p in result.scalars().all()]

    async def get_ticket(self, ticket_id: uuid.UUID) -> Optional[TicketRead]:
        try:
            ticket = await self.session.get(Ticket, ticket_id)
        except SQLAlchemyError as e:
            raise _store_error(e) from e
        return TicketRead.model_validate(ticket) if ticket else None

    async def list_tickets(
        self,
        customer_id: Optional[uuid.UUID] = None,
        status: Optional[TicketStatus] = None,
    ) -> list[TicketRead]:
        query = select(Ticket).order_by(Ticket.created_at.desc())
        if customer_id is not None:
            query = query.where(Ticket.customer_id == customer_id)
        if status is not None:
            query = query.where(Ticket.status == status)
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            raise _store_error(e) from e
        return [TicketRead.model_validate(t) for t in result.scalars().all()]

    async def create_ticket(
        self,
        customer_id: uuid.UUID,
        title: str,
        description: str,
        priority: TicketPriority,
    ) -> TicketRead:
        ticket = Ticket(
            customer_id=customer_id,
            title=title,
            description=description,
            priority=priority,
            status=TicketStatus.OPEN,
        )
        try:
            self.session.add(ticket)
            await self.session.commit()
            await self.session.refresh(ticket)
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise _store_error(e) from e
        return TicketRead.model_validate(ticket)

    async def update_ticket(
        self, ticket_id: uuid.UUID, changes: dict[str, Any]
    ) -> Optional[TicketRead]:
        values = dict(changes)
        if "assigned_agent_id" in values:
            values["assigned_agent_id"] = _as_uuid(values["assigned_agent_id"])
        try:
            ticket = await self.session.get(Ticket, ticket_id)
            if ticket is None:
                return None
            for field, value in values.items():
                setattr(ticket, field, value)
            await self.session.commit()
            await self.session.refresh(ticket)
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise _store_error(e) from e
        return TicketRead.model_validate(ticket)
