"""Dependencies for API endpoints."""

import uuid
from typing import AsyncGenerator

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config.db import SessionLocal
from app.config.supabase import supabase_admin
from app.schemas.profile import ProfileRead
from app.services.sql_store import SqlTicketStore
from app.services.store import TicketStore
from app.services.supabase_store import SupabaseTicketStore
from app.settings import settings
from app.utils.errors import ProfileNotFound, Unauthorized
from app.utils.logging_config import logger

# auto_error is off so a missing header is a 401 rather than FastAPI's 403.
bearer_scheme = HTTPBearer(scheme_name="Bearer", auto_error=False)


async def get_ticket_store() -> AsyncGenerator[TicketStore, None]:
    """
    FastAPI dependency yielding the configured ticket store for one request.
    """
    if settings.TICKET_STORE == "supabase":
        yield SupabaseTicketStore(await supabase_admin())
        return
    async with SessionLocal() as session:
        yield SqlTicketStore(session)


def decode_access_token(token: str) -> uuid.UUID:
    """
    Verify a Supabase access token and return the user id in its subject.

    Raises:
        Unauthorized: If the token is expired, badly signed, has the wrong
                      audience or carries no usable subject.
    """
    try:
        payload = jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=["HS256"],
            audience=settings.SUPABASE_JWT_AUDIENCE,
        )
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token has expired.") from None
    except jwt.InvalidTokenError as e:
        raise Unauthorized(f"Invalid token: {e}") from e

    user_id = payload.get("sub")
    if user_id is None:
        raise Unauthorized("Invalid token: Subject not found.")
    try:
        return uuid.UUID(user_id)
    except ValueError as e:
        logger.warning(f"Malformed user ID in token: {user_id}. Error: {e}")
        raise Unauthorized("Invalid authentication token") from e


async def get_current_profile(
    token: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    store: TicketStore = Depends(get_ticket_store),
) -> ProfileRead:
    """
    Dependency resolving the caller: verify the bearer token, then load the
    caller's profile (and with it their role) from the store.
    """
    if token is None:
        raise Unauthorized("Unauthorized")
    user_id = decode_access_token(token.credentials)

    profile = await store.get_profile(user_id)
    if profile is None:
        raise ProfileNotFound()
    return profile
