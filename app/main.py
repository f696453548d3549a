from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.v1 import profiles as profiles_router
from app.api.v1 import tickets as tickets_router
from app.config.db import check_db_connection, engine
from app.config.supabase import check_supabase_connection, close_supabase_admin
from app.settings import settings
from app.utils.errors import register_exception_handlers
from app.utils.logging_config import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Handle application startup and shutdown events.
    """
    if settings.TICKET_STORE == "supabase":
        await check_supabase_connection()
    else:
        await check_db_connection()
    logger.info(f"TICKET STORE '{settings.TICKET_STORE}' IS READY")

    yield

    if settings.TICKET_STORE == "supabase":
        await close_supabase_admin()
    else:
        await engine.dispose()


app = FastAPI(
    lifespan=lifespan,
    title="Helpdesk",
    description="Customers file support tickets; agents triage, assign and resolve them",
)

register_exception_handlers(app)

# Include routers
app.include_router(tickets_router.router, prefix="/api/v1/tickets", tags=["Tickets"])
app.include_router(
    profiles_router.router, prefix="/api/v1/profiles", tags=["Profiles"]
)


@app.get("/")
def read_root() -> dict[str, str]:
    return {"message": "Hello from Helpdesk API!"}
