from typing import Literal

from pydantic import Field, PostgresDsn
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: PostgresDsn = Field(..., alias="DATABASE_URL")
    DEBUG: bool = Field(default=False, alias="DEBUG")
    SUPABASE_URL: str = Field(..., alias="SUPABASE_URL")
    SUPABASE_SERVICE_KEY: str = Field(..., alias="SUPABASE_SERVICE_KEY")
    SUPABASE_JWT_SECRET: str = Field(..., alias="SUPABASE_JWT_SECRET")
    SUPABASE_JWT_AUDIENCE: str = Field(
        default="authenticated", alias="SUPABASE_JWT_AUDIENCE"
    )

    # Which backend serves the profiles and tickets tables
    TICKET_STORE: Literal["postgres", "supabase"] = Field(
        default="postgres", alias="TICKET_STORE"
    )

    # Assignment policy
    ALLOW_ASSIGNMENT_OVERRIDE: bool = Field(
        default=True, alias="ALLOW_ASSIGNMENT_OVERRIDE"
    )  # any agent may take over a ticket held by another agent
    VALIDATE_ASSIGNEE: bool = Field(default=False, alias="VALIDATE_ASSIGNEE")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
