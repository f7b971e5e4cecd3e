"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response body for the health check endpoint."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    environment: str = Field(description="Current app environment (dev or prod)")
    database: Literal["connected", "disconnected"] = Field(
        description="Database connectivity at the time of the check",
    )
    token_lifetime_minutes: int | None = Field(
        default=None, description="Configured capability lifetime; null when tokens do not expire"
    )
    db_role_switching: bool = Field(
        description="Whether requests switch to the token's database role so Postgres RLS applies",
    )
