"""Pydantic schema for the health check response."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Liveness plus database reachability, for load balancers and monitoring."""

    status: Literal["ok", "degraded"] = Field(
        default="ok",
        description="'degraded' when the account database cannot be reached",
    )
    environment: str = Field(description="Current app environment (dev or prod)")
    database: Literal["connected", "disconnected"] = Field(
        description="Account database connectivity",
    )
