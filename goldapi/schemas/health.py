"""Pydantic models for health endpoints."""

from typing import Optional
from pydantic import BaseModel


class HealthCheckResponse(BaseModel):
    """Response model for service health checks."""

    status: str = "healthy"
    database: str = "unknown"
    scheduler_running: bool = False
    current_date_ist: Optional[str] = None
    error: Optional[str] = None
