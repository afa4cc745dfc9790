"""
ProjectHub Backend: Health Schemas
==================================

Shape of GET /api/health.

Status levels:
    service:  healthy | degraded (slow) | down
    overall:  healthy (HTTP 200) | degraded or unhealthy (HTTP 503)
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from projecthub.schemas.common import CamelModel


class ServiceHealth(CamelModel):
    service: str = Field(description="Checked dependency, e.g. database or api")
    status: str = Field(description="healthy, degraded or down")
    latency: Optional[float] = Field(default=None, description="Check duration in milliseconds")
    message: Optional[str] = None


class HealthResponse(CamelModel):
    status: str = Field(description="healthy, degraded or unhealthy")
    timestamp: datetime
    version: str
    services: List[ServiceHealth]
    uptime: float = Field(description="Seconds since the process started")
