from datetime import datetime

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    regimes: int
    duty_rate_groups: int
    timestamp: datetime
    environment: str
    version: str
