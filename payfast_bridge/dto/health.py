from datetime import datetime

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    current_time: datetime
    environment: str


class ServiceInfo(BaseModel):
    message: str
    version: str
    endpoints: list[str]
