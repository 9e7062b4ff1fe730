from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

AlertType = Literal["weather", "irrigation", "soil", "pest", "other"]
Severity = Literal["low", "medium", "high"]


class AlertOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    community_id: str
    type: AlertType
    severity: Severity
    title: str
    message: str
    sensor_data_id: str | None
    is_active: bool
    created_at: datetime
    resolved_at: datetime | None


class AlertListResponse(BaseModel):
    items: list[AlertOut]
    count: int


class AlertReportIn(BaseModel):
    """Incident filed by a user from the dashboard."""

    # "rainfall" is what the dashboard form sends for heavy rain
    type: Literal["pest", "rainfall", "weather", "other"]
    description: str = Field(..., min_length=1, max_length=2000)
    severity: Severity = "medium"

    @field_validator("description")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("description must not be empty")
        return value
