from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, field_validator


class SensorPayload(BaseModel):
    """Body of a device ingestion request.

    Field aliases are the keys devices send on the wire. Only ``sequence`` is
    required; measurements are JSON numbers and are never coerced from strings.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    sequence: int
    soil_moisture: StrictFloat | None = Field(default=None, alias="soil")
    rainfall: StrictFloat | None = Field(default=None, alias="rain")
    ph: StrictFloat | None = Field(default=None, alias="pH")
    humidity: StrictFloat | None = Field(default=None, alias="Hum")
    temperature: StrictFloat | None = Field(default=None, alias="Temp")
    turbidity: StrictFloat | None = None
    ozone: StrictFloat | None = Field(default=None, alias="O3")
    ammonia: StrictFloat | None = Field(default=None, alias="NH3")
    co2: StrictFloat | None = Field(default=None, alias="CO2")
    tilt_x: StrictFloat | None = Field(default=None, alias="TiltX")
    tilt_y: StrictFloat | None = Field(default=None, alias="TiltY")
    timestamp: datetime | None = None

    @field_validator("sequence", mode="before")
    @classmethod
    def _sequence_is_number(cls, value: Any) -> int:
        # bool is an int subclass but not a JSON number
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("must be a number")
        if isinstance(value, float) and not value.is_integer():
            raise ValueError("must be a whole number")
        return int(value)


class SensorDataOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    community_id: str
    sequence: int
    soil_moisture: float | None
    rainfall: float | None
    ph: float | None
    humidity: float | None
    temperature: float | None
    turbidity: float | None
    ozone: float | None
    ammonia: float | None
    co2: float | None
    tilt_x: float | None
    tilt_y: float | None
    timestamp: datetime
    created_at: datetime


class IngestResponse(BaseModel):
    success: bool = True
    id: str
    message: str


class SensorHistoryResponse(BaseModel):
    items: list[SensorDataOut]
    count: int
