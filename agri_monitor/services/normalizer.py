"""
Reading normalization - turns a raw device payload into a SensorData row
"""

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from agri_monitor.core.errors import ValidationError
from agri_monitor.models.community import utcnow
from agri_monitor.models.sensor_data import MEASUREMENT_FIELDS, SensorData
from agri_monitor.schemas.sensor import SensorPayload

SEQUENCE_ERROR = "sequence field is required and must be a number"


def _describe(error: PydanticValidationError) -> str:
    parts = []
    for item in error.errors():
        loc = ".".join(str(p) for p in item["loc"]) or "body"
        parts.append(f"{loc}: {item['msg']}")
    return "; ".join(parts)


def parse_payload(raw: Any) -> SensorPayload:
    """Validate a decoded JSON body against the ingestion schema."""
    if not isinstance(raw, dict):
        raise ValidationError("Request body must be a JSON object")

    try:
        return SensorPayload.model_validate(raw)
    except PydanticValidationError as e:
        if any(item["loc"][:1] == ("sequence",) for item in e.errors()):
            raise ValidationError(SEQUENCE_ERROR) from e
        raise ValidationError(_describe(e)) from e


def normalize_reading(raw: Any, community_id: str) -> SensorData:
    """
    Build an unsaved SensorData for the given community.

    Measurements pass through untouched; absent ones stay None.
    The timestamp falls back to server time.
    """
    payload = parse_payload(raw)

    reading = SensorData(
        community_id=community_id,
        sequence=payload.sequence,
        timestamp=payload.timestamp or utcnow(),
    )
    for field in MEASUREMENT_FIELDS:
        setattr(reading, field, getattr(payload, field))
    return reading
