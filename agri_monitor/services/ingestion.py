"""
Ingestion Coordinator - one device request from key check to alert write

Steps, in order and without retries:
1. validate the device key (Unauthorized)
2. normalize the payload (ValidationError)
3. load the community's latest stored reading with the fields stateful rules compare
4. insert the reading (InternalError on failure)
5. evaluate alert rules against it
6. insert persisted alerts as one batch; a failure is logged only
7. push the reading to dashboards; best-effort

Steps 4 and 6 are separate commits. A reading is never rolled back because
its alerts could not be written.
"""

import asyncio
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from agri_monitor.core.config import Settings
from agri_monitor.core.errors import InternalError, ValidationError
from agri_monitor.models.alert import Alert
from agri_monitor.models.sensor_data import SensorData
from agri_monitor.mqtt.publisher import publish_sensor_data
from agri_monitor.schemas.alert import AlertOut
from agri_monitor.schemas.sensor import SensorDataOut
from agri_monitor.services.alert_engine import AlertDraft, AlertRuleEngine
from agri_monitor.services.device_keys import validate_device_key
from agri_monitor.services.normalizer import normalize_reading

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Sensor data ingested successfully"

Publisher = Callable[[str, dict, Settings], bool]


@dataclass
class IngestionResult:
    reading: SensorData
    alerts: list[Alert] = field(default_factory=list)
    advisories: list[AlertDraft] = field(default_factory=list)
    alerts_saved: bool = True
    pushed: bool = False

    def to_response(self) -> dict[str, Any]:
        return {"success": True, "id": self.reading.id, "message": SUCCESS_MESSAGE}


def decode_body(body: Any) -> Any:
    """Decode a raw request body; already-decoded values pass through."""
    if isinstance(body, (bytes, str)):
        try:
            return json.loads(body)
        except ValueError as e:
            raise ValidationError(f"Invalid JSON body: {e}") from e
    return body


class IngestionCoordinator:
    """Runs the ingestion steps for one request at a time. Holds no request state."""

    def __init__(
        self,
        settings: Settings,
        engine: AlertRuleEngine | None = None,
        publisher: Publisher = publish_sensor_data,
    ):
        self.settings = settings
        self.engine = engine or AlertRuleEngine.from_settings(settings)
        self.publisher = publisher

    async def ingest(self, session: AsyncSession, api_key: str | None, body: Any) -> IngestionResult:
        community_id = await validate_device_key(session, api_key)
        reading = normalize_reading(decode_body(body), community_id)

        previous = None
        if self.engine.needs_previous_reading:
            previous = await self._previous_reading(session, community_id, self.engine.previous_reading_fields)

        await self._save_reading(session, reading)

        drafts = self.engine.evaluate(reading, previous)
        alerts, saved = await self._save_alerts(session, reading, drafts)
        advisories = [draft for draft in drafts if not draft.persist]

        result = IngestionResult(reading=reading, alerts=alerts, advisories=advisories, alerts_saved=saved)
        result.pushed = await self._push(result)
        return result

    async def _previous_reading(
        self, session: AsyncSession, community_id: str, fields: tuple[str, ...]
    ) -> SensorData | None:
        """Newest stored reading of the community that reports any of the fields."""
        try:
            result = await session.execute(
                select(SensorData)
                .where(SensorData.community_id == community_id)
                .where(or_(*(getattr(SensorData, f).is_not(None) for f in fields)))
                .order_by(SensorData.created_at.desc())
                .limit(1)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.warning(f"Could not load previous reading for community {community_id}: {e}")
            return None

    async def _save_reading(self, session: AsyncSession, reading: SensorData) -> None:
        logger.info(f"Inserting sensor data: sequence={reading.sequence} community_id={reading.community_id}")
        try:
            session.add(reading)
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Database insertion error: {e}")
            raise InternalError(f"Failed to insert sensor data: {e}") from e

        # Keep the committed row readable if a later rollback expires the session
        session.expunge(reading)
        logger.info(f"💾 Sensor data inserted successfully: {reading.id}")

    async def _save_alerts(
        self, session: AsyncSession, reading: SensorData, drafts: list[AlertDraft]
    ) -> tuple[list[Alert], bool]:
        alerts = [
            draft.to_model(reading.community_id, reading.id)
            for draft in drafts
            if draft.persist
        ]
        if not alerts:
            return [], True

        logger.info(f"Creating {len(alerts)} alerts for community {reading.community_id}")
        try:
            session.add_all(alerts)
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"❌ Error creating alerts: {e}")
            return [], False

        logger.info("Alerts created successfully")
        return alerts, True

    async def _push(self, result: IngestionResult) -> bool:
        if not self.settings.mqtt_publish_enabled:
            return False

        try:
            payload = {
                "reading": SensorDataOut.model_validate(result.reading).model_dump(mode="json"),
                "alerts": [AlertOut.model_validate(alert).model_dump(mode="json") for alert in result.alerts],
                "advisories": [draft.as_dict() for draft in result.advisories],
            }
            return bool(
                await asyncio.to_thread(self.publisher, result.reading.community_id, payload, self.settings)
            )
        except Exception as e:
            logger.error(f"❌ Error pushing reading {result.reading.id}: {e}")
            return False
