"""
Device key validation - resolves the x-device-api-key header to a community
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from agri_monitor.core.errors import Unauthorized
from agri_monitor.models.community import utcnow
from agri_monitor.models.device_api_key import DeviceApiKey

logger = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = "Device API key required"
INVALID_KEY_MESSAGE = "Invalid device API key"


def mask_key(api_key: str) -> str:
    """Shorten a key for log output."""
    return api_key[:8] + "..."


async def validate_device_key(session: AsyncSession, api_key: str | None) -> str:
    """
    Return the community id a device key belongs to.

    Lookup is an exact, case-sensitive match. Inactive keys are rejected.
    On success the key's last_used_at is refreshed; a failure there is
    logged and otherwise ignored.

    Raises:
        Unauthorized: key missing, unknown or inactive
    """
    if not api_key:
        logger.error("Missing device API key")
        raise Unauthorized(MISSING_KEY_MESSAGE)

    logger.info(f"Validating device API key: {mask_key(api_key)}")

    result = await session.execute(
        select(DeviceApiKey.community_id).where(
            DeviceApiKey.api_key == api_key,
            DeviceApiKey.is_active.is_(True),
        )
    )
    community_id = result.scalar_one_or_none()

    if community_id is None:
        logger.error(f"Invalid device API key: {mask_key(api_key)}")
        raise Unauthorized(INVALID_KEY_MESSAGE)

    logger.info(f"Valid device API key for community: {community_id}")

    await touch_device_key(session, api_key)
    return community_id


async def touch_device_key(session: AsyncSession, api_key: str) -> bool:
    """Update last_used_at for a key. Returns False if the update failed."""
    try:
        await session.execute(
            update(DeviceApiKey)
            .where(DeviceApiKey.api_key == api_key)
            .values(last_used_at=utcnow())
        )
        await session.commit()
        return True
    except SQLAlchemyError as e:
        await session.rollback()
        logger.warning(f"Could not update last_used_at for {mask_key(api_key)}: {e}")
        return False
