"""
Dashboard queries - community readings, alerts, manual reports and resolution
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agri_monitor.core.errors import Forbidden, NotFound, Unauthorized
from agri_monitor.models.alert import Alert
from agri_monitor.models.community import Community, utcnow
from agri_monitor.models.profile import Profile
from agri_monitor.models.sensor_data import SensorData
from agri_monitor.schemas.alert import AlertReportIn

logger = logging.getLogger(__name__)

# Dashboard form type -> (stored alert type, title)
REPORT_TYPES = {
    "pest": ("pest", "Pest Attack Reported"),
    "rainfall": ("weather", "Heavy Rainfall Reported"),
    "weather": ("weather", "Weather Issue Reported"),
    "other": ("other", "Issue Reported"),
}


async def authenticate_user(session: AsyncSession, token: str) -> Profile:
    """Resolve a session token to the user's profile."""
    if not token:
        raise Unauthorized("User not authenticated")

    result = await session.execute(select(Profile).where(Profile.access_token == token))
    profile = result.scalar_one_or_none()
    if profile is None:
        logger.error("Authentication error: unknown session token")
        raise Unauthorized("User not authenticated")
    return profile


def check_community(profile: Profile, community_id: str) -> None:
    """Users only see and act on their own community."""
    if profile.community_id != community_id:
        logger.warning(f"User {profile.id} denied access to community {community_id}")
        raise Forbidden("Access denied for this community")


async def latest_reading(session: AsyncSession, community_id: str) -> SensorData:
    result = await session.execute(
        select(SensorData)
        .where(SensorData.community_id == community_id)
        .order_by(SensorData.created_at.desc())
        .limit(1)
    )
    reading = result.scalar_one_or_none()
    if reading is None:
        raise NotFound("No sensor data for community")
    return reading


async def recent_readings(session: AsyncSession, community_id: str, limit: int = 50) -> list[SensorData]:
    result = await session.execute(
        select(SensorData)
        .where(SensorData.community_id == community_id)
        .order_by(SensorData.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def list_alerts(
    session: AsyncSession,
    community_id: str,
    active_only: bool = False,
    limit: int = 100,
) -> list[Alert]:
    query = select(Alert).where(Alert.community_id == community_id)

    if active_only:
        query = query.where(Alert.is_active.is_(True))

    query = query.order_by(Alert.created_at.desc()).limit(limit)
    result = await session.execute(query)
    return list(result.scalars().all())


async def file_report(session: AsyncSession, community_id: str, report: AlertReportIn) -> Alert:
    """Store a user-submitted incident. It has no triggering reading."""
    community = await session.get(Community, community_id)
    if community is None:
        raise NotFound("Community not found")

    alert_type, title = REPORT_TYPES[report.type]
    alert = Alert(
        community_id=community_id,
        type=alert_type,
        severity=report.severity,
        title=title,
        message=report.description,
        sensor_data_id=None,
        is_active=True,
        resolved_at=None,
    )
    session.add(alert)
    await session.commit()
    await session.refresh(alert)

    logger.info(f"📝 Report filed for community {community_id}: {alert_type}")
    return alert


async def resolve_alert(session: AsyncSession, alert_id: str, community_id: str) -> Alert:
    """
    Deactivate an alert of the given community.
    Resolving again keeps the first resolution time. Alerts of other
    communities are reported as missing.
    """
    alert = await session.get(Alert, alert_id)
    if alert is None or alert.community_id != community_id:
        raise NotFound("Alert not found")

    if alert.is_active:
        alert.is_active = False
        alert.resolved_at = utcnow()
        await session.commit()
        await session.refresh(alert)
        logger.info(f"Alert {alert_id} resolved")

    return alert
