"""
Device API key model - per-device secret scoped to a community
"""

from datetime import datetime
from sqlalchemy import String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from agri_monitor.core.database import Base
from agri_monitor.models.community import new_id, utcnow


class DeviceApiKey(Base):
    """Credential a field device sends in the x-device-api-key header."""

    __tablename__ = "device_api_keys"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    api_key: Mapped[str] = mapped_column(String(128), unique=True, index=True)
    community_id: Mapped[str] = mapped_column(String(36), ForeignKey("communities.id"), index=True)

    # Optional human label (e.g. "North field station")
    device_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Status
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    last_used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow
    )

    def __repr__(self) -> str:
        return f"<DeviceApiKey {self.api_key[:8]}... ({self.device_name or 'unnamed'})>"
