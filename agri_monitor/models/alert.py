"""
Alert model - incidents raised by the rule engine or filed by users
"""

from datetime import datetime
from sqlalchemy import String, Text, Boolean, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from agri_monitor.core.database import Base
from agri_monitor.models.community import new_id, utcnow

ALERT_TYPES = ("weather", "irrigation", "soil", "pest", "other")
ALERT_SEVERITIES = ("low", "medium", "high")


class Alert(Base):
    """Alert shown on the community dashboard."""

    __tablename__ = "alerts"
    __table_args__ = (
        CheckConstraint(f"type IN {ALERT_TYPES}", name="ck_alerts_type"),
        CheckConstraint(f"severity IN {ALERT_SEVERITIES}", name="ck_alerts_severity"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    community_id: Mapped[str] = mapped_column(String(36), ForeignKey("communities.id"), index=True)

    type: Mapped[str] = mapped_column(String(20))  # one of ALERT_TYPES
    severity: Mapped[str] = mapped_column(String(10))  # one of ALERT_SEVERITIES
    title: Mapped[str] = mapped_column(String(200))
    message: Mapped[str] = mapped_column(Text)

    # Reading that triggered the alert (None for user reports)
    sensor_data_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("sensor_data.id"), nullable=True
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        index=True
    )
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<Alert {self.type}/{self.severity} community={self.community_id}>"
