"""
Profile model - dashboard user and the one community they belong to
"""

from datetime import datetime
from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from agri_monitor.core.database import Base
from agri_monitor.models.community import new_id, utcnow


class Profile(Base):
    """Dashboard user. Sends access_token as Authorization: Bearer <token>."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    access_token: Mapped[str] = mapped_column(String(128), unique=True, index=True)
    community_id: Mapped[str] = mapped_column(String(36), ForeignKey("communities.id"), index=True)

    full_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow
    )

    def __repr__(self) -> str:
        return f"<Profile {self.full_name or self.id} community={self.community_id}>"
