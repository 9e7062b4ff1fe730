"""
Sensor data model - one reading pushed by a field device
"""

from datetime import datetime
from sqlalchemy import String, Integer, Float, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from agri_monitor.core.database import Base
from agri_monitor.models.community import new_id, utcnow

# Measurement columns, in the order devices report them
MEASUREMENT_FIELDS = (
    "soil_moisture",
    "rainfall",
    "ph",
    "humidity",
    "temperature",
    "turbidity",
    "ozone",
    "ammonia",
    "co2",
    "tilt_x",
    "tilt_y",
)


class SensorData(Base):
    """Sensor reading. Written once, never updated."""

    __tablename__ = "sensor_data"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    community_id: Mapped[str] = mapped_column(String(36), ForeignKey("communities.id"), index=True)

    # Device-side counter, not unique
    sequence: Mapped[int] = mapped_column(Integer)

    # Measurements (None = not reported)
    soil_moisture: Mapped[float | None] = mapped_column(Float, nullable=True)  # %
    rainfall: Mapped[float | None] = mapped_column(Float, nullable=True)  # mm
    ph: Mapped[float | None] = mapped_column(Float, nullable=True)
    humidity: Mapped[float | None] = mapped_column(Float, nullable=True)  # %
    temperature: Mapped[float | None] = mapped_column(Float, nullable=True)  # Celsius
    turbidity: Mapped[float | None] = mapped_column(Float, nullable=True)
    ozone: Mapped[float | None] = mapped_column(Float, nullable=True)
    ammonia: Mapped[float | None] = mapped_column(Float, nullable=True)
    co2: Mapped[float | None] = mapped_column(Float, nullable=True)
    tilt_x: Mapped[float | None] = mapped_column(Float, nullable=True)  # degrees
    tilt_y: Mapped[float | None] = mapped_column(Float, nullable=True)  # degrees

    # Timestamps
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        index=True
    )

    def __repr__(self) -> str:
        return f"<SensorData community={self.community_id} seq={self.sequence}>"
