"""
Pytest configuration and fixtures for Agri Monitor tests.
"""

import asyncio
import os
import sys
from pathlib import Path

import pytest

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# Must be set before agri_monitor.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["MQTT_PUBLISH_ENABLED"] = "false"

from sqlalchemy import func, select  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from agri_monitor.core.config import Settings  # noqa: E402
from agri_monitor.core.database import Base  # noqa: E402
from agri_monitor.models import Community, DeviceApiKey, Profile  # noqa: E402

COMMUNITY_A = "community-a"
COMMUNITY_B = "community-b"
KEY_A = "dev-key-A-0001"
KEY_B = "dev-key-B-0002"
INACTIVE_KEY = "dev-key-A-0003-retired"
USER_TOKEN = "test-session-token"
USER_TOKEN_B = "test-session-token-b"


@pytest.fixture
def test_settings(tmp_path):
    """Settings passed explicitly to coordinator, chat client and API."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        mqtt_publish_enabled=False,
        openai_api_key="sk-test",
    )


@pytest.fixture
def session_maker(test_settings):
    """Fresh SQLite database with two communities, their device keys and users."""
    engine = create_async_engine(test_settings.database_url, poolclass=NullPool)
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def setup():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        async with maker() as session:
            session.add_all([
                Community(id=COMMUNITY_A, name="Village A"),
                Community(id=COMMUNITY_B, name="Village B"),
            ])
            await session.flush()
            session.add_all([
                DeviceApiKey(api_key=KEY_A, community_id=COMMUNITY_A, device_name="North field"),
                DeviceApiKey(api_key=KEY_B, community_id=COMMUNITY_B),
                DeviceApiKey(api_key=INACTIVE_KEY, community_id=COMMUNITY_A, is_active=False),
                Profile(access_token=USER_TOKEN, community_id=COMMUNITY_A, full_name="Asha"),
                Profile(access_token=USER_TOKEN_B, community_id=COMMUNITY_B, full_name="Ravi"),
            ])
            await session.commit()

    asyncio.run(setup())
    yield maker
    asyncio.run(engine.dispose())


@pytest.fixture
def count_rows(session_maker):
    """Count rows of a model, optionally filtered by column values."""

    def _count(model, **filters) -> int:
        async def query():
            async with session_maker() as session:
                stmt = select(func.count()).select_from(model)
                for column, value in filters.items():
                    stmt = stmt.where(getattr(model, column) == value)
                return (await session.execute(stmt)).scalar_one()

        return asyncio.run(query())

    return _count


@pytest.fixture
def client(session_maker, test_settings):
    """FastAPI test client bound to the test database and settings."""
    from fastapi.testclient import TestClient

    from agri_monitor.api.main import app
    from agri_monitor.core.config import get_settings
    from agri_monitor.core.database import get_db

    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {USER_TOKEN}"}


@pytest.fixture
def auth_headers_b():
    """Session of a user in community B."""
    return {"Authorization": f"Bearer {USER_TOKEN_B}"}


@pytest.fixture
def sample_reading_payload():
    """Reading that trips no rule."""
    return {
        "sequence": 1,
        "soil": 50,
        "rain": 10,
        "pH": 6.5,
        "Hum": 60,
        "Temp": 20,
        "turbidity": 3.2,
        "O3": 0.02,
        "NH3": 0.5,
        "CO2": 410,
        "TiltX": 0.5,
        "TiltY": -0.3,
        "timestamp": "2025-03-01T06:30:00+00:00",
    }


@pytest.fixture
def mock_mqtt_client():
    """Create a mock MQTT client for testing."""
    from unittest.mock import MagicMock

    client = MagicMock()
    client.is_connected.return_value = True

    result = MagicMock()
    result.rc = 0  # MQTT_ERR_SUCCESS
    client.publish.return_value = result

    return client
