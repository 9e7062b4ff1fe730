"""
Agri Monitor - API Server

Provides endpoints for:
- Device sensor data ingestion (x-device-api-key)
- Dashboard reads: latest reading, history, alerts
- Manual incident reports and alert resolution
- Chat assistant proxy
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Header, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from agri_monitor.core.config import Settings, get_settings, settings
from agri_monitor.core.database import get_db
from agri_monitor.core.errors import AgriMonitorError, InternalError, Unauthorized
from agri_monitor.models.profile import Profile
from agri_monitor.mqtt.publisher import start_mqtt_client, stop_mqtt_client
from agri_monitor.schemas.alert import AlertListResponse, AlertOut, AlertReportIn
from agri_monitor.schemas.chat import ChatRequest, ChatResponse
from agri_monitor.schemas.sensor import IngestResponse, SensorDataOut, SensorHistoryResponse
from agri_monitor.services import dashboard
from agri_monitor.services.chat import ChatAssistant
from agri_monitor.services.ingestion import IngestionCoordinator

logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"
INGEST_PATH = "/functions/v1/sensor-data-ingestion"
CHAT_PATH = "/functions/v1/ai-chat"


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.mqtt_publish_enabled:
        start_mqtt_client(settings)
    yield
    stop_mqtt_client()


# ==================== APP ====================

app = FastAPI(
    title="Agri Monitor API",
    description="Sensor ingestion, alerting and dashboard API for farming communities",
    version=APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AgriMonitorError)
async def handle_app_error(request: Request, exc: AgriMonitorError):
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError):
    parts = []
    for item in exc.errors():
        loc = ".".join(str(p) for p in item["loc"] if p != "body") or "body"
        parts.append(f"{loc}: {item['msg']}")
    return JSONResponse({"error": "; ".join(parts)}, status_code=400)


# ==================== DEPENDENCIES ====================

def get_coordinator(app_settings: Settings = Depends(get_settings)) -> IngestionCoordinator:
    return IngestionCoordinator(app_settings)


def get_chat_assistant(app_settings: Settings = Depends(get_settings)) -> ChatAssistant:
    return ChatAssistant(app_settings)


async def require_user(
    authorization: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
) -> Profile:
    """Resolve the dashboard session token (Authorization: Bearer <token>) to a profile."""
    if not authorization:
        raise Unauthorized("No authorization header")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        raise Unauthorized("User not authenticated")
    return await dashboard.authenticate_user(db, token.strip())


# ==================== DEVICE INGESTION ====================

@app.options(INGEST_PATH)
async def ingest_preflight():
    return Response(status_code=200)


@app.post(INGEST_PATH, response_model=IngestResponse)
async def ingest_sensor_data(
    request: Request,
    x_device_api_key: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
    coordinator: IngestionCoordinator = Depends(get_coordinator),
):
    """
    Receive one reading from a field device.
    The body is read raw so the key is checked before the payload.
    """
    body = await request.body()
    try:
        result = await coordinator.ingest(db, x_device_api_key, body)
    except AgriMonitorError:
        raise
    except Exception as e:
        logger.exception("Error in sensor data ingestion")
        raise InternalError(str(e) or "An unexpected error occurred") from e

    return result.to_response()


# ==================== DASHBOARD ====================

@app.get("/api/communities/{community_id}/sensor-data/latest", response_model=SensorDataOut)
async def get_latest_reading(
    community_id: str,
    user: Profile = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    dashboard.check_community(user, community_id)
    return await dashboard.latest_reading(db, community_id)


@app.get("/api/communities/{community_id}/sensor-data", response_model=SensorHistoryResponse)
async def get_readings(
    community_id: str,
    limit: int = Query(50, ge=1, le=500),
    user: Profile = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    dashboard.check_community(user, community_id)
    items = await dashboard.recent_readings(db, community_id, limit=limit)
    return {"items": items, "count": len(items)}


@app.get("/api/communities/{community_id}/alerts", response_model=AlertListResponse)
async def get_alerts(
    community_id: str,
    active_only: bool = Query(False),
    limit: int = Query(100, ge=1, le=500),
    user: Profile = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    dashboard.check_community(user, community_id)
    items = await dashboard.list_alerts(db, community_id, active_only=active_only, limit=limit)
    return {"items": items, "count": len(items)}


@app.post("/api/communities/{community_id}/alerts/report", response_model=AlertOut, status_code=201)
async def report_alert(
    community_id: str,
    report: AlertReportIn,
    user: Profile = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    dashboard.check_community(user, community_id)
    return await dashboard.file_report(db, community_id, report)


@app.post("/api/alerts/{alert_id}/resolve", response_model=AlertOut)
async def resolve_alert(
    alert_id: str,
    user: Profile = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    return await dashboard.resolve_alert(db, alert_id, user.community_id)


# ==================== CHAT ====================

@app.post(CHAT_PATH, response_model=ChatResponse)
async def ai_chat(
    chat: ChatRequest,
    _user: Profile = Depends(require_user),
    assistant: ChatAssistant = Depends(get_chat_assistant),
):
    messages = [message.model_dump() for message in chat.messages]
    return await asyncio.to_thread(assistant.complete, messages, chat.language)


# ==================== HEALTH CHECK ====================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": APP_VERSION,
    }


@app.get("/")
async def root():
    return {
        "service": "Agri Monitor API",
        "version": APP_VERSION,
        "endpoints": {
            "ingest": INGEST_PATH,
            "chat": CHAT_PATH,
            "latest_reading": "/api/communities/{community_id}/sensor-data/latest",
            "readings": "/api/communities/{community_id}/sensor-data",
            "alerts": "/api/communities/{community_id}/alerts",
            "report": "/api/communities/{community_id}/alerts/report",
            "resolve": "/api/alerts/{alert_id}/resolve",
            "health": "/health",
        },
    }


# ==================== MAIN ====================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
