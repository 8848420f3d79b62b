"""API Gateway - FastAPI application exposing device CRUD endpoints."""

import logging, os, threading
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional
from uuid import uuid4

from fastapi import Body, Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from smart_home_devices.api.schemas import ErrorResponse, MessageResponse
from smart_home_devices.common.config import get_config
from smart_home_devices.common.exceptions import SmartHomeDevicesException
from smart_home_devices.common.logging import configure_logging
from smart_home_devices.data.schemas.device import Device
from smart_home_devices.registry.factory import build_service
from smart_home_devices.registry.service import DeviceService

logger = logging.getLogger("smart_home_devices.api")

# Failure kind -> HTTP status
ERROR_STATUS_CODES: Dict[str, int] = {
    "MISSING_FIELDS": 400,
    "MISSING_ID": 400,
    "NOT_FOUND": 404,
    "STORAGE_FAILURE": 500,
    "CONFIG_ERROR": 500,
}


class ServiceManager:
    """Thread-safe service singleton manager."""
    
    _instance: Optional[DeviceService] = None
    _lock = threading.Lock()
    _initialized = False
    
    @classmethod
    def get_service(cls) -> DeviceService:
        """Get or create the device service instance (thread-safe)."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = build_service(get_config())
                    cls._initialized = True
                    logger.info("DeviceService initialized")
        return cls._instance
    
    @classmethod
    def shutdown(cls) -> None:
        """Drop the service instance."""
        with cls._lock:
            if cls._instance is not None:
                cls._instance = None
                cls._initialized = False
                logger.info("DeviceService shutdown complete")


def get_service() -> DeviceService:
    """Get the device service instance."""
    return ServiceManager.get_service()


# =============================================================================
# CORS CONFIGURATION
# =============================================================================

def get_cors_origins() -> List[str]:
    """Get allowed CORS origins from environment.
    
    In production, set DEVICES_CORS_ORIGINS to a comma-separated list of
    allowed origins.
    """
    origins_env = os.environ.get("DEVICES_CORS_ORIGINS", "")
    
    if origins_env:
        return [origin.strip() for origin in origins_env.split(",") if origin.strip()]
    
    if os.environ.get("DEVICES_ENVIRONMENT", "development") == "production":
        logger.warning(
            "DEVICES_CORS_ORIGINS not set in production. CORS will be disabled."
        )
        return []
    
    logger.warning("Running in development mode with permissive CORS (allow_origins=['*'])")
    return ["*"]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    config = get_config()
    configure_logging(config.log_level.value)
    logger.info("Device API starting up...")
    get_service()  # Pre-initialize service
    logger.info("Device API ready")
    
    yield
    
    logger.info("Device API shutting down...")
    ServiceManager.shutdown()


environment = os.environ.get("DEVICES_ENVIRONMENT", "development")
enable_docs_default = "false" if environment == "production" else "true"
enable_docs = os.environ.get("DEVICES_ENABLE_DOCS", enable_docs_default).lower() == "true"

app = FastAPI(
    title="Smart Home Devices API",
    description="Create, read, update and delete registered smart-home devices.",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if enable_docs else None,
    redoc_url="/redoc" if enable_docs else None,
)


cors_origins = get_cors_origins()
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    )


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

@app.exception_handler(SmartHomeDevicesException)
async def device_error_handler(
    request: Request, exc: SmartHomeDevicesException
) -> JSONResponse:
    """Map service failure kinds to HTTP responses.
    
    Client errors echo the service message; server errors return a sanitized
    message and keep backend detail in the logs.
    """
    request_id = getattr(request.state, "request_id", None)
    status_code = ERROR_STATUS_CODES.get(exc.code, 500)
    
    if status_code >= 500:
        logger.error(
            "Device operation failed",
            extra={"request_id": request_id, "error_code": exc.code, "details": exc.details},
            exc_info=exc.__cause__,
        )
        message = "Device storage is unavailable, try again later"
    else:
        logger.warning(
            "Device request rejected",
            extra={"request_id": request_id, "error_code": exc.code},
        )
        message = exc.message
    
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=exc.code.lower(),
            message=message,
            request_id=request_id,
        ).model_dump(),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected errors.
    
    Logs full exception for debugging but returns sanitized message to client.
    """
    request_id = getattr(request.state, "request_id", None)
    logger.exception(
        "Unexpected error",
        extra={"request_id": request_id, "error_type": type(exc).__name__}
    )
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="internal_error",
            message="An unexpected error occurred",
            request_id=request_id,
        ).model_dump(),
    )


# =============================================================================
# MIDDLEWARE
# =============================================================================

@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add request ID to each request for tracing."""
    request_id = f"req_{uuid4().hex[:12]}"
    request.state.request_id = request_id
    
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# =============================================================================
# ENDPOINTS
# =============================================================================

_ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    400: {"description": "Missing fields or device ID", "model": ErrorResponse},
    500: {"description": "Storage failure", "model": ErrorResponse},
}


@app.post(
    "/devices",
    status_code=201,
    response_model=MessageResponse,
    responses=_ERROR_RESPONSES,
    summary="Create a device",
    description=(
        "Creates the device, or overwrites an existing device with the same id. "
        "id, mac, name and type are required; homeId is optional."
    ),
)
def create_device(
    payload: Dict[str, Any] = Body(...),
    service: DeviceService = Depends(get_service),
) -> MessageResponse:
    service.create(payload)
    return MessageResponse(message="Device created")


@app.get(
    "/devices/{device_id}",
    response_model=Device,
    responses={**_ERROR_RESPONSES, 404: {"description": "Device not found", "model": ErrorResponse}},
    summary="Get a device",
)
def get_device(
    device_id: str,
    service: DeviceService = Depends(get_service),
) -> Device:
    return service.get(device_id)


@app.put(
    "/devices",
    response_model=MessageResponse,
    responses=_ERROR_RESPONSES,
    summary="Partially update a device",
    description=(
        "Updates only the fields present in the body (name, mac, type, homeId). "
        "The device id is taken from the body; modifiedAt is always refreshed."
    ),
)
def update_device(
    payload: Dict[str, Any] = Body(...),
    service: DeviceService = Depends(get_service),
) -> MessageResponse:
    service.update(payload)
    return MessageResponse(message="Device updated")


@app.patch(
    "/devices/{device_id}",
    response_model=MessageResponse,
    responses=_ERROR_RESPONSES,
    summary="Partially update a device by path id",
)
def patch_device(
    device_id: str,
    payload: Dict[str, Any] = Body(...),
    service: DeviceService = Depends(get_service),
) -> MessageResponse:
    service.update({**payload, "id": device_id})
    return MessageResponse(message="Device updated")


@app.delete(
    "/devices/{device_id}",
    response_model=MessageResponse,
    responses=_ERROR_RESPONSES,
    summary="Delete a device",
)
def delete_device(
    device_id: str,
    service: DeviceService = Depends(get_service),
) -> MessageResponse:
    service.delete(device_id)
    return MessageResponse(message="Device deleted")


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy", "service": "smart-home-devices-api"}


@app.get("/ready")
def readiness_check() -> dict:
    """Readiness check endpoint.

    Returns 503 until the service singleton is initialized and its store
    answers a health check.
    """
    if not ServiceManager._initialized:
        raise HTTPException(status_code=503, detail="not_ready")
    if not ServiceManager.get_service().store.health_check():
        raise HTTPException(status_code=503, detail="store_unavailable")
    return {"status": "ready", "service": "smart-home-devices-api"}


# =============================================================================
# DEVELOPMENT SERVER
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    
    uvicorn.run(
        "smart_home_devices.api.gateway:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
