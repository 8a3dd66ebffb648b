from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from schemas.health import ComponentStatus, CorsTestResponse, HealthResponse
from logging_config import get_logger

logger = get_logger(__name__)

health_router = APIRouter(tags=["health"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


async def check_registry(registry) -> ComponentStatus:
    try:
        await registry.ping()
    except Exception as e:  # health must degrade, not crash
        logger.error(f"Room registry health check failed: {e}", exc_info=True)
        return ComponentStatus(ok=False, backend=registry.backend_name, error=str(e))
    return ComponentStatus(ok=True, backend=registry.backend_name)


@health_router.get("/health", response_model=HealthResponse)
async def health(request: Request):
    registry = request.app.state.registry
    registry_status = await check_registry(registry)
    if not registry_status.ok:
        body = HealthResponse(
            status="down",
            timestamp=_now(),
            components={"registry": registry_status},
        )
        return JSONResponse(status_code=503, content=body.model_dump())

    return HealthResponse(
        status="ok",
        timestamp=_now(),
        active_rooms=await registry.count(),
        components={"registry": registry_status},
    )


@health_router.get("/test", response_model=CorsTestResponse)
async def cors_test(request: Request):
    origin = request.headers.get("origin")
    logger.info(f"Test endpoint hit from origin: {origin}")
    return CorsTestResponse(
        message="CORS test successful",
        origin=origin,
        timestamp=_now(),
    )
