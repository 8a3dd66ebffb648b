from contextlib import asynccontextmanager
import os
from typing import Optional

import socketio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend import build_registry
from constants import (
    ALLOWED_ORIGINS,
    ALLOWED_ORIGIN_PATTERNS,
    APP_ENV,
    CORS_HEADERS,
    CORS_METHODS,
    LOG_FILE,
    LOG_LEVEL,
    REDIS_URL,
    STATIC_DIR,
)
from cors import OriginPolicy
from logging_config import get_logger, setup_logging
from routers.frontend import build_frontend_router
from routers.health import health_router
from routers.signaling import SignalingRouter
from transport import SocketIOTransport, create_socketio_server

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)


def create_app(registry, origin_policy: OriginPolicy, static_dir: Optional[str] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        logger.info("Shutting down, closing room registry")
        await registry.close()

    app = FastAPI(lifespan=lifespan)
    app.state.registry = registry

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origin_policy.origins,
        allow_origin_regex=origin_policy.origin_regex,
        allow_credentials=True,
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
    )

    app.include_router(health_router)
    # Catch-all route, must stay last
    if static_dir:
        app.include_router(build_frontend_router(static_dir))
    return app


origin_policy = OriginPolicy(ALLOWED_ORIGINS, ALLOWED_ORIGIN_PATTERNS)

# One registry for the whole process, shared by the HTTP app and the signaling handlers
registry = build_registry(REDIS_URL)

frontend_dir = STATIC_DIR if APP_ENV == "production" and os.path.isdir(STATIC_DIR) else None
app = create_app(registry, origin_policy, static_dir=frontend_dir)

sio = create_socketio_server(origin_policy, redis_url=REDIS_URL, debug=LOG_LEVEL.upper() == "DEBUG")
signaling_router = SignalingRouter(registry, SocketIOTransport(sio))
signaling_router.register(sio)

# socket.io handles /socket.io/, everything else goes to FastAPI
asgi_app = socketio.ASGIApp(sio, other_asgi_app=app)

logger.info(f"Signaling server initialized (env={APP_ENV}, registry={registry.backend_name})")
