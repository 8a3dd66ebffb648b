import os

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from logging_config import get_logger

logger = get_logger(__name__)


def build_frontend_router(static_dir: str) -> APIRouter:
    """Serve the production frontend build, falling back to index.html for client-side routes."""
    root = os.path.realpath(static_dir)
    index_file = os.path.join(root, "index.html")
    frontend_router = APIRouter(tags=["frontend"])
    logger.info(f"Serving frontend build from {root}")

    @frontend_router.get("/{full_path:path}", include_in_schema=False)
    async def serve_frontend(full_path: str):
        candidate = os.path.realpath(os.path.join(root, full_path))
        if candidate.startswith(root + os.sep) and os.path.isfile(candidate):
            return FileResponse(candidate)
        if not os.path.isfile(index_file):
            raise HTTPException(status_code=404, detail="Frontend build not found")
        return FileResponse(index_file)

    return frontend_router
