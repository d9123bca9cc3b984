"""
Storefront Backend — Status & Health Routes
=============================================

What:  GET / (plain-text liveness line) and GET /health (dependency status).
Who:   Browsers hitting the bare URL, Docker health checks, load balancers.

Status levels:
    - healthy:   MongoDB reachable and image storage available
    - degraded:  MongoDB reachable, image storage (Cloudinary) unavailable
    - unhealthy: MongoDB unreachable
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from storefront import __version__
from storefront.database import DocumentStore, get_store
from storefront.schemas.common import HealthResponse
from storefront.services.image_base import ImageMaterializer, get_materializer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/", response_class=PlainTextResponse, summary="Service status line")
async def root() -> str:
    return "Storefront API is running"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(
    store: DocumentStore = Depends(get_store),
    materializer: ImageMaterializer = Depends(get_materializer),
) -> HealthResponse:
    """
    Probe MongoDB (`ping`) and the image strategy, return aggregate status.
    """
    overall = "healthy"

    db_status = "connected" if await store.ping() else "disconnected"
    if db_status == "disconnected":
        overall = "unhealthy"
        logger.warning("Health check: database unreachable")

    image_ok = await materializer.health_check()
    if not image_ok and overall == "healthy":
        overall = "degraded"

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        image_storage=f"{materializer.name}:{'available' if image_ok else 'unavailable'}",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
