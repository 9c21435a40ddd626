"""Health check endpoint."""

import time
from typing import Dict

from fastapi import APIRouter, Depends

from src.components.common.component import QanaryComponent

from ..dependencies import QANSWER, RUBQ, get_components
from ..models.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    components: Dict[str, QanaryComponent] = Depends(get_components)
) -> HealthResponse:
    """Check API and component health.

    Returns the status of each component and the statistics of its
    response cache.
    """
    start_time = time.time()
    services = {"api": "up"}
    caches = {}
    overall_status = "healthy"

    for name in (QANSWER, RUBQ):
        component = components.get(name)
        if component is None:
            services[name] = "down"
            overall_status = "unhealthy"
            continue
        services[name] = "up"
        caches[name] = component.query_builder.get_cache_stats()

    response_time_ms = (time.time() - start_time) * 1000

    return HealthResponse(
        status=overall_status,
        services=services,
        caches=caches,
        response_time_ms=round(response_time_ms, 2)
    )
