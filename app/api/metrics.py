from __future__ import annotations

import time

from fastapi import APIRouter
from fastapi.responses import Response

from app.models.schemas import MetricsInfoResponse
from app.observability.metrics import render_latest


router = APIRouter(tags=["metrics"])


@router.get("/api/metrics/info", response_model=MetricsInfoResponse)
async def metrics_info() -> MetricsInfoResponse:
    return MetricsInfoResponse(
        message="Metrics are available at /metrics endpoint",
        timestamp=int(time.time()),
    )


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    content, media_type = render_latest()
    return Response(content=content, media_type=media_type)
