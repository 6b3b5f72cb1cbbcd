from __future__ import annotations

import time

from fastapi import APIRouter, Depends, Request

from app.config import SERVICE_NAME, SERVICE_VERSION
from app.models.schemas import HealthResponse
from app.observability.log_shipper import LogShipper, get_logger

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health(request: Request, shipper: LogShipper = Depends(get_logger)) -> HealthResponse:
    shipper.info(
        "Health check requested",
        {
            "client_ip": request.client.host if request.client else None,
            "user_agent": request.headers.get("user-agent", ""),
        },
    )
    return HealthResponse(
        status="healthy",
        timestamp=int(time.time()),
        version=SERVICE_VERSION,
        service=SERVICE_NAME,
    )
