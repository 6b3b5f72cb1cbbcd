from __future__ import annotations

from datetime import datetime, timedelta, timezone
from time import time_ns

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.models.schemas import User
from app.observability.log_shipper import LogShipper, get_logger
from app.observability.metrics import record_error
from app.services.simulation import chance, roll, simulate_delay

router = APIRouter(prefix="/api", tags=["users"])

FAILURE_PERCENT = 20
MAX_DELAY_MS = 200


def _sample_users(now: datetime) -> list[User]:
    def created(hours: int) -> str:
        return (now - timedelta(hours=hours)).strftime("%Y-%m-%dT%H:%M:%SZ")

    return [
        User(id=1, name="John Doe", email="john@example.com", created_at=created(24)),
        User(id=2, name="Jane Smith", email="jane@example.com", created_at=created(12)),
        User(id=3, name="Bob Johnson", email="bob@example.com", created_at=created(6)),
    ]


@router.get("/users", response_model=list[User])
async def list_users(request: Request, shipper: LogShipper = Depends(get_logger)) -> list[User] | JSONResponse:
    request_id = f"req-{time_ns()}"
    shipper.info(
        "Processing users request",
        {"request_id": request_id, "method": request.method, "path": request.url.path},
    )

    if chance(FAILURE_PERCENT):
        message = "Database connection failed"
        shipper.error(message, {"request_id": request_id, "error_type": "database_error", "retry_count": 2})
        record_error("database", "/api/users")
        return JSONResponse(status_code=500, content={"error": message})

    delay_ms = roll(MAX_DELAY_MS)
    await simulate_delay(delay_ms / 1000.0)

    users = _sample_users(datetime.now(timezone.utc))
    shipper.info(
        "Users request completed",
        {"request_id": request_id, "user_count": len(users), "response_time": delay_ms},
    )
    return users
