from __future__ import annotations

from datetime import datetime, timezone
from time import time_ns

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.models.schemas import OrderRequest, OrderResponse
from app.observability.log_shipper import LogShipper, get_logger
from app.observability.metrics import record_error, record_order, record_product_view
from app.services.simulation import chance, roll, simulate_delay

router = APIRouter(prefix="/api", tags=["orders"])

PAYMENT_FAILURE_PERCENT = 15
MAX_PROCESSING_MS = 300


@router.post("/orders", status_code=201, response_model=OrderResponse)
async def create_order(request: Request, shipper: LogShipper = Depends(get_logger)) -> OrderResponse | JSONResponse:
    request_id = f"order-{time_ns()}"

    try:
        order = OrderRequest.model_validate_json(await request.body())
    except ValidationError as exc:
        shipper.error("Failed to parse order data", {"request_id": request_id, "error": str(exc)})
        record_error("validation", "/api/orders")
        return JSONResponse(status_code=400, content={"error": "Invalid JSON"})

    shipper.info(
        "Processing order",
        {"request_id": request_id, "user_id": order.user_id, "item_count": len(order.items)},
    )

    if chance(PAYMENT_FAILURE_PERCENT):
        message = "Payment processing failed"
        shipper.error(message, {"request_id": request_id, "error_type": "payment_error", "user_id": order.user_id})
        record_error("payment", "/api/orders")
        return JSONResponse(status_code=402, content={"error": message})

    processing_ms = roll(MAX_PROCESSING_MS)
    await simulate_delay(processing_ms / 1000.0)

    response = OrderResponse(
        success=True,
        order_id=roll(10000),
        status="completed",
        total=float(roll(1000)) + 0.99,
        timestamp=datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
    )

    record_order()
    for item in order.items:
        record_product_view(str(item.product_id))

    shipper.info(
        "Order processed successfully",
        {
            "request_id": request_id,
            "order_id": response.order_id,
            "processing_time": processing_ms,
            "total_amount": response.total,
        },
    )
    return response
