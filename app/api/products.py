from __future__ import annotations

from time import time_ns

from fastapi import APIRouter, Depends

from app.models.schemas import Product
from app.observability.log_shipper import LogShipper, get_logger
from app.services.simulation import chance, simulate_delay

router = APIRouter(prefix="/api", tags=["products"])

SLOW_RESPONSE_PERCENT = 10
SLOW_RESPONSE_MS = 2000

_PRODUCTS = [
    Product(id=1, name="Laptop Pro", price=1299.99, category="electronics", in_stock=True, rating=4.5),
    Product(id=2, name="Wireless Mouse", price=49.99, category="accessories", in_stock=True, rating=4.2),
    Product(id=3, name="Mechanical Keyboard", price=89.99, category="accessories", in_stock=False, rating=4.7),
]


@router.get("/products", response_model=list[Product])
async def list_products(shipper: LogShipper = Depends(get_logger)) -> list[Product]:
    request_id = f"prod-{time_ns()}"
    shipper.debug("Processing products request", {"request_id": request_id})

    if chance(SLOW_RESPONSE_PERCENT):
        shipper.warn("Simulating slow response", {"request_id": request_id, "delay_ms": SLOW_RESPONSE_MS})
        await simulate_delay(SLOW_RESPONSE_MS / 1000.0)

    shipper.info("Products request completed", {"request_id": request_id, "product_count": len(_PRODUCTS)})
    return list(_PRODUCTS)
