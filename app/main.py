import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.health import router as health_router
from app.api.metrics import router as metrics_router
from app.api.orders import router as orders_router
from app.api.products import router as products_router
from app.api.users import router as users_router
from app.config import SERVICE_NAME, SERVICE_VERSION, get_settings
from app.observability import log_shipper
from app.observability.logging import configure_logging
from app.observability.middleware import RequestContextMiddleware


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    configure_logging(settings.log_level, json_output=not settings.is_development)
    log_shipper.init_logger()
    log_shipper.info(
        f"Starting server on {settings.host}:{settings.port}",
        {"environment": settings.environment, "server_ip": settings.server_ip},
    )

    yield

    log_shipper.info("Shutting down server...")
    # Drain queued entries before the HTTP client goes away; off the event loop.
    await asyncio.to_thread(log_shipper.reset_logger)


app = FastAPI(title=SERVICE_NAME, version=SERVICE_VERSION, lifespan=lifespan)
app.add_middleware(RequestContextMiddleware)
app.include_router(health_router)
app.include_router(users_router)
app.include_router(orders_router)
app.include_router(products_router)
app.include_router(metrics_router)
