from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str
    timestamp: int
    version: str
    service: str


class User(BaseModel):
    id: int
    name: str
    email: str
    created_at: str


class OrderItem(BaseModel):
    product_id: int
    quantity: int = 0


class OrderRequest(BaseModel):
    user_id: int = 0
    items: list[OrderItem] = Field(default_factory=list)


class OrderResponse(BaseModel):
    success: bool
    order_id: int
    status: str
    total: float
    timestamp: str


class Product(BaseModel):
    id: int
    name: str
    price: float
    category: str
    in_stock: bool
    rating: float


class MetricsInfoResponse(BaseModel):
    message: str
    timestamp: int
