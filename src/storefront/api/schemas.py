"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands and aggregates.
"""

from datetime import date

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class AcceptedResponse(BaseModel):
    accepted: bool
    available: int | None = None


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------
class ProductResponse(BaseModel):
    id: str
    name: str
    brand: str
    category: str
    price: float
    wholesale_price: float
    min_order_quantity: int
    max_order_quantity: int | None = None
    stock: int
    available: int
    is_available: bool
    weight: str | None = None


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddCartLineRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)


class UpdateCartLineRequest(BaseModel):
    quantity: int


class WholesaleModeRequest(BaseModel):
    enabled: bool


class ScheduleDeliveryRequest(BaseModel):
    delivery_date: date
    time_slot: str
    address: str
    address_id: str | None = None
    notes: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "delivery_date": "2026-10-21",
                    "time_slot": "09:00 - 12:00",
                    "address": "Av. Principal 123, Lima",
                    "notes": "Ring the bell",
                }
            ]
        }
    }


class CartLineResponse(BaseModel):
    product_id: str
    name: str
    brand: str | None = None
    quantity: int
    unit_price: float
    subtotal: float
    min_order_quantity: int


class DeliveryScheduleResponse(BaseModel):
    schedule_id: str
    delivery_date: str
    time_slot: str
    address: str
    address_id: str | None = None
    notes: str | None = None


class CartSummaryResponse(BaseModel):
    total_items: int
    total_price: float
    wholesale_savings: float
    delivery_fee: float
    final_total: float


class CartValidationResponse(BaseModel):
    is_valid: bool
    errors: list[str]


class CartResponse(BaseModel):
    user_id: str
    is_wholesale_mode: bool
    lines: list[CartLineResponse]
    delivery_schedule: DeliveryScheduleResponse | None = None
    summary: CartSummaryResponse
    validation: CartValidationResponse


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    payment_method: str
    email: str = ""
    name: str = ""


class OrderIdResponse(BaseModel):
    order_id: str


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class UpdateOrderStatusRequest(BaseModel):
    status: str


class OrderLineResponse(BaseModel):
    product_id: str
    name: str
    brand: str | None = None
    quantity: int
    unit_price: float
    subtotal: float


class OrderResponse(BaseModel):
    id: str
    order_number: str | None = None
    user_id: str
    status: str
    date: str
    lines: list[OrderLineResponse]
    total: float
    wholesale_total: float
    savings: float
    delivery_date: str | None = None
    delivery_time_slot: str | None = None
    delivery_address: str | None = None
    payment_method: str | None = None
    is_wholesale: bool
    origin: str


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------
class TopProductResponse(BaseModel):
    name: str
    quantity: int
    revenue: float


class ActivityResponse(BaseModel):
    type: str
    description: str
    date: str
    amount: float


class MetricsResponse(BaseModel):
    user_id: str
    total_orders: int
    total_spent: float
    total_savings: float
    average_order_value: float
    monthly_goal: float
    monthly_progress: float
    display_progress: float
    favorite_brand: str | None = None
    last_order_date: str | None = None
    top_products: list[TopProductResponse]
    recent_activity: list[ActivityResponse]
