"""FastAPI routes for the Storefront — catalog, carts, checkout, orders and metrics."""

from fastapi import APIRouter, HTTPException
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    AcceptedResponse,
    AddCartLineRequest,
    CartResponse,
    CheckoutRequest,
    MetricsResponse,
    OrderIdResponse,
    OrderResponse,
    ProductResponse,
    ScheduleDeliveryRequest,
    StatusResponse,
    UpdateCartLineRequest,
    UpdateOrderStatusRequest,
    WholesaleModeRequest,
)
from storefront.cart.cart import ShoppingCart
from storefront.cart.items import AddCartLine, RemoveCartLine, UpdateCartLineQuantity
from storefront.cart.management import ClearCart, ClearDeliverySchedule, ScheduleDelivery, SetWholesaleMode
from storefront.checkout.errors import CartValidationError, CheckoutIncompleteError, InsufficientStockError
from storefront.services import get_services
from storefront.session import Shopper


# ---------------------------------------------------------------------------
# Serializers
# ---------------------------------------------------------------------------
def _cart_response(cart: ShoppingCart) -> CartResponse:
    summary = cart.summary()
    validation = cart.validate()
    schedule = cart.delivery_schedule
    return CartResponse(
        user_id=str(cart.user_id),
        is_wholesale_mode=cart.is_wholesale_mode,
        lines=[
            {
                "product_id": str(line.product_id),
                "name": line.name,
                "brand": line.brand,
                "quantity": line.quantity,
                "unit_price": line.unit_price,
                "subtotal": line.subtotal,
                "min_order_quantity": line.min_order_quantity,
            }
            for line in cart.lines
        ],
        delivery_schedule=schedule.to_dict() if schedule else None,
        summary={
            "total_items": summary.total_items,
            "total_price": summary.total_price,
            "wholesale_savings": summary.wholesale_savings,
            "delivery_fee": summary.delivery_fee,
            "final_total": summary.final_total,
        },
        validation={"is_valid": validation.is_valid, "errors": validation.errors},
    )


def _order_response(order) -> OrderResponse:
    return OrderResponse(
        id=str(order.id),
        order_number=order.order_number,
        user_id=str(order.user_id),
        status=order.status,
        date=order.date,
        lines=[
            {
                "product_id": str(line.product_id),
                "name": line.name,
                "brand": line.brand,
                "quantity": line.quantity,
                "unit_price": line.unit_price,
                "subtotal": line.subtotal,
            }
            for line in order.lines
        ],
        total=order.total,
        wholesale_total=order.wholesale_total,
        savings=order.savings,
        delivery_date=order.delivery_date,
        delivery_time_slot=order.delivery_time_slot,
        delivery_address=order.delivery_address,
        payment_method=order.payment_method,
        is_wholesale=order.is_wholesale,
        origin=order.origin,
    )


def _metrics_response(metrics) -> MetricsResponse:
    return MetricsResponse(
        user_id=str(metrics.user_id),
        total_orders=metrics.total_orders,
        total_spent=metrics.total_spent,
        total_savings=metrics.total_savings,
        average_order_value=metrics.average_order_value,
        monthly_goal=metrics.monthly_goal,
        monthly_progress=metrics.monthly_progress,
        display_progress=metrics.display_progress,
        favorite_brand=metrics.favorite_brand,
        last_order_date=metrics.last_order_date,
        top_products=metrics.top_products_list,
        recent_activity=metrics.recent_activity_list,
    )


def _load_cart(user_id: str) -> ShoppingCart:
    return current_domain.repository_for(ShoppingCart).load(user_id)


# ---------------------------------------------------------------------------
# Catalog Router
# ---------------------------------------------------------------------------
catalog_router = APIRouter(prefix="/products", tags=["catalog"])


@catalog_router.get("", response_model=list[ProductResponse])
async def list_products() -> list[ProductResponse]:
    services = get_services()
    products = await services.catalog.list_products()
    services.ledger.sync(products)
    return [
        ProductResponse(
            id=product.id,
            name=product.name,
            brand=product.brand,
            category=product.category,
            price=product.price,
            wholesale_price=product.wholesale_price,
            min_order_quantity=product.min_order_quantity,
            max_order_quantity=product.max_order_quantity,
            stock=product.stock,
            available=services.ledger.get_available(product.id),
            is_available=product.is_available,
            weight=product.weight,
        )
        for product in products
    ]


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.get("/{user_id}", response_model=CartResponse)
async def get_cart(user_id: str) -> CartResponse:
    return _cart_response(_load_cart(user_id))


@cart_router.post("/{user_id}/lines", response_model=AcceptedResponse)
async def add_cart_line(user_id: str, body: AddCartLineRequest) -> AcceptedResponse:
    services = get_services()
    product = await services.catalog.get_product(body.product_id)
    if product is None:
        raise HTTPException(status_code=404, detail=f"Product {body.product_id} not found")
    services.ledger.sync([product])

    command = AddCartLine(
        user_id=user_id,
        product_id=product.id,
        name=product.name,
        brand=product.brand,
        category=product.category,
        weight=product.weight,
        price=product.price,
        wholesale_price=product.wholesale_price,
        min_order_quantity=product.min_order_quantity,
        is_available=product.is_available,
        quantity=body.quantity,
    )
    accepted = current_domain.process(command, asynchronous=False)
    return AcceptedResponse(accepted=accepted, available=services.ledger.get_available(product.id))


@cart_router.put("/{user_id}/lines/{product_id}", response_model=AcceptedResponse)
async def update_cart_line(user_id: str, product_id: str, body: UpdateCartLineRequest) -> AcceptedResponse:
    command = UpdateCartLineQuantity(user_id=user_id, product_id=product_id, quantity=body.quantity)
    accepted = current_domain.process(command, asynchronous=False)
    return AcceptedResponse(accepted=accepted, available=get_services().ledger.get_available(product_id))


@cart_router.delete("/{user_id}/lines/{product_id}", response_model=StatusResponse)
async def remove_cart_line(user_id: str, product_id: str) -> StatusResponse:
    current_domain.process(RemoveCartLine(user_id=user_id, product_id=product_id), asynchronous=False)
    return StatusResponse()


@cart_router.put("/{user_id}/wholesale-mode", response_model=CartResponse)
async def set_wholesale_mode(user_id: str, body: WholesaleModeRequest) -> CartResponse:
    current_domain.process(SetWholesaleMode(user_id=user_id, enabled=body.enabled), asynchronous=False)
    return _cart_response(_load_cart(user_id))


@cart_router.put("/{user_id}/delivery-schedule", response_model=CartResponse)
async def schedule_delivery(user_id: str, body: ScheduleDeliveryRequest) -> CartResponse:
    command = ScheduleDelivery(
        user_id=user_id,
        delivery_date=body.delivery_date,
        time_slot=body.time_slot,
        address=body.address,
        address_id=body.address_id,
        notes=body.notes,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(_load_cart(user_id))


@cart_router.delete("/{user_id}/delivery-schedule", response_model=StatusResponse)
async def clear_delivery_schedule(user_id: str) -> StatusResponse:
    current_domain.process(ClearDeliverySchedule(user_id=user_id), asynchronous=False)
    return StatusResponse()


@cart_router.delete("/{user_id}", response_model=StatusResponse)
async def clear_cart(user_id: str) -> StatusResponse:
    current_domain.process(ClearCart(user_id=user_id), asynchronous=False)
    return StatusResponse()


@cart_router.post("/{user_id}/checkout", status_code=201, response_model=OrderIdResponse)
async def checkout(user_id: str, body: CheckoutRequest) -> OrderIdResponse:
    services = get_services()
    shopper = Shopper(id=user_id, email=body.email, name=body.name)
    try:
        order_id = await services.checkout.checkout(_load_cart(user_id), shopper, body.payment_method)
    except CartValidationError as exc:
        raise HTTPException(status_code=400, detail={"errors": exc.errors}) from exc
    except InsufficientStockError as exc:
        raise HTTPException(
            status_code=409,
            detail={
                "product_id": exc.product_id,
                "requested": exc.requested,
                "available": exc.available,
            },
        ) from exc
    except CheckoutIncompleteError as exc:
        raise HTTPException(
            status_code=500,
            detail={
                "stage": exc.stage,
                "order_id": exc.order_id,
                "reserved_lines": [list(line) for line in exc.reserved_lines],
            },
        ) from exc
    return OrderIdResponse(order_id=order_id)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("", response_model=list[OrderResponse])
async def list_orders(user_id: str) -> list[OrderResponse]:
    orders = await get_services().orders.list_by_user(user_id)
    return [_order_response(order) for order in orders]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    order = await get_services().orders.get_by_id(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found")
    return _order_response(order)


@order_router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest) -> OrderResponse:
    services = get_services()
    if await services.orders.get_by_id(order_id) is None:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found")
    order = await services.orders.update_status(order_id, body.status)
    return _order_response(order)


# ---------------------------------------------------------------------------
# Metrics Router
# ---------------------------------------------------------------------------
metrics_router = APIRouter(prefix="/metrics", tags=["metrics"])


@metrics_router.get("/{user_id}", response_model=MetricsResponse)
async def get_metrics(user_id: str) -> MetricsResponse:
    return _metrics_response(get_services().metrics.get(user_id))


@metrics_router.post("/{user_id}/reload", response_model=MetricsResponse)
async def reload_metrics(user_id: str) -> MetricsResponse:
    return _metrics_response(await get_services().metrics.reload(user_id))


@metrics_router.delete("/{user_id}", response_model=StatusResponse)
async def reset_metrics(user_id: str) -> StatusResponse:
    get_services().metrics.reset(user_id)
    return StatusResponse()
