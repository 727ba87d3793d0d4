"""Order persistence strategies — remote hosted tables or the local store.

Services pick a strategy per operation with ``strategy_for(identity)``
instead of branching on identity shape inline. Both strategies speak in
``Order`` aggregates; the remote one maps to and from table rows.
"""

from abc import ABC, abstractmethod
from datetime import UTC, datetime
from random import randint
from uuid import uuid4

from protean.utils.globals import current_domain

from storefront.ordering.draft import DraftLine, OrderDraft
from storefront.ordering.order import Order, OrderOrigin, OrderStatus
from storefront.persistence.identity import is_server_identity
from storefront.persistence.port import RemoteBackend


class OrderPersistence(ABC):
    origin: OrderOrigin

    @abstractmethod
    async def save(self, draft: OrderDraft) -> Order:
        """Store a new order and return it with its assigned id."""
        ...

    @abstractmethod
    async def write_status(self, order: Order, status: str) -> None: ...

    @abstractmethod
    async def list_for_user(self, user_id: str) -> list[Order]:
        """The user's orders, newest first."""
        ...

    @abstractmethod
    async def fetch(self, order_id: str) -> Order | None: ...


# ---------------------------------------------------------------------------
# Remote
# ---------------------------------------------------------------------------
def order_row(draft: OrderDraft) -> dict:
    return {
        "created_by": draft.user_id,
        "total": draft.total,
        "wholesale_total": draft.wholesale_total,
        "savings": draft.savings,
        "status": OrderStatus.PENDING.value,
        "payment_status": "pending",
        "delivery_status": "scheduled",
        "delivery_address": draft.delivery_address,
        "delivery_address_id": draft.delivery_address_id if is_server_identity(draft.delivery_address_id) else None,
        "delivery_date": draft.delivery_date,
        "delivery_time_slot": draft.delivery_time_slot,
        "payment_method": draft.payment_method,
        "notes": draft.delivery_notes,
        "is_wholesale": draft.is_wholesale,
    }


def item_rows(draft: OrderDraft) -> list[dict]:
    # Only catalog products with a server identity can reference the products table.
    return [
        {
            "product_id": line.product_id if is_server_identity(line.product_id) else None,
            "product_code": line.product_id,
            "product_name": line.name,
            "product_brand": line.brand,
            "quantity": line.quantity,
            "price": line.unit_price,
            "unit_price": line.unit_price,
            "subtotal": line.subtotal,
            "weight": line.weight,
        }
        for line in draft.lines
    ]


def _parse_timestamp(value) -> datetime:
    if isinstance(value, datetime):
        return value
    if not value:
        return datetime.now(UTC)
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def order_from_row(row: dict) -> Order:
    """Map a ``delivery_orders`` row (with ``order_items``) to an Order."""
    lines = []
    for item in row.get("order_items") or []:
        unit_price = float(item.get("unit_price") or item.get("price") or 0)
        quantity = int(item["quantity"])
        lines.append(
            DraftLine(
                product_id=str(item.get("product_id") or item.get("product_code") or item["product_name"]),
                name=item["product_name"],
                brand=item.get("product_brand") or "",
                weight=item.get("weight"),
                quantity=quantity,
                unit_price=unit_price,
                subtotal=float(item.get("subtotal") or quantity * unit_price),
            )
        )

    draft = OrderDraft(
        user_id=str(row["created_by"]),
        lines=tuple(lines),
        total=float(row.get("total") or 0),
        wholesale_total=float(row.get("wholesale_total") or 0),
        savings=float(row.get("savings") or 0),
        payment_method=row.get("payment_method") or "",
        is_wholesale=bool(row.get("is_wholesale", True)),
        delivery_date=row.get("delivery_date"),
        delivery_time_slot=row.get("delivery_time_slot"),
        delivery_address=row.get("delivery_address"),
        delivery_address_id=row.get("delivery_address_id"),
        delivery_notes=row.get("notes"),
    )
    return Order.from_draft(
        str(row["id"]),
        draft,
        OrderOrigin.REMOTE,
        created_at=_parse_timestamp(row.get("created_at")),
        order_number=row.get("order_number"),
        status=row.get("status") or OrderStatus.PENDING.value,
    )


class RemoteOrderPersistence(OrderPersistence):
    origin = OrderOrigin.REMOTE

    def __init__(self, backend: RemoteBackend):
        self.backend = backend

    async def save(self, draft: OrderDraft) -> Order:
        row = await self.backend.insert_order(order_row(draft), item_rows(draft))
        return Order.place(
            str(row["id"]),
            draft,
            OrderOrigin.REMOTE,
            created_at=_parse_timestamp(row.get("created_at")),
            order_number=row.get("order_number"),
        )

    async def write_status(self, order: Order, status: str) -> None:
        await self.backend.update_order_status(str(order.id), status)

    async def list_for_user(self, user_id: str) -> list[Order]:
        rows = await self.backend.fetch_orders(user_id)
        return [order_from_row(row) for row in rows]

    async def fetch(self, order_id: str) -> Order | None:
        row = await self.backend.fetch_order(order_id)
        return order_from_row(row) if row else None


# ---------------------------------------------------------------------------
# Local
# ---------------------------------------------------------------------------
class LocalOrderPersistence(OrderPersistence):
    origin = OrderOrigin.LOCAL

    @property
    def _repo(self):
        return current_domain.repository_for(Order)

    def next_id(self, today: datetime | None = None) -> str:
        """A fresh ``FL-YYYY-MMDD-NNN`` id not used by any stored order."""
        today = today or datetime.now(UTC)
        prefix = f"FL-{today:%Y}-{today:%m%d}"
        for _ in range(50):
            candidate = f"{prefix}-{randint(0, 999):03d}"
            if not self._repo.exists(candidate):
                return candidate
        return f"{prefix}-{uuid4().hex[:6].upper()}"

    async def save(self, draft: OrderDraft) -> Order:
        order = Order.place(self.next_id(), draft, OrderOrigin.LOCAL)
        self._repo.add(order)
        return order

    async def write_status(self, order: Order, status: str) -> None:
        stored = self._repo.find(order.id)
        stored.change_status(status)
        self._repo.add(stored)

    async def list_for_user(self, user_id: str) -> list[Order]:
        return self._repo.for_user(user_id)

    async def fetch(self, order_id: str) -> Order | None:
        return self._repo.find(order_id)

    def cache(self, order: Order) -> bool:
        """Keep a copy of a remote order in the local store, refreshing its status.

        A cached copy that is already cancelled keeps its status: its stock
        was released when it was cancelled here.

        Returns:
            True if the local store changed
        """
        stored = self._repo.find(order.id)
        if stored is None:
            self._repo.add(order)
            return True
        if stored.is_cancelled or stored.status == order.status:
            return False

        stored.status = order.status
        stored.updated_at = order.updated_at
        self._repo.add(stored)
        return True

    def clear(self) -> int:
        return self._repo.clear()


def strategy_for(identity, remote: RemoteOrderPersistence, local: LocalOrderPersistence) -> OrderPersistence:
    return remote if is_server_identity(identity) else local
