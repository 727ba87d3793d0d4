"""Repository for the Order aggregate — the local order store."""

from protean.exceptions import ObjectNotFoundError

from storefront.domain import storefront
from storefront.ordering.order import Order
from storefront.utils.query import fetch_all


@storefront.repository(part_of=Order)
class OrderRepository:
    def for_user(self, user_id) -> list[Order]:
        """The user's locally stored orders, newest first."""
        orders = fetch_all(self._dao.query.filter(user_id=str(user_id)))
        return sorted(orders, key=lambda order: order.created_at, reverse=True)

    def find(self, order_id) -> Order | None:
        try:
            return self.get(str(order_id))
        except ObjectNotFoundError:
            return None

    def exists(self, order_id) -> bool:
        return self.find(order_id) is not None

    def clear(self) -> int:
        orders = fetch_all(self._dao.query)
        for order in orders:
            self._dao.delete(order)
        return len(orders)
