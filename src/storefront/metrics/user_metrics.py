"""UserMetrics aggregate (CQRS) — per-user purchase figures.

Two update paths exist on purpose:

- ``apply_order`` adds one completed order to the running figures. It is
  cheap and runs on every checkout.
- ``rebuild_from_history`` throws the running figures away and derives them
  from the order history. It runs after a cancellation, because ranked
  top-products and the bounded activity list cannot be un-applied.

Cumulative product and brand tallies are kept in full (JSON text fields) so
the top-3 ranking stays correct as orders accumulate.
"""

import json
from datetime import UTC, datetime

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from storefront import config
from storefront.domain import storefront


def _month_of(day: str) -> str:
    return day[:7]


@storefront.aggregate
class UserMetrics:
    user_id = Identifier(identifier=True, required=True)
    total_orders = Integer(default=0, min_value=0)
    total_spent = Float(default=0.0)
    total_savings = Float(default=0.0)
    average_order_value = Float(default=0.0)
    monthly_goal = Float(default=config.MONTHLY_GOAL)
    monthly_progress = Float(default=0.0)  # Raw sum; display value is capped at the goal
    progress_month = String(max_length=7)  # YYYY-MM
    last_order_date = String(max_length=10)
    favorite_brand = String(max_length=100)
    product_totals = Text()  # JSON: {name: {"quantity": int, "revenue": float}}
    brand_totals = Text()  # JSON: {brand: quantity}
    top_products = Text()  # JSON: [{"name", "quantity", "revenue"}]
    recent_activity = Text()  # JSON: [{"type", "description", "date", "amount"}]
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def blank(cls, user_id, monthly_goal=config.MONTHLY_GOAL):
        return cls(
            user_id=user_id,
            monthly_goal=monthly_goal,
            product_totals=json.dumps({}),
            brand_totals=json.dumps({}),
            top_products=json.dumps([]),
            recent_activity=json.dumps([]),
        )

    # -------------------------------------------------------------------
    # Read helpers
    # -------------------------------------------------------------------
    @property
    def top_products_list(self) -> list[dict]:
        return json.loads(self.top_products) if self.top_products else []

    @property
    def recent_activity_list(self) -> list[dict]:
        return json.loads(self.recent_activity) if self.recent_activity else []

    @property
    def display_progress(self) -> float:
        return min(self.monthly_progress or 0.0, self.monthly_goal or 0.0)

    def _product_totals(self) -> dict:
        return json.loads(self.product_totals) if self.product_totals else {}

    def _brand_totals(self) -> dict:
        return json.loads(self.brand_totals) if self.brand_totals else {}

    # -------------------------------------------------------------------
    # Incremental path
    # -------------------------------------------------------------------
    def apply_order(self, total, savings, lines, today: str | None = None):
        """Add one completed order.

        ``lines`` are objects exposing ``name``, ``brand``, ``quantity`` and
        ``subtotal`` (cart lines or order lines).
        """
        today = today or datetime.now(UTC).date().isoformat()

        self.total_orders += 1
        self.total_spent += total
        self.total_savings += savings
        self.average_order_value = self.total_spent / self.total_orders

        if self.progress_month != _month_of(today):
            self.progress_month = _month_of(today)
            self.monthly_progress = 0.0
        self.monthly_progress += total
        self.last_order_date = today

        products = self._product_totals()
        brands = self._brand_totals()
        _tally(products, brands, lines)
        self._store_tallies(products, brands)

        activity = [_activity_entry(total, today), *self.recent_activity_list]
        self.recent_activity = json.dumps(activity[: config.RECENT_ACTIVITY_LIMIT])
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Recompute path
    # -------------------------------------------------------------------
    def rebuild_from_history(self, orders, today: str | None = None):
        """Recompute every figure from ``orders``; cancelled orders are skipped."""
        today = today or datetime.now(UTC).date().isoformat()
        current_month = _month_of(today)
        orders = sorted(
            (order for order in orders if not order.is_cancelled),
            key=lambda order: order.created_at,
            reverse=True,
        )

        self.total_orders = len(orders)
        self.total_spent = sum(order.total for order in orders)
        self.total_savings = sum(order.savings or 0.0 for order in orders)
        self.average_order_value = self.total_spent / self.total_orders if orders else 0.0
        self.progress_month = current_month
        self.monthly_progress = sum(order.total for order in orders if _month_of(order.date) == current_month)
        self.last_order_date = orders[0].date if orders else None

        products: dict = {}
        brands: dict = {}
        for order in orders:
            _tally(products, brands, order.lines)
        self._store_tallies(products, brands)

        activity = [_activity_entry(order.total, order.date) for order in orders]
        self.recent_activity = json.dumps(activity[: config.RECENT_ACTIVITY_LIMIT])
        self.updated_at = datetime.now(UTC)

    def _store_tallies(self, products: dict, brands: dict):
        ranked = sorted(products.items(), key=lambda item: item[1]["revenue"], reverse=True)
        self.product_totals = json.dumps(products)
        self.brand_totals = json.dumps(brands)
        self.top_products = json.dumps(
            [{"name": name, **totals} for name, totals in ranked[: config.TOP_PRODUCTS_LIMIT]]
        )
        if brands:
            self.favorite_brand = max(brands.items(), key=lambda item: item[1])[0]
        else:
            self.favorite_brand = None


def _tally(products: dict, brands: dict, lines):
    for line in lines:
        entry = products.setdefault(line.name, {"quantity": 0, "revenue": 0.0})
        entry["quantity"] += line.quantity
        entry["revenue"] += line.subtotal
        if line.brand:
            brands[line.brand] = brands.get(line.brand, 0) + line.quantity


def _activity_entry(amount, day) -> dict:
    return {"type": "order", "description": "Order completed", "date": day, "amount": amount}
