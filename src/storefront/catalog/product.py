"""Product — catalog entry consumed by the cart and stock ledger.

Products are owned by the catalog service; the storefront only reads them.
"""

from dataclasses import dataclass

from storefront import config


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    price: float
    brand: str = ""
    category: str = ""
    wholesale_price: float | None = None
    min_order_quantity: int = config.DEFAULT_MIN_ORDER_QUANTITY
    max_order_quantity: int | None = None
    stock: int = 0
    is_available: bool = True
    weight: str | None = None

    def __post_init__(self):
        if self.wholesale_price is None:
            object.__setattr__(self, "wholesale_price", self.price)

    def unit_price(self, wholesale: bool) -> float:
        return self.wholesale_price if wholesale else self.price

    @classmethod
    def from_record(cls, record: dict) -> "Product":
        """Build a Product from a catalog row (remote table or seed entry)."""
        price = float(record.get("price") or 0)
        wholesale_price = record.get("wholesale_price")
        return cls(
            id=str(record["id"]),
            name=record.get("name", ""),
            brand=record.get("brand") or "",
            category=record.get("category") or "",
            price=price,
            wholesale_price=float(wholesale_price) if wholesale_price else price,
            min_order_quantity=int(record.get("min_order_quantity") or config.DEFAULT_MIN_ORDER_QUANTITY),
            max_order_quantity=record.get("max_order_quantity"),
            stock=int(record.get("stock") or 0),
            is_available=bool(record.get("is_available", record.get("is_active", True))),
            weight=record.get("weight"),
        )
