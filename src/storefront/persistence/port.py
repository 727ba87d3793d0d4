"""Remote backend port — abstract interface for the hosted data service.

The storefront programs against this port; adapters are swapped via
configuration. Rows are plain dicts shaped like the hosted tables
(``delivery_orders``, ``order_items``, ``products``).

Every method is a coroutine. Adapters raise ``BackendUnavailableError`` for
transport, configuration or schema failures; callers recover locally.
"""

from abc import ABC, abstractmethod


class BackendUnavailableError(Exception):
    """The remote backend could not serve a request."""

    def __init__(self, operation: str, reason: str = "Backend unavailable"):
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation}: {reason}")


class RemoteBackend(ABC):
    """Abstract interface for remote backend adapters."""

    # -------------------------------------------------------------------
    # Orders
    # -------------------------------------------------------------------
    @abstractmethod
    async def insert_order(self, order: dict, items: list[dict]) -> dict:
        """Insert an order row and its item rows.

        If the item rows cannot be written the order row is removed again.

        Returns:
            the stored order row, including its server-assigned ``id``,
            ``order_number`` and ``created_at``
        """
        ...

    @abstractmethod
    async def update_order_status(self, order_id: str, status: str) -> None:
        """Set the status column of an order row."""
        ...

    @abstractmethod
    async def fetch_orders(self, user_id: str) -> list[dict]:
        """Orders created by a user, newest first.

        Returns:
            list of order rows, each with an ``order_items`` list
        """
        ...

    @abstractmethod
    async def fetch_order(self, order_id: str) -> dict | None:
        """A single order row with its ``order_items``, or None."""
        ...

    # -------------------------------------------------------------------
    # Products and stock
    # -------------------------------------------------------------------
    @abstractmethod
    async def fetch_products(self) -> list[dict]:
        """All active product rows."""
        ...

    @abstractmethod
    async def fetch_stock(self, product_id: str) -> int | None:
        """Current stock column of a product, None when the product is unknown."""
        ...

    @abstractmethod
    async def decrement_stock(self, product_id: str, quantity: int) -> bool:
        """Conditionally decrement a product's stock.

        The decrement is applied only if the row still holds at least
        ``quantity`` units at write time (compare-and-swap).

        Returns:
            True when applied, False when stock was insufficient
        """
        ...

    @abstractmethod
    async def increment_stock(self, product_id: str, quantity: int) -> None:
        """Add ``quantity`` units to a product's stock."""
        ...
