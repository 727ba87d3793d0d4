"""Checkout error hierarchy."""


class CheckoutError(Exception):
    """Base class for checkout failures."""


class CartValidationError(CheckoutError):
    """The cart failed validation; nothing was reserved or written."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Cart is not valid")


class InsufficientStockError(CheckoutError):
    """A line could not be reserved; no order was created and no stock was kept."""

    def __init__(self, product_id: str, requested: int, available: int):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(f"Not enough stock for {product_id}: requested {requested}, available {available}")


class CheckoutIncompleteError(CheckoutError):
    """Stock was reserved but a later step failed.

    The reserved stock is *not* released automatically; an operator has to
    reconcile it. ``reserved_lines`` lists what was taken and ``order_id`` is
    set when the order itself was written.
    """

    def __init__(self, stage: str, reserved_lines: list[tuple[str, int]], order_id: str | None = None, cause: str = ""):
        self.stage = stage
        self.reserved_lines = list(reserved_lines)
        self.order_id = order_id
        self.cause = cause
        super().__init__(f"Checkout failed at {stage} after stock was reserved: {cause}")
