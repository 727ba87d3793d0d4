"""Domain events for the ShoppingCart aggregate."""

from protean.fields import Boolean, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="ShoppingCart")
class CartLineAdded:
    """A product was added to the cart (or merged into its existing line)."""

    __version__ = 1

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    line_quantity = Integer(required=True)
    unit_price = Float(required=True)


@storefront.event(part_of="ShoppingCart")
class CartLineQuantityUpdated:
    """A cart line's quantity was changed."""

    __version__ = 1

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@storefront.event(part_of="ShoppingCart")
class CartLineRemoved:
    """A line was removed from the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)


@storefront.event(part_of="ShoppingCart")
class WholesaleModeToggled:
    """Pricing mode switched; every line was repriced."""

    __version__ = 1

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
    is_wholesale_mode = Boolean(required=True)


@storefront.event(part_of="ShoppingCart")
class DeliveryScheduled:
    """A delivery schedule was attached to the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
    schedule_id = Identifier(required=True)
    delivery_date = String(required=True)
    time_slot = String(required=True)


@storefront.event(part_of="ShoppingCart")
class CartCleared:
    """All lines and the delivery schedule were dropped."""

    __version__ = 1

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
    lines_removed = Integer(required=True)
