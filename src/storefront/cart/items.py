"""Cart line management — commands and handler.

Handlers check stock through the ledger but never reserve it; the boolean
they return tells the caller whether the change was accepted.
"""

from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront import config
from storefront.cart.cart import ShoppingCart
from storefront.catalog.product import Product
from storefront.domain import storefront
from storefront.services import get_services


@storefront.command(part_of="ShoppingCart")
class AddCartLine:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    name = String(required=True, max_length=200)
    brand = String(max_length=100)
    category = String(max_length=100)
    weight = String(max_length=50)
    price = Float(required=True, min_value=0.0)
    wholesale_price = Float(min_value=0.0)
    min_order_quantity = Integer(default=config.DEFAULT_MIN_ORDER_QUANTITY, min_value=1)
    is_available = Boolean(default=True)
    quantity = Integer(default=1, min_value=1)


@storefront.command(part_of="ShoppingCart")
class UpdateCartLineQuantity:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)


@storefront.command(part_of="ShoppingCart")
class RemoveCartLine:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartLinesHandler:
    @handle(AddCartLine)
    def add_cart_line(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.load(command.user_id)
        product = Product(
            id=str(command.product_id),
            name=command.name,
            brand=command.brand or "",
            category=command.category or "",
            weight=command.weight,
            price=command.price,
            wholesale_price=command.wholesale_price,
            min_order_quantity=command.min_order_quantity,
            is_available=command.is_available,
        )
        accepted = cart.add_line(product, command.quantity, get_services().ledger.is_available)
        if accepted:
            repo.add(cart)
        return accepted

    @handle(UpdateCartLineQuantity)
    def update_cart_line_quantity(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.load(command.user_id)
        accepted = cart.update_quantity(
            command.product_id,
            command.quantity,
            get_services().ledger.is_available,
        )
        if accepted:
            repo.add(cart)
        return accepted

    @handle(RemoveCartLine)
    def remove_cart_line(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.load(command.user_id)
        cart.remove_line(command.product_id)
        repo.add(cart)
