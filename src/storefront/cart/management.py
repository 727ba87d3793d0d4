"""Cart mode, delivery and reset — commands and handler."""

from protean import handle
from protean.fields import Boolean, Date, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront


@storefront.command(part_of="ShoppingCart")
class ToggleWholesaleMode:
    user_id = Identifier(required=True)


@storefront.command(part_of="ShoppingCart")
class SetWholesaleMode:
    user_id = Identifier(required=True)
    enabled = Boolean(required=True)


@storefront.command(part_of="ShoppingCart")
class ScheduleDelivery:
    user_id = Identifier(required=True)
    delivery_date = Date(required=True)
    time_slot = String(required=True, max_length=50)
    address = Text(required=True)
    address_id = String(max_length=64)
    notes = Text()


@storefront.command(part_of="ShoppingCart")
class ClearDeliverySchedule:
    user_id = Identifier(required=True)


@storefront.command(part_of="ShoppingCart")
class ClearCart:
    user_id = Identifier(required=True)


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartHandler:
    @handle(ToggleWholesaleMode)
    def toggle_wholesale_mode(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.load(command.user_id)
        cart.toggle_wholesale_mode()
        repo.add(cart)
        return cart.is_wholesale_mode

    @handle(SetWholesaleMode)
    def set_wholesale_mode(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.load(command.user_id)
        cart.set_wholesale_mode(command.enabled)
        repo.add(cart)
        return cart.is_wholesale_mode

    @handle(ScheduleDelivery)
    def schedule_delivery(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.load(command.user_id)
        cart.schedule_delivery(
            delivery_date=command.delivery_date.isoformat(),
            time_slot=command.time_slot,
            address=command.address,
            address_id=command.address_id,
            notes=command.notes,
        )
        repo.add(cart)
        return cart.delivery_schedule.schedule_id

    @handle(ClearDeliverySchedule)
    def clear_delivery_schedule(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.load(command.user_id)
        cart.clear_delivery_schedule()
        repo.add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.load(command.user_id)
        cart.clear()
        repo.add(cart)
