"""Repository for the ShoppingCart aggregate — carts are looked up by user."""

from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront


@storefront.repository(part_of=ShoppingCart)
class CartRepository:
    def for_user(self, user_id) -> ShoppingCart | None:
        """The user's persisted cart, or None."""
        return self._dao.query.filter(user_id=str(user_id)).all().first

    def load(self, user_id) -> ShoppingCart:
        """The user's cart, or a fresh unsaved one."""
        return self.for_user(user_id) or ShoppingCart.create(user_id=str(user_id))
