"""Tests for Product records and the identity-shape predicate."""

from storefront.catalog.product import Product
from storefront.persistence.identity import is_server_identity


class TestProductFromRecord:
    def test_defaults(self):
        product = Product.from_record({"id": "p1", "name": "Lay's", "price": 2.5})

        assert product.wholesale_price == 2.5
        assert product.min_order_quantity == 12
        assert product.stock == 0
        assert product.is_available is True

    def test_maps_columns(self):
        product = Product.from_record(
            {
                "id": "p1",
                "name": "Doritos",
                "brand": "Doritos",
                "price": "3.0",
                "wholesale_price": 2.5,
                "min_order_quantity": 6,
                "stock": 40,
                "is_active": False,
            }
        )

        assert product.price == 3.0
        assert product.wholesale_price == 2.5
        assert product.min_order_quantity == 6
        assert product.stock == 40
        assert product.is_available is False

    def test_unit_price(self):
        product = Product(id="p1", name="Cheetos", price=2.0, wholesale_price=1.5)

        assert product.unit_price(wholesale=True) == 1.5
        assert product.unit_price(wholesale=False) == 2.0


class TestServerIdentity:
    def test_uuid_is_server_identity(self):
        assert is_server_identity("3f1c2a9e-8b7d-4c6e-9a5f-1b2c3d4e5f60")
        assert is_server_identity("3F1C2A9E-8B7D-4C6E-9A5F-1B2C3D4E5F60")

    def test_other_shapes_are_local(self):
        assert not is_server_identity("guest-001")
        assert not is_server_identity("FL-2026-1019-042")
        assert not is_server_identity("")
        assert not is_server_identity(None)
