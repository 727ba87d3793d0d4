"""Domain events for the StockItem aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="StockItem")
class StockTracked:
    """A product started being tracked by the stock ledger."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    tracked_at = DateTime(required=True)


@storefront.event(part_of="StockItem")
class StockReserved:
    """Units were taken out of available stock at checkout."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    remaining = Integer(required=True)
    reserved_at = DateTime(required=True)


@storefront.event(part_of="StockItem")
class StockReleased:
    """Units were returned to available stock (cancellation or rollback)."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    available = Integer(required=True)
    released_at = DateTime(required=True)


@storefront.event(part_of="StockItem")
class StockCorrected:
    """Available stock was overwritten (manual correction or remote refresh)."""

    __version__ = 1

    product_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    source = String(max_length=50)
    corrected_at = DateTime(required=True)
