"""
Product Events - facts about a product

ProductCreated is the construction event; the rest are update events
and need an existing product to fold into.
"""

from aggregate_kernel.kernel.events import Event


class ProductEvent(Event):
    """Base of all product events"""


# Construction Event


class ProductCreated(ProductEvent):
    """A product was created"""

    name: str
    description: str
    price: float


# Update Events


class ProductUpdateEvent(ProductEvent):
    """Base of events that change an existing product"""


class NameChanged(ProductUpdateEvent):
    """The product was renamed"""

    new_name: str


class PriceChanged(ProductUpdateEvent):
    """The product got a new price"""

    new_price: float


PRODUCT_EVENT_TYPES = {
    "ProductCreated": ProductCreated,
    "NameChanged": NameChanged,
    "PriceChanged": PriceChanged,
}
