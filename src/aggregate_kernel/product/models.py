"""
Product Domain Models - state of the product aggregate
"""

from pydantic import Field

from aggregate_kernel.kernel.aggregate import Aggregate
from aggregate_kernel.kernel.ids import AggregateId


class ProductNumber(AggregateId):
    """Identifier of a product, e.g. "P-1001" """

    @classmethod
    def from_string(cls, aggregate_id: str) -> "ProductNumber":
        return cls(value=aggregate_id)


class Product(Aggregate):
    """
    A product in the catalogue

    Attributes:
        name: Display name
        description: Free-text description
        price: Current price, always positive
        id: Product number (never changes)
    """

    name: str
    description: str
    price: float = Field(..., gt=0)
    id: ProductNumber

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Widget",
                    "description": "A very useful widget",
                    "price": 9.99,
                    "id": {"value": "P-1001"},
                }
            ]
        },
    }
