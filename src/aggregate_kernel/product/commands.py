"""
Product Commands - intentions to change a product

Commands can fail (rejected by a rule), but events never fail -
they're facts that already happened!
"""

from pydantic import Field

from aggregate_kernel.kernel.commands import Command


class ProductCommand(Command):
    """Base of all product commands"""


# Creation Command


class CreateProduct(ProductCommand):
    """Create a new product; the only command accepted while absent"""

    name: str = Field(..., min_length=1)
    description: str = ""
    price: float


# Update Commands


class ChangePrice(ProductCommand):
    """Set a new price"""

    price: float


class ChangeName(ProductCommand):
    """Rename the product"""

    name: str = Field(..., min_length=1)


PRODUCT_COMMAND_TYPES = {
    "CreateProduct": CreateProduct,
    "ChangePrice": ChangePrice,
    "ChangeName": ChangeName,
}
