"""
Product Module - the reference aggregate built on the behavior engine

A product is created with a name, description and positive price, and can
then be renamed and repriced.
"""

from aggregate_kernel.product.behavior import (
    ORDER_DEPENDENT_VIEW,
    PRODUCT_TAG,
    product_behavior,
)
from aggregate_kernel.product.commands import ChangeName, ChangePrice, CreateProduct
from aggregate_kernel.product.events import NameChanged, PriceChanged, ProductCreated
from aggregate_kernel.product.invariants import PRICE_TOO_LOW
from aggregate_kernel.product.models import Product, ProductNumber

__all__ = [
    "Product",
    "ProductNumber",
    "CreateProduct",
    "ChangePrice",
    "ChangeName",
    "ProductCreated",
    "NameChanged",
    "PriceChanged",
    "PRODUCT_TAG",
    "ORDER_DEPENDENT_VIEW",
    "PRICE_TOO_LOW",
    "product_behavior",
]
