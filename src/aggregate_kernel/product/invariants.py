"""
Product Invariants - business rules a product command must satisfy

Pure predicates used as rejection guards.
"""

PRICE_TOO_LOW = "Price is too low!"


def is_price_too_low(price: float) -> bool:
    """A price must be strictly positive"""
    return price <= 0
