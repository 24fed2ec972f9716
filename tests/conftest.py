"""
Pytest configuration and shared fixtures

Fixtures pin the clock and the event id source so that every stamped
event is reproducible.
"""

from datetime import datetime, timezone

import pytest

from aggregate_kernel.behavior.engine import Behavior
from aggregate_kernel.behavior.stamper import MetadataStamper
from aggregate_kernel.kernel.ids import SequentialIdFactory
from aggregate_kernel.kernel.settings import KernelSettings
from aggregate_kernel.kernel.time import TestTimeProvider
from aggregate_kernel.product.behavior import product_behavior
from aggregate_kernel.product.models import Product, ProductNumber


@pytest.fixture
def test_time() -> TestTimeProvider:
    """
    Provide a controllable time provider for deterministic tests

    Default time: 2025-01-15 12:00:00 UTC
    """
    return TestTimeProvider(datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def id_factory() -> SequentialIdFactory:
    """Predictable event ids: evt-000001, evt-000002, ..."""
    return SequentialIdFactory("evt")


@pytest.fixture
def stamper(test_time: TestTimeProvider, id_factory: SequentialIdFactory) -> MetadataStamper:
    """Stamper using the test clock and sequential ids"""
    return MetadataStamper(id_factory=id_factory, time_provider=test_time)


@pytest.fixture
def settings() -> KernelSettings:
    """Default settings with metrics left on so the recording path runs"""
    return KernelSettings()


@pytest.fixture
def product_number() -> ProductNumber:
    return ProductNumber.from_string("P-1001")


@pytest.fixture
def behavior(
    product_number: ProductNumber, stamper: MetadataStamper, settings: KernelSettings
) -> Behavior:
    """Product behavior engine with deterministic stamping"""
    return product_behavior(product_number, stamper=stamper, settings=settings)


@pytest.fixture
def widget(product_number: ProductNumber) -> Product:
    """Present product state: Widget at 9.99"""
    return Product(name="Widget", description="desc", price=9.99, id=product_number)
