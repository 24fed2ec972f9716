"""
Product Behavior - rule tables of the product aggregate

While constructing, only CreateProduct is understood. Once the product
exists it accepts ChangePrice and ChangeName. Both CreateProduct and
ChangePrice are rejected with "Price is too low!" for non-positive prices.
They only emit for strictly positive prices, so a price that is neither
(NaN) is left unhandled and never reaches the state.

Every product event carries the product aggregate tag and the order
dependent-view tag, so order views can follow product changes.
"""

from aggregate_kernel.behavior.engine import Behavior
from aggregate_kernel.behavior.rules import Phase, PhaseRules
from aggregate_kernel.behavior.stamper import MetadataStamper
from aggregate_kernel.kernel.events import EventDraft
from aggregate_kernel.kernel.settings import KernelSettings
from aggregate_kernel.kernel.tags import aggregate_tag, dependent_view_tag
from aggregate_kernel.product.commands import ChangeName, ChangePrice, CreateProduct
from aggregate_kernel.product.events import NameChanged, PriceChanged, ProductCreated
from aggregate_kernel.product.invariants import PRICE_TOO_LOW, is_price_too_low
from aggregate_kernel.product.models import Product, ProductNumber

AGGREGATE_TYPE = "product"
PRODUCT_TAG = aggregate_tag(AGGREGATE_TYPE)
ORDER_DEPENDENT_VIEW = dependent_view_tag("order")


# Construction phase


def emit_product_created(cmd: CreateProduct) -> EventDraft:
    return ProductCreated.draft(
        name=cmd.name,
        description=cmd.description,
        price=cmd.price,
    )


def constructing_rules(product_number: ProductNumber) -> PhaseRules:
    """Rules while the product does not exist yet"""

    def create(event: ProductCreated) -> Product:
        return Product(
            name=event.name,
            description=event.description,
            price=event.price,
            id=product_number,
        )

    return (
        PhaseRules(Phase.CONSTRUCTING, events=(ProductCreated,))
        .rejects(
            CreateProduct,
            PRICE_TOO_LOW,
            when=lambda cmd: is_price_too_low(cmd.price),
        )
        .emits_event(
            CreateProduct,
            emit_product_created,
            when=lambda cmd: cmd.price > 0,
        )
        .accepts_event(ProductCreated, create)
    )


# Update phase


def emit_price_changed(product: Product, cmd: ChangePrice) -> EventDraft:
    return PriceChanged.draft(new_price=cmd.price)


def emit_name_changed(product: Product, cmd: ChangeName) -> EventDraft:
    return NameChanged.draft(new_name=cmd.name)


def apply_name_changed(product: Product, event: NameChanged) -> Product:
    return product.model_copy(update={"name": event.new_name})


def apply_price_changed(product: Product, event: PriceChanged) -> Product:
    return product.model_copy(update={"price": event.new_price})


def updating_rules() -> PhaseRules:
    """Rules once the product exists"""
    return (
        PhaseRules(Phase.UPDATING, events=(NameChanged, PriceChanged))
        .rejects(
            ChangePrice,
            PRICE_TOO_LOW,
            when=lambda product, cmd: is_price_too_low(cmd.price),
        )
        .emits_event(
            ChangePrice,
            emit_price_changed,
            when=lambda product, cmd: cmd.price > 0,
        )
        .emits_event(ChangeName, emit_name_changed)
        .accepts_event(NameChanged, apply_name_changed)
        .accepts_event(PriceChanged, apply_price_changed)
    )


def product_behavior(
    product_number: ProductNumber,
    stamper: MetadataStamper | None = None,
    settings: KernelSettings | None = None,
) -> Behavior:
    """
    Build the behavior engine of one product

    Args:
        product_number: Identity of the product
        stamper: Metadata stamper (injectable for deterministic tests)
        settings: Kernel settings

    Example:
        >>> behavior = product_behavior(ProductNumber.from_string("P-1"))
        >>> result = behavior.handle(None, CreateProduct(name="Widget", price=9.99))
        >>> result.state.price
        9.99
    """
    return Behavior(
        aggregate_id=product_number,
        aggregate_type=AGGREGATE_TYPE,
        constructing=constructing_rules(product_number),
        updating=updating_rules(),
        tags=(ORDER_DEPENDENT_VIEW,),
        stamper=stamper,
        settings=settings,
    )
