"""
Tests for the Behavior Engine protocol
"""

import pytest

from aggregate_kernel.behavior.engine import (
    Accepted,
    Behavior,
    CommandFailure,
    InvalidFoldState,
    Rejected,
    UnhandledCommand,
)
from aggregate_kernel.behavior.rules import Phase, PhaseRules
from aggregate_kernel.behavior.stamper import MetadataStamper
from aggregate_kernel.kernel.errors import (
    CommandRejected,
    IncompleteBehaviorError,
    InvalidFoldStateError,
    UnhandledCommandError,
)
from aggregate_kernel.kernel.settings import KernelSettings
from aggregate_kernel.kernel.tags import aggregate_tag
from aggregate_kernel.product.commands import ChangeName, ChangePrice, CreateProduct
from aggregate_kernel.product.events import NameChanged, PriceChanged, ProductCreated
from aggregate_kernel.product.models import Product, ProductNumber
from tests.helpers import (
    LEDGER_VIEW,
    Account,
    AccountNumber,
    AccountOpened,
    Deposit,
    Deposited,
    Freeze,
    OpenAccount,
    SplitDeposit,
    Withdraw,
    account_behavior,
)


@pytest.fixture
def accounts(stamper: MetadataStamper) -> Behavior:
    return account_behavior(stamper=stamper)


@pytest.fixture
def opened(accounts: Behavior) -> Account:
    return accounts.handle(None, OpenAccount(owner="alice")).state


def test_accepted_result_carries_state_and_events(accounts: Behavior) -> None:
    result = accounts.handle(None, OpenAccount(owner="alice", command_id="cmd-1"))

    assert isinstance(result, Accepted)
    assert result.ok
    assert result.state == Account(owner="alice", balance=0, id=AccountNumber(value="ACC-1"))
    [event] = result.events
    assert isinstance(event, AccountOpened)
    assert event.metadata.command_id == "cmd-1"
    assert event.metadata.aggregate_id == accounts.aggregate_id


def test_every_event_gets_type_tag_and_configured_tags(accounts: Behavior) -> None:
    result = accounts.handle(None, OpenAccount(owner="alice"))

    assert result.events[0].metadata.tags == frozenset({aggregate_tag("account"), LEDGER_VIEW})


def test_multi_event_command_folds_all_events_in_order(
    accounts: Behavior, opened: Account
) -> None:
    result = accounts.handle(opened, SplitDeposit(amounts=[5, 10, 20], command_id="cmd-9"))

    assert isinstance(result, Accepted)
    assert [type(e) for e in result.events] == [Deposited, Deposited, Deposited]
    assert [e.amount for e in result.events] == [5, 10, 20]
    assert {e.metadata.command_id for e in result.events} == {"cmd-9"}
    assert len({e.metadata.event_id for e in result.events}) == 3
    assert result.state.balance == 35


def test_rejection_short_circuits(accounts: Behavior, opened: Account) -> None:
    result = accounts.handle(opened, Withdraw(amount=1))

    assert isinstance(result, Rejected)
    assert not result.ok
    assert result.events == ()
    assert result.state == opened
    assert result.reason.message == "Insufficient funds: balance 0, requested 1"


def test_accepted_by_rejection_but_unhandled_by_emission(
    accounts: Behavior, opened: Account
) -> None:
    """Freeze passes the pass-through rejection step, then fails loudly"""
    assert accounts.rejection.evaluate(opened, Freeze()) is None

    result = accounts.handle(opened, Freeze())

    assert isinstance(result, UnhandledCommand)
    assert result.command_type == "Freeze"
    assert result.phase is Phase.UPDATING
    assert result.state == opened
    assert result.events == ()


def test_update_command_against_absent_state_is_unhandled(accounts: Behavior) -> None:
    result = accounts.handle(None, Deposit(amount=5))

    assert isinstance(result, UnhandledCommand)
    assert result.phase is Phase.CONSTRUCTING
    assert result.state is None


def test_construction_command_against_present_state_never_reconstructs(
    accounts: Behavior, opened: Account
) -> None:
    result = accounts.handle(opened, OpenAccount(owner="mallory"))

    assert isinstance(result, UnhandledCommand)
    assert result.state.owner == "alice"


def test_emitting_an_event_without_fold_rule_is_invalid_fold_state(
    product_number: ProductNumber, stamper: MetadataStamper
) -> None:
    """An update rule that emits a construction event cannot be folded"""
    constructing = (
        PhaseRules(Phase.CONSTRUCTING)
        .emits_event(CreateProduct, lambda c: ProductCreated.draft(name=c.name, description="", price=c.price))
        .accepts_event(
            ProductCreated,
            lambda e: Product(name=e.name, description="", price=e.price, id=product_number),
        )
    )
    updating = PhaseRules(Phase.UPDATING).emits_event(
        ChangeName,
        lambda p, c: ProductCreated.draft(name=c.name, description="", price=1.0),
    )
    behavior = Behavior(product_number, "product", constructing, updating, stamper=stamper)
    state = behavior.handle(None, CreateProduct(name="Widget", price=1.0)).state

    result = behavior.handle(state, ChangeName(name="Gadget"))

    assert isinstance(result, InvalidFoldState)
    assert result.event_type == "ProductCreated"
    assert result.phase is Phase.UPDATING
    assert "construction event" in result.message
    assert result.state == state


def test_unwrap_returns_state_and_events(accounts: Behavior) -> None:
    state, events = accounts.handle(None, OpenAccount(owner="alice")).unwrap()

    assert state.owner == "alice"
    assert len(events) == 1


def test_unwrap_raises_matching_exception(accounts: Behavior, opened: Account) -> None:
    with pytest.raises(CommandRejected) as exc_info:
        accounts.handle(opened, Withdraw(amount=100)).unwrap()
    assert exc_info.value.reason.command_type == "Withdraw"

    with pytest.raises(UnhandledCommandError):
        accounts.handle(opened, Freeze()).unwrap()


def test_invalid_fold_state_unwrap_raises() -> None:
    failure = InvalidFoldState(
        state=None, event_type="NameChanged", phase=Phase.CONSTRUCTING, message="boom"
    )
    with pytest.raises(InvalidFoldStateError, match="boom"):
        failure.unwrap()


def test_state_of_other_aggregate_refused(accounts: Behavior) -> None:
    stranger = Account(owner="bob", id=AccountNumber(value="ACC-2"))

    with pytest.raises(ValueError, match="ACC-2"):
        accounts.handle(stranger, Deposit(amount=1))


def test_missing_fold_rule_detected_at_construction(product_number: ProductNumber) -> None:
    updating = PhaseRules(Phase.UPDATING, events=(NameChanged, PriceChanged))

    with pytest.raises(IncompleteBehaviorError) as exc_info:
        Behavior(product_number, "product", PhaseRules(Phase.CONSTRUCTING), updating)

    assert exc_info.value.missing == ["NameChanged", "PriceChanged"]


def test_exhaustiveness_check_can_be_disabled(product_number: ProductNumber) -> None:
    updating = PhaseRules(Phase.UPDATING, events=(NameChanged,))
    settings = KernelSettings(check_exhaustiveness=False)

    behavior = Behavior(
        product_number, "product", PhaseRules(Phase.CONSTRUCTING), updating, settings=settings
    )

    assert behavior.aggregate_type == "product"


def test_handle_all_accumulates_events(accounts: Behavior) -> None:
    result = accounts.handle_all(
        None, [OpenAccount(owner="alice"), Deposit(amount=10), Withdraw(amount=4)]
    )

    assert isinstance(result, Accepted)
    assert [e.event_type for e in result.events] == ["AccountOpened", "Deposited", "Withdrawn"]
    assert result.state.balance == 6


def test_handle_all_is_all_or_nothing(accounts: Behavior, opened: Account) -> None:
    result = accounts.handle_all(opened, [Deposit(amount=10), Withdraw(amount=50)])

    assert isinstance(result, Rejected)
    assert result.state == opened


def test_handle_all_without_commands_on_absent_state(accounts: Behavior) -> None:
    with pytest.raises(ValueError):
        accounts.handle_all(None, [])


def test_replay_rebuilds_state(accounts: Behavior) -> None:
    result = accounts.handle_all(None, [OpenAccount(owner="alice"), Deposit(amount=3)])

    assert accounts.replay(result.events) == result.state
    assert accounts.replay([]) is None


def test_replay_rejects_inconsistent_history(accounts: Behavior) -> None:
    result = accounts.handle_all(None, [OpenAccount(owner="alice"), Deposit(amount=3)])

    with pytest.raises(InvalidFoldStateError):
        accounts.replay(result.events[1:])


def test_can_handle(accounts: Behavior, opened: Account) -> None:
    assert accounts.can_handle(None, OpenAccount(owner="x"))
    assert not accounts.can_handle(opened, OpenAccount(owner="x"))
    assert accounts.can_handle(opened, Deposit(amount=1))
    assert not accounts.can_handle(opened, Freeze())


def test_metrics_disabled_engine_still_handles(stamper: MetadataStamper) -> None:
    behavior = account_behavior(stamper=stamper, settings=KernelSettings(metrics_enabled=False))

    assert behavior.handle(None, OpenAccount(owner="alice")).ok


def unguarded_product_behavior(
    product_number: ProductNumber, stamper: MetadataStamper
) -> Behavior:
    """Product rules without any price rejection"""
    constructing = (
        PhaseRules(Phase.CONSTRUCTING)
        .emits_event(CreateProduct, lambda c: ProductCreated.draft(name=c.name, description="", price=c.price))
        .accepts_event(
            ProductCreated,
            lambda e: Product(name=e.name, description="", price=e.price, id=product_number),
        )
    )
    return Behavior(product_number, "product", constructing, PhaseRules(Phase.UPDATING), stamper=stamper)


def test_fold_rule_building_invalid_state_is_invalid_fold_state(
    product_number: ProductNumber, stamper: MetadataStamper
) -> None:
    behavior = unguarded_product_behavior(product_number, stamper)

    result = behavior.handle(None, CreateProduct(name="Widget", price=-5.0))

    assert isinstance(result, InvalidFoldState)
    assert result.event_type == "ProductCreated"
    assert result.phase is Phase.CONSTRUCTING
    assert "produced invalid state" in result.message
    assert "price" in result.message
    assert result.state is None


def test_exception_in_guard_propagates(
    product_number: ProductNumber, stamper: MetadataStamper
) -> None:
    def broken_guard(cmd: CreateProduct) -> bool:
        raise RuntimeError("guard bug")

    constructing = PhaseRules(Phase.CONSTRUCTING).rejects(
        CreateProduct, "never", when=broken_guard
    )
    behavior = Behavior(
        product_number, "product", constructing, PhaseRules(Phase.UPDATING), stamper=stamper
    )

    with pytest.raises(RuntimeError, match="guard bug"):
        behavior.handle(None, CreateProduct(name="Widget", price=1.0))


def test_handler_returning_non_draft_propagates(
    product_number: ProductNumber, stamper: MetadataStamper
) -> None:
    constructing = PhaseRules(Phase.CONSTRUCTING).emits_event(CreateProduct, lambda c: c)
    behavior = Behavior(
        product_number, "product", constructing, PhaseRules(Phase.UPDATING), stamper=stamper
    )

    with pytest.raises(TypeError, match="EventDraft"):
        behavior.handle(None, CreateProduct(name="Widget", price=1.0))


def test_accepted_dump_keeps_concrete_state_and_event_fields(behavior: Behavior) -> None:
    result = behavior.handle(None, CreateProduct(name="Widget", description="d", price=9.99))

    data = result.model_dump()

    assert data["state"] == {
        "id": {"value": "P-1001"},
        "name": "Widget",
        "description": "d",
        "price": 9.99,
    }
    [event] = data["events"]
    assert event["name"] == "Widget"
    assert event["price"] == 9.99
    assert event["metadata"]["command_id"] == result.events[0].metadata.command_id


def test_failure_dump_keeps_concrete_state_fields(behavior: Behavior, widget: Product) -> None:
    result = behavior.handle(widget, ChangePrice(price=0.0))

    data = result.model_dump()

    assert data["state"]["name"] == "Widget"
    assert data["state"]["price"] == 9.99
    assert data["reason"]["message"] == "Price is too low!"


def test_command_failure_is_abstract() -> None:
    with pytest.raises(TypeError):
        CommandFailure()
