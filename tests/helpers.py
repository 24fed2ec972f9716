"""
Test Helpers - a second aggregate for exercising the engine

The account aggregate covers engine features the product does not use:
multi-event emission, reasons built from the command, and a command
that passes rejection but has no emission rule.
"""

from collections.abc import Sequence

from pydantic import Field

from aggregate_kernel.behavior.engine import Behavior
from aggregate_kernel.behavior.rules import Phase, PhaseRules
from aggregate_kernel.behavior.stamper import MetadataStamper
from aggregate_kernel.kernel.aggregate import Aggregate
from aggregate_kernel.kernel.commands import Command
from aggregate_kernel.kernel.events import Event, EventDraft
from aggregate_kernel.kernel.ids import AggregateId
from aggregate_kernel.kernel.settings import KernelSettings
from aggregate_kernel.kernel.tags import dependent_view_tag


class AccountNumber(AggregateId):
    pass


class Account(Aggregate):
    owner: str
    balance: int = 0
    id: AccountNumber


class OpenAccount(Command):
    owner: str


class Deposit(Command):
    amount: int


class SplitDeposit(Command):
    amounts: list[int] = Field(default_factory=list)


class Withdraw(Command):
    amount: int


class Freeze(Command):
    """Passes rejection but no rule emits anything for it"""


class AccountOpened(Event):
    owner: str


class Deposited(Event):
    amount: int


class Withdrawn(Event):
    amount: int


LEDGER_VIEW = dependent_view_tag("ledger")


def deposit_drafts(account: Account, cmd: SplitDeposit) -> Sequence[EventDraft]:
    return [Deposited.draft(amount=amount) for amount in cmd.amounts]


def account_rules(number: AccountNumber) -> tuple[PhaseRules, PhaseRules]:
    constructing = (
        PhaseRules(Phase.CONSTRUCTING, events=(AccountOpened,))
        .emits_event(OpenAccount, lambda cmd: AccountOpened.draft(owner=cmd.owner))
        .accepts_event(AccountOpened, lambda e: Account(owner=e.owner, id=number))
    )
    updating = (
        PhaseRules(Phase.UPDATING, events=(Deposited, Withdrawn))
        .rejects(
            Withdraw,
            lambda account, cmd: f"Insufficient funds: balance {account.balance}, requested {cmd.amount}",
            when=lambda account, cmd: cmd.amount > account.balance,
        )
        .emits_event(Deposit, lambda account, cmd: Deposited.draft(amount=cmd.amount))
        .emits_events(SplitDeposit, deposit_drafts)
        .emits_event(Withdraw, lambda account, cmd: Withdrawn.draft(amount=cmd.amount))
        .accepts_event(
            Deposited,
            lambda account, e: account.model_copy(update={"balance": account.balance + e.amount}),
        )
        .accepts_event(
            Withdrawn,
            lambda account, e: account.model_copy(update={"balance": account.balance - e.amount}),
        )
    )
    return constructing, updating


def account_behavior(
    number: AccountNumber | None = None,
    stamper: MetadataStamper | None = None,
    settings: KernelSettings | None = None,
) -> Behavior:
    number = number or AccountNumber(value="ACC-1")
    constructing, updating = account_rules(number)
    return Behavior(
        aggregate_id=number,
        aggregate_type="account",
        constructing=constructing,
        updating=updating,
        tags=(LEDGER_VIEW,),
        stamper=stamper,
        settings=settings,
    )


def without_volatile_metadata(event: Event) -> dict:
    """Event dump minus the generated event_id and occurred_at"""
    return event.model_dump(
        exclude={"metadata": {"event_id", "occurred_at"}},
    )
