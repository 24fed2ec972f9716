"""
Aggregate Kernel CLI

Runs commands through the product behavior engine and prints the events
produced and the resulting state. Nothing is stored: each invocation starts
from an absent product.

Usage:
    aggregate-kernel product run --name Widget --price 9.99
    aggregate-kernel product run --name Widget --price 9.99 --update price=12.50 --update name=Gadget
    aggregate-kernel product run --name Widget --price 0 --json
"""

import json
from typing import List, Optional

import typer
from pydantic import ValidationError
from typing_extensions import Annotated

from aggregate_kernel.behavior.engine import CommandFailure
from aggregate_kernel.kernel.commands import Command
from aggregate_kernel.kernel.events import Event
from aggregate_kernel.kernel.logging import configure_logging
from aggregate_kernel.kernel.settings import KernelSettings, default_settings
from aggregate_kernel.product.behavior import product_behavior
from aggregate_kernel.product.commands import ChangeName, ChangePrice, CreateProduct
from aggregate_kernel.product.models import ProductNumber

app = typer.Typer(
    name="aggregate-kernel",
    help="Aggregate Kernel - event-sourced aggregate behaviors",
    add_completion=False,
)

product_app = typer.Typer(help="Product aggregate commands")
app.add_typer(product_app, name="product")


def cli_settings(log_level: Optional[str], json_logs: bool) -> KernelSettings:
    """
    Settings from the environment with command-line overrides applied

    Raises:
        typer.BadParameter: If the log level is not a known level
    """
    settings = KernelSettings.from_env()
    overrides: dict[str, object] = {"json_logs": json_logs or settings.json_logs}
    if log_level is not None:
        overrides["log_level"] = log_level.upper()
    try:
        return KernelSettings.model_validate({**settings.model_dump(), **overrides})
    except ValidationError:
        raise typer.BadParameter(f"Unknown log level '{log_level}'", param_hint="--log-level")


@app.callback()
def main(
    log_level: Annotated[
        Optional[str],
        typer.Option(
            "--log-level",
            help="Log level (DEBUG, INFO, WARNING, ERROR); AGGREGATE_KERNEL_LOG_LEVEL by default",
        ),
    ] = None,
    json_logs: Annotated[
        bool,
        typer.Option("--json-logs", help="Emit logs as JSON (always on when ENVIRONMENT=production)"),
    ] = False,
) -> None:
    """Configure logging before any subcommand runs"""
    settings = cli_settings(log_level, json_logs)
    configure_logging(json_output=settings.json_logs, log_level=settings.log_level)


def parse_update(update: str) -> Command:
    """Parse a ``field=value`` update into a product update command"""
    field, sep, value = update.partition("=")
    if not sep:
        raise typer.BadParameter(f"Expected field=value, got '{update}'")

    field = field.strip().lower()
    if field == "price":
        try:
            return ChangePrice(price=float(value))
        except ValueError:
            raise typer.BadParameter(f"Price must be a number, got '{value}'")
    if field == "name":
        return ChangeName(name=value)
    raise typer.BadParameter(f"Unknown field '{field}' (expected 'price' or 'name')")


def describe_event(event: Event) -> str:
    fields = ", ".join(f"{k}={v!r}" for k, v in event.payload().items())
    return f"{event.event_type}({fields})"


@product_app.command("run")
def product_run(
    name: Annotated[str, typer.Option("--name", help="Product name")],
    price: Annotated[float, typer.Option("--price", help="Initial price")],
    description: Annotated[
        str, typer.Option("--description", help="Product description")
    ] = "",
    product_id: Annotated[
        str, typer.Option("--id", help="Product number")
    ] = "P-1",
    update: Annotated[
        Optional[List[str]],
        typer.Option(
            "--update",
            help="Update applied after creation, in order: price=<n> or name=<s>",
        ),
    ] = None,
    as_json: Annotated[
        bool, typer.Option("--json", help="Print events and state as JSON")
    ] = False,
) -> None:
    """Create a product, apply updates, print events and final state"""
    commands: list[Command] = [
        CreateProduct(name=name, description=description, price=price)
    ]
    commands.extend(parse_update(u) for u in update or [])

    behavior = product_behavior(
        ProductNumber.from_string(product_id),
        settings=default_settings.model_copy(update={"metrics_enabled": False}),
    )

    state = None
    events: list[Event] = []
    for command in commands:
        result = behavior.handle(state, command)
        if isinstance(result, CommandFailure):
            report_failure(command, result, as_json)
            raise typer.Exit(1)
        state = result.state
        events.extend(result.events)

    if as_json:
        typer.echo(
            json.dumps(
                {
                    "events": [
                        {"event_type": e.event_type, **e.model_dump(mode="json")}
                        for e in events
                    ],
                    "state": state.model_dump(mode="json"),
                },
                indent=2,
            )
        )
        return

    for event in events:
        typer.echo(f"✓ {describe_event(event)}")
    typer.echo(f"Product {product_id}:")
    typer.echo(f"  Name: {state.name}")
    typer.echo(f"  Description: {state.description}")
    typer.echo(f"  Price: {state.price}")


def report_failure(command: Command, result: CommandFailure, as_json: bool) -> None:
    detail = str(result.to_exception())
    if as_json:
        typer.echo(
            json.dumps(
                {
                    "outcome": result.outcome,
                    "command_type": command.command_type,
                    "error": detail,
                },
                indent=2,
            )
        )
        return
    typer.echo(f"✗ {command.command_type} {result.outcome}: {detail}", err=True)


if __name__ == "__main__":
    app()
