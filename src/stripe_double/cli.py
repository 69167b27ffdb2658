"""
stripe-double command line.

Lists the event catalog, prints minted webhook payloads, and runs the HTTP
mock server.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from stripe_double.client import ApiClient
from stripe_double.config import StripeDoubleConfig, load_config
from stripe_double.errors import StripeDoubleError
from stripe_double.session import Session
from stripe_double.webhooks import event_list

app = typer.Typer(
    help="Local test double for the Stripe API",
    no_args_is_help=True,
)

console = Console()

_INT_RE = re.compile(r"^-?[0-9]+$")


def _config(fixtures: Path | None) -> StripeDoubleConfig:
    config = load_config(Path.cwd())
    if fixtures is not None:
        config.webhook_fixture_path = fixtures
    return config


def _coerce(value: str) -> Any:
    """Read ``true``/``false`` and integers from an override value."""
    if value in ("true", "false"):
        return value == "true"
    if _INT_RE.match(value):
        return int(value)
    return value


def _parse_overrides(pairs: list[str]) -> dict[str, Any]:
    """Turn ``a.b=1`` style options into a nested dict."""
    overrides: dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep:
            raise typer.BadParameter(f"Expected key=value, got '{pair}'")
        node = overrides
        parts = key.split(".")
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = _coerce(value)
    return overrides


@app.command(name="events")
def list_events() -> None:
    """List the webhook event types with a bundled fixture."""
    table = Table(title="Webhook events")
    table.add_column("Event type", style="cyan")
    for name in sorted(event_list()):
        table.add_row(name)
    console.print(table)


@app.command(name="payload")
def payload_cmd(
    type_name: Annotated[str, typer.Argument(help="Event type, e.g. customer.created")],
    overrides: Annotated[
        list[str] | None,
        typer.Option("--set", "-s", help="Override in data.object, e.g. -s amount=500"),
    ] = None,
    fixtures: Annotated[
        Path | None,
        typer.Option("--fixtures", "-f", help="Project webhook fixture directory"),
    ] = None,
) -> None:
    """Print a minted webhook payload as JSON."""
    # A throwaway client keeps the process-wide one untouched
    session = Session(config=_config(fixtures), client=ApiClient())
    try:
        with session:
            payload = session.mock_webhook_payload(type_name, _parse_overrides(overrides or []))
    except StripeDoubleError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(payload, indent=2))


@app.command(name="serve")
def serve(
    host: Annotated[str, typer.Option("--host", help="Bind address")] = "127.0.0.1",
    port: Annotated[int, typer.Option("--port", "-p", help="Port")] = 12111,
    fixtures: Annotated[
        Path | None,
        typer.Option("--fixtures", "-f", help="Project webhook fixture directory"),
    ] = None,
) -> None:
    """Run the HTTP mock server until interrupted."""
    import uvicorn

    from stripe_double.server import create_mock_server

    session = Session(config=_config(fixtures), client=ApiClient())
    server_app = create_mock_server(session)
    console.print(f"[green]Mock API listening on http://{host}:{port}[/green]")
    try:
        uvicorn.run(server_app, host=host, port=port, log_level="warning")
    finally:
        session.stop()


def main() -> None:
    app()


if __name__ == "__main__":
    main()
