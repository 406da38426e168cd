"""Podman provider CLI - Typer-based local host for the resource lifecycle."""

import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from podman_provider.config.manifest import DEFAULT_RESOURCE_TYPE, load_manifest
from podman_provider.core.diff import Plan
from podman_provider.core.exceptions import ProviderError
from podman_provider.core.models import ProviderConfig
from podman_provider.core.runner import RunResults, Runner
from podman_provider.core.state import StateStore, default_state_path
from podman_provider.observability.logging import enable_structured_logging
from podman_provider.provider import PodmanProvider

app = typer.Typer(
    name="podman-provider",
    help="Declarative management of Podman secrets",
    add_completion=False,
)
console = Console()

ACTION_STYLES = {
    "noop": "dim",
    "create": "green",
    "update": "yellow",
    "replace": "magenta",
    "delete": "red",
    "read": "cyan",
}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    log_json: bool = typer.Option(False, "--log-json", help="Emit structured JSON lifecycle events to stderr"),
):
    """Declarative management of Podman secrets."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if log_json:
        enable_structured_logging()


def _parse_vars(vars: list[str]) -> dict[str, str]:
    runtime_vars = {}
    for var in vars:
        if "=" not in var:
            console.print("[red]Error: Invalid --vars format. Use: --vars key=value[/red]")
            raise typer.Exit(code=1)
        key, value = var.split("=", 1)
        runtime_vars[key] = value
    return runtime_vars


def _print_validation_error(error: ValidationError):
    console.print("[red]✗ Invalid configuration:[/red]")
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        console.print(f"  [red]✗[/red] {location}: {item['msg']}")


def _runner(provider_config: ProviderConfig, state: Optional[Path]) -> Runner:
    provider = PodmanProvider()
    context = provider.configure(provider_config)
    return Runner(provider, context, StateStore(state or default_state_path()))


def _print_plans(plans: dict[str, Plan]):
    table = Table(show_header=True, header_style="bold")
    table.add_column("Address", style="cyan")
    table.add_column("Action")
    table.add_column("Changes")

    for address, resource_plan in plans.items():
        style = ACTION_STYLES.get(resource_plan.action, "white")
        changes = ", ".join(
            f"{c.name}{' (forces replacement)' if c.requires_replace else ''}"
            for c in resource_plan.changes
        )
        table.add_row(address, f"[{style}]{resource_plan.action}[/{style}]", changes)

    console.print(table)


def _print_results(results: RunResults):
    table = Table(show_header=True, header_style="bold")
    table.add_column("Address", style="cyan")
    table.add_column("Action")
    table.add_column("Status")
    table.add_column("Duration", justify="right")

    for address, result in results.resources.items():
        failed = result["status"] == "failed"
        status_color = "red" if failed else "green"
        status = f"[{status_color}]{'✗' if failed else '✓'} {result['status']}[/{status_color}]"
        table.add_row(address, result["action"], status, f"{result['duration_seconds']:.2f}s")

    console.print(table)

    for address, result in results.resources.items():
        if result["status"] == "failed":
            console.print(f"  [red]✗[/red] {address}: {escape(result['error'])}")

    if results.status == "success":
        console.print(f"\n[green]✓ {results.command} completed successfully![/green]")
    else:
        console.print(f"\n[red]✗ {results.command} failed[/red]")
        raise typer.Exit(code=1)


@app.command()
def schema():
    """Show the provider and resource schemas."""
    provider = PodmanProvider()

    console.print(f"[bold]Provider: {provider.metadata().type_name}[/bold] ({provider.metadata().version})")
    for attribute in provider.schema().attributes:
        console.print(f"  {attribute.name} ({attribute.type}, optional): {attribute.description}")

    for type_name, resource_class in provider.resources().items():
        resource_schema = resource_class.schema()
        table = Table(title=f"{type_name} (schema version {resource_schema.version})", header_style="bold")
        table.add_column("Attribute", style="cyan")
        table.add_column("Type")
        table.add_column("Flags")
        table.add_column("Description")

        for attribute in resource_schema.attributes:
            flags = [
                flag for flag, enabled in (
                    ("required", attribute.required),
                    ("optional", attribute.optional),
                    ("computed", attribute.computed),
                    ("sensitive", attribute.sensitive),
                    ("forces replacement", attribute.requires_replace),
                ) if enabled
            ]
            table.add_row(attribute.name, attribute.type, ", ".join(flags), attribute.description)

        console.print(table)


@app.command()
def plan(
    manifest: Path = typer.Argument(..., help="Manifest YAML file"),
    state: Optional[Path] = typer.Option(None, "--state", "-s", help="State file"),
    vars: list[str] = typer.Option([], "--vars", help="Runtime variables (key=value)"),
):
    """Show what apply would change."""
    try:
        loaded = load_manifest(manifest, runtime_vars=_parse_vars(vars))
        runner = _runner(loaded.provider, state)
        plans = runner.plan(loaded)
    except ValidationError as e:
        _print_validation_error(e)
        raise typer.Exit(code=1)
    except (ProviderError, KeyError, OSError) as e:
        console.print(f"[red]✗ Plan failed: {str(e)}[/red]")
        raise typer.Exit(code=1)

    _print_plans(plans)


@app.command()
def apply(
    manifest: Path = typer.Argument(..., help="Manifest YAML file"),
    state: Optional[Path] = typer.Option(None, "--state", "-s", help="State file"),
    vars: list[str] = typer.Option([], "--vars", help="Runtime variables (key=value)"),
):
    """Create, replace or delete secrets so Podman matches the manifest."""
    try:
        loaded = load_manifest(manifest, runtime_vars=_parse_vars(vars))
        runner = _runner(loaded.provider, state)
        refreshed = runner.refresh()
        if refreshed.status == "failed":
            _print_results(refreshed)
        plans = runner.plan(loaded, refresh=False)
        _print_plans(plans)
        results = runner.apply(loaded, plans)
    except ValidationError as e:
        _print_validation_error(e)
        raise typer.Exit(code=1)
    except (ProviderError, KeyError, OSError) as e:
        console.print(f"[red]✗ Apply failed: {str(e)}[/red]")
        raise typer.Exit(code=1)

    _print_results(results)


@app.command()
def refresh(
    state: Optional[Path] = typer.Option(None, "--state", "-s", help="State file"),
    endpoint: Optional[str] = typer.Option(None, "--endpoint", help="Podman API endpoint"),
):
    """Refresh state from Podman, dropping secrets that no longer exist."""
    try:
        results = _runner(ProviderConfig(endpoint=endpoint), state).refresh()
    except ProviderError as e:
        console.print(f"[red]✗ Refresh failed: {str(e)}[/red]")
        raise typer.Exit(code=1)

    _print_results(results)


@app.command()
def destroy(
    state: Optional[Path] = typer.Option(None, "--state", "-s", help="State file"),
    endpoint: Optional[str] = typer.Option(None, "--endpoint", help="Podman API endpoint"),
):
    """Delete every secret recorded in state."""
    try:
        results = _runner(ProviderConfig(endpoint=endpoint), state).destroy()
    except ProviderError as e:
        console.print(f"[red]✗ Destroy failed: {str(e)}[/red]")
        raise typer.Exit(code=1)

    _print_results(results)


@app.command(name="import")
def import_(
    address: str = typer.Argument(..., help="Address to record the secret under"),
    secret_id: str = typer.Argument(..., help="Podman secret id"),
    state: Optional[Path] = typer.Option(None, "--state", "-s", help="State file"),
    endpoint: Optional[str] = typer.Option(None, "--endpoint", help="Podman API endpoint"),
    type_name: str = typer.Option(DEFAULT_RESOURCE_TYPE, "--type", help="Resource type"),
):
    """Import an existing Podman secret into state."""
    try:
        imported = _runner(ProviderConfig(endpoint=endpoint), state).import_resource(address, type_name, secret_id)
    except ProviderError as e:
        console.print(f"[red]✗ Import failed: {str(e)}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✓ Imported {address} ({imported.id})[/green]")


@app.command()
def version():
    """Show provider version."""
    from podman_provider import __version__
    console.print(f"podman-provider version: {__version__}")


if __name__ == "__main__":
    app()
