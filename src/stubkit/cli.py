"""
stubkit CLI.

Commands:
- stubkit policy: Show the stub policy a project's tests will run with
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from stubkit._version import get_version
from stubkit.core.config import StubPolicy, load_policy
from stubkit.core.errors import PolicyError

app = typer.Typer(
    help="Inspect stubkit configuration",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print the version and exit."""
    if value:
        typer.echo(f"stubkit {get_version()}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """Inspect stubkit configuration."""


def _policy_to_dict(policy: StubPolicy) -> dict[str, Any]:
    """Convert a policy to a JSON-friendly dict with stable ordering."""
    return {
        "nested_depth": policy.nested_depth,
        "identity_sensitive": sorted(policy.identity_sensitive),
        "include_private": policy.include_private,
    }


@app.command("policy")
def policy_command(
    pyproject: Annotated[
        Path,
        typer.Option("--pyproject", "-p", help="pyproject.toml to read [tool.stubkit] from"),
    ] = Path("pyproject.toml"),
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show the effective stub policy."""
    try:
        policy = load_policy(pyproject)
    except PolicyError as e:
        err_console.print(f"[red]Invalid stub policy:[/red] {e}")
        raise typer.Exit(code=1) from e

    data = _policy_to_dict(policy)
    if output_json:
        typer.echo(json.dumps(data, indent=2))
        return

    source = str(pyproject) if pyproject.exists() else "defaults"
    table = Table(title=f"Stub policy ({source})")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("nested_depth", str(data["nested_depth"]))
    table.add_row("identity_sensitive", ", ".join(data["identity_sensitive"]))
    table.add_row("include_private", str(data["include_private"]).lower())
    console.print(table)


def main() -> None:
    """Entry point for the ``stubkit`` console script."""
    app()
