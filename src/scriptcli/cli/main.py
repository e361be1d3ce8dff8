"""Main CLI implementation using Typer."""

import contextlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

import typer
from rich.console import Console

from scriptcli import __version__
from scriptcli.catalog.client import CatalogClient
from scriptcli.cli.commands import Services, add_application, launch_application
from scriptcli.cli.prompts import make_prompter
from scriptcli.config import load_config
from scriptcli.errors import ScriptCliError
from scriptcli.hypervisor.client import IncusClient
from scriptcli.hypervisor.shell import IncusShell
from scriptcli.utils.logging import setup_logging


# Create Typer app
app = typer.Typer(
    name="scriptcli",
    help="Launch catalog applications as Incus containers and VMs",
    add_completion=False,
)

# Console for rich output
console = Console()


@dataclass
class CliOptions:
    """Global options shared by all commands."""
    config: Optional[Path] = None
    repository: Optional[str] = None
    socket: Optional[str] = None
    debug: bool = False


@contextlib.contextmanager
def build_services(options: CliOptions) -> Iterator[Services]:
    """Load configuration and construct the command collaborators."""
    config = load_config(
        options.config,
        repository=options.repository,
        socket_path=options.socket,
        log_level="DEBUG" if options.debug else None,
    )
    setup_logging(config.log_level)

    with IncusClient(
        config.socket_path,
        image_remotes=config.image_remotes,
        timeout=config.request_timeout,
    ) as hypervisor:
        yield Services(
            catalog=CatalogClient(config.repository, timeout=config.request_timeout),
            hypervisor=hypervisor,
            shell=IncusShell(),
            prompter=make_prompter(console=console),
        )


def _run_cli_command(handler: Callable[..., Any], options: CliOptions, **kwargs: Any):
    """Helper to run a CLI command with its services and error handling."""
    try:
        with build_services(options) as services:
            handler(services, **kwargs)
    except ScriptCliError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file path"
    ),
    repository: Optional[str] = typer.Option(
        None, "--repository", "-r", help="Catalog repository (org/repo or URL)"
    ),
    socket: Optional[str] = typer.Option(
        None, "--socket", "-s", help="Incus unix socket path"
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
):
    """Launch catalog applications as Incus containers and VMs."""
    ctx.obj = CliOptions(config=config, repository=repository, socket=socket, debug=debug)


@app.command("launch")
def launch_command(
    ctx: typer.Context,
    application: str = typer.Argument(..., help="Application name in the catalog"),
    instance_name: str = typer.Argument(..., help="Name for the new instance"),
):
    """Launch a container from the catalog.

    Choose "No" at the advanced settings prompt to use the defaults, or "Yes"
    to customize the launch. Any container can be launched as a VM.
    """
    _run_cli_command(
        launch_application,
        ctx.obj,
        application_name=application,
        instance_name=instance_name,
    )


@app.command("add")
def add_command(
    ctx: typer.Context,
    application: str = typer.Argument(..., help="Application name in the catalog"),
    instance_name: str = typer.Argument(..., help="Existing instance to install into"),
):
    """Add an application to a running instance."""
    _run_cli_command(
        add_application,
        ctx.obj,
        application_name=application,
        instance_name=instance_name,
    )


@app.command("version")
def version_command():
    """Show the scriptcli version."""
    console.print(f"scriptcli {__version__}")


def main():
    """Main entry point for CLI."""
    app()
