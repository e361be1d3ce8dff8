"""Command implementations for CLI."""

import contextlib
import logging
import sys
from dataclasses import dataclass
from typing import Iterator, Optional

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from scriptcli.catalog.client import CatalogClient
from scriptcli.hypervisor.base import Hypervisor, InstanceShell
from scriptcli.models.launch import LaunchSettings, normalize_profiles
from scriptcli.workflow.environment import compile_environment
from scriptcli.workflow.negotiator import (
    ADD_STEPS,
    LAUNCH_STEPS,
    Negotiation,
    NegotiationContext,
    negotiate,
)
from scriptcli.workflow.orchestrator import Orchestrator
from scriptcli.workflow.prompts import Prompter
from scriptcli.workflow.resolver import resolve_settings
from scriptcli.workflow.storage import ensure_storage_profile


logger = logging.getLogger(__name__)

console = Console()


@dataclass
class Services:
    """Collaborators a command needs."""
    catalog: CatalogClient
    hypervisor: Hypervisor
    shell: InstanceShell
    prompter: Prompter


@contextlib.contextmanager
def spinner(description: str, quiet: bool = False) -> Iterator[None]:
    """Show a progress spinner while the body runs."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
        disable=quiet,
    ) as progress:
        task = progress.add_task(description, total=None)
        yield
        progress.update(task, completed=True)


def _orchestrator(services: Services) -> Orchestrator:
    return Orchestrator(
        services.hypervisor,
        services.shell,
        services.catalog,
        console=console,
        stdin=sys.stdin,
        stdout=sys.stdout,
        stderr=sys.stderr,
    )


def launch_application(
    services: Services, application_name: str, instance_name: str
) -> Optional[LaunchSettings]:
    """Launch a catalog container application as a new instance."""
    logger.debug(f"Preparing to launch {application_name} as {instance_name}")
    application = services.catalog.fetch_application(application_name)

    negotiation = Negotiation(
        application=application,
        settings=resolve_settings(application, instance_name),
        required_type="ct",
    )
    context = NegotiationContext(prompter=services.prompter, hypervisor=services.hypervisor)
    negotiation = negotiate(negotiation, context, steps=LAUNCH_STEPS)
    if not negotiation.confirmed:
        console.print("[yellow]Instance creation cancelled[/yellow]")
        return None

    settings = negotiation.settings
    storage_profile = ensure_storage_profile(services.hypervisor)
    if storage_profile:
        settings = settings.model_copy(
            update={"profiles": normalize_profiles(settings.profiles + [storage_profile])}
        )

    environment = compile_environment(settings, application)
    _orchestrator(services).provision(
        application,
        settings,
        environment,
        add_gpu=negotiation.add_gpu,
        spinner=spinner,
    )
    console.print(f"[green]✓[/green] Instance {instance_name} launched")
    return settings


def add_application(services: Services, application_name: str, instance_name: str) -> bool:
    """Run a catalog script inside an existing instance."""
    logger.debug(f"Preparing to add {application_name} to {instance_name}")
    application = services.catalog.fetch_application(application_name)

    negotiation = Negotiation(
        application=application,
        settings=resolve_settings(application, instance_name),
        required_type="misc",
    )
    context = NegotiationContext(prompter=services.prompter, hypervisor=services.hypervisor)
    negotiation = negotiate(negotiation, context, steps=ADD_STEPS)
    if not negotiation.confirmed:
        console.print("[yellow]Application installation cancelled[/yellow]")
        return False

    script = services.catalog.fetch_script(application.install_method(0).script)
    _orchestrator(services).execute_script(instance_name, script)
    console.print(f"[green]✓[/green] {application.name} added to {instance_name}")
    return True
