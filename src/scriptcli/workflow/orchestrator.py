"""Provisioning orchestration: create, start, wait, install, clean up."""

import contextlib
import logging
import tempfile
import time
from enum import Enum
from pathlib import Path
from typing import IO, Callable, ContextManager, List, Optional

from rich.console import Console

from scriptcli.catalog.client import CatalogClient
from scriptcli.errors import (
    AgentTimeoutError,
    ScriptCliError,
    ScriptExecutionError,
    ScriptTransferError,
)
from scriptcli.hypervisor.base import Hypervisor, InstanceShell
from scriptcli.models.application import Application
from scriptcli.models.launch import LaunchSettings
from scriptcli.workflow.environment import FUNCTIONS_FILE_PATH, CompiledEnvironment
from scriptcli.workflow.summary import print_summary


logger = logging.getLogger(__name__)

AGENT_POLL_INTERVAL = 2
AGENT_POLL_ATTEMPTS = 5
AGENT_MIN_PROCESSES = 2

GPU_DEVICE_NAME = "gpu"
GPU_DEVICE = {"type": "gpu", "gid": "44", "uid": "0"}

FUNCTIONS_SHEBANG = "#!/bin/env bash\n"
HERESTRING_PREFIX = "/dev/stdin <<<"

# Keys only needed while the installer runs
TRANSIENT_CONFIG_KEYS = (
    "environment.FUNCTIONS_FILE_PATH",
    "environment.DEBIAN_FRONTEND",
)


class ProvisionState(Enum):
    """Orchestrator progress."""
    PLAN_READY = "plan_ready"
    CREATING = "creating"
    CREATED = "created"
    STARTED = "started"
    WAITING_AGENT = "waiting_agent"
    AGENT_READY = "agent_ready"
    GPU_ATTACHED = "gpu_attached"
    SCRIPT_PUSHED = "script_pushed"
    SCRIPT_EXECUTABLE = "script_executable"
    SCRIPT_EXECUTED = "script_executed"
    POST_CLEANUP = "post_cleanup"
    DONE = "done"
    FAILED = "failed"


def wait_for_agent(
    hypervisor: Hypervisor,
    name: str,
    attempts: int = AGENT_POLL_ATTEMPTS,
    interval: float = AGENT_POLL_INTERVAL,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Block until the VM reports more than two processes.

    Returns the number of polls it took. Raises AgentTimeoutError once
    ``attempts`` polls have failed.
    """
    for attempt in range(1, attempts + 1):
        sleep(interval)
        state = hypervisor.instance_state(name)
        if state.processes > AGENT_MIN_PROCESSES:
            logger.debug(f"VM agent ready after {attempt} polls")
            return attempt
        logger.debug(f"VM agent not ready ({state.processes} processes), attempt {attempt}/{attempts}")

    raise AgentTimeoutError(
        f"Error waiting for vm agent on {name}: max attempts ({attempts}) reached"
    )


def prepare_functions_script(script: str) -> str:
    """Wrap the shared install functions as an executable file."""
    return FUNCTIONS_SHEBANG + script + "\n"


def prepare_install_script(script: str) -> str:
    """Make the install script runnable through ``bash -c``."""
    return script.replace(HERESTRING_PREFIX, "")


class Orchestrator:
    """Drives one provisioning run against the hypervisor."""

    def __init__(
        self,
        hypervisor: Hypervisor,
        shell: InstanceShell,
        catalog: CatalogClient,
        console: Optional[Console] = None,
        sleep: Callable[[float], None] = time.sleep,
        stdin: Optional[IO] = None,
        stdout: Optional[IO] = None,
        stderr: Optional[IO] = None,
    ):
        """Initialize orchestrator."""
        self.hypervisor = hypervisor
        self.shell = shell
        self.catalog = catalog
        self.console = console or Console()
        self.sleep = sleep
        self.stdin = stdin
        self.stdout = stdout
        self.stderr = stderr
        self.state = ProvisionState.PLAN_READY
        self.history: List[ProvisionState] = [self.state]

    def _transition(self, state: ProvisionState):
        logger.debug(f"Provisioning state: {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    def provision(
        self,
        application: Application,
        settings: LaunchSettings,
        environment: CompiledEnvironment,
        add_gpu: bool = False,
        spinner: Optional[Callable[[str], ContextManager]] = None,
    ):
        """Run the whole provisioning sequence.

        Any failure leaves the orchestrator in FAILED and propagates; a
        partially created instance is left in place.
        """
        spinner = spinner or (lambda description: contextlib.nullcontext())
        try:
            # Nothing is created on the host until the functions script is in hand
            functions = self.fetch_functions(application, settings)
            with spinner("Creating instance..."):
                self.launch_instance(settings, environment)
            if add_gpu:
                self.attach_gpu(settings.name)
            self.install(application, settings, functions)
            print_summary(self.console, application, settings)
            self.cleanup(settings.name)
            self._transition(ProvisionState.DONE)
        except ScriptCliError:
            self._transition(ProvisionState.FAILED)
            raise

    def launch_instance(self, settings: LaunchSettings, environment: CompiledEnvironment):
        """Create and start the instance, waiting for the VM agent if needed."""
        logger.info(f"Preparing image {settings.image}")
        self._transition(ProvisionState.CREATING)
        self.hypervisor.create_instance(
            settings.image,
            settings.name,
            settings.profiles,
            environment.config,
            environment.devices,
            network=settings.network,
            vm=settings.vm,
        )
        self._transition(ProvisionState.CREATED)

        self.hypervisor.start_instance(settings.name)
        self._transition(ProvisionState.STARTED)

        if settings.vm:
            logger.info("VM started, waiting for agent...")
            self._transition(ProvisionState.WAITING_AGENT)
            wait_for_agent(self.hypervisor, settings.name, sleep=self.sleep)
        self._transition(ProvisionState.AGENT_READY)

    def attach_gpu(self, name: str):
        """Pass the host GPU through to the instance."""
        logger.info(f"Adding GPU to {name}")
        self.hypervisor.add_device(name, GPU_DEVICE_NAME, dict(GPU_DEVICE))
        self._transition(ProvisionState.GPU_ATTACHED)

    def fetch_functions(self, application: Application, settings: LaunchSettings) -> str:
        """Download the install functions for the active install method."""
        os_name = application.install_method(settings.install_method).resources.os_name
        return prepare_functions_script(self.catalog.functions_script(os_name))

    def install(self, application: Application, settings: LaunchSettings, functions: str):
        """Push the install functions and run the application installer."""
        with tempfile.TemporaryDirectory(prefix="scriptcli-installfunc") as scratch:
            local_path = Path(scratch) / "install.func"
            local_path.write_text(functions)

            logger.info("Adding installation functions to instance...")
            self.shell.push_file(settings.name, local_path, FUNCTIONS_FILE_PATH)
            self._transition(ProvisionState.SCRIPT_PUSHED)

        logger.info("Making installation functions executable...")
        returncode = self.shell.run(settings.name, ["chmod", "+x", FUNCTIONS_FILE_PATH])
        if returncode != 0:
            raise ScriptTransferError(
                f"Error making functions file executable (exit code {returncode})"
            )
        self._transition(ProvisionState.SCRIPT_EXECUTABLE)

        installer = prepare_install_script(self.catalog.install_script(application.slug))
        logger.info("Running installer...")
        self.execute_script(settings.name, installer)
        self._transition(ProvisionState.SCRIPT_EXECUTED)

    def execute_script(self, instance: str, script: str):
        """Run ``script`` with bash inside the instance, attached to our stdio."""
        returncode = self.shell.run(
            instance,
            ["bash", "-c", script],
            stdin=self.stdin,
            stdout=self.stdout,
            stderr=self.stderr,
        )
        if returncode != 0:
            raise ScriptExecutionError(
                f"Error executing installer in {instance} (exit code {returncode})"
            )

    def cleanup(self, name: str):
        """Clear configuration only needed during installation."""
        self._transition(ProvisionState.POST_CLEANUP)
        logger.info("Removing setup configuration from instance...")
        for key in TRANSIENT_CONFIG_KEYS:
            try:
                self.shell.set_config(name, key, "")
            except ScriptCliError as e:
                logger.warning(f"Could not clear {key} on {name}: {e}")
