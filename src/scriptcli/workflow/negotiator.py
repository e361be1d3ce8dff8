"""Interactive negotiation of the launch plan.

The negotiation is a graph of named steps. Each step receives the current
``Negotiation`` record and returns an updated record together with the name
of the next step; ``DONE`` ends the walk. Records are never mutated in place,
so any step can be exercised on its own with a scripted prompter.
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Tuple

from scriptcli.errors import PromptError, UnsupportedApplicationType, ValidationError
from scriptcli.hypervisor.base import Hypervisor
from scriptcli.models.application import Application
from scriptcli.models.launch import DEFAULT_PROFILE, LaunchSettings
from scriptcli.utils.validation import validate_size
from scriptcli.workflow.prompts import Choice, Prompter
from scriptcli.workflow.resolver import select_install_method, set_vm_mode


logger = logging.getLogger(__name__)

DONE = "done"
NOTE_TITLE = "Incus Scripts"
MAX_CPU = 20


class Outcome(Enum):
    """How the negotiation ended."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    DECLINED = "declined"


@dataclass(frozen=True)
class Negotiation:
    """Request/response record threaded through the negotiation steps."""
    application: Application
    settings: LaunchSettings
    required_type: str = "ct"
    advanced: bool = False
    add_gpu: bool = False
    outcome: Outcome = Outcome.PENDING

    @property
    def confirmed(self) -> bool:
        """True when the user asked to go ahead."""
        return self.outcome is Outcome.CONFIRMED


@dataclass
class NegotiationContext:
    """Collaborators available to the steps."""
    prompter: Prompter
    hypervisor: Hypervisor
    ssh_dir: Path = field(default_factory=lambda: Path.home() / ".ssh")


Transition = Tuple[Negotiation, str]
Step = Callable[[Negotiation, NegotiationContext], Transition]


def _update_settings(negotiation: Negotiation, **changes) -> Negotiation:
    """Return a record whose settings carry ``changes``, validated."""
    data = negotiation.settings.model_dump()
    data.update(changes)
    return replace(negotiation, settings=LaunchSettings(**data))


def check_type(negotiation: Negotiation, context: NegotiationContext) -> Transition:
    """Reject applications the command cannot handle."""
    app_type = negotiation.application.type
    if app_type != negotiation.required_type:
        logger.error(f"Application type not supported: {app_type}")
        raise UnsupportedApplicationType(app_type, negotiation.required_type)
    return negotiation, "confirm_intent"


def confirm_intent(negotiation: Negotiation, context: NegotiationContext) -> Transition:
    """Describe the application and ask whether to continue."""
    application = negotiation.application
    context.prompter.note(
        NOTE_TITLE,
        f"Launch a _{application.slug}_ instance\n\n{application.description}\n",
    )
    if not context.prompter.confirm("Continue?", default=True):
        return replace(negotiation, outcome=Outcome.CANCELLED), DONE
    return negotiation, "advanced"


def ask_advanced(negotiation: Negotiation, context: NegotiationContext) -> Transition:
    """Offer the advanced settings path."""
    if negotiation.settings.vm:
        return negotiation, "confirm_create"
    if not context.prompter.confirm("Use Advanced Settings?", default=False):
        return negotiation, "confirm_create"
    return replace(negotiation, advanced=True), "vm_mode"


def ask_vm_mode(negotiation: Negotiation, context: NegotiationContext) -> Transition:
    """Ask whether the instance should be a virtual machine."""
    vm = context.prompter.confirm("Run as Virtual Machine?", default=False)
    settings = set_vm_mode(negotiation.settings, negotiation.application, vm)
    return replace(negotiation, settings=settings), "install_method"


def ask_install_method(negotiation: Negotiation, context: NegotiationContext) -> Transition:
    """Choose between OS variants when the application offers several."""
    application = negotiation.application
    settings = negotiation.settings

    if len(application.install_methods) > 1:
        choices = [
            Choice(f"{method.resources.os_name} {method.resources.os_version}", index)
            for index, method in enumerate(application.install_methods)
        ]
        index = context.prompter.select(
            "Choose OS Option", choices, default=settings.install_method
        )
        settings = select_install_method(settings, application, index)
        logger.info(f"Selected image {settings.image}")

    next_step = "vm_resources" if settings.vm else "gpu"
    return replace(negotiation, settings=settings), next_step


def ask_vm_resources(negotiation: Negotiation, context: NegotiationContext) -> Transition:
    """Collect root disk size, CPU count and memory for a VM."""
    settings = negotiation.settings
    prompter = context.prompter

    disk = prompter.text(
        "Root Disk Size",
        default=settings.vm_root_disk_size,
        validate=validate_size,
        description="Size of the root disk for the VM.",
    )
    cpu = prompter.select(
        "Number of CPU Cores",
        [Choice(str(count), count) for count in range(1, MAX_CPU + 1)],
        default=min(max(settings.cpu, 1), MAX_CPU),
        description="Number of CPU cores to assign the VM.",
    )
    memory = prompter.text(
        "VM Memory",
        default=settings.ram,
        validate=validate_size,
        description="Memory amount to assign the VM.",
    )
    updated = _update_settings(negotiation, vm_root_disk_size=disk, cpu=cpu, ram=memory)
    return updated, "gpu"


def ask_gpu(negotiation: Negotiation, context: NegotiationContext) -> Transition:
    """Ask whether to pass through a GPU."""
    add_gpu = context.prompter.confirm("Pass through GPU?", default=False)
    return replace(negotiation, add_gpu=add_gpu), "ssh"


def _read_public_key(context: NegotiationContext) -> str:
    """Offer the public keys in the SSH directory and read the chosen one."""
    keys = sorted(context.ssh_dir.glob("*.pub")) if context.ssh_dir.is_dir() else []
    if not keys:
        logger.info(f"No public keys found in {context.ssh_dir}")
        return ""

    choices = [Choice("None", None)] + [Choice(key.name, key) for key in keys]
    chosen = context.prompter.select(
        "SSH Authorized Key",
        choices,
        default=None,
        description="Public key to install for root.",
    )
    if chosen is None:
        return ""
    try:
        return Path(chosen).read_text()
    except OSError as e:
        raise PromptError(f"Error reading public key {chosen}: {e}") from e


def ask_ssh(negotiation: Negotiation, context: NegotiationContext) -> Transition:
    """Collect SSH settings and the root password."""
    prompter = context.prompter
    if not prompter.confirm("Enable SSH?", default=False):
        return _update_settings(negotiation, enable_ssh=False), "bridge"

    ssh_root_password = prompter.confirm("Allow Root SSH with Password?", default=False)
    password = prompter.text(
        "Enter Root Password",
        password=True,
        description="Root password for the container.",
    )

    def matches(value: str) -> None:
        if value != password:
            raise ValidationError("passwords do not match")

    prompter.text("Confirm Root Password", password=True, validate=matches)
    authorized_key = _read_public_key(context)

    updated = _update_settings(
        negotiation,
        enable_ssh=True,
        ssh_root_password=ssh_root_password,
        root_password=password,
        ssh_authorized_key=authorized_key,
    )
    return updated, "bridge"


def ask_bridge(negotiation: Negotiation, context: NegotiationContext) -> Transition:
    """Optionally attach the instance to a specific bridge."""
    if not context.prompter.confirm("Choose a bridge?", default=False):
        return negotiation, "profiles"

    bridges = [net.name for net in context.hypervisor.networks() if net.type == "bridge"]
    if not bridges:
        logger.warning("No bridge networks found, keeping the profile network")
        return negotiation, "profiles"

    network = context.prompter.select(
        "Choose Network Bridge",
        [Choice(name, name) for name in bridges],
        default=negotiation.settings.network or bridges[0],
        description="Select an existing network bridge for the instance.",
    )
    return _update_settings(negotiation, network=network), "profiles"


def ask_profiles(negotiation: Negotiation, context: NegotiationContext) -> Transition:
    """Optionally add profiles on top of ``default``."""
    if not context.prompter.confirm(
        "Choose incus profiles?",
        default=False,
        description="Select NO to use only the default profile.",
    ):
        return negotiation, "confirm_create"

    names = [name for name in context.hypervisor.profile_names() if name != DEFAULT_PROFILE]
    if not names:
        logger.warning("No profiles besides default found, keeping the default profile")
        return negotiation, "confirm_create"

    selected = context.prompter.checkbox(
        "Select Additional Incus Profiles",
        [Choice(name, name) for name in names],
        description="The default profile is always applied first.",
    )
    profiles = negotiation.settings.profiles + list(selected)
    return _update_settings(negotiation, profiles=profiles), "confirm_create"


def confirm_create(negotiation: Negotiation, context: NegotiationContext) -> Transition:
    """Final go/no-go."""
    if context.prompter.confirm("Create instance?", default=True):
        return replace(negotiation, outcome=Outcome.CONFIRMED), DONE
    return replace(negotiation, outcome=Outcome.DECLINED), DONE


def confirm_add(negotiation: Negotiation, context: NegotiationContext) -> Transition:
    """Describe the script and ask whether to run it."""
    application = negotiation.application
    context.prompter.note(
        NOTE_TITLE,
        f"Install _{application.slug}_ in instance {negotiation.settings.name}\n\n"
        f"{application.description}\n",
    )
    if context.prompter.confirm("Proceed?", default=True):
        return replace(negotiation, outcome=Outcome.CONFIRMED), DONE
    return replace(negotiation, outcome=Outcome.CANCELLED), DONE


LAUNCH_STEPS: Dict[str, Step] = {
    "check_type": check_type,
    "confirm_intent": confirm_intent,
    "advanced": ask_advanced,
    "vm_mode": ask_vm_mode,
    "install_method": ask_install_method,
    "vm_resources": ask_vm_resources,
    "gpu": ask_gpu,
    "ssh": ask_ssh,
    "bridge": ask_bridge,
    "profiles": ask_profiles,
    "confirm_create": confirm_create,
}

ADD_STEPS: Dict[str, Step] = {
    "check_type": check_type,
    "confirm_intent": confirm_add,
}


def negotiate(
    negotiation: Negotiation,
    context: NegotiationContext,
    steps: Dict[str, Step] = LAUNCH_STEPS,
    start: str = "check_type",
) -> Negotiation:
    """Walk the step graph from ``start`` until a step returns ``DONE``."""
    step_name = start
    # Every path through the graph visits each step at most once
    remaining = len(steps)
    while step_name != DONE:
        if remaining == 0:
            raise RuntimeError(f"Negotiation did not terminate at step {step_name}")
        remaining -= 1

        step = steps.get(step_name)
        if step is None:
            raise KeyError(f"Unknown negotiation step: {step_name}")
        logger.debug(f"Negotiation step: {step_name}")
        negotiation, step_name = step(negotiation, context)

    if not negotiation.confirmed:
        logger.info(f"Negotiation ended: {negotiation.outcome.value}")
    return negotiation
