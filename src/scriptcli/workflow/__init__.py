"""Provisioning workflow: settings, negotiation, environment, orchestration."""

from scriptcli.workflow.environment import CompiledEnvironment, compile_environment
from scriptcli.workflow.negotiator import (
    ADD_STEPS,
    LAUNCH_STEPS,
    Negotiation,
    NegotiationContext,
    Outcome,
    negotiate,
)
from scriptcli.workflow.orchestrator import Orchestrator, ProvisionState, wait_for_agent
from scriptcli.workflow.resolver import (
    disable_secure_boot,
    resolve_settings,
    select_install_method,
    set_vm_mode,
)

__all__ = [
    "CompiledEnvironment",
    "compile_environment",
    "ADD_STEPS",
    "LAUNCH_STEPS",
    "Negotiation",
    "NegotiationContext",
    "Outcome",
    "negotiate",
    "Orchestrator",
    "ProvisionState",
    "wait_for_agent",
    "disable_secure_boot",
    "resolve_settings",
    "select_install_method",
    "set_vm_mode",
]
