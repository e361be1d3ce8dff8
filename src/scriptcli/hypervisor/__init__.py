"""Hypervisor access: REST API client and instance shell."""

from scriptcli.hypervisor.base import (
    Hypervisor,
    InstanceShell,
    InstanceState,
    Network,
    StoragePool,
)
from scriptcli.hypervisor.client import IncusClient
from scriptcli.hypervisor.shell import IncusShell

__all__ = [
    "Hypervisor",
    "InstanceShell",
    "InstanceState",
    "Network",
    "StoragePool",
    "IncusClient",
    "IncusShell",
]
