"""Interfaces to the container hypervisor."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Dict, List, Optional


@dataclass
class Network:
    """Host network."""
    name: str
    type: str
    managed: bool = False


@dataclass
class StoragePool:
    """Host storage pool."""
    name: str
    driver: str = ""


@dataclass
class InstanceState:
    """Runtime state of an instance."""
    status: str
    processes: int = 0


class Hypervisor(ABC):
    """API calls the provisioning workflow needs from the hypervisor."""

    @abstractmethod
    def is_truenas(self) -> bool:
        """Check whether the host is a TrueNAS system."""
        pass

    @abstractmethod
    def networks(self) -> List[Network]:
        """List host networks."""
        pass

    @abstractmethod
    def profile_names(self) -> List[str]:
        """List profile names."""
        pass

    @abstractmethod
    def create_profile(
        self,
        name: str,
        description: str,
        config: Dict[str, str],
        devices: Dict[str, Dict[str, str]],
    ) -> None:
        """Create a profile."""
        pass

    @abstractmethod
    def storage_pools(self) -> List[StoragePool]:
        """List storage pools."""
        pass

    @abstractmethod
    def create_instance(
        self,
        image: str,
        name: str,
        profiles: List[str],
        config: Dict[str, str],
        devices: Dict[str, Dict[str, str]],
        network: str = "",
        vm: bool = False,
    ) -> None:
        """Create a stopped instance from an image."""
        pass

    @abstractmethod
    def start_instance(self, name: str) -> None:
        """Start an instance."""
        pass

    @abstractmethod
    def instance_state(self, name: str) -> InstanceState:
        """Query the runtime state of an instance."""
        pass

    @abstractmethod
    def add_device(self, name: str, device_name: str, device: Dict[str, str]) -> None:
        """Attach a device to an instance."""
        pass


class InstanceShell(ABC):
    """File transfer and command execution inside an instance."""

    @abstractmethod
    def push_file(self, instance: str, source: Path, target: str) -> None:
        """Copy a local file to ``target`` inside the instance."""
        pass

    @abstractmethod
    def run(
        self,
        instance: str,
        command: List[str],
        stdin: Optional[IO] = None,
        stdout: Optional[IO] = None,
        stderr: Optional[IO] = None,
    ) -> int:
        """Run a command inside the instance and return its exit code."""
        pass

    @abstractmethod
    def set_config(self, instance: str, key: str, value: str) -> None:
        """Set an instance configuration key."""
        pass
