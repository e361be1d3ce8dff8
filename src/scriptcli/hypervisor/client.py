"""HTTP client for the Incus REST API over its unix socket."""

import copy
import logging
import posixpath
import urllib.parse
from typing import Any, Dict, List, Optional

import httpx

from scriptcli.errors import APIError
from scriptcli.hypervisor.base import Hypervisor, InstanceState, Network, StoragePool


logger = logging.getLogger(__name__)


class IncusClient(Hypervisor):
    """Incus API client."""

    def __init__(
        self,
        socket_path: str,
        image_remotes: Optional[Dict[str, str]] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize Incus client."""
        self.socket_path = socket_path
        self.image_remotes = image_remotes or {}
        if transport is None:
            transport = httpx.HTTPTransport(uds=socket_path)
        self._client = httpx.Client(
            transport=transport, base_url="http://incus", timeout=timeout
        )

    def close(self):
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        """Send a request and return the decoded response envelope."""
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            raise APIError(f"Connection error ({self.socket_path}): {e}") from e

        try:
            data = response.json()
        except ValueError:
            raise APIError(
                f"HTTP error {response.status_code}: {response.text}", response.status_code
            )
        if not isinstance(data, dict):
            raise APIError(
                f"Unexpected response from {method} {path}: {response.text}",
                response.status_code,
            )

        if data.get("type") == "error" or response.status_code >= 400:
            message = data.get("error") or response.reason_phrase
            raise APIError(
                f"{method} {path} failed: {message}",
                data.get("error_code") or response.status_code,
            )
        return data

    def _wait(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Wait for a background operation to finish."""
        if data.get("type") != "async":
            return data.get("metadata") or {}

        operation = data.get("operation")
        if not operation:
            metadata = data.get("metadata") or {}
            operation = f"/1.0/operations/{metadata.get('id')}"

        logger.debug(f"Waiting for operation {operation}")
        result = self._request(
            "GET", f"{operation}/wait", params={"timeout": -1}, timeout=None
        )
        metadata = result.get("metadata") or {}
        if metadata.get("status_code", 200) >= 400 or metadata.get("err"):
            raise APIError(
                f"Operation failed: {metadata.get('err') or metadata.get('status')}",
                metadata.get("status_code", 0),
            )
        return metadata

    def _source(self, image: str) -> Dict[str, str]:
        """Build the image source for ``remote:alias`` identifiers."""
        remote, sep, alias = image.partition(":")
        if not sep:
            return {"type": "image", "alias": image}

        server = self.image_remotes.get(remote)
        if server is None:
            raise APIError(f"Unknown image remote: {remote}")
        return {
            "type": "image",
            "alias": alias,
            "server": server,
            "protocol": "simplestreams",
            "mode": "pull",
        }

    def is_truenas(self) -> bool:
        """Check whether the host reports a TrueNAS operating system."""
        data = self._request("GET", "/1.0")
        environment = (data.get("metadata") or {}).get("environment") or {}
        os_name = environment.get("os_name") or ""
        return "truenas" in os_name.lower()

    def networks(self) -> List[Network]:
        """List host networks."""
        data = self._request("GET", "/1.0/networks", params={"recursion": 1})
        return [
            Network(
                name=net.get("name", ""),
                type=net.get("type", ""),
                managed=bool(net.get("managed")),
            )
            for net in data.get("metadata") or []
        ]

    def profile_names(self) -> List[str]:
        """List profile names."""
        data = self._request("GET", "/1.0/profiles")
        return [
            urllib.parse.unquote(posixpath.basename(url))
            for url in data.get("metadata") or []
        ]

    def create_profile(self, name, description, config, devices) -> None:
        """Create a profile."""
        self._request(
            "POST",
            "/1.0/profiles",
            json={
                "name": name,
                "description": description,
                "config": config,
                "devices": devices,
            },
        )
        logger.debug(f"Created profile {name}")

    def storage_pools(self) -> List[StoragePool]:
        """List storage pools."""
        data = self._request("GET", "/1.0/storage-pools", params={"recursion": 1})
        return [
            StoragePool(name=pool.get("name", ""), driver=pool.get("driver", ""))
            for pool in data.get("metadata") or []
        ]

    def _profile_devices(self, profiles: List[str]) -> Dict[str, Dict[str, str]]:
        """Collect devices inherited from ``profiles``, later profiles winning."""
        devices: Dict[str, Dict[str, str]] = {}
        for profile in profiles:
            data = self._request("GET", f"/1.0/profiles/{urllib.parse.quote(profile)}")
            devices.update((data.get("metadata") or {}).get("devices") or {})
        return devices

    def _expand_overrides(
        self, profiles: List[str], overrides: Dict[str, Dict[str, str]]
    ) -> Dict[str, Dict[str, str]]:
        """Merge partial device overrides onto the profile devices they target."""
        if not overrides:
            return {}

        inherited = self._profile_devices(profiles)
        devices: Dict[str, Dict[str, str]] = {}
        for device_name, override in overrides.items():
            if "type" in override:
                devices[device_name] = copy.deepcopy(override)
                continue
            if device_name not in inherited:
                raise APIError(f"Cannot override device {device_name}: not found in profiles")
            merged = dict(inherited[device_name])
            merged.update(override)
            devices[device_name] = merged
        return devices

    def create_instance(
        self, image, name, profiles, config, devices, network="", vm=False
    ) -> None:
        """Create a stopped instance from an image."""
        instance_devices = self._expand_overrides(list(profiles), devices)
        if network:
            instance_devices["eth0"] = {"type": "nic", "network": network, "name": "eth0"}

        body = {
            "name": name,
            "type": "virtual-machine" if vm else "container",
            "source": self._source(image),
            "profiles": list(profiles),
            "config": dict(config),
            "devices": instance_devices,
            "start": False,
        }
        logger.debug(f"Creating instance {name} from {image}")
        self._wait(self._request("POST", "/1.0/instances", json=body))

    def start_instance(self, name: str) -> None:
        """Start an instance."""
        data = self._request(
            "PUT",
            f"/1.0/instances/{urllib.parse.quote(name)}/state",
            json={"action": "start", "timeout": -1},
        )
        self._wait(data)

    def instance_state(self, name: str) -> InstanceState:
        """Query the runtime state of an instance."""
        data = self._request("GET", f"/1.0/instances/{urllib.parse.quote(name)}/state")
        metadata = data.get("metadata") or {}
        return InstanceState(
            status=metadata.get("status", ""),
            processes=metadata.get("processes") or 0,
        )

    def add_device(self, name: str, device_name: str, device: Dict[str, str]) -> None:
        """Attach a device to an instance, keeping its existing devices."""
        path = f"/1.0/instances/{urllib.parse.quote(name)}"
        data = self._request("GET", path)
        devices = dict((data.get("metadata") or {}).get("devices") or {})
        if device_name in devices:
            raise APIError(f"Device {device_name} already exists on {name}")
        devices[device_name] = dict(device)
        self._wait(self._request("PATCH", path, json={"devices": devices}))
