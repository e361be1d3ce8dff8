"""Shared test fixtures and fake collaborators."""

from typing import Any, Dict, List, Optional

import pytest

from scriptcli.errors import ValidationError
from scriptcli.hypervisor.base import (
    Hypervisor,
    InstanceShell,
    InstanceState,
    Network,
    StoragePool,
)
from scriptcli.models.application import Application
from scriptcli.workflow.prompts import Prompter


class FakePrompter(Prompter):
    """Prompter answering from a title -> answer mapping.

    A tuple value is consumed one element per prompt, which lets a test
    answer the same question several times (e.g. after a validation error).
    """

    def __init__(self, answers: Dict[str, Any]):
        self.answers = {
            title: list(value) if isinstance(value, tuple) else [value]
            for title, value in answers.items()
        }
        self.asked: List[str] = []
        self.notes: List[str] = []
        self.validation_errors: List[str] = []
        self.choices: Dict[str, list] = {}
        self.defaults: Dict[str, Any] = {}

    def _next(self, title: str, default: Any = None) -> Any:
        self.asked.append(title)
        self.defaults[title] = default
        if title not in self.answers:
            raise AssertionError(f"Unexpected prompt: {title}")
        queue = self.answers[title]
        if len(queue) > 1:
            return queue.pop(0)
        return queue[0]

    def note(self, title, body):
        self.notes.append(body)

    def confirm(self, title, default=False, description=None):
        return self._next(title, default)

    def select(self, title, choices, default=None, description=None):
        self.choices[title] = [choice.value for choice in choices]
        return self._next(title, default)

    def checkbox(self, title, choices, description=None):
        self.choices[title] = [choice.value for choice in choices]
        return self._next(title)

    def text(self, title, default="", validate=None, password=False, description=None):
        while True:
            value = self._next(title, default)
            if validate is None:
                return value
            try:
                validate(value)
            except ValidationError as e:
                self.validation_errors.append(str(e))
                continue
            return value


class FakeHypervisor(Hypervisor):
    """In-memory hypervisor recording every call."""

    def __init__(
        self,
        networks: Optional[List[Network]] = None,
        profiles: Optional[List[str]] = None,
        processes: Optional[List[int]] = None,
        truenas: bool = False,
        pools: Optional[List[StoragePool]] = None,
    ):
        self._networks = networks or []
        self._profiles = list(profiles or ["default"])
        self._processes = list(processes or [5])
        self._truenas = truenas
        self._pools = pools or []
        self.calls: List[tuple] = []
        self.created: Dict[str, Any] = {}

    def is_truenas(self):
        self.calls.append(("is_truenas",))
        return self._truenas

    def networks(self):
        self.calls.append(("networks",))
        return list(self._networks)

    def profile_names(self):
        self.calls.append(("profile_names",))
        return list(self._profiles)

    def create_profile(self, name, description, config, devices):
        self.calls.append(("create_profile", name, devices))
        self._profiles.append(name)

    def storage_pools(self):
        self.calls.append(("storage_pools",))
        return list(self._pools)

    def create_instance(self, image, name, profiles, config, devices, network="", vm=False):
        self.calls.append(("create_instance", name))
        self.created = {
            "image": image,
            "name": name,
            "profiles": list(profiles),
            "config": dict(config),
            "devices": dict(devices),
            "network": network,
            "vm": vm,
        }

    def start_instance(self, name):
        self.calls.append(("start_instance", name))

    def instance_state(self, name):
        self.calls.append(("instance_state", name))
        processes = self._processes.pop(0) if len(self._processes) > 1 else self._processes[0]
        return InstanceState(status="Running", processes=processes)

    def add_device(self, name, device_name, device):
        self.calls.append(("add_device", name, device_name, dict(device)))

    def call_names(self) -> List[str]:
        return [call[0] for call in self.calls]


class FakeShell(InstanceShell):
    """Instance shell recording pushes and commands."""

    def __init__(self, returncodes: Optional[Dict[str, int]] = None):
        self.returncodes = returncodes or {}
        self.pushed: List[tuple] = []
        self.pushed_content: List[str] = []
        self.commands: List[List[str]] = []
        self.streams: List[tuple] = []
        self.config: List[tuple] = []

    def push_file(self, instance, source, target):
        self.pushed.append((instance, source, target))
        self.pushed_content.append(source.read_text())

    def run(self, instance, command, stdin=None, stdout=None, stderr=None):
        self.commands.append(command)
        self.streams.append((stdin, stdout, stderr))
        return self.returncodes.get(command[0], 0)

    def set_config(self, instance, key, value):
        self.config.append((instance, key, value))


class FakeCatalog:
    """Catalog serving canned scripts."""

    def __init__(self, application: Optional[Application] = None, scripts: Optional[Dict[str, str]] = None):
        self.application = application
        self.scripts = scripts or {}
        self.requested: List[str] = []

    def fetch_application(self, slug):
        self.requested.append(f"json/{slug}.json")
        return self.application

    def fetch_script(self, *paths):
        path = "/".join(paths)
        self.requested.append(path)
        return self.scripts.get(path, "echo ok")

    def functions_script(self, os_name):
        if os_name == "alpine":
            return self.fetch_script("misc", "alpine-install.func")
        return self.fetch_script("misc", "install.func")

    def install_script(self, slug):
        return self.fetch_script("install", f"{slug}-install.sh")


@pytest.fixture
def application_data():
    """Metadata document for a debian container application."""
    return {
        "name": "Debian",
        "slug": "debian",
        "categories": [1],
        "type": "ct",
        "updateable": False,
        "privileged": False,
        "interface_port": None,
        "documentation": None,
        "website": "https://www.debian.org/",
        "description": "Debian Linux is a distribution that emphasizes free software.",
        "install_methods": [
            {
                "type": "default",
                "script": "ct/debian.sh",
                "resources": {"cpu": 1, "ram": 512, "hdd": 2, "os": "debian", "version": "12"},
            }
        ],
        "default_credentials": {"username": None, "password": None},
        "notes": [],
    }


@pytest.fixture
def application(application_data):
    """Debian container application."""
    return Application(**application_data)


@pytest.fixture
def multi_os_application(application_data):
    """Application offering a debian and an alpine variant."""
    data = dict(application_data)
    data["install_methods"] = [
        application_data["install_methods"][0],
        {
            "type": "alpine",
            "script": "ct/alpine-debian.sh",
            "resources": {"cpu": 2, "ram": 1024, "hdd": 4, "os": "Alpine", "version": "3.20"},
        },
    ]
    return Application(**data)


@pytest.fixture
def fake_prompter():
    """Factory for scripted prompters."""
    return FakePrompter


@pytest.fixture
def hypervisor():
    """Fake hypervisor with a default profile and one bridge."""
    return FakeHypervisor(
        networks=[Network("incusbr0", "bridge"), Network("eth0", "physical")],
        profiles=["default", "gpu", "storage"],
    )


@pytest.fixture
def fake_hypervisor():
    """Factory for customised fake hypervisors."""
    return FakeHypervisor


@pytest.fixture
def shell():
    """Fake instance shell."""
    return FakeShell()


@pytest.fixture
def fake_shell():
    """Factory for customised fake shells."""
    return FakeShell


@pytest.fixture
def catalog(application):
    """Fake catalog serving the debian application."""
    return FakeCatalog(
        application,
        scripts={
            "misc/install.func": "msg_info() { echo $1; }",
            "install/debian-install.sh": "source /dev/stdin <<<\"$FUNCTIONS_FILE_PATH\"\necho installed",
        },
    )
