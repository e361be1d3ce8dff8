"""Compile a launch plan into instance config and device overrides."""

from typing import Dict, NamedTuple

from scriptcli.models.application import Application
from scriptcli.models.launch import LaunchSettings


EMPTY_VALUE = '""'
FUNCTIONS_FILE_PATH = "/install.func"

STATIC_ENVIRONMENT = {
    "environment.CTTYPE": "0",
    "environment.tz": "Etc/UTC",
    "environment.CACHER": "no",
    "environment.DEBIAN_FRONTEND": "noninteractive",
    "environment.DISABLEIPV6": "yes",
    "environment.FUNCTIONS_FILE_PATH": FUNCTIONS_FILE_PATH,
}


class CompiledEnvironment(NamedTuple):
    """Config keys and device overrides for the create call."""
    config: Dict[str, str]
    devices: Dict[str, Dict[str, str]]


def _yes_no(value: bool) -> str:
    return "yes" if value else "no"


def compile_environment(settings: LaunchSettings, application: Application) -> CompiledEnvironment:
    """Map a finalized launch plan to flat config and device maps."""
    resources = application.install_method(settings.install_method).resources

    config: Dict[str, str] = {
        "environment.INSTALL_SSH": _yes_no(settings.enable_ssh),
        "environment.SSH_ROOT": _yes_no(settings.ssh_root_password),
        "environment.SSH_AUTHORIZED_KEY": settings.ssh_authorized_key or EMPTY_VALUE,
        "environment.PASSWORD": settings.root_password or EMPTY_VALUE,
        "environment.app": application.slug,
        "environment.APPLICATION": application.name,
        "environment.PCT_OSTYPE": resources.os_name,
        "environment.PCT_OSVERSION": resources.os_version,
    }
    config.update(STATIC_ENVIRONMENT)

    devices: Dict[str, Dict[str, str]] = {}
    if settings.vm:
        devices["root"] = {"size": settings.vm_root_disk_size}
        config["limits.cpu"] = str(settings.cpu)
        config["limits.memory"] = settings.ram
        if not settings.vm_secure_boot:
            config["security.secureboot"] = "false"

    return CompiledEnvironment(config=config, devices=devices)
