"""Derive launch settings from catalog metadata."""

import logging

from scriptcli.errors import MetadataParseError
from scriptcli.models.application import Application, InstallMethod
from scriptcli.models.launch import DEFAULT_PROFILE, LaunchSettings


logger = logging.getLogger(__name__)

IMAGE_REMOTE = "images"


def disable_secure_boot(image: str) -> bool:
    """Return True when secure boot must be turned off for ``image``."""
    return "archlinux" in image


def image_for(method: InstallMethod) -> str:
    """Return the remote image identifier for an install method."""
    return f"{IMAGE_REMOTE}:{method.resources.image}"


def _apply_install_method(settings: LaunchSettings, application: Application) -> LaunchSettings:
    """Recompute fields that depend on the active install method."""
    method = application.install_method(settings.install_method)
    image = image_for(method)
    update = {
        "image": image,
        "vm_secure_boot": not disable_secure_boot(image),
    }
    if settings.vm:
        resources = method.resources
        update["vm_root_disk_size"] = f"{resources.hdd}GiB"
        update["ram"] = f"{resources.ram}MiB"
        update["cpu"] = resources.cpu
    else:
        update["vm_root_disk_size"] = ""
        update["ram"] = ""
        update["cpu"] = 0
    return settings.model_copy(update=update)


def resolve_settings(application: Application, name: str) -> LaunchSettings:
    """Build the default launch plan for ``application``."""
    if not application.install_methods:
        raise MetadataParseError(f"Application {application.slug} has no install methods")

    settings = LaunchSettings(name=name, profiles=[DEFAULT_PROFILE], install_method=0)
    settings = _apply_install_method(settings, application)
    logger.debug(f"Resolved image {settings.image} for {application.slug}")
    return settings


def select_install_method(
    settings: LaunchSettings, application: Application, index: int
) -> LaunchSettings:
    """Switch the plan to the install method at ``index``."""
    if index < 0 or index >= len(application.install_methods):
        raise ValueError(f"Install method {index} out of range for {application.slug}")
    updated = settings.model_copy(update={"install_method": index})
    return _apply_install_method(updated, application)


def set_vm_mode(settings: LaunchSettings, application: Application, vm: bool) -> LaunchSettings:
    """Toggle VM mode and recompute VM defaults."""
    updated = settings.model_copy(update={"vm": vm})
    return _apply_install_method(updated, application)
