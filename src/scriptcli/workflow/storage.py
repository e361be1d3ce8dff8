"""Storage profile needed on TrueNAS-hosted Incus."""

import logging
from typing import Optional

from scriptcli.errors import APIError
from scriptcli.hypervisor.base import Hypervisor


logger = logging.getLogger(__name__)

STORAGE_PROFILE = "scriptcli-storage"
STORAGE_PROFILE_DESCRIPTION = "TrueNAS storage profile for script-cli"


def ensure_storage_profile(hypervisor: Hypervisor) -> Optional[str]:
    """Make sure the storage profile exists on TrueNAS hosts.

    Returns the profile name to add to the launch plan, or None when the
    host is not TrueNAS.
    """
    if not hypervisor.is_truenas():
        return None

    if STORAGE_PROFILE in hypervisor.profile_names():
        logger.debug(f"Found TrueNAS profile {STORAGE_PROFILE}")
        return STORAGE_PROFILE

    logger.info("No TrueNAS profiles found")
    pools = hypervisor.storage_pools()
    if not pools:
        raise APIError("No storage pools found")

    pool = next((p.name for p in pools if p.name == "default"), None)
    if pool is None:
        logger.info("No default storage pool found, defaulting to first pool")
        pool = pools[0].name
    logger.debug(f"Using storage pool {pool}")

    hypervisor.create_profile(
        STORAGE_PROFILE,
        STORAGE_PROFILE_DESCRIPTION,
        {},
        {"root": {"path": "/", "pool": pool, "type": "disk"}},
    )
    logger.info(f"Created Incus profile {STORAGE_PROFILE}")
    return STORAGE_PROFILE
