"""Launch plan model."""

from typing import Iterable, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_PROFILE = "default"


def normalize_profiles(profiles: Iterable[str]) -> List[str]:
    """Return profiles with ``default`` first, exactly once, without duplicates."""
    result = [DEFAULT_PROFILE]
    for profile in profiles:
        if profile and profile not in result:
            result.append(profile)
    return result


class LaunchSettings(BaseModel):
    """Plan for the instance being launched."""
    name: str = Field(..., description="Instance name")
    image: str = Field(default="", description="Image in remote:alias form")
    network: str = Field(default="", description="Bridge to attach, empty for profile default")
    profiles: List[str] = Field(default_factory=lambda: [DEFAULT_PROFILE])
    cpu: int = Field(default=0)
    ram: str = Field(default="")
    vm: bool = Field(default=False)
    vm_root_disk_size: str = Field(default="")
    vm_secure_boot: bool = Field(default=True)
    root_password: str = Field(default="")
    enable_ssh: bool = Field(default=False)
    ssh_root_password: bool = Field(default=False)
    ssh_authorized_key: str = Field(default="")
    install_method: int = Field(default=0, ge=0)

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    @field_validator("profiles")
    @classmethod
    def default_profile_first(cls, v):
        """Keep the default profile first and unique."""
        return normalize_profiles(v)
