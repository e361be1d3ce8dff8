"""Catalog application models."""

from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_OS = "debian"
DEFAULT_VERSION = "12"


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


class Resources(BaseModel):
    """Resources and base OS of an install method."""
    cpu: int = Field(default=0, description="CPU core count")
    ram: int = Field(default=0, description="Memory in MiB")
    os: Optional[str] = Field(None, description="OS name")
    hdd: int = Field(default=0, description="Root disk size in GiB")
    version: Optional[str] = Field(None, description="OS version")

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("cpu", "ram", "hdd", mode="before")
    @classmethod
    def null_as_zero(cls, v):
        """Treat null sizes as unset."""
        return 0 if v is None else v

    @field_validator("os", "version", mode="before")
    @classmethod
    def stringify(cls, v):
        """Accept numeric versions such as 12 or 3.20."""
        return _optional_str(v)

    @property
    def os_name(self) -> str:
        """OS name, defaulting to debian."""
        if not self.os:
            return DEFAULT_OS
        return self.os.lower()

    @property
    def os_version(self) -> str:
        """OS version, defaulting to 12."""
        if not self.version:
            return DEFAULT_VERSION
        return self.version.lower()

    @property
    def image(self) -> str:
        """Image identifier in ``os/version`` form."""
        return f"{self.os_name}/{self.os_version}"


class InstallMethod(BaseModel):
    """One variant of installing an application."""
    type: str = Field(default="default")
    script: str = Field(default="")
    resources: Resources = Field(default_factory=Resources)

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("resources", mode="before")
    @classmethod
    def null_resources(cls, v):
        """Treat null resources as defaults."""
        return {} if v is None else v


class LoginCredentials(BaseModel):
    """Username/password pair shipped with an application."""
    kind: Literal["login"] = "login"
    username: Optional[str] = None
    password: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("username", "password", mode="before")
    @classmethod
    def stringify(cls, v):
        """Catalog entries sometimes carry numbers or booleans here."""
        return _optional_str(v)


class OpaqueCredentials(BaseModel):
    """Free-form credentials text."""
    kind: Literal["opaque"] = "opaque"
    value: str

    model_config = ConfigDict(frozen=True)


Credentials = Annotated[
    Union[LoginCredentials, OpaqueCredentials], Field(discriminator="kind")
]


class Note(BaseModel):
    """Free-text note attached to an application."""
    text: str = ""
    type: str = "info"

    model_config = ConfigDict(frozen=True, extra="ignore")


class Application(BaseModel):
    """Catalog entry for an installable application."""
    name: str = Field(..., description="Display name")
    slug: str = Field(..., description="Catalog key")
    type: str = Field(..., description="ct, vm or misc")
    description: str = Field(default="")
    install_methods: List[InstallMethod] = Field(default_factory=list)
    default_credentials: Optional[Credentials] = None
    notes: List[Note] = Field(default_factory=list)

    categories: List[int] = Field(default_factory=list)
    date_created: Optional[str] = None
    updateable: bool = False
    privileged: bool = False
    interface_port: Optional[int] = None
    documentation: Optional[str] = None
    website: Optional[str] = None
    logo: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("default_credentials", mode="before")
    @classmethod
    def resolve_credentials(cls, v):
        """Resolve loosely typed credentials into the tagged variant."""
        if v is None or v == "":
            return None
        if isinstance(v, (LoginCredentials, OpaqueCredentials)):
            return v
        if isinstance(v, dict):
            if "kind" in v:
                return v
            return {"kind": "login", **v}
        return {"kind": "opaque", "value": str(v)}

    @field_validator("description", mode="before")
    @classmethod
    def null_description(cls, v):
        """Treat null description as empty."""
        return "" if v is None else v

    @field_validator("install_methods", "notes", "categories", mode="before")
    @classmethod
    def null_list(cls, v):
        """Treat null lists as empty."""
        return [] if v is None else v

    @property
    def json_name(self) -> str:
        """Metadata document file name."""
        return f"{self.slug.lower()}.json"

    def install_method(self, index: int = 0) -> InstallMethod:
        """Return the install method at ``index``."""
        return self.install_methods[index]
