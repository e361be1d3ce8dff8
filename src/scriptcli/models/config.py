"""Configuration models."""

from typing import Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_REPOSITORY = "github.com/bketelsen/IncusScripts"
DEFAULT_SOCKET_PATH = "/var/lib/incus/unix.socket"


class CliConfig(BaseModel):
    """Main configuration model."""
    repository: str = Field(default=DEFAULT_REPOSITORY, description="Catalog repository")
    socket_path: str = Field(default=DEFAULT_SOCKET_PATH, description="Incus unix socket")
    log_level: str = Field(default="INFO")
    request_timeout: float = Field(default=30.0, gt=0)
    image_remotes: Dict[str, str] = Field(
        default_factory=lambda: {"images": "https://images.linuxcontainers.org"}
    )

    model_config = ConfigDict(extra="ignore")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()

    @field_validator("repository")
    @classmethod
    def validate_repository(cls, v):
        """Repository must not be empty."""
        if not v.strip():
            raise ValueError("repository cannot be empty")
        return v.strip()
