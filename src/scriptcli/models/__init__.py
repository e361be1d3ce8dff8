"""Pydantic models for catalog data, launch plans and configuration."""

from scriptcli.models.application import (
    Application,
    Credentials,
    InstallMethod,
    LoginCredentials,
    Note,
    OpaqueCredentials,
    Resources,
)
from scriptcli.models.config import CliConfig
from scriptcli.models.launch import DEFAULT_PROFILE, LaunchSettings, normalize_profiles

__all__ = [
    "Application",
    "Credentials",
    "InstallMethod",
    "LoginCredentials",
    "Note",
    "OpaqueCredentials",
    "Resources",
    "CliConfig",
    "DEFAULT_PROFILE",
    "LaunchSettings",
    "normalize_profiles",
]
