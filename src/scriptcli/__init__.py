"""
scriptcli - Launch catalog applications on Incus.

Fetches application metadata from a script catalog, walks the user through
launch options and provisions the result as an Incus container or VM.
"""

__version__ = "0.1.0"

# Re-export key components for easier access
from scriptcli.models.application import Application
from scriptcli.models.launch import LaunchSettings

__all__ = [
    "Application",
    "LaunchSettings",
]
