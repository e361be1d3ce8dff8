"""Client for the remote application catalog."""

import json
import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from scriptcli.errors import (
    DownloadError,
    MetadataFetchError,
    MetadataParseError,
    ScriptTransferError,
)
from scriptcli.models.application import Application
from scriptcli.utils.remote import raw_url


logger = logging.getLogger(__name__)


class CatalogClient:
    """Downloads metadata and scripts from a GitHub-hosted catalog."""

    def __init__(
        self,
        repository: str,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize catalog client."""
        self.repository = repository
        self.timeout = timeout
        self.transport = transport

    def download(self, *paths: str) -> bytes:
        """Download a raw file from the repository."""
        url = raw_url(self.repository, *paths)
        logger.debug(f"Downloading {url}")

        try:
            with httpx.Client(transport=self.transport, timeout=self.timeout, follow_redirects=True) as client:
                response = client.get(url)
        except httpx.RequestError as e:
            raise DownloadError(f"Connection error fetching {url}: {e}") from e

        if response.status_code != 200:
            raise DownloadError(
                f"Failed to download {url}: {response.status_code} {response.reason_phrase}"
            )
        return response.content

    def fetch_application(self, slug: str) -> Application:
        """Fetch and decode the metadata document for ``slug``."""
        logger.debug(f"Downloading application metadata for {slug}")
        try:
            content = self.download("json", f"{slug}.json")
        except DownloadError as e:
            logger.error(f"Failed to download application metadata: {e}")
            raise MetadataFetchError(str(e)) from e

        try:
            data = json.loads(content)
        except ValueError as e:
            logger.error(f"Failed to parse application metadata: {e}")
            raise MetadataParseError(f"Invalid metadata for {slug}: {e}") from e

        if not isinstance(data, dict):
            raise MetadataParseError(f"Invalid metadata for {slug}: expected an object")

        try:
            application = Application(**data)
        except ValidationError as e:
            logger.error(f"Failed to parse application metadata: {e}")
            raise MetadataParseError(f"Invalid metadata for {slug}: {e}") from e

        if not application.install_methods:
            raise MetadataParseError(f"Application {slug} has no install methods")

        return application

    def fetch_script(self, *paths: str) -> str:
        """Fetch an installer or functions script as text."""
        try:
            content = self.download(*paths)
        except DownloadError as e:
            raise ScriptTransferError(str(e)) from e
        try:
            return content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ScriptTransferError(f"Script {'/'.join(paths)} is not valid UTF-8: {e}") from e

    def functions_script(self, os_name: str) -> str:
        """Fetch the shared install functions for ``os_name``."""
        if os_name == "alpine":
            return self.fetch_script("misc", "alpine-install.func")
        return self.fetch_script("misc", "install.func")

    def install_script(self, slug: str) -> str:
        """Fetch the container install script for ``slug``."""
        return self.fetch_script("install", f"{slug}-install.sh")
