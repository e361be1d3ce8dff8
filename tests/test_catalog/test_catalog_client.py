"""Tests for the catalog client."""

import json

import httpx
import pytest

from scriptcli.catalog.client import CatalogClient
from scriptcli.errors import (
    DownloadError,
    MetadataFetchError,
    MetadataParseError,
    ScriptTransferError,
)


RAW_PREFIX = "https://raw.githubusercontent.com/bketelsen/IncusScripts/refs/heads/main/"


def make_client(files, requested=None):
    """Build a client whose transport serves ``files`` keyed by repo path."""

    def handler(request):
        url = str(request.url)
        if requested is not None:
            requested.append(url)
        path = url[len(RAW_PREFIX):] if url.startswith(RAW_PREFIX) else url
        if path not in files:
            return httpx.Response(404, text="404: Not Found")
        content = files[path]
        if isinstance(content, Exception):
            raise content
        return httpx.Response(200, content=content)

    return CatalogClient(
        "https://github.com/bketelsen/IncusScripts.git",
        transport=httpx.MockTransport(handler),
    )


class TestDownload:
    """Test raw downloads."""

    def test_download(self):
        """Test a successful download returns bytes."""
        requested = []
        client = make_client({"misc/install.func": b"echo hi"}, requested)

        assert client.download("misc", "install.func") == b"echo hi"
        assert requested == [RAW_PREFIX + "misc/install.func"]

    def test_not_found(self):
        """Test non-200 responses."""
        client = make_client({})

        with pytest.raises(DownloadError, match="404"):
            client.download("json", "missing.json")

    def test_connection_error(self):
        """Test transport failures."""
        client = make_client({"json/x.json": httpx.ConnectError("boom")})

        with pytest.raises(DownloadError, match="Connection error"):
            client.download("json", "x.json")


class TestFetchApplication:
    """Test metadata fetching."""

    def test_fetch(self, application_data):
        """Test a valid metadata document."""
        client = make_client({"json/debian.json": json.dumps(application_data).encode()})

        app = client.fetch_application("debian")

        assert app.name == "Debian"
        assert app.install_method().resources.image == "debian/12"

    def test_missing(self):
        """Test a missing document is a fetch error."""
        client = make_client({})

        with pytest.raises(MetadataFetchError):
            client.fetch_application("nope")

    def test_invalid_json(self):
        """Test malformed JSON is a parse error."""
        client = make_client({"json/bad.json": b"{not json"})

        with pytest.raises(MetadataParseError):
            client.fetch_application("bad")

    def test_not_an_object(self):
        """Test JSON that is not an object."""
        client = make_client({"json/list.json": b"[1, 2]"})

        with pytest.raises(MetadataParseError, match="expected an object"):
            client.fetch_application("list")

    def test_schema_error(self, application_data):
        """Test documents missing required fields."""
        del application_data["slug"]
        client = make_client({"json/debian.json": json.dumps(application_data).encode()})

        with pytest.raises(MetadataParseError):
            client.fetch_application("debian")

    def test_no_install_methods(self, application_data):
        """Test an application without install methods."""
        application_data["install_methods"] = []
        client = make_client({"json/debian.json": json.dumps(application_data).encode()})

        with pytest.raises(MetadataParseError, match="no install methods"):
            client.fetch_application("debian")


class TestScripts:
    """Test script fetching."""

    def test_functions_script(self):
        """Test the generic functions file."""
        client = make_client({"misc/install.func": b"generic"})

        assert client.functions_script("debian") == "generic"

    def test_alpine_functions_script(self):
        """Test alpine gets its own functions file."""
        client = make_client({"misc/alpine-install.func": b"alpine"})

        assert client.functions_script("alpine") == "alpine"

    def test_install_script(self):
        """Test the slug install script path."""
        client = make_client({"install/debian-install.sh": b"#!/bin/bash\n"})

        assert client.install_script("debian") == "#!/bin/bash\n"

    def test_missing_script(self):
        """Test missing scripts are transfer errors."""
        client = make_client({})

        with pytest.raises(ScriptTransferError):
            client.install_script("debian")

    def test_script_not_utf8(self):
        """Test undecodable scripts are transfer errors."""
        client = make_client({"install/debian-install.sh": b"echo \xff\xfe"})

        with pytest.raises(ScriptTransferError, match="not valid UTF-8"):
            client.install_script("debian")
