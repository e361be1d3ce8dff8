"""Exceptions raised by scriptcli."""


class ScriptCliError(Exception):
    """Base class for all scriptcli errors."""
    pass


class ConfigError(ScriptCliError):
    """Configuration file could not be loaded."""
    pass


class DownloadError(ScriptCliError):
    """Raw file could not be downloaded from the catalog repository."""
    pass


class MetadataFetchError(ScriptCliError):
    """Application metadata could not be retrieved."""
    pass


class MetadataParseError(ScriptCliError):
    """Application metadata is malformed."""
    pass


class UnsupportedApplicationType(ScriptCliError):
    """Application type is not handled by the requested command."""

    def __init__(self, app_type: str, expected: str):
        """Initialize with the offending and expected types."""
        self.app_type = app_type
        self.expected = expected
        super().__init__(
            f"Application type not supported: {app_type!r} (expected {expected!r})"
        )


class ValidationError(ScriptCliError):
    """User input failed validation."""
    pass


class PromptError(ScriptCliError):
    """Interactive prompt could not be rendered or read."""
    pass


class APIError(ScriptCliError):
    """Hypervisor API call failed."""

    def __init__(self, message: str, status_code: int = 0):
        """Initialize with message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)


class AgentTimeoutError(ScriptCliError):
    """VM agent did not become ready in time."""
    pass


class ScriptTransferError(ScriptCliError):
    """Installer script could not be fetched or copied into the instance."""
    pass


class ScriptExecutionError(ScriptCliError):
    """Installer script failed inside the instance."""
    pass
