"""Custom exceptions for the Podman provider."""


class ProviderError(Exception):
    """Base exception for provider errors."""
    pass


class ConfigurationError(ProviderError):
    """Raised when required provider configuration is missing or invalid."""
    pass


class PodmanConnectionError(ProviderError):
    """Raised when a connection to the Podman service cannot be established."""
    pass


class RemoteOperationError(ProviderError):
    """Raised when a remote secret operation fails.

    Carries the lifecycle operation name alongside the remote message so the
    failure can be diagnosed without retrying.
    """

    def __init__(self, operation: str, message: str):
        self.operation = operation
        self.message = message
        super().__init__(f"{operation} failed: {message}")


class SecretNotFoundError(RemoteOperationError):
    """Raised when the remote service reports that a secret does not exist."""
    pass


class InconsistentStateError(ProviderError):
    """Raised when the remote service returns more than one secret for an id."""
    pass


class StateFileError(ProviderError):
    """Raised when the state file cannot be read or written."""
    pass
