"""Custom exceptions for the secure store."""


class SecureStoreError(Exception):
    """Base exception for secure store errors."""

    pass


class InitializationError(SecureStoreError):
    """Raised when the active backend cannot be initialized."""

    pass


class DiscoveryError(SecureStoreError):
    """Raised when the plugin location mechanism itself is unusable."""

    pass


class NoBackendConfiguredError(SecureStoreError):
    """Raised when several backends are available and none is configured."""

    pass


class BackendNotFoundError(SecureStoreError):
    """Raised when the configured backend was not discovered."""

    pass


class SecretNotFoundError(SecureStoreError):
    """Raised when a secret does not exist in the given namespace."""

    def __init__(self, namespace: str, name: str):
        self.namespace = namespace
        self.name = name
        super().__init__(f"Secret '{name}' not found in namespace '{namespace}'")


class SecretBackendError(SecureStoreError):
    """Raised when there's an issue with the secret backend itself."""

    pass


class BackendWriteError(SecretBackendError):
    """Raised when a backend fails to persist or delete a secret."""

    pass
