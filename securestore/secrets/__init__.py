"""Secrets management module."""

# Public API
from securestore.secrets.base import SecretsManager, SecretsManagerContext
from securestore.secrets.exceptions import (
    BackendNotFoundError,
    BackendWriteError,
    DiscoveryError,
    InitializationError,
    NoBackendConfiguredError,
    SecretBackendError,
    SecretNotFoundError,
    SecureStoreError,
)
from securestore.secrets.models import (
    Secret,
    SecretMetadata,
    SecureStoreData,
    SecureStoreMetadata,
)
from securestore.secrets.registry import BackendRegistry, get_backend, register_backend
from securestore.secrets.selector import activate_backend, select_backend
from securestore.secrets.store import SecureStore

__all__ = [
    "SecureStore",
    "SecretsManager",
    "SecretsManagerContext",
    "Secret",
    "SecretMetadata",
    "SecureStoreData",
    "SecureStoreMetadata",
    "BackendRegistry",
    "register_backend",
    "get_backend",
    "select_backend",
    "activate_backend",
    "SecureStoreError",
    "InitializationError",
    "DiscoveryError",
    "NoBackendConfiguredError",
    "BackendNotFoundError",
    "SecretNotFoundError",
    "SecretBackendError",
    "BackendWriteError",
]
