"""Choose and initialize the active secret backend."""

from types import MappingProxyType
from typing import Mapping, Optional

from securestore.monitoring import Metrics
from securestore.secrets.base import SecretsManager, SecretsManagerContext
from securestore.secrets.exceptions import (
    BackendNotFoundError,
    InitializationError,
    NoBackendConfiguredError,
)
from securestore.utils.logging import get_logger

logger = get_logger(__name__)


def select_backend(
    backends: Mapping[str, SecretsManager], backend_name: Optional[str] = None
) -> tuple[str, SecretsManager]:
    """
    Pick exactly one backend from discovery results.

    Args:
        backends: Identifier -> instance mapping from BackendRegistry.get_all()
        backend_name: Configured identifier, if any

    Returns:
        (identifier, backend) of the selected backend

    Raises:
        BackendNotFoundError: Configured identifier not discovered, or nothing discovered
        NoBackendConfiguredError: Nothing configured and several backends available
    """
    available = ", ".join(sorted(backends)) or "none"

    if backend_name:
        if backend_name not in backends:
            raise BackendNotFoundError(
                f"Secure store backend '{backend_name}' not found. Available: {available}"
            )
        return backend_name, backends[backend_name]

    if not backends:
        raise BackendNotFoundError("No secure store backends were discovered")

    if len(backends) > 1:
        raise NoBackendConfiguredError(
            f"Multiple secure store backends available ({available}); "
            "set secure_store.backend to choose one"
        )

    name, backend = next(iter(backends.items()))
    logger.info(f"No backend configured, using the only one available: '{name}'")
    return name, backend


def activate_backend(
    backends: Mapping[str, SecretsManager],
    backend_name: Optional[str] = None,
    backend_properties: Optional[Mapping[str, Mapping[str, str]]] = None,
) -> tuple[str, SecretsManager]:
    """
    Select one backend and initialize it with a fresh context.

    Only the selected backend is initialized. Any failure is fatal.

    Args:
        backends: Identifier -> instance mapping from BackendRegistry.get_all()
        backend_name: Configured identifier, if any
        backend_properties: Per-backend properties keyed by identifier

    Raises:
        InitializationError: If the backend fails to initialize
        BackendNotFoundError, NoBackendConfiguredError: See select_backend()
    """
    name, backend = select_backend(backends, backend_name)
    properties = (backend_properties or {}).get(name) or {}
    context = SecretsManagerContext(properties=MappingProxyType(dict(properties)))

    try:
        backend.initialize(context)
    except InitializationError:
        Metrics.backend_initialized(name, success=False)
        raise
    except Exception as e:
        Metrics.backend_initialized(name, success=False)
        raise InitializationError(
            f"Failed to initialize secure store backend '{name}': {e}"
        ) from e

    Metrics.backend_initialized(name)
    logger.info(f"Initialized secure store backend: {name}")
    return name, backend
