"""Abstract base class for secret backends."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from securestore.secrets.models import Secret


@dataclass(frozen=True)
class SecretsManagerContext:
    """
    Everything a backend receives at initialize time.

    Attributes:
        properties: Read-only backend settings from configuration
        state: Fresh empty container owned by the backend from then on
    """

    properties: Mapping[str, str]
    state: dict = field(default_factory=dict)


class SecretsManager(ABC):
    """
    Capability contract every secret backend plugin must satisfy.

    Instances are created without arguments by the registry and receive
    their configuration through initialize(). Known implementations:
    - memory: in-process store for tests and development
    - file: local encrypted JSON file

    Backends must make single-secret reads and writes atomic; the facade
    calling them does no locking of its own.
    """

    backend_name: str = ""

    @abstractmethod
    def initialize(self, context: SecretsManagerContext) -> None:
        """
        Perform one-time setup.

        Args:
            context: Backend properties and backend-owned state

        Raises:
            InitializationError: On misconfiguration or unreachable dependency
        """
        pass

    @abstractmethod
    def list_secrets(self, namespace: str) -> Sequence[Secret]:
        """
        Return all secrets stored under a namespace.

        Unknown namespaces yield an empty sequence. Order is unspecified.
        """
        pass

    @abstractmethod
    def get_secret(self, namespace: str, name: str) -> Optional[Secret]:
        """
        Fetch one secret.

        Returns:
            The secret, or None if it does not exist

        Raises:
            SecretBackendError: If the backend fails
        """
        pass

    @abstractmethod
    def store_secret(
        self,
        namespace: str,
        name: str,
        data: bytes,
        description: str,
        properties: Mapping[str, str],
    ) -> None:
        """
        Create or overwrite a secret.

        Raises:
            BackendWriteError: If the secret cannot be persisted
        """
        pass

    @abstractmethod
    def delete_secret(self, namespace: str, name: str) -> None:
        """
        Remove a secret. Deleting a missing secret is a no-op.

        Raises:
            BackendWriteError: If the deletion cannot be persisted
        """
        pass

    def health_check(self) -> bool:
        """Check if backend is accessible."""
        return True
