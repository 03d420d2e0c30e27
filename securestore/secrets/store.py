"""Secure store facade over the active secret backend."""

from contextlib import contextmanager
from typing import Generator, Mapping, Optional

from securestore.config.settings import SecureStoreConfig
from securestore.monitoring import Metrics, track_time
from securestore.secrets.exceptions import SecretNotFoundError
from securestore.secrets.models import SecureStoreData, SecureStoreMetadata
from securestore.secrets.registry import BackendRegistry
from securestore.secrets.selector import activate_backend
from securestore.utils.logging import get_logger

logger = get_logger(__name__)


class SecureStore:
    """
    Namespace-scoped CRUD over secrets, delegated to one backend.

    The backend is discovered, selected and initialized once while the
    facade is constructed; construction either yields a ready store or
    raises. The facade itself holds no locks and never retries.

    Usage:
        store = SecureStore(ConfigLoader().load())
        store.put_secure_data("ns1", "db-pass", "s3cr3t", "db password", {"env": "prod"})
        store.get_secure_data("ns1", "db-pass").as_text()  # "s3cr3t"
    """

    def __init__(
        self, config: SecureStoreConfig, registry: Optional[BackendRegistry] = None
    ):
        if registry is None:
            registry = BackendRegistry(
                extensions_dir=config.extensions_dir,
                entry_point_group=config.entry_point_group,
            )

        backends = registry.get_all()
        self._backend_name, self._secrets_manager = activate_backend(
            backends,
            backend_name=config.backend,
            backend_properties=config.backends,
        )

    @property
    def backend_name(self) -> str:
        """Identifier of the active backend."""
        return self._backend_name

    @contextmanager
    def _recorded(self, operation: str) -> Generator[None, None, None]:
        """Record status and latency of one backend call."""
        status = "error"
        t = {"duration": 0.0}
        try:
            with track_time() as t:
                yield
            status = "success"
        except SecretNotFoundError:
            status = "not_found"
            raise
        finally:
            Metrics.operation(
                operation, self._backend_name, status, latency=t["duration"]
            )

    def list_secure_data(self, namespace: str) -> dict[str, str]:
        """
        List secrets in a namespace.

        Args:
            namespace: The namespace to list

        Returns:
            Mapping of secret name to description (empty for unknown namespaces)
        """
        with self._recorded("list"):
            secrets = self._secrets_manager.list_secrets(namespace)
        return {
            secret.metadata.name: secret.metadata.description for secret in secrets
        }

    def list_secure_metadata(self, namespace: str) -> list[SecureStoreMetadata]:
        """List metadata of every secret in a namespace, without payloads."""
        with self._recorded("list"):
            secrets = self._secrets_manager.list_secrets(namespace)
        return [
            SecureStoreMetadata.from_secret_metadata(secret.metadata)
            for secret in secrets
        ]

    def get_secure_data(self, namespace: str, name: str) -> SecureStoreData:
        """
        Fetch one secret with its metadata.

        Raises:
            SecretNotFoundError: If the secret does not exist
            SecretBackendError: If the backend fails
        """
        with self._recorded("get"):
            secret = self._secrets_manager.get_secret(namespace, name)
            if secret is None:
                raise SecretNotFoundError(namespace, name)
        return SecureStoreData.from_secret(secret)

    def put_secure_data(
        self,
        namespace: str,
        name: str,
        data: str,
        description: str = "",
        properties: Optional[Mapping[str, str]] = None,
    ) -> None:
        """
        Create or overwrite a secret.

        Args:
            namespace: The namespace that this secret belongs to
            name: Identifier used to retrieve the secret
            data: The sensitive value, stored as UTF-8 bytes
            description: User provided description of the entry
            properties: Additional string properties

        Raises:
            BackendWriteError: If the backend cannot persist the secret
        """
        with self._recorded("put"):
            self._secrets_manager.store_secret(
                namespace,
                name,
                data.encode("utf-8"),
                description,
                dict(properties or {}),
            )
        logger.info(f"Stored secret '{name}' in namespace '{namespace}'")

    def delete_secure_data(self, namespace: str, name: str) -> None:
        """
        Delete a secret. Deleting a missing secret succeeds.

        Raises:
            BackendWriteError: If the backend cannot persist the deletion
        """
        with self._recorded("delete"):
            self._secrets_manager.delete_secret(namespace, name)
        logger.info(f"Deleted secret '{name}' from namespace '{namespace}'")

    def health_check(self) -> bool:
        """Check if the active backend is healthy."""
        return self._secrets_manager.health_check()
