"""In-memory secret backend."""

import logging
import threading
import time
from typing import Mapping, Optional

from securestore.secrets.base import SecretsManager, SecretsManagerContext
from securestore.secrets.exceptions import SecretBackendError
from securestore.secrets.models import Secret, SecretMetadata
from securestore.secrets.registry import register_backend

logger = logging.getLogger(__name__)


@register_backend("memory")
class InMemorySecretsManager(SecretsManager):
    """
    Keeps secrets in the backend-owned state of its context.

    Nothing survives the process. Intended for tests and local development.

    State layout:
        {namespace: {name: Secret}}
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._namespaces: Optional[dict] = None

    def initialize(self, context: SecretsManagerContext) -> None:
        self._namespaces = context.state
        logger.info("In-memory secure store ready")

    def _store(self) -> dict:
        if self._namespaces is None:
            raise SecretBackendError("In-memory backend used before initialize()")
        return self._namespaces

    def list_secrets(self, namespace: str) -> list[Secret]:
        with self._lock:
            return list(self._store().get(namespace, {}).values())

    def get_secret(self, namespace: str, name: str) -> Optional[Secret]:
        with self._lock:
            return self._store().get(namespace, {}).get(name)

    def store_secret(
        self,
        namespace: str,
        name: str,
        data: bytes,
        description: str,
        properties: Mapping[str, str],
    ) -> None:
        with self._lock:
            secrets = self._store().setdefault(namespace, {})
            create_time_ms = int(time.time() * 1000)
            previous = secrets.get(name)
            if previous is not None:
                # Wall clock may step backwards; keep per-key times ordered
                create_time_ms = max(create_time_ms, previous.metadata.create_time_ms)

            secrets[name] = Secret(
                data=bytes(data),
                metadata=SecretMetadata(
                    name=name,
                    description=description,
                    create_time_ms=create_time_ms,
                    properties=dict(properties),
                ),
            )
        logger.debug(f"Stored secret '{name}' in namespace '{namespace}'")

    def delete_secret(self, namespace: str, name: str) -> None:
        with self._lock:
            secrets = self._store().get(namespace)
            if secrets is None or secrets.pop(name, None) is None:
                return
            if not secrets:
                del self._store()[namespace]
        logger.debug(f"Deleted secret '{name}' from namespace '{namespace}'")

    def health_check(self) -> bool:
        """Healthy once initialized."""
        return self._namespaces is not None
