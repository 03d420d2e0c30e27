"""Tests for in-memory secret backend."""

import threading

import pytest

from securestore.secrets.base import SecretsManagerContext
from securestore.secrets.exceptions import SecretBackendError
from securestore.secrets.memory_backend import InMemorySecretsManager


@pytest.fixture
def backend():
    manager = InMemorySecretsManager()
    manager.initialize(SecretsManagerContext(properties={}))
    return manager


class TestInMemorySecretsManager:
    """Tests for InMemorySecretsManager."""

    def test_registered_as_memory(self):
        """Decorator should assign the backend identifier."""
        assert InMemorySecretsManager.backend_name == "memory"

    def test_store_and_get(self, backend):
        """Should return what was stored."""
        # Arrange
        backend.store_secret("ns1", "db-pass", b"s3cr3t", "db password", {"env": "prod"})

        # Act
        secret = backend.get_secret("ns1", "db-pass")

        # Assert
        assert secret.data == b"s3cr3t"
        assert secret.metadata.name == "db-pass"
        assert secret.metadata.description == "db password"
        assert secret.metadata.properties == {"env": "prod"}
        assert secret.metadata.create_time_ms > 0

    def test_get_missing_returns_none(self, backend):
        """Missing secret is an empty result, not an error."""
        assert backend.get_secret("ns1", "nothing") is None

    def test_namespaces_are_independent(self, backend):
        """Same name in two namespaces should not collide."""
        # Arrange
        backend.store_secret("ns1", "key", b"one", "", {})
        backend.store_secret("ns2", "key", b"two", "", {})

        # Act & Assert
        assert backend.get_secret("ns1", "key").data == b"one"
        assert backend.get_secret("ns2", "key").data == b"two"
        assert len(backend.list_secrets("ns1")) == 1

    def test_list_unknown_namespace_is_empty(self, backend):
        """Unknown namespace should list nothing."""
        assert list(backend.list_secrets("ghost")) == []

    def test_overwrite_keeps_timestamps_ordered(self, backend, monkeypatch):
        """Overwrite should never move the creation time backwards."""
        # Arrange
        clock = iter([2000.0, 1000.0])
        fake_time = type("FakeTime", (), {"time": staticmethod(lambda: next(clock))})
        monkeypatch.setattr("securestore.secrets.memory_backend.time", fake_time)
        backend.store_secret("ns1", "key", b"v1", "", {})
        first = backend.get_secret("ns1", "key").metadata.create_time_ms

        # Act
        backend.store_secret("ns1", "key", b"v2", "", {})
        second = backend.get_secret("ns1", "key")

        # Assert
        assert second.data == b"v2"
        assert second.metadata.create_time_ms >= first

    def test_delete_is_idempotent(self, backend):
        """Deleting twice, or deleting nothing, should succeed."""
        # Arrange
        backend.store_secret("ns1", "key", b"v", "", {})

        # Act
        backend.delete_secret("ns1", "key")
        backend.delete_secret("ns1", "key")
        backend.delete_secret("never", "there")

        # Assert
        assert backend.get_secret("ns1", "key") is None

    def test_uses_context_state(self):
        """Secrets should live in the state container of the context."""
        # Arrange
        context = SecretsManagerContext(properties={})
        manager = InMemorySecretsManager()
        manager.initialize(context)

        # Act
        manager.store_secret("ns1", "key", b"v", "", {})

        # Assert
        assert "key" in context.state["ns1"]

    def test_store_copies_properties(self, backend):
        """Later changes to the caller's dict should not leak in."""
        # Arrange
        properties = {"env": "prod"}
        backend.store_secret("ns1", "key", b"v", "", properties)

        # Act
        properties["env"] = "dev"

        # Assert
        assert backend.get_secret("ns1", "key").metadata.properties == {"env": "prod"}

    def test_use_before_initialize_raises(self):
        """Should refuse to work before initialize()."""
        with pytest.raises(SecretBackendError):
            InMemorySecretsManager().get_secret("ns1", "key")

    def test_health_check(self, backend):
        """Healthy after initialize, unhealthy before."""
        assert backend.health_check() is True
        assert InMemorySecretsManager().health_check() is False

    def test_concurrent_writes_to_distinct_keys(self, backend):
        """Concurrent stores should all land."""
        # Arrange
        def write(i):
            backend.store_secret("ns1", f"key-{i}", str(i).encode(), "", {})

        threads = [threading.Thread(target=write, args=(i,)) for i in range(20)]

        # Act
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        # Assert
        assert len(backend.list_secrets("ns1")) == 20
