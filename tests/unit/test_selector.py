"""Tests for backend selection and initialization."""

from unittest.mock import MagicMock

import pytest

from securestore.secrets.base import SecretsManager
from securestore.secrets.exceptions import (
    BackendNotFoundError,
    InitializationError,
    NoBackendConfiguredError,
)
from securestore.secrets.selector import activate_backend, select_backend


def mock_backend():
    return MagicMock(spec=SecretsManager)


class TestSelectBackend:
    """Tests for select_backend()."""

    def test_configured_backend_selected(self):
        """Should pick the configured identifier."""
        # Arrange
        backends = {"memory": mock_backend(), "file": mock_backend()}

        # Act
        name, backend = select_backend(backends, "file")

        # Assert
        assert name == "file"
        assert backend is backends["file"]

    def test_configured_backend_missing(self):
        """Unknown configured identifier should list what is available."""
        # Arrange
        backends = {"memory": mock_backend()}

        # Act & Assert
        with pytest.raises(BackendNotFoundError) as exc_info:
            select_backend(backends, "vault")

        assert "vault" in str(exc_info.value)
        assert "memory" in str(exc_info.value)

    def test_single_backend_without_config(self):
        """With exactly one backend, no configuration is needed."""
        # Arrange
        only = mock_backend()

        # Act
        name, backend = select_backend({"memory": only})

        # Assert
        assert (name, backend) == ("memory", only)

    def test_several_backends_without_config(self):
        """Ambiguity is an error, never an arbitrary pick."""
        # Arrange
        backends = {"memory": mock_backend(), "file": mock_backend()}

        # Act & Assert
        with pytest.raises(NoBackendConfiguredError):
            select_backend(backends, None)

    def test_nothing_discovered(self):
        """An empty registry result cannot be selected from."""
        with pytest.raises(BackendNotFoundError):
            select_backend({}, None)


class TestActivateBackend:
    """Tests for activate_backend()."""

    def test_only_selected_backend_initialized(self):
        """Exactly the selected backend gets initialize() once."""
        # Arrange
        backends = {"memory": mock_backend(), "file": mock_backend()}

        # Act
        activate_backend(backends, "memory")

        # Assert
        backends["memory"].initialize.assert_called_once()
        backends["file"].initialize.assert_not_called()

    def test_context_carries_backend_properties(self):
        """Backend receives its own properties and a fresh empty state."""
        # Arrange
        backend = mock_backend()

        # Act
        activate_backend(
            {"file": backend},
            "file",
            backend_properties={"file": {"path": "/tmp/s.json"}, "other": {"x": "y"}},
        )

        # Assert
        context = backend.initialize.call_args.args[0]
        assert dict(context.properties) == {"path": "/tmp/s.json"}
        assert context.state == {}

    def test_properties_are_read_only(self):
        """Backends cannot mutate configuration through the context."""
        # Arrange
        backend = mock_backend()
        activate_backend({"memory": backend}, "memory", {"memory": {"a": "b"}})
        context = backend.initialize.call_args.args[0]

        # Act & Assert
        with pytest.raises(TypeError):
            context.properties["a"] = "c"

    def test_each_activation_gets_fresh_state(self):
        """State containers are never shared between activations."""
        # Arrange
        first, second = mock_backend(), mock_backend()

        # Act
        activate_backend({"memory": first})
        activate_backend({"memory": second})

        # Assert
        assert (
            first.initialize.call_args.args[0].state
            is not second.initialize.call_args.args[0].state
        )

    def test_initialization_error_propagates(self):
        """InitializationError from the backend passes through unchanged."""
        # Arrange
        backend = mock_backend()
        error = InitializationError("unreachable")
        backend.initialize.side_effect = error

        # Act & Assert
        with pytest.raises(InitializationError) as exc_info:
            activate_backend({"memory": backend})

        assert exc_info.value is error

    def test_other_errors_wrapped(self):
        """Unexpected failures become InitializationError with the cause kept."""
        # Arrange
        backend = mock_backend()
        backend.initialize.side_effect = ConnectionError("kms down")

        # Act & Assert
        with pytest.raises(InitializationError) as exc_info:
            activate_backend({"kms": backend})

        assert "kms" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, ConnectionError)
