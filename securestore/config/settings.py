"""Secure store settings object."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from securestore.config.exceptions import ConfigValidationError

ENTRY_POINT_GROUP = "securestore.backends"


@dataclass(frozen=True)
class SecureStoreConfig:
    """
    Read-only settings consumed by the secure store.

    Attributes:
        backend: Identifier of the active backend (None = only one available)
        extensions_dir: Directory scanned for plugin files
        entry_point_group: Entry point group for installed plugins (None disables)
        backends: Per-backend properties, keyed by identifier. Values are
            strings; null values are dropped.
    """

    backend: Optional[str] = None
    extensions_dir: Optional[Path] = None
    entry_point_group: Optional[str] = ENTRY_POINT_GROUP
    backends: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "SecureStoreConfig":
        """
        Build from the 'secure_store' section of a config document.

        Raises:
            ConfigValidationError: If a field has the wrong type
        """
        section = data.get("secure_store") or {}
        if not isinstance(section, dict):
            raise ConfigValidationError("'secure_store' must be a mapping")

        backend = section.get("backend")
        if backend is not None and not isinstance(backend, str):
            raise ConfigValidationError("'secure_store.backend' must be a string")

        backends = section.get("backends") or {}
        if not isinstance(backends, dict):
            raise ConfigValidationError("'secure_store.backends' must be a mapping")
        for name, props in backends.items():
            if props is not None and not isinstance(props, dict):
                raise ConfigValidationError(
                    f"'secure_store.backends.{name}' must be a mapping"
                )

        extensions_dir = section.get("extensions_dir")
        return cls(
            backend=backend or None,
            extensions_dir=Path(extensions_dir).expanduser() if extensions_dir else None,
            entry_point_group=section.get("entry_point_group", ENTRY_POINT_GROUP),
            backends={
                name: {
                    k: str(v) for k, v in (props or {}).items() if v is not None
                }
                for name, props in backends.items()
            },
        )
