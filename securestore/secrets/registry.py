"""Backend registry with decorator pattern and plugin discovery."""

import importlib.util
import inspect
import logging
import sys
from importlib.metadata import EntryPoint, entry_points
from pathlib import Path
from typing import Iterable, Optional, Union

from securestore.config.settings import ENTRY_POINT_GROUP
from securestore.monitoring import Metrics
from securestore.secrets.base import SecretsManager
from securestore.secrets.exceptions import DiscoveryError

logger = logging.getLogger(__name__)

EXTENSION_MODULE_PREFIX = "securestore_extensions"

BACKENDS: dict[str, type] = {}


def register_backend(name: str):
    """
    Decorator to register a backend class.

    Usage:
        @register_backend("memory")
        class InMemorySecretsManager(SecretsManager):
            ...
    """

    def decorator(cls):
        cls.backend_name = name
        BACKENDS[name] = cls
        return cls

    return decorator


def get_backend(name: str):
    """
    Get backend class by name.

    Args:
        name: Backend identifier (memory, file, etc.)

    Returns:
        Backend class (not instance)

    Raises:
        KeyError: If backend not registered
    """
    if name not in BACKENDS:
        available = ", ".join(BACKENDS.keys()) or "none"
        raise KeyError(f"Unknown backend: '{name}'. Available: {available}")
    return BACKENDS[name]


def _is_backend_class(obj) -> bool:
    return (
        inspect.isclass(obj)
        and issubclass(obj, SecretsManager)
        and not inspect.isabstract(obj)
    )


def _import_extension(path: Path):
    """Import a plugin file under a private module name."""
    module_name = f"{EXTENSION_MODULE_PREFIX}.{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot load extension from {path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(module_name, None)
        raise
    return module


class BackendRegistry:
    """
    Discovers secret backends and instantiates one per identifier.

    Sources, first one wins on a duplicate identifier:
        1. Built-in backends registered with @register_backend
           (or an explicit backend_classes mapping)
        2. *.py plugin files in extensions_dir
        3. Entry points in entry_point_group from installed distributions

    Nothing is initialized here; see selector.activate_backend.

    Usage:
        registry = BackendRegistry(extensions_dir="/opt/securestore/ext")
        backends = registry.get_all()  # {"file": <...>, "memory": <...>}
    """

    def __init__(
        self,
        extensions_dir: Optional[Union[str, Path]] = None,
        entry_point_group: Optional[str] = ENTRY_POINT_GROUP,
        backend_classes: Optional[dict] = None,
    ):
        self.extensions_dir = Path(extensions_dir) if extensions_dir else None
        self.entry_point_group = entry_point_group
        self._backend_classes = backend_classes

    def get_all(self) -> dict[str, SecretsManager]:
        """
        Instantiate every discovered backend.

        Returns:
            Mapping of backend identifier to uninitialized instance

        Raises:
            DiscoveryError: If a plugin location is unusable
        """
        instances = {}
        for name, cls in self._discover_classes().items():
            try:
                instances[name] = cls()
            except Exception as e:
                logger.warning(f"Excluding backend '{name}': construction failed: {e}")
                Metrics.backend_load_failure(name)

        Metrics.backends_discovered(len(instances))
        logger.info(
            f"Discovered {len(instances)} secure store backend(s): "
            f"{', '.join(sorted(instances)) or 'none'}"
        )
        return instances

    def _discover_classes(self) -> dict[str, type]:
        if self._backend_classes is None:
            # Import built-in backends to trigger registration
            from securestore.secrets import file_backend, memory_backend  # noqa: F401

            builtin = dict(BACKENDS)
        else:
            builtin = dict(self._backend_classes)

        candidates: dict[str, type] = {}
        self._merge(candidates, builtin.items(), "built-in")

        if self.extensions_dir is not None:
            self._merge(
                candidates, self._load_extensions(), f"extensions {self.extensions_dir}"
            )

        if self.entry_point_group:
            self._merge(
                candidates,
                self._load_entry_points(),
                f"entry points '{self.entry_point_group}'",
            )

        return candidates

    @staticmethod
    def _merge(candidates: dict, found: Iterable[tuple[str, type]], source: str) -> None:
        for name, cls in found:
            existing = candidates.get(name)
            if existing is None:
                candidates[name] = cls
            elif existing is not cls:
                logger.warning(
                    f"Ignoring backend '{name}' from {source}: identifier already "
                    f"provided by {existing.__module__}.{existing.__qualname__}"
                )

    def _load_extensions(self) -> list[tuple[str, type]]:
        """Import plugin files and collect the backends they define."""
        if not self.extensions_dir.is_dir():
            raise DiscoveryError(
                f"Extensions directory not found: {self.extensions_dir}"
            )

        found = []
        for path in sorted(self.extensions_dir.glob("*.py")):
            if path.name.startswith("_"):
                continue

            try:
                module = _import_extension(path)
            except Exception as e:
                logger.warning(f"Skipping extension {path.name}: {e}")
                Metrics.backend_load_failure(path.stem)
                continue

            for _, cls in inspect.getmembers(module, _is_backend_class):
                if cls.__module__ == module.__name__ and cls.backend_name:
                    logger.debug(f"Found backend '{cls.backend_name}' in {path.name}")
                    found.append((cls.backend_name, cls))

        return found

    def _load_entry_points(self) -> list[tuple[str, type]]:
        """Load backend classes advertised by installed distributions."""
        found = []
        for ep in entry_points(group=self.entry_point_group):
            if EntryPoint.pattern.match(ep.value) is None:
                raise DiscoveryError(
                    f"Malformed entry point '{ep.name} = {ep.value}' "
                    f"in group '{self.entry_point_group}'"
                )

            try:
                cls = ep.load()
            except Exception as e:
                logger.warning(f"Skipping entry point '{ep.name}': {e}")
                Metrics.backend_load_failure(ep.name)
                continue

            if not _is_backend_class(cls):
                logger.warning(
                    f"Skipping entry point '{ep.name}': {ep.value} is not a SecretsManager"
                )
                Metrics.backend_load_failure(ep.name)
                continue

            found.append((ep.name, cls))

        return found
