"""Encrypted file-based secret backend."""

import contextlib
import json
import logging
import os
import tempfile
import threading
import time
from pathlib import Path
from typing import Generator, Mapping, Optional

from cryptography.fernet import Fernet, InvalidToken
from filelock import FileLock, Timeout

from securestore.secrets.base import SecretsManager, SecretsManagerContext
from securestore.secrets.exceptions import (
    BackendWriteError,
    InitializationError,
    SecretBackendError,
)
from securestore.secrets.models import Secret, SecretMetadata
from securestore.secrets.registry import register_backend

logger = logging.getLogger(__name__)

FILE_FORMAT_VERSION = 1
DEFAULT_LOCK_TIMEOUT = 10.0


def _as_bool(value: Optional[str], default: bool = True) -> bool:
    if value is None:
        return default
    return str(value).strip().lower() in ("1", "true", "yes", "on")


@register_backend("file")
class EncryptedFileSecretsManager(SecretsManager):
    """
    Stores secrets in a local JSON file, payloads encrypted with Fernet.

    Properties:
        path: Secret file location (required)
        key: Fernet key, url-safe base64 (this or key_file is required)
        key_file: File holding the Fernet key
        create: Create the file when missing (default: true)
        lock_timeout: Seconds to wait for the write lock (default: 10)

    File format:
        {
            "version": 1,
            "namespaces": {
                "ns1": {
                    "db-pass": {
                        "data": "<fernet token>",
                        "description": "db password",
                        "create_time_ms": 1700000000000,
                        "properties": {"env": "prod"}
                    }
                }
            }
        }

    Every operation re-reads the file, so separate processes sharing it see
    each other's writes. Writes hold "<path>.lock" from read to replace and
    replace the file atomically, so readers never need the lock.
    """

    def __init__(self):
        self.file_path: Optional[Path] = None
        self._fernet: Optional[Fernet] = None
        self._file_lock: Optional[FileLock] = None
        self._lock = threading.Lock()

    def initialize(self, context: SecretsManagerContext) -> None:
        properties = context.properties
        path = properties.get("path")
        if not path:
            raise InitializationError("File backend requires a 'path' property")

        self.file_path = Path(path).expanduser()
        self._fernet = Fernet(self._load_key(properties))
        self._file_lock = FileLock(
            f"{self.file_path}.lock", timeout=self._lock_timeout(properties)
        )

        if not self.file_path.exists() and not _as_bool(properties.get("create")):
            raise InitializationError(f"Secret file not found: {self.file_path}")

        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            with self._file_lock:
                if self.file_path.exists():
                    namespaces = self._read()
                    count = sum(len(secrets) for secrets in namespaces.values())
                    logger.info(f"Loaded {count} secrets from {self.file_path}")
                else:
                    self._write({})
                    logger.info(f"Created secret file {self.file_path}")
        except Timeout as e:
            raise InitializationError(
                f"Timed out waiting for lock {self._file_lock.lock_file}"
            ) from e
        except SecretBackendError as e:
            raise InitializationError(str(e)) from e
        except OSError as e:
            raise InitializationError(
                f"Cannot create secret file {self.file_path}: {e}"
            ) from e

    @staticmethod
    def _load_key(properties: Mapping[str, str]) -> bytes:
        """Read the Fernet key from properties and check it is usable."""
        if properties.get("key"):
            key = properties["key"].encode("ascii")
        elif properties.get("key_file"):
            key_file = Path(properties["key_file"]).expanduser()
            try:
                key = key_file.read_bytes().strip()
            except OSError as e:
                raise InitializationError(f"Cannot read key file {key_file}: {e}") from e
        else:
            raise InitializationError(
                "File backend requires a 'key' or 'key_file' property"
            )

        try:
            Fernet(key)
        except ValueError as e:
            raise InitializationError(f"Invalid encryption key: {e}") from e
        return key

    @staticmethod
    def _lock_timeout(properties: Mapping[str, str]) -> float:
        value = properties.get("lock_timeout")
        if value is None:
            return DEFAULT_LOCK_TIMEOUT
        try:
            return float(value)
        except ValueError as e:
            raise InitializationError(f"Invalid lock_timeout: {value!r}") from e

    @contextlib.contextmanager
    def _write_locked(self, action: str) -> Generator[dict, None, None]:
        """
        Hold the thread and file locks around one read-modify-write cycle.

        Yields the current namespaces table. Unreadable content and lock
        timeouts surface as BackendWriteError.
        """
        with self._lock:
            try:
                self._file_lock.acquire()
            except Timeout as e:
                raise BackendWriteError(
                    f"Cannot {action}: timed out waiting for lock "
                    f"{self._file_lock.lock_file}"
                ) from e
            try:
                try:
                    namespaces = self._read()
                except SecretBackendError as e:
                    raise BackendWriteError(f"Cannot {action}: {e}") from e
                yield namespaces
            finally:
                self._file_lock.release()

    def _read(self) -> dict:
        """Load the namespaces table from disk."""
        try:
            with open(self.file_path) as f:
                document = json.load(f)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as e:
            raise SecretBackendError(f"Invalid JSON in {self.file_path}: {e}")
        except OSError as e:
            raise SecretBackendError(f"Cannot read {self.file_path}: {e}")

        namespaces = document.get("namespaces") if isinstance(document, dict) else None
        if not isinstance(namespaces, dict):
            raise SecretBackendError(f"Unrecognized secret file format: {self.file_path}")
        return namespaces
    def _write(self, namespaces: dict) -> None:
        """Atomically replace the file with a new namespaces table."""
        document = {"version": FILE_FORMAT_VERSION, "namespaces": namespaces}
        self.file_path.parent.mkdir(parents=True, exist_ok=True)

        # mkstemp creates the file with 0600 permissions
        fd, tmp_path = tempfile.mkstemp(
            dir=self.file_path.parent, prefix=f".{self.file_path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(document, f, indent=2, sort_keys=True)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.file_path)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_path)
            raise

    def _to_secret(self, name: str, entry: dict) -> Secret:
        try:
            data = self._fernet.decrypt(entry["data"].encode("ascii"))
        except InvalidToken:
            raise SecretBackendError(
                f"Cannot decrypt secret '{name}': wrong key or corrupted data"
            )
        except (KeyError, AttributeError, TypeError):
            raise SecretBackendError(f"Malformed entry for secret '{name}'")

        return Secret(
            data=data,
            metadata=SecretMetadata(
                name=name,
                description=entry.get("description", ""),
                create_time_ms=int(entry.get("create_time_ms", 0)),
                properties=dict(entry.get("properties") or {}),
            ),
        )

    def list_secrets(self, namespace: str) -> list[Secret]:
        with self._lock:
            secrets = self._read().get(namespace, {})
        return [self._to_secret(name, entry) for name, entry in secrets.items()]

    def get_secret(self, namespace: str, name: str) -> Optional[Secret]:
        with self._lock:
            entry = self._read().get(namespace, {}).get(name)
        if entry is None:
            return None
        return self._to_secret(name, entry)

    def store_secret(
        self,
        namespace: str,
        name: str,
        data: bytes,
        description: str,
        properties: Mapping[str, str],
    ) -> None:
        token = self._fernet.encrypt(bytes(data)).decode("ascii")

        with self._write_locked(f"store secret '{name}'") as namespaces:
            secrets = namespaces.setdefault(namespace, {})

            create_time_ms = int(time.time() * 1000)
            previous = secrets.get(name)
            if previous is not None:
                create_time_ms = max(create_time_ms, int(previous.get("create_time_ms", 0)))

            secrets[name] = {
                "data": token,
                "description": description,
                "create_time_ms": create_time_ms,
                "properties": dict(properties),
            }
            try:
                self._write(namespaces)
            except OSError as e:
                raise BackendWriteError(
                    f"Failed to store secret '{name}' in {self.file_path}: {e}"
                ) from e

        logger.debug(f"Stored secret '{name}' in namespace '{namespace}'")

    def delete_secret(self, namespace: str, name: str) -> None:
        with self._write_locked(f"delete secret '{name}'") as namespaces:
            secrets = namespaces.get(namespace)
            if secrets is None or name not in secrets:
                return

            del secrets[name]
            if not secrets:
                del namespaces[namespace]
            try:
                self._write(namespaces)
            except OSError as e:
                raise BackendWriteError(
                    f"Failed to delete secret '{name}' from {self.file_path}: {e}"
                ) from e

        logger.debug(f"Deleted secret '{name}' from namespace '{namespace}'")

    def health_check(self) -> bool:
        """Check if the secret file exists and is readable and writable."""
        return (
            self.file_path is not None
            and self.file_path.exists()
            and os.access(self.file_path, os.R_OK | os.W_OK)
        )
