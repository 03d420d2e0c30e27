"""Secret records exchanged with backends and returned to callers."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SecretMetadata:
    """Backend-native metadata of a stored secret."""

    name: str
    description: str
    create_time_ms: int
    properties: dict = field(default_factory=dict)


@dataclass(frozen=True)
class Secret:
    """A secret as returned by a backend: raw payload plus metadata."""

    data: bytes
    metadata: SecretMetadata


@dataclass(frozen=True)
class SecureStoreMetadata:
    """Non-payload view of a secret handed out by the facade."""

    name: str
    description: str
    create_time_ms: int
    properties: dict = field(default_factory=dict)

    @classmethod
    def from_secret_metadata(cls, metadata: SecretMetadata) -> "SecureStoreMetadata":
        """Create from backend metadata, copying properties."""
        return cls(
            name=metadata.name,
            description=metadata.description,
            create_time_ms=metadata.create_time_ms,
            properties=dict(metadata.properties),
        )


@dataclass(frozen=True)
class SecureStoreData:
    """A secret as handed out by the facade."""

    metadata: SecureStoreMetadata
    data: bytes

    @classmethod
    def from_secret(cls, secret: Secret) -> "SecureStoreData":
        """Create from a backend secret."""
        return cls(
            metadata=SecureStoreMetadata.from_secret_metadata(secret.metadata),
            data=secret.data,
        )

    def get(self) -> bytes:
        """Return the raw payload."""
        return self.data

    def as_text(self) -> str:
        """Return the payload decoded as UTF-8."""
        return self.data.decode("utf-8")
