"""Data models for provider-context resolution and URL signing."""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from cloudcontext.errors import ConfigurationError


@dataclass(frozen=True)
class ContextSpec:
    """Resolved configuration for one provider-context build.

    Only ``provider`` is required. An absent endpoint, api version or
    credential means the provider builder decides. Absent builder types
    fall back to the generic PropertiesBuilder and ContextBuilder.
    """

    provider: str
    endpoint: Optional[str] = None
    api_version: Optional[str] = None
    identity: Optional[str] = None
    credential: Optional[str] = None
    sync_type: Optional[type] = None
    async_type: Optional[type] = None
    properties_builder_type: Optional[Any] = None
    context_builder_type: Optional[Any] = None

    def __post_init__(self):
        if not self.provider:
            raise ConfigurationError("provider name is required")

    def __repr__(self) -> str:
        # Keep the credential out of logs and tracebacks.
        credential = "***" if self.credential is not None else None
        return (
            f"ContextSpec(provider={self.provider!r}, endpoint={self.endpoint!r}, "
            f"api_version={self.api_version!r}, identity={self.identity!r}, "
            f"credential={credential!r}, sync_type={self.sync_type!r}, "
            f"async_type={self.async_type!r})"
        )


@dataclass(frozen=True)
class SignedUrl:
    """A presigned URL and the values embedded in it."""

    url: str
    uid: str
    expires: int
    signature: str
    resource: str

    def __str__(self) -> str:
        return self.url


@dataclass(frozen=True)
class ProviderContext:
    """A built provider context.

    ``api`` holds the provider's live client, or None for the generic
    builder.
    """

    provider: str
    properties: Mapping[str, str]
    sync_type: Optional[type] = None
    async_type: Optional[type] = None
    modules: tuple = ()
    api: Any = None


@dataclass(frozen=True)
class AssemblyResult:
    """Outcome of assembling a context builder.

    Exactly one of ``builder`` and ``error`` is set.
    """

    builder: Any = None
    error: Optional[BaseException] = field(default=None)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        """Return the builder or raise the recorded error."""
        if self.error is not None:
            raise self.error
        return self.builder
