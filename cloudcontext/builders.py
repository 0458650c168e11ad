"""Builder capabilities used to assemble a provider context.

PropertiesBuilder collects the resolved settings into a read-only
properties mapping. ContextBuilder takes those properties plus the
provider's capability types and produces a ProviderContext. Both classes
are the generic defaults; providers subclass them and register the
subclasses in the builder registry.
"""

from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from cloudcontext.models import ProviderContext

PROPERTY_PROVIDER = "cloudcontext.provider"
PROPERTY_API_VERSION = "cloudcontext.api-version"
PROPERTY_IDENTITY = "cloudcontext.identity"
PROPERTY_CREDENTIAL = "cloudcontext.credential"
PROPERTY_ENDPOINT = "cloudcontext.endpoint"


class PropertiesBuilder:
    """Accumulates context properties on top of caller overrides.

    Subclasses supply provider defaults through ``defaults()``. Overrides
    passed to the constructor win over those defaults; the setter methods
    win over both.
    """

    def __init__(self, overrides: Optional[Mapping[str, str]] = None):
        self._properties: dict[str, str] = dict(self.defaults())
        if overrides:
            self._properties.update(overrides)

    def defaults(self) -> Mapping[str, str]:
        return {}

    def provider(self, name: str) -> "PropertiesBuilder":
        self._properties[PROPERTY_PROVIDER] = name
        return self

    def api_version(self, version: str) -> "PropertiesBuilder":
        self._properties[PROPERTY_API_VERSION] = version
        return self

    def credentials(
        self, identity: str, credential: Optional[str]
    ) -> "PropertiesBuilder":
        self._properties[PROPERTY_IDENTITY] = identity
        if credential is None:
            self._properties.pop(PROPERTY_CREDENTIAL, None)
        else:
            self._properties[PROPERTY_CREDENTIAL] = credential
        return self

    def endpoint(self, uri: str) -> "PropertiesBuilder":
        self._properties[PROPERTY_ENDPOINT] = uri
        return self

    def build(self) -> Mapping[str, str]:
        """Return a read-only snapshot of the accumulated properties."""
        return MappingProxyType(dict(self._properties))


class ContextBuilder:
    """Turns finalized properties into a ProviderContext.

    Args:
        sync_type: Synchronous capability type, if the provider has one.
        async_type: Asynchronous capability type, if the provider has one.
        properties: Finalized properties from a PropertiesBuilder.
    """

    def __init__(
        self,
        sync_type: Optional[type],
        async_type: Optional[type],
        properties: Mapping[str, str],
    ):
        self.sync_type = sync_type
        self.async_type = async_type
        self.properties = properties
        self.modules: tuple = ()

    def with_modules(self, modules: Iterable[object]) -> "ContextBuilder":
        """Attach extension modules applied when the context is built."""
        self.modules = tuple(modules)
        return self

    def create_api(self):
        """Create the provider's live client. None for the generic builder."""
        return None

    def build_context(self) -> ProviderContext:
        api = self.create_api()
        for module in self.modules:
            configure = getattr(module, "configure", None)
            if callable(configure):
                configure(self, api)
        return ProviderContext(
            provider=self.properties.get(PROPERTY_PROVIDER, ""),
            properties=self.properties,
            sync_type=self.sync_type,
            async_type=self.async_type,
            modules=self.modules,
            api=api,
        )
