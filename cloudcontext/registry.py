"""Builder registry: maps configured names to builder and capability types.

A provider's configuration names its builders and capability types:

    s3.propertiesbuilder = s3
    s3.contextbuilder    = s3
    s3.sync              = s3.client

Each name is looked up in a registry populated by explicit registration
calls, usually at import time of a provider module:

    @register_context_builder("s3")
    class S3ContextBuilder(ContextBuilder):
        ...

Builder keys that are absent fall back to the generic PropertiesBuilder
and ContextBuilder. Capability keys that are absent resolve to None.
"""

from typing import Any, Callable, Optional

from cloudcontext.builders import ContextBuilder, PropertiesBuilder
from cloudcontext.config import LayeredConfig
from cloudcontext.errors import ResolutionError

PROPERTIES_BUILDER = "propertiesbuilder"
CONTEXT_BUILDER = "contextbuilder"
CAPABILITY = "capability"

KINDS = (PROPERTIES_BUILDER, CONTEXT_BUILDER, CAPABILITY)


class BuilderRegistry:
    """Named builder and capability types, grouped by kind."""

    def __init__(self):
        self._entries: dict[str, dict[str, Any]] = {kind: {} for kind in KINDS}

    def register(self, kind: str, name: str, target: Any) -> Any:
        """Register ``target`` under ``name``.

        Raises:
            ValueError: If the kind is unknown, or the name is already
                        bound to a different object.
        """
        if kind not in self._entries:
            raise ValueError(f"Unknown registry kind: {kind}")

        entries = self._entries[kind]
        existing = entries.get(name)
        if existing is not None and existing is not target:
            raise ValueError(f"{kind} '{name}' is already registered to {existing!r}")

        entries[name] = target
        return target

    def resolve(
        self,
        kind: str,
        name: str,
        provider: Optional[str] = None,
        key: Optional[str] = None,
    ) -> Any:
        try:
            return self._entries[kind][name]
        except KeyError:
            raise ResolutionError(
                f"No {kind} registered as '{name}' (provider '{provider}', key '{key}')",
                provider=provider,
                key=key,
                name=name,
            ) from None

    def names(self, kind: str) -> list[str]:
        return sorted(self._entries[kind])

    def _resolve_key(self, provider: str, config: LayeredConfig, setting: str, kind: str) -> Any:
        key = f"{provider}.{setting}"
        name = config.get(key)
        if name is None:
            return None
        if not name.strip():
            raise ResolutionError(
                f"Empty type name for '{key}' (provider '{provider}')",
                provider=provider,
                key=key,
                name=name,
            )
        return self.resolve(kind, name.strip(), provider=provider, key=key)

    def resolve_builders(self, provider: str, config: LayeredConfig) -> tuple[Any, Any]:
        """Return (properties_builder_type, context_builder_type) for a provider.

        Raises:
            ResolutionError: If a configured builder name is not registered.
        """
        context_builder = self._resolve_key(provider, config, CONTEXT_BUILDER, CONTEXT_BUILDER)
        properties_builder = self._resolve_key(
            provider, config, PROPERTIES_BUILDER, PROPERTIES_BUILDER
        )
        return (
            properties_builder or PropertiesBuilder,
            context_builder or ContextBuilder,
        )

    def resolve_capabilities(
        self, provider: str, config: LayeredConfig
    ) -> tuple[Optional[type], Optional[type]]:
        """Return (sync_type, async_type); each is gated on its own key.

        Raises:
            ResolutionError: If a configured capability name is not registered.
        """
        sync_type = self._resolve_key(provider, config, "sync", CAPABILITY)
        async_type = self._resolve_key(provider, config, "async", CAPABILITY)
        return sync_type, async_type


default_registry = BuilderRegistry()


def register_properties_builder(name: str) -> Callable[[Any], Any]:
    def decorator(cls):
        return default_registry.register(PROPERTIES_BUILDER, name, cls)

    return decorator


def register_context_builder(name: str) -> Callable[[Any], Any]:
    def decorator(cls):
        return default_registry.register(CONTEXT_BUILDER, name, cls)

    return decorator


def register_capability(name: str, target: type) -> type:
    return default_registry.register(CAPABILITY, name, target)
