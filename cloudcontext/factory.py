"""Front door for building provider contexts from configuration.

Typical use:

    factory = ContextFactory()
    context = factory.create_context("s3", identity="AKIA...", credential="...")

Resolution merges the caller's overrides on top of the factory's base
configuration for the duration of one call; the base configuration is
never modified.
"""

import logging
from typing import Iterable, Mapping, Optional

from cloudcontext.assembler import ContextAssembler
from cloudcontext.builders import PROPERTY_CREDENTIAL, PROPERTY_IDENTITY
from cloudcontext.config import LayeredConfig, build_config, resolve_settings
from cloudcontext.errors import ConfigurationError
from cloudcontext.log import NULL_LOGGER
from cloudcontext.models import ContextSpec, ProviderContext
from cloudcontext.registry import BuilderRegistry, default_registry

# Registers the bundled providers.
import cloudcontext.providers  # noqa: F401


class ContextFactory:
    """Resolves ContextSpecs and assembles provider contexts.

    Args:
        config: Base configuration. Defaults to build_config(), which
                layers bundled defaults and environment overrides.
        registry: Builder registry to resolve names against.
        logger: Optional logger; silent when omitted.
    """

    def __init__(
        self,
        config: Optional[LayeredConfig] = None,
        registry: Optional[BuilderRegistry] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config if config is not None else build_config()
        self.registry = registry or default_registry
        self.logger = logger or NULL_LOGGER
        self.assembler = ContextAssembler(logger=self.logger)

    def create_context_spec(
        self,
        provider: Optional[str],
        identity: Optional[str] = None,
        credential: Optional[str] = None,
        overrides: Optional[Mapping[str, str]] = None,
    ) -> ContextSpec:
        """Resolve everything needed to build ``provider``'s context.

        Configuration entries for the provider win over the identity and
        credential arguments.

        Raises:
            ConfigurationError: If provider is missing or empty.
            ResolutionError: If a configured builder or capability name
                             is not registered.
        """
        if not provider:
            raise ConfigurationError("provider name is required")

        config = self.config.with_layer(overrides)
        endpoint, api_version, identity, credential = resolve_settings(
            config, provider, identity, credential
        )
        properties_builder_type, context_builder_type = self.registry.resolve_builders(
            provider, config
        )
        sync_type, async_type = self.registry.resolve_capabilities(provider, config)

        spec = ContextSpec(
            provider=provider,
            endpoint=endpoint,
            api_version=api_version,
            identity=identity,
            credential=credential,
            sync_type=sync_type,
            async_type=async_type,
            properties_builder_type=properties_builder_type,
            context_builder_type=context_builder_type,
        )
        self.logger.debug("Resolved %r", spec)
        return spec

    def create_context_builder(
        self,
        provider: Optional[str],
        identity: Optional[str] = None,
        credential: Optional[str] = None,
        modules: Iterable[object] = (),
        overrides: Optional[Mapping[str, str]] = None,
    ):
        """Resolve and assemble a context builder for ``provider``.

        When identity or credential are omitted they are read from the
        ``cloudcontext.identity`` / ``cloudcontext.credential`` overrides.
        """
        overrides = dict(overrides or {})
        if identity is None:
            identity = overrides.get(PROPERTY_IDENTITY)
        if credential is None:
            credential = overrides.get(PROPERTY_CREDENTIAL)

        spec = self.create_context_spec(provider, identity, credential, overrides)
        return self.assembler.create_context_builder(spec, modules, overrides)

    def create_context(
        self,
        provider: Optional[str],
        identity: Optional[str] = None,
        credential: Optional[str] = None,
        modules: Iterable[object] = (),
        overrides: Optional[Mapping[str, str]] = None,
    ) -> ProviderContext:
        builder = self.create_context_builder(provider, identity, credential, modules, overrides)
        return self.assembler.build_context(builder)


def create_context_builder_from_spec(
    spec: ContextSpec,
    modules: Iterable[object] = (),
    overrides: Optional[Mapping[str, str]] = None,
):
    return ContextAssembler().create_context_builder(spec, modules, overrides)


def create_context_from_spec(
    spec: ContextSpec,
    modules: Iterable[object] = (),
    overrides: Optional[Mapping[str, str]] = None,
) -> ProviderContext:
    assembler = ContextAssembler()
    return assembler.build_context(assembler.create_context_builder(spec, modules, overrides))
