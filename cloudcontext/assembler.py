"""Assembly of a context builder from a ContextSpec.

The assembler drives the builder strategies named in the spec:
1. Instantiate the properties builder, seeded with the overrides
2. Apply provider, api version, credentials and endpoint, skipping
   fields the spec leaves unset
3. Finalize the properties
4. Instantiate the context builder with the capability types
5. Attach extension modules

Failures are caught once, at this boundary. If an AuthorizationError sits
anywhere in the failure's cause chain, the result carries it instead of
the wrapper, so rejected credentials are never hidden behind an
InstantiationError.
"""

import logging
from typing import Any, Iterable, Mapping, Optional

from cloudcontext.builders import ContextBuilder, PropertiesBuilder
from cloudcontext.errors import AuthorizationError, InstantiationError
from cloudcontext.log import NULL_LOGGER
from cloudcontext.models import AssemblyResult, ContextSpec, ProviderContext


def find_authorization_error(error: BaseException) -> Optional[AuthorizationError]:
    """Walk ``__cause__``/``__context__`` links looking for an AuthorizationError."""
    seen: set[int] = set()
    current: Optional[BaseException] = error
    while current is not None and id(current) not in seen:
        if isinstance(current, AuthorizationError):
            return current
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return None


def _instantiate(factory: Any, role: str, *args: Any) -> Any:
    try:
        return factory(*args)
    except Exception as e:
        name = getattr(factory, "__name__", repr(factory))
        raise InstantiationError(f"Could not construct {role} {name}: {e}") from e


class ContextAssembler:
    """Builds context builders from resolved ContextSpecs.

    Holds no state besides its logger, so one instance can serve any
    number of concurrent builds.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or NULL_LOGGER

    def assemble(
        self,
        spec: ContextSpec,
        modules: Iterable[object] = (),
        overrides: Optional[Mapping[str, str]] = None,
    ) -> AssemblyResult:
        """Assemble a context builder for ``spec``.

        Returns:
            AssemblyResult holding the builder, or the error that stopped
            assembly (an AuthorizationError when one caused the failure).
        """
        try:
            builder = self._assemble(spec, modules, overrides)
        except Exception as e:
            auth_error = find_authorization_error(e)
            if auth_error is not None:
                self.logger.warning(
                    "Credentials rejected for provider %s: %s", spec.provider, auth_error
                )
                return AssemblyResult(error=auth_error)
            self.logger.error("Context assembly failed for provider %s: %s", spec.provider, e)
            return AssemblyResult(error=e)

        return AssemblyResult(builder=builder)

    def _assemble(
        self,
        spec: ContextSpec,
        modules: Iterable[object],
        overrides: Optional[Mapping[str, str]],
    ) -> Any:
        properties_builder_type = spec.properties_builder_type or PropertiesBuilder
        context_builder_type = spec.context_builder_type or ContextBuilder

        builder = _instantiate(
            properties_builder_type, "properties builder", dict(overrides or {})
        )

        builder.provider(spec.provider)
        if spec.api_version is not None:
            builder.api_version(spec.api_version)
        if spec.identity is not None:
            builder.credentials(spec.identity, spec.credential)
        if spec.endpoint is not None:
            builder.endpoint(spec.endpoint)

        properties = builder.build()

        context_builder = _instantiate(
            context_builder_type,
            "context builder",
            spec.sync_type,
            spec.async_type,
            properties,
        )
        context_builder.with_modules(list(modules))

        self.logger.debug(
            "Assembled %s for provider %s",
            type(context_builder).__name__,
            spec.provider,
        )
        return context_builder

    def create_context_builder(
        self,
        spec: ContextSpec,
        modules: Iterable[object] = (),
        overrides: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """Like assemble(), but raise the error instead of returning it."""
        return self.assemble(spec, modules, overrides).unwrap()

    def build_context(self, context_builder: Any) -> ProviderContext:
        """Build the final context, surfacing any AuthorizationError first."""
        try:
            return context_builder.build_context()
        except Exception as e:
            auth_error = find_authorization_error(e)
            if auth_error is not None and auth_error is not e:
                raise auth_error from None
            raise
