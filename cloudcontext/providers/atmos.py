"""Atmos provider: share URLs for objects in an Atmos namespace.

The context's ``api`` is an AtmosShareUrls object. Its credential is the
base64-encoded shared secret issued with the uid.
"""

from typing import Mapping

from cloudcontext.builders import (
    PROPERTY_CREDENTIAL,
    PROPERTY_ENDPOINT,
    PROPERTY_IDENTITY,
    ContextBuilder,
    PropertiesBuilder,
)
from cloudcontext.errors import AuthorizationError, ConfigurationError, SigningError
from cloudcontext.registry import (
    register_capability,
    register_context_builder,
    register_properties_builder,
)
from cloudcontext.signing import (
    DEFAULT_TTL_SECONDS,
    PresignedUrlSigner,
    decode_key,
    expiring_clock,
)

PROPERTY_SHARE_TTL = "cloudcontext.atmos.share-ttl"


class AtmosShareUrls:
    """Creates share URLs for one uid."""

    def __init__(self, signer: PresignedUrlSigner):
        self.signer = signer

    def share_url(self, path: str) -> str:
        return str(self.signer.sign(path))


register_capability("atmos.shareurl", AtmosShareUrls)


@register_properties_builder("atmos")
class AtmosPropertiesBuilder(PropertiesBuilder):
    def defaults(self) -> Mapping[str, str]:
        return {PROPERTY_SHARE_TTL: str(DEFAULT_TTL_SECONDS)}


@register_context_builder("atmos")
class AtmosContextBuilder(ContextBuilder):
    """Context builder for Atmos share URLs.

    Raises:
        AuthorizationError: If the uid or shared secret is missing, or the
                            secret is not valid base64.
        ConfigurationError: If no endpoint or an invalid share TTL is set.
    """

    def __init__(self, sync_type, async_type, properties):
        uid = properties.get(PROPERTY_IDENTITY)
        encoded_key = properties.get(PROPERTY_CREDENTIAL)
        if not uid or not encoded_key:
            raise AuthorizationError(
                "Atmos requires a uid (identity) and shared secret (credential)"
            )
        try:
            self._key = decode_key(encoded_key)
        except SigningError as e:
            raise AuthorizationError("Atmos shared secret was rejected") from e

        if not properties.get(PROPERTY_ENDPOINT):
            raise ConfigurationError("Atmos requires an endpoint")
        try:
            self._ttl = int(properties.get(PROPERTY_SHARE_TTL, DEFAULT_TTL_SECONDS))
        except ValueError as e:
            raise ConfigurationError(f"Invalid {PROPERTY_SHARE_TTL}: {e}") from e

        super().__init__(sync_type, async_type, properties)

    def create_api(self) -> AtmosShareUrls:
        signer = PresignedUrlSigner(
            self.properties[PROPERTY_IDENTITY],
            self._key,
            self.properties[PROPERTY_ENDPOINT],
            clock=expiring_clock(self._ttl),
        )
        return AtmosShareUrls(signer)
