"""Presigned share URLs signed with HMAC-SHA1.

A share URL grants time-limited GET access to one resource under the
``/rest/namespace/`` tree without exposing the secret key:

    <endpoint>/rest/namespace/<path>?uid=<uid>&expires=<epoch>&signature=<sig>

The string to sign is four newline-separated fields, in this order:

    GET
    <requested resource, lowercased>
    <uid>
    <expires>

and the signature is the base64 of HMAC-SHA1(secret key, string to sign).
The server recomputes the same value, so the resource path is compared
case-insensitively.
"""

import base64
import binascii
import hashlib
import hmac
import logging
import time
from typing import Callable, Optional, Union
from urllib.parse import quote

import httpx

from cloudcontext.errors import SigningError
from cloudcontext.log import NULL_LOGGER
from cloudcontext.models import SignedUrl

NAMESPACE_PATH = "/rest/namespace/"

DEFAULT_TTL_SECONDS = 3600

Clock = Callable[[], int]
MacFactory = Callable[[bytes], "hmac.HMAC"]


def system_clock() -> int:
    """Current time in epoch seconds."""
    return int(time.time())


def expiring_clock(ttl_seconds: int = DEFAULT_TTL_SECONDS, skew_seconds: int = 0) -> Clock:
    """Build a clock that returns an expiry ``ttl_seconds`` from now.

    Args:
        ttl_seconds: How long signed URLs stay valid.
        skew_seconds: Correction added for a server clock that runs
                      ahead (positive) or behind (negative) local time.
    """

    def clock() -> int:
        return system_clock() + ttl_seconds + skew_seconds

    return clock


def hmac_sha1(key: bytes) -> "hmac.HMAC":
    return hmac.new(key, digestmod=hashlib.sha1)


def decode_key(encoded_key: str) -> bytes:
    """Decode a base64 credential into raw key bytes.

    Raises:
        SigningError: If the credential is not valid base64.
    """
    try:
        return base64.b64decode(encoded_key, validate=True)
    except (binascii.Error, ValueError, TypeError) as e:
        raise SigningError(f"Secret key is not valid base64: {e}") from e


class PresignedUrlSigner:
    """Signs share URLs for a fixed uid and secret key.

    Immutable once constructed and safe to share between threads, as
    long as the clock is.

    Args:
        uid: Caller identity embedded in every URL.
        key: Raw secret key bytes.
        endpoint: Base URL of the provider.
        clock: Returns the expiry in epoch seconds. Defaults to one hour
               from now.
        mac_factory: Returns a fresh HMAC-SHA1 object for a key.
        logger: Receives one debug line per signed URL.
        signature_logger: Receives the string to sign, when given.
    """

    def __init__(
        self,
        uid: str,
        key: bytes,
        endpoint: Union[str, httpx.URL],
        clock: Optional[Clock] = None,
        mac_factory: MacFactory = hmac_sha1,
        logger: Optional[logging.Logger] = None,
        signature_logger: Optional[logging.Logger] = None,
    ):
        if not isinstance(key, (bytes, bytearray)) or not key:
            raise SigningError("Secret key must be non-empty bytes")

        self._uid = uid
        self._key = bytes(key)
        self._endpoint = httpx.URL(str(endpoint))
        self._clock = clock or expiring_clock()
        self._mac_factory = mac_factory
        self._logger = logger or NULL_LOGGER
        self._signature_logger = signature_logger or NULL_LOGGER

    @classmethod
    def from_credential(
        cls,
        uid: str,
        encoded_key: str,
        endpoint: Union[str, httpx.URL],
        **kwargs,
    ) -> "PresignedUrlSigner":
        """Create a signer from a base64-encoded credential."""
        return cls(uid, decode_key(encoded_key), endpoint, **kwargs)

    @property
    def uid(self) -> str:
        return self._uid

    @property
    def endpoint(self) -> httpx.URL:
        return self._endpoint

    def create_string_to_sign(self, requested_resource: str, expires: str) -> str:
        return "\n".join(["GET", requested_resource.lower(), self._uid, expires])

    def sign_string(self, to_sign: str) -> str:
        """Return the base64 HMAC-SHA1 signature of ``to_sign``.

        Raises:
            SigningError: If the text cannot be encoded or the key is
                          rejected by the MAC.
        """
        try:
            mac = self._mac_factory(self._key)
            mac.update(to_sign.encode("utf-8"))
            digest = mac.digest()
        except (UnicodeError, TypeError, ValueError) as e:
            raise SigningError(f"Could not sign request: {e}") from e
        return base64.b64encode(digest).decode("ascii")

    def sign(self, resource_path: str) -> SignedUrl:
        """Create a share URL for ``resource_path``.

        Args:
            resource_path: Path of the resource below the namespace root.

        Returns:
            A new SignedUrl; nothing is cached between calls.

        Raises:
            SigningError: If the path contains ``.`` or ``..`` segments.
        """
        if any(segment in (".", "..") for segment in resource_path.split("/")):
            raise SigningError(f"Dot segments are not allowed in resource path: {resource_path}")

        requested_resource = NAMESPACE_PATH + resource_path
        expires = str(int(self._clock()))
        to_sign = self.create_string_to_sign(requested_resource, expires)
        self._signature_logger.debug("string to sign:\n%s", to_sign)
        signature = self.sign_string(to_sign)

        # The encoded path decodes back to exactly the signed resource.
        url = self._endpoint.copy_with(
            path=quote(self._endpoint.path.rstrip("/") + requested_resource, safe="/"),
            params={"uid": self._uid, "expires": expires, "signature": signature},
        )
        self._logger.debug(
            "Signed %s for uid %s, expires %s", requested_resource, self._uid, expires
        )

        return SignedUrl(
            url=str(url),
            uid=self._uid,
            expires=int(expires),
            signature=signature,
            resource=requested_resource,
        )

    def verify(self, url: Union[str, httpx.URL], now: Optional[int] = None) -> bool:
        """Check a presented share URL against this signer's key.

        The URL must carry this signer's uid, must not have expired at
        ``now`` (defaults to the current time), and its signature must
        match the one recomputed from its path.
        """
        parsed = httpx.URL(str(url))
        params = parsed.params
        uid = params.get("uid")
        expires = params.get("expires")
        signature = params.get("signature")
        if uid != self._uid or expires is None or signature is None:
            return False

        try:
            expires_at = int(expires)
        except ValueError:
            return False
        if now is None:
            now = system_clock()
        if expires_at < now:
            return False

        base_path = self._endpoint.path.rstrip("/")
        requested_resource = parsed.path
        if base_path and requested_resource.startswith(base_path + "/"):
            requested_resource = requested_resource[len(base_path):]

        expected = self.sign_string(self.create_string_to_sign(requested_resource, expires))
        return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))

    def __repr__(self) -> str:
        return f"PresignedUrlSigner(uid={self._uid!r}, endpoint={str(self._endpoint)!r})"
