"""Error taxonomy for provider-context resolution and URL signing.

Each class identifies the stage that failed:
- ConfigurationError: required input missing or unreadable
- ResolutionError: a named builder or capability is not registered
- InstantiationError: a resolved builder could not be constructed
- AuthorizationError: credentials rejected by a provider builder
- SigningError: key material or encoding failure while signing
"""

from typing import Optional


class CloudContextError(Exception):
    """Base class for all cloudcontext errors."""

    pass


class ConfigurationError(CloudContextError):
    """Raised when configuration is missing, malformed, or unreadable."""

    pass


class ResolutionError(CloudContextError):
    """Raised when a named type cannot be located for a provider slot."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        key: Optional[str] = None,
        name: Optional[str] = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.key = key
        self.name = name


class InstantiationError(CloudContextError):
    """Raised when a resolved builder type fails to construct."""

    pass


class AuthorizationError(CloudContextError):
    """Raised when credentials are rejected by a provider builder."""

    pass


class SigningError(CloudContextError):
    """Raised when a signature cannot be computed."""

    pass
