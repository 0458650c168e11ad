"""
Provider-context resolution and presigned share URLs.

Resolves which builders and settings apply to a named cloud provider from
layered configuration, assembles the provider's context, and signs
time-limited share URLs with HMAC-SHA1.
"""

__version__ = "1.0.0"

from cloudcontext.cli import main
from cloudcontext.config import LayeredConfig, build_config
from cloudcontext.factory import ContextFactory
from cloudcontext.models import ContextSpec, SignedUrl
from cloudcontext.signing import PresignedUrlSigner

__all__ = [
    "main",
    "__version__",
    "ContextFactory",
    "ContextSpec",
    "LayeredConfig",
    "PresignedUrlSigner",
    "SignedUrl",
    "build_config",
]
