"""Bundled providers.

Importing this package registers each provider's builders and capability
types with the default builder registry.
"""

from cloudcontext.providers import atmos, s3

__all__ = ["atmos", "s3"]
