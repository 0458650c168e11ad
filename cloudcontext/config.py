"""Layered configuration for provider-context resolution.

Configuration is an ordered stack of read-only overlays, lowest priority
first:
1. Bundled defaults (defaults.json shipped with the package)
2. Process-wide overrides (environment variables)
3. Caller overrides (a JSON file, then an explicit mapping)

Keys follow the pattern ``<provider>.<setting>``, for example
``s3.endpoint``. A higher layer replaces the whole value of a key; values
are never merged.

Environment Variable Format:
    CLOUDCONTEXT_{PROVIDER}_{SETTING}=value

Example:
    CLOUDCONTEXT_S3_ENDPOINT=https://s3.us-west-000.backblazeb2.com
    CLOUDCONTEXT_S3_IDENTITY=your-access-key
"""

import json
import logging
import os
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, Mapping, Optional

from cloudcontext.errors import ConfigurationError

ENV_PREFIX = "CLOUDCONTEXT_"

DEFAULTS_RESOURCE = "defaults.json"

logger = logging.getLogger("cloudcontext.config")


class LayeredConfig:
    """Immutable stack of key/value overlays.

    Lookups walk the overlays from the highest priority down and return
    the first match. Adding a layer returns a new instance.
    """

    __slots__ = ("_layers",)

    def __init__(self, *layers: Mapping[str, str]):
        self._layers = tuple(MappingProxyType(dict(layer)) for layer in layers)

    @property
    def layers(self) -> tuple[Mapping[str, str], ...]:
        return self._layers

    def with_layer(self, layer: Optional[Mapping[str, str]]) -> "LayeredConfig":
        """Return a new config with ``layer`` on top."""
        if not layer:
            return self
        return LayeredConfig(*self._layers, layer)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        for layer in reversed(self._layers):
            if key in layer:
                return layer[key]
        return default

    def flatten(self) -> dict[str, str]:
        """Merge all layers into a single dict, later layers winning."""
        merged: dict[str, str] = {}
        for layer in self._layers:
            merged.update(layer)
        return merged

    def provider_settings(self, provider: str) -> dict[str, str]:
        """Return ``{setting: value}`` for every key under ``provider.``."""
        prefix = f"{provider}."
        return {
            key[len(prefix):]: value
            for key, value in self.flatten().items()
            if key.startswith(prefix)
        }

    def __contains__(self, key: object) -> bool:
        return any(key in layer for layer in self._layers)

    def __iter__(self) -> Iterator[str]:
        return iter(self.flatten())

    def __len__(self) -> int:
        return len(self.flatten())

    def __repr__(self) -> str:
        return f"LayeredConfig(layers={len(self._layers)}, keys={len(self)})"


def _validate_flat_mapping(data: object, source: str) -> dict[str, str]:
    if not isinstance(data, dict):
        raise _invalid(source, "top level must be a JSON object")

    settings: dict[str, str] = {}
    for key, value in data.items():
        if value is None:
            continue
        if not isinstance(value, str):
            raise _invalid(
                source, f"value for '{key}' must be a string, got {type(value).__name__}"
            )
        settings[key] = value
    return settings


def _invalid(source: str, reason: str) -> ConfigurationError:
    return ConfigurationError(f"Invalid configuration in {source}: {reason}")


def load_defaults(resource: str = DEFAULTS_RESOURCE) -> dict[str, str]:
    """Load the bundled default settings.

    Args:
        resource: File name of the resource inside the package directory.

    Returns:
        Flat mapping of ``<provider>.<setting>`` keys to values.

    Raises:
        ConfigurationError: If the resource is missing or malformed.
    """
    path = Path(__file__).parent / resource

    if not path.exists():
        raise ConfigurationError(f"Bundled defaults not found: {resource}")

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in bundled defaults: {e}") from e

    return _validate_flat_mapping(data, resource)


def load_from_json(config_path: str) -> dict[str, str]:
    """Load caller overrides from a flat JSON file.

    Args:
        config_path: Path to the JSON file.

    Returns:
        Flat mapping of settings. Keys whose value is null are dropped.

    Raises:
        ConfigurationError: If the file doesn't exist, contains invalid
                            JSON, or is not a flat object of strings.
    """
    path = Path(config_path)

    if not path.exists():
        raise ConfigurationError(f"Config file not found: {config_path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in config file: {e}") from e

    return _validate_flat_mapping(data, config_path)


def load_from_env(environ: Optional[Mapping[str, str]] = None) -> dict[str, str]:
    """Load process-wide overrides from CLOUDCONTEXT_* variables.

    The setting name is the text after the last underscore, so
    ``CLOUDCONTEXT_MY_CLOUD_ENDPOINT`` maps to ``my_cloud.endpoint``.

    Variables with no provider or setting part, such as
    ``CLOUDCONTEXT_DEBUG``, are skipped with a warning.

    Args:
        environ: Mapping to read instead of ``os.environ``.
    """
    if environ is None:
        environ = os.environ

    settings: dict[str, str] = {}
    for env_key, env_value in environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue

        provider, _, setting = env_key[len(ENV_PREFIX):].rpartition("_")
        if not provider or not setting:
            logger.warning(
                "Ignoring variable %s. Expected: %s<PROVIDER>_<SETTING>", env_key, ENV_PREFIX
            )
            continue

        settings[f"{provider.lower()}.{setting.lower()}"] = env_value

    return settings


def build_config(
    overrides: Optional[Mapping[str, str]] = None,
    config_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> LayeredConfig:
    """Assemble the standard configuration stack.

    Priority order (highest last):
    1. Bundled defaults
    2. Environment variables
    3. config_path file, if given
    4. overrides mapping, if given
    """
    config = LayeredConfig(load_defaults(), load_from_env(environ))
    if config_path is not None:
        config = config.with_layer(load_from_json(config_path))
    return config.with_layer(overrides)


def resolve_settings(
    config: LayeredConfig,
    provider: Optional[str],
    identity: Optional[str] = None,
    credential: Optional[str] = None,
) -> tuple[Optional[str], Optional[str], Optional[str], Optional[str]]:
    """Resolve endpoint, api version, identity and credential for a provider.

    A ``<provider>.<setting>`` entry in the configuration always wins. The
    caller's identity and credential are only used when the configuration
    has no entry for them. Endpoint and api version have no fallback.

    Returns:
        Tuple of (endpoint, api_version, identity, credential); any of
        them may be None.

    Raises:
        ConfigurationError: If provider is missing or empty.
    """
    if not provider:
        raise ConfigurationError("provider name is required")

    endpoint = config.get(f"{provider}.endpoint")
    api_version = config.get(f"{provider}.apiversion")
    identity = config.get(f"{provider}.identity", identity)
    credential = config.get(f"{provider}.credential", credential)
    return endpoint, api_version, identity, credential
