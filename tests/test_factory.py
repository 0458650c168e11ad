"""Tests for ContextFactory resolution and end-to-end context builds."""

from unittest.mock import MagicMock, patch

import pytest

from cloudcontext.builders import (
    PROPERTY_CREDENTIAL,
    PROPERTY_ENDPOINT,
    PROPERTY_IDENTITY,
    ContextBuilder,
    PropertiesBuilder,
)
from cloudcontext.config import LayeredConfig, load_defaults
from cloudcontext.errors import AuthorizationError, ConfigurationError, ResolutionError
from cloudcontext.factory import (
    ContextFactory,
    create_context_builder_from_spec,
    create_context_from_spec,
)
from cloudcontext.models import ContextSpec
from cloudcontext.providers.atmos import AtmosShareUrls
from cloudcontext.providers.s3 import S3ContextBuilder, S3PropertiesBuilder


def make_factory(*layers) -> ContextFactory:
    """Factory over the bundled defaults plus the given layers."""
    return ContextFactory(config=LayeredConfig(load_defaults(), *layers))


class TestCreateContextSpec:
    """Tests for create_context_spec."""

    def test_configured_identity_wins(self):
        """Configuration beats the identity argument."""
        factory = make_factory({"p.identity": "X"})

        spec = factory.create_context_spec("p", identity="Y")

        assert spec.identity == "X"

    def test_argument_identity_used_when_unconfigured(self):
        """The identity argument applies when configuration has none."""
        factory = make_factory()

        spec = factory.create_context_spec("p", identity="Y", credential="Z")

        assert spec.identity == "Y"
        assert spec.credential == "Z"

    def test_missing_settings_are_absent(self):
        """A provider with no settings resolves without error."""
        spec = make_factory().create_context_spec("stub")

        assert spec.endpoint is None
        assert spec.api_version is None
        assert spec.identity is None
        assert spec.credential is None
        assert spec.sync_type is None
        assert spec.async_type is None
        assert spec.properties_builder_type is PropertiesBuilder
        assert spec.context_builder_type is ContextBuilder

    def test_s3_scenario(self):
        """Configured s3 settings flow into the spec."""
        factory = make_factory({
            "s3.identity": "AKIAEXAMPLE",
            "s3.credential": "c2VjcmV0",
            "s3.endpoint": "https://s3.example.com",
        })

        spec = factory.create_context_spec("s3")

        assert spec.identity == "AKIAEXAMPLE"
        assert spec.credential == "c2VjcmV0"
        assert spec.endpoint == "https://s3.example.com"
        assert spec.properties_builder_type is S3PropertiesBuilder
        assert spec.context_builder_type is S3ContextBuilder

    def test_overrides_apply_to_one_call(self):
        """Per-call overrides do not leak into the factory's config."""
        factory = make_factory()

        spec = factory.create_context_spec(
            "s3", overrides={"s3.endpoint": "https://minio.local:9000"}
        )

        assert spec.endpoint == "https://minio.local:9000"
        assert factory.create_context_spec("s3").endpoint == "https://s3.amazonaws.com"

    def test_unresolvable_context_builder(self):
        """An unknown context builder name fails with ResolutionError."""
        factory = make_factory({"s3.contextbuilder": "org.example.NoSuchBuilder"})

        with pytest.raises(ResolutionError) as exc_info:
            factory.create_context_spec("s3")

        assert exc_info.value.provider == "s3"
        assert "s3" in str(exc_info.value)

    @pytest.mark.parametrize("provider", [None, ""])
    def test_missing_provider(self, provider):
        """A missing provider name fails with ConfigurationError."""
        with pytest.raises(ConfigurationError):
            make_factory().create_context_spec(provider)

    def test_default_config_built_when_not_given(self, monkeypatch):
        """Without a config the factory reads defaults and the environment."""
        monkeypatch.setenv("CLOUDCONTEXT_S3_APIVERSION", "from-env")

        spec = ContextFactory().create_context_spec("s3")

        assert spec.api_version == "from-env"


class TestCreateContextBuilder:
    """Tests for create_context_builder."""

    def test_credentials_from_override_properties(self):
        """Identity and credential fall back to the property overrides."""
        factory = make_factory()

        builder = factory.create_context_builder(
            "p",
            overrides={PROPERTY_IDENTITY: "id", PROPERTY_CREDENTIAL: "secret"},
        )

        assert builder.properties[PROPERTY_IDENTITY] == "id"
        assert builder.properties[PROPERTY_CREDENTIAL] == "secret"

    def test_s3_builder_requires_credentials(self):
        """The s3 builder rejects missing credentials with AuthorizationError."""
        with pytest.raises(AuthorizationError):
            make_factory().create_context_builder("s3")

    def test_s3_builder_properties(self):
        """s3 defaults and resolved settings land in the properties."""
        builder = make_factory().create_context_builder("s3", "AKIA", "secret")

        assert isinstance(builder, S3ContextBuilder)
        assert builder.properties[PROPERTY_ENDPOINT] == "https://s3.amazonaws.com"
        assert builder.properties["cloudcontext.s3.region"] == "us-east-1"


class TestCreateContext:
    """Tests for create_context."""

    @patch("cloudcontext.providers.s3.boto3.client")
    def test_s3_context_api_is_boto_client(self, mock_boto_client: MagicMock):
        """The s3 context exposes the boto3 client."""
        client = MagicMock()
        mock_boto_client.return_value = client

        context = make_factory().create_context("s3", "AKIA", "secret")

        assert context.provider == "s3"
        assert context.api is client

    def test_atmos_context_signs(self):
        """The atmos context exposes share URLs."""
        context = make_factory().create_context("atmos", "uid-1", "c2VjcmV0")

        assert isinstance(context.api, AtmosShareUrls)
        url = context.api.share_url("bucket/file.txt")
        assert url.startswith("https://accesspoint.atmosonline.com/rest/namespace/bucket/file.txt?")
        assert "uid=uid-1" in url


class TestSpecHelpers:
    """Tests for the module-level spec helpers."""

    def test_builder_from_spec(self):
        builder = create_context_builder_from_spec(ContextSpec(provider="p"), overrides={"x": "1"})

        assert builder.properties["x"] == "1"

    def test_context_from_spec(self):
        context = create_context_from_spec(ContextSpec(provider="p"))

        assert context.provider == "p"
