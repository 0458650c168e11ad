"""Tests for the s3 provider builders."""

from types import MappingProxyType
from unittest.mock import MagicMock, patch

import pytest

from cloudcontext.builders import PROPERTY_CREDENTIAL, PROPERTY_ENDPOINT, PROPERTY_IDENTITY
from cloudcontext.errors import AuthorizationError
from cloudcontext.providers.s3 import (
    PROPERTY_ADDRESSING_STYLE,
    PROPERTY_REGION,
    PROPERTY_SIGNATURE_VERSION,
    S3ContextBuilder,
    S3PropertiesBuilder,
    build_s3_client,
)


@pytest.fixture
def properties() -> MappingProxyType:
    """Finalized properties for a Backblaze B2 endpoint."""
    return (
        S3PropertiesBuilder({PROPERTY_REGION: "us-west-000", PROPERTY_ADDRESSING_STYLE: "virtual"})
        .provider("s3")
        .credentials("test-access-key", "test-secret-key")
        .endpoint("https://s3.us-west-000.backblazeb2.com")
        .build()
    )


class TestS3PropertiesBuilder:
    """Tests for S3PropertiesBuilder defaults."""

    def test_defaults(self):
        """Region, addressing style and signature version have defaults."""
        props = S3PropertiesBuilder().build()

        assert props[PROPERTY_REGION] == "us-east-1"
        assert props[PROPERTY_ADDRESSING_STYLE] == "path"
        assert props[PROPERTY_SIGNATURE_VERSION] == "s3v4"

    def test_overrides_beat_defaults(self):
        """Constructor overrides replace the defaults."""
        props = S3PropertiesBuilder({PROPERTY_REGION: "auto"}).build()

        assert props[PROPERTY_REGION] == "auto"


class TestBuildS3Client:
    """Tests for build_s3_client function."""

    @patch("cloudcontext.providers.s3.boto3.client")
    def test_correct_endpoint_and_credentials(self, mock_boto_client: MagicMock, properties):
        """Verify endpoint, credentials, and region are passed to boto3."""
        build_s3_client(properties)

        mock_boto_client.assert_called_once()
        call_kwargs = mock_boto_client.call_args.kwargs

        assert call_kwargs["endpoint_url"] == "https://s3.us-west-000.backblazeb2.com"
        assert call_kwargs["aws_access_key_id"] == "test-access-key"
        assert call_kwargs["aws_secret_access_key"] == "test-secret-key"
        assert call_kwargs["region_name"] == "us-west-000"

    @patch("cloudcontext.providers.s3.boto3.client")
    def test_addressing_style(self, mock_boto_client: MagicMock, properties):
        """Verify the addressing style reaches the botocore config."""
        build_s3_client(properties)

        config = mock_boto_client.call_args.kwargs["config"]

        assert config.s3["addressing_style"] == "virtual"

    @patch("cloudcontext.providers.s3.boto3.client")
    def test_signature_version_is_s3v4(self, mock_boto_client: MagicMock, properties):
        """Verify signature version is s3v4 for presigned URLs."""
        build_s3_client(properties)

        config = mock_boto_client.call_args.kwargs["config"]

        assert config.signature_version == "s3v4"

    @patch("cloudcontext.providers.s3.boto3.client")
    def test_first_argument_is_s3(self, mock_boto_client: MagicMock, properties):
        """Verify first argument to boto3.client is 's3'."""
        build_s3_client(properties)

        assert mock_boto_client.call_args.args[0] == "s3"


class TestS3ContextBuilder:
    """Tests for S3ContextBuilder."""

    @pytest.mark.parametrize(
        "missing",
        [PROPERTY_IDENTITY, PROPERTY_CREDENTIAL],
    )
    def test_missing_credentials_rejected(self, properties, missing):
        """Both the access key id and the secret key are required."""
        props = {k: v for k, v in properties.items() if k != missing}

        with pytest.raises(AuthorizationError):
            S3ContextBuilder(None, None, props)

    @patch("cloudcontext.providers.s3.boto3.client")
    def test_context_api_is_client(self, mock_boto_client: MagicMock, properties):
        """build_context exposes the boto3 client as api."""
        client = MagicMock()
        mock_boto_client.return_value = client

        context = S3ContextBuilder(None, None, properties).build_context()

        assert context.api is client
        assert context.provider == "s3"
        assert context.properties[PROPERTY_ENDPOINT] == "https://s3.us-west-000.backblazeb2.com"
