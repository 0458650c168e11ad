"""S3 provider: builds boto3 S3 clients from resolved context properties.

The signature version is set to 's3v4' by default so the client can sign
presigned URLs for S3-compatible services.
"""

from typing import Mapping

import boto3
from botocore.client import BaseClient, Config

from cloudcontext.builders import (
    PROPERTY_CREDENTIAL,
    PROPERTY_ENDPOINT,
    PROPERTY_IDENTITY,
    ContextBuilder,
    PropertiesBuilder,
)
from cloudcontext.errors import AuthorizationError
from cloudcontext.registry import (
    register_capability,
    register_context_builder,
    register_properties_builder,
)

PROPERTY_REGION = "cloudcontext.s3.region"
PROPERTY_ADDRESSING_STYLE = "cloudcontext.s3.addressing-style"
PROPERTY_SIGNATURE_VERSION = "cloudcontext.s3.signature-version"

register_capability("s3.client", BaseClient)


@register_properties_builder("s3")
class S3PropertiesBuilder(PropertiesBuilder):
    """Properties builder with S3 client defaults."""

    def defaults(self) -> Mapping[str, str]:
        return {
            PROPERTY_REGION: "us-east-1",
            PROPERTY_ADDRESSING_STYLE: "path",
            PROPERTY_SIGNATURE_VERSION: "s3v4",
        }


def build_s3_client(properties: Mapping[str, str]):
    """Build a boto3 S3 client from context properties.

    Args:
        properties: Finalized properties containing endpoint, credentials,
                    region, and addressing style.

    Returns:
        A boto3 S3 client configured for the provider.
    """
    boto_config = Config(
        signature_version=properties.get(PROPERTY_SIGNATURE_VERSION, "s3v4"),
        s3={"addressing_style": properties.get(PROPERTY_ADDRESSING_STYLE, "path")},
    )

    return boto3.client(
        "s3",
        endpoint_url=properties.get(PROPERTY_ENDPOINT),
        aws_access_key_id=properties.get(PROPERTY_IDENTITY),
        aws_secret_access_key=properties.get(PROPERTY_CREDENTIAL),
        region_name=properties.get(PROPERTY_REGION),
        config=boto_config,
    )


@register_context_builder("s3")
class S3ContextBuilder(ContextBuilder):
    """Context builder whose context exposes a boto3 S3 client as ``api``.

    Raises:
        AuthorizationError: If the access key id or secret key is missing.
    """

    def __init__(self, sync_type, async_type, properties):
        if not properties.get(PROPERTY_IDENTITY) or not properties.get(PROPERTY_CREDENTIAL):
            raise AuthorizationError(
                "S3 requires both an access key id (identity) and a secret key (credential)"
            )
        super().__init__(sync_type, async_type, properties)

    def create_api(self):
        return build_s3_client(self.properties)
