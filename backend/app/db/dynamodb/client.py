from __future__ import annotations

from functools import lru_cache

import boto3
from botocore.config import Config

from ...settings import settings


def botocore_config() -> Config:
    # Short timeouts; transient faults are retried by botocore first and then
    # by ddb_call for the codes it knows are safe.
    return Config(
        retries={"max_attempts": 10, "mode": "adaptive"},
        connect_timeout=2,
        read_timeout=10,
    )


@lru_cache(maxsize=4)
def _resource(region: str, endpoint_url: str | None):
    return boto3.resource("dynamodb", region_name=region, endpoint_url=endpoint_url, config=botocore_config())


def dynamodb_resource():
    """Shared resource; DDB_ENDPOINT_URL points it at DynamoDB Local."""
    return _resource(settings.aws_region, settings.ddb_endpoint_url or None)


def table_resource(table_name: str):
    return dynamodb_resource().Table(table_name)
