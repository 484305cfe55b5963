"""Integration test fixtures and configuration."""

import os

import boto3
import pytest
from botocore.exceptions import ClientError, NoCredentialsError


@pytest.fixture
def aws_test_region() -> str:
    """AWS region for integration tests."""
    return os.getenv("AWS_TEST_REGION", "us-east-1")


@pytest.fixture
def skip_if_no_aws_credentials():
    """Skip test if AWS credentials are not available."""
    try:
        sts = boto3.client("sts")
        sts.get_caller_identity()
    except (NoCredentialsError, ClientError) as e:
        pytest.skip(f"AWS credentials not available: {e}")


@pytest.fixture
def skip_unless_writes_allowed():
    """Skip tests that create EC2 key pairs unless explicitly allowed."""
    if os.getenv("EKSBOOT_TEST_ALLOW_WRITES") != "1":
        pytest.skip("Key pair writes disabled. Set EKSBOOT_TEST_ALLOW_WRITES=1 to enable.")
