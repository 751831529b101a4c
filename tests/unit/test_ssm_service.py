"""Unit tests for SSMService against moto SSM."""

from typing import Any, Generator

import boto3
import pytest
from moto import mock_aws

from restaurant_shared.services.ssm_service import SSMService, SSMServiceError

PARAM = "/restaurant/test/stripe/webhook_secret"


@pytest.fixture
def ssm_client(aws_credentials: None) -> Generator[Any, None, None]:
    with mock_aws():
        client = boto3.client("ssm", region_name="eu-west-1")
        client.put_parameter(Name=PARAM, Value="whsec_abc", Type="SecureString")
        yield client


class TestSSMService:
    def test_reads_secure_string(self, ssm_client: Any) -> None:
        assert SSMService().get_parameter(PARAM) == "whsec_abc"

    def test_value_cached(self, ssm_client: Any) -> None:
        service = SSMService()
        service.get_parameter(PARAM)
        ssm_client.put_parameter(Name=PARAM, Value="whsec_new", Type="SecureString", Overwrite=True)

        assert service.get_parameter(PARAM) == "whsec_abc"
        assert service.get_parameter(PARAM, use_cache=False) == "whsec_new"

    def test_clear_cache(self, ssm_client: Any) -> None:
        service = SSMService()
        service.get_parameter(PARAM)
        ssm_client.put_parameter(Name=PARAM, Value="whsec_new", Type="SecureString", Overwrite=True)
        service.clear_cache()

        assert service.get_parameter(PARAM) == "whsec_new"

    def test_missing_parameter(self, ssm_client: Any) -> None:
        with pytest.raises(SSMServiceError, match="not found"):
            SSMService().get_parameter("/restaurant/test/stripe/nope")
