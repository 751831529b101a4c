"""SSM Parameter Store access for Stripe credentials."""

import logging
from functools import lru_cache

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)


class SSMServiceError(Exception):
    """Raised when an SSM parameter cannot be retrieved."""


class SSMService:
    """Reads SecureString parameters, caching values for the process lifetime.

    Usage:
        ssm = get_ssm_service()
        secret = ssm.get_parameter("/restaurant/dev/stripe/webhook_secret")
    """

    def __init__(self) -> None:
        self._client = boto3.client("ssm")
        self._cache: dict[str, str] = {}

    def get_parameter(self, name: str, *, use_cache: bool = True) -> str:
        """Retrieve a decrypted parameter value.

        Args:
            name: Full parameter path
            use_cache: Return a previously fetched value if present

        Returns:
            The decrypted parameter value.

        Raises:
            SSMServiceError: If the parameter is missing or access is denied.
        """
        if use_cache and name in self._cache:
            return self._cache[name]

        try:
            logger.info("Fetching SSM parameter: %s", name)
            response = self._client.get_parameter(Name=name, WithDecryption=True)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code == "ParameterNotFound":
                raise SSMServiceError(f"SSM parameter not found: {name}") from e
            if error_code == "AccessDeniedException":
                raise SSMServiceError(
                    f"Access denied to SSM parameter: {name}. "
                    "Check IAM permissions for ssm:GetParameter."
                ) from e
            raise SSMServiceError(f"Failed to retrieve SSM parameter {name}: {e}") from e

        value: str = response["Parameter"]["Value"]
        self._cache[name] = value
        return value

    def clear_cache(self) -> None:
        self._cache.clear()


@lru_cache(maxsize=1)
def get_ssm_service() -> SSMService:
    """Get the shared SSMService instance."""
    return SSMService()
