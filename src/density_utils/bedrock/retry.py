"""Retry decorators for handling Bedrock throttling."""

import logging
import time
from functools import wraps
from typing import Any, Callable

from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

RETRYABLE_ERROR_CODES = {
    "ThrottlingException",
    "ServiceUnavailableException",
    "ModelNotReadyException",
    "TooManyRequestsException",
}


def is_retryable(error: Exception) -> bool:
    """Check whether a botocore error is worth retrying."""
    if not isinstance(error, ClientError):
        return False
    return error.response.get("Error", {}).get("Code") in RETRYABLE_ERROR_CODES


def retry_on_throttling(
    max_retries: int = 3, initial_delay: float = 1.0
) -> Callable:
    """Decorator that retries a Bedrock call on throttling with exponential backoff.

    Any other error is raised straight away.

    Args:
        max_retries: Maximum number of attempts
        initial_delay: Initial delay between attempts in seconds

    Returns:
        Decorated function that retries on throttling errors

    Example:
        @retry_on_throttling(max_retries=3, initial_delay=1.0)
        def invoke(client, body):
            return client.invoke_model(modelId="...", body=body)
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            delay = initial_delay

            for attempt in range(max_retries):
                try:
                    return func(*args, **kwargs)
                except ClientError as e:
                    if not is_retryable(e):
                        raise
                    if attempt < max_retries - 1:
                        logger.warning(
                            f"Throttled on attempt {attempt + 1}/{max_retries}: {e}. "
                            f"Retrying in {delay}s..."
                        )
                        time.sleep(delay)
                        delay *= 2  # Exponential backoff
                    else:
                        logger.error(f"Failed after {max_retries} attempts: {e}")
                        raise
            return None

        return wrapper

    return decorator
