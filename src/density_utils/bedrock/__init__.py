"""AWS Bedrock completion service."""

from .client import (
    BedrockCompletionService,
    build_request_body,
    parse_response_body,
    turn_to_message,
)
from .retry import is_retryable, retry_on_throttling

__all__ = [
    "BedrockCompletionService",
    "build_request_body",
    "is_retryable",
    "parse_response_body",
    "retry_on_throttling",
    "turn_to_message",
]
