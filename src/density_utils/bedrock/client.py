"""Completion service backed by Anthropic models on AWS Bedrock."""

import json
import logging
from typing import List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import TransportError
from ..ingredients.models import (
    Completion,
    CompletionParams,
    ConversationTurn,
    Usage,
)
from .retry import retry_on_throttling

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "bedrock-2023-05-31"
CACHE_CONTROL_EPHEMERAL = {"type": "ephemeral"}


def turn_to_message(turn: ConversationTurn) -> dict:
    """Convert a conversation turn to an Anthropic messages entry."""
    block = {"type": "text", "text": turn.text}
    if turn.cache_breakpoint:
        block["cache_control"] = dict(CACHE_CONTROL_EPHEMERAL)
    return {"role": turn.role, "content": [block]}


def build_request_body(turns: List[ConversationTurn], params: CompletionParams) -> str:
    return json.dumps(
        {
            "anthropic_version": ANTHROPIC_VERSION,
            "messages": [turn_to_message(turn) for turn in turns],
            "max_tokens": params.max_tokens,
            "temperature": params.temperature,
        }
    )


def parse_usage(usage: Optional[dict]) -> Usage:
    usage = usage or {}
    return Usage(
        input_tokens=usage.get("input_tokens") or 0,
        output_tokens=usage.get("output_tokens") or 0,
        cache_creation_tokens=usage.get("cache_creation_input_tokens") or 0,
        cache_read_tokens=usage.get("cache_read_input_tokens") or 0,
    )


def parse_response_body(response_body: dict) -> Completion:
    """Pull the reply text and token usage out of a messages response."""
    text = "".join(
        block.get("text") or ""
        for block in response_body.get("content") or []
        if block.get("type", "text") == "text"
    )
    return Completion(text=text, usage=parse_usage(response_body.get("usage")))


class BedrockCompletionService:
    """Send conversations to an Anthropic model through Bedrock.

    Attributes:
        model_id (str): Bedrock model id or inference profile ARN.
        bedrock_client: boto3 ``bedrock-runtime`` client.
    """

    def __init__(
        self,
        model_id: str,
        region_name: str = "eu-west-1",
        client=None,
        max_retries: int = 3,
        initial_delay: float = 1.0,
    ):
        """Initialize the service.

        Args:
            model_id (str): Bedrock model id or inference profile ARN.
            region_name (str): AWS region for the client. Defaults to "eu-west-1".
            client: Pre-built ``bedrock-runtime`` client. When None, one is
                created from the default credential chain.
            max_retries (int): Attempts per request when Bedrock throttles.
            initial_delay (float): First backoff delay in seconds.
        """
        self.model_id = model_id
        self.bedrock_client = client or boto3.client(
            "bedrock-runtime", region_name=region_name
        )
        self._invoke_model = retry_on_throttling(max_retries, initial_delay)(
            self._invoke_model_once
        )

    def _invoke_model_once(self, body: str) -> dict:
        response = self.bedrock_client.invoke_model(
            body=body,
            modelId=self.model_id,
            accept="application/json",
            contentType="application/json",
        )
        return json.loads(response.get("body").read())

    def invoke(
        self, turns: List[ConversationTurn], params: CompletionParams
    ) -> Completion:
        """Send ``turns`` to the model and return its reply.

        Raises:
            TransportError: If Bedrock fails or returns an unreadable body.
        """
        body = build_request_body(turns, params)
        try:
            completion = parse_response_body(self._invoke_model(body))
        except (ClientError, BotoCoreError) as e:
            raise TransportError(f"Bedrock request to {self.model_id} failed: {e}") from e
        except (ValueError, AttributeError) as e:
            raise TransportError(f"Unreadable response from {self.model_id}: {e}") from e

        logger.debug(
            f"{self.model_id}: input={completion.usage.input_tokens} "
            f"output={completion.usage.output_tokens} "
            f"cache_write={completion.usage.cache_creation_tokens} "
            f"cache_read={completion.usage.cache_read_tokens}"
        )
        return completion
