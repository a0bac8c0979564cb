"""
Table inference using the OpenAI chat completions API.

The pipeline depends on the ``StructureInferenceClient`` protocol only, so
tests can substitute a deterministic stub.
"""

import logging
from typing import Protocol, runtime_checkable

from ...exceptions import ServiceError, ServiceUnavailable
from ...models import InferenceRequest, InferenceResponse
from .prompts import build_user_prompt

logger = logging.getLogger(__name__)


@runtime_checkable
class StructureInferenceClient(Protocol):
    """Capability interface for the external inference service."""

    @property
    def is_configured(self) -> bool: ...

    async def infer(self, request: InferenceRequest) -> InferenceResponse: ...


class OpenAIInferenceClient:
    """
    Inference client backed by ``openai.AsyncOpenAI``.

    Every call has an explicit timeout and is attempted once.
    """

    def __init__(
        self,
        api_key: str | None,
        model: str = "gpt-4.1",
        timeout: float = 120.0,
        max_tokens: int = 4096,
    ):
        """
        Initialize the inference client.

        Args:
            api_key: OpenAI API key. Inference is unavailable without it.
            model: OpenAI model to use.
            timeout: Seconds before a call is abandoned.
            max_tokens: Upper bound on the reply length.
        """
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.max_tokens = max_tokens
        self._client = None

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @property
    def client(self):
        """Lazy-load the OpenAI client."""
        if self._client is None:
            if not self.api_key:
                raise ServiceUnavailable(
                    "OpenAI API key not provided. Set OPENAI_API_KEY environment variable."
                )
            from openai import AsyncOpenAI

            self._client = AsyncOpenAI(
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=0,
            )
        return self._client

    async def infer(self, request: InferenceRequest) -> InferenceResponse:
        """
        Ask the model to turn the document text into a table.

        Args:
            request: Instruction template and bounded text excerpt.

        Returns:
            The raw reply text. It is untrusted and may contain prose.

        Raises:
            ServiceUnavailable: If no API key is configured.
            ServiceError: If the call fails or times out.
        """
        from openai import OpenAIError

        client = self.client

        logger.info(
            "Requesting table inference for %s from %s (%d chars%s)",
            request.source_filename or "<unnamed>",
            self.model,
            len(request.text),
            ", truncated" if request.truncated else "",
        )

        try:
            response = await client.chat.completions.create(
                model=self.model,
                max_tokens=self.max_tokens,
                response_format={"type": "json_object"},
                messages=[
                    {"role": "system", "content": request.instructions},
                    {"role": "user", "content": build_user_prompt(request.text)},
                ],
            )
        except OpenAIError as e:
            logger.error("Inference call failed: %s", e)
            raise ServiceError(f"Inference service error: {e}") from e
        except Exception as e:
            logger.exception("Unexpected inference failure")
            raise ServiceError(f"Inference call failed: {e}") from e

        if not response.choices:
            raise ServiceError("Inference service returned no choices")

        content = response.choices[0].message.content or ""
        logger.info("Received %d characters from inference service", len(content))
        return InferenceResponse(text=content, model=response.model)
