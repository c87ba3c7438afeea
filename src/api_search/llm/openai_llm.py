"""OpenAI chat provider implementation."""

import logging
from typing import Any, Dict, List, Optional

from openai import OpenAI, OpenAIError

from api_search.core.interfaces import BaseLLM
from api_search.core.models import LLMResponse, Message
from api_search.core.exceptions import LLMError, MalformedResponseError

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 0
DEFAULT_OPENAI_MODEL = "gpt-4o-2024-08-06"


class OpenAILLM(BaseLLM):
    """OpenAI chat provider.

    JSON-mode requests use ``response_format={"type": "json_object"}``.

    Example:
        llm = OpenAILLM(api_key="sk-...")
        reply = llm.chat([Message(MessageRole.USER, "Hello")])
        print(reply.content)
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_OPENAI_MODEL,
        **kwargs,
    ):
        """Initialize OpenAI chat provider.

        Args:
            api_key: OpenAI API key.
            model: Model identifier (default: gpt-4o-2024-08-06).
            **kwargs: Additional client options. ``max_retries`` defaults to 0.
        """
        if not api_key:
            raise LLMError("OpenAI API key is required")

        # Failures surface to the caller; the SDK retries only when asked.
        kwargs.setdefault("max_retries", DEFAULT_MAX_RETRIES)
        self._client = OpenAI(api_key=api_key, **kwargs)
        self._model = model
        logger.info(f"Initialized OpenAI LLM with model: {model}")

    @property
    def name(self) -> str:
        return "openai"

    @property
    def model(self) -> str:
        return self._model

    def chat(
        self,
        messages: List[Message],
        temperature: float = 0.0,
        max_tokens: Optional[int] = None,
        json_mode: bool = False,
        timeout: Optional[float] = None,
        **kwargs,
    ) -> LLMResponse:
        """Run a chat completion.

        Raises:
            LLMError: If the API call fails.
            MalformedResponseError: If the reply has no content.
        """
        params: Dict[str, Any] = {
            "model": self._model,
            "messages": [m.to_dict() for m in messages],
            "temperature": temperature,
        }
        if max_tokens is not None:
            params["max_tokens"] = max_tokens
        if json_mode:
            params["response_format"] = {"type": "json_object"}
        if timeout is not None:
            params["timeout"] = timeout
        params.update(kwargs)

        try:
            response = self._client.chat.completions.create(**params)
        except OpenAIError as e:
            logger.error(f"OpenAI API error: {e}")
            raise LLMError(f"OpenAI API call failed: {e}") from e

        if not response.choices or response.choices[0].message.content is None:
            raise MalformedResponseError("OpenAI returned an empty reply")

        choice = response.choices[0]
        usage = {
            "prompt_tokens": response.usage.prompt_tokens,
            "completion_tokens": response.usage.completion_tokens,
            "total_tokens": response.usage.total_tokens,
        } if response.usage else {}

        return LLMResponse(
            content=choice.message.content,
            model=response.model,
            usage=usage,
            finish_reason=choice.finish_reason or "stop",
        )
