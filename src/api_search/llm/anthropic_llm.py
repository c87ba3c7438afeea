"""Anthropic chat provider implementation."""

import logging
import re
from typing import Any, Dict, List, Optional

from api_search.core.interfaces import BaseLLM
from api_search.core.models import LLMResponse, Message, MessageRole
from api_search.core.exceptions import LLMError, MalformedResponseError

logger = logging.getLogger(__name__)

DEFAULT_ANTHROPIC_MODEL = "claude-3-5-sonnet-20241022"
DEFAULT_MAX_TOKENS = 1024
DEFAULT_MAX_RETRIES = 0

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


class AnthropicLLM(BaseLLM):
    """Anthropic chat provider.

    System messages are sent through the ``system`` parameter. The messages
    API has no JSON mode, so JSON-mode replies are trimmed to the outermost
    JSON object before they are returned.

    Example:
        llm = AnthropicLLM(api_key="sk-ant-...")
        reply = llm.chat([Message(MessageRole.USER, "Hello")])

    Note:
        Requires the anthropic package: pip install anthropic
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_ANTHROPIC_MODEL,
        **kwargs,
    ):
        if not api_key:
            raise LLMError("Anthropic API key is required")

        try:
            import anthropic
        except ImportError as e:
            raise LLMError(
                "anthropic package not installed. Run: pip install anthropic"
            ) from e

        self._anthropic = anthropic
        kwargs.setdefault("max_retries", DEFAULT_MAX_RETRIES)
        self._client = anthropic.Anthropic(api_key=api_key, **kwargs)
        self._model = model
        logger.info(f"Initialized Anthropic LLM with model: {model}")

    @property
    def name(self) -> str:
        return "anthropic"

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
        """Run a messages API call.

        Raises:
            LLMError: If the API call fails.
            MalformedResponseError: If the reply has no text.
        """
        system = "\n\n".join(m.content for m in messages if m.role == MessageRole.SYSTEM)
        params: Dict[str, Any] = {
            "model": self._model,
            "max_tokens": max_tokens or DEFAULT_MAX_TOKENS,
            "messages": [m.to_dict() for m in messages if m.role != MessageRole.SYSTEM],
            "temperature": temperature,
        }
        if system:
            params["system"] = system
        if timeout is not None:
            params["timeout"] = timeout
        params.update(kwargs)

        try:
            response = self._client.messages.create(**params)
        except self._anthropic.APIError as e:
            logger.error(f"Anthropic API error: {e}")
            raise LLMError(f"Anthropic API call failed: {e}") from e

        if not response.content:
            raise MalformedResponseError("Anthropic returned an empty reply")

        content = response.content[0].text
        if json_mode:
            match = _JSON_OBJECT.search(content)
            if match:
                content = match.group()

        usage = {
            "prompt_tokens": response.usage.input_tokens,
            "completion_tokens": response.usage.output_tokens,
            "total_tokens": response.usage.input_tokens + response.usage.output_tokens,
        }

        return LLMResponse(
            content=content,
            model=response.model,
            usage=usage,
            finish_reason=response.stop_reason or "end_turn",
        )
