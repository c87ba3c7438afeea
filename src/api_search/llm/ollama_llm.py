"""Ollama chat provider implementation for local models."""

import logging
from typing import Any, Dict, List, Optional

import requests

from api_search.core.interfaces import BaseLLM
from api_search.core.models import LLMResponse, Message
from api_search.core.exceptions import LLMError, MalformedResponseError

logger = logging.getLogger(__name__)


class OllamaLLM(BaseLLM):
    """Ollama chat provider for local models.

    Talks to ``/api/chat`` on a running Ollama server. JSON-mode requests
    set ``"format": "json"``.

    Example:
        llm = OllamaLLM(model="llama3.2")
        llm = OllamaLLM(model="mistral", base_url="http://192.168.1.100:11434")

    Note:
        Requires Ollama to be installed and running locally.
        Pull models with: ollama pull llama3.2
    """

    def __init__(
        self,
        model: str = "llama3.2",
        base_url: str = "http://localhost:11434",
        timeout: float = 120,
        verify: bool = True,
        **kwargs,
    ):
        """Initialize Ollama chat provider.

        Args:
            model: Model name (e.g., "llama3.2", "mistral").
            base_url: Ollama server URL.
            timeout: Default request timeout in seconds.
            verify: Check that the server is reachable on startup.
            **kwargs: Extra model options sent with every request.
        """
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._options = kwargs

        if verify:
            self._verify_connection()
        logger.info(f"Initialized Ollama LLM with model: {model} at {base_url}")

    def _verify_connection(self) -> None:
        try:
            response = requests.get(f"{self._base_url}/api/tags", timeout=5)
            response.raise_for_status()
        except requests.exceptions.ConnectionError as e:
            raise LLMError(
                f"Cannot connect to Ollama at {self._base_url}. "
                "Is Ollama running? Start with: ollama serve"
            ) from e
        except requests.exceptions.RequestException as e:
            raise LLMError(f"Ollama at {self._base_url} is not healthy: {e}") from e

    @property
    def name(self) -> str:
        return "ollama"

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
        """Run a non-streaming chat request.

        Raises:
            LLMError: If the HTTP call fails.
            MalformedResponseError: If the reply carries no message.
        """
        options: Dict[str, Any] = {"temperature": temperature, **self._options, **kwargs}
        if max_tokens is not None:
            options["num_predict"] = max_tokens

        payload: Dict[str, Any] = {
            "model": self._model,
            "messages": [m.to_dict() for m in messages],
            "stream": False,
            "options": options,
        }
        if json_mode:
            payload["format"] = "json"

        try:
            response = requests.post(
                f"{self._base_url}/api/chat",
                json=payload,
                timeout=timeout if timeout is not None else self._timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Ollama API error: {e}")
            raise LLMError(f"Ollama API call failed: {e}") from e
        except ValueError as e:
            raise MalformedResponseError(f"Ollama returned non-JSON body: {e}") from e

        message = data.get("message") or {}
        if "content" not in message:
            raise MalformedResponseError("Ollama reply has no message content")

        usage = {}
        if "prompt_eval_count" in data:
            usage["prompt_tokens"] = data["prompt_eval_count"]
        if "eval_count" in data:
            usage["completion_tokens"] = data["eval_count"]
        if usage:
            usage["total_tokens"] = usage.get("prompt_tokens", 0) + usage.get("completion_tokens", 0)

        return LLMResponse(
            content=message["content"],
            model=data.get("model", self._model),
            usage=usage,
            finish_reason="stop" if data.get("done", False) else "length",
        )
