"""General capability model backed by any chat provider."""

import logging
from typing import List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel

from api_search.capabilities import prompts
from api_search.core.datapoints import (
    BinaryClassifyDatapoint,
    ClassifyDatapoint,
    GenerateDatapoint,
    ParseForceDatapoint,
    ScoreDatapoint,
)
from api_search.core.interfaces import BaseLLM, GeneralModel
from api_search.core.models import Message

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

BINARY_OPTIONS = ["true", "false"]
CLASSIFY_MAX_TOKENS = 128


class ChatGeneralModel(GeneralModel):
    """Serves every text capability through a single ``BaseLLM``.

    Classification, scoring and parsing ask for JSON replies and decode them
    strictly; a reply that does not decode raises ``MalformedResponseError``.

    Example:
        model = ChatGeneralModel(OpenAILLM(api_key="sk-..."))
        index = model.classify("Pick the animal", "woof", ["cat", "dog"])
    """

    def __init__(self, llm: BaseLLM, temperature: float = 0.0):
        self.llm = llm
        self.temperature = temperature

    @property
    def name(self) -> str:
        return f"{self.llm.name}:{self.llm.model}"

    def _complete(
        self,
        messages: List[Message],
        timeout: Optional[float],
        json_mode: bool = False,
        max_tokens: Optional[int] = None,
    ) -> str:
        response = self.llm.chat(
            messages,
            temperature=self.temperature,
            max_tokens=max_tokens,
            json_mode=json_mode,
            timeout=timeout,
        )
        logger.debug(f"{self.name} replied with {len(response.content)} chars")
        return response.content

    def classify(
        self,
        instruction: str,
        text: str,
        options: List[str],
        examples: Optional[Sequence[ClassifyDatapoint]] = None,
        timeout: Optional[float] = None,
    ) -> int:
        messages, decode_map = prompts.build_classify_messages(instruction, text, options, examples)
        content = self._complete(messages, timeout, json_mode=True, max_tokens=CLASSIFY_MAX_TOKENS)
        return prompts.handle_classify_response(content, decode_map)

    def binary_classify(
        self,
        instruction: str,
        text: str,
        examples: Optional[Sequence[BinaryClassifyDatapoint]] = None,
        timeout: Optional[float] = None,
    ) -> bool:
        classify_examples = [
            ClassifyDatapoint(
                instruction=example.instruction,
                text=example.text,
                options=BINARY_OPTIONS,
                response=None if example.response is None else (0 if example.response else 1),
            )
            for example in examples or []
        ]
        return self.classify(instruction, text, BINARY_OPTIONS, classify_examples, timeout) == 0

    def score(
        self,
        instruction: str,
        text: str,
        min_value: int,
        max_value: int,
        examples: Optional[Sequence[ScoreDatapoint]] = None,
        timeout: Optional[float] = None,
    ) -> int:
        messages = prompts.build_score_messages(instruction, text, min_value, max_value, examples)
        return prompts.handle_score_response(self._complete(messages, timeout, json_mode=True))

    def generate(
        self,
        instruction: str,
        text: str,
        examples: Optional[Sequence[GenerateDatapoint]] = None,
        timeout: Optional[float] = None,
    ) -> str:
        messages = prompts.build_generate_messages(instruction, text, examples)
        return self._complete(messages, timeout)

    def parse_force(
        self,
        instruction: str,
        text: str,
        target: Type[T],
        examples: Optional[Sequence[ParseForceDatapoint]] = None,
        timeout: Optional[float] = None,
    ) -> T:
        messages = prompts.build_parse_force_messages(instruction, text, target, examples)
        return prompts.handle_parse_force_response(self._complete(messages, timeout, json_mode=True), target)
