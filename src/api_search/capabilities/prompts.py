"""Chat transcripts for each capability, and decoders for the replies.

Each builder returns the full message list: an optional system prompt, one
user/assistant pair per labeled example, then the live request as the final
user message. Examples are rendered with the live instruction.
"""

import json
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from api_search.capabilities.labels import index_to_label
from api_search.core.datapoints import (
    ClassifyDatapoint,
    GenerateDatapoint,
    ParseForceDatapoint,
    ScoreDatapoint,
)
from api_search.core.exceptions import MalformedResponseError
from api_search.core.models import Message, MessageRole

T = TypeVar("T", bound=BaseModel)

CLASSIFY_SYSTEM_PROMPT = (
    "Classify the following text with the provided instruction and choices. "
    "To classify, provide the key of the choice:\n"
    '{"classification": string}\n\n'
    "For example, if the correct choice is 'Z. description of choice Z', "
    "then provide 'Z' as the classification as valid JSON:\n"
    '{"classification": "Z"}'
)

SCORE_SYSTEM_PROMPT = (
    "Score the following text with the provided instruction and range "
    "as an integer value in valid JSON:\n"
    '{"score": number}'
)

PARSE_FORCE_SYSTEM_PROMPT = "Parse the following text with the provided JSON schema."


def _user(content: str) -> Message:
    return Message(role=MessageRole.USER, content=content)


def _assistant(content: str) -> Message:
    return Message(role=MessageRole.ASSISTANT, content=content)


def _system(content: str) -> Message:
    return Message(role=MessageRole.SYSTEM, content=content)


def display_choices(options: Sequence[str]) -> Tuple[str, Dict[str, int]]:
    """Render options as ``A. first\\nB. second`` and return the label map."""
    lines = []
    decode_map: Dict[str, int] = {}
    for i, option in enumerate(options):
        label = index_to_label(i)
        lines.append(f"{label}. {option}")
        decode_map[label] = i
    return "\n".join(lines), decode_map


# Classify

def _classify_sample(
    instruction: str,
    text: str,
    options: Sequence[str],
    response: Optional[int] = None,
) -> Tuple[List[Message], Dict[str, int]]:
    choices, decode_map = display_choices(options)
    messages = [_user(f"Instruction:\n{instruction}\n\nText:\n{text}\n\nChoices:\n{choices}")]
    if response is not None:
        if not 0 <= response < len(options):
            raise ValueError(f"Example response {response} not found in choices")
        label = index_to_label(response)
        messages.append(_assistant(json.dumps({"classification": label})))
    return messages, decode_map


def build_classify_messages(
    instruction: str,
    text: str,
    options: Sequence[str],
    examples: Optional[Sequence[ClassifyDatapoint]] = None,
) -> Tuple[List[Message], Dict[str, int]]:
    """Build a classification transcript.

    Returns:
        The messages and the label -> option index map for the live request.

    Raises:
        ValueError: If ``options`` is empty or an example's response is out of range.
    """
    if not options:
        raise ValueError("Classification needs at least one option")
    messages = [_system(CLASSIFY_SYSTEM_PROMPT)]
    for example in examples or []:
        sample, _ = _classify_sample(instruction, example.text, example.options, example.response)
        messages.extend(sample)
    sample, decode_map = _classify_sample(instruction, text, options)
    messages.extend(sample)
    return messages, decode_map


def _load_json_object(content: str, what: str) -> Dict[str, Any]:
    try:
        data = json.loads(content)
    except (TypeError, ValueError) as e:
        raise MalformedResponseError(f"{what} response is not valid JSON: {content!r}") from e
    if not isinstance(data, dict):
        raise MalformedResponseError(f"{what} response is not a JSON object: {content!r}")
    return data


def handle_classify_response(content: str, decode_map: Dict[str, int]) -> int:
    """Decode ``{"classification": "<label>"}`` into an option index.

    Raises:
        MalformedResponseError: On invalid JSON or an unknown label.
    """
    data = _load_json_object(content, "Classification")
    label = data.get("classification")
    if not isinstance(label, str) or label.strip() not in decode_map:
        raise MalformedResponseError(f"Classification {label!r} not found in choices")
    return decode_map[label.strip()]


# Score

def _score_sample(
    instruction: str,
    text: str,
    min_value: int,
    max_value: int,
    response: Optional[int] = None,
) -> List[Message]:
    messages = [_user(f"Instruction:\n{instruction}\n\nText:\n{text}\n\nRange:\n[{min_value}, {max_value}]")]
    if response is not None:
        messages.append(_assistant(f'{{"score": {response}}}'))
    return messages


def build_score_messages(
    instruction: str,
    text: str,
    min_value: int,
    max_value: int,
    examples: Optional[Sequence[ScoreDatapoint]] = None,
) -> List[Message]:
    messages = [_system(SCORE_SYSTEM_PROMPT)]
    for example in examples or []:
        messages.extend(
            _score_sample(instruction, example.text, example.min_value, example.max_value, example.response)
        )
    messages.extend(_score_sample(instruction, text, min_value, max_value))
    return messages


def handle_score_response(content: str) -> int:
    """Decode ``{"score": <int>}``. The value is not clamped to the range.

    Raises:
        MalformedResponseError: On invalid JSON or a missing/non-integer score.
    """
    data = _load_json_object(content, "Score")
    score = data.get("score")
    if isinstance(score, bool) or not isinstance(score, int):
        raise MalformedResponseError(f"Score response has no integer score: {content!r}")
    return score


# Parse force

def _schema_text(target: Type[BaseModel]) -> str:
    return json.dumps(target.model_json_schema(), indent=2)


def _response_json(response: Any) -> str:
    if isinstance(response, BaseModel):
        return response.model_dump_json()
    return json.dumps(response)


def build_parse_force_messages(
    instruction: str,
    text: str,
    target: Type[BaseModel],
    examples: Optional[Sequence[ParseForceDatapoint]] = None,
) -> List[Message]:
    schema = _schema_text(target)

    def sample(sample_text: str, response: Any = None) -> List[Message]:
        messages = [_user(f"Instruction:\n{instruction}\n\nText:\n{sample_text}\n\nJSON Schema:\n{schema}")]
        if response is not None:
            messages.append(_assistant(_response_json(response)))
        return messages

    messages = [_system(PARSE_FORCE_SYSTEM_PROMPT)]
    for example in examples or []:
        messages.extend(sample(example.text, example.response))
    messages.extend(sample(text))
    return messages


def handle_parse_force_response(content: str, target: Type[T]) -> T:
    """Validate the reply against ``target``.

    Raises:
        MalformedResponseError: If the reply is not JSON matching the schema.
    """
    try:
        return target.model_validate_json(content)
    except ValidationError as e:
        raise MalformedResponseError(
            f"Response does not match {target.__name__} schema: {e}"
        ) from e


# Generate

def build_generate_messages(
    instruction: str,
    text: str,
    examples: Optional[Sequence[GenerateDatapoint]] = None,
) -> List[Message]:
    messages: List[Message] = []
    for example in examples or []:
        messages.append(_user(f"Instruction:\n{instruction}\n\nText:\n{example.text}"))
        if example.response is not None:
            messages.append(_assistant(example.response))
    messages.append(_user(f"Instruction:\n{instruction}\n\nText:\n{text}"))
    return messages
