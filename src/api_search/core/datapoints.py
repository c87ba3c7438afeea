"""Datapoints describing one request to a capability model.

A datapoint carries the live request plus prior labeled examples used to
steer the model. Examples are never built from the live request itself.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Type

from pydantic import BaseModel


@dataclass
class BinaryClassifyDatapoint:
    instruction: str
    text: str
    examples: List["BinaryClassifyDatapoint"] = field(default_factory=list)
    response: Optional[bool] = None


@dataclass
class ClassifyDatapoint:
    instruction: str
    text: str
    options: List[str]
    examples: List["ClassifyDatapoint"] = field(default_factory=list)
    response: Optional[int] = None


@dataclass
class ScoreDatapoint:
    instruction: str
    text: str
    min_value: int
    max_value: int
    examples: List["ScoreDatapoint"] = field(default_factory=list)
    response: Optional[int] = None


@dataclass
class GenerateDatapoint:
    instruction: str
    text: str
    examples: List["GenerateDatapoint"] = field(default_factory=list)
    response: Optional[str] = None


@dataclass
class ParseForceDatapoint:
    """Parse request; ``target`` is the pydantic model the answer must fit.

    ``response`` may be an instance of ``target`` or a plain dict.
    """
    instruction: str
    text: str
    target: Type[BaseModel]
    examples: List["ParseForceDatapoint"] = field(default_factory=list)
    response: Optional[Any] = None


@dataclass
class EmbedDatapoint:
    text: str
