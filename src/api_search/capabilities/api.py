"""Model facade: build the datapoint, route it, call the chosen model.

``ModelAPI`` is the only way the indexer, verifier and agent reach a model.
Each call may override the candidate pool, the router and the examples, and
honours the caller's ``CancelScope``: the scope is checked before and after
the call and its remaining time is passed down as the request timeout. A
model failure after the scope has expired surfaces as a cancellation.
"""

import logging
from typing import Any, Callable, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel

from api_search.core.cancellation import CancelScope
from api_search.core.datapoints import (
    BinaryClassifyDatapoint,
    ClassifyDatapoint,
    EmbedDatapoint,
    GenerateDatapoint,
    ParseForceDatapoint,
    ScoreDatapoint,
)
from api_search.core.exceptions import SearchCancelledError
from api_search.core.interfaces import (
    BaseEmbedding,
    BaseRequestRouter,
    BinaryClassifyModel,
    ClassifyModel,
    GeneralModel,
    GenerateModel,
    ParseForceModel,
    ScoreModel,
)
from api_search.core.models import Capability
from api_search.routers.first_model import FirstModelRouter

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)
R = TypeVar("R")


class ModelAPI:
    """Routes capability requests across pools of models.

    Example:
        api = ModelAPI.from_general_model(ChatGeneralModel(llm), OpenAIEmbedding(api_key))
        summary = api.generate("Summarize this", spec_text)
        vector = api.embed(summary)
    """

    def __init__(
        self,
        binary_classify_models: Optional[List[BinaryClassifyModel]] = None,
        classify_models: Optional[List[ClassifyModel]] = None,
        score_models: Optional[List[ScoreModel]] = None,
        generate_models: Optional[List[GenerateModel]] = None,
        parse_force_models: Optional[List[ParseForceModel]] = None,
        embedding_models: Optional[List[BaseEmbedding]] = None,
        router: Optional[BaseRequestRouter] = None,
    ):
        self.binary_classify_models = list(binary_classify_models or [])
        self.classify_models = list(classify_models or [])
        self.score_models = list(score_models or [])
        self.generate_models = list(generate_models or [])
        self.parse_force_models = list(parse_force_models or [])
        self.embedding_models = list(embedding_models or [])
        self.router = router or FirstModelRouter()

    @classmethod
    def from_general_model(
        cls,
        model: GeneralModel,
        embedding: Optional[BaseEmbedding] = None,
        router: Optional[BaseRequestRouter] = None,
    ) -> "ModelAPI":
        """Build an API whose every text pool is ``[model]``."""
        return cls(
            binary_classify_models=[model],
            classify_models=[model],
            score_models=[model],
            generate_models=[model],
            parse_force_models=[model],
            embedding_models=[embedding] if embedding is not None else [],
            router=router,
        )

    def _dispatch(
        self,
        capability: Capability,
        datapoint: Any,
        pool: Sequence[Any],
        models: Optional[Sequence[Any]],
        router: Optional[BaseRequestRouter],
        scope: Optional[CancelScope],
        call: Callable[[Any, Optional[float]], R],
    ) -> R:
        scope = scope or CancelScope()
        scope.raise_if_cancelled()
        candidates = list(models) if models else list(pool)
        model = (router or self.router).route(capability, datapoint, candidates)
        logger.debug(f"Routed {capability.value} to {getattr(model, 'name', type(model).__name__)}")
        try:
            result = call(model, scope.remaining())
        except SearchCancelledError:
            raise
        except Exception as e:
            # A provider timeout caused by our own deadline is a cancellation.
            if scope.cancelled:
                raise SearchCancelledError(f"Operation cancelled: {scope.reason}") from e
            raise
        scope.raise_if_cancelled()
        return result

    def binary_classify(
        self,
        instruction: str,
        text: str,
        examples: Optional[List[BinaryClassifyDatapoint]] = None,
        models: Optional[List[BinaryClassifyModel]] = None,
        router: Optional[BaseRequestRouter] = None,
        scope: Optional[CancelScope] = None,
    ) -> bool:
        examples = examples or []
        datapoint = BinaryClassifyDatapoint(instruction=instruction, text=text, examples=examples)
        return self._dispatch(
            Capability.BINARY_CLASSIFY, datapoint, self.binary_classify_models, models, router, scope,
            lambda model, timeout: model.binary_classify(instruction, text, examples, timeout=timeout),
        )

    def classify(
        self,
        instruction: str,
        text: str,
        options: List[str],
        examples: Optional[List[ClassifyDatapoint]] = None,
        models: Optional[List[ClassifyModel]] = None,
        router: Optional[BaseRequestRouter] = None,
        scope: Optional[CancelScope] = None,
    ) -> int:
        examples = examples or []
        datapoint = ClassifyDatapoint(instruction=instruction, text=text, options=options, examples=examples)
        return self._dispatch(
            Capability.CLASSIFY, datapoint, self.classify_models, models, router, scope,
            lambda model, timeout: model.classify(instruction, text, options, examples, timeout=timeout),
        )

    def score(
        self,
        instruction: str,
        text: str,
        min_value: int,
        max_value: int,
        examples: Optional[List[ScoreDatapoint]] = None,
        models: Optional[List[ScoreModel]] = None,
        router: Optional[BaseRequestRouter] = None,
        scope: Optional[CancelScope] = None,
    ) -> int:
        examples = examples or []
        datapoint = ScoreDatapoint(
            instruction=instruction,
            text=text,
            min_value=min_value,
            max_value=max_value,
            examples=examples,
        )
        return self._dispatch(
            Capability.SCORE, datapoint, self.score_models, models, router, scope,
            lambda model, timeout: model.score(instruction, text, min_value, max_value, examples, timeout=timeout),
        )

    def generate(
        self,
        instruction: str,
        text: str,
        examples: Optional[List[GenerateDatapoint]] = None,
        models: Optional[List[GenerateModel]] = None,
        router: Optional[BaseRequestRouter] = None,
        scope: Optional[CancelScope] = None,
    ) -> str:
        examples = examples or []
        datapoint = GenerateDatapoint(instruction=instruction, text=text, examples=examples)
        return self._dispatch(
            Capability.GENERATE, datapoint, self.generate_models, models, router, scope,
            lambda model, timeout: model.generate(instruction, text, examples, timeout=timeout),
        )

    def parse_force(
        self,
        instruction: str,
        text: str,
        target: Type[T],
        examples: Optional[List[ParseForceDatapoint]] = None,
        models: Optional[List[ParseForceModel]] = None,
        router: Optional[BaseRequestRouter] = None,
        scope: Optional[CancelScope] = None,
    ) -> T:
        examples = examples or []
        datapoint = ParseForceDatapoint(instruction=instruction, text=text, target=target, examples=examples)
        return self._dispatch(
            Capability.PARSE_FORCE, datapoint, self.parse_force_models, models, router, scope,
            lambda model, timeout: model.parse_force(instruction, text, target, examples, timeout=timeout),
        )

    def embed(
        self,
        text: str,
        models: Optional[List[BaseEmbedding]] = None,
        router: Optional[BaseRequestRouter] = None,
        scope: Optional[CancelScope] = None,
    ) -> List[float]:
        """Embed ``text`` and return the vector as a list of floats."""
        return self._dispatch(
            Capability.EMBED, EmbedDatapoint(text=text), self.embedding_models, models, router, scope,
            lambda model, timeout: [float(v) for v in model.encode_single(text, timeout=timeout)],
        )
