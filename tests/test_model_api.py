"""Tests for the model facade."""

import time
from unittest.mock import MagicMock

import pytest

from api_search.capabilities.api import ModelAPI
from api_search.core.cancellation import CancelScope
from api_search.core.datapoints import GenerateDatapoint
from api_search.core.exceptions import (
    EmbeddingError,
    LLMError,
    NoModelAvailableError,
    SearchCancelledError,
)
from api_search.core.models import Capability
from api_search.routers import RoundRobinRouter

from conftest import FakeEmbedding, FakeGeneralModel


class TestModelAPI:
    def test_generate_uses_pool(self, model_api, fake_model):
        assert model_api.generate("Summarize", "Title: Weather") == "Summary: Title: Weather"
        assert fake_model.counts["generate"] == 1

    def test_embed_returns_floats(self):
        api = ModelAPI(embedding_models=[FakeEmbedding({"hello": [0.5, 0.25]})])
        vector = api.embed("hello")
        assert vector == [0.5, 0.25]
        assert all(isinstance(v, float) for v in vector)

    def test_empty_pool_raises(self):
        with pytest.raises(NoModelAvailableError):
            ModelAPI().classify("i", "t", ["a"])

    def test_models_override_pool(self, model_api, fake_model):
        other = FakeGeneralModel(name="other", summarize=lambda text: "other")

        assert model_api.generate("i", "t", models=[other]) == "other"
        assert "generate" not in fake_model.counts

    def test_router_override(self):
        first = FakeGeneralModel(name="first", summarize=lambda text: "first")
        second = FakeGeneralModel(name="second", summarize=lambda text: "second")
        api = ModelAPI(generate_models=[first, second])
        router = RoundRobinRouter()

        answers = [api.generate("i", "t", router=router) for _ in range(3)]
        assert answers == ["first", "second", "first"]
        assert api.generate("i", "t") == "first"

    def test_router_sees_datapoint(self, fake_model):
        router = MagicMock()
        router.route.return_value = fake_model
        api = ModelAPI(generate_models=[fake_model], router=router)
        examples = [GenerateDatapoint(instruction="x", text="a", response="b")]

        api.generate("Summarize", "text", examples=examples)

        capability, datapoint, models = router.route.call_args[0]
        assert capability is Capability.GENERATE
        assert datapoint.instruction == "Summarize"
        assert datapoint.text == "text"
        assert datapoint.examples == examples
        assert models == [fake_model]

    def test_cancelled_scope_skips_call(self, model_api, fake_model):
        scope = CancelScope()
        scope.cancel("stop")

        with pytest.raises(SearchCancelledError):
            model_api.generate("i", "t", scope=scope)
        assert fake_model.counts == {}

    def test_remaining_time_passed_as_timeout(self):
        model = MagicMock()
        model.generate.return_value = "ok"
        api = ModelAPI(generate_models=[model])

        api.generate("i", "t", scope=CancelScope(timeout=30))

        timeout = model.generate.call_args.kwargs["timeout"]
        assert 0 < timeout <= 30

    def test_no_deadline_means_no_timeout(self):
        model = MagicMock()
        model.score.return_value = 3
        api = ModelAPI(score_models=[model])

        assert api.score("i", "t", 1, 5) == 3
        assert model.score.call_args.kwargs["timeout"] is None


class TimeoutEmbedding(FakeEmbedding):
    """Waits out the request timeout and fails the way a provider does."""

    def encode(self, texts, timeout=None, **kwargs):
        time.sleep((timeout or 0) + 0.02)
        raise EmbeddingError("OpenAI embedding call failed: Request timed out.")


class TestDeadlines:
    def test_provider_timeout_past_deadline_is_cancellation(self):
        api = ModelAPI(embedding_models=[TimeoutEmbedding()])

        with pytest.raises(SearchCancelledError) as exc_info:
            api.embed("hello", scope=CancelScope(timeout=0.05))
        assert isinstance(exc_info.value.__cause__, EmbeddingError)

    def test_provider_error_within_deadline_propagates(self):
        model = MagicMock()
        model.generate.side_effect = LLMError("quota exceeded")
        api = ModelAPI(generate_models=[model])

        with pytest.raises(LLMError):
            api.generate("i", "t", scope=CancelScope(timeout=30))
