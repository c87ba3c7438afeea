"""Tests for the chat-backed capability model."""

import pytest
from pydantic import BaseModel

from api_search.capabilities.chat_model import ChatGeneralModel
from api_search.core.datapoints import BinaryClassifyDatapoint
from api_search.core.exceptions import MalformedResponseError
from api_search.core.models import MessageRole

from conftest import FakeLLM


class Order(BaseModel):
    item: str
    quantity: int


class TestChatGeneralModel:
    def test_name_combines_provider_and_model(self):
        assert ChatGeneralModel(FakeLLM()).name == "fake:fake-1"

    def test_classify_requests_json(self):
        llm = FakeLLM(['{"classification": "B"}'])
        model = ChatGeneralModel(llm, temperature=0.2)

        assert model.classify("Pick the animal", "woof", ["cat", "dog"], timeout=5.0) == 1
        call = llm.calls[0]
        assert call["json_mode"] is True
        assert call["temperature"] == 0.2
        assert call["timeout"] == 5.0

    def test_classify_unknown_label(self):
        model = ChatGeneralModel(FakeLLM(['{"classification": "C"}']))
        with pytest.raises(MalformedResponseError):
            model.classify("Pick", "woof", ["cat", "dog"])

    @pytest.mark.parametrize("label,expected", [("A", True), ("B", False)])
    def test_binary_classify(self, label, expected):
        model = ChatGeneralModel(FakeLLM([f'{{"classification": "{label}"}}']))
        assert model.binary_classify("Is it relevant?", "text") is expected

    def test_binary_examples_become_true_false_choices(self):
        llm = FakeLLM(['{"classification": "A"}'])
        model = ChatGeneralModel(llm)
        examples = [BinaryClassifyDatapoint(instruction="x", text="no match", response=False)]

        model.binary_classify("Is it relevant?", "text", examples)

        messages = llm.calls[0]["messages"]
        assert "A. true\nB. false" in messages[1].content
        assert messages[2].role == MessageRole.ASSISTANT
        assert '"B"' in messages[2].content

    def test_score_returns_raw_value(self):
        model = ChatGeneralModel(FakeLLM(['{"score": 12}']))
        assert model.score("Rate", "text", 1, 10) == 12

    def test_generate_returns_text(self):
        llm = FakeLLM(["A weather API."])
        model = ChatGeneralModel(llm)

        assert model.generate("Summarize", "spec") == "A weather API."
        assert llm.calls[0]["json_mode"] is False

    def test_parse_force(self):
        model = ChatGeneralModel(FakeLLM(['{"item": "pizza", "quantity": 2}']))
        assert model.parse_force("Extract", "two pizzas", Order) == Order(item="pizza", quantity=2)

    def test_parse_force_schema_mismatch(self):
        model = ChatGeneralModel(FakeLLM(['{"item": "pizza"}']))
        with pytest.raises(MalformedResponseError):
            model.parse_force("Extract", "pizza", Order)
