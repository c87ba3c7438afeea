"""Tests for chat and embedding providers with mocked SDKs."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import numpy as np
import pytest
import requests
from openai import OpenAIError

from api_search.core.exceptions import EmbeddingError, LLMError, MalformedResponseError
from api_search.core.models import Message, MessageRole

MESSAGES = [
    Message(role=MessageRole.SYSTEM, content="Be terse."),
    Message(role=MessageRole.USER, content="Hello"),
]


def openai_completion(content, finish_reason="stop"):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content), finish_reason=finish_reason)],
        usage=SimpleNamespace(prompt_tokens=3, completion_tokens=2, total_tokens=5),
        model="gpt-4o-2024-08-06",
    )


class TestOpenAILLM:
    @pytest.fixture
    def client(self):
        with patch("api_search.llm.openai_llm.OpenAI") as openai_cls:
            client = MagicMock()
            openai_cls.return_value = client
            yield client

    def test_requires_key(self):
        from api_search.llm import OpenAILLM

        with pytest.raises(LLMError):
            OpenAILLM(api_key="")

    def test_chat(self, client):
        from api_search.llm import OpenAILLM

        client.chat.completions.create.return_value = openai_completion('{"a": 1}')
        reply = OpenAILLM(api_key="sk-test").chat(MESSAGES, json_mode=True, timeout=7, max_tokens=50)

        assert reply.content == '{"a": 1}'
        assert reply.usage["total_tokens"] == 5
        params = client.chat.completions.create.call_args.kwargs
        assert params["response_format"] == {"type": "json_object"}
        assert params["timeout"] == 7
        assert params["max_tokens"] == 50
        assert params["messages"][0] == {"role": "system", "content": "Be terse."}

    def test_client_does_not_retry(self):
        from api_search.llm import OpenAILLM

        assert OpenAILLM(api_key="sk-test")._client.max_retries == 0
        assert OpenAILLM(api_key="sk-test", max_retries=3)._client.max_retries == 3

    def test_api_error(self, client):
        from api_search.llm import OpenAILLM

        client.chat.completions.create.side_effect = OpenAIError("quota")
        with pytest.raises(LLMError):
            OpenAILLM(api_key="sk-test").chat(MESSAGES)

    def test_empty_reply(self, client):
        from api_search.llm import OpenAILLM

        client.chat.completions.create.return_value = openai_completion(None)
        with pytest.raises(MalformedResponseError):
            OpenAILLM(api_key="sk-test").chat(MESSAGES)


class TestAnthropicLLM:
    @pytest.fixture
    def client(self):
        with patch("anthropic.Anthropic") as anthropic_cls:
            client = MagicMock()
            anthropic_cls.return_value = client
            yield client

    def test_system_prompt_and_json_trim(self, client):
        from api_search.llm import AnthropicLLM

        client.messages.create.return_value = SimpleNamespace(
            content=[SimpleNamespace(text='Sure! {"classification": "A"} Hope that helps.')],
            usage=SimpleNamespace(input_tokens=4, output_tokens=6),
            model="claude-3-5-sonnet-20241022",
            stop_reason="end_turn",
        )

        reply = AnthropicLLM(api_key="sk-ant-test").chat(MESSAGES, json_mode=True)

        assert reply.content == '{"classification": "A"}'
        assert reply.usage["total_tokens"] == 10
        params = client.messages.create.call_args.kwargs
        assert params["system"] == "Be terse."
        assert params["messages"] == [{"role": "user", "content": "Hello"}]
        assert params["max_tokens"] == 1024

    def test_client_does_not_retry(self, client):
        import anthropic

        from api_search.llm import AnthropicLLM

        AnthropicLLM(api_key="sk-ant-test")
        assert anthropic.Anthropic.call_args.kwargs["max_retries"] == 0

    def test_requires_key(self):
        from api_search.llm import AnthropicLLM

        with pytest.raises(LLMError):
            AnthropicLLM(api_key="")


class TestOllamaLLM:
    def test_chat_posts_json_format(self):
        from api_search.llm import OllamaLLM

        response = MagicMock()
        response.json.return_value = {
            "model": "llama3.2",
            "message": {"role": "assistant", "content": '{"score": 4}'},
            "done": True,
            "prompt_eval_count": 10,
            "eval_count": 3,
        }
        with patch("api_search.llm.ollama_llm.requests.post", return_value=response) as post:
            reply = OllamaLLM(verify=False).chat(MESSAGES, json_mode=True, max_tokens=20, timeout=9)

        assert reply.content == '{"score": 4}'
        assert reply.usage == {"prompt_tokens": 10, "completion_tokens": 3, "total_tokens": 13}
        payload = post.call_args.kwargs["json"]
        assert payload["format"] == "json"
        assert payload["stream"] is False
        assert payload["options"]["num_predict"] == 20
        assert post.call_args.kwargs["timeout"] == 9

    def test_unreachable_server(self):
        from api_search.llm import OllamaLLM

        with patch(
            "api_search.llm.ollama_llm.requests.get",
            side_effect=requests.exceptions.ConnectionError("refused"),
        ):
            with pytest.raises(LLMError):
                OllamaLLM()

    def test_missing_content(self):
        from api_search.llm import OllamaLLM

        response = MagicMock()
        response.json.return_value = {"done": True}
        with patch("api_search.llm.ollama_llm.requests.post", return_value=response):
            with pytest.raises(MalformedResponseError):
                OllamaLLM(verify=False).chat(MESSAGES)


class TestOpenAIEmbedding:
    @pytest.fixture
    def client(self):
        with patch("api_search.embeddings.openai_embedding.OpenAI") as openai_cls:
            client = MagicMock()
            openai_cls.return_value = client
            yield client

    def test_encode_orders_by_index(self, client):
        from api_search.embeddings import OpenAIEmbedding

        client.embeddings.create.return_value = SimpleNamespace(data=[
            SimpleNamespace(index=1, embedding=[0.0, 1.0]),
            SimpleNamespace(index=0, embedding=[1.0, 0.0]),
        ])
        vectors = OpenAIEmbedding(api_key="sk-test").encode(["a", "b"], timeout=3)

        np.testing.assert_array_equal(vectors, np.array([[1.0, 0.0], [0.0, 1.0]], dtype=np.float32))
        assert client.embeddings.create.call_args.kwargs["timeout"] == 3

    def test_client_does_not_retry(self):
        from api_search.embeddings import OpenAIEmbedding

        assert OpenAIEmbedding(api_key="sk-test")._client.max_retries == 0

    def test_known_dimension(self, client):
        from api_search.embeddings import OpenAIEmbedding

        assert OpenAIEmbedding(api_key="sk-test").dimension == 3072
        client.embeddings.create.assert_not_called()

    def test_api_error(self, client):
        from api_search.embeddings import OpenAIEmbedding

        client.embeddings.create.side_effect = OpenAIError("down")
        with pytest.raises(EmbeddingError):
            OpenAIEmbedding(api_key="sk-test").encode(["a"])
