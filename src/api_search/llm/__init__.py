"""Chat provider implementations.

Supported providers:
- OpenAI: GPT-4o and friends (requires openai package)
- Anthropic: Claude models (requires anthropic package)
- Ollama: local models such as Llama 3 (requires a running Ollama server)
"""

from api_search.llm.openai_llm import OpenAILLM
from api_search.llm.anthropic_llm import AnthropicLLM
from api_search.llm.ollama_llm import OllamaLLM

__all__ = ["OpenAILLM", "AnthropicLLM", "OllamaLLM"]
