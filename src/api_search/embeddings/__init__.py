"""Embedding provider implementations."""

from api_search.embeddings.openai_embedding import OpenAIEmbedding
from api_search.embeddings.sentence_transformer import SentenceTransformerEmbedding

__all__ = ["OpenAIEmbedding", "SentenceTransformerEmbedding"]
