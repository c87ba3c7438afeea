"""Factory functions building every component from ``Settings``."""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from api_search.agent.browser import BaseBrowser
from api_search.agent.browser_agent import LLMBrowserAgent
from api_search.capabilities.api import ModelAPI
from api_search.capabilities.chat_model import ChatGeneralModel
from api_search.config.settings import Settings
from api_search.core.interfaces import BaseCache, BaseEmbedding, BaseLLM, BaseRequestRouter
from api_search.core.logging import configure_logging
from api_search.indexing.indexer import Indexer
from api_search.indexing.store import load_index
from api_search.search.engine import SearchEngine, SearchOptions

logger = logging.getLogger(__name__)


def create_llm(settings: Settings) -> BaseLLM:
    if settings.chat_provider == "anthropic":
        from api_search.llm import AnthropicLLM
        return AnthropicLLM(api_key=settings.anthropic_api_key, model=settings.anthropic_model)
    if settings.chat_provider == "ollama":
        from api_search.llm import OllamaLLM
        return OllamaLLM(
            model=settings.ollama_model,
            base_url=settings.ollama_base_url,
            timeout=settings.request_timeout,
        )
    from api_search.llm import OpenAILLM
    return OpenAILLM(api_key=settings.openai_api_key, model=settings.openai_model)


def create_embedding(settings: Settings) -> BaseEmbedding:
    if settings.embedding_provider == "sentence_transformer":
        from api_search.embeddings import SentenceTransformerEmbedding
        return SentenceTransformerEmbedding(model_name=settings.embedding_model)
    from api_search.embeddings import OpenAIEmbedding
    return OpenAIEmbedding(api_key=settings.openai_api_key, model=settings.openai_embedding_model)


def create_router(settings: Settings) -> BaseRequestRouter:
    from api_search.routers import FirstModelRouter, RoundRobinRouter

    if settings.request_router == "round_robin":
        return RoundRobinRouter()
    return FirstModelRouter()


def create_cache(settings: Settings) -> BaseCache:
    if settings.cache_backend == "redis":
        from api_search.cache import RedisCache
        return RedisCache(
            redis_url=settings.redis_url,
            redis_db=settings.redis_db,
            ttl_seconds=settings.redis_ttl_seconds,
        )
    from api_search.cache import DiskCache
    return DiskCache(cache_file=settings.cache_file)


def create_model_api(
    settings: Settings,
    llm: Optional[BaseLLM] = None,
    embedding: Optional[BaseEmbedding] = None,
) -> ModelAPI:
    llm = llm or create_llm(settings)
    model = ChatGeneralModel(llm, temperature=settings.model_temperature)
    return ModelAPI.from_general_model(
        model,
        embedding or create_embedding(settings),
        router=create_router(settings),
    )


def create_components(settings: Optional[Settings] = None) -> Dict[str, Any]:
    """Create every component from settings.

    Validates the settings and configures logging first.

    Returns:
        Dictionary with settings, llm, embedding, model_api, cache, engine
        and agent.

    Raises:
        ConfigurationError: If the settings are invalid.
    """
    settings = settings or Settings()
    settings.validate()
    configure_logging(level=settings.log_level, json_format=settings.log_json)

    logger.info("Creating search engine components...")

    llm = create_llm(settings)
    logger.info(f"Created chat provider: {llm.name}/{llm.model}")
    embedding = create_embedding(settings)
    logger.info(f"Created embedding provider: {embedding.name}")

    model_api = create_model_api(settings, llm=llm, embedding=embedding)
    cache = create_cache(settings)
    logger.info(f"Created cache: {cache.name}")

    engine = SearchEngine(
        model_api,
        cache,
        indexer=Indexer(model_api, cache, fetch_timeout=settings.request_timeout),
    )
    if settings.index_file and Path(settings.index_file).exists():
        engine.set_index(load_index(settings.index_file))

    return {
        "settings": settings,
        "llm": llm,
        "embedding": embedding,
        "model_api": model_api,
        "cache": cache,
        "engine": engine,
        "agent": LLMBrowserAgent(model_api),
    }


def default_search_options(settings: Settings) -> SearchOptions:
    return SearchOptions(
        max_concurrency=settings.max_concurrency,
        top_n=settings.top_n,
        verify=settings.use_verification,
    )


def create_search_engine(settings: Optional[Settings] = None) -> SearchEngine:
    """Create a configured search engine.

    When ``INDEX_FILE`` points at an existing file the saved index is loaded.

    Example:
        engine = create_search_engine()
        engine.refresh_index(load_endpoints("endpoints.json"))
    """
    return create_components(settings)["engine"]


def create_browser(engine: SearchEngine, settings: Settings) -> BaseBrowser:
    return BaseBrowser(
        engine,
        search_options=default_search_options(settings),
        timeout=settings.request_timeout,
    )
