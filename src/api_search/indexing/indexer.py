"""Turns catalogue entries into searchable documents.

For each entry the indexer fetches the self-description, asks a generate
model for a short summary, embeds the summary, and records the result in the
cache under the content hash of the payload. A second refresh over unchanged
content is served entirely from the cache.
"""

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from api_search.cache.keys import content_key
from api_search.capabilities.api import ModelAPI
from api_search.catalogue.client import DEFAULT_FETCH_TIMEOUT, fetch_self_description
from api_search.core.cancellation import CancelScope
from api_search.core.concurrency import run_all_or_nothing, run_best_effort
from api_search.core.exceptions import (
    IndexingError,
    InvalidEmbeddingError,
    SearchCancelledError,
)
from api_search.core.interfaces import BaseCache
from api_search.core.logging import log_duration
from api_search.core.models import CatalogueEndpoint, Document
from api_search.indexing.store import validate_dimensions

logger = logging.getLogger(__name__)

SUMMARY_INSTRUCTION = (
    "Summarize the following API specification. Provide a concise summary "
    "that captures the key features and purpose of this API:"
)
MAX_SAMPLE_PATHS = 5

Fetcher = Callable[[CatalogueEndpoint, Optional[float]], Dict[str, Any]]


def _info_field(spec: Dict[str, Any], name: str) -> str:
    info = spec.get("info")
    if not isinstance(info, dict):
        return ""
    value = info.get(name)
    return value if isinstance(value, str) else ""


def summary_text(spec: Dict[str, Any]) -> str:
    """Render the text the summary model sees for ``spec``.

    Up to five paths are sampled in document order.
    """
    paths = spec.get("paths")
    samples = list(paths)[:MAX_SAMPLE_PATHS] if isinstance(paths, dict) else []

    text = ""
    title = _info_field(spec, "title")
    if title:
        text += f"Title: {title}\n"
    description = _info_field(spec, "description")
    if description:
        text += f"Description: {description}\n"
    text += "Sample endpoints:\n" + ", ".join(samples) + "\n\n-----\n\n"
    return text


class Indexer:
    """Builds ``Document``s from catalogue endpoints.

    Example:
        indexer = Indexer(model_api, DiskCache())
        documents = indexer.build_index(load_endpoints("endpoints.json"), max_concurrency=8)
    """

    def __init__(
        self,
        model_api: ModelAPI,
        cache: BaseCache,
        fetcher: Fetcher = fetch_self_description,
        fetch_timeout: float = DEFAULT_FETCH_TIMEOUT,
    ):
        self.model_api = model_api
        self.cache = cache
        self.fetcher = fetcher
        self.fetch_timeout = fetch_timeout

    def summarize(self, spec: Dict[str, Any], scope: Optional[CancelScope] = None) -> str:
        return self.model_api.generate(SUMMARY_INSTRUCTION, summary_text(spec), scope=scope)

    def _document(
        self,
        spec: Dict[str, Any],
        endpoint: Optional[CatalogueEndpoint],
        fallback_title: str,
        scope: CancelScope,
    ) -> Document:
        key = content_key(spec)
        cached, found = self.cache.get(key)
        if found:
            logger.debug(f"Cache hit for {fallback_title}")
            return replace(
                Document.from_dict(cached),
                title=_info_field(spec, "title") or fallback_title,
                endpoint=endpoint,
            )

        summary = self.summarize(spec, scope)
        embedding = self.model_api.embed(summary, scope=scope)
        if not embedding:
            raise InvalidEmbeddingError(f"Empty embedding for {fallback_title}")

        document = Document(
            title=_info_field(spec, "title") or fallback_title,
            summary=summary,
            embedding=embedding,
            spec=spec,
            endpoint=endpoint,
        )
        self.cache.set(key, document.to_dict())
        return document

    def index_entry(
        self,
        endpoint: CatalogueEndpoint,
        scope: Optional[CancelScope] = None,
    ) -> Document:
        """Fetch, summarise and embed one catalogue entry.

        On a cache hit no model is called and the cached document is re-bound
        to ``endpoint``, taking its URL as the title when the spec has none.
        """
        scope = scope or CancelScope()
        scope.raise_if_cancelled()
        remaining = scope.remaining()
        timeout = self.fetch_timeout if remaining is None else min(remaining, self.fetch_timeout)
        spec = self.fetcher(endpoint, timeout)
        scope.raise_if_cancelled()
        return self._document(spec, endpoint, endpoint.url, scope)

    def build_index(
        self,
        endpoints: Sequence[CatalogueEndpoint],
        max_concurrency: int = 8,
        scope: Optional[CancelScope] = None,
    ) -> List[Document]:
        """Index every endpoint or none of them.

        Args:
            endpoints: Catalogue entries to index.
            max_concurrency: Maximum entries processed at once.
            scope: Caller scope for cancellation and deadlines.

        Returns:
            One document per endpoint, in input order.

        Raises:
            IndexingError: The first entry that failed, naming its endpoint.
            SearchCancelledError: If ``scope`` was cancelled.
            EmbeddingDimensionError: If the embeddings disagree in length.
        """

        def unit(endpoint: CatalogueEndpoint, unit_scope: CancelScope) -> Document:
            try:
                return self.index_entry(endpoint, unit_scope)
            except SearchCancelledError:
                raise
            except Exception as e:
                raise IndexingError(f"Failed to index {endpoint.url}: {e}", endpoint=endpoint.url) from e

        with log_duration(logger, "index_built", entries=len(endpoints)):
            documents = run_all_or_nothing(unit, endpoints, max_concurrency, scope)
            validate_dimensions(documents)
        return documents

    def index_spec_directory(
        self,
        path: Union[str, Path],
        max_concurrency: int = 8,
        scope: Optional[CancelScope] = None,
    ) -> List[Document]:
        """Index local ``*.json`` spec files, skipping the ones that fail.

        Documents from files carry no endpoint.
        """
        directory = Path(path).expanduser()
        if not directory.is_dir():
            raise IndexingError(f"Not a directory: {directory}")
        files = sorted(p for p in directory.iterdir() if p.is_file() and p.suffix == ".json")
        logger.info(f"Indexing {len(files)} specs from {directory}")

        def unit(spec_file: Path, unit_scope: CancelScope) -> Document:
            with open(spec_file, "r", encoding="utf-8") as f:
                spec = json.load(f)
            if not isinstance(spec, dict):
                raise IndexingError(f"{spec_file.name} does not hold a JSON object")
            return self._document(spec, None, spec_file.stem, unit_scope)

        def report(spec_file: Path, error: BaseException) -> None:
            logger.warning(f"Error processing {spec_file.name}: {error}")

        results = run_best_effort(unit, files, max_concurrency, scope, on_error=report)
        documents = [doc for doc in results if doc is not None]
        validate_dimensions(documents)
        return documents
