"""LLM relevance check over ranked candidates."""

import logging
from typing import List, Optional, Sequence

from api_search.capabilities.api import ModelAPI
from api_search.core.cancellation import CancelScope
from api_search.core.concurrency import run_best_effort
from api_search.core.models import SearchResult

logger = logging.getLogger(__name__)

VERIFY_INSTRUCTION = (
    "Determine if the search result is relevant to the query. The query is "
    "searching an index of public API specs for a set of public APIs that will "
    "at least partially satisfy the desired behavior."
)


def verification_text(query: str, result: SearchResult) -> str:
    return f"Query:\n{query}\nPublic API spec summary:\n{result.summary}"


class Verifier:
    """Drops candidates a binary classifier judges irrelevant.

    Candidates are checked concurrently. A candidate whose check fails is
    logged and dropped; survivors keep their rank order.
    """

    def __init__(self, model_api: ModelAPI):
        self.model_api = model_api

    def verify(
        self,
        query: str,
        results: Sequence[SearchResult],
        max_concurrency: int = 8,
        scope: Optional[CancelScope] = None,
    ) -> List[SearchResult]:
        """Return the relevant subset of ``results`` in input order.

        Raises:
            SearchCancelledError: If ``scope`` was cancelled.
        """

        def check(result: SearchResult, unit_scope: CancelScope) -> bool:
            return self.model_api.binary_classify(
                VERIFY_INSTRUCTION,
                verification_text(query, result),
                scope=unit_scope,
            )

        def skip(result: SearchResult, error: BaseException) -> None:
            logger.warning(f"Error verifying search result {result.title!r}, skipping: {error}")

        verdicts = run_best_effort(check, results, max_concurrency, scope, on_error=skip)
        kept = [result for result, relevant in zip(results, verdicts) if relevant]
        logger.info(f"Verification kept {len(kept)} of {len(results)} results")
        return kept
