"""Agent that picks an API for a request and drafts the call against it."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from api_search.capabilities.api import ModelAPI
from api_search.core.cancellation import CancelScope
from api_search.core.exceptions import ApiSearchError
from api_search.core.interfaces import Browser
from api_search.core.models import SearchResult

logger = logging.getLogger(__name__)

NONE_OF_THE_ABOVE = "None of the above"

PICK_PAGE_INSTRUCTION = (
    "You will be given a set of titles for Open API specs and a query from a user. "
    f"Determine the best page to visit. If no page is relevant, choose '{NONE_OF_THE_ABOVE}'."
)
ACT_INSTRUCTION = (
    "You will be given an Open API spec and a query from a user. Build the correct request."
)


class BrowserAction(BaseModel):
    """A concrete request against the chosen API."""

    address: str = Field(description="Base address of the service to call")
    endpoint: str = Field(description="Path of the operation to call")
    body: Dict[str, Any] = Field(default_factory=dict, description="JSON request body")


class SolveStatus(Enum):
    ACTION = "action"
    NO_RELEVANT_API = "no_relevant_api"


@dataclass
class SolveResult:
    status: SolveStatus
    action: Optional[BrowserAction] = None
    chosen: Optional[SearchResult] = None
    candidates: List[SearchResult] = field(default_factory=list)

    def to_json(self) -> str:
        """Serialise the action; empty object when no API was relevant."""
        return self.action.model_dump_json() if self.action else "{}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "action": self.action.model_dump() if self.action else None,
            "chosen": self.chosen.to_dict() if self.chosen else None,
            "candidates": [c.to_dict() for c in self.candidates],
        }


def render_display(page: str, location: str, query: str) -> str:
    return f"# Browser display\n{page}\n\n# Location\n{location}\n\nUser query:\n{query}"


class LLMBrowserAgent:
    """Searches, picks one result (or none), visits it and drafts a request.

    "No relevant API" is a normal outcome reported through ``SolveStatus``;
    transport and model failures raise.

    Example:
        agent = LLMBrowserAgent(model_api)
        result = agent.solve("order a large pepperoni pizza", BaseBrowser(engine))
        if result.status is SolveStatus.ACTION:
            print(result.to_json())
    """

    def __init__(self, model_api: ModelAPI):
        self.model_api = model_api

    def determine_page_to_visit(
        self,
        query: str,
        results: List[SearchResult],
        scope: Optional[CancelScope] = None,
    ) -> Tuple[bool, int]:
        """Ask the classifier which result to open.

        Returns:
            ``(found, index)``; ``found`` is False when the model chose
            "None of the above".
        """
        options = [f"'{result.title}'" for result in results] + [NONE_OF_THE_ABOVE]
        choice = self.model_api.classify(PICK_PAGE_INSTRUCTION, query, options, scope=scope)
        if choice == len(results):
            return False, 0
        return True, choice

    def act(
        self,
        query: str,
        display: str,
        scope: Optional[CancelScope] = None,
    ) -> BrowserAction:
        return self.model_api.parse_force(ACT_INSTRUCTION, display, BrowserAction, scope=scope)

    def solve(
        self,
        query: str,
        browser: Browser,
        scope: Optional[CancelScope] = None,
    ) -> SolveResult:
        """Turn ``query`` into a request against the best matching API.

        Raises:
            ApiSearchError: On search, navigation, location or model failure.
        """
        results = browser.search(query, scope=scope)
        if not results:
            logger.info(f"No search results for {query!r}")
            return SolveResult(status=SolveStatus.NO_RELEVANT_API)

        found, index = self.determine_page_to_visit(query, results, scope)
        if not found:
            titles = ", ".join(result.title for result in results)
            logger.info(f"No page selected to visit from pages: {titles}")
            return SolveResult(status=SolveStatus.NO_RELEVANT_API, candidates=results)

        chosen = results[index]
        if chosen.endpoint is None:
            raise ApiSearchError(f"Result {chosen.title!r} has no endpoint to visit")

        page = browser.navigate(chosen.endpoint, scope=scope)
        location = browser.get_location(scope=scope)
        action = self.act(query, render_display(page, location.describe(), query), scope)
        logger.info(f"Drafted request to {action.address}{action.endpoint} via {chosen.title!r}")
        return SolveResult(status=SolveStatus.ACTION, action=action, chosen=chosen, candidates=results)
