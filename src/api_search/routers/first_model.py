"""Default request router: always the first candidate."""

from typing import Any, Sequence

from api_search.core.exceptions import NoModelAvailableError
from api_search.core.interfaces import BaseRequestRouter
from api_search.core.models import Capability


class FirstModelRouter(BaseRequestRouter):
    """Routes every request to the first model in the pool."""

    @property
    def name(self) -> str:
        return "first"

    def route(
        self,
        capability: Capability,
        datapoint: Any,
        models: Sequence[Any],
    ) -> Any:
        if not models:
            raise NoModelAvailableError(f"No models available for {capability.value}")
        return models[0]
