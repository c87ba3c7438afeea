"""Round-robin request router for spreading load across a pool."""

import logging
import threading
from collections import defaultdict
from typing import Any, Dict, Sequence

from api_search.core.exceptions import NoModelAvailableError
from api_search.core.interfaces import BaseRequestRouter
from api_search.core.models import Capability

logger = logging.getLogger(__name__)


class RoundRobinRouter(BaseRequestRouter):
    """Rotates through the pool, keeping one counter per capability.

    Safe to share between worker threads.

    Example:
        api = ModelAPI(generate_models=[model_a, model_b], router=RoundRobinRouter())
        api.generate(...)  # model_a
        api.generate(...)  # model_b
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._counters: Dict[Capability, int] = defaultdict(int)

    @property
    def name(self) -> str:
        return "round_robin"

    def route(
        self,
        capability: Capability,
        datapoint: Any,
        models: Sequence[Any],
    ) -> Any:
        if not models:
            raise NoModelAvailableError(f"No models available for {capability.value}")
        with self._lock:
            position = self._counters[capability]
            self._counters[capability] = position + 1
        return models[position % len(models)]
