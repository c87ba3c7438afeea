"""Default browser: the search engine plus plain HTTP."""

import json
import logging
from typing import List, Optional

import requests

from api_search.catalogue.client import fetch_self_description
from api_search.core.cancellation import CancelScope
from api_search.core.exceptions import LocationError
from api_search.core.interfaces import Browser
from api_search.core.models import CatalogueEndpoint, GeoLocation, SearchResult
from api_search.search.engine import SearchEngine, SearchOptions

logger = logging.getLogger(__name__)

DEFAULT_LOCATION_URL = "http://ip-api.com/json/"


class BaseBrowser(Browser):
    """Searches with a ``SearchEngine``, loads pages with GET requests and
    locates the caller through an IP geolocation service.

    Example:
        browser = BaseBrowser(engine)
        page = browser.navigate(CatalogueEndpoint(host="10.0.0.5", port=8080))
    """

    def __init__(
        self,
        search_engine: SearchEngine,
        search_options: Optional[SearchOptions] = None,
        timeout: float = 30.0,
        location_url: str = DEFAULT_LOCATION_URL,
    ):
        self.search_engine = search_engine
        self.search_options = search_options
        self.timeout = timeout
        self.location_url = location_url

    def _timeout(self, scope: Optional[CancelScope]) -> float:
        remaining = scope.remaining() if scope is not None else None
        return self.timeout if remaining is None else min(self.timeout, remaining)

    def search(self, query: str, scope: Optional[CancelScope] = None) -> List[SearchResult]:
        return self.search_engine.search(query, self.search_options, scope)

    def navigate(self, endpoint: CatalogueEndpoint, scope: Optional[CancelScope] = None) -> str:
        """Return the endpoint's self-description as compact JSON text."""
        if scope is not None:
            scope.raise_if_cancelled()
        payload = fetch_self_description(endpoint, timeout=self._timeout(scope))
        return json.dumps(payload)

    def get_location(self, scope: Optional[CancelScope] = None) -> GeoLocation:
        """Look up the caller's approximate location from its public IP.

        Raises:
            LocationError: If the lookup fails or the reply lacks coordinates.
        """
        if scope is not None:
            scope.raise_if_cancelled()
        try:
            response = requests.get(self.location_url, timeout=self._timeout(scope))
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise LocationError(f"Location lookup failed: {e}") from e
        except ValueError as e:
            raise LocationError(f"Location service returned invalid JSON: {e}") from e

        try:
            location = GeoLocation(
                latitude=float(data["lat"]),
                longitude=float(data["lon"]),
                city=data.get("city") or "",
                country=data.get("country") or "",
            )
        except (KeyError, TypeError, ValueError) as e:
            raise LocationError(f"Location reply has no coordinates: {data!r}") from e

        logger.debug(f"Resolved location: {location.describe()}")
        return location
