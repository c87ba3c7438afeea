"""HTTP client for catalogue services.

Every catalogued service answers a plain GET on its endpoint URL with a JSON
object describing itself (usually an OpenAPI document).
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import requests

from api_search.core.exceptions import CatalogueError
from api_search.core.models import CatalogueEndpoint

logger = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT = 30.0


def fetch_self_description(
    endpoint: CatalogueEndpoint,
    timeout: Optional[float] = DEFAULT_FETCH_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> Dict[str, Any]:
    """GET the endpoint and decode its JSON self-description.

    Args:
        endpoint: Where the service lives.
        timeout: Request timeout in seconds (None = wait indefinitely).
        session: Optional session for connection reuse.

    Returns:
        The decoded JSON object.

    Raises:
        CatalogueError: On transport errors, non-2xx statuses, or a body that
            is not a JSON object.
    """
    url = endpoint.url
    http = session or requests
    try:
        response = http.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        raise CatalogueError(f"Failed to fetch {url}: {e}") from e

    try:
        payload = response.json()
    except ValueError as e:
        raise CatalogueError(f"Response from {url} is not valid JSON") from e

    if not isinstance(payload, dict):
        raise CatalogueError(f"Response from {url} is not a JSON object")

    logger.debug(f"Fetched self-description from {url}")
    return payload


def load_endpoints(path: Union[str, Path]) -> List[CatalogueEndpoint]:
    """Read a JSON array of endpoints from ``path``.

    Entries may use ``host``/``port`` or ``IpAddress``/``Port`` keys.

    Raises:
        CatalogueError: If the file is missing, malformed, or an entry lacks
            a host or port.
    """
    path = Path(path).expanduser()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise CatalogueError(f"Cannot read endpoints from {path}: {e}") from e

    if not isinstance(data, list):
        raise CatalogueError(f"Endpoints file {path} must hold a JSON array")

    endpoints = []
    for i, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise CatalogueError(f"Endpoint #{i} in {path} is not an object")
        try:
            endpoints.append(CatalogueEndpoint.from_dict(entry))
        except (TypeError, ValueError) as e:
            raise CatalogueError(f"Endpoint #{i} in {path} is invalid: {e}") from e

    logger.info(f"Loaded {len(endpoints)} endpoints from {path}")
    return endpoints
